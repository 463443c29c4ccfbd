# certctl/common/config.py
import datetime
import logging
from typing import List, Optional

from pydantic import BaseModel, field_validator

DEFAULT_ORGANIZATION = "Org.Inc"
DEFAULT_KEY_BITS = 2048
DEFAULT_VALIDITY_YEARS = 1


class IssuanceConfig(BaseModel):
    """Settings for one issuance run, handed to every component that needs them."""
    debug: bool = False
    key_bits: int = DEFAULT_KEY_BITS
    validity_years: int = DEFAULT_VALIDITY_YEARS
    # overrides validity_years when set
    validity: Optional[datetime.timedelta] = None
    subject_organization: str = DEFAULT_ORGANIZATION
    strict_addresses: bool = False
    atomic_writes: bool = False

    @field_validator("key_bits")
    @classmethod
    def _positive_bits(cls, v):
        if v <= 0:
            raise ValueError("key_bits must be positive")
        return v

    @field_validator("validity_years")
    @classmethod
    def _at_least_one_year(cls, v):
        if v < 1:
            raise ValueError("validity_years must be at least 1")
        return v

    @field_validator("validity")
    @classmethod
    def _positive_validity(cls, v):
        if v is not None and v <= datetime.timedelta(0):
            raise ValueError("validity must be a positive duration")
        return v

    @property
    def log_level(self) -> int:
        return logging.DEBUG if self.debug else logging.INFO


class CreateOptions(BaseModel):
    ip_addresses: List[str] = ["127.0.0.1"]
    key_file: str = "ca.key"
    cert_file: str = "ca.crt"

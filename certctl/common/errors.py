# certctl/common/errors.py
"""
Failures that abort an issuance run. None of them are retried; the CLI
reports the message and exits non-zero.
"""


class CertctlError(Exception):
    """Base class for every fatal certctl failure."""


class GenerationError(CertctlError):
    """The RSA key generation primitive failed or rejected its parameters."""


class SerialGenerationError(CertctlError):
    """The randomness source failed while drawing a serial number."""


class SigningError(CertctlError):
    """Signing failed, or the signed DER did not parse back."""


class FileWriteError(CertctlError):
    """An output file could not be opened, written or renamed into place."""

    def __init__(self, path, cause: OSError):
        self.path = str(path)
        self.cause = cause
        super().__init__(str(cause))


class InvalidAddressError(CertctlError, ValueError):
    """An endpoint is not an IP literal (strict address mode only)."""

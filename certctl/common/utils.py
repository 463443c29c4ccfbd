# certctl/common/utils.py
import datetime
import hashlib
import ipaddress

# Stand-in for a SAN entry that failed to parse.
ZERO_ADDRESS = ipaddress.IPv4Address(0)


def now_utc() -> datetime.datetime:
    """Return the current UTC time truncated to whole seconds (X.509 precision)."""
    return datetime.datetime.now(datetime.timezone.utc).replace(microsecond=0)


def add_years(moment: datetime.datetime, years: int) -> datetime.datetime:
    """Calendar-year addition. Feb 29 rolls over to Mar 1 in a non-leap target year."""
    try:
        return moment.replace(year=moment.year + years)
    except ValueError:
        return moment.replace(year=moment.year + years, month=3, day=1)


def parse_ip(addr):
    """Parse an IP literal. Returns None when addr is not one."""
    try:
        return ipaddress.ip_address(addr)
    except ValueError:
        return None


def sha256_hex(data: bytes) -> str:
    """Return SHA256(data) as hex string."""
    return hashlib.sha256(data).hexdigest()

# certctl/crypto/pki.py
"""
Self-signed X.509 issuance: template construction, signing, and the checks
used to inspect what was issued.
"""
import datetime
import enum
import ipaddress
import secrets
from typing import List, Set, Union

from cryptography import x509
from cryptography.hazmat.primitives import serialization, hashes
from cryptography.hazmat.primitives.asymmetric import padding, rsa
from cryptography.x509.oid import ExtendedKeyUsageOID, NameOID
from pydantic import BaseModel, model_validator

from certctl.common.config import IssuanceConfig
from certctl.common.errors import InvalidAddressError, SerialGenerationError, SigningError
from certctl.common.log import get_logger
from certctl.common.utils import ZERO_ADDRESS, add_years, now_utc, parse_ip, sha256_hex

SERIAL_NUMBER_LIMIT = 1 << 128
SIGNATURE_ALGORITHM = "sha256WithRSAEncryption"

_SIGNATURE_HASHES = {
    "sha256WithRSAEncryption": hashes.SHA256,
    "sha384WithRSAEncryption": hashes.SHA384,
    "sha512WithRSAEncryption": hashes.SHA512,
}

IPAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]


class KeyUsage(str, enum.Enum):
    DIGITAL_SIGNATURE = "digital_signature"
    CONTENT_COMMITMENT = "content_commitment"
    KEY_ENCIPHERMENT = "key_encipherment"
    DATA_ENCIPHERMENT = "data_encipherment"
    KEY_AGREEMENT = "key_agreement"
    CERT_SIGN = "cert_sign"
    CRL_SIGN = "crl_sign"


class ExtKeyUsage(str, enum.Enum):
    SERVER_AUTH = "server_auth"
    CLIENT_AUTH = "client_auth"
    CODE_SIGNING = "code_signing"
    EMAIL_PROTECTION = "email_protection"
    TIME_STAMPING = "time_stamping"
    OCSP_SIGNING = "ocsp_signing"


_EKU_OIDS = {
    ExtKeyUsage.SERVER_AUTH: ExtendedKeyUsageOID.SERVER_AUTH,
    ExtKeyUsage.CLIENT_AUTH: ExtendedKeyUsageOID.CLIENT_AUTH,
    ExtKeyUsage.CODE_SIGNING: ExtendedKeyUsageOID.CODE_SIGNING,
    ExtKeyUsage.EMAIL_PROTECTION: ExtendedKeyUsageOID.EMAIL_PROTECTION,
    ExtKeyUsage.TIME_STAMPING: ExtendedKeyUsageOID.TIME_STAMPING,
    ExtKeyUsage.OCSP_SIGNING: ExtendedKeyUsageOID.OCSP_SIGNING,
}

ROOT_KEY_USAGE = {KeyUsage.CERT_SIGN, KeyUsage.DIGITAL_SIGNATURE}
ROOT_EXT_KEY_USAGE = [ExtKeyUsage.SERVER_AUTH, ExtKeyUsage.CLIENT_AUTH]


class CertTemplate(BaseModel):
    """Everything needed to build a certificate except the keys."""
    serial_number: int
    organization: str
    not_before: datetime.datetime
    not_after: datetime.datetime
    is_ca: bool = False
    basic_constraints_valid: bool = True
    ip_addresses: List[IPAddress] = []
    key_usage: Set[KeyUsage] = set()
    ext_key_usage: List[ExtKeyUsage] = []
    signature_algorithm: str = SIGNATURE_ALGORITHM

    @model_validator(mode="after")
    def _validity_window(self):
        if self.not_after <= self.not_before:
            raise ValueError("not_after must be later than not_before")
        return self

    def subject_name(self) -> x509.Name:
        return x509.Name([
            x509.NameAttribute(NameOID.ORGANIZATION_NAME, self.organization),
        ])

    def extensions(self, pub):
        """(extension, critical) pairs for the builder."""
        exts = []
        if self.basic_constraints_valid:
            exts.append((x509.BasicConstraints(ca=self.is_ca, path_length=None), True))
        if self.key_usage:
            ku = self.key_usage
            exts.append((x509.KeyUsage(
                digital_signature=KeyUsage.DIGITAL_SIGNATURE in ku,
                content_commitment=KeyUsage.CONTENT_COMMITMENT in ku,
                key_encipherment=KeyUsage.KEY_ENCIPHERMENT in ku,
                data_encipherment=KeyUsage.DATA_ENCIPHERMENT in ku,
                key_agreement=KeyUsage.KEY_AGREEMENT in ku,
                key_cert_sign=KeyUsage.CERT_SIGN in ku,
                crl_sign=KeyUsage.CRL_SIGN in ku,
                encipher_only=False,
                decipher_only=False,
            ), True))
        if self.ext_key_usage:
            exts.append((x509.ExtendedKeyUsage([_EKU_OIDS[u] for u in self.ext_key_usage]), False))
        if self.ip_addresses:
            exts.append((x509.SubjectAlternativeName([x509.IPAddress(ip) for ip in self.ip_addresses]), False))
        if self.is_ca:
            exts.append((x509.SubjectKeyIdentifier.from_public_key(pub), False))
        return exts


def random_serial_number(randbelow=None) -> int:
    """Uniform random integer in [0, 2**128)."""
    randbelow = randbelow or secrets.randbelow
    try:
        return randbelow(SERIAL_NUMBER_LIMIT)
    except (OSError, ValueError) as e:
        raise SerialGenerationError(f"failed to generate serial number: {e}") from e


def _san_addresses(ip_addresses, strict: bool, log) -> List[IPAddress]:
    addrs = []
    for raw in ip_addresses:
        if isinstance(raw, (ipaddress.IPv4Address, ipaddress.IPv6Address)):
            ip = raw
        else:
            ip = parse_ip(raw) if raw is not None else None
        if ip is None:
            if strict:
                raise InvalidAddressError(f"not an IP address: {raw!r}")
            log.warning("endpoint %r is not an IP address, using %s", raw, ZERO_ADDRESS)
            ip = ZERO_ADDRESS
        addrs.append(ip)
    return addrs


def cert_template(is_ca: bool, ip_addresses, config: IssuanceConfig = None) -> CertTemplate:
    """
    Build a certificate template: random serial, fixed organization subject,
    validity starting now. Key usages are left to the caller.

    Endpoints that are not IP literals become 0.0.0.0 in the SAN list unless
    config.strict_addresses is set, in which case InvalidAddressError is raised.
    """
    config = config or IssuanceConfig()
    log = get_logger(__name__, config)

    serial = random_serial_number()
    not_before = now_utc()
    if config.validity is not None:
        not_after = not_before + config.validity
    else:
        not_after = add_years(not_before, config.validity_years)

    addrs = _san_addresses(ip_addresses, config.strict_addresses, log)
    log.debug("addr: %s", [str(a) for a in addrs])

    return CertTemplate(
        serial_number=serial,
        organization=config.subject_organization,
        not_before=not_before,
        not_after=not_after,
        is_ca=is_ca,
        basic_constraints_valid=True,
        ip_addresses=addrs,
    )


def create_cert(template: CertTemplate, parent: CertTemplate, pub, parent_priv, out,
                config: IssuanceConfig = None) -> x509.Certificate:
    """
    Sign `template` for public key `pub` under `parent`'s subject with
    `parent_priv`, parse the DER back and write it as PEM to `out`.

    A self-signed root passes the same template twice and both halves of one
    key pair.
    """
    log = get_logger(__name__, config)
    if not isinstance(parent_priv, rsa.RSAPrivateKey):
        raise SigningError(
            f"{template.signature_algorithm} needs an RSA signing key, got {type(parent_priv).__name__}")
    hash_cls = _SIGNATURE_HASHES.get(template.signature_algorithm)
    if hash_cls is None:
        raise SigningError(f"unsupported signature algorithm: {template.signature_algorithm}")

    try:
        builder = (
            x509.CertificateBuilder()
            .subject_name(template.subject_name())
            .issuer_name(parent.subject_name())
            .public_key(pub)
            .serial_number(template.serial_number)
            .not_valid_before(template.not_before)
            .not_valid_after(template.not_after)
        )
        for ext, critical in template.extensions(pub):
            builder = builder.add_extension(ext, critical=critical)
        cert = builder.sign(private_key=parent_priv, algorithm=hash_cls())
    except (ValueError, TypeError) as e:
        raise SigningError(f"failed to sign certificate: {e}") from e

    der = cert.public_bytes(serialization.Encoding.DER)
    # parse the result so a broken encoding never reaches disk
    try:
        parsed = x509.load_der_x509_certificate(der)
    except ValueError as e:
        raise SigningError(f"signed certificate does not parse: {e}") from e
    if parsed.serial_number != template.serial_number:
        raise SigningError("serial number changed between template and signed certificate")

    log.debug("signed certificate serial=%x", parsed.serial_number)
    out.write(parsed.public_bytes(serialization.Encoding.PEM))
    return parsed


def load_cert(pem_bytes: bytes) -> x509.Certificate:
    """Load a PEM-encoded certificate and return an x509.Certificate object."""
    return x509.load_pem_x509_certificate(pem_bytes)


def verify_self_signed(cert: x509.Certificate) -> None:
    """
    Verify that `cert` is signed by its own key.

    Raises:
      - ValueError if issuer does not match subject or the key is not RSA
      - InvalidSignature (propagated) if the signature does not verify
    """
    if cert.issuer != cert.subject:
        raise ValueError("certificate issuer does not match its subject")
    pub = cert.public_key()
    if not isinstance(pub, rsa.RSAPublicKey):
        raise ValueError(f"not an RSA certificate: {type(pub).__name__}")

    pub.verify(
        cert.signature,
        cert.tbs_certificate_bytes,
        padding.PKCS1v15(),
        cert.signature_hash_algorithm,
    )


def cert_ip_addresses(cert: x509.Certificate) -> List[IPAddress]:
    """IP entries of the SAN extension, in order. Empty when there is none."""
    try:
        san = cert.extensions.get_extension_for_class(x509.SubjectAlternativeName)
    except x509.ExtensionNotFound:
        return []
    return san.value.get_values_for_type(x509.IPAddress)


def cert_fingerprint_hex(cert: x509.Certificate) -> str:
    """Return the SHA-256 fingerprint of the certificate as a hex string."""
    return sha256_hex(cert.public_bytes(serialization.Encoding.DER))

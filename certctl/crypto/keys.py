# certctl/crypto/keys.py
"""
RSA key helpers using cryptography.
Provides:
 - create_rsa_key_pair(bits, out, config) -> private key, PEM written to out
 - private_key_pem(priv_key) -> "RSA PRIVATE KEY" PEM bytes
 - load_private_key(pem_bytes)
"""
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from certctl.common.errors import GenerationError
from certctl.common.log import get_logger

PUBLIC_EXPONENT = 65537


def private_key_pem(priv_key) -> bytes:
    """
    PKCS#1 DER wrapped in an "RSA PRIVATE KEY" PEM block, unencrypted.
    """
    return priv_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.TraditionalOpenSSL,
        encryption_algorithm=serialization.NoEncryption()
    )


def create_rsa_key_pair(bits: int, out, config=None) -> rsa.RSAPrivateKey:
    """
    Generate an RSA key pair of the given modulus size and write the PEM
    encoding of the private key to the binary writer `out`.

    Raises GenerationError if the primitive rejects the size or the backend
    cannot generate RSA keys.
    """
    log = get_logger(__name__, config)
    log.debug("generating %d-bit RSA key", bits)
    try:
        priv = rsa.generate_private_key(public_exponent=PUBLIC_EXPONENT, key_size=bits)
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise GenerationError(f"failed to generate {bits}-bit RSA key: {e}") from e

    out.write(private_key_pem(priv))
    return priv


def load_private_key(pem_bytes: bytes):
    """
    Load a PEM-encoded private key (no password).
    """
    return serialization.load_pem_private_key(pem_bytes, password=None)

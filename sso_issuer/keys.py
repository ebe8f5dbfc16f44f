"""
RSA signing material for ID tokens.
The private key is loaded once at startup from a PEM file; a missing or
malformed key is a deployment fault (ConfigurationError), never silently replaced.
Run `python -m sso_issuer.keys [dir]` to generate certs/private.pem and certs/public.pem.
"""
import base64
import logging
import sys
from dataclasses import dataclass
from pathlib import Path

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey, generate_private_key

from sso_issuer.errors import ConfigurationError

logger = logging.getLogger(__name__)

_KEY_BITS = 2048
SUPPORTED_ALGORITHMS = ("RS256", "RS384", "RS512", "PS256", "PS384", "PS512")


@dataclass(frozen=True)
class SigningMaterial:
    algorithm: str
    key_id: str
    private_key: RSAPrivateKey

    def __repr__(self) -> str:
        return f"SigningMaterial(algorithm={self.algorithm!r}, key_id={self.key_id!r})"


def generate_key() -> RSAPrivateKey:
    return generate_private_key(65537, _KEY_BITS)


def serialize_private(key: RSAPrivateKey) -> bytes:
    # PKCS#1 ("BEGIN RSA PRIVATE KEY"), same as `openssl genrsa`
    return key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.TraditionalOpenSSL,
        encryption_algorithm=serialization.NoEncryption(),
    )


def serialize_public(key: RSAPrivateKey) -> bytes:
    return key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )


def load_private_key(pem: bytes) -> RSAPrivateKey:
    try:
        key = serialization.load_pem_private_key(pem, password=None)
    except (ValueError, TypeError) as e:
        raise ConfigurationError(f"Signing key is not a valid unencrypted PEM private key: {type(e).__name__}") from e
    if not isinstance(key, RSAPrivateKey):
        raise ConfigurationError("Signing key must be an RSA private key")
    return key


def load_signing_material(path: str, algorithm: str, key_id: str) -> SigningMaterial:
    """Read the PEM at path. Raises ConfigurationError if missing, malformed or the algorithm is unsupported."""
    if algorithm not in SUPPORTED_ALGORITHMS:
        raise ConfigurationError(f"Unsupported signing algorithm: {algorithm}")
    p = Path(path)
    if not p.is_file():
        raise ConfigurationError(f"Private key file not found at: {path}")
    key = load_private_key(p.read_bytes())
    logger.info("Loaded signing key from %s (alg=%s, kid=%s)", path, algorithm, key_id)
    return SigningMaterial(algorithm=algorithm, key_id=key_id, private_key=key)


def _b64url_uint(value: int) -> str:
    raw = value.to_bytes((value.bit_length() + 7) // 8, "big")
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def public_jwk(material: SigningMaterial) -> dict:
    """Public half of the signing key as a JWK."""
    numbers = material.private_key.public_key().public_numbers()
    return {
        "kty": "RSA",
        "kid": material.key_id,
        "alg": material.algorithm,
        "use": "sig",
        "n": _b64url_uint(numbers.n),
        "e": _b64url_uint(numbers.e),
    }


def get_jwks(material: SigningMaterial) -> dict:
    return {"keys": [public_jwk(material)]}


def write_key_pair(directory: str) -> tuple[Path, Path]:
    """Generate a key pair into directory/private.pem and directory/public.pem."""
    d = Path(directory)
    d.mkdir(parents=True, exist_ok=True)
    key = generate_key()
    private_path = d / "private.pem"
    public_path = d / "public.pem"
    private_path.write_bytes(serialize_private(key))
    private_path.chmod(0o600)
    public_path.write_bytes(serialize_public(key))
    return private_path, public_path


if __name__ == "__main__":
    target = sys.argv[1] if len(sys.argv) > 1 else "certs"
    priv, pub = write_key_pair(target)
    print(f"Private key generated: {priv}")
    print(f"Public key generated: {pub}")

# ABOUTME: JSON Web Key Set builder for the identity provider signing key
# ABOUTME: Derives a content-addressed key ID and publishes only the public half

"""JWKS construction from the stored RSA key pair."""

import base64
import hashlib
import json
import logging
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from aws_oidc_sts.config import ProviderSettings
from aws_oidc_sts.exceptions import JWKSError, KeyParseError
from aws_oidc_sts.keys import load_private_key, load_public_key

logger = logging.getLogger(__name__)

JWKS_FILE_MODE = 0o644


def key_id_from_public_key(public_key: rsa.RSAPublicKey) -> str:
    """Hex-encoded SHA-256 of the DER SubjectPublicKeyInfo encoding of the key."""
    der = public_key.public_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    return hashlib.sha256(der).hexdigest()


def _int_to_base64url(value: int) -> str:
    """Encode an integer as base64url without padding."""
    byte_length = (value.bit_length() + 7) // 8
    raw = value.to_bytes(byte_length, byteorder="big")
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode()


@dataclass(frozen=True)
class JWK:
    """Public RSA JSON Web Key."""

    n: str
    e: str
    kid: str
    use: str = "sig"
    alg: str = "RS256"
    kty: str = "RSA"

    def to_dict(self) -> dict[str, str]:
        return {
            "kty": self.kty,
            "n": self.n,
            "e": self.e,
            "kid": self.kid,
            "use": self.use,
            "alg": self.alg,
        }


@dataclass
class JWKSet:
    """JSON Web Key Set."""

    keys: list[JWK] = field(default_factory=list)

    def add_key(self, key: JWK) -> None:
        self.keys.append(key)

    def to_dict(self) -> dict[str, Any]:
        return {"keys": [key.to_dict() for key in self.keys]}

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)


@dataclass(frozen=True)
class SigningKey:
    """
    In-memory signing key handle.

    Carries the private key together with the JWK metadata needed to sign
    tokens and to publish the matching public key. Never written to disk.
    """

    private_key: rsa.RSAPrivateKey = field(repr=False)
    kid: str
    use: str = "sig"
    alg: str = "RS256"

    def public_key(self) -> rsa.RSAPublicKey:
        return self.private_key.public_key()

    def public_jwk(self) -> JWK:
        """Public JWK derived from the private key, never re-read from disk."""
        numbers = self.public_key().public_numbers()
        return JWK(
            n=_int_to_base64url(numbers.n),
            e=_int_to_base64url(numbers.e),
            kid=self.kid,
            use=self.use,
            alg=self.alg,
        )


def build_signing_key(
    private_key: rsa.RSAPrivateKey,
    public_key: rsa.RSAPublicKey,
    settings: ProviderSettings | None = None,
) -> SigningKey:
    """Tag the private key with the key ID of its public half."""
    settings = settings or ProviderSettings()

    if private_key.public_key().public_numbers() != public_key.public_numbers():
        raise JWKSError("Public key file does not match the private key")

    return SigningKey(
        private_key=private_key,
        kid=key_id_from_public_key(public_key),
        use=settings.key_usage,
        alg=settings.algorithm,
    )


def build_jwks(target_dir: str | Path, settings: ProviderSettings | None = None) -> SigningKey:
    """
    Build the JWKS for the key pair under target_dir and write it to disk.

    The set contains only the public JWK. The file is written once, after the
    set is fully assembled, and replaces any previous JWKS.

    Args:
        target_dir: Directory holding the key subdirectory
        settings: Provider settings (file layout, key usage and algorithm)

    Returns:
        SigningKey for immediate use by the token signer

    Raises:
        JWKSError: a key could not be loaded, the pair mismatched, or the file could not be written
    """
    settings = settings or ProviderSettings()

    try:
        private_key = load_private_key(target_dir, settings)
    except KeyParseError as e:
        raise JWKSError(f"Failed to parse private key: {e.message}", e.path) from e

    try:
        public_key = load_public_key(target_dir, settings)
    except KeyParseError as e:
        raise JWKSError(f"Failed to parse public key: {e.message}", e.path) from e

    signing_key = build_signing_key(private_key, public_key, settings)

    jwk_set = JWKSet()
    jwk_set.add_key(signing_key.public_jwk())

    try:
        payload = jwk_set.to_json()
    except (TypeError, ValueError) as e:
        raise JWKSError(f"Failed to marshal JWK Set: {e}") from e

    jwks_path = settings.jwks_path(target_dir)
    _write_jwks(jwks_path, payload)

    logger.info(f"JWKS written to {jwks_path} (kid={signing_key.kid})")
    return signing_key


def _write_jwks(jwks_path: Path, payload: str) -> None:
    """Stage the JWKS next to its target and rename it into place."""
    tmp_path = None
    try:
        fd, tmp_path = tempfile.mkstemp(dir=jwks_path.parent, prefix=".", suffix=".json.tmp")
        with os.fdopen(fd, "w") as f:
            os.fchmod(f.fileno(), JWKS_FILE_MODE)
            f.write(payload)
        os.replace(tmp_path, jwks_path)
    except OSError as e:
        if tmp_path:
            Path(tmp_path).unlink(missing_ok=True)
        raise JWKSError(f"Failed to write JWK Set to file: {e}", str(jwks_path)) from e


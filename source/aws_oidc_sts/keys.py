# ABOUTME: RSA key pair storage for the identity provider signing key
# ABOUTME: Generates the PEM key pair once per target directory and loads it back

"""RSA key pair generation, persistence and parsing."""

import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from aws_oidc_sts.config import ProviderSettings
from aws_oidc_sts.exceptions import KeyDecodeError, KeyFileReadError, KeyMaterialError, PemDecodeError

logger = logging.getLogger(__name__)

RSA_PUBLIC_EXPONENT = 65537
KEY_DIR_MODE = 0o755
PRIVATE_KEY_MODE = 0o600
PUBLIC_KEY_MODE = 0o644

PRIVATE_KEY_LABEL = "RSA PRIVATE KEY"
PUBLIC_KEY_LABEL = "PUBLIC KEY"


@dataclass
class KeyPairResult:
    """Outcome of ensure_key_pair."""

    private_key_path: Path
    public_key_path: Path
    created: bool


class KeyMaterialStore:
    """
    On-disk RSA key pair for one target directory.

    Both files live in a fixed subdirectory of the target directory. The pair
    is created at most once: if either file already exists nothing is written.
    """

    def __init__(self, target_dir: str | Path, settings: ProviderSettings | None = None):
        self.target_dir = Path(target_dir)
        self.settings = settings or ProviderSettings()

    @property
    def key_dir(self) -> Path:
        return self.settings.key_dir(self.target_dir)

    @property
    def private_key_path(self) -> Path:
        return self.settings.private_key_path(self.target_dir)

    @property
    def public_key_path(self) -> Path:
        return self.settings.public_key_path(self.target_dir)

    def ensure_key_pair(self) -> KeyPairResult:
        """
        Generate the RSA key pair unless one is already present.

        Returns:
            KeyPairResult with created=False when the pair was left untouched

        Raises:
            KeyMaterialError: directory creation, key generation, encoding or write failed
        """
        try:
            self.key_dir.mkdir(mode=KEY_DIR_MODE, parents=True, exist_ok=True)
        except OSError as e:
            raise KeyMaterialError(f"Failed to create directory for RSA keys: {e}", str(self.key_dir)) from e

        skip_generation = False
        if self.private_key_path.exists():
            logger.warning(f"Private key file already exists, skipping creation: {self.private_key_path}")
            skip_generation = True
        if self.public_key_path.exists():
            logger.warning(f"Public key file already exists, skipping creation: {self.public_key_path}")
            skip_generation = True

        if skip_generation:
            logger.info("RSA key pair already exists, skipping creation")
            return KeyPairResult(self.private_key_path, self.public_key_path, created=False)

        logger.info(f"Generating {self.settings.key_size}-bit RSA key pair...")
        private_pem, public_pem = self._generate()
        self._write_pair(private_pem, public_pem)
        logger.info("RSA key pair generated successfully")

        return KeyPairResult(self.private_key_path, self.public_key_path, created=True)

    def _generate(self) -> tuple[bytes, bytes]:
        """Generate a key and return (PKCS#1 private PEM, PKIX public PEM)."""
        try:
            private_key = rsa.generate_private_key(
                public_exponent=RSA_PUBLIC_EXPONENT,
                key_size=self.settings.key_size,
            )
        except (ValueError, UnsupportedAlgorithm) as e:
            raise KeyMaterialError(f"Failed to generate RSA private key: {e}") from e

        try:
            private_pem = private_key.private_bytes(
                encoding=serialization.Encoding.PEM,
                format=serialization.PrivateFormat.TraditionalOpenSSL,
                encryption_algorithm=serialization.NoEncryption(),
            )
            public_pem = private_key.public_key().public_bytes(
                encoding=serialization.Encoding.PEM,
                format=serialization.PublicFormat.SubjectPublicKeyInfo,
            )
        except ValueError as e:
            raise KeyMaterialError(f"Failed to encode RSA key pair: {e}") from e

        return private_pem, public_pem

    def _write_pair(self, private_pem: bytes, public_pem: bytes) -> None:
        """Stage both PEM files next to their targets and rename them into place together."""
        staged: list[str] = []
        placed_private = False
        try:
            private_tmp = self._stage(private_pem, PRIVATE_KEY_MODE)
            staged.append(private_tmp)
            public_tmp = self._stage(public_pem, PUBLIC_KEY_MODE)
            staged.append(public_tmp)

            logger.info(f"Writing private key to {self.private_key_path}")
            os.replace(private_tmp, self.private_key_path)
            staged.remove(private_tmp)
            placed_private = True

            logger.info(f"Writing public key to {self.public_key_path}")
            os.replace(public_tmp, self.public_key_path)
            staged.remove(public_tmp)
        except OSError as e:
            for leftover in staged:
                Path(leftover).unlink(missing_ok=True)
            # Never leave half a pair behind.
            if placed_private:
                self.private_key_path.unlink(missing_ok=True)
            raise KeyMaterialError(f"Failed to write RSA key pair: {e}", str(self.key_dir)) from e

        logger.debug(f"Key pair written to {self.key_dir}")

    def _stage(self, data: bytes, mode: int) -> str:
        fd, tmp_path = tempfile.mkstemp(dir=self.key_dir, prefix=".", suffix=".pem.tmp")
        try:
            os.fchmod(fd, mode)
            with os.fdopen(fd, "wb") as f:
                f.write(data)
        except OSError:
            Path(tmp_path).unlink(missing_ok=True)
            raise
        return tmp_path

    def load_private_key(self) -> rsa.RSAPrivateKey:
        return load_private_key(self.target_dir, self.settings)

    def load_public_key(self) -> rsa.RSAPublicKey:
        return load_public_key(self.target_dir, self.settings)


def _read_pem(path: Path, label: str, kind: str) -> bytes:
    """Read a PEM file and return its first block carrying the expected label."""
    try:
        data = path.read_bytes()
    except OSError as e:
        raise KeyFileReadError(f"Failed to read {kind} key file: {e}", str(path)) from e

    text = data.decode("ascii", errors="replace")
    begin = f"-----BEGIN {label}-----"
    end = f"-----END {label}-----"
    start = text.find(begin)
    stop = text.find(end, start + len(begin)) if start != -1 else -1
    if start == -1 or stop == -1:
        raise PemDecodeError(
            f"Failed to decode PEM block containing {kind} key", str(path), expected_label=label
        )

    return data[start : stop + len(end)] + b"\n"


def load_private_key(target_dir: str | Path, settings: ProviderSettings | None = None) -> rsa.RSAPrivateKey:
    """
    Load the PKCS#1 RSA private key stored under target_dir.

    Raises:
        KeyFileReadError: the file is missing or unreadable
        PemDecodeError: no "RSA PRIVATE KEY" PEM block in the file
        KeyDecodeError: the DER payload is not a valid RSA private key
    """
    settings = settings or ProviderSettings()
    path = settings.private_key_path(target_dir)
    pem = _read_pem(path, PRIVATE_KEY_LABEL, "private")

    try:
        private_key = serialization.load_pem_private_key(pem, password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise KeyDecodeError(f"Failed to parse private key: {e}", str(path)) from e

    if not isinstance(private_key, rsa.RSAPrivateKey):
        raise KeyDecodeError("Failed to parse private key: not an RSA key", str(path))
    return private_key


def load_public_key(target_dir: str | Path, settings: ProviderSettings | None = None) -> rsa.RSAPublicKey:
    """
    Load the PKIX RSA public key stored under target_dir.

    Raises:
        KeyFileReadError: the file is missing or unreadable
        PemDecodeError: no "PUBLIC KEY" PEM block in the file
        KeyDecodeError: the DER payload is not a valid RSA public key
    """
    settings = settings or ProviderSettings()
    path = settings.public_key_path(target_dir)
    pem = _read_pem(path, PUBLIC_KEY_LABEL, "public")

    try:
        public_key = serialization.load_pem_public_key(pem)
    except (ValueError, UnsupportedAlgorithm) as e:
        raise KeyDecodeError(f"Failed to parse public key: {e}", str(path)) from e

    if not isinstance(public_key, rsa.RSAPublicKey):
        raise KeyDecodeError("Failed to parse public key: not an RSA key", str(path))
    return public_key

# ABOUTME: Configuration management for aws-oidc-sts
# ABOUTME: Holds token claims, key parameters and file layout passed into each component

"""Configuration management for aws-oidc-sts."""

import json
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any

DEFAULT_ISSUER = "https://example.com"
DEFAULT_AUDIENCE = "sts.amazonaws.com"
DEFAULT_SUBJECT = "aws-oidc-sts"
DEFAULT_TOKEN_TTL = 86400  # 24 hours
DEFAULT_KEY_SIZE = 4096


@dataclass(frozen=True)
class ProviderSettings:
    """Settings for one identity provider bootstrap run."""

    issuer: str = DEFAULT_ISSUER
    audience: str = DEFAULT_AUDIENCE
    subject: str = DEFAULT_SUBJECT
    token_ttl: int = DEFAULT_TOKEN_TTL
    key_size: int = DEFAULT_KEY_SIZE
    tls_dir_name: str = "tls"
    private_key_file: str = "private-key.pem"
    public_key_file: str = "public-key.pem"
    jwks_file: str = "jwks.json"
    key_usage: str = "sig"
    algorithm: str = "RS256"

    def key_dir(self, target_dir: str | Path) -> Path:
        """Directory holding the key pair and the JWKS."""
        return Path(target_dir) / self.tls_dir_name

    def private_key_path(self, target_dir: str | Path) -> Path:
        return self.key_dir(target_dir) / self.private_key_file

    def public_key_path(self, target_dir: str | Path) -> Path:
        return self.key_dir(target_dir) / self.public_key_file

    def jwks_path(self, target_dir: str | Path) -> Path:
        return self.key_dir(target_dir) / self.jwks_file

    def to_dict(self) -> dict[str, Any]:
        """Convert settings to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ProviderSettings":
        """Create settings from dictionary, defaulting missing keys."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown settings: {', '.join(unknown)}")

        for f in fields(cls):
            if f.name not in data:
                continue
            value = data[f.name]
            # bool is an int subclass but never a valid TTL or key size
            if not isinstance(value, f.type) or isinstance(value, bool):
                raise ValueError(f"{f.name} must be {f.type.__name__}, got {type(value).__name__}")

        settings = cls(**data)
        if settings.token_ttl <= 0:
            raise ValueError(f"token_ttl must be positive, got {settings.token_ttl}")
        if settings.key_size < 2048:
            raise ValueError(f"key_size must be at least 2048 bits, got {settings.key_size}")
        return settings

    @classmethod
    def load(cls, path: str | Path | None = None) -> "ProviderSettings":
        """Load settings from a JSON file, or return the defaults when no path is given."""
        if path is None:
            return cls()

        with open(path) as f:
            data = json.load(f)

        if not isinstance(data, dict):
            raise ValueError(f"Settings file {path} must contain a JSON object")

        return cls.from_dict(data)

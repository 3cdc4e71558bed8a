# ABOUTME: Signed JWT creation for the identity provider
# ABOUTME: Proves the private key can sign tokens AWS STS will accept

"""JWT signing with the identity provider signing key."""

import time

import jwt

from aws_oidc_sts.config import ProviderSettings
from aws_oidc_sts.exceptions import TokenSigningError
from aws_oidc_sts.jwks import SigningKey


def build_claims(settings: ProviderSettings, now: int) -> dict[str, str | int]:
    """Fixed issuer, audience and subject with a validity window starting at now."""
    return {
        "iss": settings.issuer,
        "aud": settings.audience,
        "sub": settings.subject,
        "iat": now,
        "exp": now + settings.token_ttl,
    }


def sign_token(signing_key: SigningKey, settings: ProviderSettings | None = None, now: int | None = None) -> str:
    """
    Create a signed compact JWT.

    Args:
        signing_key: Private key handle returned by build_jwks
        settings: Provider settings supplying the claims and token lifetime
        now: Issued-at time in epoch seconds (defaults to the current time)

    Returns:
        The compact serialized token (header.payload.signature)

    Raises:
        TokenSigningError: the claims could not be built or the token could not be signed
    """
    settings = settings or ProviderSettings()
    issued_at = int(time.time()) if now is None else int(now)

    try:
        claims = build_claims(settings, issued_at)
    except (TypeError, ValueError) as e:
        raise TokenSigningError(f"Failed to create JWT token: {e}") from e

    try:
        return jwt.encode(
            claims,
            signing_key.private_key,
            algorithm=signing_key.alg,
            headers={"kid": signing_key.kid},
        )
    except (jwt.PyJWTError, NotImplementedError, TypeError, ValueError) as e:
        raise TokenSigningError(f"Failed to sign JWT token: {e}") from e

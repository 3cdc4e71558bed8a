# ABOUTME: aws-oidc-sts - Bootstrap a custom OIDC identity provider for AWS STS federation
# ABOUTME: Main package for key material, JWKS, signed JWTs and S3 bucket provisioning

"""aws-oidc-sts - OIDC identity provider bootstrap tool."""

__version__ = "0.1.0"
__all__ = ["cli", "config", "exceptions", "jwks", "keys", "provisioning", "tokens"]

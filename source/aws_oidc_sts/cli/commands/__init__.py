# ABOUTME: Commands module for aws-oidc-sts CLI
# ABOUTME: Contains all CLI command implementations

"""CLI commands for aws-oidc-sts."""

from .aws_identity_provider import AwsIdentityProviderCommand
from .identity_provider import IdentityProviderCommand
from .rsa_key_pair import RsaKeyPairCommand

__all__ = [
    "RsaKeyPairCommand",
    "IdentityProviderCommand",
    "AwsIdentityProviderCommand",
]

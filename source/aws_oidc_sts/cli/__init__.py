# ABOUTME: CLI module for aws-oidc-sts
# ABOUTME: Provides the command-line interface for key material and AWS provisioning

"""Command-line interface for aws-oidc-sts."""

from cleo.application import Application

from aws_oidc_sts import __version__

from .commands.aws_identity_provider import AwsIdentityProviderCommand
from .commands.identity_provider import IdentityProviderCommand
from .commands.rsa_key_pair import RsaKeyPairCommand


def create_application() -> Application:
    """Create the CLI application."""
    application = Application("aws-oidc-sts", __version__)

    # Add commands
    application.add(RsaKeyPairCommand())
    application.add(IdentityProviderCommand())
    application.add(AwsIdentityProviderCommand())

    return application


def main():
    """Main entry point for the CLI."""
    application = create_application()
    application.run()


if __name__ == "__main__":
    main()

# ABOUTME: Command to generate the identity provider RSA key pair
# ABOUTME: Writes tls/private-key.pem and tls/public-key.pem once per target directory

"""RSA key pair command - Generate the signing key pair."""

from cleo.commands.command import Command
from rich.console import Console

from aws_oidc_sts.cli.utils.context import common_options, load_settings, output_dir, setup_logging
from aws_oidc_sts.cli.utils.display import display_error, display_key_material
from aws_oidc_sts.exceptions import AwsOidcStsError
from aws_oidc_sts.keys import KeyMaterialStore


class RsaKeyPairCommand(Command):
    name = "create rsa-key-pair"
    description = "Generate an RSA key pair and save it to the target directory"
    help = """The <info>create rsa-key-pair</info> command generates a 4096-bit RSA key pair
under <comment>tls/</comment> in the target directory. An existing key pair is never overwritten.

  <info>aws-oidc-sts create rsa-key-pair --output-dir /path/to/directory</info>"""

    options = common_options()

    def handle(self) -> int:
        """Execute the rsa-key-pair command."""
        console = Console()
        setup_logging(self)

        target_dir = output_dir(self)
        try:
            settings = load_settings(self)
            result = KeyMaterialStore(target_dir, settings).ensure_key_pair()
        except (AwsOidcStsError, OSError, ValueError) as e:
            display_error(Console(stderr=True), f"Failed to create RSA key pair: {e}")
            return 1

        if result.created:
            console.print("[green]✓ RSA key pair generated[/green]")
        else:
            console.print("[yellow]RSA key pair already exists, skipping creation[/yellow]")

        display_key_material(console, target_dir, settings)
        return 0

# ABOUTME: Command to generate the identity provider JSON Web Key Set offline
# ABOUTME: Reuses or creates the key pair and writes tls/jwks.json without calling AWS

"""Identity provider command - Generate the JWKS and a test token locally."""

from cleo.commands.command import Command
from cleo.helpers import option
from rich.console import Console

from aws_oidc_sts.cli.utils.context import common_options, load_settings, output_dir, setup_logging
from aws_oidc_sts.cli.utils.display import display_error, display_key_material
from aws_oidc_sts.exceptions import AwsOidcStsError
from aws_oidc_sts.jwks import build_jwks
from aws_oidc_sts.keys import KeyMaterialStore
from aws_oidc_sts.tokens import sign_token


class IdentityProviderCommand(Command):
    name = "create identity-provider"
    description = "Generate a JSON Web Key Set (JWKS) for an identity provider"
    help = """The <info>create identity-provider</info> command writes <comment>tls/jwks.json</comment>
for the key pair in the target directory, generating the key pair first if needed.
No AWS resources are touched.

  <info>aws-oidc-sts create identity-provider --output-dir /path/to/directory</info>"""

    options = [
        *common_options(),
        option("show-token", description="Also sign and print a test JWT", flag=True),
    ]

    def handle(self) -> int:
        """Execute the identity-provider command."""
        console = Console()
        setup_logging(self)

        target_dir = output_dir(self)
        try:
            settings = load_settings(self)
            KeyMaterialStore(target_dir, settings).ensure_key_pair()
            signing_key = build_jwks(target_dir, settings)
            token = sign_token(signing_key, settings) if self.option("show-token") else None
        except (AwsOidcStsError, OSError, ValueError) as e:
            display_error(Console(stderr=True), f"Error creating JSON Web Key Set: {e}")
            return 1

        console.print("[green]✓ JSON Web Key Set created[/green]")
        display_key_material(console, target_dir, settings, kid=signing_key.kid)

        if token:
            console.print("\n[bold]Signed JWT[/bold]")
            console.print(token, soft_wrap=True, highlight=False)

        return 0

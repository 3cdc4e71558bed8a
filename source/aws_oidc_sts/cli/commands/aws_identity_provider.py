# ABOUTME: Command to bootstrap an OIDC identity provider for AWS STS
# ABOUTME: Runs the full workflow: key pair, JWKS, test JWT, caller identity and S3 bucket

"""AWS identity provider command - Create the key material and the S3 bucket."""

import json

from cleo.commands.command import Command
from cleo.helpers import option
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn

from aws_oidc_sts.cli.utils.context import common_options, load_settings, output_dir, setup_logging
from aws_oidc_sts.cli.utils.display import display_error, display_provisioning_result, get_result_dict
from aws_oidc_sts.cli.utils.validators import validate_aws_region, validate_bucket_name
from aws_oidc_sts.exceptions import AwsOidcStsError, BucketAlreadyExistsError
from aws_oidc_sts.provisioning import STEPS, IdentityProviderProvisioner
from aws_oidc_sts.utils.aws import AwsServiceClient


class AwsIdentityProviderCommand(Command):
    name = "aws identity-provider"
    description = "Create the key material and S3 bucket for an AWS STS identity provider"
    help = """The <info>aws identity-provider</info> command generates the RSA key pair and JWKS,
signs a test JWT, checks the AWS caller identity and creates the S3 bucket that will host
the JWKS and the OpenID configuration.

  <info>aws-oidc-sts aws identity-provider --bucket-name my-s3-bucket --region us-east-1</info>"""

    options = [
        *common_options(),
        option(
            "bucket-name",
            "b",
            description="S3 bucket name to store the JWKS and openid-configuration (required)",
            flag=False,
        ),
        option("region", "r", description="AWS region (required)", flag=False),
        option("aws-profile", description="AWS credentials profile to use", flag=False),
        option("json", description="Output in JSON format", flag=True),
        option("show-token", description="Print the signed JWT", flag=True),
    ]

    def __init__(self, client_factory=None) -> None:
        super().__init__()
        self._injected_client_factory = client_factory

    def handle(self) -> int:
        """Execute the aws identity-provider command."""
        console = Console()
        err_console = Console(stderr=True)
        setup_logging(self)

        bucket_name = (self.option("bucket-name") or "").strip()
        region = (self.option("region") or "").strip()

        if not bucket_name or not region:
            display_error(err_console, "Both --bucket-name and --region are required.")
            return 1
        if not validate_bucket_name(bucket_name):
            display_error(err_console, f"Invalid S3 bucket name: {bucket_name}")
            return 1
        if not validate_aws_region(region):
            display_error(err_console, f"Invalid AWS region: {region}")
            return 1

        try:
            settings = load_settings(self)
        except (OSError, ValueError) as e:
            display_error(err_console, f"Failed to load settings: {e}")
            return 1

        target_dir = output_dir(self)
        json_output = self.option("json")

        if not json_output:
            console.print(
                Panel.fit(
                    "[bold cyan]AWS OIDC Identity Provider[/bold cyan]\n\n"
                    f"Bucket: [cyan]{bucket_name}[/cyan]  Region: [cyan]{region}[/cyan]",
                    border_style="cyan",
                    padding=(1, 2),
                )
            )

        try:
            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                console=err_console,
                transient=True,
                disable=json_output,
            ) as progress:
                task = progress.add_task("Starting...", total=len(STEPS))

                def on_step(step: str) -> None:
                    progress.update(task, description=f"{step.capitalize()}...", advance=1)

                provisioner = IdentityProviderProvisioner(
                    target_dir,
                    settings,
                    client_factory=self._client_factory(),
                    on_step=on_step,
                )
                result = provisioner.run(bucket_name, region)
        except AwsOidcStsError as e:
            hint = None
            if isinstance(e.__cause__, BucketAlreadyExistsError):
                cleanup = e.__cause__.get_cleanup_command()
                hint = f"Remove it with: {cleanup}" if cleanup else "Choose a different bucket name."
            display_error(err_console, f"Failed to create identity provider: {e}", hint)
            return 1

        if json_output:
            console.print_json(json.dumps(get_result_dict(result, settings)))
            return 0

        console.print("[green]✓ Identity provider created successfully[/green]\n")
        display_provisioning_result(console, result, settings, show_token=self.option("show-token"))
        return 0

    def _client_factory(self):
        if self._injected_client_factory:
            return self._injected_client_factory

        profile = self.option("aws-profile")
        return lambda region: AwsServiceClient.from_region(region, profile)

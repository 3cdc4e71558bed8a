# ABOUTME: Shared display utilities for consistent output formatting
# ABOUTME: Renders key material locations and provisioning results for the CLI

"""Shared display utilities for consistent output formatting across commands."""

from typing import Any

from rich import box
from rich.console import Console
from rich.table import Table

from aws_oidc_sts.config import ProviderSettings
from aws_oidc_sts.provisioning import ProvisioningResult


def display_error(console: Console, message: str, hint: str | None = None) -> None:
    """Print a failure and an optional follow-up hint."""
    console.print(f"[red]{message}[/red]", highlight=False)
    if hint:
        console.print(f"[yellow]{hint}[/yellow]", highlight=False)


def display_key_material(console: Console, target_dir, settings: ProviderSettings, kid: str | None = None) -> None:
    """Show where the key pair and JWKS live."""
    table = Table(box=box.SIMPLE)
    table.add_column("File", style="dim")
    table.add_column("Path")

    table.add_row("Private key", str(settings.private_key_path(target_dir)))
    table.add_row("Public key", str(settings.public_key_path(target_dir)))
    if kid:
        table.add_row("JWKS", str(settings.jwks_path(target_dir)))
        table.add_row("Key ID", kid)

    console.print(table)


def display_provisioning_result(
    console: Console, result: ProvisioningResult, settings: ProviderSettings, show_token: bool = False
) -> None:
    """
    Display the outcome of the identity provider workflow.

    Args:
        console: Rich console to print to
        result: Result returned by IdentityProviderProvisioner.run
        settings: Settings the run used
        show_token: Include the signed JWT
    """
    table = Table(box=box.SIMPLE)
    table.add_column("Setting", style="dim")
    table.add_column("Value")

    table.add_row("Key Pair", "✓ Created" if result.key_pair_created else "Reused existing")
    table.add_row("Key ID", result.kid)
    table.add_row("Issuer", settings.issuer)
    table.add_row("Audience", settings.audience)
    table.add_row("AWS Account", result.identity.account)
    table.add_row("Caller ARN", result.identity.arn)
    table.add_row("S3 Bucket", result.bucket.name)
    table.add_row("Region", result.bucket.region)
    if result.bucket.location:
        table.add_row("Bucket Location", result.bucket.location)

    console.print(table)

    if show_token:
        console.print("\n[bold]Signed JWT[/bold]")
        console.print(result.token, soft_wrap=True, highlight=False)


def get_result_dict(result: ProvisioningResult, settings: ProviderSettings) -> dict[str, Any]:
    """
    Get the provisioning result as a dictionary for JSON output.

    Returns:
        Dictionary containing the key ID, token, caller identity and bucket
    """
    return {
        "key_pair_created": result.key_pair_created,
        "kid": result.kid,
        "issuer": settings.issuer,
        "audience": settings.audience,
        "token": result.token,
        "identity": {
            "account": result.identity.account,
            "arn": result.identity.arn,
            "user_id": result.identity.user_id,
        },
        "bucket": {
            "name": result.bucket.name,
            "region": result.bucket.region,
            "location": result.bucket.location,
        },
    }

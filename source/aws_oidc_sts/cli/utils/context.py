# ABOUTME: Shared option handling for CLI commands
# ABOUTME: Resolves output directory, settings file and log verbosity for every command

"""Options and setup shared by all commands."""

import os
from pathlib import Path

from cleo.commands.command import Command
from cleo.helpers import option
from cleo.io.outputs.output import Verbosity

from aws_oidc_sts.cli.utils.validators import validate_issuer_url
from aws_oidc_sts.config import ProviderSettings
from aws_oidc_sts.log import configure_logging


def common_options() -> list:
    """Options every command accepts."""
    return [
        option(
            "output-dir",
            "o",
            description="Target directory for the generated files (default: current directory)",
            flag=False,
        ),
        option("config", description="JSON file overriding issuer, audience, subject and file names", flag=False),
    ]


def output_dir(command: Command) -> Path:
    """Directory given with --output-dir, or the current working directory."""
    value = command.option("output-dir")
    return Path(value) if value else Path(os.getcwd())


def load_settings(command: Command) -> ProviderSettings:
    """
    Load provider settings from --config, or the defaults.

    Raises:
        ValueError: the file is invalid or the issuer is not an https URL
        OSError: the file cannot be read
    """
    settings = ProviderSettings.load(command.option("config"))
    if not validate_issuer_url(settings.issuer):
        raise ValueError(f"Issuer must be an https URL without query or fragment: {settings.issuer}")
    return settings


def setup_logging(command: Command) -> None:
    """Map cleo's -v/-vv/-vvv to the package log level."""
    verbosity = command.io.output.verbosity
    if verbosity == Verbosity.VERBOSE:
        configure_logging(1)
    elif verbosity in (Verbosity.VERY_VERBOSE, Verbosity.DEBUG):
        configure_logging(2)
    else:
        configure_logging(0)

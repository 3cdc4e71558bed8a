# ABOUTME: Module entry point for aws-oidc-sts
# ABOUTME: Runs the CLI when invoked as python -m aws_oidc_sts

"""Allow running the CLI with python -m aws_oidc_sts."""

from aws_oidc_sts.cli import main

main()

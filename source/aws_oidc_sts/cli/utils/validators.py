# ABOUTME: Input validation functions for CLI commands
# ABOUTME: Validates bucket names, regions and issuer URLs before any work starts

"""Input validators for CLI commands."""

import re
from urllib.parse import urlparse


def validate_aws_region(region: str) -> bool:
    """Validate AWS region format."""
    if not region:
        return False

    # AWS region format: us-east-1, eu-west-2, us-gov-west-1, etc.
    pattern = r"^[a-z]{2}(-[a-z]+)+-\d{1,2}$"
    return bool(re.match(pattern, region))


def validate_bucket_name(name: str) -> bool:
    """Validate S3 bucket name against the general purpose bucket naming rules.

    - 3 to 63 characters
    - lowercase letters, digits, dots and hyphens
    - begins and ends with a letter or digit
    - no adjacent dots, not formatted as an IP address
    """
    if not name or len(name) < 3 or len(name) > 63:
        return False

    pattern = r"^[a-z0-9][a-z0-9.-]*[a-z0-9]$"
    if not re.match(pattern, name):
        return False

    if ".." in name:
        return False

    if re.match(r"^\d{1,3}(\.\d{1,3}){3}$", name):
        return False

    return not name.startswith("xn--") and not name.endswith("-s3alias")


def validate_issuer_url(issuer: str) -> bool:
    """Validate an OIDC issuer URL: https, a hostname, no query or fragment."""
    if not issuer:
        return False

    parsed = urlparse(issuer)
    if parsed.scheme != "https" or not parsed.hostname:
        return False

    return not parsed.query and not parsed.fragment

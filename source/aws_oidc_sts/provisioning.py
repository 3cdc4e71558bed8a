# ABOUTME: End-to-end identity provider bootstrap workflow
# ABOUTME: Sequences key pair, JWKS, JWT, caller identity and bucket creation

"""Identity provider provisioning workflow."""

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path

from aws_oidc_sts.config import ProviderSettings
from aws_oidc_sts.exceptions import AwsOidcStsError, MissingInputError, ProvisioningError
from aws_oidc_sts.jwks import build_jwks
from aws_oidc_sts.keys import KeyMaterialStore
from aws_oidc_sts.tokens import sign_token
from aws_oidc_sts.utils.aws import AwsServiceClient, BucketInfo, CallerIdentity

logger = logging.getLogger(__name__)

ClientFactory = Callable[[str], AwsServiceClient]

# Workflow steps, in execution order.
STEP_VALIDATE = "validate inputs"
STEP_KEY_PAIR = "ensure key pair"
STEP_JWKS = "build JWKS"
STEP_JWT = "sign JWT"
STEP_CLIENT = "resolve AWS client"
STEP_IDENTITY = "verify identity"
STEP_BUCKET = "create bucket"

STEPS = [STEP_VALIDATE, STEP_KEY_PAIR, STEP_JWKS, STEP_JWT, STEP_CLIENT, STEP_IDENTITY, STEP_BUCKET]

_STEP_FAILURES = {
    STEP_KEY_PAIR: "failed to create RSA key pair",
    STEP_JWKS: "failed to create JSON Web Key Set",
    STEP_JWT: "failed to create JWT",
    STEP_CLIENT: "failed to create AWS client",
    STEP_IDENTITY: "failed to get AWS client identity",
    STEP_BUCKET: "failed to create S3 bucket",
}


@dataclass
class ProvisioningResult:
    """Everything the workflow produced."""

    key_pair_created: bool
    kid: str
    token: str
    identity: CallerIdentity
    bucket: BucketInfo


class IdentityProviderProvisioner:
    """
    Runs the identity provider bootstrap against one target directory.

    Steps run in order and the first failure stops the run. Nothing is rolled
    back: re-running is safe for every step except bucket creation.
    """

    def __init__(
        self,
        target_dir: str | Path,
        settings: ProviderSettings | None = None,
        client_factory: ClientFactory | None = None,
        on_step: Callable[[str], None] | None = None,
    ):
        """
        Args:
            target_dir: Directory receiving the tls/ key material
            settings: Provider settings
            client_factory: Builds the AWS client for a region (defaults to AwsServiceClient.from_region)
            on_step: Optional callback invoked with each step name before it runs
        """
        self.target_dir = Path(target_dir)
        self.settings = settings or ProviderSettings()
        self.client_factory = client_factory or AwsServiceClient.from_region
        self.on_step = on_step

    def run(self, bucket_name: str, region: str) -> ProvisioningResult:
        """
        Execute the whole workflow.

        Raises:
            MissingInputError: bucket name or region is empty (raised before any other step)
            ProvisioningError: a later step failed; the original error is chained as __cause__
        """
        self._step(STEP_VALIDATE)
        validate_target(bucket_name, region)

        with self._failing_as(STEP_KEY_PAIR):
            key_pair = KeyMaterialStore(self.target_dir, self.settings).ensure_key_pair()

        with self._failing_as(STEP_JWKS):
            signing_key = build_jwks(self.target_dir, self.settings)

        with self._failing_as(STEP_JWT):
            token = sign_token(signing_key, self.settings)
        logger.info(f"JWT created successfully: {token}")

        with self._failing_as(STEP_CLIENT):
            client = self.client_factory(region)

        with self._failing_as(STEP_IDENTITY):
            identity = client.verify_identity()
        logger.info(
            f"AWS client identity: account={identity.account} arn={identity.arn} "
            f"region={region} user_id={identity.user_id}"
        )

        with self._failing_as(STEP_BUCKET):
            bucket = client.create_bucket(bucket_name, region)
        logger.info(f"S3 bucket created: {bucket.name} (location={bucket.location})")

        return ProvisioningResult(
            key_pair_created=key_pair.created,
            kid=signing_key.kid,
            token=token,
            identity=identity,
            bucket=bucket,
        )

    def _step(self, step: str) -> None:
        logger.debug(f"Step: {step}")
        if self.on_step:
            self.on_step(step)

    @contextmanager
    def _failing_as(self, step: str) -> Iterator[None]:
        """Re-raise package errors from one step as ProvisioningError."""
        self._step(step)
        try:
            yield
        except AwsOidcStsError as e:
            raise ProvisioningError(f"{_STEP_FAILURES[step]}: {e.message}", step) from e


def validate_target(bucket_name: str, region: str) -> None:
    """Reject an empty bucket name or region."""
    if not bucket_name or not bucket_name.strip():
        raise MissingInputError("Bucket name is required", "bucket_name")
    if not region or not region.strip():
        raise MissingInputError("Region is required", "region")

# ABOUTME: AWS service client for the identity provider bootstrap
# ABOUTME: Wraps STS caller identity and S3 bucket creation behind a closed service dispatch

"""AWS service access for the provisioning workflow."""

import logging
from dataclasses import dataclass
from enum import Enum

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from aws_oidc_sts.exceptions import (
    AwsClientError,
    BucketAlreadyExistsError,
    BucketCreationError,
    CallerIdentityError,
)

logger = logging.getLogger(__name__)

# S3 rejects an explicit LocationConstraint for the default region.
S3_DEFAULT_REGION = "us-east-1"

BUCKET_EXISTS_CODES = ("BucketAlreadyExists", "BucketAlreadyOwnedByYou")


@dataclass(frozen=True)
class CallerIdentity:
    """Identity of the credentials in effect."""

    account: str
    arn: str
    user_id: str


@dataclass(frozen=True)
class BucketInfo:
    """A freshly created S3 bucket."""

    name: str
    region: str
    location: str | None = None


class ServiceKind(Enum):
    """AWS services the bootstrap talks to."""

    STS = "sts"
    S3 = "s3"


class AwsService:
    """Base class for a single AWS service bound to a boto3 session."""

    kind: ServiceKind

    def __init__(self, session: boto3.Session):
        self.session = session
        self._client = None

    @property
    def client(self):
        """Lazy-loaded boto3 client for this service."""
        if not self._client:
            self._client = self.session.client(self.kind.value)
        return self._client


class StsService(AwsService):
    kind = ServiceKind.STS

    def get_caller_identity(self) -> CallerIdentity:
        """Look up the account, ARN and user ID of the current credentials."""
        try:
            response = self.client.get_caller_identity()
        except ClientError as e:
            error = e.response.get("Error", {})
            raise CallerIdentityError(
                f"Failed to get caller identity: {error.get('Message', e)}", error.get("Code")
            ) from e
        except BotoCoreError as e:
            raise CallerIdentityError(f"Failed to get caller identity: {e}") from e

        return CallerIdentity(
            account=response.get("Account", ""),
            arn=response.get("Arn", ""),
            user_id=response.get("UserId", ""),
        )


class S3Service(AwsService):
    kind = ServiceKind.S3

    def create_bucket(self, bucket_name: str, region: str) -> BucketInfo:
        """
        Create an S3 bucket in the given region.

        A bucket that already exists, even one owned by the caller, is a failure.

        Raises:
            BucketAlreadyExistsError: the name is taken
            BucketCreationError: any other S3 or transport failure
        """
        params = {"Bucket": bucket_name}
        if region != S3_DEFAULT_REGION:
            params["CreateBucketConfiguration"] = {"LocationConstraint": region}

        try:
            response = self.client.create_bucket(**params)
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code")
            error_message = e.response.get("Error", {}).get("Message", str(e))

            if error_code in BUCKET_EXISTS_CODES:
                raise BucketAlreadyExistsError(
                    f"Bucket {bucket_name} already exists: {error_message}", bucket_name, error_code
                ) from e
            raise BucketCreationError(
                f"Failed to create bucket {bucket_name}: {error_message}", bucket_name, error_code
            ) from e
        except BotoCoreError as e:
            raise BucketCreationError(f"Failed to create bucket {bucket_name}: {e}", bucket_name) from e

        return BucketInfo(name=bucket_name, region=region, location=response.get("Location"))


SERVICES: dict[ServiceKind, type[AwsService]] = {
    ServiceKind.STS: StsService,
    ServiceKind.S3: S3Service,
}


def build_service(kind: ServiceKind, session: boto3.Session) -> AwsService:
    """Instantiate the service class registered for kind."""
    try:
        service_class = SERVICES[kind]
    except KeyError:
        raise ValueError(f"Unsupported AWS service: {kind}") from None
    return service_class(session)


class AwsServiceClient:
    """
    AWS operations used by the identity provider workflow.

    The workflow takes this through a factory so tests can drive it with
    stubbed boto3 clients.
    """

    def __init__(self, session: boto3.Session):
        self.session = session
        self.region = session.region_name
        self.sts: StsService = build_service(ServiceKind.STS, session)
        self.s3: S3Service = build_service(ServiceKind.S3, session)

    @classmethod
    def from_region(cls, region: str, profile: str | None = None) -> "AwsServiceClient":
        """
        Create a client for region using the default credential chain.

        Args:
            region: AWS region
            profile: Optional AWS profile name

        Raises:
            AwsClientError: the session could not be created
        """
        try:
            session = (
                boto3.Session(region_name=region, profile_name=profile)
                if profile
                else boto3.Session(region_name=region)
            )
        except BotoCoreError as e:
            raise AwsClientError(f"Unable to load AWS SDK config: {e}") from e

        return cls(session)

    def verify_identity(self) -> CallerIdentity:
        return self.sts.get_caller_identity()

    def create_bucket(self, bucket_name: str, region: str) -> BucketInfo:
        logger.info(f"Creating S3 bucket {bucket_name} in {region}")
        bucket = self.s3.create_bucket(bucket_name, region)
        logger.info(f"S3 bucket created successfully: {bucket_name}")
        return bucket


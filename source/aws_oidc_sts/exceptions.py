# ABOUTME: Custom exception classes for key material, token and AWS operations
# ABOUTME: Provides structured error handling so every failure carries its context

"""Custom exceptions for aws-oidc-sts operations."""


class AwsOidcStsError(Exception):
    """Base exception for all aws-oidc-sts operations."""

    def __init__(self, message: str, path: str = None):
        self.message = message
        self.path = path
        super().__init__(self.message)


class KeyMaterialError(AwsOidcStsError):
    """Raised when the RSA key pair cannot be created or written."""

    pass


class KeyParseError(AwsOidcStsError):
    """Base class for failures loading a stored key."""

    pass


class KeyFileReadError(KeyParseError):
    """Raised when a key file is missing or unreadable."""

    pass


class PemDecodeError(KeyParseError):
    """Raised when the PEM envelope is absent, malformed or has the wrong label."""

    def __init__(self, message: str, path: str = None, expected_label: str = None):
        super().__init__(message, path)
        self.expected_label = expected_label


class KeyDecodeError(KeyParseError):
    """Raised when the DER payload inside the PEM envelope cannot be parsed."""

    pass


class JWKSError(AwsOidcStsError):
    """Raised when the JSON Web Key Set cannot be built or written."""

    pass


class TokenSigningError(AwsOidcStsError):
    """Raised when the JWT cannot be built or signed."""

    pass


class MissingInputError(AwsOidcStsError):
    """Raised when a required provisioning input is empty."""

    def __init__(self, message: str, field_name: str = None):
        super().__init__(message)
        self.field_name = field_name


class AwsError(AwsOidcStsError):
    """Base exception for AWS-side failures."""

    def __init__(self, message: str, error_code: str = None):
        super().__init__(message)
        self.error_code = error_code


class AwsClientError(AwsError):
    """Raised when the AWS session or service clients cannot be created."""

    pass


class CallerIdentityError(AwsError):
    """Raised when STS GetCallerIdentity fails."""

    pass


class BucketCreationError(AwsError):
    """Raised when S3 CreateBucket fails."""

    def __init__(self, message: str, bucket_name: str = None, error_code: str = None):
        super().__init__(message, error_code)
        self.bucket_name = bucket_name


class BucketAlreadyExistsError(BucketCreationError):
    """Raised when the bucket name is already taken, including by the caller."""

    def get_cleanup_command(self) -> str:
        """Get the AWS CLI command to remove the conflicting bucket, when it is ours."""
        if self.error_code == "BucketAlreadyOwnedByYou":
            return f"aws s3 rb s3://{self.bucket_name}"
        return ""


class ProvisioningError(AwsOidcStsError):
    """Raised when a step of the identity provider workflow fails."""

    def __init__(self, message: str, step: str = None):
        super().__init__(message)
        self.step = step

"""DynamoDB connection settings."""

from pydantic import Field

from infrastructure.configuration.base import IntegrationSettings


class AwsSettings(IntegrationSettings):
    """Connection settings shared by the DynamoDB notification and chat
    binding stores. Only read when one of those backends is ``dynamodb``.

    Environment Variables:
        AWS_REGION: Region of the tables (default: eu-central-1)
        AWS_DYNAMODB_ENDPOINT_URL: Endpoint override, e.g. DynamoDB Local
        AWS_DYNAMODB_MAX_RETRIES: In-place retries for throttled calls
        AWS_DYNAMODB_BACKOFF_SECONDS: Base of the exponential throttling backoff
    """

    AWS_REGION: str = Field(default="eu-central-1", alias="AWS_REGION")
    DYNAMODB_ENDPOINT_URL: str | None = Field(
        default=None, alias="AWS_DYNAMODB_ENDPOINT_URL"
    )
    DYNAMODB_MAX_RETRIES: int = Field(default=3, ge=0, alias="AWS_DYNAMODB_MAX_RETRIES")
    DYNAMODB_BACKOFF_SECONDS: float = Field(
        default=0.5, ge=0, alias="AWS_DYNAMODB_BACKOFF_SECONDS"
    )

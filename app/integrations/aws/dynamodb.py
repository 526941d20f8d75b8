"""DynamoDB client for notification and chat binding storage.

Provides access to the DynamoDB operations the stores need (get_item,
put_item, delete_item, query, scan) with consistent error handling and
OperationResult return types.
"""

import time
from typing import Any, Dict, List, Optional

import boto3  # type: ignore
from botocore.client import BaseClient  # type: ignore
from botocore.exceptions import BotoCoreError, ClientError  # type: ignore

from infrastructure.configuration.integrations import AwsSettings
from infrastructure.logging import get_module_logger
from infrastructure.operations import (
    CONDITION_FAILED,
    OperationResult,
    classify_aws_error,
)

logger = get_module_logger()


def _calculate_retry_delay(attempt: int, backoff_factor: float = 0.5) -> float:
    return backoff_factor * (2**attempt)


class DynamoDBClient:
    """Client for DynamoDB operations.

    All methods return OperationResult. Throttling is retried in place with a
    short backoff; every other failure is returned to the caller classified.

    Args:
        region_name: AWS region
        endpoint_url: Optional endpoint override (DynamoDB Local)
        max_retries: Retries for throttled calls
    """

    def __init__(
        self,
        region_name: str,
        endpoint_url: Optional[str] = None,
        max_retries: int = 3,
        backoff_factor: float = 0.5,
    ) -> None:
        self._region_name = region_name
        self._endpoint_url = endpoint_url
        self._max_retries = max_retries
        self._backoff_factor = backoff_factor
        self._client: Optional[BaseClient] = None

    @classmethod
    def from_settings(cls, settings: AwsSettings) -> "DynamoDBClient":
        return cls(
            region_name=settings.AWS_REGION,
            endpoint_url=settings.DYNAMODB_ENDPOINT_URL,
            max_retries=settings.DYNAMODB_MAX_RETRIES,
            backoff_factor=settings.DYNAMODB_BACKOFF_SECONDS,
        )

    @property
    def client(self) -> BaseClient:
        if self._client is None:
            client_config: Dict[str, Any] = {"region_name": self._region_name}
            if self._endpoint_url:
                client_config["endpoint_url"] = self._endpoint_url
            self._client = boto3.client("dynamodb", **client_config)
        return self._client

    def _execute(
        self, method: str, paginate_key: Optional[str] = None, **kwargs
    ) -> OperationResult:
        for attempt in range(self._max_retries + 1):
            try:
                if paginate_key:
                    paginator = self.client.get_paginator(method)
                    items: List[Any] = []
                    for page in paginator.paginate(**kwargs):
                        items.extend(page.get(paginate_key, []))
                    data: Any = items
                else:
                    data = getattr(self.client, method)(**kwargs)
                return OperationResult.success(
                    data=data, message=f"dynamodb.{method} succeeded"
                )

            except (ClientError, BotoCoreError) as e:
                result = classify_aws_error(e)
                if result.is_transient and attempt < self._max_retries:
                    delay = _calculate_retry_delay(attempt, self._backoff_factor)
                    logger.warning(
                        "dynamodb_api_retry",
                        method=method,
                        attempt=attempt + 1,
                        error=str(e),
                        delay=delay,
                    )
                    time.sleep(delay)
                    continue

                # Failed conditions are expected by the stores
                if result.error_code != CONDITION_FAILED:
                    logger.error(
                        "dynamodb_api_error_final",
                        method=method,
                        table=kwargs.get("TableName"),
                        error=str(e),
                        error_code=result.error_code,
                    )
                return result

        return OperationResult.transient_error(
            f"dynamodb.{method} retries exhausted", error_code="RETRIES_EXHAUSTED"
        )

    def get_item(
        self, table_name: str, Key: Dict[str, Any], **kwargs
    ) -> OperationResult:
        """Get an item; ``data`` is the raw response (``Item`` may be absent)."""
        return self._execute("get_item", TableName=table_name, Key=Key, **kwargs)

    def put_item(
        self, table_name: str, Item: Dict[str, Any], **kwargs
    ) -> OperationResult:
        return self._execute("put_item", TableName=table_name, Item=Item, **kwargs)

    def delete_item(
        self, table_name: str, Key: Dict[str, Any], **kwargs
    ) -> OperationResult:
        return self._execute("delete_item", TableName=table_name, Key=Key, **kwargs)

    def query(
        self, table_name: str, KeyConditionExpression: str, **kwargs
    ) -> OperationResult:
        """Query with automatic pagination; ``data`` is the list of items."""
        return self._execute(
            "query",
            paginate_key="Items",
            TableName=table_name,
            KeyConditionExpression=KeyConditionExpression,
            **kwargs,
        )

    def scan(self, table_name: str, **kwargs) -> OperationResult:
        """Scan with automatic pagination; ``data`` is the list of items."""
        return self._execute(
            "scan", paginate_key="Items", TableName=table_name, **kwargs
        )

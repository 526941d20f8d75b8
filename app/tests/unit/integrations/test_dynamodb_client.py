"""Unit tests for the DynamoDB client wrapper."""

from unittest.mock import MagicMock, patch

import pytest
from botocore.exceptions import ClientError

from infrastructure.configuration.integrations import AwsSettings
from integrations.aws.dynamodb import DynamoDBClient


def client_error(code):
    return ClientError({"Error": {"Code": code, "Message": code}}, "PutItem")


@pytest.fixture
def boto_client():
    return MagicMock()


@pytest.fixture
def client(boto_client):
    with patch("integrations.aws.dynamodb.boto3.client", return_value=boto_client):
        dynamodb = DynamoDBClient(region_name="eu-central-1", backoff_factor=0)
        assert dynamodb.client is boto_client
    return dynamodb


@pytest.mark.unit
class TestDynamoDBClient:
    def test_client_is_lazy_and_uses_endpoint(self):
        with patch("integrations.aws.dynamodb.boto3.client") as factory:
            dynamodb = DynamoDBClient("eu-central-1", endpoint_url="http://localhost:8000")
            factory.assert_not_called()

            _ = dynamodb.client

        factory.assert_called_once_with(
            "dynamodb", region_name="eu-central-1", endpoint_url="http://localhost:8000"
        )

    def test_put_item_success(self, client, boto_client):
        boto_client.put_item.return_value = {"ResponseMetadata": {}}

        result = client.put_item(table_name="t", Item={"pk": {"S": "x"}})

        assert result.is_success
        boto_client.put_item.assert_called_once_with(TableName="t", Item={"pk": {"S": "x"}})

    def test_condition_failure_is_returned(self, client, boto_client):
        boto_client.put_item.side_effect = client_error("ConditionalCheckFailedException")

        result = client.put_item(table_name="t", Item={})

        assert result.error_code == "ConditionalCheckFailedException"
        assert boto_client.put_item.call_count == 1

    def test_throttling_is_retried(self, client, boto_client):
        boto_client.get_item.side_effect = [
            client_error("ThrottlingException"),
            {"Item": {"pk": {"S": "x"}}},
        ]

        with patch("integrations.aws.dynamodb.time.sleep"):
            result = client.get_item(table_name="t", Key={"pk": {"S": "x"}})

        assert result.is_success
        assert result.data["Item"] == {"pk": {"S": "x"}}

    def test_query_paginates(self, client, boto_client):
        paginator = MagicMock()
        paginator.paginate.return_value = [{"Items": [1, 2]}, {"Items": [3]}]
        boto_client.get_paginator.return_value = paginator

        result = client.query(table_name="t", KeyConditionExpression="pk = :pk")

        assert result.data == [1, 2, 3]
        boto_client.get_paginator.assert_called_once_with("query")


@pytest.mark.unit
def test_from_settings():
    settings = AwsSettings(
        AWS_REGION="eu-west-1",
        AWS_DYNAMODB_ENDPOINT_URL="http://dynamodb:8000",
        AWS_DYNAMODB_MAX_RETRIES=5,
    )

    with patch("integrations.aws.dynamodb.boto3.client") as factory:
        DynamoDBClient.from_settings(settings).client

    factory.assert_called_once_with(
        "dynamodb", region_name="eu-west-1", endpoint_url="http://dynamodb:8000"
    )

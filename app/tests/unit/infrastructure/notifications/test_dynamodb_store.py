"""Unit tests for the DynamoDB notification store."""

from unittest.mock import MagicMock

import pytest

from infrastructure.notifications.dynamodb_store import (
    STATUS_INDEX,
    DynamoDBNotificationStore,
    NotificationStoreError,
)
from infrastructure.notifications.errors import InvalidTransition
from infrastructure.notifications.models import DeliveryState, Priority
from infrastructure.operations import OperationResult
from integrations.aws.dynamodb import DynamoDBClient


def condition_failed() -> OperationResult:
    return OperationResult.permanent_error(
        "DynamoDB condition not met", error_code="ConditionalCheckFailedException"
    )


@pytest.fixture
def dynamodb_client():
    client = MagicMock(spec=DynamoDBClient)
    client.put_item.return_value = OperationResult.success(data={})
    client.delete_item.return_value = OperationResult.success(data={})
    return client


@pytest.fixture
def store(dynamodb_client, clock):
    return DynamoDBNotificationStore(
        client=dynamodb_client, table_name="notifications", clock=clock
    )


def stored_item(notification):
    return {"Item": DynamoDBNotificationStore._to_item(notification)}


@pytest.mark.unit
class TestCreate:
    def test_writes_guard_then_record(
        self, store, dynamodb_client, notification_factory
    ):
        notification = notification_factory(fingerprint="fp-1")

        assert store.create(notification) is True

        guard_call, record_call = dynamodb_client.put_item.call_args_list
        assert guard_call.kwargs["Item"]["pk"] == {"S": "fingerprint#fp-1"}
        assert "expires_at < :now" in guard_call.kwargs["ConditionExpression"]
        assert record_call.kwargs["Item"]["pk"] == {
            "S": f"notification#{notification.id}"
        }
        assert record_call.kwargs["Item"]["status"] == {"S": "pending"}
        assert record_call.kwargs["Item"]["next_retry_at"] == {"N": "0"}

    def test_live_guard_refuses_duplicate(
        self, store, dynamodb_client, notification_factory
    ):
        dynamodb_client.put_item.return_value = condition_failed()

        assert store.create(notification_factory(fingerprint="fp-1")) is False
        assert dynamodb_client.put_item.call_count == 1

    def test_record_without_fingerprint_skips_guard(
        self, store, dynamodb_client, notification_factory
    ):
        store.create(notification_factory())

        assert dynamodb_client.put_item.call_count == 1

    def test_store_error_raises(self, store, dynamodb_client, notification_factory):
        dynamodb_client.put_item.return_value = OperationResult.transient_error(
            "throttled", error_code="RATE_LIMITED"
        )

        with pytest.raises(NotificationStoreError):
            store.create(notification_factory(fingerprint="fp-1"))

    def test_failed_record_write_releases_guard(
        self, store, dynamodb_client, notification_factory
    ):
        dynamodb_client.put_item.side_effect = [
            OperationResult.success(data={}),
            OperationResult.transient_error("throttled", error_code="RATE_LIMITED"),
        ]
        notification = notification_factory(fingerprint="fp-1")

        with pytest.raises(NotificationStoreError):
            store.create(notification)

        kwargs = dynamodb_client.delete_item.call_args.kwargs
        assert kwargs["Key"] == {"pk": {"S": "fingerprint#fp-1"}}
        assert kwargs["ExpressionAttributeValues"] == {":id": {"S": notification.id}}

    def test_guard_write_error_leaves_nothing_to_release(
        self, store, dynamodb_client, notification_factory
    ):
        dynamodb_client.put_item.return_value = OperationResult.transient_error(
            "throttled", error_code="RATE_LIMITED"
        )

        with pytest.raises(NotificationStoreError):
            store.create(notification_factory(fingerprint="fp-1"))

        dynamodb_client.delete_item.assert_not_called()


@pytest.mark.unit
class TestFingerprintLookup:
    def test_missing_guard(self, store, dynamodb_client):
        dynamodb_client.get_item.return_value = OperationResult.success(data={})
        assert store.has_recent_fingerprint("fp-1") is False

    def test_live_guard(self, store, dynamodb_client, clock):
        expires_at = int(clock().timestamp()) + 3600
        dynamodb_client.get_item.return_value = OperationResult.success(
            data={"Item": {"expires_at": {"N": str(expires_at)}}}
        )
        assert store.has_recent_fingerprint("fp-1") is True

    def test_expired_guard(self, store, dynamodb_client, clock):
        expires_at = int(clock().timestamp()) - 1
        dynamodb_client.get_item.return_value = OperationResult.success(
            data={"Item": {"expires_at": {"N": str(expires_at)}}}
        )
        assert store.has_recent_fingerprint("fp-1") is False


@pytest.mark.unit
class TestTransitions:
    def test_get_round_trips_body(self, store, dynamodb_client, notification_factory):
        notification = notification_factory(priority=Priority.HIGH)
        dynamodb_client.get_item.return_value = OperationResult.success(
            data=stored_item(notification)
        )

        assert store.get(notification.id) == notification

    def test_mark_sending_is_conditional_on_status(
        self, store, dynamodb_client, notification_factory
    ):
        notification = notification_factory()
        dynamodb_client.get_item.return_value = OperationResult.success(
            data=stored_item(notification)
        )

        updated = store.mark_sending(notification.id)

        assert updated.status == DeliveryState.SENDING
        kwargs = dynamodb_client.put_item.call_args.kwargs
        assert kwargs["ConditionExpression"] == "#status = :current"
        assert kwargs["ExpressionAttributeValues"] == {":current": {"S": "pending"}}

    def test_concurrent_change_raises_invalid_transition(
        self, store, dynamodb_client, notification_factory
    ):
        notification = notification_factory()
        dynamodb_client.get_item.return_value = OperationResult.success(
            data=stored_item(notification)
        )
        dynamodb_client.put_item.return_value = condition_failed()

        with pytest.raises(InvalidTransition):
            store.mark_sending(notification.id)

    def test_illegal_transition_is_not_written(
        self, store, dynamodb_client, notification_factory
    ):
        notification = notification_factory()
        dynamodb_client.get_item.return_value = OperationResult.success(
            data=stored_item(notification)
        )

        with pytest.raises(InvalidTransition):
            store.mark_delivered(notification.id)
        dynamodb_client.put_item.assert_not_called()

    def test_failed_record_releases_guard(
        self, store, dynamodb_client, notification_factory
    ):
        notification = notification_factory(fingerprint="fp-1")
        dynamodb_client.get_item.return_value = OperationResult.success(
            data=stored_item(notification)
        )

        store.mark_failed(notification.id, "already resolved")

        kwargs = dynamodb_client.delete_item.call_args.kwargs
        assert kwargs["Key"] == {"pk": {"S": "fingerprint#fp-1"}}
        assert kwargs["ExpressionAttributeValues"] == {
            ":id": {"S": notification.id}
        }

    def test_unknown_record(self, store, dynamodb_client):
        dynamodb_client.get_item.return_value = OperationResult.success(data={})

        with pytest.raises(KeyError):
            store.mark_sending("missing")


@pytest.mark.unit
class TestFetchDue:
    def test_queries_pending_and_retry(
        self, store, dynamodb_client, notification_factory
    ):
        normal = notification_factory(priority=Priority.NORMAL)
        urgent = notification_factory(priority=Priority.URGENT)
        dynamodb_client.query.side_effect = [
            OperationResult.success(data=[stored_item(normal)["Item"]]),
            OperationResult.success(data=[stored_item(urgent)["Item"]]),
        ]

        due = store.fetch_due()

        assert [r.id for r in due] == [urgent.id, normal.id]
        statuses = [
            c.kwargs["ExpressionAttributeValues"][":status"]["S"]
            for c in dynamodb_client.query.call_args_list
        ]
        assert statuses == ["pending", "retry"]
        assert dynamodb_client.query.call_args.kwargs["IndexName"] == STATUS_INDEX

    def test_query_error_is_skipped(self, store, dynamodb_client):
        dynamodb_client.query.return_value = OperationResult.transient_error("down")

        assert store.fetch_due() == []


@pytest.mark.unit
def test_list_for_hotel(store, dynamodb_client, notification_factory):
    notification = notification_factory()
    dynamodb_client.scan.return_value = OperationResult.success(
        data=[stored_item(notification)["Item"]]
    )

    assert store.list_for_hotel("hotel-1") == [notification]
    assert dynamodb_client.scan.call_args.kwargs["ExpressionAttributeValues"][
        ":hotel"
    ] == {"S": "hotel-1"}

from unittest.mock import MagicMock

import pytest

from infrastructure.operations import OperationResult
from modules.telegram import BotCommandHandler, TelegramPoller


@pytest.fixture
def handler():
    return MagicMock(spec=BotCommandHandler)


@pytest.fixture
def poller(mock_telegram, handler):
    return TelegramPoller(mock_telegram, handler, timeout=0, interval=0.01)


@pytest.mark.unit
def test_poll_once_advances_offset(poller, mock_telegram, handler):
    mock_telegram.get_updates.return_value = OperationResult.success(
        data=[{"update_id": 10}, {"update_id": 11}]
    )

    assert poller.poll_once() == 2
    assert poller.offset == 12
    assert handler.process_update.call_count == 2
    mock_telegram.get_updates.assert_called_once_with(offset=0, timeout=0)


@pytest.mark.unit
def test_failed_update_still_advances_offset(poller, mock_telegram, handler):
    mock_telegram.get_updates.return_value = OperationResult.success(
        data=[{"update_id": 5}]
    )
    handler.process_update.side_effect = RuntimeError("boom")

    assert poller.poll_once() == 0
    assert poller.offset == 6


@pytest.mark.unit
def test_poll_error_returns_zero(poller, mock_telegram):
    mock_telegram.get_updates.return_value = OperationResult.transient_error("down")

    assert poller.poll_once() == 0
    assert poller.offset == 0


@pytest.mark.unit
def test_start_and_stop(poller):
    poller.start()
    assert poller.running

    poller.stop()
    assert not poller.running

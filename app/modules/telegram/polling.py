"""Long-poll loop for chat-bot updates.

Development only. Telegram delivers each update to a single consumer, so
only one process may poll a bot token at a time; production deployments
use the webhook route instead.
"""

import threading
from typing import Optional

from infrastructure.logging import get_module_logger
from integrations.telegram import TelegramClient
from modules.telegram.commands import BotCommandHandler

logger = get_module_logger()


class TelegramPoller:
    """Background ``getUpdates`` loop feeding the command handler.

    Attributes:
        offset: Next update id to request
        timeout: Long-poll timeout passed to ``getUpdates``
        interval: Pause between polls, in seconds
    """

    def __init__(
        self,
        client: TelegramClient,
        handler: BotCommandHandler,
        timeout: int = 30,
        interval: float = 2.0,
    ):
        self.client = client
        self.handler = handler
        self.timeout = timeout
        self.interval = interval
        self.offset = 0
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def poll_once(self) -> int:
        """Fetch and process one page of updates.

        Returns:
            Number of updates processed
        """
        result = self.client.get_updates(offset=self.offset, timeout=self.timeout)
        if not result.is_success:
            logger.warning("telegram_poll_failed", error=result.message)
            return 0

        processed = 0
        for update in TelegramClient.updates(result):
            self.offset = update["update_id"] + 1
            try:
                self.handler.process_update(update)
                processed += 1
            except Exception as e:  # pylint: disable=broad-except
                logger.error(
                    "telegram_update_failed",
                    update_id=update.get("update_id"),
                    error=str(e),
                    exc_info=True,
                )
        return processed

    def _run(self) -> None:
        while not self._stop_event.is_set():
            try:
                self.poll_once()
            except Exception as e:  # pylint: disable=broad-except
                logger.error("telegram_poll_exception", error=str(e))
            self._stop_event.wait(self.interval)

    def start(self) -> None:
        if self.running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run, daemon=True, name="telegram-polling"
        )
        self._thread.start()
        logger.info("telegram_polling_started", interval=self.interval)

    def stop(self) -> None:
        self._stop_event.set()
        self._thread = None
        logger.info("telegram_polling_stopped")

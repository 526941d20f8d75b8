"""Chat-bot command handling.

Processes Telegram updates delivered by the webhook route or the
development poller:

- ``my_chat_member`` about the bot: register or deactivate the chat
- ``/link hotel:<code> [department:<code>]``: bind the chat
- ``/unlink``, ``/status``, ``/help``, ``/start``
"""

import re
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from infrastructure.logging import get_module_logger
from infrastructure.notifications.models import ChatBinding, utcnow
from infrastructure.persistence.chat_bindings import ChatBindingStore
from infrastructure.persistence.repositories import DepartmentRepository, HotelRepository
from integrations.telegram import TelegramClient
from modules.telegram import messages

logger = get_module_logger()

HOTEL_PATTERN = re.compile(r"hotel:(\S+)", re.IGNORECASE)
DEPARTMENT_PATTERN = re.compile(r"department:(\S+)", re.IGNORECASE)

JOINED_STATUSES = {"member", "administrator"}
LEFT_STATUSES = {"left", "kicked"}


def parse_command(text: str) -> Optional[str]:
    """Return the command name (``/link``) without any ``@botname`` suffix."""
    if not text.startswith("/"):
        return None
    return text.split()[0].split("@", 1)[0].lower()


class BotCommandHandler:
    """Handles inbound chat-bot updates.

    Attributes:
        client: Telegram gateway used for replies
        bindings: Chat binding storage
        hotels: Hotel lookup for ``/link``
        departments: Department lookup for ``/link``
    """

    def __init__(
        self,
        client: TelegramClient,
        bindings: ChatBindingStore,
        hotels: HotelRepository,
        departments: DepartmentRepository,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.client = client
        self.bindings = bindings
        self.hotels = hotels
        self.departments = departments
        self._clock = clock

    def process_update(self, update: Dict[str, Any]) -> Optional[str]:
        """Dispatch one update.

        Returns:
            Name of the action taken, or None if the update was ignored
        """
        if update.get("my_chat_member"):
            return self.handle_chat_member_update(update["my_chat_member"])
        if update.get("message"):
            return self.handle_message(update["message"])
        if update.get("callback_query"):
            logger.debug(
                "telegram_callback_ignored",
                callback_id=update["callback_query"].get("id"),
            )
        return None

    def reply(self, chat_id: int, text: str) -> None:
        result = self.client.send_message(chat_id, text)
        if not result.is_success:
            logger.warning("telegram_reply_failed", chat_id=chat_id, error=result.message)

    # Membership

    def handle_chat_member_update(self, member_update: Dict[str, Any]) -> Optional[str]:
        me = self.client.get_me()
        if not me.is_success:
            logger.warning("telegram_get_me_failed", error=me.message)
            return None

        new_member = member_update.get("new_chat_member") or {}
        if (new_member.get("user") or {}).get("id") != me.data.get("id"):
            return None

        chat = member_update.get("chat") or {}
        chat_id = chat["id"]
        chat_type = chat.get("type", "group")
        chat_title = chat.get("title") or chat.get("first_name") or "Private Chat"
        status = new_member.get("status")

        if status in JOINED_STATUSES:
            self.register_chat(chat_id, chat_type, chat_title)
            self.reply(chat_id, messages.welcome(chat_type))
            logger.info("telegram_bot_added", chat_id=chat_id, chat_type=chat_type)
            return "registered"

        if status in LEFT_STATUSES:
            self.mark_chat_inactive(chat_id)
            logger.info("telegram_bot_removed", chat_id=chat_id, chat_type=chat_type)
            return "removed"

        return None

    def register_chat(self, chat_id: int, chat_type: str, chat_title: str) -> ChatBinding:
        existing = self.bindings.get(chat_id)
        if existing:
            binding = existing.model_copy(
                update={
                    "chat_type": chat_type,
                    "chat_title": chat_title,
                    "is_active": True,
                    "bot_removed": False,
                }
            )
        else:
            binding = ChatBinding(
                chat_id=chat_id,
                chat_type=chat_type,
                chat_title=chat_title,
                added_at=self._clock(),
            )
        return self.bindings.upsert(binding)

    def mark_chat_inactive(self, chat_id: int) -> None:
        existing = self.bindings.get(chat_id)
        if existing is None:
            return
        self.bindings.upsert(
            existing.model_copy(update={"is_active": False, "bot_removed": True})
        )

    # Commands

    def handle_message(self, message: Dict[str, Any]) -> Optional[str]:
        text = (message.get("text") or "").strip()
        command = parse_command(text)
        if command is None:
            return None

        chat = message.get("chat") or {}
        chat_id = chat["id"]
        logger.info("telegram_command_received", chat_id=chat_id, command=command)

        try:
            return self._run_command(command, chat_id, chat.get("type", "group"), text)
        except Exception as e:  # pylint: disable=broad-except
            logger.error(
                "telegram_command_failed",
                chat_id=chat_id,
                command=command,
                error=str(e),
                exc_info=True,
            )
            self.reply(chat_id, messages.error(str(e)))
            return "error"

    def _run_command(
        self, command: str, chat_id: int, chat_type: str, text: str
    ) -> Optional[str]:
        if command == "/link":
            return self.handle_link(chat_id, chat_type, text)
        if command == "/unlink":
            return self.handle_unlink(chat_id)
        if command == "/status":
            return self.handle_status(chat_id)
        if command in ("/help", "/start"):
            self.reply(chat_id, messages.HELP)
            return "help"
        return None

    def handle_link(self, chat_id: int, chat_type: str, text: str) -> str:
        hotel_match = HOTEL_PATTERN.search(text)
        department_match = DEPARTMENT_PATTERN.search(text)

        if not hotel_match:
            self.reply(chat_id, messages.LINK_FORMAT_ERROR)
            return "link_format_error"

        hotel_code = hotel_match.group(1)
        hotel = self.hotels.find_hotel(hotel_code)
        if hotel is None:
            self.reply(chat_id, messages.hotel_not_found(hotel_code))
            return "hotel_not_found"

        department = None
        if department_match:
            department_code = department_match.group(1)
            department = self.departments.find_department(hotel.id, department_code)
            if department is None:
                self.reply(
                    chat_id, messages.department_not_found(department_code, hotel.name)
                )
                return "department_not_found"

        existing = self.bindings.get(chat_id) or ChatBinding(
            chat_id=chat_id,
            chat_type=chat_type,
            chat_title="Linked Chat",
            added_at=self._clock(),
        )
        self.bindings.upsert(
            existing.model_copy(
                update={
                    "hotel_id": hotel.id,
                    "department_id": department.id if department else None,
                    "is_active": True,
                    "bot_removed": False,
                }
            )
        )

        logger.info(
            "telegram_chat_linked",
            chat_id=chat_id,
            hotel_id=hotel.id,
            department_id=department.id if department else None,
        )
        self.reply(chat_id, messages.linked(hotel.name, department.name if department else None))
        return "linked"

    def handle_unlink(self, chat_id: int) -> str:
        existing = self.bindings.get(chat_id)
        if existing:
            self.bindings.upsert(
                existing.model_copy(update={"hotel_id": None, "department_id": None})
            )
        logger.info("telegram_chat_unlinked", chat_id=chat_id)
        self.reply(chat_id, messages.UNLINKED)
        return "unlinked"

    def handle_status(self, chat_id: int) -> str:
        binding = self.bindings.get(chat_id)
        if binding is None:
            self.reply(chat_id, messages.STATUS_NOT_REGISTERED)
            return "status"

        hotel = self.hotels.get_hotel(binding.hotel_id) if binding.hotel_id else None
        department = (
            self.departments.get_department(binding.department_id)
            if binding.department_id
            else None
        )
        self.reply(
            chat_id,
            messages.status(
                chat_id,
                binding.is_active,
                hotel.name if hotel else None,
                department.name if department else None,
                binding.notification_types,
            ),
        )
        return "status"

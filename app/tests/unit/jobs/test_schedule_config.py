"""Unit tests for send time and timezone resolution."""

import pytest

from infrastructure.notifications.errors import ValidationError
from infrastructure.persistence.memory import InMemoryCatalog
from jobs import schedule_config


@pytest.fixture
def settings():
    return InMemoryCatalog()


@pytest.mark.unit
class TestValidation:
    @pytest.mark.parametrize("value", ["00:00", "09:30", "23:59"])
    def test_valid_send_times(self, value):
        assert schedule_config.validate_send_time(value) == value

    @pytest.mark.parametrize("value", ["24:00", "9:30", "09:60", "0930", ""])
    def test_invalid_send_times(self, value):
        with pytest.raises(ValidationError):
            schedule_config.validate_send_time(value)

    def test_unknown_timezone(self):
        with pytest.raises(ValidationError):
            schedule_config.validate_timezone("Mars/Olympus")

    def test_known_timezone(self):
        assert schedule_config.validate_timezone("Europe/Moscow") == "Europe/Moscow"


@pytest.mark.unit
class TestResolveSendTime:
    def test_default(self, settings):
        assert schedule_config.resolve_send_time(settings) == "09:00"

    def test_telegram_key_wins(self, settings):
        settings.set_setting("notify.sendTime", '"08:00"')
        settings.set_setting("notify.telegram.sendTime", '"07:15"')

        assert schedule_config.resolve_send_time(settings) == "07:15"

    def test_hotel_scope_wins(self, settings):
        settings.set_setting("notify.sendTime", '"08:00"')
        settings.set_setting("notify.sendTime", '"10:30"', hotel_id="hotel-1")

        assert schedule_config.resolve_send_time(settings, "hotel-1") == "10:30"
        assert schedule_config.resolve_send_time(settings) == "08:00"

    def test_invalid_value_is_skipped(self, settings):
        settings.set_setting("notify.telegram.sendTime", '"25:00"')
        settings.set_setting("notify.sendTime", "06:45")

        assert schedule_config.resolve_send_time(settings) == "06:45"


@pytest.mark.unit
class TestResolveTimezone:
    def test_setting_wins(self, settings):
        settings.set_setting("display.timezone", '"Europe/Moscow"')

        assert schedule_config.resolve_timezone(settings, environ={}) == "Europe/Moscow"

    def test_host_timezone_from_env(self, settings, tmp_path):
        settings.set_setting("locale.timezone", '"Nowhere/City"')

        result = schedule_config.resolve_timezone(
            settings,
            environ={"TZ": ":Asia/Tokyo"},
            timezone_file=str(tmp_path / "missing"),
        )

        assert result == "Asia/Tokyo"

    def test_host_timezone_from_file(self, settings, tmp_path):
        timezone_file = tmp_path / "timezone"
        timezone_file.write_text("Europe/Berlin\n", encoding="utf-8")

        result = schedule_config.resolve_timezone(
            settings, environ={}, timezone_file=str(timezone_file)
        )

        assert result == "Europe/Berlin"

    def test_fallback(self, settings, tmp_path):
        result = schedule_config.resolve_timezone(
            settings, environ={"TZ": "bogus"}, timezone_file=str(tmp_path / "missing")
        )

        assert result == "Asia/Almaty"

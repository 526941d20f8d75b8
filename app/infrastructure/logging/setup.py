"""structlog configuration.

Development renders coloured console lines; production renders one JSON
object per line for the log shipper. Under pytest nothing is emitted.
"""

import inspect
import logging
import sys
from typing import TYPE_CHECKING, Any, List, Optional

import structlog
from structlog.stdlib import BoundLogger

from infrastructure.logging.formatters import (
    add_app_info,
    mask_sensitive_data,
    truncate_large_values,
)

if TYPE_CHECKING:
    from infrastructure.configuration import Settings

APP_NAME = "freshtrack-notifications"

# Client libraries that log every request at INFO/DEBUG
NOISY_LOGGERS = ("urllib3", "botocore", "boto3", "schedule")

SILENCED = logging.CRITICAL + 1


def _is_test_environment() -> bool:
    return "pytest" in sys.modules


def build_processors(app_version: str, json_output: bool) -> List[Any]:
    """Processor chain shared by both renderers."""
    processors: List[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.CallsiteParameterAdder(
            parameters=[
                structlog.processors.CallsiteParameter.FILENAME,
                structlog.processors.CallsiteParameter.LINENO,
                structlog.processors.CallsiteParameter.FUNC_NAME,
            ]
        ),
        add_app_info(APP_NAME, app_version),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        # Runs after format_exc_info so tracebacks are masked as well
        mask_sensitive_data(),
        truncate_large_values(),
    ]
    if json_output:
        processors.append(structlog.processors.JSONRenderer(ensure_ascii=False))
    else:
        processors.append(structlog.dev.ConsoleRenderer())
    return processors


def configure_logging(
    log_level: Optional[str] = None,
    is_production: Optional[bool] = None,
    settings: Optional["Settings"] = None,
) -> BoundLogger:
    """Configure structlog and the stdlib root logger once at startup.

    Args:
        log_level: Overrides settings.LOG_LEVEL.
        is_production: Overrides settings.is_production (JSON output).
        settings: Loaded from the environment when omitted.
    """
    if _is_test_environment():
        structlog.configure(
            processors=[
                structlog.stdlib.add_log_level,
                structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
            ],
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )
        logging.basicConfig(format="%(message)s", level=SILENCED, force=True)
        return structlog.stdlib.get_logger()

    if settings is None:
        from infrastructure.configuration import Settings

        settings = Settings()

    json_output = settings.is_production if is_production is None else is_production
    level_name = (log_level or settings.LOG_LEVEL).upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        level = logging.INFO

    structlog.configure(
        processors=build_processors(settings.GIT_SHA, json_output),
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    logging.basicConfig(format="%(message)s", level=level)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    return structlog.stdlib.get_logger()


def get_module_logger() -> BoundLogger:
    """Logger bound to the calling module.

    ``component`` is the last dotted segment (``evaluator``) and
    ``module_path`` the full name (``modules.expiry.evaluator``).
    """
    logger = structlog.stdlib.get_logger()
    caller = inspect.currentframe()
    caller = caller.f_back if caller is not None else None
    module_name = caller.f_globals.get("__name__") if caller is not None else None
    if not module_name:
        return logger.bind(component="unknown")
    return logger.bind(component=module_name.rsplit(".", 1)[-1], module_path=module_name)

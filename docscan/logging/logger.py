import logging
import logging.handlers
import sys
from pathlib import Path

_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"
_STDOUT_HANDLER = "docscan-stdout"
_FILE_HANDLER = "docscan-file"


class Log:
    """Pipeline-wide logging facade.

    Keyword arguments are rendered as ``key=value`` context after the message,
    e.g. ``Log.warning("Capture failed", device_id="epson:001", ordinal=2)``.
    """

    _logger: logging.Logger = logging.getLogger("docscan")

    @classmethod
    def configure(
        cls,
        log_level: str,
        log_file: str | None = None,
        max_bytes: int = 10 * 1024 * 1024,
        backup_count: int = 5,
    ) -> None:
        """Attach the stdout handler and, with *log_file*, a rotating file handler.

        Repeated calls update the level and never add a handler twice.
        """
        cls._logger.setLevel(log_level.upper())
        cls._logger.propagate = False
        formatter = logging.Formatter(_FORMAT)
        attached = {handler.get_name() for handler in cls._logger.handlers}
        if _STDOUT_HANDLER not in attached:
            handler = logging.StreamHandler(sys.stdout)
            handler.set_name(_STDOUT_HANDLER)
            handler.setFormatter(formatter)
            cls._logger.addHandler(handler)
        if log_file and _FILE_HANDLER not in attached:
            path = Path(log_file)
            path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.handlers.RotatingFileHandler(
                path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
            )
            file_handler.set_name(_FILE_HANDLER)
            file_handler.setFormatter(formatter)
            cls._logger.addHandler(file_handler)

    @staticmethod
    def _render(message: str, context: dict[str, object]) -> str:
        if not context:
            return message
        pairs = " ".join(f"{key}={value}" for key, value in context.items())
        return f"{message} | {pairs}"

    @classmethod
    def info(cls, message: str, **context: object) -> None:
        cls._logger.info(cls._render(message, context))

    @classmethod
    def error(cls, message: str, **context: object) -> None:
        cls._logger.error(cls._render(message, context))

    @classmethod
    def warning(cls, message: str, **context: object) -> None:
        cls._logger.warning(cls._render(message, context))

    @classmethod
    def debug(cls, message: str, **context: object) -> None:
        cls._logger.debug(cls._render(message, context))

import logging
import sys

_RESERVED_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({})))


class _ContextFormatter(logging.Formatter):
    """Appends `extra` context fields to the message as key=value pairs."""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        context = {
            key: value
            for key, value in vars(record).items()
            if key not in _RESERVED_RECORD_ATTRS and key not in ("message", "asctime")
        }
        if not context:
            return message
        pairs = " ".join(f"{key}={value}" for key, value in sorted(context.items()))
        return f"{message} | {pairs}"


class Log:
    """Centralized logging for the shard worker.

    Every record carries the shard label so interleaved output of parallel
    task instances can be told apart in the aggregated job log.
    """

    _logger: logging.Logger = logging.getLogger("slideshow_processor")

    @classmethod
    def configure(cls, log_level: str, shard_label: str = "-") -> None:
        """Configure level, stdout handler and shard label (e.g. "2/8")."""
        cls._logger.setLevel(log_level.upper())
        formatter = _ContextFormatter(
            f"%(asctime)s [%(levelname)s] [shard {shard_label}] %(message)s"
        )
        if not cls._logger.handlers:
            handler = logging.StreamHandler(sys.stdout)
            cls._logger.addHandler(handler)
        for handler in cls._logger.handlers:
            handler.setFormatter(formatter)

    @classmethod
    def info(cls, message: str, **context: object) -> None:
        cls._logger.info(message, extra=context)

    @classmethod
    def error(cls, message: str, **context: object) -> None:
        cls._logger.error(message, extra=context)

    @classmethod
    def warning(cls, message: str, **context: object) -> None:
        cls._logger.warning(message, extra=context)

    @classmethod
    def debug(cls, message: str, **context: object) -> None:
        cls._logger.debug(message, extra=context)

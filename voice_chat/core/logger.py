import json
import logging
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

from voice_chat.config.paths import logs_dir
from voice_chat.config.settings import get_settings
from voice_chat.core.trace import get_trace_id


class JsonFormatter(logging.Formatter):
    """Serialize log records as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        log_record = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "category": record.name,
            "message": record.getMessage(),
            "trace_id": get_trace_id(),
        }
        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_record, ensure_ascii=False)


class SizeAndTimeRotatingFileHandler(TimedRotatingFileHandler):
    """Rotate on midnight or once the file exceeds max_bytes."""

    def __init__(
        self,
        filename: str | Path,
        max_bytes: int = 0,
        backup_count: int = 0,
        when: str = "midnight",
        encoding: str | None = "utf-8",
        delay: bool = True,
    ) -> None:
        self.maxBytes = max_bytes
        super().__init__(
            str(filename),
            when=when,
            backupCount=backup_count,
            encoding=encoding,
            delay=delay,
        )

    def shouldRollover(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        if self.maxBytes > 0:
            if self.stream is None:  # pragma: no cover - delayed open
                self.stream = self._open()
            msg = f"{self.format(record)}\n"
            if (self.stream.tell() + len(msg.encode(self.encoding or "utf-8"))) >= self.maxBytes:
                return True
        return super().shouldRollover(record)


def _build_logger(name: str) -> logging.Logger:
    logger = logging.getLogger(f"voice_chat.{name}")
    if logger.handlers:
        return logger

    settings = get_settings()
    handler = SizeAndTimeRotatingFileHandler(
        logs_dir(settings) / f"{name}.jsonl",
        max_bytes=settings.log_rotate_mb * 1024 * 1024,
        backup_count=settings.log_retention_days,
    )
    handler.setFormatter(JsonFormatter())
    logger.setLevel(logging.getLevelName(settings.log_level.upper()))
    logger.addHandler(handler)
    return logger


_LOGGERS: dict[str, logging.Logger] = {}


def get_logger(name: str) -> logging.Logger:
    """Return the named logger, creating its file handler on first use."""
    if name not in _LOGGERS:
        _LOGGERS[name] = _build_logger(name)
    return _LOGGERS[name]

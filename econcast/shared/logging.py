import json
import logging
import os
from logging.handlers import RotatingFileHandler

ROOT_LOGGER_NAME = "econcast"
DATA_INTEGRITY_LEVEL_NUM = 35
DEFAULT_LOG_BACKUP_COUNT = 10
DEFAULT_LOG_MAX_BYTES = 5 * 1024 * 1024

_TEXT_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

logging.addLevelName(DATA_INTEGRITY_LEVEL_NUM, "DATA_INTEGRITY")


class _StructuredFormatter(logging.Formatter):
    """Render dict messages as compact JSON objects, other messages as text."""

    def __init__(self, json_logs: bool):
        super().__init__(_TEXT_FORMAT, datefmt=_DATE_FORMAT)
        self.json_logs = json_logs

    def format(self, record: logging.LogRecord) -> str:
        if not self.json_logs:
            return super().format(record)
        payload = {
            "ts": self.formatTime(record, _DATE_FORMAT),
            "level": record.levelname,
            "logger": record.name,
        }
        if isinstance(record.msg, dict):
            payload.update(record.msg)
        else:
            payload["message"] = record.getMessage()
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str, sort_keys=True)


def install_data_integrity_level() -> None:
    """Register the DATA_INTEGRITY level and a ``Logger.data_integrity`` method."""
    logging.addLevelName(DATA_INTEGRITY_LEVEL_NUM, "DATA_INTEGRITY")

    def data_integrity(self, message, *args, **kws):
        if self.isEnabledFor(DATA_INTEGRITY_LEVEL_NUM):
            self._log(DATA_INTEGRITY_LEVEL_NUM, message, args, **kws)

    logging.Logger.data_integrity = data_integrity


def setup_logging(
    level: str = "INFO",
    log_dir: str | None = None,
    json_logs: bool = False,
    max_bytes: int = DEFAULT_LOG_MAX_BYTES,
) -> logging.Logger:
    install_data_integrity_level()

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(level.upper())
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    formatter = _StructuredFormatter(json_logs)

    console = logging.StreamHandler()
    console.setFormatter(formatter)
    logger.addHandler(console)

    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        file_handler = RotatingFileHandler(
            os.path.join(log_dir, "econcast.log"),
            maxBytes=max_bytes,
            backupCount=DEFAULT_LOG_BACKUP_COUNT,
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger

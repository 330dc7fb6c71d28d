import json
import logging
import os
import threading
from pathlib import Path


ROOT_LOGGER_NAME = "storefront"

# JSON key -> LogRecord attribute
RECORD_FIELDS = {
    "timestamp": "asctime",
    "level": "levelname",
    "logger": "name",
    "module": "module",
    "function": "funcName",
    "line": "lineno",
    "message": "message",
}


class JsonFormatter(logging.Formatter):
    """Renders each record as a single JSON object, one per line."""

    default_time_format = "%Y-%m-%dT%H:%M:%S"
    default_msec_format = "%s.%03dZ"

    def __init__(self, fields: dict = None):
        super().__init__()
        self.fields = dict(fields or {"message": "message"})

    def usesTime(self) -> bool:
        return "asctime" in self.fields.values()

    def format(self, record) -> str:
        record.message = record.getMessage()
        if self.usesTime():
            record.asctime = self.formatTime(record)

        payload = {key: getattr(record, attr, None) for key, attr in self.fields.items()}

        if record.exc_info and not record.exc_text:
            record.exc_text = self.formatException(record.exc_info)
        if record.exc_text:
            payload["exc_info"] = record.exc_text
        if record.stack_info:
            payload["stack_info"] = self.formatStack(record.stack_info)

        return json.dumps(payload, default=str)


class SingletonLogger:
    """
    Process-wide owner of the `storefront` logger.

    Handlers are attached once, on first use. Module loggers such as
    `storefront.ordering.placement` are plain children that propagate
    their records up to those handlers.
    """
    _instance = None
    _lock = threading.Lock()

    def __new__(cls):
        with cls._lock:
            if cls._instance is None:
                cls._instance = super().__new__(cls)
                cls._instance._root = None
        return cls._instance

    def get_logger(self, name: str = ROOT_LOGGER_NAME) -> logging.Logger:
        with self._lock:
            if self._root is None:
                self._root = self._configure_root()

        if not name or name == ROOT_LOGGER_NAME:
            return self._root
        if not name.startswith(ROOT_LOGGER_NAME + "."):
            name = f"{ROOT_LOGGER_NAME}.{name}"
        return logging.getLogger(name)

    @staticmethod
    def _configure_root() -> logging.Logger:
        root = logging.getLogger(ROOT_LOGGER_NAME)
        root.setLevel(logging.DEBUG)
        root.handlers.clear()

        formatter = JsonFormatter(RECORD_FIELDS)
        log_dir = Path(os.environ.get("STOREFRONT_LOG_DIR", "logs"))
        log_dir.mkdir(parents=True, exist_ok=True)
        console_level = os.environ.get("STOREFRONT_LOG_LEVEL", "INFO").upper()

        # log files are truncated on every start
        handlers = [
            (logging.FileHandler(log_dir / "storefront.log", mode="w", encoding="utf-8"), logging.INFO),
            (logging.FileHandler(log_dir / "errors.log", mode="w", encoding="utf-8"), logging.ERROR),
            (logging.StreamHandler(), getattr(logging, console_level, logging.INFO)),
        ]
        for handler, level in handlers:
            handler.setLevel(level)
            handler.setFormatter(formatter)
            root.addHandler(handler)

        return root


def get_logger(name: str = ROOT_LOGGER_NAME) -> logging.Logger:
    """
    Get a logger inside the `storefront` hierarchy.

    Args:
        name (str): Dotted name; anything outside `storefront.` is nested under it

    Returns:
        logging.Logger: Logger whose records reach the shared handlers
    """
    return SingletonLogger().get_logger(name)

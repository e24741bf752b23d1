import logging
import json
from logging.handlers import TimedRotatingFileHandler
import os
from datetime import datetime

LOG_DIR = os.getenv("LOG_DIR", "logs")

class JsonFormatter(logging.Formatter):
    def format(self, record):
        log_entry = {
            "timestamp": datetime.utcnow().isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry)


def setup_logger(level=logging.INFO):
    logger = logging.getLogger()
    logger.setLevel(level)

    # Called again by every create_app(); attach handlers only once
    if getattr(logger, "_dental_configured", False):
        return logger

    os.makedirs(LOG_DIR, exist_ok=True)

    # — Log file rotates daily, keeps 14 days —
    handler = TimedRotatingFileHandler(
        filename=f"{LOG_DIR}/dental_simple.log",
        when="midnight",
        backupCount=14,
        encoding="utf-8"
    )

    handler.setFormatter(JsonFormatter())
    logger.addHandler(handler)

    # Also log to console for debugging
    console = logging.StreamHandler()
    console.setFormatter(JsonFormatter())
    logger.addHandler(console)

    logger._dental_configured = True
    return logger

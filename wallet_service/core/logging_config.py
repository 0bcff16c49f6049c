"""
Structured logging configuration.
Emits one JSON object per record on the `wallet_service` logger tree.
"""

import json
import logging
from datetime import datetime, timezone

# Ledger context passed through `extra=`
CONTEXT_FIELDS = ("operation", "account_id", "counterparty_id", "amount", "code")


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging"""
    
    def format(self, record):
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for name in CONTEXT_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                log_entry[name] = value
        
        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)
            
        return json.dumps(log_entry, default=str)


def setup_logging(level: str = "INFO", logger_name: str = "wallet_service") -> logging.Logger:
    """
    Attach a JSON console handler to `logger_name` at `level`.
    Safe to call more than once.
    """
    logger = logging.getLogger(logger_name)
    
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
    
    handler = logging.StreamHandler()
    handler.setFormatter(JSONFormatter())
    logger.addHandler(handler)
    logger.setLevel(getattr(logging, level.upper()))
    logger.propagate = False
    
    return logger

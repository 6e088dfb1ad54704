import logging
import sys
from datetime import datetime, timezone

from pythonjsonlogger import jsonlogger

SERVICE_NAME = "ocean-profile-engine"
LOG_FORMAT = '%(timestamp)s %(level)s %(name)s %(message)s'


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """One JSON object per line, tagged with the service name and source location."""

    def add_fields(self, log_record, record, message_dict):
        super(CustomJsonFormatter, self).add_fields(log_record, record, message_dict)
        if not log_record.get('timestamp'):
            log_record['timestamp'] = datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat()
        log_record['level'] = (log_record.get('level') or record.levelname).upper()
        log_record['service'] = SERVICE_NAME
        log_record['module'] = record.module
        log_record['lineno'] = record.lineno


def setup_logging(log_level_str: str = "INFO"):
    """
    Installs the JSON formatter on the root logger. Calling it again only
    changes the level; unknown level names fall back to INFO.
    """
    log_level = getattr(logging, str(log_level_str).upper(), logging.INFO)
    if not isinstance(log_level, int):
        log_level = logging.INFO

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    if any(isinstance(h.formatter, CustomJsonFormatter) for h in root_logger.handlers):
        root_logger.debug(f"JSON logging already configured. Level: {logging.getLevelName(log_level)}")
        return

    log_handler = logging.StreamHandler(sys.stdout)
    log_handler.setFormatter(CustomJsonFormatter(LOG_FORMAT))
    root_logger.addHandler(log_handler)
    root_logger.info(f"JSON logging configured with level: {logging.getLevelName(log_level)}")

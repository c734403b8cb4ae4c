import logging
import os
import sys
from logging.handlers import RotatingFileHandler

from django.conf import settings

from geohierarchy.utils.timezone import ist_time

logger = logging.getLogger("geohierarchy")

LOG_FORMAT = (
    "%(levelname)s - %(asctime)s - %(name)s - %(filename)s - %(caller_name)s"
    " - %(trace_id)s %(span_id)s: %(message)s"
)


class _RecordDefaults(logging.Filter):
    """records from plain loggers lack the fields CustomLogger adds"""

    def filter(self, record):
        for field in ("caller_name", "trace_id", "span_id"):
            if not hasattr(record, field):
                setattr(record, field, "-")
        return True


def setup_logger():
    """setup the geohierarchy logger"""
    os.makedirs(settings.LOG_DIR, exist_ok=True)
    logfilename = os.path.join(settings.LOG_DIR, "geohierarchy.log")
    logger.setLevel(logging.INFO)
    logging.Formatter.converter = ist_time
    formatter = logging.Formatter(LOG_FORMAT)

    # log to stdout
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(formatter)
    handler.addFilter(_RecordDefaults())
    logger.addHandler(handler)

    handler = RotatingFileHandler(logfilename, maxBytes=1048576, backupCount=5)
    handler.setLevel(logging.INFO)
    handler.setFormatter(formatter)
    handler.addFilter(_RecordDefaults())
    logger.addHandler(handler)

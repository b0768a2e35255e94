import logging
import sys
from logging.config import dictConfig

from subsapi.config import settings

CTX_FIELDS = ("rid", "user_id", "subscription_id")


def setup_logging() -> None:
    """Base logging setup for the whole application."""
    level = settings.log_level.upper()

    if settings.log_json:
        formatter = {
            "()": "pythonjsonlogger.json.JsonFormatter",
            "fmt": "%(asctime)s %(levelname)s %(name)s %(message)s %(rid)s %(user_id)s %(subscription_id)s",
            "json_ensure_ascii": False,
        }
    else:
        formatter = {
            "format": (
                "%(asctime)s | %(levelname)5s | %(name)s | %(message)s "
                "| rid=%(rid)s user=%(user_id)s sub=%(subscription_id)s"
            ),
        }

    handlers = {
        "stdout": {
            "class": "logging.StreamHandler",
            "stream": sys.stdout,
            "formatter": "default",
            "filters": ["ctx"],
        }
    }
    if settings.log_file:
        # daily rolling file, a week of history
        handlers["file"] = {
            "class": "logging.handlers.TimedRotatingFileHandler",
            "filename": settings.log_file,
            "when": "midnight",
            "backupCount": 7,
            "encoding": "utf-8",
            "formatter": "default",
            "filters": ["ctx"],
        }

    dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {"ctx": {"()": CtxFilter}},
        "formatters": {"default": formatter},
        "handlers": handlers,
        "root": {"level": level, "handlers": list(handlers)},
        "loggers": {
            "sqlalchemy.engine": {"level": settings.log_sql.upper()},
            "uvicorn": {"level": level},
            "uvicorn.access": {"level": level},
            "subsapi": {"level": level},
        },
    })


class CtxFilter(logging.Filter):
    """Fills missing context fields so the formatter never fails without extra."""
    def filter(self, record: logging.LogRecord) -> bool:
        for k in CTX_FIELDS:
            if not hasattr(record, k):
                setattr(record, k, "-")
        return True


def attach_ctx_filter() -> None:
    """Attaches the filter to the root handlers present at call time; later handlers need another call."""
    f = CtxFilter()
    for h in logging.getLogger().handlers:
        if not any(isinstance(x, CtxFilter) for x in h.filters):
            h.addFilter(f)

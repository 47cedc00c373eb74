import copy
import logging
from logging.config import dictConfig
from typing import Any, Mapping

# Value get_logger() uses for request context that isn't known yet
UNSET = "-"


class KeyValueFormatter(logging.Formatter):
    """
    Renders request context attached through `extra` as key=value pairs after
    the message, e.g.

        ... | request done | method=GET status=200 url=https://example.test/ok

    Context still holding the UNSET placeholder is left out.
    """
    _RECORD_ATTRS = frozenset(
        logging.LogRecord("", 0, "", 0, "", None, None).__dict__
    ) | {"message", "asctime"}

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = {
            k: v for k, v in record.__dict__.items()
            if k not in self._RECORD_ATTRS and v != UNSET
        }
        if not context:
            return line
        return line + " | " + " ".join(f"{k}={context[k]}" for k in sorted(context))


_DEFAULT_LOGGING_CONF = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "kv": {
            "()": KeyValueFormatter,
            "format": "%(asctime)s [%(levelname).1s] %(name)s | %(message)s"
        }
    },
    "handlers": {
        "stderr": {
            "class": "logging.StreamHandler",
            "formatter": "kv",
        }
    },
    "loggers": {
        "ufetch": {"level": "INFO", "handlers": ["stderr"]},
    },
}


def configure_logging(level: str | int = "INFO", **overrides) -> None:
    """
    Send ufetch's request logs to stderr as key=value lines.

    The library never configures logging on import; call this once from an
    application entry-point if the output is wanted.

    Args:
        level (str | int): Level for the `ufetch` logger. Defaults to "INFO".
        **overrides: Top-level dictConfig keys to replace.
    """
    conf = copy.deepcopy(_DEFAULT_LOGGING_CONF)
    conf.update(overrides)
    conf["loggers"].setdefault("ufetch", {})["level"] = level
    dictConfig(conf)


class RequestLogAdapter(logging.LoggerAdapter):
    """Adds the request being served (method, url) to every record; per-call
    `extra` entries take precedence."""
    def process(self, msg: str, kwargs: Mapping[str, Any]):
        kwargs["extra"] = {**self.extra, **kwargs.pop("extra", {})}
        return msg, kwargs


def get_logger(name: str, **ctx) -> RequestLogAdapter:
    return RequestLogAdapter(logging.getLogger(name), {"method": UNSET, "url": UNSET, **ctx})

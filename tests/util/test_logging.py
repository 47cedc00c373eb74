import logging

from ufetch.util import logging as ufetch_logging
from ufetch.util.logging import UNSET, KeyValueFormatter, configure_logging, get_logger


def make_record(**extra):
    record = logging.LogRecord("ufetch.test", logging.INFO, __file__, 1, "request done",
                               None, None)
    for k, v in extra.items():
        setattr(record, k, v)
    return record


def test_formatter_appends_sorted_extras():
    fmt = KeyValueFormatter("%(message)s")

    line = fmt.format(make_record(url="http://a", method="GET", status=200))

    assert line == "request done | method=GET status=200 url=http://a"


def test_formatter_without_extras():
    fmt = KeyValueFormatter("%(message)s")

    assert fmt.format(make_record()) == "request done"


def test_adapter_merges_context(caplog):
    log = get_logger("ufetch.test", method="POST")

    with caplog.at_level(logging.DEBUG, logger="ufetch.test"):
        log.debug("request start", extra={"url": "http://b"})

    record = caplog.records[-1]
    assert record.method == "POST"
    assert record.url == "http://b"


def test_adapter_defaults():
    log = get_logger("ufetch.test")

    assert log.extra == {"method": "-", "url": "-"}


def test_formatter_skips_unset_context():
    fmt = KeyValueFormatter("%(message)s")

    line = fmt.format(make_record(method=UNSET, url="http://a"))

    assert line == "request done | url=http://a"


def test_configure_logging_leaves_defaults_untouched():
    try:
        configure_logging("DEBUG")
        assert logging.getLogger("ufetch").level == logging.DEBUG
        assert ufetch_logging._DEFAULT_LOGGING_CONF["loggers"]["ufetch"]["level"] == "INFO"

        configure_logging()
        assert logging.getLogger("ufetch").level == logging.INFO
    finally:
        logging.getLogger("ufetch").handlers.clear()
        logging.getLogger("ufetch").setLevel(logging.NOTSET)

import json
import logging

from wordcrawler.utils.logger import JSONFormatter, get_crawler_logger, setup_logging


def test_adapter_context_reaches_json_output():
    records = []

    class Capture(logging.Handler):
        def emit(self, record):
            records.append(record)

    base = logging.getLogger("wordcrawler.test.adapter")
    base.setLevel(logging.DEBUG)
    handler = Capture()
    base.addHandler(handler)
    try:
        get_crawler_logger(base.name, url="http://a", depth=2).info("fetched")
    finally:
        base.removeHandler(handler)

    entry = json.loads(JSONFormatter().format(records[0]))
    assert entry["message"] == "fetched"
    assert entry["url"] == "http://a"
    assert entry["depth"] == 2


def test_setup_logging_creates_log_file(tmp_path):
    log_file = tmp_path / "logs" / "crawler.log"
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    try:
        setup_logging(level="debug", log_file=str(log_file))
        logging.getLogger("wordcrawler.test").info("hello")
        for handler in root.handlers:
            handler.flush()
        assert "hello" in log_file.read_text()
        assert logging.getLogger("aiohttp").level == logging.WARNING
    finally:
        for handler in root.handlers:
            handler.close()
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)

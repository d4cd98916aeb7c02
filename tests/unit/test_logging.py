import json
import logging

from metriccatcher.common.logging import StructuredFormatter, setup_logging


def test_structured_formatter_includes_extra_fields() -> None:
    record = logging.LogRecord(
        name="metriccatcher.ingest",
        level=logging.WARNING,
        pathname=__file__,
        lineno=1,
        msg="decode_failed",
        args=(),
        exc_info=None,
    )
    record.payload = "not json"
    record.source = ("127.0.0.1", 5000)

    payload = json.loads(StructuredFormatter().format(record))

    assert payload["level"] == "WARNING"
    assert payload["logger"] == "metriccatcher.ingest"
    assert payload["message"] == "decode_failed"
    assert payload["payload"] == "not json"
    assert payload["source"] == ["127.0.0.1", 5000]


def test_setup_logging_writes_json_lines(tmp_path) -> None:
    log_path = tmp_path / "logs" / "app.log"
    logger = setup_logging(str(log_path), "INFO")

    logging.getLogger("metriccatcher.registry").info("metric_created", extra={"metric": "a.b.c"})
    logging.getLogger("metriccatcher.registry").debug("metric_update")
    for handler in logger.handlers:
        handler.flush()

    lines = [json.loads(line) for line in log_path.read_text().splitlines()]
    assert [line["message"] for line in lines] == ["metric_created"]
    assert lines[0]["metric"] == "a.b.c"
    assert logger.propagate is False

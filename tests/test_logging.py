import json
import logging

import pytest

from ean13.encoder import encode
from ean13.errors import InvalidCodeLength
from ean13.logging import AUDIT, ConsoleFormatter, JsonFormatter, audit, get_logger, setup_logging, trace


def _events(caplog) -> list[str]:
    return [getattr(r, "event", None) for r in caplog.records]


def test_get_logger_namespace() -> None:
    assert get_logger("raster").name == "ean13.raster"


def test_audit_record(caplog) -> None:
    caplog.set_level(logging.DEBUG, logger="ean13")
    audit("barcode.rendered", logger=get_logger("test"), code="9780201379624", sink="raster")
    record = caplog.records[-1]
    assert record.levelno == AUDIT
    assert record.levelname == "AUDIT"
    assert record.event == "barcode.rendered"
    assert record.ctx == {"code": "9780201379624", "sink": "raster"}


def test_trace_logs_entry_and_exit(caplog) -> None:
    caplog.set_level(logging.DEBUG, logger="ean13")
    encode("978020137962")
    assert "encode.enter" in _events(caplog)
    done = [r for r in caplog.records if getattr(r, "event", None) == "encode.done"][0]
    assert done.levelno == logging.INFO
    assert done.duration_ms >= 0
    assert done.ctx == {"result": "<EncodingResult>"}


def test_trace_logs_errors(caplog) -> None:
    caplog.set_level(logging.DEBUG, logger="ean13")
    with pytest.raises(InvalidCodeLength):
        encode("1")
    error = [r for r in caplog.records if getattr(r, "event", None) == "encode.error"][0]
    assert error.levelno == logging.ERROR
    assert error.exc_info[0] is InvalidCodeLength


def test_trace_custom_logger_name(caplog) -> None:
    caplog.set_level(logging.INFO, logger="ean13")

    @trace(logger_name="custom")
    def add(a, b):
        return a + b

    assert add(2, 3) == 5
    record = caplog.records[-1]
    assert record.name == "ean13.custom"
    assert record.ctx == {"result": "5"}


def test_json_formatter() -> None:
    log = get_logger("test")
    record = log.makeRecord(log.name, AUDIT, "", 0, "", (), None)
    record.event = "barcode.exported"
    record.ctx = {"bytes": 120}
    entry = json.loads(JsonFormatter().format(record))
    assert entry["level"] == "AUDIT"
    assert entry["src"] == "ean13.test"
    assert entry["event"] == "barcode.exported"
    assert entry["ctx"] == {"bytes": 120}
    assert entry["ts"].endswith("Z")


def test_console_formatter_plain_message() -> None:
    log = get_logger("test")
    record = log.makeRecord(log.name, logging.WARNING, "", 0, "font %s missing", ("OCR-B",), None)
    line = ConsoleFormatter().format(record)
    assert "[ean13.test]" in line
    assert line.endswith("font OCR-B missing")


def test_setup_logging_level_from_env(monkeypatch) -> None:
    monkeypatch.setenv("EAN13_LOG_LEVEL", "warning")
    setup_logging()
    assert logging.getLogger("ean13").level == logging.WARNING
    setup_logging(level="audit")
    assert logging.getLogger("ean13").level == AUDIT


def test_setup_logging_file(tmp_path) -> None:
    log_file = tmp_path / "ean13.log"
    setup_logging(level="INFO", log_file=str(log_file))
    audit("cli.start", command="render")
    for handler in logging.getLogger("ean13").handlers:
        handler.flush()
    entry = json.loads(log_file.read_text().splitlines()[-1])
    assert entry["event"] == "cli.start"
    assert entry["ctx"] == {"command": "render"}

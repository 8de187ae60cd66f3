"""
Tests for observability — logging setup and the violation log sink.
"""

import logging

from resource_validator.core.models import Resource, Violation
from resource_validator.core.observability.logging_config import (
    LOG_LEVEL_ENV,
    _parse_level,
    resolve_level,
    setup_logging,
)
from resource_validator.core.observability.violation_log import (
    LOGGER_NAME,
    format_violation,
    log_violations,
    split_by_threshold,
)


def _v(name: str, level: int) -> Violation:
    return Violation(
        resource=Resource(kind="Pod", name=name, namespace="default"),
        message="Pod is stale",
        level=level,
        validator_name="built-in:freshness",
    )


class TestResolveLevel:
    def test_flags(self):
        assert resolve_level(debug=True, verbose=True) == "DEBUG"
        assert resolve_level(verbose=True) == "INFO"
        assert resolve_level(quiet=True) == "ERROR"

    def test_env_fallback(self, monkeypatch):
        monkeypatch.setenv(LOG_LEVEL_ENV, "INFO")
        assert resolve_level() == "INFO"

    def test_default(self, monkeypatch):
        monkeypatch.delenv(LOG_LEVEL_ENV, raising=False)
        assert resolve_level() == "WARNING"


class TestSetupLogging:
    def test_parse_level(self):
        assert _parse_level("debug") == logging.DEBUG
        assert _parse_level("nonsense") == logging.WARNING
        assert _parse_level(None) == logging.WARNING

    def test_console_level(self, restore_root_logger):
        setup_logging("ERROR")
        root = logging.getLogger()
        assert root.level == logging.ERROR
        assert len(root.handlers) == 1

    def test_file_handler(self, restore_root_logger, tmp_path):
        log_file = tmp_path / "rv.log"
        setup_logging("WARNING", log_file=str(log_file), log_file_level="DEBUG")
        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 2

        logging.getLogger("resource_validator.test").debug("to file only")
        for h in root.handlers:
            h.flush()
        assert "to file only" in log_file.read_text(encoding="utf-8")
        root.handlers[1].close()


class TestSplitByThreshold:
    def test_split(self):
        errors, infos = split_by_threshold([_v("a", 0), _v("b", 1), _v("c", 2)], threshold=1)
        assert [v.resource.name for v in errors] == ["a", "b"]
        assert [v.resource.name for v in infos] == ["c"]


class TestLogViolations:
    def test_no_violations(self, caplog):
        with caplog.at_level(logging.INFO, logger=LOGGER_NAME):
            log_violations([])
        assert [r.getMessage() for r in caplog.records] == ["all resources are valid"]

    def test_error_and_info_channels(self, caplog):
        with caplog.at_level(logging.INFO, logger=LOGGER_NAME):
            log_violations([_v("a", 0), _v("b", 1), _v("c", 1)], threshold=0)

        assert [r.levelno for r in caplog.records] == [logging.ERROR, logging.INFO]
        error_record, info_record = caplog.records
        assert error_record.getMessage().startswith("error violations (1)")
        assert "name: a" in error_record.getMessage()
        assert info_record.getMessage().startswith("info violations (2)")

    def test_only_errors(self, caplog):
        with caplog.at_level(logging.INFO, logger=LOGGER_NAME):
            log_violations([_v("a", 1)], threshold=1)
        assert [r.levelno for r in caplog.records] == [logging.ERROR]

    def test_custom_logger(self, caplog):
        logger = logging.getLogger("custom.sink")
        with caplog.at_level(logging.INFO, logger="custom.sink"):
            log_violations([], logger=logger)
        assert caplog.records[0].name == "custom.sink"

    def test_format(self):
        text = format_violation(_v("a", 1))
        assert "namespace: default" in text
        assert "validator: built-in:freshness" in text
        assert "message: Pod is stale" in text

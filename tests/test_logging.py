"""
UTXO Ledger - Logging Tests
=============================
Unit tests for structured logging helpers and error formatting.
"""

import json
import logging

from utxo_ledger.errors import DoubleSpendError, LedgerException, format_validation_error
from utxo_ledger.logging_setup import (
    JSONFormatter,
    PerformanceLogger,
    get_audit_logger,
    get_logger,
    setup_logging,
)


class TestJSONFormatter:
    """Test JSON log output"""

    def test_extra_data_included(self):
        record = logging.LogRecord(
            "utxo_ledger.handler", logging.INFO, __file__, 1, "Epoch processed", None, None
        )
        record.extra_data = {"accepted": 2}

        data = json.loads(JSONFormatter().format(record))

        assert data["message"] == "Epoch processed"
        assert data["level"] == "INFO"
        assert data["extra_data"] == {"accepted": 2}
        assert data["timestamp"].endswith("Z")


class TestSetupLogging:
    """Test logging setup"""

    def test_file_logging(self, temp_data_dir):
        logger = setup_logging(
            log_level="DEBUG",
            log_to_file=True,
            log_dir=temp_data_dir,
            enable_console=False,
        )

        get_logger("handler").info("Epoch processed", extra_data={"accepted": 1})
        logger.error("Something failed")

        try:
            main_log = (temp_data_dir / "utxo_ledger.log").read_text(encoding="utf-8")
            error_log = (temp_data_dir / "utxo_ledger_errors.log").read_text(encoding="utf-8")
        finally:
            setup_logging(enable_console=False)

        assert "Epoch processed" in main_log
        assert "Something failed" in error_log
        assert "Epoch processed" not in error_log

    def test_handlers_replaced(self):
        setup_logging(enable_console=True)
        setup_logging(enable_console=True)

        try:
            assert len(logging.getLogger("utxo_ledger").handlers) == 1
        finally:
            setup_logging(enable_console=False)

    def test_category_logger_name(self):
        assert get_logger("utxo").name == "utxo_ledger.utxo"

    def test_is_enabled_for_follows_level(self):
        package_logger = logging.getLogger("utxo_ledger")
        previous_level = package_logger.level
        package_logger.setLevel(logging.INFO)
        try:
            assert get_logger("utxo").is_enabled_for(logging.INFO)
            assert not get_logger("utxo").is_enabled_for(logging.DEBUG)
        finally:
            package_logger.setLevel(previous_level)


class TestAuditLogger:
    """Test shared audit loggers"""

    def test_one_instance_per_directory(self, temp_data_dir):
        first = get_audit_logger(temp_data_dir)
        try:
            assert get_audit_logger(temp_data_dir / ".") is first
            file_handlers = [
                h for h in logging.getLogger("utxo_ledger.audit").handlers
                if isinstance(h, logging.FileHandler)
                and h.baseFilename == str(first.audit_file)
            ]
            assert len(file_handlers) == 1
        finally:
            first.close()

    def test_close_releases_instance(self, temp_data_dir):
        first = get_audit_logger(temp_data_dir)
        first.close()

        second = get_audit_logger(temp_data_dir)
        try:
            assert second is not first
        finally:
            second.close()


class TestPerformanceLogger:
    """Test timing context manager"""

    def test_elapsed_recorded(self):
        with PerformanceLogger(get_logger("test"), "noop") as perf:
            pass

        assert perf.elapsed_ms is not None
        assert perf.elapsed_ms >= 0


class TestErrors:
    """Test exception helpers"""

    def test_default_code(self):
        assert LedgerException("boom").code == "LedgerException"

    def test_to_dict(self):
        err = DoubleSpendError("claimed twice", code="DUPLICATE_INPUT_UTXO", details={"input_index": 1})

        assert err.to_dict() == {
            "error": "DUPLICATE_INPUT_UTXO",
            "message": "claimed twice",
            "details": {"input_index": 1},
        }

    def test_format_validation_error(self):
        err = DoubleSpendError(
            "claimed twice",
            code="DUPLICATE_INPUT_UTXO",
            details={"utxo_key": "ab:0", "input_index": 1},
        )

        assert format_validation_error(err) == (
            "DUPLICATE_INPUT_UTXO: claimed twice (input_index=1, utxo_key=ab:0)"
        )

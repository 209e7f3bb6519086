"""
Tests for DinteroLogger.
"""

import json
import logging

from dintero_client.core.logging import DinteroLogger, LoggingConfig, correlation_scope
from dintero_client.utils.sanitizer import MASK


def read_json_lines(path):
    return [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]


class TestDinteroLogger:
    """Tests for DinteroLogger."""

    def test_installs_handlers(self, tmp_path):
        config = LoggingConfig.create(
            level="WARNING", enable_console=True, file_path=str(tmp_path / "c.log")
        )
        with DinteroLogger(config) as log:
            assert len(log.logger.handlers) == 2
            assert log.logger.level == logging.WARNING
            assert log.logger.propagate is False

    def test_reinitialisation_replaces_handlers(self):
        DinteroLogger(LoggingConfig.create(enable_console=True))
        log = DinteroLogger(LoggingConfig.create(enable_console=True))

        assert len(log.logger.handlers) == 1
        log.close()

    def test_closing_replaced_logger_keeps_current_handlers(self, tmp_path):
        """Закрытие старого экземпляра не отключает обработчики нового."""
        first = DinteroLogger(LoggingConfig.create(enable_console=True))
        second = DinteroLogger(LoggingConfig.create(
            format="json", enable_console=False, file_path=str(tmp_path / "second.log")
        ))

        first.close()
        second.info("still logging")

        assert len(second.logger.handlers) == 1
        (entry,) = read_json_lines(tmp_path / "second.log")
        assert entry["message"] == "still logging"
        second.close()
        assert second.logger.handlers == []

    def test_writes_json_with_fields(self, logging_config_with_file, tmp_path):
        with DinteroLogger(logging_config_with_file) as log:
            log.info("Request completed", method="GET", status_code=200)

        (entry,) = read_json_lines(tmp_path / "test.log")
        assert entry["message"] == "Request completed"
        assert entry["method"] == "GET"
        assert entry["status_code"] == 200

    def test_masks_sensitive_fields(self, logging_config_with_file, tmp_path):
        with DinteroLogger(logging_config_with_file) as log:
            log.info(
                "Token exchange",
                client_secret="s3cr3t",
                authorization="Bearer abc.def",
                note="api_key=leaked",
            )

        (entry,) = read_json_lines(tmp_path / "test.log")
        assert entry["client_secret"] == MASK
        assert entry["authorization"] == MASK
        assert entry["note"] == f"api_key={MASK}"
        assert "s3cr3t" not in (tmp_path / "test.log").read_text(encoding="utf-8")

    def test_correlation_id_in_records(self, logging_config_with_file, tmp_path):
        with DinteroLogger(logging_config_with_file) as log:
            with correlation_scope("order-7"):
                log.info("inside")
            log.info("outside")

        inside, outside = read_json_lines(tmp_path / "test.log")
        assert inside["correlation_id"] == "order-7"
        assert "correlation_id" not in outside

    def test_extra_fields(self, tmp_path):
        path = tmp_path / "extra.log"
        config = LoggingConfig.create(
            format="json", enable_console=False, file_path=str(path),
            extra_fields={"service": "webshop"},
        )
        with DinteroLogger(config) as log:
            log.warning("hello")

        (entry,) = read_json_lines(path)
        assert entry["service"] == "webshop"
        assert entry["level"] == "WARNING"

    def test_level_filtering(self, tmp_path):
        path = tmp_path / "level.log"
        config = LoggingConfig.create(
            level="ERROR", format="json", enable_console=False, file_path=str(path)
        )
        with DinteroLogger(config) as log:
            log.debug("hidden")
            log.info("hidden")
            log.error("shown")

        assert [e["message"] for e in read_json_lines(path)] == ["shown"]

    def test_exception_logging(self, logging_config_with_file, tmp_path):
        with DinteroLogger(logging_config_with_file) as log:
            try:
                raise ValueError("bad payload")
            except ValueError:
                log.exception("Decoding failed")

        (entry,) = read_json_lines(tmp_path / "test.log")
        assert entry["level"] == "ERROR"
        assert "ValueError: bad payload" in entry["exception"]

    def test_close_is_idempotent(self, logging_config_with_file):
        log = DinteroLogger(logging_config_with_file)
        log.close()
        log.close()

        assert log.closed
        assert log.logger.handlers == []

    def test_closed_logger_drops_records(self, logging_config_with_file, tmp_path):
        log = DinteroLogger(logging_config_with_file)
        log.info("before")
        log.close()
        log.info("after")

        messages = [e["message"] for e in read_json_lines(tmp_path / "test.log")]
        assert messages == ["before"]

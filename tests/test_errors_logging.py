"""Tests for error handling and logging modules."""

import errno
import json
import logging
from unittest.mock import Mock

import pytest

from sortie.errors import (
    ConfigurationError,
    ErrorCategory,
    ErrorContext,
    ExternalServiceError,
    ResourceError,
    SortieError,
    ValidationError,
    format_error_for_display,
    wrap_os_error,
)
from sortie.logging import (
    LogConfig,
    LogContext,
    LogLevel,
    SortieLogger,
    StructuredFormatter,
    configure_logging,
    enable_file_logging,
    get_logger,
    log_operation_complete,
    log_operation_failed,
    log_operation_start,
    set_verbosity,
)


def make_record(msg="Test message", level=logging.INFO):
    return logging.LogRecord(
        name="sortie.test",
        level=level,
        pathname="",
        lineno=0,
        msg=msg,
        args=(),
        exc_info=None,
    )


class TestErrorCategory:
    """Tests for ErrorCategory enum."""

    def test_categories(self):
        """Test error category values."""
        assert ErrorCategory.VALIDATION.value == "validation"
        assert ErrorCategory.CONFIGURATION.value == "configuration"
        assert ErrorCategory.RESOURCE.value == "resource"
        assert ErrorCategory.EXTERNAL.value == "external"
        assert ErrorCategory.INTERNAL.value == "internal"


class TestSortieError:
    """Tests for SortieError base class."""

    def test_basic_error(self):
        """Test basic error creation."""
        error = SortieError("Test error")

        assert str(error) == "Test error"
        assert error.message == "Test error"
        assert error.context == {}
        assert error.recoverable is False
        assert error.category == ErrorCategory.INTERNAL

    def test_error_with_context(self):
        """Test error with context."""
        error = SortieError("Test error", context={"path": "/videos/a.mp4"})

        assert "context: {'path': '/videos/a.mp4'}" in str(error)


class TestSpecificErrors:
    """Tests for the error subclasses."""

    def test_validation_error(self):
        error = ValidationError("Unknown action")

        assert error.category == ErrorCategory.VALIDATION
        assert not error.recoverable

    def test_configuration_error(self):
        error = ConfigurationError("Bad config", context={"path": "x.json"})

        assert error.category == ErrorCategory.CONFIGURATION
        assert error.context == {"path": "x.json"}

    def test_resource_error(self):
        assert ResourceError("Missing").category == ErrorCategory.RESOURCE

    def test_external_service_error(self):
        """Test file system failures are recoverable by default."""
        error = ExternalServiceError("Move failed")

        assert error.category == ErrorCategory.EXTERNAL
        assert error.recoverable


class TestWrapOsError:
    """Tests for wrap_os_error."""

    def test_missing_file(self):
        wrapped = wrap_os_error(FileNotFoundError("gone"), "move file", "/videos/a.mp4")

        assert isinstance(wrapped, ResourceError)
        assert wrapped.context == {"operation": "move file", "path": "/videos/a.mp4"}
        assert wrapped.message.startswith("Failed to move file")

    def test_enoent_errno(self):
        wrapped = wrap_os_error(OSError(errno.ENOENT, "No such file"), "move file")

        assert isinstance(wrapped, ResourceError)

    def test_permission_denied(self):
        wrapped = wrap_os_error(PermissionError("denied"), "move file")

        assert isinstance(wrapped, ExternalServiceError)
        assert not wrapped.recoverable

    def test_other_os_error(self):
        wrapped = wrap_os_error(OSError(errno.ENOSPC, "No space left"), "move file")

        assert isinstance(wrapped, ExternalServiceError)
        assert wrapped.recoverable


class TestErrorContext:
    """Tests for ErrorContext context manager."""

    def test_success_path(self):
        """Test successful operation path."""
        with ErrorContext("test_operation") as ctx:
            pass

        assert ctx.error is None

    def test_error_path(self):
        """Test the error is recorded and re-raised."""
        with pytest.raises(ValueError):
            with ErrorContext("test_operation") as ctx:
                raise ValueError("Test error")

        assert isinstance(ctx.error, ValueError)

    def test_rollback_called(self):
        """Test rollback is called on error."""
        rollback = Mock()

        with pytest.raises(ValueError):
            with ErrorContext("test_operation", rollback=rollback):
                raise ValueError("Test error")

        rollback.assert_called_once()

    def test_failing_rollback_keeps_original_error(self):
        """Test a rollback failure does not replace the original error."""
        rollback = Mock(side_effect=OSError("rollback broke"))

        with pytest.raises(ValueError):
            with ErrorContext("test_operation", rollback=rollback):
                raise ValueError("Test error")


class TestFormatErrorForDisplay:
    """Tests for format_error_for_display function."""

    def test_format_sortie_error(self):
        error = ValidationError("Invalid input", context={"action": "teleport"})
        formatted = format_error_for_display(error)

        assert formatted == "[validation] Invalid input (action=teleport)"

    def test_format_without_context(self):
        assert format_error_for_display(ResourceError("Missing")) == "[resource] Missing"

    def test_format_generic_error(self):
        formatted = format_error_for_display(ValueError("Test error"))

        assert formatted == "[error] ValueError: Test error"


# Logging Tests


class TestLogConfig:
    """Tests for LogConfig dataclass."""

    def test_defaults(self):
        config = LogConfig()

        assert config.level == LogLevel.NORMAL
        assert config.log_file is None
        assert config.json_format is False
        assert config.color is True


class TestStructuredFormatter:
    """Tests for StructuredFormatter."""

    def test_text_format(self):
        formatter = StructuredFormatter(include_timestamp=False, include_context=False, color=False)

        formatted = formatter.format(make_record())

        assert "INFO" in formatted
        assert "Test message" in formatted
        assert "\033[" not in formatted

    def test_json_format(self):
        formatter = StructuredFormatter(json_format=True, include_timestamp=False)
        record = make_record()
        record.clip = "a.mp4"

        parsed = json.loads(formatter.format(record))

        assert parsed["level"] == "info"
        assert parsed["message"] == "Test message"
        assert parsed["logger"] == "sortie.test"
        assert parsed["context"] == {"clip": "a.mp4"}

    def test_json_unserializable_context(self):
        """Test values JSON cannot encode are stringified."""
        formatter = StructuredFormatter(json_format=True, include_timestamp=False)
        record = make_record()
        record.direction = object

        parsed = json.loads(formatter.format(record))

        assert parsed["context"]["direction"] == str(object)

    def test_context_in_text(self):
        formatter = StructuredFormatter(include_timestamp=False, color=False)
        record = make_record()
        record.direction = "left"

        assert "[direction=left]" in formatter.format(record)


class TestConfigureLogging:
    """Tests for logger setup."""

    def test_get_logger(self):
        logger = get_logger("sortie.test.module")

        assert isinstance(logger, SortieLogger)
        assert logger.name == "sortie.test.module"

    def test_set_verbosity(self):
        set_verbosity(LogLevel.VERBOSE)

        assert logging.getLogger("sortie").level == logging.INFO

    def test_quiet(self):
        configure_logging(LogConfig(level=LogLevel.QUIET))

        assert logging.getLogger("sortie").level == logging.ERROR

    def test_enable_file_logging(self, tmp_path):
        log_file = tmp_path / "logs" / "sortie.log"
        enable_file_logging(log_file)

        get_logger("sortie.test_file").debug("Gesture trace")

        root = logging.getLogger("sortie")
        assert any(isinstance(h, logging.FileHandler) for h in root.handlers)
        assert "Gesture trace" in log_file.read_text(encoding="utf-8")


class TestContextBinding:
    """Tests for with_context and LogContext."""

    def test_with_context(self, caplog):
        caplog.set_level(logging.INFO, logger="sortie")
        logger = get_logger("sortie.test_bind").with_context(clip="a.mp4")

        logger.info("Decision applied", extra={"action": "Skip"})

        record = caplog.records[-1]
        assert record.clip == "a.mp4"
        assert record.action == "Skip"

    def test_log_context(self, caplog):
        caplog.set_level(logging.INFO, logger="sortie")
        logger = get_logger("sortie.test_log_context")

        with LogContext(source_dir="/videos"):
            logger.info("Inside")
        logger.info("Outside")

        inside, outside = caplog.records[-2:]
        assert inside.source_dir == "/videos"
        assert not hasattr(outside, "source_dir")


class TestLogOperationHelpers:
    """Tests for log operation helper functions."""

    def test_log_operation_start(self):
        logger = Mock()
        log_operation_start(logger, "load folder", path="/videos")

        logger.info.assert_called_once()
        call_args = logger.info.call_args
        assert "Starting" in call_args[0][0]
        assert call_args[1]["extra"]["path"] == "/videos"

    def test_log_operation_complete(self):
        logger = Mock()
        log_operation_complete(logger, "load folder", duration=5.5)

        call_args = logger.info.call_args
        assert "Completed" in call_args[0][0]
        assert call_args[1]["extra"]["duration_seconds"] == 5.5

    def test_log_operation_failed_with_exception(self):
        logger = Mock()
        log_operation_failed(logger, "undo", ValueError("Test error"))

        call_args = logger.error.call_args
        assert "Failed" in call_args[0][0]
        assert call_args[1]["extra"]["error_type"] == "ValueError"
        assert call_args[1]["extra"]["error_message"] == "Test error"

    def test_log_operation_failed_with_message(self):
        logger = Mock()
        log_operation_failed(logger, "process clip", "Source file not found")

        extra = logger.error.call_args[1]["extra"]
        assert "error_type" not in extra
        assert extra["error_message"] == "Source file not found"

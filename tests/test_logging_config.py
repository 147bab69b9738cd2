"""Tests for timecapsule.logging_config module."""

import logging

from timecapsule.logging_config import LEVEL_COLORS, RESET, TAG_COLOR, ColoredFormatter, setup_colored_logging


def make_record(msg: str, level: int = logging.WARNING) -> logging.LogRecord:
    return logging.LogRecord("test", level, __file__, 1, msg, None, None)


class TestColoredFormatter:
    """Tests for ColoredFormatter class."""

    def test_colors_level_and_tag(self):
        output = ColoredFormatter().format(make_record("[STORE] Skipping bad.json"))

        assert f"{LEVEL_COLORS[logging.WARNING]}WARNING{RESET}" in output
        assert f"{TAG_COLOR}[STORE]{RESET} Skipping bad.json" in output

    def test_untagged_message_unchanged(self):
        output = ColoredFormatter().format(make_record("plain message", logging.ERROR))

        assert output.endswith(" plain message")
        assert TAG_COLOR not in output

    def test_record_left_untouched(self):
        record = make_record("[CLI] Locked capsule")

        ColoredFormatter().format(record)

        assert record.levelname == "WARNING"
        assert record.msg == "[CLI] Locked capsule"

    def test_arguments_interpolated(self):
        record = logging.LogRecord("test", logging.INFO, __file__, 1, "[CLI] %s saved", ("abc",), None)

        assert "abc saved" in ColoredFormatter().format(record)


class TestSetupColoredLogging:
    """Tests for setup_colored_logging function."""

    def test_default_level_is_warning(self):
        setup_colored_logging()

        root = logging.getLogger()
        assert root.level == logging.WARNING
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, ColoredFormatter)

    def test_verbose_is_debug(self):
        setup_colored_logging(verbose=True)

        assert logging.getLogger().level == logging.DEBUG

    def test_no_duplicate_handlers(self):
        setup_colored_logging()
        setup_colored_logging()

        assert len(logging.getLogger().handlers) == 1

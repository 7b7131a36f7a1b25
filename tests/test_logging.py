"""
Tests for logging utilities.
"""

import logging

from pixelsight.utils.logging import StructuredLogger, setup_console_logging


class TestStructuredLogger:

    def test_metadata_appended_as_json(self, caplog):
        log = StructuredLogger('pixelsight.test', {'image': 'a.png'})
        with caplog.at_level(logging.INFO, logger='pixelsight.test'):
            log.info("Saved", operations=3)
        assert caplog.records[-1].getMessage() == 'Saved | {"image": "a.png", "operations": 3}'

    def test_plain_message_without_metadata(self, caplog):
        log = StructuredLogger('pixelsight.test')
        with caplog.at_level(logging.WARNING, logger='pixelsight.test'):
            log.warning("Careful")
        assert caplog.records[-1].getMessage() == "Careful"

    def test_bind_adds_metadata(self):
        log = StructuredLogger('pixelsight.test', {'a': 1}).bind(b=2)
        assert log.metadata == {'a': 1, 'b': 2}
        assert log.logger.name == 'pixelsight.test'


class TestConsoleLogging:

    def test_repeated_setup_keeps_one_handler(self):
        root = logging.getLogger()
        level = root.level
        try:
            first = setup_console_logging('DEBUG', color=False)
            second = setup_console_logging('WARNING', color=False)
            assert first not in root.handlers
            assert second in root.handlers
            assert root.level == logging.WARNING
        finally:
            root.removeHandler(second)
            root.setLevel(level)

"""Tests for structured log formatting."""

import logging

from autoapply.core.logging import StructuredFormatter, log_with_context


def _record(msg: str = "Drafted section", **attrs) -> logging.LogRecord:
    record = logging.LogRecord("autoapply.test", logging.INFO, __file__, 10, msg, None, None)
    for key, value in attrs.items():
        setattr(record, key, value)
    return record


class TestStructuredFormatter:
    def test_context_fields_precede_extras(self):
        record = _record(
            section_id="need", category="problem_need", extra_data={"confidence": 0.67}
        )

        line = StructuredFormatter().format(record)

        assert "level=INFO" in line
        assert line.index("section_id=need") < line.index("category=problem_need")
        assert line.index("category=problem_need") < line.index("confidence=0.67")
        assert line.endswith('message="Drafted section"')

    def test_blank_values_are_quoted(self):
        line = StructuredFormatter().format(_record(grant_id=""))

        assert 'grant_id=""' in line


class TestLogWithContext:
    def test_promotes_context_fields(self, caplog):
        logger = logging.getLogger("autoapply.test.context")

        with caplog.at_level(logging.INFO, logger="autoapply.test.context"):
            log_with_context(
                logger, logging.INFO, "Classified", section_id="s1", mode="compose", score=81
            )

        (record,) = caplog.records
        assert record.section_id == "s1"
        assert record.mode == "compose"
        assert record.extra_data == {"score": 81}

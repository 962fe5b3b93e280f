"""
Tests for the context-aware log formatters and adapter.
"""

import io
import json
import logging

import pytest

from talentflow.common.logger import (
    JsonFormatter,
    LoggerAdapter,
    TextFormatter,
    app_logger,
    log_execution_time,
    with_context,
)


@pytest.fixture
def captured():
    """A private logger writing into a buffer; returns (logger, buffer, handler)."""
    buffer = io.StringIO()
    handler = logging.StreamHandler(buffer)
    logger = logging.getLogger("talentflow.tests.logger")
    logger.handlers = [handler]
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    yield logger, buffer, handler
    logger.handlers = []


class TestJsonFormatter:
    def test_adapter_context_is_emitted(self, captured):
        logger, buffer, handler = captured
        handler.setFormatter(JsonFormatter())
        adapter = LoggerAdapter(logger, {"share_link": "take-sample"})

        adapter.with_context(assessment_id="assessment-sample").info(
            "Submission rejected", extra={"data": {"errors": 2}}
        )

        line = json.loads(buffer.getvalue())
        assert line["message"] == "Submission rejected"
        assert line["level"] == "INFO"
        assert line["name"] == "talentflow.tests.logger"
        assert line["share_link"] == "take-sample"
        assert line["assessment_id"] == "assessment-sample"
        assert line["candidate_id"] is None
        assert line["data"] == {"errors": 2}

    def test_exceptions_are_summarised(self, captured):
        logger, buffer, handler = captured
        handler.setFormatter(JsonFormatter())
        try:
            raise ValueError("boom")
        except ValueError:
            logger.exception("Failed")

        line = json.loads(buffer.getvalue())
        assert line["exception"] == {"type": "ValueError", "message": "boom"}
        assert line["data"] == {}


class TestTextFormatter:
    def test_context_is_appended_as_pairs(self, captured):
        logger, buffer, handler = captured
        handler.setFormatter(TextFormatter("%(levelname)s %(message)s"))
        LoggerAdapter(logger, {"share_link": "take-chain", "assessment_id": "a-1"}).warning("Hi")
        assert buffer.getvalue().strip() == "WARNING Hi [assessment_id=a-1 share_link=take-chain]"

    def test_no_context_no_suffix(self, captured):
        logger, buffer, handler = captured
        handler.setFormatter(TextFormatter("%(message)s"))
        logger.info("plain")
        assert buffer.getvalue().strip() == "plain"


class TestHelpers:
    def test_with_context_uses_application_child(self):
        adapter = with_context("api.routes", share_link="take-sample")
        assert adapter.logger.name == f"{app_logger.name}.api.routes"
        assert adapter.extra == {"share_link": "take-sample"}

    @pytest.mark.asyncio
    async def test_log_execution_time_reraises(self, captured):
        logger, buffer, handler = captured
        handler.setFormatter(logging.Formatter("%(levelname)s %(message)s"))

        @log_execution_time(logger)
        async def explode():
            raise RuntimeError("nope")

        with pytest.raises(RuntimeError):
            await explode()
        assert buffer.getvalue().startswith("ERROR explode failed after")

"""
Unit tests for utility functions
"""

import time

import pytest

from italian_practice.utils import (
    Timer,
    calculate_success_rate,
    extract_json_safely,
    format_json_safely,
    log_execution_time,
)


class TestJSONHandling:
    """Test JSON handling functions"""

    def test_extract_json_safely(self):
        assert extract_json_safely('{"it": "città"}') == {"it": "città"}
        assert extract_json_safely(None) == {}
        assert extract_json_safely("") == {}
        assert extract_json_safely("not json") == {}

    def test_extract_json_requires_object(self):
        assert extract_json_safely("[1, 2]") == {}

    def test_format_json_safely(self):
        assert format_json_safely({"it": "città"}) == '{"it":"città"}'
        assert format_json_safely({"bad": object()}) == "{}"


class TestUtilityFunctions:
    """Test utility functions"""

    def test_calculate_success_rate(self):
        assert calculate_success_rate(3, 4) == 75.0
        assert calculate_success_rate(0, 0) == 0.0


class TestTimer:
    """Test Timer class"""

    def test_timer_basic_functionality(self):
        timer = Timer()
        assert timer.elapsed() is None

        timer.start()
        time.sleep(0.01)
        timer.stop()

        assert timer.elapsed() >= 0.005
        assert timer.elapsed_ms() >= 5

    def test_timer_stop_freezes_elapsed(self):
        timer = Timer()
        timer.start()
        timer.stop()
        first = timer.elapsed()
        time.sleep(0.01)
        assert timer.elapsed() == first


class TestDecorators:
    """Test decorators"""

    @pytest.mark.asyncio
    async def test_log_execution_time_async(self):
        @log_execution_time
        async def fetch():
            return "ok"

        assert await fetch() == "ok"

    def test_log_execution_time_sync_reraises(self):
        @log_execution_time
        def fail():
            raise ValueError("boom")

        with pytest.raises(ValueError):
            fail()

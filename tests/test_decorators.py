"""
PURPOSE: Tests for the async retry decorator.

Covers:
- Recovery after transient failures
- No retry for exceptions outside the configured set
- Exhaustion after max_retries
- Rejection of sync functions
"""

import pytest

from hookrelay.utils.decorators import retry


class TestRetry:
    """Test the async retry decorator."""

    async def test_returns_after_transient_failures(self):
        attempts = []

        @retry(max_retries=3, delay=0, exceptions=(ConnectionError,))
        async def flaky():
            attempts.append(1)
            if len(attempts) < 3:
                raise ConnectionError("boom")
            return "ok"

        assert await flaky() == "ok"
        assert len(attempts) == 3

    async def test_unlisted_exception_is_not_retried(self):
        attempts = []

        @retry(max_retries=3, delay=0, exceptions=(ConnectionError,))
        async def broken():
            attempts.append(1)
            raise KeyError("nope")

        with pytest.raises(KeyError):
            await broken()
        assert len(attempts) == 1

    async def test_gives_up_after_max_retries(self):
        attempts = []

        @retry(max_retries=2, delay=0, exceptions=(ConnectionError,))
        async def always_down():
            attempts.append(1)
            raise ConnectionError("down")

        with pytest.raises(ConnectionError):
            await always_down()
        assert len(attempts) == 3

    def test_rejects_sync_functions(self):
        with pytest.raises(TypeError):
            @retry()
            def not_async():
                return None

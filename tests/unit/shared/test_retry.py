from unittest.mock import MagicMock

import pytest
from shared.utils.retry import retry


class TestRetry:
    """Test the synchronous retry helper."""

    def test_returns_first_success(self):
        func = MagicMock(return_value=42)

        assert retry(func, sleep=lambda _: None) == 42
        func.assert_called_once()

    def test_retries_until_success(self):
        func = MagicMock(side_effect=[OSError("a"), OSError("b"), "ok"])
        calls = []

        result = retry(
            func,
            retries=3,
            on_retry=lambda attempt, exc, delay: calls.append(attempt),
            sleep=lambda _: None,
        )

        assert result == "ok"
        assert calls == [1, 2]

    def test_reraises_after_last_attempt(self):
        func = MagicMock(side_effect=OSError("down"))

        with pytest.raises(OSError, match="down"):
            retry(func, retries=2, sleep=lambda _: None)
        assert func.call_count == 2

    def test_unlisted_exception_is_not_retried(self):
        func = MagicMock(side_effect=KeyError("x"))

        with pytest.raises(KeyError):
            retry(func, retries=3, retry_on=(OSError,), sleep=lambda _: None)
        func.assert_called_once()

    def test_delay_is_capped(self):
        delays = []
        func = MagicMock(side_effect=[OSError()] * 4 + ["ok"])

        retry(func, retries=5, base_delay=1, max_delay=2, jitter=0, sleep=delays.append)

        assert delays == [1, 2, 2, 2]

    def test_retries_must_be_positive(self):
        with pytest.raises(ValueError):
            retry(lambda: None, retries=0)

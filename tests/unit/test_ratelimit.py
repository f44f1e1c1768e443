"""Test the fixed-window rate limiter and client identification."""

import threading

import pytest

from timeserver.ratelimit import UNKNOWN_CLIENT, FixedWindowRateLimiter, client_identifier

WINDOW_START = 1_742_704_200_000  # aligned to a 60s boundary


class TestFixedWindowRateLimiter:
    """Test FixedWindowRateLimiter."""

    def test_admits_up_to_the_limit(self):
        """Test that the 61st request in a window is refused."""
        limiter = FixedWindowRateLimiter(limit=60, window_ms=60_000)

        decisions = [limiter.admit("1.2.3.4", now_ms=WINDOW_START + i) for i in range(61)]

        assert decisions[:60] == [True] * 60
        assert decisions[60] is False

    def test_refused_requests_are_not_counted(self):
        """Test that refusals leave the counter at the limit."""
        limiter = FixedWindowRateLimiter(limit=2, window_ms=60_000)

        for _ in range(5):
            limiter.admit("c", now_ms=WINDOW_START)

        assert limiter.window_for("c").count == 2

    def test_next_window_resets(self):
        """Test that a new clock-aligned window starts a fresh count."""
        limiter = FixedWindowRateLimiter(limit=2, window_ms=60_000)
        limiter.admit("c", now_ms=WINDOW_START + 59_000)
        limiter.admit("c", now_ms=WINDOW_START + 59_500)
        assert limiter.admit("c", now_ms=WINDOW_START + 59_999) is False

        assert limiter.admit("c", now_ms=WINDOW_START + 60_000) is True
        window = limiter.window_for("c")
        assert window.count == 1
        assert window.window_end == WINDOW_START + 120_000

    def test_window_end_is_clock_aligned(self):
        """Test that windows end on a multiple of the window length."""
        limiter = FixedWindowRateLimiter(limit=5, window_ms=60_000)

        limiter.admit("c", now_ms=WINDOW_START + 12_345)

        assert limiter.window_for("c").window_end == WINDOW_START + 60_000

    def test_burst_across_boundary_is_allowed(self):
        """Test that a full window on each side of a boundary is admitted."""
        limiter = FixedWindowRateLimiter(limit=3, window_ms=60_000)

        before = [limiter.admit("c", now_ms=WINDOW_START + 59_999) for _ in range(3)]
        after = [limiter.admit("c", now_ms=WINDOW_START + 60_000) for _ in range(3)]

        assert before + after == [True] * 6

    def test_clients_are_isolated(self):
        """Test that one client's exhaustion does not affect another."""
        limiter = FixedWindowRateLimiter(limit=1, window_ms=60_000)

        assert limiter.admit("a", now_ms=WINDOW_START) is True
        assert limiter.admit("a", now_ms=WINDOW_START) is False
        assert limiter.admit("b", now_ms=WINDOW_START) is True
        assert len(limiter) == 2

    def test_unknown_client_has_no_window(self):
        """Test window_for on a client never seen."""
        assert FixedWindowRateLimiter().window_for("nobody") is None

    def test_uses_system_clock_by_default(self):
        """Test admission without an explicit timestamp."""
        limiter = FixedWindowRateLimiter(limit=1, window_ms=3_600_000)

        assert limiter.admit("c") is True
        assert limiter.window_for("c").window_end % 3_600_000 == 0

    def test_injected_clock(self):
        """Test that the configured clock drives window alignment."""
        current = [WINDOW_START / 1000]
        limiter = FixedWindowRateLimiter(limit=1, window_ms=60_000, clock=lambda: current[0])

        assert limiter.admit("c") is True
        assert limiter.admit("c") is False
        current[0] += 60
        assert limiter.admit("c") is True

    def test_retry_after(self):
        """Test the Retry-After value derived from the window length."""
        assert FixedWindowRateLimiter(window_ms=60_000).retry_after_seconds == 60
        assert FixedWindowRateLimiter(window_ms=1_500).retry_after_seconds == 2

    @pytest.mark.parametrize("limit, window_ms", [(0, 60_000), (60, 0), (-1, 1)])
    def test_rejects_non_positive_settings(self, limit, window_ms):
        """Test construction validation."""
        with pytest.raises(ValueError):
            FixedWindowRateLimiter(limit=limit, window_ms=window_ms)

    def test_concurrent_admissions_never_exceed_limit(self):
        """Test that the limit holds under concurrent callers."""
        limiter = FixedWindowRateLimiter(limit=50, window_ms=60_000)
        admitted = []
        lock = threading.Lock()

        def worker():
            for _ in range(20):
                ok = limiter.admit("shared", now_ms=WINDOW_START)
                with lock:
                    admitted.append(ok)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert admitted.count(True) == 50
        assert limiter.window_for("shared").count == 50


class TestClientIdentifier:
    """Test client_identifier."""

    def test_prefers_cloudflare_header(self):
        """Test header precedence."""
        headers = {"CF-Connecting-IP": "1.1.1.1", "X-Forwarded-For": "2.2.2.2", "X-Real-IP": "3.3.3.3"}

        assert client_identifier(headers) == "1.1.1.1"

    def test_falls_back_through_headers(self):
        """Test later headers when earlier ones are absent."""
        assert client_identifier({"X-Forwarded-For": "2.2.2.2", "X-Real-IP": "3.3.3.3"}) == "2.2.2.2"
        assert client_identifier({"X-Real-IP": "3.3.3.3"}) == "3.3.3.3"

    def test_forwarded_for_is_used_verbatim(self):
        """Test that a forwarded chain is treated as one identifier."""
        assert client_identifier({"X-Forwarded-For": "2.2.2.2, 10.0.0.1"}) == "2.2.2.2, 10.0.0.1"

    def test_blank_headers_are_skipped(self):
        """Test that empty header values do not count as present."""
        assert client_identifier({"CF-Connecting-IP": "  ", "X-Real-IP": "3.3.3.3"}) == "3.3.3.3"

    def test_unknown_when_no_header(self):
        """Test the shared bucket for unidentified clients."""
        assert client_identifier({}) == UNKNOWN_CLIENT == "unknown"

    def test_custom_header_list(self):
        """Test a configured list of trusted headers."""
        assert client_identifier({"X-Client": "abc", "X-Real-IP": "3.3.3.3"}, ["X-Client"]) == "abc"

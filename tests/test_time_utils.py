"""
PURPOSE: Tests for time utility functions.

Covers:
- Timezone-aware UTC timestamps
- Monotonic process uptime
"""

from datetime import timezone

from hookrelay.utils.time_utils import get_utc_now, process_uptime, utc_iso_now


class TestTimeUtils:
    """Test timestamp helpers."""

    def test_utc_now_is_aware(self):
        assert get_utc_now().tzinfo == timezone.utc

    def test_iso_string_has_offset(self):
        assert utc_iso_now().endswith("+00:00")

    def test_uptime_is_monotonic(self):
        first = process_uptime()
        second = process_uptime()
        assert 0 <= first <= second

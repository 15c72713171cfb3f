"""
PURPOSE: Tests for webhook payload classification.

Covers:
- Text fallback for unparseable input
- Field precedence (directive > instrument > price > signal > strategy)
- Unknown for structures without recognised fields
- Determinism
"""

import pytest

from hookrelay.config.constants import Category
from hookrelay.webhook.classifier import classify


class TestTextInput:
    """Test classification of raw text and bytes."""

    def test_plain_text_is_text(self):
        assert classify("hello") is Category.TEXT

    def test_empty_text_is_text(self):
        assert classify("") is Category.TEXT

    def test_json_text_is_parsed(self):
        assert classify('{"action": "SELL"}') is Category.ALERT

    def test_bytes_are_decoded(self):
        assert classify(b'{"symbol": "ETHUSDT"}') is Category.SYMBOL_DATA

    def test_undecodable_bytes_are_text(self):
        assert classify(b"\xff\xfe\xfa") is Category.TEXT

    def test_truncated_json_is_text(self):
        assert classify('{"action": "BUY"') is Category.TEXT


class TestStructuredInput:
    """Test the fixed decision order over structured payloads."""

    @pytest.mark.parametrize(
        "payload, expected",
        [
            ({"action": "BUY"}, Category.ALERT),
            ({"command": "close_all"}, Category.ALERT),
            ({"symbol": "BTCUSDT"}, Category.SYMBOL_DATA),
            ({"ticker": "NASDAQ:AAPL"}, Category.SYMBOL_DATA),
            ({"price": 65000}, Category.PRICE_UPDATE),
            ({"price": 1.0855}, Category.PRICE_UPDATE),
            ({"price": "65000.5"}, Category.PRICE_UPDATE),
            ({"signal": "long"}, Category.SIGNAL),
            ({"strategy": "ema_cross"}, Category.STRATEGY),
            ({"foo": "bar"}, Category.UNKNOWN),
            ({}, Category.UNKNOWN),
        ],
    )
    def test_single_field_categories(self, payload, expected):
        assert classify(payload) is expected

    def test_directive_beats_price(self):
        """A payload with both a directive and a numeric price is an Alert."""
        assert classify({"price": 65000, "action": "BUY"}) is Category.ALERT

    def test_instrument_beats_price(self):
        assert classify({"symbol": "BTCUSDT", "price": 65000}) is Category.SYMBOL_DATA

    def test_price_beats_signal_and_strategy(self):
        assert classify({"strategy": "s1", "signal": "long", "price": 1}) is Category.PRICE_UPDATE

    def test_signal_beats_strategy(self):
        assert classify({"strategy": "s1", "signal": "long"}) is Category.SIGNAL

    def test_non_numeric_price_is_ignored(self):
        assert classify({"price": "n/a"}) is Category.UNKNOWN
        assert classify({"price": True}) is Category.UNKNOWN

    @pytest.mark.parametrize(
        "price",
        [float("inf"), float("-inf"), float("nan"), "inf", "-Infinity", "nan"],
    )
    def test_non_finite_price_is_ignored(self, price):
        assert classify({"price": price}) is Category.UNKNOWN

    def test_json_infinity_is_not_a_price(self):
        assert classify('{"price": Infinity}') is Category.UNKNOWN
        assert classify('{"price": NaN}') is Category.UNKNOWN

    def test_large_integer_price(self):
        assert classify({"price": 10 ** 400}) is Category.PRICE_UPDATE

    def test_blank_fields_do_not_count(self):
        assert classify({"action": "", "symbol": None, "price": 3}) is Category.PRICE_UPDATE
        assert classify({"action": "   "}) is Category.UNKNOWN

    def test_non_mapping_json_is_unknown(self):
        assert classify("[1, 2, 3]") is Category.UNKNOWN
        assert classify("42") is Category.UNKNOWN
        assert classify([{"action": "BUY"}]) is Category.UNKNOWN
        assert classify(None) is Category.UNKNOWN


class TestDeterminism:
    """Test that classification is stable and side-effect free."""

    def test_same_payload_same_category(self, sample_alert):
        assert classify(sample_alert) is classify(sample_alert)

    def test_payload_not_mutated(self, sample_alert):
        before = dict(sample_alert)
        classify(sample_alert)
        assert sample_alert == before

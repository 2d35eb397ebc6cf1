"""Tests for transport options and retry policies."""

from __future__ import annotations

import pytest

from relay_transport.config import TransportOptions, load_options
from relay_transport.errors import RelayConfigError
from relay_transport.retry import FixedDelayRetry


class TestFixedDelayRetry:
    """Tests for FixedDelayRetry."""

    def test_default_is_unbounded(self):
        """Test the default policy retries every 0.5s forever."""
        policy = FixedDelayRetry()
        assert [policy.next_delay(n) for n in (1, 10, 10_000)] == [0.5, 0.5, 0.5]

    def test_max_attempts(self):
        """Test a bounded policy stops after max_attempts."""
        policy = FixedDelayRetry(delay=2.0, max_attempts=2)
        assert policy.next_delay(1) == 2.0
        assert policy.next_delay(2) == 2.0
        assert policy.next_delay(3) is None


class TestTransportOptions:
    """Tests for TransportOptions validation."""

    def test_defaults(self):
        """Test option defaults."""
        options = TransportOptions(url="wss://relay.example.com")
        assert options.subscriptions == ()
        assert options.retry_delay == 0.5
        assert options.retry_policy == FixedDelayRetry(delay=0.5, max_attempts=None)

    @pytest.mark.parametrize("url", [None, "", 3])
    def test_invalid_url(self, url):
        """Test url must be a non-empty string."""
        with pytest.raises(RelayConfigError):
            TransportOptions(url=url)  # type: ignore[arg-type]

    def test_invalid_subscription(self):
        """Test subscriptions must be strings."""
        with pytest.raises(RelayConfigError):
            TransportOptions(url="wss://r", subscriptions=("a", 1))  # type: ignore[arg-type]

    def test_from_mapping(self):
        """Test building options from a mapping."""
        options = TransportOptions.from_mapping(
            {
                "url": "https://relay.example.com",
                "protocol": "wc",
                "version": 1,
                "subscriptions": ["a", "b"],
                "retry_delay": 1,
                "max_retries": 5,
                "unknown": True,
            }
        )
        assert options.subscriptions == ("a", "b")
        assert options.retry_policy == FixedDelayRetry(delay=1.0, max_attempts=5)

    def test_from_mapping_rejects_string_subscriptions(self):
        """Test a bare string is not mistaken for a topic list."""
        with pytest.raises(RelayConfigError):
            TransportOptions.from_mapping({"url": "wss://r", "subscriptions": "abc"})

    def test_from_mapping_bad_number(self):
        """Test malformed numbers become configuration errors."""
        with pytest.raises(RelayConfigError, match="Invalid transport options"):
            TransportOptions.from_mapping({"url": "wss://r", "retry_delay": "soon"})


class TestLoadOptions:
    """Tests for load_options()."""

    def test_load_yaml(self, tmp_path):
        """Test loading options from YAML."""
        path = tmp_path / "relay.yaml"
        path.write_text(
            "url: https://relay.example.com\n"
            "protocol: wc\n"
            "version: 1\n"
            "subscriptions:\n"
            "  - client-topic\n"
        )
        options = load_options(path)
        assert options.url == "https://relay.example.com"
        assert options.subscriptions == ("client-topic",)

    def test_load_empty_file(self, tmp_path):
        """Test an empty file fails on the missing url."""
        path = tmp_path / "relay.yaml"
        path.write_text("")
        with pytest.raises(RelayConfigError, match="url"):
            load_options(path)

    def test_load_non_mapping(self, tmp_path):
        """Test a YAML list is rejected."""
        path = tmp_path / "relay.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(RelayConfigError, match="mapping"):
            load_options(str(path))

    def test_load_invalid_yaml(self, tmp_path):
        """Test YAML syntax errors become configuration errors."""
        path = tmp_path / "relay.yaml"
        path.write_text("url: [unclosed\n")
        with pytest.raises(RelayConfigError, match="Invalid YAML"):
            load_options(path)

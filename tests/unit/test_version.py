"""
Unit tests for the API version registry.
"""

import pytest

from osbclient.core.version import (
    VERSION_2_11,
    VERSION_2_13,
    VERSION_2_14,
    VERSION_2_17,
    all_versions,
    at_least,
    latest,
    parse,
)
from osbclient.exceptions import InvalidConfigurationError


class TestAPIVersion:
    """Test version ordering and lookup."""

    def test_latest_is_2_17(self):
        """Test the latest supported version."""
        assert latest() == VERSION_2_17
        assert latest().header_value() == "2.17"

    def test_all_versions_in_release_order(self):
        """Test versions are listed oldest first."""
        labels = [v.label for v in all_versions()]
        assert labels == ["2.11", "2.12", "2.13", "2.14", "2.15", "2.16", "2.17"]

    def test_at_least_is_reflexive_and_ordered(self):
        """Test at_least over the registry."""
        versions = all_versions()
        for i, v in enumerate(versions):
            assert at_least(v, v)
            for w in versions[i + 1:]:
                assert at_least(w, v)
                assert not at_least(v, w)

    def test_is_less_than(self):
        """Test strict ordering helper."""
        assert VERSION_2_13.is_less_than(VERSION_2_14)
        assert not VERSION_2_14.is_less_than(VERSION_2_14)

    def test_comparison_operators(self):
        """Test rich comparisons follow rank, not label text."""
        assert VERSION_2_11 < VERSION_2_13 <= VERSION_2_13 < VERSION_2_17
        assert max(all_versions()) == VERSION_2_17

    def test_str_is_label(self):
        """Test string form used in messages."""
        assert str(VERSION_2_14) == "2.14"

    def test_parse_known_label(self):
        """Test parsing a supported label."""
        assert parse("2.14") is VERSION_2_14
        assert parse(" 2.11 ") is VERSION_2_11

    def test_parse_unknown_label(self):
        """Test parsing an unsupported label."""
        with pytest.raises(InvalidConfigurationError, match="unsupported API version"):
            parse("2.10")

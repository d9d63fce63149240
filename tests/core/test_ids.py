"""Tests for core.ids - id utilities"""

import uuid

from panetree.core.ids import ensure_id, new_id, short_id


class TestNewId:
    """Test new_id function"""

    def test_is_uuid(self):
        """Fresh ids should parse as UUIDs"""
        assert uuid.UUID(new_id())

    def test_unique(self):
        """Fresh ids should not repeat"""
        ids = {new_id() for _ in range(100)}
        assert len(ids) == 100


class TestEnsureId:
    """Test ensure_id function"""

    def test_keeps_given_id(self):
        """Given ids are kept verbatim"""
        assert ensure_id("pane-1") == "pane-1"

    def test_none_creates_id(self):
        """None should create a fresh id"""
        assert ensure_id(None)

    def test_empty_string_creates_id(self):
        """Empty string is treated as missing"""
        assert ensure_id("") != ""


class TestShortId:
    """Test short_id function"""

    def test_truncates(self):
        """Long ids are truncated to 8 characters"""
        assert short_id("3eb79f67-40c3-4583-a9e4-ad8224807f34") == "3eb79f67"

    def test_custom_length(self):
        """Length can be overridden"""
        assert short_id("abcdef", length=3) == "abc"

    def test_short_id_unchanged(self):
        """Ids shorter than the limit are unchanged"""
        assert short_id("w1") == "w1"

    def test_empty(self):
        """Empty id renders as unknown"""
        assert short_id("") == "unknown"

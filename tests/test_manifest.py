"""
Unit tests for the export manifest.
"""

import json

import pytest

from jn.errors import ManifestError
from jn.manifest import Decision, Manifest


class TestManifest:

    def test_key_for(self):
        assert Manifest.key_for("ws", "a.md") == "ws/a.md"

    def test_decide(self):
        manifest = Manifest({"ws/a": "d1"})
        assert manifest.decide("ws/a", "d1") is Decision.SKIP
        assert manifest.decide("ws/a", "d2") is Decision.INCLUDE
        assert manifest.decide("ws/b", "d1") is Decision.INCLUDE

    def test_record_and_copy_are_independent(self):
        old = Manifest({"ws/a": "d1"})
        new = old.copy()
        new.record("ws/a", "d2")
        assert old.lookup("ws/a") == "d1"
        assert new.lookup("ws/a") == "d2"

    def test_serialization_is_pretty_sorted_json(self):
        manifest = Manifest({"ws/b": "d2", "ws/a": "d1"})
        text = manifest.to_bytes().decode()
        assert json.loads(text) == {"ws/a": "d1", "ws/b": "d2"}
        assert text.index("ws/a") < text.index("ws/b")
        assert "\n  " in text

    def test_digest_ignores_insertion_order(self):
        a = Manifest()
        a.record("ws/a", "d1")
        a.record("ws/b", "d2")
        b = Manifest()
        b.record("ws/b", "d2")
        b.record("ws/a", "d1")
        assert a.to_bytes() == b.to_bytes()
        assert a.digest() == b.digest()

    def test_from_bytes(self):
        manifest = Manifest.from_bytes(b'{"ws/a": "d1"}')
        assert manifest == Manifest({"ws/a": "d1"})

    @pytest.mark.parametrize("data", [b"not json", b"[]", b'{"ws/a": 1}', b"\xff\xfe"])
    def test_from_bytes_rejects_garbage(self, data):
        with pytest.raises(ManifestError):
            Manifest.from_bytes(data)

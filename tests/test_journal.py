"""
Unit tests for journal files.
"""

import os
import shlex
import tempfile

import pytest

from conftest import FakeEditor
from jn.editor import Editor
from jn.errors import AuthenticationFailed, IoFailure, KeyInvalid, MissingKey
from jn.header import LegacyHeader, V1Header, decode
from jn.journal import Journal, render

KEY = "testing-encryption"


class FailingEditor:
    """Editor whose process exits non-zero."""

    def edit_temp(self, filename, content):
        raise IoFailure("editor exited with status 1")


class TestRender:

    def test_without_key_writes_plain_header(self):
        assert render(b"hello", None) == b"\x01\x00hello"

    def test_with_key_is_sealed(self):
        data = render(b"hello", KEY)
        header = decode(data)
        assert header.encrypted
        assert b"hello" not in data
        assert len(data) == header.size + len(b"hello")


class TestOpen:

    def test_legacy_file(self, tmp_path):
        path = tmp_path / "old.md"
        path.write_bytes(b"written before headers existed")
        journal = Journal.open(path)
        assert isinstance(journal.header, LegacyHeader)
        assert journal.plaintext() == b"written before headers existed"

    def test_plain_v1(self, tmp_path):
        path = tmp_path / "plain.md"
        path.write_bytes(render(b"plain", None))
        journal = Journal.open(path)
        assert not journal.encrypted
        assert journal.plaintext() == b"plain"

    def test_encrypted_needs_key(self, tmp_path):
        path = tmp_path / "secret.md"
        path.write_bytes(render(b"secret", KEY))
        with pytest.raises(MissingKey):
            Journal.open(path).plaintext()
        assert Journal.open(path, KEY).plaintext() == b"secret"

    def test_wrong_key(self, tmp_path):
        path = tmp_path / "secret.md"
        path.write_bytes(render(b"secret", KEY))
        with pytest.raises(AuthenticationFailed):
            Journal.open(path, "not-the-key").plaintext()

    def test_corrupted_ciphertext(self, tmp_path):
        path = tmp_path / "secret.md"
        data = bytearray(render(b"secret", KEY))
        data[-1] ^= 0x80
        path.write_bytes(bytes(data))
        with pytest.raises(AuthenticationFailed):
            Journal.open(path, KEY).plaintext()

    def test_missing_file(self, tmp_path):
        with pytest.raises(IoFailure):
            Journal.open(tmp_path / "nope.md")


class TestEdit:

    def test_edit_rewrites_with_fresh_nonce(self, tmp_path):
        path = tmp_path / "secret.md"
        path.write_bytes(render(b"same", KEY))
        before = path.read_bytes()

        editor = FakeEditor()
        Journal.open(path, KEY).edit(editor)

        after = path.read_bytes()
        assert editor.calls == [("secret.md", b"same")]
        assert after != before
        assert decode(after).nonce != decode(before).nonce
        assert Journal.open(path, KEY).plaintext() == b"same"

    def test_edit_with_key_encrypts_plain_file(self, tmp_path):
        path = tmp_path / "notes.md"
        path.write_bytes(b"legacy text")
        Journal.open(path, KEY).edit(FakeEditor(b"now secret"))
        journal = Journal.open(path, KEY)
        assert journal.encrypted
        assert journal.plaintext() == b"now secret"

    def test_edit_without_key_keeps_plaintext(self, tmp_path):
        path = tmp_path / "notes.md"
        path.write_bytes(b"legacy text")
        Journal.open(path).edit(FakeEditor(b"new text"))
        assert path.read_bytes() == b"\x01\x00new text"

    def test_invalid_key_rejected_before_editing(self, tmp_path):
        path = tmp_path / "notes.md"
        path.write_bytes(b"text")
        editor = FakeEditor()
        with pytest.raises(KeyInvalid):
            Journal.open(path, "short").edit(editor)
        assert editor.calls == []
        assert path.read_bytes() == b"text"

    def test_no_temp_files_left_behind(self, tmp_path):
        path = tmp_path / "notes.md"
        path.write_bytes(b"text")
        Journal.open(path, KEY).edit(FakeEditor())
        assert [p.name for p in tmp_path.iterdir()] == ["notes.md"]

    def test_editor_failure_leaves_file_untouched(self, tmp_path):
        path = tmp_path / "secret.md"
        path.write_bytes(render(b"secret", KEY))
        before = path.read_bytes()

        with pytest.raises(IoFailure):
            Journal.open(path, KEY).edit(FailingEditor())

        assert path.read_bytes() == before
        assert [p.name for p in tmp_path.iterdir()] == ["secret.md"]


class TestCreate:

    def test_create_encrypted(self, tmp_path):
        path = tmp_path / "new.md"
        editor = FakeEditor(b"first entry")
        journal = Journal.create(path, KEY, b"# template", editor)
        assert editor.calls == [("new.md", b"# template")]
        assert journal.encrypted
        assert Journal.open(path, KEY).plaintext() == b"first entry"

    def test_create_plain(self, tmp_path):
        path = tmp_path / "new.md"
        Journal.create(path, None, b"", FakeEditor(b"hi"))
        assert isinstance(Journal.open(path).header, V1Header)
        assert Journal.open(path).plaintext() == b"hi"

    def test_create_existing_fails(self, tmp_path):
        path = tmp_path / "new.md"
        path.write_bytes(b"keep me")
        editor = FakeEditor()
        with pytest.raises(IoFailure):
            Journal.create(path, None, b"", editor)
        assert editor.calls == []
        assert path.read_bytes() == b"keep me"

    def test_editor_failure_creates_nothing(self, tmp_path):
        path = tmp_path / "new.md"
        with pytest.raises(IoFailure):
            Journal.create(path, KEY, b"# template", FailingEditor())
        assert not path.exists()


@pytest.mark.skipif(os.name == "nt", reason="uses POSIX cp/false as the editor")
class TestEditor:

    def test_edit_temp_returns_edited_bytes(self, tmp_path):
        # "cp" stands in for an editor that overwrites the buffer.
        src = tmp_path / "replacement"
        src.write_bytes(b"edited")
        editor = Editor(command=f"cp {shlex.quote(str(src))}")
        assert editor.edit_temp("entry.md", b"original") == b"edited"

    def test_editor_failure_raises(self):
        editor = Editor(command="false")
        with pytest.raises(IoFailure):
            editor.edit_temp("entry.md", b"original")

    def test_missing_editor_binary(self):
        editor = Editor(command="definitely-not-an-editor-binary")
        with pytest.raises(IoFailure):
            editor.edit_temp("entry.md", b"original")

    @pytest.mark.parametrize("command", ["true", "false"])
    def test_temp_buffer_removed(self, tmp_path, monkeypatch, command):
        scratch = tmp_path / "scratch"
        scratch.mkdir()
        monkeypatch.setattr(tempfile, "tempdir", str(scratch))
        editor = Editor(command=command)

        if command == "false":
            with pytest.raises(IoFailure):
                editor.edit_temp("entry.md", b"original")
        else:
            assert editor.edit_temp("entry.md", b"original") == b"original"

        assert list(scratch.glob("jn-*")) == []

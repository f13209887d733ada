"""Tests for file_handler.py: path validation, encoding detection,
atomic writes, JSON helpers and file:// argument indirection."""

import json
import os

import pytest

from ghost_mcp_server.file_handler import (
    FILE_REFERENCE_PREFIX,
    is_file_reference,
    read_file_with_encoding,
    read_json_file,
    resolve_file_reference,
    resolve_file_references,
    resolve_file_references_async,
    validate_file_path,
    write_file,
    write_json_file,
)

# =============================================================================
# validate_file_path
# =============================================================================


class TestValidateFilePath:
    def test_valid_absolute_path(self, tmp_path):
        target = tmp_path / "post.md"
        target.write_text("# Hi\n")
        assert validate_file_path(str(target)) == target.resolve()

    def test_relative_path_rejected(self):
        with pytest.raises(ValueError, match="must be absolute"):
            validate_file_path("post.md")

    def test_missing_file(self, tmp_path):
        with pytest.raises(ValueError, match="File not found"):
            validate_file_path(str(tmp_path / "missing.md"))

    def test_directory_rejected(self, tmp_path):
        with pytest.raises(ValueError, match="not a file"):
            validate_file_path(str(tmp_path))


# =============================================================================
# Reading and writing
# =============================================================================


class TestReadFileWithEncoding:
    def test_empty_file(self, tmp_path):
        target = tmp_path / "empty.md"
        target.write_bytes(b"")
        assert read_file_with_encoding(target) == ("", "utf-8")

    def test_ascii_reported_as_utf8(self, tmp_path):
        target = tmp_path / "plain.md"
        target.write_bytes(b"Just some plain text in a post body.\n")

        content, encoding = read_file_with_encoding(target)

        assert content == "Just some plain text in a post body.\n"
        assert encoding == "utf-8"

    def test_utf8_text(self, tmp_path):
        text = "Un billet écrit à Montréal, déjà publié et très apprécié.\n"
        target = tmp_path / "fr.md"
        target.write_bytes(text.encode("utf-8"))

        content, _encoding = read_file_with_encoding(target)

        assert content == text


class TestWriteFile:
    def test_creates_parent_directories(self, tmp_path):
        target = tmp_path / "posts" / "hello" / "markdown.md"

        written = write_file(target, "# Hello\n")

        assert target.read_text() == "# Hello\n"
        assert written == len(b"# Hello\n")

    def test_overwrites_existing(self, tmp_path):
        target = tmp_path / "html.html"
        target.write_text("old")

        write_file(target, "<p>new</p>")

        assert target.read_text() == "<p>new</p>"

    def test_no_temp_files_left(self, tmp_path):
        write_file(tmp_path / "a.md", "x")
        assert os.listdir(tmp_path) == ["a.md"]

    def test_failed_write_leaves_original(self, tmp_path, monkeypatch):
        target = tmp_path / "meta.json"
        target.write_text("original")

        def _fail(src, dst):
            raise OSError("disk full")

        monkeypatch.setattr("ghost_mcp_server.file_handler.os.replace", _fail)

        with pytest.raises(OSError, match="disk full"):
            write_file(target, "replacement")

        assert target.read_text() == "original"
        assert os.listdir(tmp_path) == ["meta.json"]


class TestJsonFiles:
    def test_pretty_printed_with_trailing_newline(self, tmp_path):
        target = tmp_path / "meta.json"

        write_json_file(target, {"id": "abc", "title": "Café"})

        text = target.read_text(encoding="utf-8")
        assert text == '{\n  "id": "abc",\n  "title": "Café"\n}\n'

    def test_read_back(self, tmp_path):
        target = tmp_path / "meta.json"
        write_json_file(target, {"tags": ["a", "b"]})
        assert read_json_file(target) == {"tags": ["a", "b"]}

    def test_invalid_json(self, tmp_path):
        target = tmp_path / "meta.json"
        target.write_text("{not json")
        with pytest.raises(json.JSONDecodeError):
            read_json_file(target)


# =============================================================================
# file:// indirection
# =============================================================================


class TestFileReferences:
    @pytest.mark.parametrize(
        "value,expected",
        [
            ("file:///tmp/x.html", True),
            ("<p>file://</p>", False),
            (None, False),
            (42, False),
        ],
    )
    def test_is_file_reference(self, value, expected):
        assert is_file_reference(value) is expected

    def test_plain_value_unchanged(self):
        assert resolve_file_reference("<p>inline</p>") == "<p>inline</p>"

    def test_resolves_contents(self, tmp_path):
        body = tmp_path / "body.html"
        body.write_text("<p>from disk</p>")

        assert (
            resolve_file_reference(f"{FILE_REFERENCE_PREFIX}{body}")
            == "<p>from disk</p>"
        )

    def test_relative_reference_rejected(self):
        with pytest.raises(ValueError, match="must be absolute"):
            resolve_file_reference("file://body.html")

    def test_missing_reference(self, tmp_path):
        with pytest.raises(ValueError, match="File not found"):
            resolve_file_reference(f"file://{tmp_path / 'nope.html'}")

    def test_only_named_keys_resolved(self, tmp_path):
        body = tmp_path / "body.html"
        body.write_text("<p>x</p>")
        ref = f"file://{body}"
        args = {"html": ref, "title": ref}

        resolved = resolve_file_references(args, ("html", "lexical"))

        assert resolved == {"html": "<p>x</p>", "title": ref}
        assert args["html"] == ref

    async def test_async_wrapper(self, tmp_path):
        body = tmp_path / "lexical.json"
        body.write_text('{"root": {}}')

        resolved = await resolve_file_references_async(
            {"lexical": f"file://{body}"}, ("lexical",)
        )

        assert resolved == {"lexical": '{"root": {}}'}

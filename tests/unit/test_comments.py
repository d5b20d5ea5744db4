# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Unit tests for comment stripping."""

from vendorsplit import strip_comments


def test_cmt_001_strips_line_and_block_comments() -> None:
    source = (
        "// import a from 'lodash'\n"
        "const x = 1; /* require('left-pad')\n"
        "   still comment */ const y = 2;\n"
    )

    stripped = strip_comments(source)

    assert "lodash" not in stripped
    assert "left-pad" not in stripped
    assert "const x = 1;" in stripped
    assert "const y = 2;" in stripped


def test_cmt_002_block_comment_match_is_non_greedy() -> None:
    source = "/* a */ import 'keep-me'; /* b */"

    stripped = strip_comments(source)

    assert "import 'keep-me';" in stripped


def test_cmt_003_textual_mode_also_strips_inside_strings() -> None:
    source = 'const url = "https://example.com";\n'

    stripped = strip_comments(source)

    assert "example.com" not in stripped


def test_cmt_004_preserve_strings_keeps_literal_contents() -> None:
    source = (
        'const url = "https://example.com"; // trailing\n'
        "const tpl = `/* not a comment */`;\n"
        "/* real\ncomment */ const z = 3;\n"
    )

    stripped = strip_comments(source, preserve_strings=True)

    assert '"https://example.com"' in stripped
    assert "`/* not a comment */`" in stripped
    assert "trailing" not in stripped
    assert "real" not in stripped
    assert stripped.count("\n") == source.count("\n")


def test_cmt_005_preserve_strings_handles_escaped_quotes() -> None:
    source = "const s = 'it\\'s // fine'; // gone\n"

    stripped = strip_comments(source, preserve_strings=True)

    assert "'it\\'s // fine'" in stripped
    assert "gone" not in stripped

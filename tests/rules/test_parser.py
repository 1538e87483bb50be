"""Tests for the plain-text rule parser."""

import logging
from pathlib import Path

from singbox_rules.rules.parser import is_comment, iter_rule_lines, parse_text_file


def test_parse_skips_blank_lines_and_comments(tmp_path: Path) -> None:
    path = tmp_path / "direct-domains.txt"
    path.write_text(
        "# direct domains\n"
        "\n"
        "example.com\n"
        "// legacy comment\n"
        "   .example.org   \n"
        "\t\n",
        encoding="utf-8",
    )

    assert parse_text_file(path) == ["example.com", ".example.org"]


def test_parse_keeps_order_and_duplicates(tmp_path: Path) -> None:
    path = tmp_path / "proxy-domains.txt"
    path.write_text("b.com\na.com\nb.com\n", encoding="utf-8")

    assert parse_text_file(path) == ["b.com", "a.com", "b.com"]


def test_parse_handles_crlf_and_bom(tmp_path: Path) -> None:
    path = tmp_path / "direct-ips.txt"
    path.write_bytes("\ufeff10.0.0.0/8\r\n# note\r\n192.168.0.0/16\r\n".encode("utf-8"))

    assert parse_text_file(path) == ["10.0.0.0/8", "192.168.0.0/16"]


def test_parse_missing_file_returns_empty_and_warns(tmp_path: Path, caplog) -> None:
    with caplog.at_level(logging.WARNING, logger="singbox_rules.rules.parser"):
        result = parse_text_file(tmp_path / "missing.txt")

    assert result == []
    assert "Source file not found" in caplog.text


def test_iter_rule_lines_is_lazy() -> None:
    consumed: list[str] = []

    def _lines():
        for line in ["a.com", "# skip", "b.com"]:
            consumed.append(line)
            yield line

    iterator = iter_rule_lines(_lines())
    assert next(iterator) == "a.com"
    assert consumed == ["a.com"]


def test_is_comment_prefixes() -> None:
    assert is_comment("# hash")
    assert is_comment("// slashes")
    assert not is_comment("example.com")
    assert not is_comment("/single-slash")

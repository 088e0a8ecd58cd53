"""Tests for matching message file parts against an asset."""

from __future__ import annotations

import pytest

from reclaim.db.models import Asset, AssetKind
from reclaim.purge.matcher import AssetMatcher, filter_parts


def _file(url="", filename="", **extra):
    return {"type": "file", "url": url, "filename": filename, **extra}


def test_key_inside_url_matches_and_order_kept():
    parts = [
        {"type": "text", "text": "hi"},
        _file(url="https://x/key123.pdf", filename="a.pdf"),
        {"type": "text", "text": "bye"},
    ]
    kept = filter_parts(parts, AssetMatcher(file_key="key123"))
    assert kept == [{"type": "text", "text": "hi"}, {"type": "text", "text": "bye"}]


def test_exact_url_matches():
    matcher = AssetMatcher(file_url="https://x/a.pdf")
    assert matcher.matches(_file(url="https://x/a.pdf"))
    assert not matcher.matches(_file(url="https://x/a.pdf?v=2"))


def test_exact_filename_matches():
    matcher = AssetMatcher(file_name="a.pdf")
    assert matcher.matches(_file(filename="a.pdf"))
    assert not matcher.matches(_file(filename="A.pdf"))


def test_any_single_field_is_enough():
    matcher = AssetMatcher(file_url="https://x/other", file_key="zzz", file_name="a.pdf")
    assert matcher.matches(_file(url="https://y/unrelated", filename="a.pdf"))


def test_part_without_type_is_kept():
    part = {"url": "https://x/key123.pdf", "filename": "a.pdf"}
    matcher = AssetMatcher(file_url="https://x/key123.pdf", file_key="key123", file_name="a.pdf")
    assert not matcher.matches(part)
    assert filter_parts([part], matcher) == [part]


@pytest.mark.parametrize("part", ["https://x/key123.pdf", 42, None, ["file"]])
def test_non_dict_parts_never_match(part):
    assert not AssetMatcher(file_key="key123").matches(part)


def test_non_file_part_never_matches():
    part = {"type": "image", "url": "https://x/key123.png"}
    assert not AssetMatcher(file_key="key123").matches(part)


def test_empty_fields_never_match():
    matcher = AssetMatcher(file_url="", file_key="", file_name="")
    assert matcher.is_empty
    assert not matcher.matches(_file(url="", filename=""))
    assert not matcher.matches(_file(url="https://x/a.pdf", filename="a.pdf"))


def test_non_string_part_fields_ignored():
    matcher = AssetMatcher(file_key="key123", file_name="a.pdf")
    assert not matcher.matches({"type": "file", "url": ["key123"], "filename": {"name": "a.pdf"}})


def test_for_asset_copies_identifying_fields():
    asset = Asset(
        id="d1",
        kind=AssetKind.DOCUMENT,
        owner_id="u",
        file_name="a.pdf",
        file_url="https://x/a.pdf",
        file_key="key123",
    )
    matcher = AssetMatcher.for_asset(asset)
    assert matcher == AssetMatcher(file_url="https://x/a.pdf", file_key="key123", file_name="a.pdf")
    assert not matcher.is_empty


def test_filter_parts_without_match_returns_equal_list():
    parts = [{"type": "text", "text": "hi"}, _file(url="https://x/other.pdf")]
    assert filter_parts(parts, AssetMatcher(file_key="key123")) == parts


def test_only_referencing_file_part_removed():
    text = {"type": "text", "text": "summary please"}
    by_key = {"type": "file", "url": "https://x/key123/a.pdf"}
    other = {"type": "file", "filename": "report.pdf"}
    kept = filter_parts([text, by_key, other], AssetMatcher(file_key="key123"))
    assert kept == [text, other]

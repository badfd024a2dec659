"""Unit tests for name sanitizing."""

import os

import pytest

from commitstore.core.paths import sanitize


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("HelloRepo", "HelloRepo"),
        ("..", ""),
        (os.sep, ""),
        (f"..{os.sep}..{os.sep}etc", "etc"),
        (f"a{os.sep}b", "ab"),
        ("a..b", "ab"),
        ("...", "."),
        ("", ""),
    ],
)
def test_sanitize(raw, expected):
    assert sanitize(raw) == expected


def test_sanitize_is_idempotent_on_safe_names():
    for name in ["repo", "my-repo", "repo.v2", "Repo_1"]:
        assert sanitize(sanitize(name)) == sanitize(name) == name


def test_separator_removal_cannot_form_parent_token():
    assert sanitize(f".{os.sep}.") == ""


def test_sanitized_name_never_escapes():
    names = [f"..{os.sep}..{os.sep}x", f"a{os.sep}..{os.sep}b", f"....{os.sep}{os.sep}..", f".{os.sep}.", "x..."]
    for name in names:
        cleaned = sanitize(name)
        assert os.sep not in cleaned
        assert ".." not in cleaned

from __future__ import annotations

import pytest

from errors import ApiError
from models import ProfileRecord
from profile_parser import iter_candidates, parse_profiles


def test_parse_profiles_top_level_data_array() -> None:
    document = {
        "data": [
            {
                "type": "podcasts",
                "attributes": {"name": "Show A", "artistName": "Jane", "url": "https://x/a"},
            }
        ]
    }

    assert parse_profiles(document, "true crime") == [
        ProfileRecord(author_name="Jane", profile_title="Show A", query="true crime", url="https://x/a")
    ]


def test_parse_profiles_nested_groups_and_dedup_keeps_first() -> None:
    document = {
        "results": {
            "groups": [
                {
                    "groupId": "top",
                    "data": [
                        {"attributes": {"name": "First", "artistName": "A", "url": "https://x/1"}},
                    ],
                },
                {
                    "groupId": "show",
                    "data": [
                        {"attributes": {"name": "Later copy", "artistName": "B", "url": "https://x/1"}},
                        {"attributes": {"name": "Second", "url": "https://x/2"}},
                    ],
                },
            ]
        },
        "resources": {"podcasts": {"123": {"attributes": {"name": "Third", "url": "https://x/3"}}}},
    }

    profiles = parse_profiles(document, "q")

    assert [p.url for p in profiles] == ["https://x/1", "https://x/2", "https://x/3"]
    assert profiles[0].profile_title == "First"
    assert profiles[0].author_name == "A"
    assert profiles[1].author_name == ""


def test_parse_profiles_finds_candidates_inside_attributes() -> None:
    document = {
        "attributes": {
            "url": "https://x/outer",
            "name": "Outer",
            "relationships": {"channel": {"attributes": {"url": "https://x/inner", "name": "Inner"}}},
        }
    }

    assert [p.url for p in parse_profiles(document, "q")] == ["https://x/outer", "https://x/inner"]


def test_parse_profiles_non_string_fields_default_to_empty() -> None:
    document = [{"attributes": {"url": "https://x/a", "name": 7, "artistName": ["Jane"]}}]

    (profile,) = parse_profiles(document, "q")
    assert profile.profile_title == ""
    assert profile.author_name == ""


def test_parse_profiles_without_usable_url_returns_empty() -> None:
    document = {
        "data": [
            {"attributes": {"name": "No url"}},
            {"attributes": {"url": ""}},
            {"attributes": {"url": 12}},
            {"attributes": "not an object"},
        ],
        "meta": {"count": 3},
    }

    assert parse_profiles(document, "q") == []


@pytest.mark.parametrize("document", [None, 3, "text", [], {}])
def test_parse_profiles_scalar_and_empty_documents(document: object) -> None:
    assert parse_profiles(document, "q") == []


def test_parse_profiles_raises_api_error_with_detail() -> None:
    with pytest.raises(ApiError) as excinfo:
        parse_profiles({"errors": [{"detail": "bad term"}]}, "q")
    assert str(excinfo.value) == "bad term"


def test_parse_profiles_error_field_priority_and_join() -> None:
    document = {
        "errors": [
            {"title": "Unauthorized", "message": "ignored"},
            {"detail": "  ", "message": "Token expired"},
            {"code": "40100"},
        ]
    }

    with pytest.raises(ApiError) as excinfo:
        parse_profiles(document, "q")
    assert str(excinfo.value) == "Unauthorized; Token expired"


def test_parse_profiles_error_fallback_message() -> None:
    with pytest.raises(ApiError, match="provider returned an error response"):
        parse_profiles({"errors": [{"status": "500"}, "oops"]}, "q")


def test_parse_profiles_empty_errors_array_is_not_an_error() -> None:
    document = {"errors": [], "data": [{"attributes": {"url": "https://x/a"}}]}
    assert len(parse_profiles(document, "q")) == 1


def test_parse_profiles_is_stable_across_calls() -> None:
    document = {"a": [{"attributes": {"url": "https://x/1"}}], "b": {"attributes": {"url": "https://x/2"}}}

    assert parse_profiles(document, "q") == parse_profiles(document, "q")


def test_iter_candidates_handles_deep_nesting() -> None:
    document: dict = {"attributes": {"url": "https://x/deep"}}
    for _ in range(5000):
        document = {"child": [document]}

    assert [c["url"] for c in iter_candidates(document)] == ["https://x/deep"]

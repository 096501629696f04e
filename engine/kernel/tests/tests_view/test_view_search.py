"""
Vivarium Kernel — Search Tests

AND-of-substrings over a lower-cased blob of the searchable fields.
"""

import pytest

from engine.kernel.search import blob_matches, build_blob, search_records, tokenize
from engine.kernel.types import SearchSpec

ANIMAL_SEARCH = ("name", "species", "strain", "location", "notes", "experiments")


def _ids(records):
    return [r["_id"] for r in records]


def test_tokenize_drops_empties_and_lowercases():
    assert tokenize("  Blue\tCAGE \n") == ["blue", "cage"]


def test_blob_joins_fields_and_lists(animals, animal_accessor):
    blob = build_blob(animals[0], ("name", "experiments"), animal_accessor)
    assert blob == "whiskers exp-7 exp-9"


def test_blob_tolerates_missing_fields(animal_accessor):
    assert build_blob({}, ("name", "notes", "experiments"), animal_accessor) == "  "


def test_tokens_need_not_be_adjacent():
    assert blob_matches("blue cage, top shelf", "shelf blue")
    assert not blob_matches("blue cage, top shelf", "shelf red")


@pytest.mark.parametrize(("first", "second"), [("blue cage", "cage blue"), ("exp-7 room", "room exp-7")])
def test_token_order_does_not_matter(animals, animal_accessor, first, second):
    a = search_records(animals, SearchSpec(first, ANIMAL_SEARCH), animal_accessor)
    b = search_records(animals, SearchSpec(second, ANIMAL_SEARCH), animal_accessor)
    assert _ids(a) == _ids(b)


@pytest.mark.parametrize("query", ["", "   ", "\t\n"])
def test_blank_query_returns_input_unchanged(animals, animal_accessor, query):
    assert search_records(animals, SearchSpec(query, ANIMAL_SEARCH), animal_accessor) == animals


def test_search_is_case_insensitive(animals, animal_accessor):
    assert _ids(search_records(animals, SearchSpec("WHISKERS", ANIMAL_SEARCH), animal_accessor)) == ["a1"]


def test_search_matches_list_elements(animals, animal_accessor):
    assert _ids(search_records(animals, SearchSpec("exp-7", ANIMAL_SEARCH), animal_accessor)) == ["a1", "a3"]


def test_search_falls_back_to_table_fields(animals, animal_accessor):
    # No fields on the spec: the table's search fields apply
    assert _ids(search_records(animals, SearchSpec("wistar"), animal_accessor)) == ["a4"]


def test_search_only_looks_at_configured_fields(animals, animal_accessor):
    # "female" is a gender, which is not searchable
    assert search_records(animals, SearchSpec("female", ("name",)), animal_accessor) == []


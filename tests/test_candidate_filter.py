# tests/test_candidate_filter.py

import pytest

from shidduch.logic.candidate_filter import filter_candidates, opposite_gender


def _entry(entry_id, gender):
    parsed = None if gender is Ellipsis else {"name": entry_id, "gender": gender}
    return {"_id": entry_id, "parsed_data": parsed}


def test_opposite_gender():
    assert opposite_gender("male") == "female"
    assert opposite_gender(" FEMALE ") == "male"
    assert opposite_gender(None) is None
    assert opposite_gender("unknown") is None


def test_male_child_keeps_only_female_candidates_case_insensitive():
    pool = [_entry("a", "Female"), _entry("b", "male"), _entry("c", " female "), _entry("d", None)]

    sel = filter_candidates("Male", pool)

    assert [e["_id"] for e in sel.candidates] == ["a", "c"]
    assert sel.target_gender == "female"
    assert sel.original_count == 4
    assert sel.filtered_out == 2


@pytest.mark.parametrize("child_gender", [None, "", "unknown", "other"])
def test_unrecognised_child_gender_passes_full_pool(child_gender):
    pool = [_entry("a", "female"), _entry("b", "male"), _entry("c", Ellipsis)]

    sel = filter_candidates(child_gender, pool)

    assert [e["_id"] for e in sel.candidates] == ["a", "b", "c"]
    assert sel.target_gender is None
    assert sel.filtered_out == 0


def test_entries_without_parsed_data_never_match_a_filtered_search():
    sel = filter_candidates("female", [_entry("a", Ellipsis), _entry("b", "male")])
    assert [e["_id"] for e in sel.candidates] == ["b"]


def test_female_child_against_mixed_pool():
    pool = [_entry(f"m{i}", "male") for i in range(3)] + [_entry(f"f{i}", "female") for i in range(2)]

    sel = filter_candidates("female", pool)

    assert [e["_id"] for e in sel.candidates] == ["m0", "m1", "m2"]
    assert sel.filtered_out == 2


def test_empty_after_filter():
    sel = filter_candidates("male", [_entry("b", "male")])
    assert sel.is_empty
    assert sel.original_count == 1

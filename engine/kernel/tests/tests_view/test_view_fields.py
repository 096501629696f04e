"""
Vivarium Kernel — Field Access Tests

FieldAccessor.get is total: missing and malformed values come back as the
kind's empty value. Derived fields are evaluated against a fixed `now`.
"""

from datetime import UTC, date, datetime

import pytest

from engine.kernel.entities import ANIMALS
from engine.kernel.fields import FieldAccessor, coerce, parse_date, text_of
from engine.kernel.types import EARLIEST, FieldDef, FieldTable

# ============================================================================
# Empty values
# ============================================================================


class TestEmptyValues:
    def test_missing_text_is_empty_string(self, animal_accessor):
        assert animal_accessor.get({}, "name") == ""

    def test_missing_number_is_zero(self, animal_accessor):
        assert animal_accessor.get({}, "weight") == 0

    def test_missing_date_is_earliest(self, animal_accessor):
        assert animal_accessor.get({}, "date_of_birth") == EARLIEST

    def test_missing_list_is_empty_tuple(self, animal_accessor):
        assert animal_accessor.get({}, "experiments") == ()

    def test_missing_derived_bool_is_false(self, animal_accessor):
        assert animal_accessor.get({}, "has_experiments") is False
        assert animal_accessor.get({}, "needs_health_check") is False

    def test_unparseable_date_is_earliest(self, animal_accessor):
        assert animal_accessor.get({"dateOfBirth": "last spring"}, "date_of_birth") == EARLIEST

    def test_malformed_number_is_zero(self, animal_accessor):
        assert animal_accessor.get({"weight": "heavy"}, "weight") == 0

    def test_numeric_string_is_parsed(self, animal_accessor):
        assert animal_accessor.get({"weight": "21.5"}, "weight") == 21.5


# ============================================================================
# Sources and derived fields
# ============================================================================


class TestSources:
    def test_camel_case_source(self, animals, animal_accessor):
        assert animal_accessor.get(animals[0], "health_status") == "good"

    def test_list_field_returns_sequence(self, animals, animal_accessor):
        assert animal_accessor.get(animals[0], "experiments") == ("EXP-7", "EXP-9")

    def test_has_experiments(self, animals, animal_accessor):
        assert [animal_accessor.get(a, "has_experiments") for a in animals] == [True, False, True, False]

    def test_needs_health_check_compares_to_now(self, animals, animal_accessor):
        # a1 was due 2024-05-01, a2 is due 2024-07-01, now is 2024-06-01
        assert animal_accessor.get(animals[0], "needs_health_check") is True
        assert animal_accessor.get(animals[1], "needs_health_check") is False

    def test_due_today_uses_calendar_day_of_now(self, tasks, task_accessor):
        earlier_today = {"id": 6, "status": "pending", "dueDate": "2024-06-01T08:00:00Z"}
        assert task_accessor.get(earlier_today, "due_today") is True
        assert [task_accessor.get(t, "due_today") for t in tasks] == [False] * 5

    def test_due_this_week_is_the_next_seven_days(self, tasks, task_accessor):
        # now is 2024-06-01 12:00, so the window closes 2024-06-08 12:00
        assert [task_accessor.get(t, "due_this_week") for t in tasks] == [False, True, False, False, False]
        earlier_today = {"id": 6, "dueDate": "2024-06-01T08:00:00Z"}
        assert task_accessor.get(earlier_today, "due_this_week") is False
        edge = {"id": 7, "dueDate": "2024-06-08T12:00:00Z"}
        assert task_accessor.get(edge, "due_this_week") is True

    def test_created_falls_back_to_date_of_birth(self, animal_accessor):
        record = {"dateOfBirth": "2023-01-02"}
        assert animal_accessor.get(record, "created") == datetime(2023, 1, 2, tzinfo=UTC)

    def test_undeclared_field_is_raw_lookup(self, animal_accessor):
        assert animal_accessor.get({"color": "albino"}, "color") == "albino"
        assert animal_accessor.get({}, "color") is None

    def test_record_id_uses_table_id_field(self, animals, animal_accessor):
        assert animal_accessor.record_id(animals[2]) == "a3"

    def test_permissive_table_knows_everything(self):
        accessor = FieldAccessor(FieldTable(kind="things"))
        assert accessor.knows("anything")
        assert not FieldAccessor(ANIMALS).knows("anything")


# ============================================================================
# Helpers
# ============================================================================


class TestParseDate:
    def test_zulu_suffix(self):
        assert parse_date("2024-06-01T12:00:00Z") == datetime(2024, 6, 1, 12, tzinfo=UTC)

    def test_naive_is_utc(self):
        assert parse_date("2024-06-01T12:00:00").tzinfo is UTC

    def test_plain_date(self):
        assert parse_date(date(2024, 6, 1)) == datetime(2024, 6, 1, tzinfo=UTC)

    @pytest.mark.parametrize("value", ["", "not a date", 42, None])
    def test_unreadable(self, value):
        assert parse_date(value) is None


def test_rank_field_requires_ranks():
    with pytest.raises(ValueError):
        FieldDef("priority", "rank")


def test_unknown_field_kind_rejected():
    with pytest.raises(ValueError):
        FieldDef("x", "colour")


def test_coerce_bool_into_number():
    assert coerce(True, FieldDef("n", "number")) == 1


def test_text_of_joins_sequences():
    assert text_of(["EXP-7", "EXP-9"]) == "EXP-7 EXP-9"
    assert text_of(None) == ""

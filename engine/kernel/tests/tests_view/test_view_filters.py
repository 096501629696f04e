"""
Vivarium Kernel — Filter Engine Tests

AND of active criteria. UNSET, False and empty sets never constrain;
True means truthy; sets mean "any of"; everything else is equality.
"""

import pytest

from engine.kernel.filters import criterion_matches, filter_records, matches
from engine.kernel.types import UNSET, FilterSpec


def _ids(records, id_field="_id"):
    return [r[id_field] for r in records]


# ============================================================================
# Unset criteria
# ============================================================================


class TestUnset:
    @pytest.mark.parametrize("criterion", [UNSET, False, None, frozenset(), set()])
    def test_unset_criteria_match_every_record(self, animals, animal_accessor, criterion):
        spec = FilterSpec({"status": criterion, "species": criterion, "has_experiments": criterion})
        assert all(matches(a, spec, animal_accessor) for a in animals)

    def test_empty_spec_returns_input_unchanged(self, animals, animal_accessor):
        assert filter_records(animals, FilterSpec(), animal_accessor) == animals

    def test_has_experiments_false_is_unset(self, animals, animal_accessor):
        spec = FilterSpec({"has_experiments": False})
        assert len(filter_records(animals, spec, animal_accessor)) == len(animals)

    def test_unknown_field_is_ignored(self, animals, animal_accessor):
        spec = FilterSpec({"favourite_colour": "green"})
        assert filter_records(animals, spec, animal_accessor) == animals


# ============================================================================
# Concrete criteria
# ============================================================================


class TestEquality:
    @pytest.mark.parametrize("status", ["active", "quarantine", "deceased", "inactive"])
    def test_single_criterion_yields_exact_subset(self, animals, animal_accessor, status):
        kept = filter_records(animals, FilterSpec({"status": status}), animal_accessor)
        assert _ids(kept) == [a["_id"] for a in animals if a["status"] == status]

    def test_criteria_are_anded(self, animals, animal_accessor):
        spec = FilterSpec({"status": "active", "species": "mouse"})
        assert _ids(filter_records(animals, spec, animal_accessor)) == ["a3"]

    def test_case_sensitive_by_default(self, animals, animal_accessor):
        assert filter_records(animals, FilterSpec({"species": "Rat"}), animal_accessor) == []

    def test_case_insensitive_option(self, animals, animal_accessor):
        kept = filter_records(animals, FilterSpec({"species": "Rat"}), animal_accessor, case_insensitive=True)
        assert _ids(kept) == ["a1", "a4"]

    def test_scalar_against_list_field_is_membership(self, animals, animal_accessor):
        kept = filter_records(animals, FilterSpec({"experiments": "EXP-7"}), animal_accessor)
        assert _ids(kept) == ["a1", "a3"]

    def test_task_experiment_id(self, task_accessor):
        tasks = [
            {"id": 1, "title": "Dose group A", "experimentId": "EXP-1"},
            {"id": 2, "title": "Dose group B", "experimentId": "EXP-2"},
            {"id": 3, "title": "Order feed"},
        ]
        kept = filter_records(tasks, FilterSpec({"experiment_id": "EXP-1"}), task_accessor)
        assert _ids(kept, "id") == [1]
        assert _ids(kept) == ["a1", "a3"]


class TestTruthiness:
    def test_true_keeps_truthy(self, animals, animal_accessor):
        kept = filter_records(animals, FilterSpec({"has_experiments": True}), animal_accessor)
        assert _ids(kept) == ["a1", "a3"]

    def test_derived_needs_health_check(self, animals, animal_accessor):
        kept = filter_records(animals, FilterSpec({"needs_health_check": True}), animal_accessor)
        assert _ids(kept) == ["a1"]


class TestMembership:
    def test_set_criterion_is_any_of(self, tasks, task_accessor):
        spec = FilterSpec({"status": frozenset({"pending", "review"})})
        assert _ids(filter_records(tasks, spec, task_accessor), "id") == [1, 4, 5]

    def test_set_criterion_on_camel_case_source(self, tasks, task_accessor):
        spec = FilterSpec({"assignee": frozenset({"u1"}), "priority": frozenset({"medium", "low"})})
        assert _ids(filter_records(tasks, spec, task_accessor), "id") == [1, 3]

    def test_set_criterion_against_list_field(self, tasks, task_accessor):
        spec = FilterSpec({"labels": frozenset({"supply", "monthly"})})
        assert _ids(filter_records(tasks, spec, task_accessor), "id") == [3]

    def test_criterion_matches_helpers(self):
        assert criterion_matches("a", {"a", "b"})
        assert not criterion_matches("c", {"a", "b"})
        assert criterion_matches(("x", "y"), "y")
        assert not criterion_matches(0, True)


# ============================================================================
# Legacy parameters
# ============================================================================


class TestFromParams:
    def test_legacy_sentinels_become_unset(self):
        spec = FilterSpec.from_params({"status": "__all__", "species": "", "health_status": None, "has_experiments": False})
        assert all(c is UNSET for c in spec.criteria.values())
        assert spec.is_empty()

    def test_lists_become_frozensets(self):
        spec = FilterSpec.from_params({"status": ["pending", "__all__", "review"]})
        assert spec.criteria["status"] == frozenset({"pending", "review"})

    def test_list_of_sentinels_is_unset(self):
        assert FilterSpec.from_params({"status": ["__all__"]}).criteria["status"] is UNSET

    def test_zero_is_a_real_value(self):
        # 0 == False, but only the bool False means "no filter"
        spec = FilterSpec.from_params({"offspring_count": 0, "has_experiments": True})
        assert spec.active() == {"offspring_count": 0, "has_experiments": True}

    def test_active_lists_constraining_criteria(self):
        spec = FilterSpec.from_params({"status": "active", "species": "__all__"})
        assert spec.active() == {"status": "active"}

    def test_with_and_without(self):
        spec = FilterSpec({"status": "active"}).with_criterion("species", "rat")
        assert spec.active() == {"status": "active", "species": "rat"}
        assert spec.without("status").active() == {"species": "rat"}

    def test_clear(self):
        spec = FilterSpec({"status": "active"})
        spec.clear()
        assert spec.is_empty()

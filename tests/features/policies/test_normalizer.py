# (c) Copyright Datacraft, 2026
"""Tests for subject normalization."""
from types import SimpleNamespace

import pytest

from taskhub.core.features.policies import (
    RoleTier, Subject, UNAUTHENTICATED, normalize,
)


def test_full_record_is_normalized():
    subject = normalize({
        "id": 2, "role": "Manager", "hierarchy": 3,
        "division": " Eng ", "department": "Eng.Backend",
    })

    assert subject == Subject(
        id="2",
        tier=RoleTier.MANAGER,
        hierarchy=3,
        division="Eng",
        department="Eng.Backend",
        role_label="manager",
    )


def test_missing_fields_default_to_least_privilege():
    subject = normalize({"id": 9})

    assert subject.tier is RoleTier.STAFF
    assert subject.hierarchy == 1
    assert subject.division is None
    assert subject.department is None


@pytest.mark.parametrize("role", ["", "superuser", None, 42, "  "])
def test_unknown_role_is_staff(role):
    assert normalize({"id": 1, "role": role}).tier is RoleTier.STAFF


@pytest.mark.parametrize("hierarchy", [None, 0, -3, "abc", 2.5, True])
def test_invalid_hierarchy_defaults_to_one(hierarchy):
    assert normalize({"id": 1, "hierarchy": hierarchy}).hierarchy == 1


def test_numeric_string_hierarchy_is_accepted():
    assert normalize({"id": 1, "hierarchy": "4"}).hierarchy == 4


def test_empty_division_is_unset_not_empty_string():
    subject = normalize({"id": 1, "division": "", "department": "   "})

    assert subject.division is None
    assert subject.department is None


@pytest.mark.parametrize("raw", [None, {}, {"id": None}, {"id": ""}, {"role": "admin"}])
def test_unresolvable_user_is_unauthenticated(raw):
    assert normalize(raw) is UNAUTHENTICATED


def test_attribute_records_are_accepted():
    row = SimpleNamespace(id=5, role="admin", hierarchy=None, division="Ops", department=None)

    subject = normalize(row)

    assert subject.tier is RoleTier.ADMIN
    assert subject.hierarchy == 1
    assert subject.division == "Ops"


def test_hr_role_keeps_label_but_has_staff_tier():
    subject = normalize({"id": 7, "role": "HR"})

    assert subject.tier is RoleTier.STAFF
    assert subject.role_label == "hr"


def test_unauthenticated_is_falsy_and_not_a_subject():
    assert not UNAUTHENTICATED
    assert not isinstance(UNAUTHENTICATED, Subject)


def test_tiers_are_ordered():
    assert RoleTier.STAFF < RoleTier.MANAGER < RoleTier.ADMIN
    assert max(RoleTier) is RoleTier.ADMIN

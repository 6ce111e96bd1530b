"""
Profile business-rule validator tests.
"""
from __future__ import annotations

import json

import pytest

from taxplanner.engine.schemas import DetailedIncomeProfile
from taxplanner.income.validator import validate_profile_inputs


def test_valid_profile_passes() -> None:
    validate_profile_inputs(DetailedIncomeProfile(salary=1_000_000, fd_income=20_000))


def test_capital_losses_are_allowed() -> None:
    validate_profile_inputs(DetailedIncomeProfile(stcg=-50_000, ltcg=-10_000))


def test_house_property_loss_is_allowed() -> None:
    """Property tax on a vacant property leaves a negative net rental income."""
    validate_profile_inputs(DetailedIncomeProfile(salary=1_500_000, rental_income=-5_000))


@pytest.mark.parametrize(
    "field_name",
    ["salary", "fd_income", "bond_income", "dividend_income"],
)
def test_negative_slab_income_rejected(field_name: str) -> None:
    profile = DetailedIncomeProfile(**{field_name: -1})
    with pytest.raises(ValueError) as exc_info:
        validate_profile_inputs(profile)

    violations = json.loads(str(exc_info.value))
    assert [v["field"] for v in violations] == [field_name]
    assert "cannot be negative" in violations[0]["issue"]


def test_all_violations_collected_in_one_pass() -> None:
    profile = DetailedIncomeProfile(salary=-100, fd_income=-5, stcg=-1_000)
    with pytest.raises(ValueError) as exc_info:
        validate_profile_inputs(profile)

    fields = [v["field"] for v in json.loads(str(exc_info.value))]
    assert fields == ["salary", "fd_income"]

"""Mini README: Tests for settings commands and the reducer.

Each command must return a new settings value, leave the original
untouched, and report unknown targets clearly.
"""

from __future__ import annotations

import pytest

from roadledger.trips import STANDARD_EXPENSE_NAMES, apply_command, command_from_payload, default_user_settings
from roadledger.trips.settings import (
    AddCustomExpense,
    RemoveCustomExpense,
    SetNickname,
    ToggleCustomExpense,
    ToggleExpense,
    UpdateCompanyTerms,
    UpdateCustomExpense,
    UpdateExpenseAmount,
)


def test_defaults_cover_standard_categories() -> None:
    settings = default_user_settings()
    assert tuple(line.name for line in settings.expenses) == STANDARD_EXPENSE_NAMES
    assert settings.custom_expenses == ()


def test_toggle_and_amount_updates_return_new_values() -> None:
    original = default_user_settings()
    toggled = apply_command(original, ToggleExpense(name="Tolls"))
    priced = apply_command(toggled, UpdateExpenseAmount(name="Tolls", amount="42,5"))

    tolls = next(line for line in priced.expenses if line.name == "Tolls")
    assert tolls.enabled is False
    assert tolls.amount == pytest.approx(42.5)
    assert all(line.enabled for line in original.expenses)


def test_negative_amounts_are_clamped() -> None:
    settings = apply_command(default_user_settings(), UpdateExpenseAmount(name="Fuel", amount=-10))
    assert settings.expenses[0].amount == 0.0


def test_company_terms_update_only_given_fields() -> None:
    settings = apply_command(default_user_settings(), UpdateCompanyTerms(rent_per_week="700"))
    settings = apply_command(settings, UpdateCompanyTerms(percentage_from_gross=12))
    assert settings.terms.rent_per_week == pytest.approx(700.0)
    assert settings.terms.percentage_from_gross == pytest.approx(12.0)
    assert settings.terms.rate_per_mile_company_charge == 0.0


def test_custom_expense_lifecycle() -> None:
    settings = apply_command(default_user_settings(), AddCustomExpense(name=" Lumper ", amount=75, expense_id="c1"))
    assert settings.custom_expenses[0].name == "Lumper"

    settings = apply_command(settings, UpdateCustomExpense(expense_id="c1", amount=80))
    settings = apply_command(settings, ToggleCustomExpense(expense_id="c1"))
    line = settings.custom_expenses[0]
    assert line.amount == pytest.approx(80.0)
    assert line.enabled is False

    settings = apply_command(settings, RemoveCustomExpense(expense_id="c1"))
    assert settings.custom_expenses == ()


def test_generated_custom_expense_ids_are_unique() -> None:
    first = AddCustomExpense(name="Scale")
    second = AddCustomExpense(name="Scale")
    assert first.expense_id != second.expense_id


def test_unknown_targets_raise_key_error() -> None:
    settings = default_user_settings()
    with pytest.raises(KeyError):
        apply_command(settings, ToggleExpense(name="Helicopter"))
    with pytest.raises(KeyError):
        apply_command(settings, RemoveCustomExpense(expense_id="missing"))


def test_blank_custom_name_and_unknown_commands_are_rejected() -> None:
    with pytest.raises(ValueError):
        apply_command(default_user_settings(), AddCustomExpense(name="  "))
    with pytest.raises(TypeError):
        apply_command(default_user_settings(), "toggleExpense")  # type: ignore[arg-type]


def test_command_from_payload() -> None:
    command = command_from_payload({"kind": "updateExpense", "name": "Fuel", "amount": "12"})
    assert command == UpdateExpenseAmount(name="Fuel", amount="12")
    assert command_from_payload({"kind": "setNickname", "nickname": "Big Al"}) == SetNickname("Big Al")

    with pytest.raises(ValueError):
        command_from_payload({"kind": "launchRocket"})
    with pytest.raises(ValueError):
        command_from_payload({"kind": "toggleExpense"})


@pytest.mark.parametrize(
    "payload",
    [
        {"kind": "setNickname", "nickname": None},
        {"kind": "setNickname", "nickname": 7},
        {"kind": "addCustomExpense", "name": 5},
        {"kind": "toggleExpense", "name": None},
        {"kind": "toggleCustomExpense", "id": ["c1"]},
        {"kind": "addCustomExpense", "name": "Scale", "id": "  "},
        {"kind": "addCustomExpense", "name": "Scale", "enabled": "yes"},
    ],
)
def test_command_from_payload_rejects_mistyped_fields(payload: dict) -> None:
    with pytest.raises(ValueError):
        command_from_payload(payload)


def test_null_custom_expense_id_is_generated() -> None:
    command = command_from_payload({"kind": "addCustomExpense", "name": "Scale", "id": None})
    assert isinstance(command, AddCustomExpense)
    assert command.expense_id

    settings = apply_command(default_user_settings(), command)
    settings = apply_command(settings, ToggleCustomExpense(expense_id=command.expense_id))
    assert settings.custom_expenses[0].enabled is False


def test_null_optional_fields_keep_current_values() -> None:
    settings = apply_command(default_user_settings(), AddCustomExpense(name="Lumper", amount=75, expense_id="c1"))
    command = command_from_payload({"kind": "updateCustomExpense", "id": "c1", "name": None, "amount": "80"})
    updated = apply_command(settings, command)
    assert updated.custom_expenses[0].name == "Lumper"
    assert updated.custom_expenses[0].amount == pytest.approx(80.0)

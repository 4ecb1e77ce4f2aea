"""Mini README: Commands and reducer for driver settings.

Structure:
    * One frozen dataclass per kind of settings edit (``SetNickname``,
      ``UpdateCompanyTerms``, ``ToggleExpense`` ...).
    * apply_command - pure reducer returning a new ``UserSettings``.
    * command_from_payload - builds a command from a JSON body.

Unknown expense names or ids raise ``KeyError`` so the caller can report a
stale form; amounts are parsed leniently and clamped at zero.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, Mapping, Optional, Tuple, Type, Union

from ..logging_utils import get_logger
from ..utils import parse_number
from .models import CompanyTerms, ExpenseLine, UserSettings, new_expense_id

LOGGER = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class SetNickname:
    nickname: str


@dataclass(frozen=True, slots=True)
class UpdateCompanyTerms:
    """Change any subset of the carrier's charges; ``None`` keeps a value."""

    rent_per_week: Optional[object] = None
    percentage_from_gross: Optional[object] = None
    rate_per_mile_company_charge: Optional[object] = None


@dataclass(frozen=True, slots=True)
class ToggleExpense:
    name: str


@dataclass(frozen=True, slots=True)
class UpdateExpenseAmount:
    name: str
    amount: object


@dataclass(frozen=True, slots=True)
class AddCustomExpense:
    name: str
    amount: object = 0.0
    enabled: bool = True
    expense_id: str = field(default_factory=new_expense_id)


@dataclass(frozen=True, slots=True)
class UpdateCustomExpense:
    expense_id: str
    name: Optional[str] = None
    amount: Optional[object] = None


@dataclass(frozen=True, slots=True)
class ToggleCustomExpense:
    expense_id: str


@dataclass(frozen=True, slots=True)
class RemoveCustomExpense:
    expense_id: str


SettingsCommand = Union[
    SetNickname,
    UpdateCompanyTerms,
    ToggleExpense,
    UpdateExpenseAmount,
    AddCustomExpense,
    UpdateCustomExpense,
    ToggleCustomExpense,
    RemoveCustomExpense,
]


def _amount(value: object) -> float:
    return max(0.0, parse_number(value))


def _replace_line(
    lines: Tuple[ExpenseLine, ...],
    matches: Callable[[ExpenseLine], bool],
    update: Callable[[ExpenseLine], ExpenseLine],
    missing: str,
) -> Tuple[ExpenseLine, ...]:
    updated = []
    found = False
    for line in lines:
        if not found and matches(line):
            updated.append(update(line))
            found = True
        else:
            updated.append(line)
    if not found:
        raise KeyError(missing)
    return tuple(updated)


def _by_name(name: str) -> Callable[[ExpenseLine], bool]:
    return lambda line: line.name == name


def _by_id(expense_id: str) -> Callable[[ExpenseLine], bool]:
    return lambda line: line.expense_id == expense_id


def _update_terms(terms: CompanyTerms, command: UpdateCompanyTerms) -> CompanyTerms:
    changes: Dict[str, float] = {}
    for attribute in ("rent_per_week", "percentage_from_gross", "rate_per_mile_company_charge"):
        value = getattr(command, attribute)
        if value is not None:
            changes[attribute] = parse_number(value)
    return replace(terms, **changes)


def apply_command(settings: UserSettings, command: SettingsCommand) -> UserSettings:
    """Return the settings that result from applying ``command``."""

    if isinstance(command, SetNickname):
        result = replace(settings, nickname=command.nickname.strip())
    elif isinstance(command, UpdateCompanyTerms):
        result = replace(settings, terms=_update_terms(settings.terms, command))
    elif isinstance(command, ToggleExpense):
        result = replace(
            settings,
            expenses=_replace_line(
                settings.expenses,
                _by_name(command.name),
                lambda line: replace(line, enabled=not line.enabled),
                f"Expense '{command.name}' not found",
            ),
        )
    elif isinstance(command, UpdateExpenseAmount):
        result = replace(
            settings,
            expenses=_replace_line(
                settings.expenses,
                _by_name(command.name),
                lambda line: replace(line, amount=_amount(command.amount)),
                f"Expense '{command.name}' not found",
            ),
        )
    elif isinstance(command, AddCustomExpense):
        name = command.name.strip()
        if not name:
            raise ValueError("Custom expenses need a name.")
        line = ExpenseLine(
            name=name,
            enabled=command.enabled,
            amount=_amount(command.amount),
            expense_id=command.expense_id,
        )
        result = replace(settings, custom_expenses=settings.custom_expenses + (line,))
    elif isinstance(command, UpdateCustomExpense):
        def _edit(line: ExpenseLine) -> ExpenseLine:
            changes: Dict[str, Any] = {}
            if command.name is not None:
                changes["name"] = command.name.strip()
            if command.amount is not None:
                changes["amount"] = _amount(command.amount)
            return replace(line, **changes)

        result = replace(
            settings,
            custom_expenses=_replace_line(
                settings.custom_expenses,
                _by_id(command.expense_id),
                _edit,
                f"Custom expense {command.expense_id} not found",
            ),
        )
    elif isinstance(command, ToggleCustomExpense):
        result = replace(
            settings,
            custom_expenses=_replace_line(
                settings.custom_expenses,
                _by_id(command.expense_id),
                lambda line: replace(line, enabled=not line.enabled),
                f"Custom expense {command.expense_id} not found",
            ),
        )
    elif isinstance(command, RemoveCustomExpense):
        remaining = tuple(
            line for line in settings.custom_expenses if line.expense_id != command.expense_id
        )
        if len(remaining) == len(settings.custom_expenses):
            raise KeyError(f"Custom expense {command.expense_id} not found")
        result = replace(settings, custom_expenses=remaining)
    else:
        raise TypeError(f"Unsupported settings command: {type(command).__name__}")

    LOGGER.debug("Applied settings command %s", type(command).__name__)
    return result


COMMAND_KINDS: Dict[str, Type[Any]] = {
    "setNickname": SetNickname,
    "updateCompanyTerms": UpdateCompanyTerms,
    "toggleExpense": ToggleExpense,
    "updateExpense": UpdateExpenseAmount,
    "addCustomExpense": AddCustomExpense,
    "updateCustomExpense": UpdateCustomExpense,
    "toggleCustomExpense": ToggleCustomExpense,
    "removeCustomExpense": RemoveCustomExpense,
}

# camelCase payload keys mapped onto command attributes.
_PAYLOAD_KEYS = {
    "nickname": "nickname",
    "rentPerWeek": "rent_per_week",
    "percentageFromGross": "percentage_from_gross",
    "ratePerMileCompanyCharge": "rate_per_mile_company_charge",
    "name": "name",
    "amount": "amount",
    "enabled": "enabled",
    "id": "expense_id",
}
_STRING_KEYS = {"nickname", "name", "id"}


def command_from_payload(payload: Mapping[str, Any]) -> SettingsCommand:
    """Build a settings command from ``{"kind": ..., ...}`` JSON.

    ``null`` fields are treated as absent, so optional ones keep their
    defaults (a missing custom expense id is generated). Text fields of any
    other type raise ``ValueError``.
    """

    kind = payload.get("kind")
    command_cls = COMMAND_KINDS.get(str(kind))
    if command_cls is None:
        raise ValueError(f"Unsupported settings command kind: {kind}")
    arguments: Dict[str, Any] = {}
    for key, value in payload.items():
        if key not in _PAYLOAD_KEYS or value is None:
            continue
        if key in _STRING_KEYS and not isinstance(value, str):
            raise ValueError(f"Field '{key}' of '{kind}' must be a string.")
        if key == "id" and not value.strip():
            raise ValueError(f"Field 'id' of '{kind}' must not be blank.")
        if key == "enabled" and not isinstance(value, bool):
            raise ValueError(f"Field 'enabled' of '{kind}' must be true or false.")
        arguments[_PAYLOAD_KEYS[key]] = value
    try:
        return command_cls(**arguments)
    except TypeError as error:
        raise ValueError(f"Invalid fields for '{kind}': {error}") from error

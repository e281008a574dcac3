"""
Rule-based payload validation.

A rule set is a plain list of :class:`Rule` tuples.  Each rule names the
field it applies to, a check callable, and the *kind* of failure it
reports.  Checks receive the field value and return a bool, or an
awaitable resolving to a bool for rules that need the database
(``unique`` / ``exists``).

The same rule list serves create and partial-update flows:

- ``partial=False``: every field is validated; absent fields fail their
  ``required`` rule.
- ``partial=True``: fields absent from the payload are skipped entirely,
  so any subset of fields may be supplied.  A field that is present must
  still pass every rule, ``required`` included, so it cannot be blanked.

:func:`validate` trims string values (passwords excepted) before the
rules run and returns the trimmed values.

Evaluation stops at the first failing rule of a field; the resulting
errors map each failing field to a list of human-readable messages.
"""
import inspect
import re
from types import MappingProxyType
from typing import Any, Awaitable, Callable, Mapping, NamedTuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from article_api.exceptions import ValidationFailure
from article_api.models import MAX_ID

Check = Callable[[Any], "bool | Awaitable[bool]"]

MESSAGES: dict[str, str] = {
    "required": "The {attribute} field is required.",
    "string": "The {attribute} field must be a string.",
    "max": "The {attribute} field must not be greater than {max} characters.",
    "min": "The {attribute} field must be at least {min} characters.",
    "email": "The {attribute} field must be a valid email address.",
    "unique": "The {attribute} has already been taken.",
    "exists": "The selected {attribute} is invalid.",
}

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

UNTRIMMED_FIELDS = frozenset({"password"})


class Rule(NamedTuple):
    field: str
    check: Check
    kind: str
    params: Mapping[str, Any] = MappingProxyType({})

    def message(self) -> str:
        attribute = self.field.replace("_", " ")
        return MESSAGES[self.kind].format(attribute=attribute, **self.params)


# ---------------------------------------------------------------------------
# Checks
# ---------------------------------------------------------------------------

def is_filled(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str) and not value.strip():
        return False
    if isinstance(value, (list, dict)) and not value:
        return False
    return True


def is_string(value: Any) -> bool:
    return isinstance(value, str)


def is_email(value: Any) -> bool:
    return isinstance(value, str) and bool(_EMAIL_RE.match(value))


def as_int_key(value: Any) -> int | None:
    """Return *value* as an integer primary key, or None if it cannot be one."""
    if isinstance(value, bool):
        return None
    if isinstance(value, str) and value.strip().isdecimal():
        value = int(value)
    if isinstance(value, int) and 0 < value <= MAX_ID:
        return value
    return None


# ---------------------------------------------------------------------------
# Rule constructors
# ---------------------------------------------------------------------------

def required(field: str) -> Rule:
    return Rule(field, is_filled, "required")


def string(field: str) -> Rule:
    return Rule(field, is_string, "string")


def max_length(field: str, limit: int) -> Rule:
    return Rule(field, lambda v: len(v) <= limit, "max", {"max": limit})


def min_length(field: str, limit: int) -> Rule:
    return Rule(field, lambda v: len(v) >= limit, "min", {"min": limit})


def email(field: str) -> Rule:
    return Rule(field, is_email, "email")


def unique(
    field: str,
    db: AsyncSession,
    column,
    ignore_id: int | None = None,
    live_only: bool = True,
) -> Rule:
    """
    Pass when no row of *column*'s table already holds the value.

    With *live_only* soft-deleted rows do not count.  *ignore_id*
    excludes the row being updated.
    """
    table = column.class_

    async def check(value: Any) -> bool:
        q = select(func.count()).select_from(table).where(column == value)
        if live_only:
            q = q.where(table.deleted_at.is_(None))
        if ignore_id is not None:
            q = q.where(table.id != ignore_id)
        return (await db.execute(q)).scalar_one() == 0

    return Rule(field, check, "unique")


def exists(field: str, db: AsyncSession, column) -> Rule:
    """Pass when a row with the value exists, whether soft-deleted or not."""
    table = column.class_

    async def check(value: Any) -> bool:
        key = as_int_key(value)
        if key is None:
            return False
        q = select(func.count()).select_from(table).where(column == key)
        return (await db.execute(q)).scalar_one() > 0

    return Rule(field, check, "exists")


# ---------------------------------------------------------------------------
# Evaluation
# ---------------------------------------------------------------------------

def trim_strings(payload: Mapping[str, Any]) -> dict[str, Any]:
    return {
        k: v.strip() if isinstance(v, str) and k not in UNTRIMMED_FIELDS else v
        for k, v in payload.items()
    }


async def collect_errors(
    payload: Mapping[str, Any],
    rules: list[Rule],
    partial: bool = False,
) -> dict[str, list[str]]:
    """Evaluate *rules* against *payload* and return the errors map."""
    errors: dict[str, list[str]] = {}
    for rule in rules:
        if rule.field in errors:
            continue
        if rule.field not in payload:
            if rule.kind == "required" and not partial:
                errors[rule.field] = [rule.message()]
            continue

        passed = rule.check(payload[rule.field])
        if inspect.isawaitable(passed):
            passed = await passed
        if not passed:
            errors[rule.field] = [rule.message()]
    return errors


async def validate(
    payload: Mapping[str, Any],
    rules: list[Rule],
    partial: bool = False,
) -> dict[str, Any]:
    """
    Validate *payload* and return only the fields the rules know about.

    Raises :class:`ValidationFailure` when any rule fails.
    """
    payload = trim_strings(payload)
    errors = await collect_errors(payload, rules, partial=partial)
    if errors:
        raise ValidationFailure(errors)
    fields = {rule.field for rule in rules}
    return {k: v for k, v in payload.items() if k in fields}

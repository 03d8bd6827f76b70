"""Fine derivation engine.

Keeps a fine draft's ``description``, ``value`` and ``points`` consistent
with its Detran infraction code and its "pay double" flag at the moment
the draft is edited. Derived values are stored with the fine; nothing
here runs when a fine is read back.

Rule for a code with base value ``V`` and base points ``P``:

* single payment: ``value = V``, ``points = P``
* paying double: ``value = 2 * V``, ``points = 0``

All functions are pure: they take a frozen draft and return a new one.
They accept :class:`~fleetfines.models.fine.FineDraft` as well as a
persisted :class:`~fleetfines.models.fine.Fine` being edited.
"""

from __future__ import annotations

from collections.abc import Callable
from decimal import Decimal
from typing import Any, TypeVar

from fleetfines._constants import CODE_LOOKUP_MIN_LENGTH
from fleetfines.ingestion.normalize import safe_decimal
from fleetfines.models.fine import FineDraft
from fleetfines.models.infraction import InfractionCode

TDraft = TypeVar("TDraft", bound=FineDraft)

CodeLookup = Callable[[str], InfractionCode | None]
"""Exact-match lookup of a Detran code, ``None`` when unknown."""


def derive_amounts(code: InfractionCode, pay_double: bool) -> tuple[Decimal, int]:
    """Value and points a fine for *code* carries."""
    if pay_double:
        return code.default_value * 2, 0
    return code.default_value, code.default_points


def on_code_changed(draft: TDraft, lookup: CodeLookup, *, min_length: int = CODE_LOOKUP_MIN_LENGTH) -> TDraft:
    """Recompute derived fields after ``draft.code`` changed.

    * blank code: description, value and points reset to ``""``/0/0;
      ``pay_double`` is left alone.
    * shorter than *min_length*: still being typed, nothing changes.
    * unknown code: derived fields keep whatever they held.
    """
    code = draft.code
    if not code or not code.strip():
        return draft.model_copy(update={"description": "", "value": Decimal("0"), "points": 0})
    if len(code) < min_length:
        return draft

    found = lookup(code)
    if found is None:
        return draft
    value, points = derive_amounts(found, draft.pay_double)
    return draft.model_copy(update={"description": found.description, "value": value, "points": points})


def set_code(
    draft: TDraft,
    code: str,
    lookup: CodeLookup,
    *,
    min_length: int = CODE_LOOKUP_MIN_LENGTH,
) -> TDraft:
    """Set ``draft.code`` to *code* and run :func:`on_code_changed`."""
    return on_code_changed(draft.model_copy(update={"code": code}), lookup, min_length=min_length)


def on_toggle_changed(draft: TDraft, checked: bool, lookup: CodeLookup) -> TDraft:
    """Flip the "pay double" flag to *checked*.

    Value and points are recomputed only when the draft's code resolves;
    otherwise just the flag changes. The description is never touched.
    """
    flagged = draft.model_copy(update={"pay_double": checked})
    if not draft.code:
        return flagged

    found = lookup(draft.code)
    if found is None:
        return flagged
    value, points = derive_amounts(found, checked)
    return flagged.model_copy(update={"value": value, "points": points})


def with_value(draft: TDraft, value: Any) -> TDraft:
    """Manual edit of the fine amount.

    Points have no manual counterpart; they only come from the
    infraction code.
    """
    parsed = safe_decimal(value)
    if parsed is None or parsed < 0:
        raise ValueError(f"value must be a non-negative amount, got {value!r}")
    return draft.model_copy(update={"value": parsed})


def is_consistent(draft: FineDraft, lookup: CodeLookup) -> bool:
    """Whether stored value/points still match the referenced code.

    Unknown or blank codes have nothing to compare against and count as
    consistent. A fine saved before its code was edited, or with
    ``pay_double`` set before any code, reports ``False``.
    """
    if not draft.code or not draft.code.strip():
        return True
    found = lookup(draft.code)
    if found is None:
        return True
    return (draft.value, draft.points) == derive_amounts(found, draft.pay_double)

"""Normalizing ``where`` declarations and matching them against items."""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import BaseModel

from .models import ABSENT, Absent, Clause, FieldPredicate, OneOf, Scalar, same_value

_PREDICATE_TYPES = (Scalar, OneOf, Absent)


def to_predicate(expected: Any) -> FieldPredicate:
    """Turn a declared expected value into a tagged predicate.

    ``ABSENT`` -> :class:`Absent`, list/tuple -> :class:`OneOf`, anything else
    -> :class:`Scalar`. Predicates pass through unchanged.
    """
    if isinstance(expected, _PREDICATE_TYPES):
        return expected
    if expected is ABSENT:
        return Absent()
    if isinstance(expected, (list, tuple)):
        values = tuple(v for v in expected if v is not ABSENT)
        return OneOf(values=values, accepts_absent=len(values) != len(expected))
    return Scalar(expected)


def to_clause(where: Mapping[str, Any] | Clause) -> Clause:
    if isinstance(where, Clause):
        return where
    if not isinstance(where, Mapping):
        raise TypeError(f"where alternatives must be mappings, got {type(where).__name__}")
    return Clause(tuple((str(name), to_predicate(value)) for name, value in where.items()))


def normalize_where(where: Any) -> tuple[Clause, ...]:
    """Normalize ``None`` / a map / a list of maps into OR-ed clauses.

    An empty map normalizes to ``()`` (unconditional). An empty list has no
    alternative that could match, so it is rejected.
    """
    if where is None:
        return ()
    if isinstance(where, (Mapping, Clause)):
        clause = to_clause(where)
        return (clause,) if clause.predicates else ()
    if isinstance(where, Sequence) and not isinstance(where, (str, bytes)):
        if not where:
            raise ValueError("where list must contain at least one alternative")
        return tuple(to_clause(w) for w in where)
    raise TypeError(f"where must be a mapping or a list of mappings, got {type(where).__name__}")


def item_fields(item: Any, explicit_only: bool = False) -> dict[str, Any]:
    """Return the fields an item carries, dropping any set to ``ABSENT``.

    Mappings are used as-is; pydantic models expose their declared and extra
    fields; dataclasses expose their declared fields; other objects expose
    their instance attributes. With ``explicit_only`` a pydantic model only
    reports the fields that were explicitly set, which is how partial update
    payloads are read.
    """
    if isinstance(item, Mapping):
        raw = dict(item)
    elif isinstance(item, BaseModel):
        names = item.model_fields_set if explicit_only else type(item).model_fields
        raw = {name: getattr(item, name) for name in names}
        if not explicit_only:
            raw.update(item.model_extra or {})
    elif dataclasses.is_dataclass(item) and not isinstance(item, type):
        raw = {f.name: getattr(item, f.name) for f in dataclasses.fields(item)}
    elif hasattr(item, "__dict__"):
        raw = dict(vars(item))
    else:
        raw = {}
    return {str(k): v for k, v in raw.items() if v is not ABSENT}


def clause_matches(clause: Clause, fields: Mapping[str, Any]) -> bool:
    for name, predicate in clause.predicates:
        present = name in fields
        if not predicate.matches(present, fields.get(name)):
            return False
    return True


def where_matches(where: tuple[Clause, ...], fields: Mapping[str, Any]) -> bool:
    """Strict match: any clause fully satisfied. No clauses always matches."""
    if not where:
        return True
    return any(clause_matches(c, fields) for c in where)


def where_matches_present(where: tuple[Clause, ...], fields: Mapping[str, Any]) -> bool:
    """Relaxed match for partial update payloads.

    Only predicates on fields the payload actually carries are enforced.
    """
    if not where:
        return True
    present = frozenset(fields)
    return any(clause_matches(c.restricted_to(present), fields) for c in where)


def is_blacklisted(blacklist: tuple[str, ...] | None, fields: Mapping[str, Any]) -> bool:
    if not blacklist:
        return False
    return any(name in fields for name in blacklist)


def is_update_blacklisted(
    blacklist: tuple[str, ...] | None,
    original: Mapping[str, Any],
    updated: Mapping[str, Any],
) -> bool:
    """True if the update sets a blacklisted field to a new value.

    Re-sending a blacklisted field with its current value is allowed.
    """
    if not blacklist:
        return False
    for name in blacklist:
        if name not in updated:
            continue
        if name not in original:
            return True
        if not same_value(original[name], updated[name]):
            return True
    return False

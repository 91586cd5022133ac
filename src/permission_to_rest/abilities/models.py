"""Data models for declared abilities and their field conditions."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Final


class Action(str, Enum):
    """CRUD actions a rule can cover. MANAGE is a rule-side wildcard only."""

    MANAGE = "MANAGE"
    CREATE = "CREATE"
    RETRIEVE = "RETRIEVE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


class Permission(str, Enum):
    """Polarity of a rule."""

    CAN = "CAN"
    CANNOT = "CANNOT"


ALL: Final = "ALL"


class _Absent:
    """Sentinel for "this field must not be present on the item"."""

    _instance: _Absent | None = None

    def __new__(cls) -> _Absent:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "ABSENT"


ABSENT: Final = _Absent()


def same_value(left: Any, right: Any) -> bool:
    """Exact equality: no bool/int crossover, otherwise ``==``."""
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left is right
    return left == right


def subject_name(subject: Any) -> str:
    """Display name for a subject tag: strings as-is, classes by name."""
    return subject if isinstance(subject, str) else getattr(subject, "__name__", repr(subject))


# -- Field predicates ---------------------------------------------------------


@dataclass(frozen=True)
class Scalar:
    """Field must be present and equal ``value``."""

    value: Any

    def matches(self, present: bool, actual: Any = None) -> bool:
        return present and same_value(actual, self.value)


@dataclass(frozen=True)
class OneOf:
    """Field must equal one of ``values``; absence is accepted if ``accepts_absent``."""

    values: tuple[Any, ...] = ()
    accepts_absent: bool = False

    def matches(self, present: bool, actual: Any = None) -> bool:
        if not present:
            return self.accepts_absent
        return any(same_value(actual, v) for v in self.values)


@dataclass(frozen=True)
class Absent:
    """Field must not be present."""

    def matches(self, present: bool, actual: Any = None) -> bool:
        return not present


FieldPredicate = Scalar | OneOf | Absent


@dataclass(frozen=True)
class Clause:
    """AND of per-field predicates. An empty clause matches everything."""

    predicates: tuple[tuple[str, FieldPredicate], ...] = ()

    @property
    def fields(self) -> tuple[str, ...]:
        return tuple(name for name, _ in self.predicates)

    def restricted_to(self, names: set[str] | frozenset[str]) -> Clause:
        """Drop predicates on fields not in ``names``."""
        return Clause(tuple((n, p) for n, p in self.predicates if n in names))


@dataclass(frozen=True)
class Ability:
    """One declared rule. Built by :class:`AbilityBuilder`, never mutated.

    ``where`` is a tuple of OR-ed clauses; the empty tuple means unconditional.
    """

    permission: Permission
    action: Action
    subject: Any
    where: tuple[Clause, ...] = ()
    blacklist: tuple[str, ...] | None = field(default=None)

    def describe(self) -> str:
        parts = [f"{self.permission.value} {self.action.value} {subject_name(self.subject)}"]
        if self.where:
            parts.append("where " + describe_where(self.where))
        if self.blacklist:
            parts.append("blacklist [" + ", ".join(self.blacklist) + "]")
        return " ".join(parts)


def describe_where(where: tuple[Clause, ...]) -> str:
    """Human-readable OR of clauses; empty string when unconditional."""
    return " or ".join(_describe_clause(c) for c in where)


def _describe_clause(clause: Clause) -> str:
    terms = []
    for name, pred in clause.predicates:
        if isinstance(pred, Scalar):
            terms.append(f"{name}={pred.value!r}")
        elif isinstance(pred, OneOf):
            options = [repr(v) for v in pred.values]
            if pred.accepts_absent:
                options.append("ABSENT")
            terms.append(f"{name} in [{', '.join(options)}]")
        else:
            terms.append(f"{name} absent")
    return "{" + ", ".join(terms) + "}"

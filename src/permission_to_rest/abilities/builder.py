"""Ordered declaration of abilities."""

from __future__ import annotations

import importlib
import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import TYPE_CHECKING, Any

from .conditions import normalize_where
from .models import ALL, Ability, Action, Permission

if TYPE_CHECKING:
    from permission_to_rest.config.models import PermissionConfig
    from permission_to_rest.engine.engine import PermissionEngine

logger = logging.getLogger(__name__)


class SubjectResolutionError(ValueError):
    """Raised when a configured subject import path cannot be resolved."""

    def __init__(self, tag: str, path: str, reason: str):
        self.tag = tag
        self.path = path
        super().__init__(f"Cannot resolve subject '{tag}' from '{path}': {reason}")


class AbilityBuilder:
    """Accumulates CAN / CANNOT rules in declaration order.

    Declaration order matters: the engine lets the last matching rule win.
    """

    def __init__(self) -> None:
        self._abilities: list[Ability] = []

    @property
    def abilities(self) -> tuple[Ability, ...]:
        return tuple(self._abilities)

    def can(
        self,
        action: Action | str,
        subject: Any,
        where: Mapping[str, Any] | Sequence[Mapping[str, Any]] | None = None,
        blacklist: Iterable[str] | str | None = None,
    ) -> Ability:
        """Grant ``action`` on ``subject``, optionally narrowed by ``where``.

        Fields in ``blacklist`` void the grant when present on the item (or,
        for updates, when changed by the payload).
        """
        ability = Ability(
            permission=Permission.CAN,
            action=Action(action),
            subject=subject,
            where=normalize_where(where),
            blacklist=_blacklist_tuple(blacklist),
        )
        return self._append(ability)

    def cannot(
        self,
        action: Action | str,
        subject: Any,
        where: Mapping[str, Any] | Sequence[Mapping[str, Any]] | None = None,
    ) -> Ability:
        """Revoke ``action`` on ``subject`` wherever ``where`` matches."""
        ability = Ability(
            permission=Permission.CANNOT,
            action=Action(action),
            subject=subject,
            where=normalize_where(where),
        )
        return self._append(ability)

    def build(self) -> PermissionEngine:
        from permission_to_rest.engine.engine import PermissionEngine

        return PermissionEngine(self.abilities)

    @classmethod
    def from_config(cls, config: PermissionConfig) -> AbilityBuilder:
        """Declare every ability listed in ``config``, in file order."""
        builder = cls()
        subjects = {tag: import_subject(tag, path) for tag, path in config.subjects.items()}
        for decl in config.abilities:
            subject = decl.subject if decl.subject == ALL else subjects.get(decl.subject, decl.subject)
            if decl.permission == "can":
                builder.can(decl.action, subject, decl.where, decl.blacklist)
            else:
                builder.cannot(decl.action, subject, decl.where)
        return builder

    def _append(self, ability: Ability) -> Ability:
        self._abilities.append(ability)
        logger.debug("Declared rule #%d: %s", len(self._abilities), ability.describe())
        return ability


def _blacklist_tuple(blacklist: Iterable[str] | str | None) -> tuple[str, ...] | None:
    if blacklist is None:
        return None
    if isinstance(blacklist, str):
        return (blacklist,)
    return tuple(blacklist)


def import_subject(tag: str, path: str) -> type:
    """Import ``module:Class`` (or ``module.Class``) for a subject tag."""
    if ":" in path:
        module_path, _, attr = path.partition(":")
    else:
        module_path, _, attr = path.rpartition(".")
    if not module_path or not attr:
        raise SubjectResolutionError(tag, path, "expected 'module:Class'")
    try:
        module = importlib.import_module(module_path)
    except ImportError as e:
        raise SubjectResolutionError(tag, path, str(e)) from e
    try:
        obj = module
        for part in attr.split("."):
            obj = getattr(obj, part)
    except AttributeError as e:
        raise SubjectResolutionError(tag, path, str(e)) from e
    if not isinstance(obj, type):
        raise SubjectResolutionError(tag, path, "not a class")
    return obj

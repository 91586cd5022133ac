"""Last-match-wins evaluation of abilities against items."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from permission_to_rest.abilities.conditions import (
    is_blacklisted,
    is_update_blacklisted,
    item_fields,
    where_matches,
    where_matches_present,
)
from permission_to_rest.abilities.models import ALL, Ability, Action, Permission, subject_name

from .models import Decision, InvalidActionError

logger = logging.getLogger(__name__)


class PermissionEngine:
    """Evaluates CRUD checks against a fixed, ordered rule set.

    Every matching rule overwrites the running decision, so the last matching
    rule wins and the default is deny. The rule tuple is never modified, so an
    engine can be shared between threads.
    """

    def __init__(self, abilities: Iterable[Ability]) -> None:
        self._abilities: tuple[Ability, ...] = tuple(abilities)

    @property
    def abilities(self) -> tuple[Ability, ...]:
        return self._abilities

    def __len__(self) -> int:
        return len(self._abilities)

    # -- Typed checks ----------------------------------------------------------

    def can_create(self, item: Any, subject: Any = None) -> bool:
        return self._check(Action.CREATE, item, subject).decision

    def can_retrieve(self, item: Any, subject: Any = None) -> bool:
        return self._check(Action.RETRIEVE, item, subject).decision

    def can_delete(self, item: Any, subject: Any = None) -> bool:
        return self._check(Action.DELETE, item, subject).decision

    def can_update(self, item: Any, updated_item: Any, subject: Any = None) -> bool:
        return self._check_update(item, updated_item, subject).decision

    # -- Generalized entry point ----------------------------------------------

    def decide(
        self,
        action: Action | str,
        item: Any,
        updated_item: Any = None,
        subject: Any = None,
    ) -> Decision:
        """Evaluate ``action`` on ``item`` and report the deciding rule.

        Raises:
            InvalidActionError: ``action`` is MANAGE, or UPDATE without
                ``updated_item``.
        """
        action = Action(action)
        if action is Action.MANAGE:
            raise InvalidActionError(action, "MANAGE is a rule wildcard, not a query action")
        if action is Action.UPDATE:
            if updated_item is None:
                raise InvalidActionError(action, "an updated item is required")
            return self._check_update(item, updated_item, subject)
        return self._check(action, item, subject)

    # -- Matching --------------------------------------------------------------

    def _domain_matches(self, ability: Ability, action: Action, subject: Any) -> bool:
        if ability.subject != ALL and ability.subject != subject:
            return False
        return ability.action is Action.MANAGE or ability.action is action

    def _check(self, action: Action, item: Any, subject: Any) -> Decision:
        resolved = _resolve_subject(item, subject)
        fields = item_fields(item)
        result = Decision(False)
        for ability in self._abilities:
            if not self._domain_matches(ability, action, resolved):
                continue
            if not where_matches(ability.where, fields):
                continue
            if ability.permission is Permission.CAN:
                result = Decision(not is_blacklisted(ability.blacklist, fields), ability)
            else:
                result = Decision(False, ability)
        _log_decision(action, resolved, result)
        return result

    def _check_update(self, item: Any, updated_item: Any, subject: Any) -> Decision:
        resolved = _resolve_subject(item, subject)
        original = item_fields(item)
        updated = item_fields(updated_item, explicit_only=True)
        result = Decision(False)
        for ability in self._abilities:
            if not self._domain_matches(ability, Action.UPDATE, resolved):
                continue
            if ability.permission is Permission.CAN:
                if where_matches(ability.where, original) and where_matches_present(
                    ability.where, updated
                ):
                    granted = not is_update_blacklisted(ability.blacklist, original, updated)
                    result = Decision(granted, ability)
            elif where_matches(ability.where, original) or where_matches(ability.where, updated):
                result = Decision(False, ability)
        _log_decision(Action.UPDATE, resolved, result)
        return result


def _resolve_subject(item: Any, subject: Any) -> Any:
    return subject if subject is not None else type(item)


def _log_decision(action: Action, subject: Any, result: Decision) -> None:
    if not logger.isEnabledFor(logging.DEBUG):
        return
    rule = result.deciding_rule.describe() if result.deciding_rule else "no matching rule"
    logger.debug(
        "%s %s -> %s (%s)",
        action.value,
        subject_name(subject),
        "allow" if result.decision else "deny",
        rule,
    )


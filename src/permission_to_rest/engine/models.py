"""Result and error types for the permission engine."""

from __future__ import annotations

from dataclasses import dataclass

from permission_to_rest.abilities.models import Ability, Action


class InvalidActionError(ValueError):
    """Raised when a query names an action the engine cannot evaluate."""

    def __init__(self, action: Action, reason: str) -> None:
        self.action = action
        self.reason = reason
        super().__init__(f"Cannot evaluate {action.value}: {reason}")


@dataclass(frozen=True)
class Decision:
    """Outcome of one check and the rule that settled it, if any."""

    decision: bool
    deciding_rule: Ability | None = None

    def __bool__(self) -> bool:
        return self.decision

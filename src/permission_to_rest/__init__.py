"""Permission to REST - declarative CRUD abilities with field-level conditions."""

from permission_to_rest.abilities import (
    ABSENT,
    ALL,
    Ability,
    AbilityBuilder,
    Action,
    Permission,
    SubjectResolutionError,
)
from permission_to_rest.config import PermissionConfig, load_config
from permission_to_rest.engine import Decision, InvalidActionError, PermissionEngine

__version__ = "0.1.0"

__all__ = [
    "ABSENT",
    "ALL",
    "Ability",
    "AbilityBuilder",
    "Action",
    "Decision",
    "InvalidActionError",
    "Permission",
    "PermissionConfig",
    "PermissionEngine",
    "SubjectResolutionError",
    "load_config",
]

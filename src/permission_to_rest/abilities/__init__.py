from .builder import AbilityBuilder, SubjectResolutionError
from .models import ABSENT, ALL, Ability, Absent, Action, Clause, OneOf, Permission, Scalar

__all__ = [
    "ABSENT",
    "ALL",
    "Ability",
    "AbilityBuilder",
    "Absent",
    "Action",
    "Clause",
    "OneOf",
    "Permission",
    "Scalar",
    "SubjectResolutionError",
]

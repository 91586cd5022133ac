from .loader import load_config
from .models import AbilityDeclaration, PermissionConfig

__all__ = [
    "AbilityDeclaration",
    "PermissionConfig",
    "load_config",
]

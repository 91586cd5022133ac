from .engine import PermissionEngine
from .models import Decision, InvalidActionError

__all__ = ["Decision", "InvalidActionError", "PermissionEngine"]

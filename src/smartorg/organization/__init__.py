"""Action execution and operation records."""

from .executor import ActionConfigurationError, ActionExecutor
from .models import ActionOutcome, FileOperation, OperationKind, UnsupportedAction

__all__ = [
    "ActionConfigurationError",
    "ActionExecutor",
    "ActionOutcome",
    "FileOperation",
    "OperationKind",
    "UnsupportedAction",
]

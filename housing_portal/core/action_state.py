"""
Explicit state for one asynchronous action.

Replaces loose loading/error/success flags: an action is exactly one of
Idle, Pending, Succeeded(value) or Failed(error).
"""

from dataclasses import dataclass
from typing import Any, Optional, Union

from housing_portal.core.errors import PortalError


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Pending:
    pass


@dataclass(frozen=True)
class Succeeded:
    value: Any = None
    message: Optional[str] = None


@dataclass(frozen=True)
class Failed:
    error: PortalError

    @property
    def message(self) -> str:
        return str(self.error)


ActionState = Union[Idle, Pending, Succeeded, Failed]

IDLE = Idle()
PENDING = Pending()


def is_pending(state: ActionState) -> bool:
    return isinstance(state, Pending)

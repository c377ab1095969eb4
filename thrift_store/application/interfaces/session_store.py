from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any


@dataclass
class Session:
    user: dict[str, Any] = field(default_factory=dict)
    token: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)


class SessionStore(ABC):
    """
    Process-wide holder of the signed-in user.

    Lifecycle: hydrate() once at application start from persisted credentials,
    set() after a successful login/register, clear() on logout.
    """

    @abstractmethod
    def hydrate(self) -> Session | None:
        ...

    @abstractmethod
    def set(self, session: Session) -> None:
        ...

    @abstractmethod
    def clear(self) -> None:
        ...

    @property
    @abstractmethod
    def current(self) -> Session | None:
        ...

    @property
    def token(self) -> str | None:
        session = self.current
        return session.token if session else None

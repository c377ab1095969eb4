import json
from pathlib import Path

import structlog

from thrift_store.application.interfaces.session_store import Session, SessionStore
from thrift_store.config import settings

logger = structlog.get_logger(__name__)


class FileSessionStore(SessionStore):
    """Keeps the signed-in user in memory and mirrors it to a JSON file."""

    def __init__(self, path: str | Path = settings.session_file) -> None:
        self._path = Path(path)
        self._session: Session | None = None

    @property
    def current(self) -> Session | None:
        return self._session

    def hydrate(self) -> Session | None:
        if not self._path.exists():
            self._session = None
            return None
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
            self._session = Session(user=data.get("user") or {}, token=data.get("token"))
        except (OSError, ValueError, AttributeError):
            logger.warning("session_file_unreadable", path=str(self._path))
            self._session = None
            return None
        logger.info("session_hydrated", authenticated=self._session.is_authenticated)
        return self._session

    def set(self, session: Session) -> None:
        self._session = session
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(
            json.dumps({"user": session.user, "token": session.token}),
            encoding="utf-8",
        )

    def clear(self) -> None:
        self._session = None
        self._path.unlink(missing_ok=True)

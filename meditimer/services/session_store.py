import json
import logging
from datetime import date

from pydantic import ValidationError
from redis.exceptions import RedisError

from meditimer.clock import Clock, local_today
from meditimer.config import settings
from meditimer.errors import CorruptDataError, PersistenceError
from meditimer.schemas.session import Session, SessionLog
from meditimer.services.kv_backends import KeyValueBackend

logger = logging.getLogger(__name__)

BACKEND_ERRORS = (RedisError, OSError)


class SessionStore:
    """Append-only log of completed sessions, kept as one JSON array under a single key.

    Every read goes through to the backend. Appends rewrite the whole array.
    """

    def __init__(
        self,
        backend: KeyValueBackend,
        key: str = settings.SESSIONS_KEY,
        clock: Clock = local_today,
    ):
        self.backend = backend
        self.key = key
        self.clock = clock

    async def ping(self) -> None:
        try:
            await self.backend.ping()
        except BACKEND_ERRORS as exc:
            raise PersistenceError(f"Session storage is unreachable: {exc}") from exc

    async def _read_raw(self) -> str | None:
        try:
            return await self.backend.get(self.key)
        except UnicodeDecodeError as exc:
            raise CorruptDataError(f"Stored value for {self.key!r} is not valid UTF-8") from exc
        except BACKEND_ERRORS as exc:
            raise PersistenceError(f"Failed to read {self.key!r}: {exc}") from exc

    async def load_all(self) -> list[Session]:
        raw = await self._read_raw()
        if raw is None:
            return []
        try:
            return SessionLog.validate_json(raw)
        except ValidationError as exc:
            raise CorruptDataError(
                f"Stored value for {self.key!r} is not a session list: "
                f"{exc.error_count()} error(s)"
            ) from exc

    async def append(self, duration_minutes: int, today: date | None = None) -> Session:
        if isinstance(duration_minutes, bool) or not isinstance(duration_minutes, int):
            raise ValueError("duration_minutes must be an integer")
        if duration_minutes <= 0:
            raise ValueError("duration_minutes must be positive")

        session = Session(date=today or self.clock(), duration_minutes=duration_minutes)
        sessions = await self.load_all()
        sessions.append(session)

        payload = json.dumps([s.to_wire() for s in sessions])
        try:
            await self.backend.set(self.key, payload)
        except BACKEND_ERRORS as exc:
            raise PersistenceError(f"Failed to write {self.key!r}: {exc}") from exc

        logger.info(
            "Recorded %d-minute session on %s (%d total)",
            duration_minutes,
            session.date.isoformat(),
            len(sessions),
        )
        return session

    async def clear(self) -> None:
        try:
            await self.backend.delete(self.key)
        except BACKEND_ERRORS as exc:
            raise PersistenceError(f"Failed to delete {self.key!r}: {exc}") from exc
        logger.warning("Cleared session log %r", self.key)

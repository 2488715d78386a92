from __future__ import annotations

import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, Iterator

from guessboard.core.ids import new_ulid, now_iso
from guessboard.core.observability import emit
from guessboard.modules.intake.queue import IntakeQueue

from .images import LocalImageStore
from .schemas import GameState

DEFAULT_IDLE_TTL = 60 * 60  # seconds
DEFAULT_MAX_GAMES = 500


class GameNotFound(KeyError):
    pass


@dataclass
class GameSession:
    game_id: str
    state: GameState = field(default_factory=GameState)
    intake: IntakeQueue = field(default_factory=IntakeQueue)
    images: LocalImageStore = field(default_factory=LocalImageStore)
    created_at: str = field(default_factory=now_iso)
    # monotonic seconds, stamped by the owning store
    last_used: float = 0.0
    lock: threading.RLock = field(default_factory=threading.RLock, repr=False)


class SessionStore:
    """
    In-memory game sessions keyed by game id.

    Mutations of one game are serialized by that game's lock; the store lock
    only guards the id -> session map.

    Clients never say goodbye, so sessions idle for longer than `idle_ttl`
    are evicted, and creating a game past `max_games` evicts the least
    recently used one. Eviction goes through discard(), which releases the
    game's image bytes.
    """

    def __init__(
        self,
        idle_ttl: float = DEFAULT_IDLE_TTL,
        max_games: int = DEFAULT_MAX_GAMES,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._lock = threading.Lock()
        self._sessions: Dict[str, GameSession] = {}
        self._idle_ttl = idle_ttl
        self._max_games = max_games
        self._clock = clock

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def create(self) -> GameSession:
        self.evict_idle()
        self._make_room()
        session = GameSession(game_id=new_ulid(), last_used=self._clock())
        with self._lock:
            self._sessions[session.game_id] = session
        return session

    def get(self, game_id: str) -> GameSession:
        with self._lock:
            session = self._sessions.get(game_id)
        if session is None:
            raise GameNotFound(game_id)
        return session

    @contextmanager
    def locked(self, game_id: str) -> Iterator[GameSession]:
        session = self.get(game_id)
        with session.lock:
            session.last_used = self._clock()
            try:
                yield session
            finally:
                session.last_used = self._clock()

    def discard(self, game_id: str) -> None:
        with self._lock:
            session = self._sessions.pop(game_id, None)
        if session is None:
            raise GameNotFound(game_id)
        with session.lock:
            session.images.clear()

    def evict_idle(self) -> int:
        cutoff = self._clock() - self._idle_ttl
        with self._lock:
            idle = [gid for gid, s in self._sessions.items() if s.last_used < cutoff]
        return self._evict(idle, "idle")

    def _make_room(self) -> None:
        with self._lock:
            excess = len(self._sessions) - self._max_games + 1
            if excess <= 0:
                return
            oldest = sorted(self._sessions.values(), key=lambda s: s.last_used)[:excess]
        self._evict([s.game_id for s in oldest], "capacity")

    def _evict(self, game_ids: Iterable[str], reason: str) -> int:
        evicted = 0
        for gid in game_ids:
            try:
                self.discard(gid)
            except GameNotFound:
                # already discarded by its owner
                continue
            evicted += 1
        if evicted:
            emit("info", "game.evicted", f"evicted {evicted} game(s)", None, __name__, reason=reason, count=evicted)
        return evicted

# -*- coding: utf-8 -*-
"""
@Time    : 2025/8/20 22:40
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : 自动翻译会话的生命周期
"""
import time
from dataclasses import dataclass, field
from typing import Callable, Optional

from loguru import logger

from triggers.auto_translation.dedupe import DedupeTracker
from triggers.auto_translation.store import SettingsStore

SESSION_TTL_MS = 10 * 60 * 1000

Clock = Callable[[], float]


def now_ms() -> float:
    return time.time() * 1000


@dataclass
class Session:
    channel_id: str
    started_at: float
    ttl_ms: int = SESSION_TTL_MS
    tracker: DedupeTracker = field(default_factory=DedupeTracker)

    def is_expired(self, now: float) -> bool:
        return now - self.started_at >= self.ttl_ms

    def remaining(self, now: float) -> float:
        return max(0.0, self.ttl_ms - (now - self.started_at))


class SessionController:
    """
    Owns the single auto-translation session of the process.

    Expiry is lazy: `is_active()` is the only place where an expired session is
    noticed and torn down, so callers must go through it instead of checking
    `session` directly.
    """

    def __init__(
        self,
        settings_store: SettingsStore,
        *,
        ttl_ms: int = SESSION_TTL_MS,
        clock: Clock = now_ms,
        on_teardown: Optional[Callable[[], None]] = None,
    ):
        self._settings_store = settings_store
        self._ttl_ms = ttl_ms
        self._clock = clock
        self._on_teardown = on_teardown
        self._session: Session | None = None

    @property
    def session(self) -> Session | None:
        return self._session

    @property
    def ttl_ms(self) -> int:
        return self._ttl_ms

    def set_teardown_hook(self, hook: Callable[[], None]) -> None:
        self._on_teardown = hook

    def start(self, channel_id: str, *, started_at: float | None = None) -> Session:
        """替换当前会话。`started_at` 仅在恢复持久化会话时传入"""
        self._teardown()
        if self._session:
            self._session.tracker.clear()

        resumed = started_at is not None
        if started_at is None:
            started_at = self._clock()

        self._session = Session(channel_id=channel_id, started_at=started_at, ttl_ms=self._ttl_ms)
        if not resumed:
            self._settings_store.persist_session(channel_id, int(started_at))

        logger.info(
            f"Auto-translation session {'resumed' if resumed else 'started'} - channel={channel_id}"
        )
        return self._session

    def stop(self, *, keep_persisted: bool = False) -> None:
        """结束会话，没有会话时仅清理残留状态"""
        session = self._session
        self._session = None
        self._teardown()

        if session:
            session.tracker.clear()
            logger.info(f"Auto-translation session stopped - channel={session.channel_id}")

        if keep_persisted:
            return
        if session or self._settings_store.has_session():
            self._settings_store.clear_session()

    def is_active(self) -> bool:
        session = self._session
        if session is None:
            return False

        if session.is_expired(self._clock()):
            logger.info(f"Auto-translation session expired - channel={session.channel_id}")
            self.stop()
            return False

        return True

    def remaining(self) -> float | None:
        if not self.is_active():
            return None
        return self._session.remaining(self._clock())

    def _teardown(self) -> None:
        if self._on_teardown:
            self._on_teardown()

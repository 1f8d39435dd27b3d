# -*- coding: utf-8 -*-
"""
@Time    : 2025/8/21 00:10
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : 轮询 / 滚动 / 新消息三路触发的调度
"""
import asyncio
from contextlib import suppress
from enum import Enum

from loguru import logger

from models import ChatMessage, PendingItem, TriggerSource
from mybot.task_manager import TaskRegistry
from triggers.auto_translation.batch import BatchTranslator, pending_ids
from triggers.auto_translation.interfaces import ChatView, ScrollContainer
from triggers.auto_translation.scanner import VisibilityScanner, get_message_content
from triggers.auto_translation.session import Session, SessionController

POLL_INTERVAL_MS = 2000
SCROLL_DEBOUNCE_MS = 1000


class CoordinatorState(str, Enum):
    INACTIVE = "inactive"
    ARMED = "armed"


def _current_task() -> asyncio.Task | None:
    try:
        return asyncio.current_task()
    except RuntimeError:
        return None


class TriggerCoordinator:
    """
    Wires the poll timer, the debounced scroll listener and the message-created
    event to the scan -> translate -> dispatch pipeline of one session.

    Every timer handle and listener lives on the instance so `disarm()` can
    release all of them at once; nothing scheduled before `disarm()` starts a
    new scan afterwards.
    """

    def __init__(
        self,
        controller: SessionController,
        scanner: VisibilityScanner,
        batch: BatchTranslator,
        view: ChatView,
        tasks: TaskRegistry,
        *,
        poll_interval_ms: int = POLL_INTERVAL_MS,
        scroll_debounce_ms: int = SCROLL_DEBOUNCE_MS,
    ):
        self._controller = controller
        self._scanner = scanner
        self._batch = batch
        self._view = view
        self._tasks = tasks
        self._poll_interval = poll_interval_ms / 1000
        self._scroll_debounce = scroll_debounce_ms / 1000

        self._state = CoordinatorState.INACTIVE
        self._session: Session | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._poll_task: asyncio.Task | None = None
        self._debounce_handle: asyncio.TimerHandle | None = None
        self._scroll_container: ScrollContainer | None = None

    @property
    def state(self) -> CoordinatorState:
        return self._state

    @property
    def scroll_container(self) -> ScrollContainer | None:
        return self._scroll_container

    @property
    def debounce_pending(self) -> bool:
        return self._debounce_handle is not None

    def arm(self, session: Session) -> None:
        """立即扫描一次，然后挂上轮询定时器与滚动监听。必须在事件循环中调用"""
        self.disarm()

        self._loop = asyncio.get_running_loop()
        self._session = session
        self._state = CoordinatorState.ARMED

        self._spawn_pipeline(session, TriggerSource.IMMEDIATE)
        self._poll_task = self._loop.create_task(
            self._poll_loop(session), name=f"auto-translate-poll-{session.channel_id}"
        )
        self._sync_scroll_listener()

    def disarm(self) -> None:
        if self._poll_task is not None:
            # a poll tick that tears the session down must not cancel itself mid-step
            if self._poll_task is not _current_task():
                self._poll_task.cancel()
            self._poll_task = None

        if self._debounce_handle is not None:
            self._debounce_handle.cancel()
            self._debounce_handle = None

        self._detach_scroll_listener()

        if self._state == CoordinatorState.ARMED:
            logger.debug("Auto-translation triggers released")
        self._session = None
        self._state = CoordinatorState.INACTIVE

    # ---------------------------------------------------------------- triggers

    async def _poll_loop(self, session: Session) -> None:
        while self._session is session:
            await asyncio.sleep(self._poll_interval)
            if not self._revalidate(session):
                return
            # the chat view may have been re-rendered with a new scroller since the last tick
            self._sync_scroll_listener()
            self._spawn_pipeline(session, TriggerSource.POLL)

    def _on_scroll(self) -> None:
        session = self._session
        if session is None or not self._revalidate(session):
            return

        if self._debounce_handle is not None:
            self._debounce_handle.cancel()
        self._debounce_handle = self._loop.call_later(
            self._scroll_debounce, self._on_scroll_settled, session
        )

    def _on_scroll_settled(self, session: Session) -> None:
        self._debounce_handle = None
        if not self._revalidate(session):
            return
        self._spawn_pipeline(session, TriggerSource.SCROLL)

    async def on_message_create(self, message: ChatMessage, optimistic: bool = False) -> bool:
        """新消息逐条翻译，不进入批处理。返回是否完成了派发"""
        if optimistic:
            return False

        session = self._session
        if session is None or not self._controller.is_active():
            return False
        if self._controller.session is not session:
            return False
        if self._view.get_selected_channel_id() != session.channel_id:
            return False
        if message.channel_id != session.channel_id:
            return False
        if session.tracker.is_claimed(message.id):
            return False

        content = get_message_content(message)
        if not content:
            return False

        session.tracker.claim([message.id])
        item = PendingItem(
            channel_id=session.channel_id, message_id=message.id, source_text=content
        )
        return await self._batch.translate_item(item, session.tracker)

    # ---------------------------------------------------------------- pipeline

    def _revalidate(self, session: Session) -> bool:
        """会话仍然有效且用户仍在看同一个聊天。失效时拆除会话"""
        if self._session is not session:
            return False

        if not self._controller.is_active() or self._controller.session is not session:
            self.disarm()
            return False

        selected = self._view.get_selected_channel_id()
        if selected != session.channel_id:
            logger.info(
                f"Auto-translation channel mismatch - session={session.channel_id} viewing={selected}"
            )
            self._controller.stop()
            return False

        return True

    def _spawn_pipeline(self, session: Session, source: TriggerSource) -> None:
        self._tasks.spawn(
            self._run_pipeline(session, source), name=f"auto-translate-{source.value}"
        )

    async def _run_pipeline(self, session: Session, source: TriggerSource) -> int:
        if self._session is not session:
            return 0

        batch = self._scanner.scan(session.channel_id, session.tracker)
        if not batch:
            return 0

        session.tracker.claim(pending_ids(batch))
        logger.debug(
            f"[{source.value}] translating {len(batch)} visible messages in {session.channel_id}"
        )
        return await self._batch.translate_and_dispatch(batch, session.tracker)

    # ---------------------------------------------------------------- scroll listener

    def _sync_scroll_listener(self) -> None:
        container = self._view.find_scroll_container()
        if container is self._scroll_container:
            return

        self._detach_scroll_listener()
        if container is not None:
            container.add_scroll_listener(self._on_scroll)
            self._scroll_container = container

    def _detach_scroll_listener(self) -> None:
        container = self._scroll_container
        self._scroll_container = None
        if container is not None:
            with suppress(ValueError, KeyError):
                container.remove_scroll_listener(self._on_scroll)

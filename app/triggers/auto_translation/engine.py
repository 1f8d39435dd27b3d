# -*- coding: utf-8 -*-
"""
@Time    : 2025/8/21 01:20
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : 自动翻译引擎入口：会话启停、恢复、按需翻译
"""
from loguru import logger

from models import ChatMessage, TranslationResult
from mybot.task_manager import TaskRegistry
from settings import settings
from triggers.auto_translation.batch import BatchTranslator
from triggers.auto_translation.coordinator import CoordinatorState, TriggerCoordinator
from triggers.auto_translation.dedupe import DedupeTracker
from triggers.auto_translation.interfaces import (
    ChatView,
    ErrorReporter,
    MessageStore,
    RenderCallback,
    TranslationProvider,
)
from triggers.auto_translation.scanner import VisibilityScanner, get_message_content
from triggers.auto_translation.session import Clock, Session, SessionController, now_ms
from triggers.auto_translation.store import SettingsStore


class SessionEngine:
    def __init__(
        self,
        *,
        provider: TranslationProvider,
        view: ChatView,
        message_store: MessageStore,
        settings_store: SettingsStore,
        render: RenderCallback,
        report_error: ErrorReporter | None = None,
        clock: Clock = now_ms,
        ttl_ms: int | None = None,
        poll_interval_ms: int | None = None,
        scroll_debounce_ms: int | None = None,
        tasks: TaskRegistry | None = None,
    ):
        self.settings_store = settings_store
        self.tasks = tasks or TaskRegistry("auto-translation")
        self._clock = clock
        self._render = render

        self.controller = SessionController(
            settings_store,
            ttl_ms=ttl_ms if ttl_ms is not None else settings.AUTO_TRANSLATION_TTL_MS,
            clock=clock,
        )
        self.scanner = VisibilityScanner(view, message_store)
        self.batch = BatchTranslator(provider, render, report_error)
        self.coordinator = TriggerCoordinator(
            self.controller,
            self.scanner,
            self.batch,
            view,
            self.tasks,
            poll_interval_ms=(
                poll_interval_ms
                if poll_interval_ms is not None
                else settings.AUTO_TRANSLATION_POLL_INTERVAL_MS
            ),
            scroll_debounce_ms=(
                scroll_debounce_ms
                if scroll_debounce_ms is not None
                else settings.AUTO_TRANSLATION_SCROLL_DEBOUNCE_MS
            ),
        )
        self.controller.set_teardown_hook(self.coordinator.disarm)

    @property
    def session(self) -> Session | None:
        return self.controller.session

    @property
    def tracker(self) -> DedupeTracker | None:
        return self.controller.session.tracker if self.controller.session else None

    @property
    def armed(self) -> bool:
        return self.coordinator.state == CoordinatorState.ARMED

    # ---------------------------------------------------------------- session lifecycle

    def start(self, channel_id: str) -> Session:
        """开启（或重新开启）指定聊天的自动翻译，旧会话无条件丢弃"""
        session = self.controller.start(channel_id)
        self.coordinator.arm(session)
        return session

    def stop(self) -> None:
        """用户主动关闭：拆除触发器并清除持久化的会话"""
        self.controller.stop()

    def shutdown(self) -> None:
        """宿主进程退出：拆除触发器，保留持久化会话以便下次启动恢复"""
        self.controller.stop(keep_persisted=True)
        self.tasks.cancel_all()

    def recover(self) -> bool:
        """进程启动时恢复尚未过期的会话，保留原始开始时间"""
        prefs = self.settings_store.load()
        channel_id = prefs.auto_translate_channel_id
        started_at = prefs.auto_translate_timestamp

        if not prefs.auto_translate_received or not channel_id or not started_at:
            return False

        if self._clock() - started_at >= self.controller.ttl_ms:
            logger.info(f"Persisted auto-translation session for {channel_id} already expired")
            self.settings_store.clear_session()
            return False

        session = self.controller.start(channel_id, started_at=started_at)
        self.coordinator.arm(session)
        return True

    def is_active(self) -> bool:
        return self.controller.is_active()

    def remaining(self) -> float | None:
        return self.controller.remaining()

    def toggle(self, channel_id: str | None) -> bool:
        """开关按钮语义：开启时绑定到当前聊天，返回切换后的状态"""
        if self.is_active():
            self.stop()
            return False
        if not channel_id:
            return False
        self.start(channel_id)
        return True

    # ---------------------------------------------------------------- triggers & manual actions

    async def on_message_create(self, message: ChatMessage, optimistic: bool = False) -> bool:
        return await self.coordinator.on_message_create(message, optimistic=optimistic)

    async def translate_message(self, message: ChatMessage) -> TranslationResult | None:
        """手动翻译单条消息，失败时异常抛给调用方"""
        content = get_message_content(message)
        if not content:
            return None

        result = await self.batch.translate_one("received", content)
        self._render(message.channel_id, message.id, result)
        return result

    async def on_before_message_send(self, message: ChatMessage) -> ChatMessage:
        """发送前翻译自己的消息（需要开启 auto_translate）"""
        if not self.settings_store.load().auto_translate or not message.content:
            return message

        result = await self.batch.translate_one("sent", message.content)
        message.content = result.text
        return message

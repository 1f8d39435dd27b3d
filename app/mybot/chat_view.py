# -*- coding: utf-8 -*-
"""
@Time    : 2025/8/21 02:30
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : Telegram 侧的聊天视图、消息缓存与译文渲染
"""
import html
from collections import OrderedDict
from dataclasses import dataclass
from typing import Dict, List, Mapping, Tuple

from loguru import logger
from telegram import Bot, Message
from telegram.constants import ParseMode

from models import ChatMessage, Rect, TranslationResult
from mybot.task_manager import TaskRegistry
from settings import settings
from triggers.auto_translation.interfaces import ScrollListener
from triggers.auto_translation.language_detector import get_language_display_name
from triggers.auto_translation.scanner import message_element_id


def to_chat_message(message: Message) -> ChatMessage:
    return ChatMessage(
        id=str(message.message_id),
        channel_id=str(message.chat.id),
        content=message.text or message.caption or "",
        author_id=str(message.from_user.id) if message.from_user else None,
    )


class TelegramMessageStore:
    """按聊天缓存最近的消息，超过上限后淘汰最旧的"""

    def __init__(self, history_limit: int | None = None):
        self._history_limit = history_limit or settings.CHAT_VIEW_HISTORY_LIMIT
        self._messages: Dict[str, "OrderedDict[str, ChatMessage]"] = {}

    def record(self, message: ChatMessage) -> ChatMessage:
        bucket = self._messages.setdefault(message.channel_id, OrderedDict())
        bucket[message.id] = message
        bucket.move_to_end(message.id)
        while len(bucket) > self._history_limit:
            bucket.popitem(last=False)
        return message

    def get_messages(self, channel_id: str) -> Mapping[str, ChatMessage] | None:
        return self._messages.get(channel_id)

    def message_ids(self, channel_id: str) -> List[str]:
        return list(self._messages.get(channel_id, ()))


@dataclass
class TelegramMessageElement:
    element_id: str
    rect: Rect

    def get_bounding_rect(self) -> Rect:
        return self.rect


class TelegramScrollContainer:
    def __init__(self, channel_id: str):
        self.channel_id = channel_id
        self._listeners: List[ScrollListener] = []

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def add_scroll_listener(self, listener: ScrollListener) -> None:
        self._listeners.append(listener)

    def remove_scroll_listener(self, listener: ScrollListener) -> None:
        self._listeners.remove(listener)

    def scroll(self) -> None:
        for listener in list(self._listeners):
            listener()


class TelegramChatView:
    """
    The bot's rendered view of one selected chat.

    Recorded messages are laid out as rows of unit height, newest at the
    bottom; the viewport is `visible_messages` rows tall, so only the newest
    `visible_messages` messages are fully on screen. Selecting another chat
    re-renders the view with a fresh scroll container. A newly recorded
    message in the selected chat scrolls the list.
    """

    def __init__(self, message_store: TelegramMessageStore, visible_messages: int | None = None):
        self._message_store = message_store
        self._visible_messages = visible_messages or settings.CHAT_VIEW_VISIBLE_MESSAGES
        self._selected_channel_id: str | None = None
        self._scroll_container: TelegramScrollContainer | None = None

    def select(self, channel_id: str | None) -> None:
        if channel_id == self._selected_channel_id and self._scroll_container:
            return
        self._selected_channel_id = channel_id
        self._scroll_container = TelegramScrollContainer(channel_id) if channel_id else None
        logger.debug(f"Chat view switched to {channel_id}")

    def record(self, message: ChatMessage) -> ChatMessage:
        self._message_store.record(message)
        if message.channel_id == self._selected_channel_id and self._scroll_container:
            self._scroll_container.scroll()
        return message

    def get_selected_channel_id(self) -> str | None:
        return self._selected_channel_id

    def viewport_height(self) -> float:
        return float(self._visible_messages)

    def find_scroll_container(self) -> TelegramScrollContainer | None:
        return self._scroll_container

    def query_message_elements(self, id_prefix: str) -> List[TelegramMessageElement]:
        channel_id = self._selected_channel_id
        if not channel_id:
            return []

        message_ids = self._message_store.message_ids(channel_id)
        top = self.viewport_height() - len(message_ids)
        elements = []
        for row, message_id in enumerate(message_ids):
            element_id = message_element_id(channel_id, message_id)
            if element_id.startswith(id_prefix):
                rect = Rect(top=top + row, bottom=top + row + 1)
                elements.append(TelegramMessageElement(element_id, rect))
        return elements


def format_translation(result: TranslationResult) -> str:
    text = f"<blockquote>{html.escape(result.text)}</blockquote>"
    if language := get_language_display_name(result.source_language):
        text += f"\n<i>translated from {html.escape(language)}</i>"
    return text


class TelegramRenderer:
    """handle_translate：以回复原消息的方式挂上译文"""

    def __init__(self, bot: Bot, tasks: TaskRegistry, rendered_limit: int | None = None):
        self._bot = bot
        self._tasks = tasks
        self._rendered_limit = rendered_limit or settings.RENDERED_TRANSLATIONS_LIMIT
        self._rendered: "OrderedDict[Tuple[str, str], TranslationResult]" = OrderedDict()

    def get_rendered(self, channel_id: str, message_id: str) -> TranslationResult | None:
        return self._rendered.get((channel_id, message_id))

    def __call__(self, channel_id: str, message_id: str, result: TranslationResult) -> None:
        key = (channel_id, message_id)
        if key in self._rendered:
            return

        self._rendered[key] = result
        while len(self._rendered) > self._rendered_limit:
            self._rendered.popitem(last=False)

        self._tasks.spawn(
            self._send(channel_id, message_id, result),
            name=f"render-translation-{channel_id}-{message_id}",
        )

    async def _send(self, chat_id: str, message_id: str, result: TranslationResult) -> None:
        try:
            await self._bot.send_message(
                chat_id=int(chat_id),
                text=format_translation(result),
                parse_mode=ParseMode.HTML,
                reply_to_message_id=int(message_id),
            )
        except Exception as err:
            self._rendered.pop((chat_id, message_id), None)
            logger.error(f"发送译文失败 {chat_id}/{message_id}: {err}")

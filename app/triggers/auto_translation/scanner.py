# -*- coding: utf-8 -*-
"""
@Time    : 2025/8/20 21:30
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : 可见消息扫描
"""
from typing import List

from models import AUTO_MODERATION_EMBED_TYPE, ChatMessage, PendingItem, Rect
from triggers.auto_translation.dedupe import DedupeTracker
from triggers.auto_translation.interfaces import ChatView, MessageStore

MESSAGE_ELEMENT_PREFIX = "chat-messages"


def get_message_content(message: ChatMessage) -> str:
    """提取消息中可翻译的文本，没有可翻译内容时返回空字符串"""
    if message.content:
        return message.content

    if message.message_snapshots and message.message_snapshots[0].message.content:
        return message.message_snapshots[0].message.content

    for embed in message.embeds:
        if embed.type == AUTO_MODERATION_EMBED_TYPE:
            return embed.raw_description or ""

    return ""


def message_element_id(channel_id: str, message_id: str) -> str:
    return f"{MESSAGE_ELEMENT_PREFIX}-{channel_id}-{message_id}"


def is_fully_visible(rect: Rect, viewport_height: float) -> bool:
    return rect.top >= 0 and rect.bottom <= viewport_height


class VisibilityScanner:
    def __init__(self, view: ChatView, message_store: MessageStore):
        self._view = view
        self._message_store = message_store

    def scan(self, channel_id: str, tracker: DedupeTracker) -> List[PendingItem]:
        """
        Point-in-time snapshot of the on-screen messages of `channel_id` that
        still need a translation.

        Messages missing from the store (evicted) or without translatable text
        are skipped silently.
        """
        prefix = f"{MESSAGE_ELEMENT_PREFIX}-{channel_id}-"
        viewport_height = self._view.viewport_height()

        visible_ids: List[str] = []
        for element in self._view.query_message_elements(prefix):
            if not element.element_id.startswith(prefix):
                continue
            if not is_fully_visible(element.get_bounding_rect(), viewport_height):
                continue
            message_id = element.element_id[len(prefix) :]
            if message_id and not tracker.is_claimed(message_id) and message_id not in visible_ids:
                visible_ids.append(message_id)

        if not visible_ids:
            return []

        messages = self._message_store.get_messages(channel_id)
        if not messages:
            return []

        pending = []
        for message_id in visible_ids:
            message = messages.get(message_id)
            if not message:
                continue
            content = get_message_content(message)
            if not content:
                continue
            pending.append(
                PendingItem(channel_id=channel_id, message_id=message_id, source_text=content)
            )

        return pending

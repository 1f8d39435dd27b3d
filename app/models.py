# -*- coding: utf-8 -*-
"""
@Time    : 2025/7/8 12:34
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : 聊天消息与翻译结果的数据模型
"""

from enum import Enum
from typing import List, Literal

from pydantic import BaseModel, Field

Direction = Literal["sent", "received"]

AUTO_MODERATION_EMBED_TYPE = "auto_moderation_message"


class TriggerSource(str, Enum):
    IMMEDIATE = "immediate"
    """
    会话启动时的立即扫描
    """

    POLL = "poll"
    """
    定时轮询触发
    """

    SCROLL = "scroll"
    """
    滚动防抖触发
    """

    MESSAGE_CREATE = "message_create"
    """
    新消息事件触发
    """


class Embed(BaseModel):
    type: str | None = Field(default=None, description="嵌入类型，例如 rich / auto_moderation_message")
    raw_description: str | None = Field(default=None, description="嵌入的原始描述文本")


class SnapshotMessage(BaseModel):
    content: str = ""


class MessageSnapshot(BaseModel):
    """被转发消息的快照"""

    message: SnapshotMessage


class ChatMessage(BaseModel):
    id: str
    channel_id: str
    content: str = ""
    author_id: str | None = None
    embeds: List[Embed] = Field(default_factory=list)
    message_snapshots: List[MessageSnapshot] = Field(default_factory=list)


class TranslationResult(BaseModel):
    text: str = Field(description="译文")
    source_language: str | None = Field(default=None, description="检测到的源语言")


class PendingItem(BaseModel):
    """一次扫描产出的待翻译条目"""

    channel_id: str
    message_id: str
    source_text: str


class Rect(BaseModel):
    top: float
    bottom: float
    left: float = 0
    right: float = 0

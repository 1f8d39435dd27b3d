# -*- coding: utf-8 -*-
"""
@Time    : 2025/8/20 21:48
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : 翻译偏好与自动翻译会话的键值存储
"""
from typing import Tuple

from pydantic import BaseModel, Field

from models import Direction
from settings import settings


class PluginSettings(BaseModel):
    auto_translate_received: bool = Field(default=False, description="是否开启接收消息的自动翻译")
    auto_translate_channel_id: str | None = Field(default=None, description="自动翻译会话所在的聊天")
    auto_translate_timestamp: int | None = Field(default=None, description="会话开始时间（epoch ms）")
    auto_translate: bool = Field(default=False, description="发送前自动翻译自己的消息")

    received_input: str = Field(default_factory=lambda: settings.DEFAULT_RECEIVED_INPUT)
    received_output: str = Field(default_factory=lambda: settings.DEFAULT_RECEIVED_OUTPUT)
    sent_input: str = Field(default_factory=lambda: settings.DEFAULT_SENT_INPUT)
    sent_output: str = Field(default_factory=lambda: settings.DEFAULT_SENT_OUTPUT)


LANGUAGE_SETTING_KEYS = ("received_input", "received_output", "sent_input", "sent_output")


class SettingsStore:
    """子类只需实现 load / update"""

    def load(self) -> PluginSettings:
        raise NotImplementedError

    def update(self, **fields) -> PluginSettings:
        raise NotImplementedError

    def persist_session(self, channel_id: str, timestamp: int) -> PluginSettings:
        return self.update(
            auto_translate_received=True,
            auto_translate_channel_id=channel_id,
            auto_translate_timestamp=timestamp,
        )

    def has_session(self) -> bool:
        prefs = self.load()
        return bool(
            prefs.auto_translate_received
            or prefs.auto_translate_channel_id
            or prefs.auto_translate_timestamp
        )

    def clear_session(self) -> PluginSettings:
        return self.update(
            auto_translate_received=False,
            auto_translate_channel_id=None,
            auto_translate_timestamp=None,
        )

    def languages(self, direction: Direction) -> Tuple[str, str]:
        prefs = self.load()
        if direction == "sent":
            return prefs.sent_input, prefs.sent_output
        return prefs.received_input, prefs.received_output


class MemorySettingsStore(SettingsStore):
    def __init__(self, initial: PluginSettings | None = None):
        self._settings = initial or PluginSettings()

    def load(self) -> PluginSettings:
        return self._settings.model_copy()

    def update(self, **fields) -> PluginSettings:
        unknown = set(fields) - set(PluginSettings.model_fields)
        if unknown:
            raise KeyError(f"Unknown settings: {sorted(unknown)}")
        self._settings = self._settings.model_copy(update=fields)
        return self.load()

# -*- coding: utf-8 -*-
"""
@Time    : 2025/7/14 00:45
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : 自动翻译功能模块
"""

from .batch import BatchTranslator
from .coordinator import CoordinatorState, TriggerCoordinator
from .dedupe import DedupeTracker
from .engine import SessionEngine
from .interfaces import TranslationError
from .scanner import VisibilityScanner, get_message_content, message_element_id
from .session import SESSION_TTL_MS, Session, SessionController
from .store import MemorySettingsStore, PluginSettings, SettingsStore

__all__ = [
    "BatchTranslator",
    "CoordinatorState",
    "TriggerCoordinator",
    "DedupeTracker",
    "SessionEngine",
    "TranslationError",
    "VisibilityScanner",
    "get_message_content",
    "message_element_id",
    "SESSION_TTL_MS",
    "Session",
    "SessionController",
    "MemorySettingsStore",
    "PluginSettings",
    "SettingsStore",
]

# -*- coding: utf-8 -*-
"""
@Time    : 2025/8/21 03:05
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : 组装自动翻译引擎与 Telegram 宿主组件
"""
from dataclasses import dataclass

from telegram import Bot
from telegram.ext import ContextTypes

from mybot.chat_view import TelegramChatView, TelegramMessageStore, TelegramRenderer
from mybot.services.translation_service import create_translation_provider
from mybot.task_manager import TaskRegistry
from triggers.auto_translation import SessionEngine, SettingsStore

RUNTIME_KEY = "auto_translation"


@dataclass
class AutoTranslationRuntime:
    engine: SessionEngine
    view: TelegramChatView
    message_store: TelegramMessageStore
    settings_store: SettingsStore
    renderer: TelegramRenderer


def build_runtime(bot: Bot, settings_store: SettingsStore) -> AutoTranslationRuntime:
    tasks = TaskRegistry("auto-translation")
    message_store = TelegramMessageStore()
    view = TelegramChatView(message_store)
    renderer = TelegramRenderer(bot, tasks)

    engine = SessionEngine(
        provider=create_translation_provider(settings_store),
        view=view,
        message_store=message_store,
        settings_store=settings_store,
        render=renderer,
        tasks=tasks,
    )
    return AutoTranslationRuntime(
        engine=engine,
        view=view,
        message_store=message_store,
        settings_store=settings_store,
        renderer=renderer,
    )


def get_runtime(context: ContextTypes.DEFAULT_TYPE) -> AutoTranslationRuntime:
    return context.bot_data[RUNTIME_KEY]

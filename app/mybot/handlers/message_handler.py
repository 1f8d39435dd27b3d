# -*- coding: utf-8 -*-
"""
@Time    : 2025/7/12 10:00
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : The main message handler feeding the auto-translation engine.
"""
from loguru import logger
from telegram import Update
from telegram.ext import ContextTypes

from mybot.chat_view import to_chat_message
from mybot.runtime import get_runtime
from mybot.task_manager import non_blocking_handler


@non_blocking_handler("handle_message")
async def handle_message(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    Records the message in the chat view and hands it to the engine's
    message-created trigger.
    """
    message = update.effective_message
    if not message or not message.chat:
        return

    message_text = (message.text or message.caption or "").strip()
    if message_text.startswith("/"):
        return

    runtime = get_runtime(context)
    chat_message = runtime.view.record(to_chat_message(message))

    # Telegram 没有乐观消息，收到的都是服务端确认过的
    if await runtime.engine.on_message_create(chat_message, optimistic=False):
        logger.debug(f"Auto-translated new message {chat_message.id} in {chat_message.channel_id}")

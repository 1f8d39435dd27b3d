# -*- coding: utf-8 -*-
"""
@Time    : 2025/7/9 00:47
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : 手动翻译：/translate 与 /compose
"""
from loguru import logger
from telegram import Update
from telegram.constants import ParseMode
from telegram.ext import ContextTypes

from models import ChatMessage
from mybot.chat_view import format_translation, to_chat_message
from mybot.runtime import get_runtime


async def translate_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """回复一条消息并发送 /translate，翻译被回复的消息"""
    message = update.effective_message
    target = message.reply_to_message if message else None
    if not target:
        await message.reply_text("请回复需要翻译的消息后再发送 /translate")
        return

    runtime = get_runtime(context)
    chat_message = runtime.message_store.record(to_chat_message(target))

    if cached := runtime.renderer.get_rendered(chat_message.channel_id, chat_message.id):
        await message.reply_text(
            f"这条消息已经翻译过了：\n{format_translation(cached)}", parse_mode=ParseMode.HTML
        )
        return

    try:
        result = await runtime.engine.translate_message(chat_message)
    except Exception as err:
        logger.error(f"手动翻译失败: {err}")
        await message.reply_text("❌ 翻译失败，请稍后重试。")
        return

    if result is None:
        await message.reply_text("这条消息没有可翻译的文本。")


async def compose_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """/compose <text>：按发送方向翻译后由机器人代发"""
    message = update.effective_message
    text = " ".join(context.args or []).strip()
    if not text:
        await message.reply_text("用法：/compose <要发送的内容>")
        return

    runtime = get_runtime(context)
    outgoing = ChatMessage(id="outgoing", channel_id=str(update.effective_chat.id), content=text)

    try:
        outgoing = await runtime.engine.on_before_message_send(outgoing)
    except Exception as err:
        logger.error(f"发送前翻译失败: {err}")
        await message.reply_text("❌ 翻译失败，消息未发送。")
        return

    await context.bot.send_message(chat_id=update.effective_chat.id, text=outgoing.content)

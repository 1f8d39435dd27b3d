# -*- coding: utf-8 -*-
"""
@Time    : 2025/7/14 00:11
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : 自动翻译功能命令处理器（指令转发层）
"""

from loguru import logger
from telegram import Update
from telegram.ext import ContextTypes

from mybot.runtime import get_runtime, AutoTranslationRuntime
from settings import settings
from triggers.auto_translation.store import LANGUAGE_SETTING_KEYS
from utils import format_remaining

USAGE_TEXT = (
    "使用方法：\n"
    "• /auto_translation on - 在当前聊天开启 10 分钟自动翻译\n"
    "• /auto_translation off - 关闭自动翻译\n"
    "• /auto_translation status - 查看状态\n"
    "• /auto_translation outgoing on|off - 发送前自动翻译\n"
    "• /auto_translation lang <key> <code> - 设置语言，key 可选 "
    + ", ".join(LANGUAGE_SETTING_KEYS)
)


def render_status(runtime: AutoTranslationRuntime) -> str:
    engine = runtime.engine
    prefs = runtime.settings_store.load()

    remaining = engine.remaining()
    if remaining is not None:
        status = f"✅ 已开启（聊天 {engine.session.channel_id}，剩余 {format_remaining(remaining)}）"
    else:
        status = "🔕 已关闭"

    return (
        f"🤖 自动翻译状态\n\n"
        f"接收消息：{status}\n"
        f"发送前翻译：{'✅ 已开启' if prefs.auto_translate else '🔕 已关闭'}\n\n"
        f"📋 语言配置：\n"
        f"• 接收：{prefs.received_input} → {prefs.received_output}\n"
        f"• 发送：{prefs.sent_input} → {prefs.sent_output}"
    )


async def auto_translation_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """自动翻译命令处理器（指令转发层）"""
    chat_id = update.effective_chat.id
    user = update.effective_user
    args = context.args or []

    # 检查白名单权限
    if settings.whitelist and chat_id not in settings.whitelist:
        await update.message.reply_text(
            "⚠️ 您没有权限使用自动翻译功能。\n" "此功能仅限于授权的聊天群组使用。"
        )
        return

    runtime = get_runtime(context)
    engine = runtime.engine
    username = (user.username or user.first_name) if user else "匿名用户"

    command = args[0].lower() if args else "status"

    if command in ("on", "开启"):
        runtime.view.select(str(chat_id))
        engine.start(str(chat_id))
        logger.info(f"用户 {username} 在聊天 {chat_id} 中开启了自动翻译")
        await update.message.reply_text(
            f"✅ 自动翻译已开启，接下来 {format_remaining(engine.controller.ttl_ms)} 内的消息会被自动翻译。"
        )
    elif command in ("off", "关闭"):
        engine.stop()
        logger.info(f"用户 {username} 在聊天 {chat_id} 中关闭了自动翻译")
        await update.message.reply_text("🔕 自动翻译已关闭。")
    elif command in ("status", "状态"):
        await update.message.reply_text(render_status(runtime))
    elif command == "outgoing" and len(args) == 2 and args[1].lower() in ("on", "off"):
        enabled = args[1].lower() == "on"
        runtime.settings_store.update(auto_translate=enabled)
        await update.message.reply_text(f"发送前翻译已{'开启' if enabled else '关闭'}。")
    elif command == "lang" and len(args) == 3 and args[1] in LANGUAGE_SETTING_KEYS:
        runtime.settings_store.update(**{args[1]: args[2]})
        await update.message.reply_text(f"已将 {args[1]} 设置为 {args[2]}。")
    else:
        await update.message.reply_text(f"❌ 无效的命令参数。\n\n{USAGE_TEXT}")

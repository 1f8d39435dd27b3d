# -*- coding: utf-8 -*-
"""
@Time    : 2025/7/7 05:40
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    :
"""
import json
import signal
import sys

from loguru import logger
from telegram import Update, BotCommand
from telegram.ext import Application, CommandHandler, MessageHandler, filters

from mybot.handlers import (
    auto_translation_command,
    compose_command,
    handle_message,
    translate_command,
)
from mybot.runtime import RUNTIME_KEY, build_runtime
from settings import settings, LOG_DIR
from triggers.auto_translation.crud import SqlSettingsStore
from utils import init_log

init_log(
    runtime=LOG_DIR.joinpath("runtime.log"),
    error=LOG_DIR.joinpath("error.log"),
    serialize=LOG_DIR.joinpath("serialize.log"),
)


async def post_init(application: Application) -> None:
    """设置机器人的命令菜单，并恢复上次未过期的自动翻译会话"""
    commands = [
        BotCommand("auto_translation", "自动翻译当前聊天 10 分钟"),
        BotCommand("translate", "翻译被回复的消息"),
        BotCommand("compose", "翻译后代发消息"),
    ]

    try:
        await application.bot.set_my_commands(commands)
        logger.success(f"已设置机器人命令菜单: {[f'/{cmd.command}' for cmd in commands]}")
    except Exception as e:
        logger.error(f"设置机器人命令菜单失败: {e}")

    runtime = application.bot_data[RUNTIME_KEY]
    prefs = runtime.settings_store.load()
    if prefs.auto_translate_received and prefs.auto_translate_channel_id:
        runtime.view.select(prefs.auto_translate_channel_id)
    if runtime.engine.recover():
        logger.success(f"已恢复聊天 {prefs.auto_translate_channel_id} 的自动翻译会话")


async def post_shutdown(application: Application) -> None:
    runtime = application.bot_data.get(RUNTIME_KEY)
    if runtime:
        runtime.engine.shutdown()


def main() -> None:
    """Start the bot."""
    sp = settings.model_dump(mode='json')

    s = json.dumps(sp, indent=2, ensure_ascii=False)
    logger.success(f"Loading settings: {s}")

    if settings.ENABLE_DEV_MODE:
        logger.warning("🪄 开发模式已启动")

    application = settings.get_default_application()
    application.bot_data[RUNTIME_KEY] = build_runtime(application.bot, SqlSettingsStore())

    application.post_init = post_init
    application.post_shutdown = post_shutdown

    application.add_handler(CommandHandler("auto_translation", auto_translation_command))
    application.add_handler(CommandHandler("translate", translate_command))
    application.add_handler(CommandHandler("compose", compose_command))
    application.add_handler(MessageHandler(filters.ALL & ~filters.COMMAND, handle_message))

    # Setting up a graceful shutdown
    def shutdown_handler(signum, frame):
        logger.info("Receiving a shutdown signal, stopping auto-translation...")
        sys.exit(0)

    signal.signal(signal.SIGINT, shutdown_handler)
    signal.signal(signal.SIGTERM, shutdown_handler)

    application.run_polling(allowed_updates=Update.ALL_TYPES)


if __name__ == "__main__":
    main()

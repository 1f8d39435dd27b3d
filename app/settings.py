import sys
from pathlib import Path
from typing import Set, Any
from urllib.request import getproxies

import dotenv
from loguru import logger
from pydantic import SecretStr, Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from telegram.ext import Application

dotenv.load_dotenv()


PROJECT_DIR = Path(__file__).parent
CACHE_DIR = PROJECT_DIR.joinpath(".cache")
LOG_DIR = PROJECT_DIR.joinpath("logs")
DATA_DIR = PROJECT_DIR.joinpath("data")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_ignore_empty=True, extra="ignore")

    TELEGRAM_BOT_API_TOKEN: SecretStr = Field(
        default="", description="通过 https://t.me/BotFather 获取机器人的 API_TOKEN"
    )

    DIFY_APP_BASE_URL: str = Field(
        default="https://api.dify.ai/v1", description="Dify Workflow 后端连接"
    )

    DIFY_TRANSLATION_API_KEY: SecretStr = Field(
        default="",
        description="用于连接翻译 Workflow 的 API_KEY。Workflow 需要接收 texts/source_language/target_language 输入，"
        "并在 outputs.translations 中按输入顺序返回翻译结果。",
    )

    DIFY_REQUEST_TIMEOUT: float = Field(
        default=60.0, description="调用翻译 Workflow 的超时时间（秒）"
    )

    DATABASE_URL: str = Field(
        default=f"sqlite:///{DATA_DIR.joinpath('auto_translation.db')}",
        description="翻译偏好与自动翻译会话的持久化数据库 URL",
    )

    TELEGRAM_CHAT_WHITELIST: str = Field(
        default="", description="允许使用自动翻译的聊天 ID，逗号分隔。留空表示不限制。"
    )

    whitelist: Set[int] = Field(
        default_factory=set,
        description="配置 TELEGRAM_CHAT_WHITELIST 后， id 被清洗到该列表方便使用",
    )

    HTTP_REQUEST_TIMEOUT: float = Field(
        default=75.0, description="HTTP 请求超时时间（秒），用于 Telegram API 调用。"
    )

    # 自动翻译会话
    AUTO_TRANSLATION_TTL_MS: int = Field(
        default=10 * 60 * 1000, description="自动翻译会话的有效期（毫秒），过期后惰性关闭"
    )

    AUTO_TRANSLATION_POLL_INTERVAL_MS: int = Field(
        default=2000, description="可见消息轮询间隔（毫秒）"
    )

    AUTO_TRANSLATION_SCROLL_DEBOUNCE_MS: int = Field(
        default=1000, description="滚动事件防抖时间（毫秒）"
    )

    CHAT_VIEW_VISIBLE_MESSAGES: int = Field(
        default=20, description="聊天视图中视为“在屏幕上”的最近消息条数"
    )

    CHAT_VIEW_HISTORY_LIMIT: int = Field(
        default=200, description="每个聊天在内存中缓存的消息上限，超出后最旧的消息被淘汰"
    )

    RENDERED_TRANSLATIONS_LIMIT: int = Field(
        default=2000, description="记住已发送译文的 (聊天, 消息) 条数上限，超出后遗忘最旧的"
    )

    # 语言偏好的默认值，首次创建持久化设置时写入
    DEFAULT_RECEIVED_INPUT: str = Field(default="auto")
    DEFAULT_RECEIVED_OUTPUT: str = Field(default="en")
    DEFAULT_SENT_INPUT: str = Field(default="auto")
    DEFAULT_SENT_OUTPUT: str = Field(default="en")

    ENABLE_DEV_MODE: bool = Field(
        default=False,
        description="""
        是否为开发模式，开发模式下会 MOCK 翻译请求，立即返回带标记的原文。
        消息不会发送到 Dify，所有请求均在本地环回。
        """,
    )

    DEV_MODE_MOCKED_TEMPLATE: str = Field(
        default="[dev] {text}", description="当开发模式开启时，翻译结果使用该模版渲染。"
    )

    def model_post_init(self, context: Any, /) -> None:
        try:
            if not self.whitelist and self.TELEGRAM_CHAT_WHITELIST:
                self.whitelist = {
                    int(i.strip()) for i in filter(None, self.TELEGRAM_CHAT_WHITELIST.split(","))
                }
        except Exception as err:
            logger.warning(f"解析 TELEGRAM_CHAT_WHITELIST 失败 - {err}")

        # 防呆设置，假设 Linux 作为生产环境部署
        if "linux" in sys.platform and self.ENABLE_DEV_MODE:
            logger.warning("开发模式已自动关闭，请勿在 Linux 上运行开发模式")
            self.ENABLE_DEV_MODE = False

    def get_default_application(self) -> Application:
        _base_builder = (
            Application.builder()
            .token(self.TELEGRAM_BOT_API_TOKEN.get_secret_value())
            .connect_timeout(self.HTTP_REQUEST_TIMEOUT)
            .write_timeout(self.HTTP_REQUEST_TIMEOUT)
            .read_timeout(self.HTTP_REQUEST_TIMEOUT)
        )
        if proxy_url := getproxies().get("http"):
            logger.success(f"使用代理: {proxy_url}")
            application = _base_builder.proxy(proxy_url).get_updates_proxy(proxy_url).build()
        else:
            application = _base_builder.build()

        return application


settings = Settings()  # type: ignore

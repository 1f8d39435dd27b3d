# -*- coding: utf-8 -*-
"""
@Time    : 2025/8/20 21:05
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : 自动翻译引擎依赖的外部协作者接口
"""
from typing import Protocol, Callable, Iterable, List, Mapping, Any

from loguru import logger

from models import ChatMessage, Direction, Rect, TranslationResult


class TranslationError(Exception):
    """翻译服务调用失败：网络错误、服务端错误或响应格式不合法"""


class TranslationProvider(Protocol):
    async def translate(self, direction: Direction, text: str) -> TranslationResult: ...

    async def translate_batch(
        self, direction: Direction, texts: List[str]
    ) -> List[TranslationResult]: ...


class MessageStore(Protocol):
    def get_messages(self, channel_id: str) -> Mapping[str, ChatMessage] | None: ...


class MessageElement(Protocol):
    element_id: str

    def get_bounding_rect(self) -> Rect: ...


ScrollListener = Callable[[], Any]


class ScrollContainer(Protocol):
    def add_scroll_listener(self, listener: ScrollListener) -> None: ...

    def remove_scroll_listener(self, listener: ScrollListener) -> None: ...


class ChatView(Protocol):
    """当前渲染中的聊天界面"""

    def query_message_elements(self, id_prefix: str) -> Iterable[MessageElement]: ...

    def viewport_height(self) -> float: ...

    def find_scroll_container(self) -> ScrollContainer | None: ...

    def get_selected_channel_id(self) -> str | None: ...


RenderCallback = Callable[[str, str, TranslationResult], Any]
"""handle_translate(channel_id, message_id, result)，在界面上挂载译文，需要对同一条消息幂等"""

ErrorReporter = Callable[[str, BaseException], Any]


def log_error_reporter(message: str, err: BaseException) -> None:
    logger.opt(exception=err).error(f"{message}: {err}")

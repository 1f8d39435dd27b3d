# -*- coding: utf-8 -*-
"""
@Time    : 2025/8/21 10:02
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : Shared fakes for the auto-translation engine tests
"""
import asyncio
from typing import Dict, List
from unittest.mock import Mock

import pytest
import pytest_asyncio

from models import ChatMessage, Rect, TranslationResult
from triggers.auto_translation import MemorySettingsStore, SessionEngine, TranslationError
from triggers.auto_translation.scanner import message_element_id

T0 = 1_750_000_000_000.0


class FakeClock:
    def __init__(self, now: float = T0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


class FakeElement:
    def __init__(self, element_id: str, rect: Rect):
        self.element_id = element_id
        self.rect = rect

    def get_bounding_rect(self) -> Rect:
        return self.rect


class FakeScrollContainer:
    def __init__(self):
        self.listeners: List = []

    def add_scroll_listener(self, listener) -> None:
        self.listeners.append(listener)

    def remove_scroll_listener(self, listener) -> None:
        self.listeners.remove(listener)

    def scroll(self) -> None:
        for listener in list(self.listeners):
            listener()


class FakeChatView:
    def __init__(self, selected: str | None = "C1", height: float = 800):
        self.selected = selected
        self.height = height
        self.elements: List[FakeElement] = []
        self.container: FakeScrollContainer | None = FakeScrollContainer()

    def place(self, channel_id: str, message_id: str, top: float = 100, bottom: float = 150):
        self.elements.append(
            FakeElement(message_element_id(channel_id, message_id), Rect(top=top, bottom=bottom))
        )

    def query_message_elements(self, id_prefix: str):
        return [e for e in self.elements if e.element_id.startswith(id_prefix)]

    def viewport_height(self) -> float:
        return self.height

    def find_scroll_container(self):
        return self.container

    def get_selected_channel_id(self):
        return self.selected


class FakeMessageStore:
    def __init__(self):
        self.messages: Dict[str, Dict[str, ChatMessage]] = {}

    def add(self, channel_id: str, message_id: str, content: str = "", **kwargs) -> ChatMessage:
        message = ChatMessage(id=message_id, channel_id=channel_id, content=content, **kwargs)
        self.messages.setdefault(channel_id, {})[message_id] = message
        return message

    def get_messages(self, channel_id: str):
        return self.messages.get(channel_id)


class FakeProvider:
    def __init__(self, delay: float = 0):
        self.delay = delay
        self.fail = False
        self.batch_calls: List[tuple] = []
        self.single_calls: List[tuple] = []

    async def translate_batch(self, direction, texts):
        self.batch_calls.append((direction, list(texts)))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail:
            raise TranslationError("provider unavailable")
        return [TranslationResult(text=f"tr:{text}", source_language="de") for text in texts]

    async def translate(self, direction, text):
        self.single_calls.append((direction, text))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail:
            raise TranslationError("provider unavailable")
        return TranslationResult(text=f"tr:{text}", source_language="de")


def add_visible(view: FakeChatView, store: FakeMessageStore, channel_id: str, message_id: str):
    store.add(channel_id, message_id, content=f"text{message_id}")
    view.place(channel_id, message_id)


async def settle(rounds: int = 5) -> None:
    for _ in range(rounds):
        await asyncio.sleep(0)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def view():
    return FakeChatView()


@pytest.fixture
def message_store():
    return FakeMessageStore()


@pytest.fixture
def provider():
    return FakeProvider()


@pytest.fixture
def settings_store():
    return MemorySettingsStore()


@pytest.fixture
def render():
    return Mock(name="handle_translate")


@pytest.fixture
def report_error():
    return Mock(name="report_error")


@pytest_asyncio.fixture
async def engine_factory(view, message_store, provider, settings_store, render, report_error, clock):
    engines = []

    def _make(**overrides) -> SessionEngine:
        kwargs = dict(
            provider=provider,
            view=view,
            message_store=message_store,
            settings_store=settings_store,
            render=render,
            report_error=report_error,
            clock=clock,
            ttl_ms=600_000,
            poll_interval_ms=50,
            scroll_debounce_ms=100,
        )
        kwargs.update(overrides)
        engine = SessionEngine(**kwargs)
        engines.append(engine)
        return engine

    yield _make

    for engine in engines:
        engine.shutdown()
    await settle()


@pytest_asyncio.fixture
async def engine(engine_factory):
    return engine_factory()

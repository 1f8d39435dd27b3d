# -*- coding: utf-8 -*-
"""
@Time    : 2025/8/20 22:02
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : 批量翻译与结果派发
"""
import asyncio
from typing import List, Sequence

from loguru import logger

from models import Direction, PendingItem, TranslationResult
from triggers.auto_translation.dedupe import DedupeTracker
from triggers.auto_translation.interfaces import (
    ErrorReporter,
    RenderCallback,
    TranslationError,
    TranslationProvider,
    log_error_reporter,
)


class BatchTranslator:
    def __init__(
        self,
        provider: TranslationProvider,
        render: RenderCallback,
        report_error: ErrorReporter | None = None,
    ):
        self._provider = provider
        self._render = render
        self._report_error = report_error or log_error_reporter

    async def translate_and_dispatch(
        self, batch: Sequence[PendingItem], tracker: DedupeTracker
    ) -> int:
        """
        Translate a batch with a single provider call and dispatch every result.

        A failed call abandons the whole batch: nothing is rendered, nothing is
        marked as translated, and the error is reported instead of raised.

        Returns:
            The number of messages rendered.
        """
        if not batch:
            return 0

        message_ids = pending_ids(batch)
        try:
            results = await self._provider.translate_batch(
                "received", [item.source_text for item in batch]
            )
            if not isinstance(results, list) or len(results) != len(batch):
                raise TranslationError(
                    f"Expected {len(batch)} translations, got "
                    f"{len(results) if isinstance(results, list) else type(results).__name__}"
                )
        except asyncio.CancelledError:
            tracker.release(message_ids)
            raise
        except Exception as err:
            tracker.release(message_ids)
            self._report_error("Batch auto-translate failed", err)
            return 0

        dispatched = 0
        for item, result in zip(batch, results):
            if self.dispatch(item, result, tracker):
                dispatched += 1

        logger.debug(f"Batch auto-translate dispatched {dispatched}/{len(batch)} messages")
        return dispatched

    async def translate_item(self, item: PendingItem, tracker: DedupeTracker) -> bool:
        """单条翻译并立即派发，用于新消息事件；失败只记录不抛出"""
        try:
            result = await self.translate_one("received", item.source_text)
        except asyncio.CancelledError:
            tracker.release([item.message_id])
            raise
        except Exception as err:
            tracker.release([item.message_id])
            self._report_error("Auto-translate failed", err)
            return False

        return self.dispatch(item, result, tracker)

    async def translate_one(self, direction: Direction, text: str) -> TranslationResult:
        """按需翻译，错误直接抛给调用方"""
        return await self._provider.translate(direction, text)

    def dispatch(self, item: PendingItem, result: TranslationResult, tracker: DedupeTracker) -> bool:
        message_id = item.message_id
        if message_id in tracker:
            tracker.release([message_id])
            return False

        try:
            self._render(item.channel_id, message_id, result)
        except Exception as err:
            tracker.release([message_id])
            self._report_error(f"Failed to render translation of {message_id}", err)
            return False

        tracker.mark(message_id)
        return True


def pending_ids(batch: Sequence[PendingItem]) -> List[str]:
    return [item.message_id for item in batch]

# -*- coding: utf-8 -*-
"""
@Time    : 2025/7/12 10:00
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : Translation providers backing the auto-translation engine.
"""
import json
from contextlib import suppress
from typing import List

import httpx
from loguru import logger

from dify.dify_client import DifyWorkflowClient
from dify.workflow_tool import run_translation_workflow
from models import Direction, TranslationResult
from settings import settings
from triggers.auto_translation.interfaces import TranslationError
from triggers.auto_translation.language_detector import detect_language
from triggers.auto_translation.store import SettingsStore


def fill_source_language(result: TranslationResult, source_text: str) -> TranslationResult:
    """服务端未返回源语言时，用 langdetect 兜底"""
    if result.source_language:
        return result
    return result.model_copy(update={"source_language": detect_language(source_text)})


class DifyTranslationProvider:
    """
    Translates through a Dify workflow.

    One workflow run carries the whole batch; the workflow must answer with
    `outputs.translations` in the same order and of the same length as the
    input texts, otherwise the batch fails as a unit.
    """

    def __init__(self, settings_store: SettingsStore, client: DifyWorkflowClient | None = None):
        self._settings_store = settings_store
        self._client = client or DifyWorkflowClient()

    async def translate(self, direction: Direction, text: str) -> TranslationResult:
        results = await self.translate_batch(direction, [text])
        return results[0]

    async def translate_batch(self, direction: Direction, texts: List[str]) -> List[TranslationResult]:
        if not texts:
            return []

        source_language, target_language = self._settings_store.languages(direction)
        try:
            response = await run_translation_workflow(
                self._client,
                texts,
                source_language=source_language,
                target_language=target_language,
                from_user=f"auto-translation-{direction}",
            )
        except httpx.HTTPError as err:
            raise TranslationError(f"Translation workflow request failed: {err}") from err
        except (ValueError, TypeError) as err:
            raise TranslationError(f"Malformed translation workflow response: {err}") from err

        data = response.data
        if data.status != "succeeded" or data.error:
            raise TranslationError(f"Translation workflow {data.status}: {data.error}")

        translations = data.outputs.translations if data.outputs else None
        if translations is None:
            raise TranslationError("Translation workflow returned no translations")
        if len(translations) != len(texts):
            raise TranslationError(
                f"Translation workflow returned {len(translations)} results for {len(texts)} texts"
            )

        with suppress(Exception):
            outputs_json = json.dumps(
                [t.model_dump(mode="json") for t in translations], indent=2, ensure_ascii=False
            )
            logger.debug(f"Translation Result: \n{outputs_json}")

        return [fill_source_language(result, text) for result, text in zip(translations, texts)]


class DevModeTranslationProvider:
    """开发模式下不请求 Dify，直接用模版包装原文"""

    async def translate(self, direction: Direction, text: str) -> TranslationResult:
        return TranslationResult(
            text=settings.DEV_MODE_MOCKED_TEMPLATE.format(text=text),
            source_language=detect_language(text),
        )

    async def translate_batch(self, direction: Direction, texts: List[str]) -> List[TranslationResult]:
        return [await self.translate(direction, text) for text in texts]


def create_translation_provider(settings_store: SettingsStore):
    if settings.ENABLE_DEV_MODE:
        logger.warning("🪄 开发模式已启动，翻译请求将被 MOCK")
        return DevModeTranslationProvider()
    return DifyTranslationProvider(settings_store)

# -*- coding: utf-8 -*-
"""
@Time    : 2025/8/21 12:30
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : Dify translation provider
"""
import json
from unittest.mock import patch

import httpx
import pytest

from dify.dify_client import DifyWorkflowClient
from models import TranslationResult
from mybot.services.translation_service import (
    DevModeTranslationProvider,
    DifyTranslationProvider,
    fill_source_language,
)
from triggers.auto_translation import MemorySettingsStore, TranslationError


def _workflow_response(translations, status="succeeded", error=None):
    return {
        "task_id": "task-1",
        "workflow_run_id": "run-1",
        "data": {
            "id": "run-1",
            "workflow_id": "wf-1",
            "status": status,
            "outputs": {"translations": translations} if translations is not None else None,
            "error": error,
        },
    }


def _provider(handler, store=None):
    client = DifyWorkflowClient(
        api_key="app-test",
        base_url="https://dify.test/v1",
        transport=httpx.MockTransport(handler),
    )
    return DifyTranslationProvider(store or MemorySettingsStore(), client=client)


class TestDifyTranslationProvider:
    @pytest.mark.asyncio
    async def test_batch_request_and_order(self):
        requests = []

        def handler(request: httpx.Request):
            requests.append(request)
            return httpx.Response(
                200,
                json=_workflow_response(
                    [
                        {"text": "hello", "source_language": "de"},
                        {"text": "good night", "source_language": "de"},
                    ]
                ),
            )

        store = MemorySettingsStore()
        store.update(received_input="de", received_output="en")
        results = await _provider(handler, store).translate_batch("received", ["hallo", "gute nacht"])

        assert results == [
            TranslationResult(text="hello", source_language="de"),
            TranslationResult(text="good night", source_language="de"),
        ]
        assert len(requests) == 1
        request = requests[0]
        assert request.url.path == "/v1/workflows/run"
        assert request.headers["Authorization"] == "Bearer app-test"
        body = json.loads(request.content)
        assert body["response_mode"] == "blocking"
        assert body["user"] == "auto-translation-received"
        assert body["inputs"]["source_language"] == "de"
        assert body["inputs"]["target_language"] == "en"
        assert json.loads(body["inputs"]["texts"]) == ["hallo", "gute nacht"]

    @pytest.mark.asyncio
    async def test_sent_direction_uses_sent_languages(self):
        seen = {}

        def handler(request: httpx.Request):
            seen.update(json.loads(request.content)["inputs"])
            return httpx.Response(200, json=_workflow_response([{"text": "hola", "source_language": "en"}]))

        store = MemorySettingsStore()
        store.update(sent_input="en", sent_output="es")
        result = await _provider(handler, store).translate("sent", "hello")

        assert result.text == "hola"
        assert (seen["source_language"], seen["target_language"]) == ("en", "es")

    @pytest.mark.asyncio
    async def test_length_mismatch_fails(self):
        def handler(request):
            return httpx.Response(200, json=_workflow_response([{"text": "only one"}]))

        with pytest.raises(TranslationError):
            await _provider(handler).translate_batch("received", ["a", "b"])

    @pytest.mark.asyncio
    async def test_http_error_is_wrapped(self):
        def handler(request):
            return httpx.Response(500, json={"message": "internal error"})

        with pytest.raises(TranslationError) as exc_info:
            await _provider(handler).translate_batch("received", ["hallo"])
        assert isinstance(exc_info.value.__cause__, httpx.HTTPStatusError)

    @pytest.mark.asyncio
    async def test_failed_workflow_run(self):
        def handler(request):
            return httpx.Response(200, json=_workflow_response(None, status="failed", error="quota"))

        with pytest.raises(TranslationError, match="quota"):
            await _provider(handler).translate_batch("received", ["hallo"])

    @pytest.mark.asyncio
    async def test_malformed_body_is_wrapped(self):
        def handler(request):
            return httpx.Response(200, content=b"not json")

        with pytest.raises(TranslationError):
            await _provider(handler).translate_batch("received", ["hallo"])

    @pytest.mark.asyncio
    async def test_missing_source_language_is_detected_locally(self):
        def handler(request):
            return httpx.Response(200, json=_workflow_response([{"text": "hello"}]))

        with patch(
            "mybot.services.translation_service.detect_language", return_value="fr"
        ) as detect:
            results = await _provider(handler).translate_batch("received", ["bonjour"])

        detect.assert_called_once_with("bonjour")
        assert results == [TranslationResult(text="hello", source_language="fr")]

    @pytest.mark.asyncio
    async def test_empty_batch_skips_request(self):
        def handler(request):
            raise AssertionError("no request expected")

        assert await _provider(handler).translate_batch("received", []) == []


def test_fill_source_language_keeps_existing_value():
    result = TranslationResult(text="hi", source_language="ja")
    assert fill_source_language(result, "こんにちは") is result


@pytest.mark.asyncio
async def test_dev_mode_provider_wraps_text():
    with patch("mybot.services.translation_service.detect_language", return_value=None):
        results = await DevModeTranslationProvider().translate_batch("received", ["a", "b"])
    assert [r.text for r in results] == ["[dev] a", "[dev] b"]

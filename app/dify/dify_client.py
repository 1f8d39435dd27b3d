# -*- coding: utf-8 -*-
"""
@Time    : 2025/7/7 05:40
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    :
"""
from httpx import AsyncClient, AsyncBaseTransport
from loguru import logger

from dify.models import WorkflowRunPayload, WorkflowRunResponse
from settings import settings


class DifyWorkflowClient:
    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        *,
        transport: AsyncBaseTransport | None = None,
    ):
        if api_key is None:
            api_key = settings.DIFY_TRANSLATION_API_KEY.get_secret_value()
        headers = {"Authorization": f"Bearer {api_key}"}
        self._client = AsyncClient(
            base_url=base_url or settings.DIFY_APP_BASE_URL,
            headers=headers,
            timeout=timeout or settings.DIFY_REQUEST_TIMEOUT,
            transport=transport,
        )

    async def run(self, payload: WorkflowRunPayload) -> WorkflowRunResponse:
        """
        执行 workflow

        仅支持阻塞模式，翻译结果需要一次性拿到才能与输入顺序对齐。

        Args:
            payload: workflow 入参

        Returns:
            WorkflowRunResponse
        """
        payload_json = payload.dumps_params()
        response = await self._client.post("/workflows/run", json=payload_json)
        response.raise_for_status()
        result = response.json()
        logger.debug(f"workflow run finished: {result.get('workflow_run_id')}")
        return WorkflowRunResponse(**result)


# -*- coding: utf-8 -*-
"""
@Time    : 2025/7/8 19:51
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    :
"""
from typing import List

from dify.dify_client import DifyWorkflowClient
from dify.models import WorkflowRunPayload, WorkflowInputs, WorkflowRunResponse


async def run_translation_workflow(
    client: DifyWorkflowClient,
    texts: List[str],
    source_language: str,
    target_language: str,
    from_user: str = "auto-translation",
) -> WorkflowRunResponse:
    inputs = WorkflowInputs.from_texts(
        texts, source_language=source_language, target_language=target_language
    )
    payload = WorkflowRunPayload(inputs=inputs, user=from_user, response_mode="blocking")

    return await client.run(payload=payload)

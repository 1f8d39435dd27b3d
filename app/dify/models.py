# -*- coding: utf-8 -*-
"""
@Time    : 2025/7/7 05:41
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : 翻译 Workflow 的请求与响应模型
"""
import json
from typing import Literal, List

from pydantic import BaseModel, Field

from models import TranslationResult


class WorkflowInputs(BaseModel):
    texts: str = Field(description="JSON 编码的待翻译文本数组，保持输入顺序")
    source_language: str = Field(default="auto", description="源语言，auto 表示自动检测")
    target_language: str = Field(default="en", description="目标语言")

    @classmethod
    def from_texts(cls, texts: List[str], source_language: str, target_language: str):
        return cls(
            texts=json.dumps(texts, ensure_ascii=False),
            source_language=source_language,
            target_language=target_language,
        )


class WorkflowRunPayload(BaseModel):
    inputs: WorkflowInputs
    user: str
    response_mode: Literal["streaming", "blocking"] = "blocking"

    def dumps_params(self) -> dict:
        return self.model_dump(mode="json")


class WorkflowRunOutputs(BaseModel):
    translations: List[TranslationResult] | None = Field(
        default=None, description="与输入 texts 一一对应的翻译结果"
    )
    error: str | None = Field(default="", description="异常信息")


class WorkflowRunData(BaseModel):
    id: str
    workflow_id: str
    status: str
    outputs: WorkflowRunOutputs | None = Field(default=None, description="工作流返回的 dict data")
    error: str | None = Field(default="")


class WorkflowRunResponse(BaseModel):
    task_id: str
    workflow_run_id: str
    data: WorkflowRunData

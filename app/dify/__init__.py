# -*- coding: utf-8 -*-
from .dify_client import DifyWorkflowClient

__all__ = ["DifyWorkflowClient"]

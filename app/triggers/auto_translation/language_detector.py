# -*- coding: utf-8 -*-
"""
@Time    : 2025/7/14 00:15
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : 语言检测模块，翻译服务未返回源语言时兜底
"""

import re
from typing import Optional

from langdetect import DetectorFactory, detect_langs
from langdetect.lang_detect_exception import LangDetectException
from loguru import logger

# 设置随机种子以确保检测结果的一致性
DetectorFactory.seed = 0

# 语言代码映射表
LANGUAGE_MAPPING = {
    "vi": "越南语",
    "ru": "俄语",
    "en": "英语",
    "zh": "中文",
    "ko": "韩语",
    "ja": "日语",
    "th": "泰语",
    "ar": "阿拉伯语",
    "de": "德语",
    "fr": "法语",
    "es": "西班牙语",
    "it": "意大利语",
    "pt": "葡萄牙语",
    "nl": "荷兰语",
    "tr": "土耳其语",
}

MIN_CONFIDENCE = 0.6


def clean_text_for_detection(text: str) -> str:
    """清理文本以便进行语言检测"""
    if not text:
        return ""

    # 移除 URL、邮箱、提及与 hashtag
    text = re.sub(r'https?://[^\s]+', '', text)
    text = re.sub(r'\S+@\S+', '', text)
    text = re.sub(r'@\w+', '', text)
    text = re.sub(r'#\w+', '', text)

    # 移除多余的空格
    text = re.sub(r'\s+', ' ', text).strip()

    return text


def detect_language(text: str) -> Optional[str]:
    """检测文本的主要语言

    Returns:
        语言代码（如 'vi', 'ru', 'en'），置信度不足或文本过短时返回 None
    """
    cleaned_text = clean_text_for_detection(text)
    if len(cleaned_text) < 3:
        return None

    try:
        lang_probs = detect_langs(cleaned_text)
    except LangDetectException as e:
        logger.debug(f"语言检测失败: {e}")
        return None

    if not lang_probs or lang_probs[0].prob < MIN_CONFIDENCE:
        return None

    lang = lang_probs[0].lang
    # 标准化语言代码
    if lang.startswith("zh"):
        lang = "zh"
    return lang


def get_language_display_name(lang_code: str | None) -> str:
    """获取语言的显示名称"""
    if not lang_code:
        return ""
    return LANGUAGE_MAPPING.get(lang_code, lang_code)

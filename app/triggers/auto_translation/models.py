# -*- coding: utf-8 -*-
"""
@Time    : 2025/7/14 00:45
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : 自动翻译功能的数据库模型
"""

from datetime import datetime, UTC

from sqlalchemy import Column, String, DateTime, Boolean, BigInteger
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def _utcnow():
    return datetime.now(UTC)


class TranslationPreferences(Base):
    __tablename__ = "translation_preferences"

    profile = Column(String, primary_key=True, default="default")
    auto_translate_received = Column(Boolean, default=False, nullable=False)
    auto_translate_channel_id = Column(String, nullable=True)
    auto_translate_timestamp = Column(BigInteger, nullable=True)  # epoch ms
    auto_translate = Column(Boolean, default=False, nullable=False)
    received_input = Column(String, nullable=False)
    received_output = Column(String, nullable=False)
    sent_input = Column(String, nullable=False)
    sent_output = Column(String, nullable=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow, nullable=False)

    def __repr__(self):
        return (
            f"<TranslationPreferences(profile={self.profile}, "
            f"auto_translate_received={self.auto_translate_received}, "
            f"auto_translate_channel_id={self.auto_translate_channel_id})>"
        )

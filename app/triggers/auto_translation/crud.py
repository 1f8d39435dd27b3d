# -*- coding: utf-8 -*-
"""
@Time    : 2025/7/14 00:45
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : 翻译偏好的数据库操作
"""

from datetime import datetime, UTC
from functools import lru_cache
from pathlib import Path

from loguru import logger
from sqlalchemy import create_engine, Engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker, Session

from settings import settings
from .models import Base, TranslationPreferences
from .store import PluginSettings, SettingsStore


@lru_cache(maxsize=1)
def get_default_engine() -> Engine:
    url = make_url(settings.DATABASE_URL)
    if url.get_backend_name() == "sqlite" and url.database and url.database != ":memory:":
        Path(url.database).parent.mkdir(parents=True, exist_ok=True)
    return create_engine(url)


def init_database(engine: Engine) -> None:
    """初始化数据库表"""
    try:
        Base.metadata.create_all(bind=engine)
        logger.success("翻译偏好数据库表初始化成功")
    except Exception as e:
        logger.error(f"翻译偏好数据库表初始化失败: {e}")
        raise


def _to_plugin_settings(row: TranslationPreferences) -> PluginSettings:
    return PluginSettings(
        auto_translate_received=row.auto_translate_received,
        auto_translate_channel_id=row.auto_translate_channel_id,
        auto_translate_timestamp=row.auto_translate_timestamp,
        auto_translate=row.auto_translate,
        received_input=row.received_input,
        received_output=row.received_output,
        sent_input=row.sent_input,
        sent_output=row.sent_output,
    )


def _get_or_create(session: Session, profile: str) -> TranslationPreferences:
    row = session.get(TranslationPreferences, profile)
    if row is None:
        defaults = PluginSettings()
        row = TranslationPreferences(profile=profile, **defaults.model_dump())
        session.add(row)
        session.flush()
    return row


class SqlSettingsStore(SettingsStore):
    """以单行记录保存一个 profile 的翻译偏好"""

    def __init__(self, engine: Engine | None = None, profile: str = "default"):
        self._engine = engine or get_default_engine()
        self._profile = profile
        self._session_factory = sessionmaker(autocommit=False, autoflush=False, bind=self._engine)
        init_database(self._engine)

    def load(self) -> PluginSettings:
        session = self._session_factory()
        try:
            row = _get_or_create(session, self._profile)
            session.commit()
            return _to_plugin_settings(row)
        except Exception as e:
            session.rollback()
            logger.error(f"读取翻译偏好失败: {e}")
            raise
        finally:
            session.close()

    def update(self, **fields) -> PluginSettings:
        unknown = set(fields) - set(PluginSettings.model_fields)
        if unknown:
            raise KeyError(f"Unknown settings: {sorted(unknown)}")

        session = self._session_factory()
        try:
            row = _get_or_create(session, self._profile)
            for key, value in fields.items():
                setattr(row, key, value)
            row.updated_at = datetime.now(UTC)
            session.commit()
            session.refresh(row)
            logger.debug(f"已更新翻译偏好 {self._profile}: {fields}")
            return _to_plugin_settings(row)
        except Exception as e:
            session.rollback()
            logger.error(f"更新翻译偏好失败: {e}")
            raise
        finally:
            session.close()

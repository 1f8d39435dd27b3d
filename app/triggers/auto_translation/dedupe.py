# -*- coding: utf-8 -*-
"""
@Time    : 2025/8/20 21:12
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : 会话内已翻译消息的去重记录
"""
from typing import Iterable, List, Set


class DedupeTracker:
    """
    Message ids translated during one session.

    `translated` only grows while the session lives and is never persisted.
    `pending` holds ids whose translation request is in flight, so that a
    concurrent trigger does not pick them up again; a failed request releases
    them and they become eligible on the next trigger.
    """

    def __init__(self):
        self._translated: Set[str] = set()
        self._pending: Set[str] = set()

    def __contains__(self, message_id: str) -> bool:
        return message_id in self._translated

    def __len__(self) -> int:
        return len(self._translated)

    @property
    def translated(self) -> frozenset:
        return frozenset(self._translated)

    def is_claimed(self, message_id: str) -> bool:
        return message_id in self._translated or message_id in self._pending

    def claim(self, message_ids: Iterable[str]) -> List[str]:
        claimed = []
        for message_id in message_ids:
            if self.is_claimed(message_id):
                continue
            self._pending.add(message_id)
            claimed.append(message_id)
        return claimed

    def release(self, message_ids: Iterable[str]) -> None:
        for message_id in message_ids:
            self._pending.discard(message_id)

    def mark(self, message_id: str) -> bool:
        """记录一次成功的派发，已记录过则返回 False"""
        self._pending.discard(message_id)
        if message_id in self._translated:
            return False
        self._translated.add(message_id)
        return True

    def clear(self) -> None:
        self._translated.clear()
        self._pending.clear()

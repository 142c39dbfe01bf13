#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
翻译历史

由命令行入口在翻译完成后写入，最新的记录排在最前，只保留最近 HISTORY_LIMIT 条。
翻译流程本身不读写历史。
"""

import json
import os
import time
from dataclasses import asdict, dataclass, field, fields
from datetime import datetime
from typing import List

from aitrans.config import HISTORY_LIMIT, format_language


def _now_ms():
    return int(time.time() * 1000)


@dataclass
class HistoryEntry:
    """一条翻译历史

    Attributes:
        timestamp: 毫秒时间戳
        source_language: 源语言代码
        target_language: 目标语言代码
        model: 模型ID
        input_html: 输入内容
        output_html: 清洗后的输出HTML
    """
    source_language: str = "auto"
    target_language: str = ""
    model: str = ""
    input_html: str = ""
    output_html: str = ""
    timestamp: int = field(default_factory=_now_ms)

    @classmethod
    def from_dict(cls, data):
        known = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in data.items() if key in known})


def format_entry(entry: HistoryEntry) -> str:
    """历史记录的一行摘要: 时间 · 源语言 → 目标语言 · 模型"""
    ts = datetime.fromtimestamp(entry.timestamp / 1000).strftime("%Y-%m-%d %H:%M:%S")
    source = format_language(entry.source_language or "auto")
    target = format_language(entry.target_language or "")
    return f"{ts} · {source} → {target} · {entry.model or ''}"


class TranslationHistory:
    """保存在JSON文件中的翻译历史"""

    def __init__(self, path: str, limit: int = HISTORY_LIMIT):
        self.path = path
        self.limit = limit

    def load(self) -> List[HistoryEntry]:
        """读取历史，文件不存在或内容损坏时返回空列表"""
        if not os.path.exists(self.path):
            return []
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError):
            return []
        if not isinstance(data, list):
            return []
        return [HistoryEntry.from_dict(item) for item in data if isinstance(item, dict)]

    def _save(self, entries: List[HistoryEntry]):
        with open(self.path, 'w', encoding='utf-8') as f:
            json.dump([asdict(entry) for entry in entries], f, ensure_ascii=False, indent=2)

    def add(self, entry: HistoryEntry) -> List[HistoryEntry]:
        """在最前面插入一条记录并截断到上限

        Returns:
            保存后的历史列表
        """
        entries = [entry] + self.load()
        entries = entries[:self.limit]
        self._save(entries)
        return entries

    def clear(self):
        self._save([])

from __future__ import annotations

import json
from typing import Any, Dict, Iterable, List, Optional, Sequence

from .models import (
    CompletenessReport,
    CompletenessSummary,
    DuplicateEntry,
    LocaleStats,
    section_of,
)
from .store import LocaleStore, enumerate_paths

# 未显式指定 base 时按顺序探测
BASE_LOCALE_CANDIDATES = ("en", "en-US", "en-GB", "en_US", "en_GB")

TOP_SECTIONS = 5


def detect_base_locale(locales: Sequence[str], explicit: Optional[str] = None) -> Optional[str]:
    """
    规则：
    - explicit 存在于 locales：直接用
    - 否则按 BASE_LOCALE_CANDIDATES 顺序探测英语
    - 都没有：取字典序第一个（告警）
    - 一个语言都没有：None
    """
    if explicit:
        if explicit in locales:
            return explicit
        print(f"⚠️ 指定的 base locale 不存在：{explicit}，改为自动探测")

    for cand in BASE_LOCALE_CANDIDATES:
        if cand in locales:
            return cand

    if locales:
        first = sorted(locales)[0]
        print(f"⚠️ No English locale found, using {first} as base")
        return first
    return None


def _percentage(complete: int, total: int) -> float:
    if total == 0:
        return 100.0
    return round(complete / total * 100, 1)


def _group_by_section(paths: Iterable[str]) -> Dict[str, List[str]]:
    out: Dict[str, List[str]] = {}
    for p in paths:
        out.setdefault(section_of(p), []).append(p)
    return out


def _value_key(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, sort_keys=True)


class CompletenessAnalyzer:
    def __init__(self, store: LocaleStore, priority_sections: Sequence[str] = ()):
        self.store = store
        self.priority_sections = tuple(priority_sections)

    def resolve_base(self, explicit: Optional[str] = None) -> Optional[str]:
        return detect_base_locale(self.store.list_locales(), explicit)

    def _base_paths(self, base_locale: str) -> Optional[List[str]]:
        doc = self.store.load(base_locale)
        if doc is None:
            print(f"❌ {base_locale} 读取失败，无法作为 base")
            return None
        return enumerate_paths(doc)

    def _missing_paths(self, locale: str, base_paths: Sequence[str]) -> List[str]:
        # 只看 KeyPath 是否存在：空字符串也算已翻译
        return [p for p in base_paths if not self.store.has(locale, p)]

    def stats(self, base_locale: str) -> Optional[Dict[str, LocaleStats]]:
        base_paths = self._base_paths(base_locale)
        if base_paths is None:
            return None

        total = len(base_paths)
        out: Dict[str, LocaleStats] = {}
        for locale in self.store.list_locales():
            if locale == base_locale:
                continue
            missing = self._missing_paths(locale, base_paths)
            complete = total - len(missing)
            out[locale] = LocaleStats(
                total=total,
                complete=complete,
                missing=len(missing),
                percentage=_percentage(complete, total),
                missing_paths=tuple(missing),
            )
        return out

    def check_completeness(self, base_locale: str, detailed: bool = False) -> Optional[CompletenessReport]:
        base_paths = self._base_paths(base_locale)
        if base_paths is None:
            return None

        total = len(base_paths)
        locales: Dict[str, LocaleStats] = {}
        missing_by_locale: Dict[str, List[str]] = {}
        missing_by_section: Dict[str, Dict[str, List[str]]] = {}
        checked = 0

        for locale in self.store.list_locales():
            if locale == base_locale:
                continue
            if self.store.load(locale) is None:
                print(f"❌ Error reading {locale}")
                continue

            missing = self._missing_paths(locale, base_paths)
            complete = total - len(missing)
            locales[locale] = LocaleStats(
                total=total,
                complete=complete,
                missing=len(missing),
                percentage=_percentage(complete, total),
                missing_paths=tuple(missing),
            )
            if missing:
                missing_by_locale[locale] = missing
                missing_by_section[locale] = _group_by_section(missing)
            checked += 1

        section_counts: Dict[str, int] = {}
        for missing in missing_by_locale.values():
            for p in missing:
                sec = section_of(p)
                section_counts[sec] = section_counts.get(sec, 0) + 1
        # 稳定排序：缺失数降序，相同数量保持首次出现顺序
        ranked = dict(sorted(section_counts.items(), key=lambda kv: kv[1], reverse=True))

        priority = self.priority_sections or tuple(list(ranked)[:TOP_SECTIONS])
        suggestions: List[str] = []
        for sec in priority:
            affected = [
                loc for loc, keys in missing_by_locale.items()
                if any(k == sec or k.startswith(sec + ".") for k in keys)
            ]
            if affected:
                suggestions.append(f"{sec} missing in: {', '.join(affected)}")

        total_missing = sum(len(v) for v in missing_by_locale.values())
        summary = CompletenessSummary(
            total=checked,
            complete=checked - len(missing_by_locale),
            incomplete=len(missing_by_locale),
            total_missing=total_missing,
        )

        return CompletenessReport(
            base_locale=base_locale,
            total_keys=total,
            locales=locales,
            missing_by_section=missing_by_section,
            summary=summary,
            sections_analysis=ranked,
            suggestions=tuple(suggestions),
            detailed=detailed,
        )

    def find_duplicates(self, base_locale: str) -> Optional[List[DuplicateEntry]]:
        """
        同一路径下，多个语言给出完全相同的值：多半是没翻译（直接拷贝了另一种语言）。
        """
        base_paths = self._base_paths(base_locale)
        if base_paths is None:
            return None

        locales = self.store.list_locales()
        out: List[DuplicateEntry] = []
        for path in base_paths:
            buckets: Dict[str, List[str]] = {}
            values: Dict[str, Any] = {}
            for locale in locales:
                value = self.store.get(locale, path)
                if not value:
                    continue
                k = _value_key(value)
                values.setdefault(k, value)
                buckets.setdefault(k, []).append(locale)

            for k, locs in buckets.items():
                if len(locs) > 1:
                    out.append(DuplicateEntry(path=path, value=values[k], locales=tuple(locs)))
        return out

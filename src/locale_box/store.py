from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .fs import LOCALES_DIR, extract_js_export, load_json_obj, read_text_or_none, save_json
from .models import (
    FALLBACK_SUFFIX,
    INDEX_PREFIX,
    KEY_SEP,
    KeyPathError,
    LOCALE_SUFFIXES,
    PRIMARY_SUFFIX,
    SetOutcome,
    SetResult,
    split_key_path,
)


def enumerate_paths(doc: Mapping[str, Any], prefix: str = "") -> List[str]:
    """
    深度优先列出所有叶子 KeyPath（保持 key 声明顺序）。
    数组视为叶子，不展开。
    """
    out: List[str] = []
    for k, v in doc.items():
        p = f"{prefix}{KEY_SEP}{k}" if prefix else k
        if isinstance(v, dict):
            out.extend(enumerate_paths(v, p))
        else:
            out.append(p)
    return out


def resolve_path(doc: Optional[Mapping[str, Any]], path: str) -> Any:
    """只读解析：任何一段不存在 / 中间节点不是 object 都视为未找到（None）。"""
    cur: Any = doc
    for seg in split_key_path(path):
        if isinstance(cur, dict) and seg in cur:
            cur = cur[seg]
        else:
            return None
    return cur


def _kind(value: Any) -> str:
    if isinstance(value, str):
        return "string"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, list):
        return "array"
    if value is None:
        return "null"
    return type(value).__name__


class LocaleStore:
    """
    按 KeyPath 读写 locales 目录下的语言文件（一个语言一个文件）。

    每次 get/set/has 都重新从磁盘读取，不做缓存：
    同一进程内读到自己的写入，也不会覆盖两次调用之间的外部修改。
    """

    def __init__(self, locales_dir: Optional[Path] = None):
        self.locales_dir = (locales_dir or (Path.cwd() / LOCALES_DIR)).resolve()

    # ----------------------------
    # 目录 / 文件
    # ----------------------------
    def list_locales(self) -> List[str]:
        d = self.locales_dir
        if not d.is_dir():
            print(f"⚠️ 未找到 locales 目录：{d}")
            return []
        try:
            names = {
                p.stem
                for p in d.iterdir()
                if p.is_file() and p.suffix in LOCALE_SUFFIXES and not p.stem.startswith(INDEX_PREFIX)
            }
        except OSError as e:
            print(f"❌ 扫描 locales 目录失败：{e}")
            return []
        if not names:
            print(f"⚠️ locales 目录下没有语言文件：{d}")
        return sorted(names)

    def path_for(self, locale: str) -> Path:
        return self.locales_dir / f"{locale}{PRIMARY_SUFFIX}"

    def load(self, locale: str) -> Optional[Dict[str, Any]]:
        json_path = self.path_for(locale)
        js_path = self.locales_dir / f"{locale}{FALLBACK_SUFFIX}"

        if json_path.exists():
            try:
                return load_json_obj(json_path)
            except (OSError, ValueError) as e:
                print(f"❌ 读取 {locale}{PRIMARY_SUFFIX} 失败：{e}")
                return None

        if js_path.exists():
            print(f"⚠️ {locale}{FALLBACK_SUFFIX} 为只读格式；编辑操作会写入 {locale}{PRIMARY_SUFFIX}")
            text = read_text_or_none(js_path, verbose=True)
            obj = extract_js_export(text) if text is not None else None
            if obj is None:
                print(f"⚠️ 无法解析 {locale}{FALLBACK_SUFFIX}，请改用 {PRIMARY_SUFFIX} 格式")
            return obj

        print(f"❌ 未找到语言文件：{locale}{PRIMARY_SUFFIX} 或 {locale}{FALLBACK_SUFFIX}")
        return None

    def save(self, locale: str, doc: Mapping[str, Any]) -> None:
        # 永远写主格式：.js 语言在第一次修改时迁移为 .json
        self.locales_dir.mkdir(parents=True, exist_ok=True)
        save_json(self.path_for(locale), dict(doc))
        print(f"✅ Updated {locale}{PRIMARY_SUFFIX}")

    # ----------------------------
    # 读
    # ----------------------------
    def get(self, locale: str, path: str) -> Any:
        split_key_path(path)
        return resolve_path(self.load(locale), path)

    def has(self, locale: str, path: str) -> bool:
        return self.get(locale, path) is not None

    def get_all(self, path: str) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        for locale in self.list_locales():
            v = self.get(locale, path)
            if v is not None:
                out[locale] = v
        return out

    def get_missing(self, path: str) -> List[str]:
        return [loc for loc in self.list_locales() if not self.has(loc, path)]

    # ----------------------------
    # 写
    # ----------------------------
    def set(self, locale: str, path: str, value: Any, skip_if_exists: bool = False) -> SetResult:
        segs = split_key_path(path)
        if value is None:
            # null 读回来等同于不存在，不写入
            print(f"❌ {locale}: {path} 的值不能为 null")
            return SetResult(locale=locale, path=path, outcome=SetOutcome.FAILED)
        doc = self.load(locale)
        if doc is None:
            return SetResult(locale=locale, path=path, outcome=SetOutcome.FAILED)

        warnings: List[str] = []
        node = doc
        for i, seg in enumerate(segs[:-1]):
            if seg not in node:
                node[seg] = {}
            elif not isinstance(node[seg], dict):
                prefix = KEY_SEP.join(segs[: i + 1])
                msg = f'{locale}: Converting "{prefix}" from {_kind(node[seg])} to object'
                print(f"⚠️ {msg}")
                warnings.append(msg)
                node[seg] = {}
            node = node[seg]

        last = segs[-1]
        if skip_if_exists and last in node:
            print(f"ℹ️ {locale}: {path} 已存在，跳过")
            return SetResult(locale=locale, path=path, outcome=SetOutcome.SKIPPED, warnings=tuple(warnings))

        node[last] = value
        self.save(locale, doc)
        return SetResult(locale=locale, path=path, outcome=SetOutcome.APPLIED, warnings=tuple(warnings))

    def set_multiple(
            self,
            path: str,
            translations: Mapping[str, Any],
            skip_if_exists: bool = False,
    ) -> Dict[str, SetResult]:
        """逐语言 set；未知语言告警并标记 FAILED，不回滚已成功的部分。"""
        split_key_path(path)
        known = set(self.list_locales())
        results: Dict[str, SetResult] = {}
        for locale, value in translations.items():
            if locale in known:
                results[locale] = self.set(locale, path, value, skip_if_exists)
            else:
                print(f"⚠️ Unknown locale: {locale}")
                results[locale] = SetResult(locale=locale, path=path, outcome=SetOutcome.FAILED)
        return results

    def copy(
            self,
            source_locale: str,
            path: str,
            target_locales: Optional[Iterable[str]] = None,
    ) -> Optional[Dict[str, SetResult]]:
        value = self.get(source_locale, path)
        if value is None:
            print(f"❌ Source path not found: {path} in {source_locale}")
            return None

        targets = list(target_locales) if target_locales is not None else [
            loc for loc in self.list_locales() if loc != source_locale
        ]
        return {loc: self.set(loc, path, value) for loc in targets}

    def merge(
            self,
            locale: str,
            translations: Mapping[str, Any],
            skip_if_exists: bool = False,
    ) -> Dict[str, SetResult]:
        """逐条 set；某条失败（包括非法 KeyPath）不影响后面的条目。"""
        results: Dict[str, SetResult] = {}
        for p, v in translations.items():
            try:
                results[p] = self.set(locale, p, v, skip_if_exists)
            except KeyPathError as e:
                print(f"❌ {locale}: {e}")
                results[p] = SetResult(locale=locale, path=p, outcome=SetOutcome.FAILED)
        return results

    def batch_update(
            self,
            updates: Mapping[str, Mapping[str, Any]],
            skip_if_exists: bool = False,
    ) -> Dict[str, Dict[str, SetResult]]:
        """
        多语言批量写入：
        {'en-US': {'page.title': 'Title'}, 'zh-hans': {'page.title': '标题'}}
        """
        known = set(self.list_locales())
        results: Dict[str, Dict[str, SetResult]] = {}
        for locale, translations in updates.items():
            if locale in known:
                print(f"📝 Updating {locale}...")
                results[locale] = self.merge(locale, translations, skip_if_exists)
            else:
                print(f"⚠️ Unknown locale: {locale}")
                results[locale] = {
                    p: SetResult(locale=locale, path=p, outcome=SetOutcome.FAILED) for p in translations
                }
        return results

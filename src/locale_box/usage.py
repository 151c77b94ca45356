from __future__ import annotations

import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from .fs import DEFAULT_EXCLUDE_DIRS, collect_files, read_text_or_none, relpath
from .models import KeyScan, SectionUsage, UsageReport, section_of
from .store import LocaleStore, enumerate_paths, resolve_path

# t('a.b') / $t("a.b") / {{ $t('a.b') }} / {{ t('a.b') }}
KEY_PATTERNS = (
    re.compile(r"(?<![\w$])\$?t\s*\(\s*['\"](.*?)['\"]\s*\)"),
    re.compile(r"\{\{\s*\$?t\s*\(\s*['\"](.*?)['\"]\s*\)\s*\}\}"),
)


def extract_keys_from_text(content: str) -> List[str]:
    """提取翻译函数调用里的 key，文件内去重（保持首次出现顺序）。"""
    seen = set()
    out: List[str] = []
    for pattern in KEY_PATTERNS:
        for m in pattern.finditer(content):
            key = m.group(1)
            if key and key not in seen:
                seen.add(key)
                out.append(key)
    return out


def _is_translated(doc: Any, key: str) -> bool:
    # 比 check 更严格：空字符串也算缺失
    try:
        value = resolve_path(doc, key)
    except ValueError:
        return False
    return value is not None and value != ""


class UsageKeyExtractor:
    def __init__(
            self,
            store: LocaleStore,
            *,
            extensions: Sequence[str] = (".vue",),
            exclude_dirs: Sequence[str] = DEFAULT_EXCLUDE_DIRS,
            verbose: bool = False,
    ):
        self.store = store
        self.extensions = tuple(extensions)
        self.exclude_dirs = tuple(exclude_dirs)
        self.verbose = verbose

    def scan_tree(self, root: Path) -> KeyScan:
        root = root.resolve()
        files = collect_files(
            root,
            extensions=self.extensions,
            exclude_dirs=self.exclude_dirs,
            verbose=self.verbose,
        )

        all_keys = set()
        file_key_map: Dict[str, List[str]] = {}
        for p in files:
            text = read_text_or_none(p, verbose=self.verbose)
            if text is None:
                continue
            keys = extract_keys_from_text(text)
            if keys:
                file_key_map[relpath(p, root)] = keys
                all_keys.update(keys)

        return KeyScan(all_keys=tuple(sorted(all_keys)), file_key_map=file_key_map, files_scanned=len(files))

    def cross_check(self, root: Path, base_locale: str) -> Optional[UsageReport]:
        scan = self.scan_tree(root)

        doc = self.store.load(base_locale)
        if doc is None:
            print(f"❌ 无法加载 base locale：{base_locale}")
            return None

        found: List[str] = []
        missing: List[str] = []
        for key in scan.all_keys:
            (found if _is_translated(doc, key) else missing).append(key)

        missing_set = set(missing)
        missing_by_file: Dict[str, List[str]] = {}
        for file, keys in scan.file_key_map.items():
            miss = [k for k in keys if k in missing_set]
            if miss:
                missing_by_file[file] = miss

        by_section: Dict[str, List[str]] = {}
        for key in scan.all_keys:
            by_section.setdefault(section_of(key), []).append(key)
        section_stats = {
            sec: SectionUsage(used=len(keys), missing=sum(1 for k in keys if k in missing_set))
            for sec, keys in sorted(by_section.items(), key=lambda kv: len(kv[1]), reverse=True)
        }

        return UsageReport(
            base_locale=base_locale,
            existing_key_count=len(enumerate_paths(doc)),
            all_keys=scan.all_keys,
            found_keys=tuple(found),
            missing_keys=tuple(missing),
            file_key_map=scan.file_key_map,
            missing_by_file=missing_by_file,
            section_stats=section_stats,
            files_scanned=scan.files_scanned,
        )

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Tuple


# =========================
# Constants / Conventions
# =========================

# 主格式（可读写）与回退格式（只读，尽力解析）
PRIMARY_SUFFIX = ".json"
FALLBACK_SUFFIX = ".js"
LOCALE_SUFFIXES: Tuple[str, ...] = (PRIMARY_SUFFIX, FALLBACK_SUFFIX)

# index.js / index.json 之类的聚合文件不是语言文件
INDEX_PREFIX = "index"

KEY_SEP = "."


class KeyPathError(ValueError):
    """KeyPath 参数本身不合法（空串 / 空段），属于调用方错误。"""
    pass


def split_key_path(path: str) -> List[str]:
    if not isinstance(path, str) or not path:
        raise KeyPathError(f"KeyPath 不能为空：{path!r}")
    segs = path.split(KEY_SEP)
    if any(not s for s in segs):
        raise KeyPathError(f"KeyPath 含空段：{path!r}")
    return segs


def section_of(path: str) -> str:
    """KeyPath 的第一段（用于分组统计）。"""
    return path.split(KEY_SEP, 1)[0]


# =========================
# LocaleStore results
# =========================

class SetOutcome(str, Enum):
    APPLIED = "applied"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class SetResult:
    locale: str
    path: str
    outcome: SetOutcome
    # 结构冲突（标量 -> 容器）等告警，按发生顺序
    warnings: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def ok(self) -> bool:
        return self.outcome == SetOutcome.APPLIED


# =========================
# Completeness
# =========================

@dataclass(frozen=True)
class LocaleStats:
    total: int
    complete: int
    missing: int
    percentage: float
    missing_paths: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def percentage_text(self) -> str:
        return f"{self.percentage:.1f}%"


@dataclass(frozen=True)
class CompletenessSummary:
    total: int = 0
    complete: int = 0
    incomplete: int = 0
    total_missing: int = 0


@dataclass(frozen=True)
class CompletenessReport:
    """
    check 的结构化结果：
    - locales：每个非 base 语言的覆盖率
    - missing_by_section：locale -> {section: [paths]}
    - sections_analysis：section -> 所有语言累计缺失数（降序）
    """
    base_locale: str
    total_keys: int
    locales: Dict[str, LocaleStats] = field(default_factory=dict)
    missing_by_section: Dict[str, Dict[str, List[str]]] = field(default_factory=dict)
    summary: CompletenessSummary = field(default_factory=CompletenessSummary)
    sections_analysis: Dict[str, int] = field(default_factory=dict)
    suggestions: Tuple[str, ...] = field(default_factory=tuple)
    detailed: bool = False

    @property
    def is_complete(self) -> bool:
        return self.summary.total_missing == 0

    def top_sections(self, n: int = 5) -> List[Tuple[str, int]]:
        return list(self.sections_analysis.items())[:n]


@dataclass(frozen=True)
class DuplicateEntry:
    path: str
    value: Any
    locales: Tuple[str, ...]


# =========================
# Usage (t('key') 引用)
# =========================

@dataclass(frozen=True)
class KeyScan:
    all_keys: Tuple[str, ...] = field(default_factory=tuple)
    file_key_map: Dict[str, List[str]] = field(default_factory=dict)
    files_scanned: int = 0


@dataclass(frozen=True)
class SectionUsage:
    used: int = 0
    missing: int = 0


@dataclass(frozen=True)
class UsageReport:
    base_locale: str
    existing_key_count: int
    all_keys: Tuple[str, ...] = field(default_factory=tuple)
    found_keys: Tuple[str, ...] = field(default_factory=tuple)
    missing_keys: Tuple[str, ...] = field(default_factory=tuple)
    file_key_map: Dict[str, List[str]] = field(default_factory=dict)
    missing_by_file: Dict[str, List[str]] = field(default_factory=dict)
    section_stats: Dict[str, SectionUsage] = field(default_factory=dict)
    files_scanned: int = 0

    @property
    def ok(self) -> bool:
        return not self.missing_keys


# =========================
# Hardcoded strings
# =========================

class Severity(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


SEVERITY_ORDER: Tuple[Severity, ...] = (Severity.HIGH, Severity.MEDIUM, Severity.LOW)

SEVERITY_ICONS: Dict[Severity, str] = {
    Severity.HIGH: "🔴",
    Severity.MEDIUM: "🟡",
    Severity.LOW: "🟢",
}


@dataclass(frozen=True)
class Finding:
    file: str
    line: int
    column: int
    text: str
    context: str
    category: str
    severity: Severity
    full_match: str = ""


@dataclass(frozen=True)
class ScanOptions:
    """hardcode-check / missing-translations 的扫描参数。"""
    extensions: Tuple[str, ...] = (".vue", ".jsx")
    usage_extensions: Tuple[str, ...] = (".vue",)
    exclude_dirs: Tuple[str, ...] = ("node_modules", ".git", "dist", "build", ".nuxt", ".output")
    exclude_files: Tuple[str, ...] = field(default_factory=tuple)
    min_length: int = 2
    max_length: int = 200
    include_comments: bool = False
    verbose: bool = False


@dataclass(frozen=True)
class HardcodeReport:
    root: str
    extensions: Tuple[str, ...]
    findings: Tuple[Finding, ...] = field(default_factory=tuple)
    files_scanned: int = 0

    @property
    def ok(self) -> bool:
        return not self.findings

    def group_by_file(self) -> Dict[str, List[Finding]]:
        out: Dict[str, List[Finding]] = {}
        for f in self.findings:
            out.setdefault(f.file, []).append(f)
        return out

    def group_by_severity(self) -> Dict[Severity, List[Finding]]:
        out: Dict[Severity, List[Finding]] = {}
        for sev in SEVERITY_ORDER:
            items = [f for f in self.findings if f.severity == sev]
            if items:
                out[sev] = items
        return out

    def top_files(self, n: int = 5) -> List[Tuple[str, int]]:
        counts = {file: len(items) for file, items in self.group_by_file().items()}
        return sorted(counts.items(), key=lambda kv: kv[1], reverse=True)[:n]


from __future__ import annotations

import json
from typing import Any, Dict, List, Mapping, Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.theme import Theme

from .models import (
    SEVERITY_ICONS,
    CompletenessReport,
    DuplicateEntry,
    Finding,
    HardcodeReport,
    LocaleStats,
    SetOutcome,
    SetResult,
    UsageReport,
)

PREVIEW_KEYS = 5
PREVIEW_STATS = 10
VALUE_PREVIEW = 50


def make_console() -> Console:
    theme = Theme(
        {
            "meta": "dim",
            "error": "bold red",
            "warn": "yellow",
            "ok": "bold green",
            "title": "bold cyan",
        }
    )
    # 关闭 markup / highlight：文案里的 [..] 原样输出
    return Console(theme=theme, highlight=False, markup=False)


def _truncate(s: str, n: int = VALUE_PREVIEW) -> str:
    return s if len(s) <= n else s[:n] + "..."


def format_value(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, indent=2)


# =========================
# store
# =========================

def render_set_results(console: Console, results: Mapping[str, SetResult]) -> None:
    icons = {SetOutcome.APPLIED: "✅", SetOutcome.SKIPPED: "ℹ️", SetOutcome.FAILED: "❌"}
    for name, r in results.items():
        console.print(f"{icons[r.outcome]} {name}: {r.path} ({r.outcome.value})")


def render_locales(console: Console, locales_dir: str, locales: List[str]) -> None:
    console.print(f"Available locales (scanned from {locales_dir}):")
    if not locales:
        console.print("  No locale files found", style="warn")
        return
    for loc in locales:
        console.print(f"  - {loc}")
    console.print(f"\nTotal: {len(locales)} locales found")


def render_stats(console: Console, stats: Dict[str, LocaleStats], verbose: bool = False) -> None:
    table = Table(title="Translation Statistics", title_style="title")
    table.add_column("locale")
    table.add_column("complete", justify="right")
    table.add_column("missing", justify="right")
    table.add_column("coverage", justify="right")
    for loc, st in stats.items():
        table.add_row(loc, f"{st.complete}/{st.total}", str(st.missing), st.percentage_text)
    console.print(table)

    if not verbose:
        return
    for loc, st in stats.items():
        if not st.missing:
            continue
        console.print(f"\n{loc} missing paths:", style="title")
        for p in st.missing_paths[:PREVIEW_STATS]:
            console.print(f"    - {p}")
        if st.missing > PREVIEW_STATS:
            console.print(f"    ... and {st.missing - PREVIEW_STATS} more", style="meta")


# =========================
# check / duplicates
# =========================

def render_check(console: Console, report: CompletenessReport) -> None:
    console.print(f"📋 Found {report.total_keys} keys in {report.base_locale}\n")

    for loc, st in report.locales.items():
        if not st.missing:
            console.print(f"✅ {loc}: Complete ({st.percentage_text})")
            continue
        console.print(f"🔴 {loc}: Missing {st.missing} keys ({st.percentage_text})")
        if not report.detailed:
            continue
        for sec, keys in report.missing_by_section.get(loc, {}).items():
            console.print(f"   📂 {sec}: {len(keys)} missing")
            for k in keys[:PREVIEW_KEYS]:
                console.print(f"      - {k}")
            if len(keys) > PREVIEW_KEYS:
                console.print(f"      ... and {len(keys) - PREVIEW_KEYS} more", style="meta")
        console.print("")

    s = report.summary
    console.print(Panel(
        f"Total locales checked: {s.total}\n"
        f"Complete locales: {s.complete}\n"
        f"Incomplete locales: {s.incomplete}\n"
        f"Total missing keys: {s.total_missing}",
        title="📊 Summary",
        expand=False,
    ))

    if report.is_complete:
        console.print("🎉 All translations are complete!", style="ok")
        return

    console.print("\n🔧 Most commonly missing sections:")
    for sec, n in report.top_sections():
        console.print(f"   {sec}: {n} missing across locales")

    if report.suggestions:
        console.print("\n💡 Suggestions:")
        for s_ in report.suggestions:
            console.print(f"   🎯 {s_}")

    console.print("\n📝 Next steps:")
    console.print("   1. locale_box set <locale> <path> <value>")
    console.print("   2. locale_box merge <locale> <file.json> 批量写入")
    console.print("   3. 重新运行 locale_box check")


def render_duplicates(console: Console, items: List[DuplicateEntry]) -> None:
    if not items:
        console.print("✅ No duplicate translations found.", style="ok")
        return
    console.print("⚠️ Potential duplicate translations found:", style="warn")
    for it in items:
        console.print(f"   {it.path}:")
        console.print(f"     Value: \"{_truncate(str(it.value))}\"")
        console.print(f"     Locales: {', '.join(it.locales)}\n")


# =========================
# missing-translations
# =========================

def render_usage(console: Console, report: UsageReport) -> None:
    base = report.base_locale
    console.print(f"📄 Scanned {report.files_scanned} files, 🔑 {len(report.all_keys)} unique keys")
    console.print(f"📚 Found {report.existing_key_count} keys in {base}\n")

    console.print(f"✅ Keys found in {base}: {len(report.found_keys)}")
    console.print(f"❌ Keys missing in {base}: {len(report.missing_keys)}")
    console.print(f"📝 Total keys used in project: {len(report.all_keys)}")

    if report.missing_keys:
        console.print("\n🔴 MISSING TRANSLATION KEYS:", style="error")
        for file, keys in report.missing_by_file.items():
            console.print(f"\n📄 {file}:")
            for k in keys:
                console.print(f"   ❌ {k}")

        console.print("\n📋 ALL MISSING KEYS (for easy copy-paste):")
        for k in report.missing_keys:
            console.print(f"\"{k}\": \"\",")
    else:
        console.print("\n🎉 All translation keys are properly defined!", style="ok")

    table = Table(title="📈 Keys by section", title_style="title")
    table.add_column("section")
    table.add_column("keys", justify="right")
    table.add_column("status")
    for sec, st in report.section_stats.items():
        table.add_row(sec, str(st.used), f"({st.missing} missing)" if st.missing else "✅")
    console.print(table)


# =========================
# hardcode-check
# =========================

def render_hardcode(console: Console, report: HardcodeReport, verbose: bool = False) -> None:
    console.print(f"📁 Directory: {report.root}", style="meta")
    console.print(f"📄 Extensions: {', '.join(report.extensions)}", style="meta")

    if report.ok:
        console.print("✅ No hardcoded strings found!", style="ok")
        return

    grouped = report.group_by_severity()
    console.print(f"\n📊 Found {len(report.findings)} potential hardcoded strings:\n")
    for sev, items in grouped.items():
        console.print(f"{SEVERITY_ICONS[sev]} {sev.value.upper()} priority ({len(items)} items):")
        by_file: Dict[str, List[Finding]] = {}
        for f in items:
            by_file.setdefault(f.file, []).append(f)
        for file, file_items in by_file.items():
            console.print(f"  📄 {file}")
            for f in file_items:
                console.print(f"     {f.line}:{f.column}  \"{f.text}\" ({f.category})")
                if verbose and f.context:
                    console.print(f"       Context: {f.context}", style="meta")
        console.print("")

    table = Table(title="📊 Summary", title_style="title")
    table.add_column("severity")
    table.add_column("items", justify="right")
    for sev, items in grouped.items():
        table.add_row(f"{SEVERITY_ICONS[sev]} {sev.value}", str(len(items)))
    console.print(table)

    top = report.top_files()
    if top:
        console.print("\n📁 Top files with hardcoded strings:")
        for file, n in top:
            console.print(f"   • {file}: {n} strings")

    console.print("\n💡 Suggestions:")
    console.print("   1. 先处理 high 优先级条目")
    console.print("   2. Vue 模板使用 $t() 或 {{ $t() }}")
    console.print("   3. script 中使用 t()")
    console.print("   4. 把文案补到语言文件里")


def render_value(console: Console, value: Optional[Any]) -> None:
    console.print(format_value(value) if value is not None else "Not found")

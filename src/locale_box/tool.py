from __future__ import annotations

import argparse
import json
import sys
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, List, Optional

from rich.console import Console

from . import __version__
from .completeness import CompletenessAnalyzer
from .config import CONFIG_FILE, ConfigError, LocaleBoxConfig, generate_commented_yaml_template, load_config
from .fs import dump_json_text, normalize_extensions
from .hardcode import HardcodedStringScanner
from .models import KeyPathError, SetOutcome
from .report import (
    make_console,
    render_check,
    render_duplicates,
    render_hardcode,
    render_locales,
    render_set_results,
    render_stats,
    render_usage,
    render_value,
)
from .store import LocaleStore
from .usage import UsageKeyExtractor

BOX_TOOL = {
    "id": "web.locale_box",
    "name": "locale_box",
    "category": "web",
    "summary": "前端 i18n 语言文件管理：按 KeyPath 读写 / 完整性检查 / 重复检查 / t('key') 缺失检查 / 硬编码文案扫描",
    "usage": [
        "locale_box init",
        "locale_box get zh-hans page.title",
        "locale_box set zh-hans page.title \"页面标题\"",
        "locale_box check --detailed",
        "locale_box hardcode-check src --ext vue,tsx",
    ],
    "options": [
        {"flag": "--dir", "desc": "locales 目录（默认 i18n/locales，或配置 localesDir）"},
        {"flag": "--config", "desc": f"配置文件路径（默认 ./{CONFIG_FILE}，不存在则用默认值）"},
        {"flag": "--base", "desc": "对比基准语言（默认自动探测 en / en-US ...）"},
        {"flag": "--verbose, -v", "desc": "输出更详细的报告"},
        {"flag": "--skip-if-exists", "desc": "set/set-multiple/merge 时 key 已存在则跳过"},
        {"flag": "--ext, --extensions", "desc": "hardcode-check 扫描的扩展名（逗号分隔）"},
        {"flag": "--no-exitcode-3", "desc": "发现缺失/硬编码时仍返回 0（默认返回 3，便于 CI 拦截）"},
    ],
    "examples": [
        {"cmd": "locale_box set-multiple nav.contact en-US='Contact Us' zh-hans='联系我们'", "desc": "一次写多个语言"},
        {"cmd": "locale_box copy en-US nav.about --targets zh-hans,ja", "desc": "把 en-US 的值复制到其他语言"},
        {"cmd": "locale_box missing-translations src", "desc": "检查代码里 t('key') 用到但 base 语言没有的 key"},
    ],
    "dependencies": [
        "PyYAML>=6.0",
        "rich>=13.0.0",
    ],
    "docs": "README.md",
}

EXIT_OK = 0
EXIT_FAIL = 1
EXIT_BAD = 2
EXIT_ISSUES_FOUND = 3

INITIAL_LOCALE = "en-US"
INITIAL_CONTENT: Dict[str, Any] = {
    "common": {
        "loading": "Loading...",
        "error": "An error occurred",
        "success": "Success!",
    },
    "navigation": {
        "home": "Home",
        "about": "About",
        "contact": "Contact",
    },
}


@dataclass
class Context:
    cfg: LocaleBoxConfig
    store: LocaleStore
    console: Console
    verbose: bool = False


# =========================
# Helpers
# =========================

def parse_value(raw: str) -> Any:
    """命令行 value：能按 JSON 解析就用 JSON（数字 / 布尔 / 对象），否则原样字符串。"""
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


def _split_csv(s: Optional[str]) -> List[str]:
    if not s:
        return []
    return [x.strip() for x in s.split(",") if x.strip()]


def _issues_exit(found: bool, args: argparse.Namespace) -> int:
    if found and not getattr(args, "no_exitcode_3", False):
        return EXIT_ISSUES_FOUND
    return EXIT_OK


def _resolve_base(ctx: Context, args: argparse.Namespace) -> Optional[str]:
    analyzer = CompletenessAnalyzer(ctx.store)
    base = analyzer.resolve_base(args.base or ctx.cfg.base_locale)
    if base is None:
        print("❌ No base locale found")
    return base


# =========================
# Commands
# =========================

def cmd_init(ctx: Context, _args: argparse.Namespace) -> int:
    d = ctx.store.locales_dir
    if not d.exists():
        d.mkdir(parents=True, exist_ok=True)
        print(f"➕ Created locales directory: {d}")

    p = ctx.store.path_for(INITIAL_LOCALE)
    if not ctx.store.list_locales():
        p.write_text(dump_json_text(INITIAL_CONTENT), encoding="utf-8")
        print(f"➕ Created {p.name}")

    cfg_path = ctx.cfg.root_dir / CONFIG_FILE
    if not cfg_path.exists():
        cfg_path.write_text(generate_commented_yaml_template(ctx.cfg), encoding="utf-8")
        print(f"➕ Created {cfg_path.name}")

    print(f"✅ 初始化完成：{d}")
    return EXIT_OK


def cmd_locales(ctx: Context, _args: argparse.Namespace) -> int:
    render_locales(ctx.console, str(ctx.store.locales_dir), ctx.store.list_locales())
    return EXIT_OK


def cmd_get(ctx: Context, args: argparse.Namespace) -> int:
    value = ctx.store.get(args.locale, args.path)
    render_value(ctx.console, value)
    return EXIT_OK if value is not None else EXIT_FAIL


def cmd_set(ctx: Context, args: argparse.Namespace) -> int:
    skip = args.skip_if_exists or ctx.cfg.options.skip_if_exists
    r = ctx.store.set(args.locale, args.path, parse_value(args.value), skip_if_exists=skip)
    render_set_results(ctx.console, {args.locale: r})
    return EXIT_FAIL if r.outcome == SetOutcome.FAILED else EXIT_OK


def cmd_set_multiple(ctx: Context, args: argparse.Namespace) -> int:
    translations: Dict[str, Any] = {}
    for pair in args.pairs:
        if "=" not in pair:
            print(f"❌ 参数格式应为 locale=value：{pair!r}")
            return EXIT_BAD
        loc, raw = pair.split("=", 1)
        translations[loc.strip()] = parse_value(raw)

    skip = args.skip_if_exists or ctx.cfg.options.skip_if_exists
    results = ctx.store.set_multiple(args.path, translations, skip_if_exists=skip)
    render_set_results(ctx.console, results)
    return EXIT_FAIL if any(r.outcome == SetOutcome.FAILED for r in results.values()) else EXIT_OK


def cmd_get_all(ctx: Context, args: argparse.Namespace) -> int:
    render_value(ctx.console, ctx.store.get_all(args.path))
    return EXIT_OK


def cmd_has(ctx: Context, args: argparse.Namespace) -> int:
    print("true" if ctx.store.has(args.locale, args.path) else "false")
    return EXIT_OK


def cmd_missing(ctx: Context, args: argparse.Namespace) -> int:
    missing = ctx.store.get_missing(args.path)
    if missing:
        print(f"Missing in: {', '.join(missing)}")
    else:
        print("All locales have this translation")
    return EXIT_OK


def cmd_copy(ctx: Context, args: argparse.Namespace) -> int:
    targets = _split_csv(args.targets) or None
    results = ctx.store.copy(args.source, args.path, targets)
    if results is None:
        return EXIT_FAIL
    render_set_results(ctx.console, results)
    return EXIT_FAIL if any(r.outcome == SetOutcome.FAILED for r in results.values()) else EXIT_OK


def cmd_merge(ctx: Context, args: argparse.Namespace) -> int:
    src = Path(args.file)
    try:
        translations = json.loads(src.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        print(f"❌ 读取 {src} 失败：{e}")
        return EXIT_BAD
    if not isinstance(translations, dict):
        print(f"❌ {src} 顶层必须是 {{\"key.path\": value}} 形式的 object")
        return EXIT_BAD

    skip = args.skip_if_exists or ctx.cfg.options.skip_if_exists
    results = ctx.store.merge(args.locale, translations, skip_if_exists=skip)
    render_set_results(ctx.console, results)
    return EXIT_FAIL if any(r.outcome == SetOutcome.FAILED for r in results.values()) else EXIT_OK


def cmd_stats(ctx: Context, args: argparse.Namespace) -> int:
    base = _resolve_base(ctx, args)
    if base is None:
        return EXIT_FAIL
    stats = CompletenessAnalyzer(ctx.store).stats(base)
    if stats is None:
        return EXIT_FAIL
    render_stats(ctx.console, stats, verbose=ctx.verbose)
    return EXIT_OK


def cmd_check(ctx: Context, args: argparse.Namespace) -> int:
    base = _resolve_base(ctx, args)
    if base is None:
        return EXIT_FAIL
    print("🔍 Checking translation completeness...\n")
    analyzer = CompletenessAnalyzer(ctx.store, priority_sections=ctx.cfg.priority_sections)
    report = analyzer.check_completeness(base, detailed=args.detailed)
    if report is None:
        return EXIT_FAIL
    render_check(ctx.console, report)
    return _issues_exit(not report.is_complete, args)


def cmd_duplicates(ctx: Context, args: argparse.Namespace) -> int:
    base = _resolve_base(ctx, args)
    if base is None:
        return EXIT_FAIL
    print("🔍 Checking for duplicate translations...\n")
    items = CompletenessAnalyzer(ctx.store).find_duplicates(base)
    if items is None:
        return EXIT_FAIL
    render_duplicates(ctx.console, items)
    return EXIT_OK


def cmd_missing_translations(ctx: Context, args: argparse.Namespace) -> int:
    base = _resolve_base(ctx, args)
    if base is None:
        return EXIT_FAIL
    root = Path(args.project_dir) if args.project_dir else ctx.cfg.root_dir
    scan = ctx.cfg.scan
    exts = normalize_extensions(_split_csv(args.ext)) or scan.usage_extensions
    print("🚀 Starting missing translation check...\n")
    extractor = UsageKeyExtractor(
        ctx.store,
        extensions=exts,
        exclude_dirs=scan.exclude_dirs,
        verbose=ctx.verbose,
    )
    report = extractor.cross_check(root, base)
    if report is None:
        return EXIT_FAIL
    render_usage(ctx.console, report)
    return _issues_exit(not report.ok, args)


def cmd_hardcode_check(ctx: Context, args: argparse.Namespace) -> int:
    root = Path(args.project_dir) if args.project_dir else ctx.cfg.root_dir
    scan = ctx.cfg.scan
    exts = normalize_extensions(_split_csv(args.ext)) or scan.extensions
    opts = replace(
        scan,
        extensions=exts,
        include_comments=args.include_comments or scan.include_comments,
        verbose=ctx.verbose,
    )
    print("🔍 Scanning for hardcoded strings...")
    report = HardcodedStringScanner(opts).scan(root)
    render_hardcode(ctx.console, report, verbose=ctx.verbose)
    return _issues_exit(not report.ok, args)


# =========================
# Parser
# =========================

def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--dir", default=None, help="locales 目录（默认 i18n/locales）")
    common.add_argument("--config", default=None, help=f"配置文件（默认 ./{CONFIG_FILE}）")
    common.add_argument("--base", default=None, help="对比基准语言（默认自动探测）")
    common.add_argument("-v", "--verbose", action="store_true", help="输出更详细的报告")

    gate = argparse.ArgumentParser(add_help=False)
    gate.add_argument("--no-exitcode-3", action="store_true", help="发现问题时仍返回 0（默认返回 3）")

    skip = argparse.ArgumentParser(add_help=False)
    skip.add_argument("--skip-if-exists", action="store_true", help="key 已存在则跳过")

    p = argparse.ArgumentParser(
        prog="locale_box",
        description=BOX_TOOL["summary"],
    )
    p.add_argument("--version", action="version", version=__version__)
    sub = p.add_subparsers(dest="command", required=True)

    sp = sub.add_parser("init", parents=[common], help="初始化 locales 目录、en-US.json 与配置文件")
    sp.set_defaults(handler=cmd_init)

    sp = sub.add_parser("locales", parents=[common], help="列出 locales 目录下的语言")
    sp.set_defaults(handler=cmd_locales)

    sp = sub.add_parser("get", parents=[common], help="读取某语言某 KeyPath 的值")
    sp.add_argument("locale")
    sp.add_argument("path")
    sp.set_defaults(handler=cmd_get)

    sp = sub.add_parser("set", parents=[common, skip], help="写入某语言某 KeyPath 的值")
    sp.add_argument("locale")
    sp.add_argument("path")
    sp.add_argument("value")
    sp.set_defaults(handler=cmd_set)

    sp = sub.add_parser("set-multiple", parents=[common, skip], help="一次为多个语言写同一 KeyPath")
    sp.add_argument("path")
    sp.add_argument("pairs", nargs="+", metavar="locale=value")
    sp.set_defaults(handler=cmd_set_multiple)

    sp = sub.add_parser("get-all", aliases=["getAll"], parents=[common], help="读取所有语言某 KeyPath 的值")
    sp.add_argument("path")
    sp.set_defaults(handler=cmd_get_all)

    sp = sub.add_parser("has", parents=[common], help="判断 KeyPath 是否存在（输出 true/false）")
    sp.add_argument("locale")
    sp.add_argument("path")
    sp.set_defaults(handler=cmd_has)

    sp = sub.add_parser("missing", parents=[common], help="列出缺少某 KeyPath 的语言")
    sp.add_argument("path")
    sp.set_defaults(handler=cmd_missing)

    sp = sub.add_parser("copy", parents=[common], help="把源语言的值复制到其他语言")
    sp.add_argument("source")
    sp.add_argument("path")
    sp.add_argument("--targets", default=None, help="目标语言（逗号分隔，默认除源语言外全部）")
    sp.set_defaults(handler=cmd_copy)

    sp = sub.add_parser("merge", parents=[common, skip], help="把 {\"key.path\": value} JSON 文件合并进某语言")
    sp.add_argument("locale")
    sp.add_argument("file")
    sp.set_defaults(handler=cmd_merge)

    sp = sub.add_parser("stats", parents=[common], help="各语言覆盖率统计")
    sp.set_defaults(handler=cmd_stats)

    sp = sub.add_parser("check", parents=[common, gate], help="完整性检查（缺失 key 按 section 汇总）")
    sp.add_argument("-d", "--detailed", action="store_true", help="展开每个语言缺失的 key")
    sp.set_defaults(handler=cmd_check)

    sp = sub.add_parser("duplicates", parents=[common], help="查找多个语言值完全相同的 KeyPath")
    sp.set_defaults(handler=cmd_duplicates)

    sp = sub.add_parser("missing-translations", parents=[common, gate], help="代码里 t('key') 用到但 base 语言缺失的 key")
    sp.add_argument("project_dir", nargs="?", default=None)
    sp.add_argument("--ext", "--extensions", dest="ext", default=None, help="扫描的扩展名（逗号分隔）")
    sp.set_defaults(handler=cmd_missing_translations)

    sp = sub.add_parser("hardcode-check", parents=[common, gate], help="扫描硬编码的用户可见文案")
    sp.add_argument("project_dir", nargs="?", default=None)
    sp.add_argument("--ext", "--extensions", dest="ext", default=None, help="扫描的扩展名（逗号分隔，默认 .vue,.jsx）")
    sp.add_argument("--include-comments", action="store_true", help="注释行也扫描")
    sp.set_defaults(handler=cmd_hardcode_check)

    return p


def main(argv: Optional[List[str]] = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    parser = build_parser()
    args = parser.parse_args(argv)

    root = Path.cwd()
    try:
        cfg = load_config(root, Path(args.config) if args.config else None)
    except ConfigError as e:
        print(f"❌ {e}")
        return EXIT_BAD

    if args.dir:
        cfg = replace(cfg, locales_dir=(root / args.dir).resolve())

    ctx = Context(
        cfg=cfg,
        store=LocaleStore(cfg.locales_dir),
        console=make_console(),
        verbose=args.verbose or cfg.options.verbose,
    )

    try:
        return int(args.handler(ctx, args))
    except KeyPathError as e:
        print(f"❌ {e}")
        return EXIT_BAD


if __name__ == "__main__":
    raise SystemExit(main())

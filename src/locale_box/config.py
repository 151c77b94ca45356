from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from .fs import DEFAULT_EXCLUDE_DIRS, LOCALES_DIR, normalize_extensions
from .models import ScanOptions

CONFIG_FILE = "locale_box.yaml"


# =========================
# Errors
# =========================

class ConfigError(RuntimeError):
    """配置错误（附带修复建议）。"""
    pass


# =========================
# Models
# =========================

@dataclass(frozen=True)
class Options:
    skip_if_exists: bool = False
    verbose: bool = False


@dataclass(frozen=True)
class LocaleBoxConfig:
    """Normalized config loaded from locale_box.yaml."""
    root_dir: Path
    locales_dir: Path
    base_locale: Optional[str] = None
    priority_sections: Tuple[str, ...] = field(default_factory=tuple)
    scan: ScanOptions = field(default_factory=ScanOptions)
    options: Options = field(default_factory=Options)


# =========================
# Helpers
# =========================

def _as_str(x: object, default: str = "") -> str:
    if x is None:
        return default
    s = str(x).strip()
    return s if s else default


def _as_bool(raw: Dict[str, Any], key: str, default: bool) -> bool:
    v = raw.get(key, default)
    if v is None:
        return default
    if not isinstance(v, bool):
        raise ConfigError(f"{key} 必须是 true/false，实际是：{v!r}")
    return v


def _as_int(raw: Dict[str, Any], key: str, default: int) -> int:
    v = raw.get(key, default)
    if v is None:
        return default
    if isinstance(v, bool) or not isinstance(v, int) or v < 0:
        raise ConfigError(f"{key} 必须是非负整数，实际是：{v!r}")
    return v


def _as_str_list(raw: Dict[str, Any], key: str, default: Tuple[str, ...]) -> Tuple[str, ...]:
    v = raw.get(key)
    if v is None:
        return default
    if isinstance(v, str):
        v = [x for x in v.split(",")]
    if not isinstance(v, list):
        raise ConfigError(f"{key} 必须是数组 list")
    return tuple(_as_str(x) for x in v if _as_str(x))


def _as_mapping(raw: Dict[str, Any], key: str) -> Dict[str, Any]:
    v = raw.get(key) or {}
    if not isinstance(v, dict):
        raise ConfigError(f"{key} 必须是 object")
    return v


# =========================
# YAML load / parse
# =========================

def default_config_path(root_dir: Path) -> Path:
    return root_dir / CONFIG_FILE


def load_config_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise ConfigError(f"配置文件不存在：{path}")
    try:
        obj = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigError(
            f"配置文件无法解析为 YAML：{path}\n"
            f"原因：{e}\n"
            f"解决方法：修复 YAML 格式或运行 `locale_box init` 重新生成。"
        ) from None
    if obj is None:
        return {}
    if not isinstance(obj, dict):
        raise ConfigError("配置文件格式错误：顶层必须是 mapping/object")
    return obj


def parse_config_dict(*, root_dir: Path, raw: Dict[str, Any]) -> LocaleBoxConfig:
    """将 YAML dict 解析为强类型配置（只做字段校验，不扫描目录）。"""
    root_dir = root_dir.resolve()
    locales_dir = _as_str(raw.get("localesDir"), LOCALES_DIR.as_posix())
    base_locale = _as_str(raw.get("baseLocale")) or None
    priority = _as_str_list(raw, "prioritySections", ())

    scan_raw = _as_mapping(raw, "scan")
    defaults = ScanOptions()
    min_len = _as_int(scan_raw, "minLength", defaults.min_length)
    max_len = _as_int(scan_raw, "maxLength", defaults.max_length)
    if min_len > max_len:
        raise ConfigError(f"scan.minLength({min_len}) 不能大于 scan.maxLength({max_len})")

    opt_raw = _as_mapping(raw, "options")
    options = Options(
        skip_if_exists=_as_bool(opt_raw, "skipIfExists", False),
        verbose=_as_bool(opt_raw, "verbose", False),
    )

    scan = ScanOptions(
        extensions=normalize_extensions(_as_str_list(scan_raw, "extensions", defaults.extensions)),
        usage_extensions=normalize_extensions(_as_str_list(scan_raw, "usageExtensions", defaults.usage_extensions)),
        exclude_dirs=_as_str_list(scan_raw, "excludeDirs", DEFAULT_EXCLUDE_DIRS),
        exclude_files=_as_str_list(scan_raw, "excludeFiles", ()),
        min_length=min_len,
        max_length=max_len,
        include_comments=_as_bool(scan_raw, "includeComments", False),
        verbose=options.verbose,
    )

    return LocaleBoxConfig(
        root_dir=root_dir,
        locales_dir=(root_dir / locales_dir).resolve(),
        base_locale=base_locale,
        priority_sections=priority,
        scan=scan,
        options=options,
    )


def load_config(root_dir: Path, cfg_path: Optional[Path] = None) -> LocaleBoxConfig:
    """
    配置文件可选：
    - 显式传入 cfg_path：必须存在
    - 未传入：存在 locale_box.yaml 就读取，否则全部用默认值
    """
    root_dir = root_dir.resolve()
    if cfg_path is not None:
        raw = load_config_yaml(cfg_path)
    else:
        p = default_config_path(root_dir)
        raw = load_config_yaml(p) if p.exists() else {}
    try:
        return parse_config_dict(root_dir=root_dir, raw=raw)
    except ConfigError as e:
        raise ConfigError(
            f"配置文件校验失败：{cfg_path or default_config_path(root_dir)}\n"
            f"原因：{e}\n"
            f"解决方法：修复配置字段/类型，或运行 `locale_box init` 重新生成。"
        ) from None


# =========================
# init: commented YAML template
# =========================

def _yaml_list(items: Tuple[str, ...]) -> str:
    return "[" + ", ".join(items) + "]"


def generate_commented_yaml_template(cfg: LocaleBoxConfig) -> str:
    """手写 YAML 文本（而不是 yaml.dump），保证注释可读。"""
    try:
        locales_dir = cfg.locales_dir.relative_to(cfg.root_dir).as_posix()
    except ValueError:
        locales_dir = cfg.locales_dir.as_posix()
    s = cfg.scan
    lines: List[str] = [
        "# locale_box.yaml",
        "# ---------------------------------------------",
        "# 多语言文件管理 / 完整性检查 / 硬编码文案扫描",
        "# ---------------------------------------------",
        "",
        "# 语言文件目录：每个语言一个 {locale}.json（{locale}.js 只读）",
        f"localesDir: {locales_dir}",
        "",
        "# 对比基准语言；留空则按 en / en-US / en-GB / en_US / en_GB 自动探测",
        f"baseLocale: \"{cfg.base_locale or ''}\"",
        "",
        "# check 时优先给出建议的 section（留空 = 缺失最多的前 5 个）",
        f"prioritySections: {_yaml_list(cfg.priority_sections)}",
        "",
        "scan:",
        "  # hardcode-check 扫描的扩展名",
        f"  extensions: {_yaml_list(s.extensions)}",
        "  # missing-translations 扫描 t('key') 的扩展名",
        f"  usageExtensions: {_yaml_list(s.usage_extensions)}",
        "  # 跳过的目录名（依赖 / 构建产物）",
        f"  excludeDirs: {_yaml_list(s.exclude_dirs)}",
        f"  excludeFiles: {_yaml_list(s.exclude_files)}",
        f"  minLength: {s.min_length}",
        f"  maxLength: {s.max_length}",
        "  # 是否扫描注释行",
        f"  includeComments: {str(s.include_comments).lower()}",
        "",
        "options:",
        "  # set 时 key 已存在则跳过",
        f"  skipIfExists: {str(cfg.options.skip_if_exists).lower()}",
        "  # 输出更详细的报告（不影响扫描结果）",
        f"  verbose: {str(cfg.options.verbose).lower()}",
    ]
    return "\n".join(lines) + "\n"

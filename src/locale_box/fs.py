from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

LOCALES_DIR = Path("i18n") / "locales"

DEFAULT_EXCLUDE_DIRS: Tuple[str, ...] = ("node_modules", ".git", "dist", "build", ".nuxt", ".output")

# 回退格式：locale.js 里导出的对象字面量（只认 JSON 兼容写法）
_CJS_EXPORT_RE = re.compile(r"module\.exports\s*=\s*(\{[\s\S]*\});?\s*$", re.M)
_ESM_EXPORT_RE = re.compile(r"export\s+default\s+(\{[\s\S]*\});?\s*$", re.M)


def load_json_obj(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    try:
        obj = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValueError(f"JSON 解析失败：{path.name} ({e})") from None
    if not isinstance(obj, dict):
        raise ValueError(f"JSON 顶层必须是 object：{path.name}")
    return obj


def dump_json_text(obj: Dict[str, Any]) -> str:
    """固定缩进、保持 key 顺序、不转义非 ASCII。"""
    return json.dumps(obj, ensure_ascii=False, indent=2) + "\n"


def save_json(path: Path, obj: Dict[str, Any]) -> None:
    path.write_text(dump_json_text(obj), encoding="utf-8")


def extract_js_export(text: str) -> Optional[Dict[str, Any]]:
    """
    从 locale.js 中尽力提取导出的对象：
    - module.exports = {...}
    - export default {...}
    只接受 JSON 兼容的对象字面量；任何不确定的情况都返回 None，不做表达式求值。
    """
    if "module.exports" in text:
        m = _CJS_EXPORT_RE.search(text)
    elif "export default" in text:
        m = _ESM_EXPORT_RE.search(text)
    else:
        return None
    if not m:
        return None
    try:
        obj = json.loads(m.group(1))
    except json.JSONDecodeError:
        return None
    return obj if isinstance(obj, dict) else None


def normalize_extensions(exts: Iterable[str]) -> Tuple[str, ...]:
    """'vue, .tsx' -> ('.vue', '.tsx')，去重保序。"""
    out: List[str] = []
    for e in exts:
        e = str(e).strip()
        if not e:
            continue
        if not e.startswith("."):
            e = "." + e
        if e not in out:
            out.append(e)
    return tuple(out)


def collect_files(
        root: Path,
        *,
        extensions: Iterable[str],
        exclude_dirs: Iterable[str] = DEFAULT_EXCLUDE_DIRS,
        exclude_files: Iterable[str] = (),
        verbose: bool = False,
) -> List[Path]:
    """
    深度优先递归收集文件（按名字排序，结果稳定）。
    - 目录名命中 exclude_dirs 直接跳过整棵子树
    - 无法读取的目录：verbose 时提示，跳过继续
    """
    exts = set(normalize_extensions(extensions))
    skip_dirs = set(exclude_dirs)
    skip_files = set(exclude_files)
    out: List[Path] = []

    def _walk(d: Path) -> None:
        try:
            children = sorted(d.iterdir(), key=lambda p: p.name)
        except OSError as e:
            if verbose:
                print(f"⚠️ 无法扫描目录 {d}：{e}")
            return
        for p in children:
            if p.is_dir():
                if p.name in skip_dirs:
                    continue
                _walk(p)
            elif p.is_file() and p.suffix in exts and p.name not in skip_files:
                out.append(p)

    _walk(root)
    return out


def read_text_or_none(path: Path, *, verbose: bool = False) -> Optional[str]:
    """源码文件按 utf-8 宽松解码：个别非法字节替换为 U+FFFD，整个文件照常扫描。"""
    try:
        return path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        if verbose:
            print(f"⚠️ 无法读取文件 {path}：{e}")
        return None


def relpath(path: Path, root: Path) -> str:
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return path.as_posix()

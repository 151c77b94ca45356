from __future__ import annotations

import re
from pathlib import Path
from typing import List, Optional

from .fs import collect_files, normalize_extensions, read_text_or_none, relpath
from .models import Finding, HardcodeReport, ScanOptions, Severity

# =========================
# 规则表（改动任何一条都会改变扫描结果）
# =========================

# 模板类文件：只看标签之间的文本，不看属性值
MARKUP_SUFFIXES = (".vue", ".jsx", ".tsx", ".html", ".svelte")

# 已经走 i18n 的行直接跳过
I18N_LINE_PATTERNS = (
    re.compile(r"\$t\s*\("),
    re.compile(r"\{\{\s*\$t\s*\("),
    re.compile(r"useI18n\s*\("),
    re.compile(r"\.t\s*\("),
    re.compile(r"i18n\."),
    re.compile(r"\$i18n\."),
    re.compile(r"t\s*\("),
)

COMMENT_PREFIXES = ("//", "/*", "*", "<!--")

TAG_CONTENT_RE = re.compile(r">([^<]+)<")

STRING_PATTERNS = (
    re.compile(r'"([^"\\]*(?:\\.[^"\\]*)*)"'),
    re.compile(r"'([^'\\]*(?:\\.[^'\\]*)*)'"),
    re.compile(r"`([^`\\]*(?:\\.[^`\\]*)*)`"),
)

ATTRIBUTE_PATTERNS = (
    re.compile(r"\s(class|className|id|style|src|href|alt|title|data-[\w-]+|v-[\w-]+|:[\w-]+|@[\w-]+)\s*=\s*[\"']?$"),
    re.compile(r"\s(to|from|name|type|value|placeholder|aria-[\w-]+)\s*=\s*[\"']?$"),
)

_URL_RE = re.compile(r"^https?://")
_PATH_START_RE = re.compile(r"^[./\\]")
_CONSTANT_RE = re.compile(r"^[A-Z_]+$")
_SHORT_CAMEL_RE = re.compile(r"^[a-z][a-zA-Z]*$")
_NUMBER_UNIT_RE = re.compile(r"^\d+(\.\d+)?(%|px|em|rem|vh|vw|ms|s)?$")
_HEX_COLOR_RE = re.compile(r"^#[0-9a-fA-F]{3,8}$")
_EVENT_RE = re.compile(r"^(click|change|input|submit|load|error|resize|scroll)$")
_HTTP_METHOD_RE = re.compile(r"^(GET|POST|PUT|DELETE|PATCH|HEAD|OPTIONS)$")

TECHNICAL_TERMS = frozenset({
    "utf8", "utf-8", "json", "xml", "html", "css", "js", "ts",
    "vue", "nuxt", "node", "npm", "yarn", "webpack", "vite",
    "localhost", "true", "false", "null", "undefined",
    "image", "video", "audio", "text", "application",
    "jpeg", "jpg", "png", "gif", "webp", "svg", "avif",
    "error", "warning", "info", "debug", "log",
})

_CJK_RANGES = "\\u4e00-\\u9fff\\u3040-\\u309f\\u30a0-\\u30ff\\uac00-\\ud7af"
_LETTER_RE = re.compile(r"[a-zA-Z" + _CJK_RANGES + r"]")
_CJK_RE = re.compile(r"[" + _CJK_RANGES + r"]")

UI_WORDS = (
    "upload", "download", "submit", "cancel", "save", "delete", "edit", "create",
    "login", "logout", "register", "search", "filter", "sort", "refresh",
    "next", "previous", "back", "forward", "home", "settings", "profile",
    "help", "about", "contact", "privacy", "terms", "faq",
    "loading", "success", "failed", "complete", "processing",
    "welcome", "hello", "goodbye", "thanks", "please", "sorry",
)

TEMPLATE_CONTENT = "template-content"


# =========================
# 单条规则
# =========================

def is_i18n_line(line: str) -> bool:
    return any(p.search(line) for p in I18N_LINE_PATTERNS)


def is_comment_line(line: str) -> bool:
    return line.strip().startswith(COMMENT_PREFIXES)


def is_inside_code_or_pre(line: str, position: int) -> bool:
    """
    只在当前行内判断：position 之前最近的 <code>/<pre> 没有被关闭，
    且后面还能看到关闭标签（或前面从未出现过关闭标签）。
    跨行的 <pre> 块不处理。
    """
    before = line[:position]
    after = line[position:]

    for tag in ("code", "pre"):
        last_open = max(before.rfind(f"<{tag}>"), before.rfind(f"<{tag} "))
        last_close = before.rfind(f"</{tag}>")
        next_close = after.find(f"</{tag}>")
        if last_open != -1 and last_open > last_close:
            if next_close != -1 or last_close == -1:
                return True
    return False


def is_attribute_context(line: str, position: int) -> bool:
    before = line[:position]
    # 在 < 与 > 之间：属于标签内部（属性）
    if before.rfind("<") > before.rfind(">"):
        return True
    return any(p.search(before) for p in ATTRIBUTE_PATTERNS)


def should_skip_string(text: str) -> bool:
    """技术性字符串：URL / 路径 / 常量 / 数字单位 / 颜色 / 事件名 / HTTP 方法 / 术语 / 单字符。"""
    if _URL_RE.search(text):
        return True
    if _PATH_START_RE.search(text) or ("/" in text and "." in text):
        return True
    if _CONSTANT_RE.search(text):
        return True
    if _SHORT_CAMEL_RE.search(text) and len(text) < 4:
        return True
    if _NUMBER_UNIT_RE.search(text):
        return True
    if _HEX_COLOR_RE.search(text):
        return True
    if _EVENT_RE.search(text):
        return True
    if _HTTP_METHOD_RE.search(text):
        return True
    if text.lower() in TECHNICAL_TERMS:
        return True
    return len(text) == 1


def is_user_facing_text(text: str) -> bool:
    if not _LETTER_RE.search(text):
        return False
    if re.search(r"\s", text) and len(re.split(r"\s+", text)) > 1:
        return True
    lower = text.lower()
    if any(w in lower for w in UI_WORDS):
        return True
    if _CJK_RE.search(text):
        return True
    return len(text) > 6 and bool(re.search(r"[a-z]", text)) and bool(re.search(r"[A-Z]", text))


def categorize(line: str) -> str:
    if "<title>" in line or "title:" in line or "title =" in line:
        return "title"
    if "placeholder" in line or "hint" in line:
        return "placeholder"
    if "button" in line or "btn" in line or "click" in line:
        return "button"
    if "label" in line or "text" in line:
        return "label"
    if "error" in line or "warning" in line:
        return "message"
    if "description" in line or "desc" in line:
        return "description"
    return "text"


def severity_of(text: str, line: str) -> Severity:
    if "title" in line or "button" in line or "label" in line:
        return Severity.HIGH
    if len(text) > 20 or _CJK_RE.search(text):
        return Severity.MEDIUM
    return Severity.LOW


# =========================
# 扫描器
# =========================

class HardcodedStringScanner:
    """
    逐行扫描源码里的硬编码文案（纯正则，不解析语法树）。
    每一行的判断都只依赖这一行本身。
    """

    def __init__(self, options: Optional[ScanOptions] = None):
        self.options = options or ScanOptions()
        self.extensions = normalize_extensions(self.options.extensions)

    def scan(self, root: Path) -> HardcodeReport:
        root = root.resolve()
        opts = self.options
        files = collect_files(
            root,
            extensions=self.extensions,
            exclude_dirs=opts.exclude_dirs,
            exclude_files=opts.exclude_files,
            verbose=opts.verbose,
        )

        findings: List[Finding] = []
        for p in files:
            findings.extend(self.scan_file(p, relpath(p, root)))

        findings.sort(key=lambda f: (f.file, f.line))
        return HardcodeReport(
            root=str(root),
            extensions=self.extensions,
            findings=tuple(findings),
            files_scanned=len(files),
        )

    def scan_file(self, path: Path, display_path: str) -> List[Finding]:
        text = read_text_or_none(path, verbose=self.options.verbose)
        if text is None:
            return []
        out: List[Finding] = []
        for i, line in enumerate(text.split("\n"), start=1):
            if not line.strip():
                continue
            out.extend(self.scan_line(line, i, display_path))
        return out

    def scan_line(self, line: str, line_no: int, file: str) -> List[Finding]:
        if is_i18n_line(line):
            return []
        if not self.options.include_comments and is_comment_line(line):
            return []
        if file.endswith(MARKUP_SUFFIXES):
            return self._scan_markup_line(line, line_no, file)
        return self._scan_script_line(line, line_no, file)

    def _in_bounds(self, text: str) -> bool:
        return self.options.min_length <= len(text) <= self.options.max_length

    def _scan_markup_line(self, line: str, line_no: int, file: str) -> List[Finding]:
        out: List[Finding] = []
        for m in TAG_CONTENT_RE.finditer(line):
            text = m.group(1).strip()
            pos = m.start(1)
            if not text or not self._in_bounds(text):
                continue
            if "{{" in text or "}}" in text or text.startswith("v-"):
                continue
            if is_inside_code_or_pre(line, pos):
                continue
            if should_skip_string(text) or not is_user_facing_text(text):
                continue
            out.append(Finding(
                file=file,
                line=line_no,
                column=pos + 1,
                text=text,
                context=line.strip(),
                category=TEMPLATE_CONTENT,
                severity=Severity.HIGH,
                full_match=m.group(0),
            ))
        return out

    def _scan_script_line(self, line: str, line_no: int, file: str) -> List[Finding]:
        out: List[Finding] = []
        for pattern in STRING_PATTERNS:
            for m in pattern.finditer(line):
                text = m.group(1)
                pos = m.start()
                if not self._in_bounds(text):
                    continue
                if is_attribute_context(line, pos):
                    continue
                if is_inside_code_or_pre(line, pos):
                    continue
                if should_skip_string(text) or not is_user_facing_text(text):
                    continue
                out.append(Finding(
                    file=file,
                    line=line_no,
                    column=pos + 1,
                    text=text,
                    context=line.strip(),
                    category=categorize(line),
                    severity=severity_of(text, line),
                    full_match=m.group(0),
                ))
        return out

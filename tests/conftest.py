import json
import sys
from pathlib import Path

import pytest


# Ensure 'src/' is on sys.path so 'locale_box' can be imported when running tests from repo root.
REPO_ROOT = Path(__file__).resolve().parents[1]
SRC_DIR = REPO_ROOT / "src"
if SRC_DIR.exists():
    sys.path.insert(0, str(SRC_DIR))


EN_US = {
    "common": {"loading": "Loading...", "error": "An error occurred"},
    "navigation": {"home": "Home", "about": "About"},
}

ZH_HANS = {
    "common": {"loading": "加载中..."},
    "navigation": {"home": "首页"},
}


def write_json(path: Path, obj) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(obj, ensure_ascii=False, indent=2) + "\n", encoding="utf-8")
    return path


@pytest.fixture
def chdir_tmp(tmp_path, monkeypatch):
    """切到临时目录执行（避免污染仓库）。"""
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def locales_dir(chdir_tmp):
    """i18n/locales 下放 en-US / zh-hans 两个语言文件。"""
    d = chdir_tmp / "i18n" / "locales"
    write_json(d / "en-US.json", EN_US)
    write_json(d / "zh-hans.json", ZH_HANS)
    return d


@pytest.fixture
def write_locale(locales_dir):
    """写入（或覆盖）一个语言文件：write_locale('ja', {...})。"""
    def _write(locale: str, obj) -> Path:
        return write_json(locales_dir / f"{locale}.json", obj)
    return _write

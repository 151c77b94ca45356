import json
from pathlib import Path

from locale_box import tool


def _read(p):
    return json.loads(Path(p).read_text(encoding="utf-8"))


def test_init_creates_layout(chdir_tmp):
    rc = tool.main(["init"])
    assert rc == tool.EXIT_OK

    data = _read("i18n/locales/en-US.json")
    assert data["common"]["loading"] == "Loading..."
    assert data["navigation"]["contact"] == "Contact"
    assert Path("locale_box.yaml").exists()

    # 再次执行不覆盖
    Path("i18n/locales/en-US.json").write_text('{"x": "y"}\n', encoding="utf-8")
    assert tool.main(["init"]) == tool.EXIT_OK
    assert _read("i18n/locales/en-US.json") == {"x": "y"}


def test_set_parses_json_values(locales_dir):
    assert tool.main(["set", "en-US", "limits.max", "3"]) == tool.EXIT_OK
    assert tool.main(["set", "en-US", "flags.on", "true"]) == tool.EXIT_OK
    assert tool.main(["set", "en-US", "page.title", "Hello world"]) == tool.EXIT_OK

    data = _read(locales_dir / "en-US.json")
    assert data["limits"]["max"] == 3
    assert data["flags"]["on"] is True
    assert data["page"]["title"] == "Hello world"


def test_set_skip_if_exists(locales_dir):
    rc = tool.main(["set", "en-US", "common.loading", "Wait", "--skip-if-exists"])
    assert rc == tool.EXIT_OK
    assert _read(locales_dir / "en-US.json")["common"]["loading"] == "Loading..."


def test_set_unknown_locale_fails(locales_dir):
    assert tool.main(["set", "fr", "a", "b"]) == tool.EXIT_FAIL


def test_get_and_has(locales_dir, capsys):
    assert tool.main(["get", "zh-hans", "navigation.home"]) == tool.EXIT_OK
    assert '"首页"' in capsys.readouterr().out
    assert tool.main(["get", "zh-hans", "navigation.about"]) == tool.EXIT_FAIL
    capsys.readouterr()

    tool.main(["has", "zh-hans", "navigation.about"])
    assert capsys.readouterr().out.strip() == "false"


def test_invalid_key_path(locales_dir):
    assert tool.main(["get", "en-US", "a..b"]) == tool.EXIT_BAD


def test_set_multiple_and_missing(locales_dir, capsys):
    rc = tool.main(["set-multiple", "navigation.about", "zh-hans=关于"])
    assert rc == tool.EXIT_OK
    capsys.readouterr()

    tool.main(["missing", "navigation.about"])
    assert "All locales have this translation" in capsys.readouterr().out

    assert tool.main(["set-multiple", "x.y", "bad-pair"]) == tool.EXIT_BAD
    assert tool.main(["set-multiple", "x.y", "xx=1"]) == tool.EXIT_FAIL


def test_copy_and_merge(locales_dir, chdir_tmp):
    assert tool.main(["copy", "en-US", "common.error", "--targets", "zh-hans"]) == tool.EXIT_OK
    assert _read(locales_dir / "zh-hans.json")["common"]["error"] == "An error occurred"
    assert tool.main(["copy", "zh-hans", "nope.key"]) == tool.EXIT_FAIL

    patch = chdir_tmp / "patch.json"
    patch.write_text(json.dumps({"navigation.about": "关于"}, ensure_ascii=False), encoding="utf-8")
    assert tool.main(["merge", "zh-hans", str(patch)]) == tool.EXIT_OK
    assert _read(locales_dir / "zh-hans.json")["navigation"]["about"] == "关于"

    patch.write_text("[1]", encoding="utf-8")
    assert tool.main(["merge", "zh-hans", str(patch)]) == tool.EXIT_BAD


def test_check_exit_codes(locales_dir):
    assert tool.main(["check"]) == tool.EXIT_ISSUES_FOUND
    assert tool.main(["check", "--detailed", "--no-exitcode-3"]) == tool.EXIT_OK
    assert tool.main(["stats", "-v"]) == tool.EXIT_OK
    assert tool.main(["duplicates"]) == tool.EXIT_OK
    assert tool.main(["locales"]) == tool.EXIT_OK


def test_check_without_locales(chdir_tmp):
    assert tool.main(["check"]) == tool.EXIT_FAIL


def test_missing_translations(locales_dir, chdir_tmp):
    (chdir_tmp / "src").mkdir()
    (chdir_tmp / "src" / "a.vue").write_text("{{ t('navigation.home') }}\n", encoding="utf-8")
    assert tool.main(["missing-translations", "src"]) == tool.EXIT_OK

    (chdir_tmp / "src" / "b.vue").write_text("{{ t('navigation.nope') }}\n", encoding="utf-8")
    assert tool.main(["missing-translations", "src"]) == tool.EXIT_ISSUES_FOUND
    assert tool.main(["missing-translations", "src", "--base", "zh-hans", "--no-exitcode-3"]) == tool.EXIT_OK


def test_hardcode_check(chdir_tmp):
    (chdir_tmp / "src").mkdir()
    (chdir_tmp / "src" / "a.vue").write_text("<p>Hello world</p>\n", encoding="utf-8")
    (chdir_tmp / "src" / "b.ts").write_text('const s = "Hello world"\n', encoding="utf-8")

    assert tool.main(["hardcode-check", "src"]) == tool.EXIT_ISSUES_FOUND
    assert tool.main(["hardcode-check", "src", "--ext", "ts", "-v"]) == tool.EXIT_ISSUES_FOUND
    assert tool.main(["hardcode-check", "src", "--ext", "jsx"]) == tool.EXIT_OK


def test_custom_dir_option(chdir_tmp):
    d = chdir_tmp / "lang"
    d.mkdir()
    (d / "en.json").write_text('{"a": "b"}', encoding="utf-8")
    assert tool.main(["get", "en", "a", "--dir", "lang"]) == tool.EXIT_OK


def test_bad_config_returns_exit_bad(chdir_tmp):
    (chdir_tmp / "locale_box.yaml").write_text("scan: {minLength: 9, maxLength: 1}\n", encoding="utf-8")
    assert tool.main(["locales"]) == tool.EXIT_BAD


def test_set_null_is_refused(locales_dir):
    assert tool.main(["set", "en-US", "common.loading", "null"]) == tool.EXIT_FAIL
    assert _read(locales_dir / "en-US.json")["common"]["loading"] == "Loading..."


def test_merge_reports_invalid_key_path(locales_dir, chdir_tmp):
    patch = chdir_tmp / "patch.json"
    patch.write_text(json.dumps({"a..b": "x", "navigation.about": "关于"}, ensure_ascii=False), encoding="utf-8")
    assert tool.main(["merge", "zh-hans", str(patch)]) == tool.EXIT_FAIL
    assert _read(locales_dir / "zh-hans.json")["navigation"]["about"] == "关于"


def test_hardcode_report_groups_by_file(chdir_tmp, capsys):
    (chdir_tmp / "src").mkdir()
    (chdir_tmp / "src" / "a.vue").write_text(
        "<p>Hello world</p>\n<p>Welcome back</p>\n",
        encoding="utf-8",
    )
    assert tool.main(["hardcode-check", "src"]) == tool.EXIT_ISSUES_FOUND
    out = capsys.readouterr().out
    assert out.count("📄 a.vue") == 1
    assert "1:4" in out
    assert "2:4" in out

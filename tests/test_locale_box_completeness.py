from locale_box.completeness import CompletenessAnalyzer, detect_base_locale
from locale_box.store import LocaleStore


def test_detect_base_locale():
    assert detect_base_locale(["zh-hans", "en-US", "en"]) == "en"
    assert detect_base_locale(["zh-hans", "en_GB"]) == "en_GB"
    assert detect_base_locale(["zh-hans", "en-US"], explicit="zh-hans") == "zh-hans"
    assert detect_base_locale([]) is None


def test_detect_base_locale_falls_back_to_first(capsys):
    assert detect_base_locale(["zh-hans", "ja"]) == "ja"
    assert "No English locale found" in capsys.readouterr().out


def test_detect_base_locale_unknown_explicit(capsys):
    assert detect_base_locale(["en-US", "ja"], explicit="fr") == "en-US"
    assert "fr" in capsys.readouterr().out


def test_check_completeness_counts_missing_paths(locales_dir):
    analyzer = CompletenessAnalyzer(LocaleStore(locales_dir))
    report = analyzer.check_completeness("en-US")

    assert report.base_locale == "en-US"
    assert report.total_keys == 4
    st = report.locales["zh-hans"]
    assert st.total == 4
    assert st.missing == 2
    assert st.complete == 2
    assert st.missing_paths == ("common.error", "navigation.about")
    assert st.percentage == 50.0
    assert st.percentage_text == "50.0%"

    assert report.missing_by_section["zh-hans"] == {
        "common": ["common.error"],
        "navigation": ["navigation.about"],
    }
    assert report.summary.total == 1
    assert report.summary.incomplete == 1
    assert report.summary.total_missing == 2
    assert not report.is_complete


def test_check_completeness_is_idempotent(locales_dir):
    analyzer = CompletenessAnalyzer(LocaleStore(locales_dir))
    assert analyzer.check_completeness("en-US") == analyzer.check_completeness("en-US")


def test_check_completeness_sections_and_suggestions(locales_dir, write_locale):
    write_locale("ja", {"common": {"loading": "読み込み中"}})
    analyzer = CompletenessAnalyzer(LocaleStore(locales_dir))
    report = analyzer.check_completeness("en-US")

    assert report.locales["ja"].missing == 3
    # navigation：ja 缺 2 + zh-hans 缺 1；common：ja 缺 1 + zh-hans 缺 1
    assert report.sections_analysis == {"navigation": 3, "common": 2}
    assert report.top_sections(1) == [("navigation", 3)]
    assert report.suggestions == (
        "navigation missing in: ja, zh-hans",
        "common missing in: ja, zh-hans",
    )


def test_priority_sections_limit_suggestions(locales_dir):
    analyzer = CompletenessAnalyzer(LocaleStore(locales_dir), priority_sections=["common", "settings"])
    report = analyzer.check_completeness("en-US")
    assert report.suggestions == ("common missing in: zh-hans",)


def test_complete_locale(locales_dir, write_locale):
    write_locale("zh-hans", {
        "common": {"loading": "加载中...", "error": ""},
        "navigation": {"home": "首页", "about": "关于"},
    })
    report = CompletenessAnalyzer(LocaleStore(locales_dir)).check_completeness("en-US")
    assert report.is_complete
    assert report.locales["zh-hans"].percentage == 100.0
    assert report.suggestions == ()


def test_check_skips_unreadable_locale(locales_dir, capsys):
    (locales_dir / "de.json").write_text("[1, 2]", encoding="utf-8")
    report = CompletenessAnalyzer(LocaleStore(locales_dir)).check_completeness("en-US")
    assert "de" not in report.locales
    assert report.summary.total == 1
    assert "Error reading de" in capsys.readouterr().out


def test_empty_base_counts_as_complete(locales_dir, write_locale):
    write_locale("en-US", {})
    stats = CompletenessAnalyzer(LocaleStore(locales_dir)).stats("en-US")
    assert stats["zh-hans"].total == 0
    assert stats["zh-hans"].percentage == 100.0


def test_stats_excludes_base(locales_dir):
    stats = CompletenessAnalyzer(LocaleStore(locales_dir)).stats("en-US")
    assert list(stats) == ["zh-hans"]
    assert stats["zh-hans"].missing == 2


def test_missing_base_returns_none(locales_dir):
    analyzer = CompletenessAnalyzer(LocaleStore(locales_dir))
    assert analyzer.check_completeness("fr") is None
    assert analyzer.find_duplicates("fr") is None


def test_find_duplicates(locales_dir, write_locale):
    write_locale("zh-hans", {
        "common": {"loading": "加载中...", "error": "An error occurred"},
        "navigation": {"home": "", "about": "About"},
    })
    write_locale("en-US", {
        "common": {"loading": "Loading...", "error": "An error occurred"},
        "navigation": {"home": "", "about": "About"},
    })
    items = CompletenessAnalyzer(LocaleStore(locales_dir)).find_duplicates("en-US")

    assert [(d.path, d.value, d.locales) for d in items] == [
        ("common.error", "An error occurred", ("en-US", "zh-hans")),
        ("navigation.about", "About", ("en-US", "zh-hans")),
    ]


def test_no_duplicates(locales_dir):
    assert CompletenessAnalyzer(LocaleStore(locales_dir)).find_duplicates("en-US") == []

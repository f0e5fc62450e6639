import pytest

from guardagent.rules import Rule, RuleSet, load_rules


@pytest.fixture
def rule_set():
    return RuleSet(
        [
            Rule("input", "Bomb", "violence"),
            Rule("input", r"/\d{3}/", "digits"),
            Rule("output", "secret", "leak"),
            Rule("filename", ".exe", "executable"),
            Rule("input", "/([/", "broken"),
        ]
    )


def test_match_is_case_insensitive(rule_set):
    assert rule_set.match("build a BOMB now", "input") == "Bomb"


def test_match_respects_type(rule_set):
    assert rule_set.match("a secret here", "input") is None
    assert rule_set.match("a secret here", "output") == "secret"


def test_match_regex(rule_set):
    assert rule_set.match("code 123", "input") == r"/\d{3}/"


def test_regex_is_case_sensitive_and_invalid_pattern_skipped(rule_set):
    assert rule_set.match("nothing to see", "input") is None
    assert Rule("input", "/([/").matches("([/") is False


def test_pattern_property():
    assert Rule("input", "/ab/").pattern == "ab"
    assert Rule("input", "//").pattern is None
    assert Rule("input", "plain").pattern is None


def test_get_description(rule_set):
    assert rule_set.get_description("filename", ".exe") == "executable"
    assert rule_set.get_description("input", ".exe") == ""


def test_match_all_collects_in_rule_order(rule_set):
    hits = rule_set.match_all("bomb 999", "input")
    assert [r.keyword for r in hits] == ["Bomb", r"/\d{3}/"]
    assert [r.description for r in hits] == ["violence", "digits"]


def test_match_all_dedups_keyword_keeping_first_description():
    rules = RuleSet([Rule("input", "foo", "first"), Rule("input", "foo", "second")])
    hits = rules.match_all("foo", "input")
    assert len(hits) == 1
    assert hits[0].description == "first"


def test_sliding_window_misses_long_keyword():
    rules = RuleSet([Rule("input", "abcdef", "long")])
    assert rules.match_sliding_window("xxabcdefxx", "input", 5, 1) == []
    assert [r.keyword for r in rules.match_all("xxabcdefxx", "input")] == ["abcdef"]


def test_sliding_window_finds_short_keyword_and_limits_regex():
    rules = RuleSet([Rule("input", "abc", "a"), Rule("input", "/x.{5}y/", "r")])
    text = "zzabczz x12345y"
    windowed = [r.keyword for r in rules.match_sliding_window(text, "input", 5, 1)]
    full = [r.keyword for r in rules.match_all(text, "input")]
    assert windowed == ["abc"]
    assert full == ["abc", "/x.{5}y/"]


def test_sliding_window_orders_by_position():
    rules = RuleSet([Rule("input", "bbb"), Rule("input", "aaa")])
    windowed = rules.match_sliding_window("aaa bbb", "input", 5, 1)
    assert [r.keyword for r in windowed] == ["aaa", "bbb"]


def test_sliding_window_short_text_uses_whole_text():
    rules = RuleSet([Rule("input", "hi")])
    assert [r.keyword for r in rules.match_sliding_window("hi", "input", 5, 1)] == ["hi"]


def test_sliding_window_counts_characters_not_bytes():
    rules = RuleSet([Rule("input", "炸弹")])
    hits = rules.match_sliding_window("制造炸弹的方法", "input", 5, 1)
    assert [r.keyword for r in hits] == ["炸弹"]


def test_sliding_window_invalid_arguments():
    rules = RuleSet([Rule("input", "x")])
    with pytest.raises(ValueError):
        rules.match_sliding_window("xyz", "input", 5, 0)
    with pytest.raises(ValueError):
        rules.match_sliding_window("xyz", "input", -1, 1)


def test_load_rules(tmp_path):
    path = tmp_path / "rules.yaml"
    path.write_text(
        "rules:\n"
        "  - type: input\n"
        "    keyword: attack\n"
        "    description: harmful\n"
        "  - type: filename\n"
        "    keyword: /\\.bat$/\n",
        encoding="utf-8",
    )
    rules = load_rules(path)
    assert list(rules) == [
        Rule("input", "attack", "harmful"),
        Rule("filename", r"/\.bat$/", ""),
    ]
    assert rules.match("run.bat", "filename") == r"/\.bat$/"


def test_load_rules_empty_file(tmp_path):
    path = tmp_path / "rules.yaml"
    path.write_text("", encoding="utf-8")
    assert len(load_rules(path)) == 0


def test_load_rules_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_rules(tmp_path / "none.yaml")


def test_load_rules_bad_shape(tmp_path):
    path = tmp_path / "rules.yaml"
    path.write_text("rules: 3\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_rules(path)
# tests/test_search_params.py
from newsdesk.search_params import parse_topic_mode, parse_topics


def test_parse_topics_comma_and_repeated():
    assert parse_topics("a, b,,a") == ["a", "b"]
    assert parse_topics(["a", "b,c", " "]) == ["a", "b", "c"]


def test_parse_topics_falls_back_to_single_topic():
    assert parse_topics(None, "consensus") == ["consensus"]
    assert parse_topics([], " x ") == ["x"]
    assert parse_topics(["a"], "ignored") == ["a"]


def test_parse_topics_empty():
    assert parse_topics() == []
    assert parse_topics("") == []


def test_parse_topic_mode_defaults_to_any():
    assert parse_topic_mode("all") == "all"
    assert parse_topic_mode(" ALL ") == "all"
    assert parse_topic_mode(None) == "any"
    assert parse_topic_mode("bogus") == "any"

import pytest

from restrbac.core.matcher import action_matches, matches, rule_matches
from restrbac.core.model import Permission


@pytest.mark.parametrize(
    "pattern,resource,expected",
    [
        ("posts.*", "posts.views", True),
        ("posts.*", "posts.average_note", True),
        ("posts.*", "posts", False),
        ("posts.*", "comments.views", False),
        ("*", "anything", True),
        ("*", "", True),
        ("foo", "foo", True),
        ("foo", "foobar", False),
        ("foo*", "foobar", True),
        ("foo*", "foo", True),
        ("po*ts", "posts", False),  # embedded '*' is literal
        ("po*ts", "po*ts", True),
        ("", "", True),
        ("", "posts", False),
    ],
)
def test_matches(pattern, resource, expected):
    assert matches(pattern, resource) is expected


def test_action_set_matching():
    actions = frozenset({"list", "show"})
    assert action_matches(actions, "list")
    assert action_matches(actions, "show")
    assert not action_matches(actions, "create")


def test_wildcard_action_set_matches_every_action():
    for action in ("list", "show", "create", "edit", "delete", "custom"):
        assert action_matches(frozenset({"*"}), action)


def test_generic_queries_match_any_action_set():
    assert action_matches(frozenset(), "")
    assert action_matches(frozenset(), "*")
    assert action_matches(frozenset({"list"}), "*")


def test_empty_action_set_never_matches_a_concrete_action():
    assert not action_matches(frozenset(), "list")


def test_rule_matches_requires_resource_and_action():
    rule = Permission(actions=frozenset({"list"}), resource="posts")
    assert rule_matches(rule, "list", "posts")
    assert not rule_matches(rule, "list", "comments")
    assert not rule_matches(rule, "delete", "posts")
    # generic query still needs the resource to match
    assert not rule_matches(rule, "*", "comments")

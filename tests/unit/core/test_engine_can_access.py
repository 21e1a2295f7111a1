from hypothesis import given
from hypothesis import strategies as st

from restrbac.core.engine import can_access
from restrbac.core.model import EFFECT_ALLOW, EFFECT_DENY, Permission
from restrbac.core.roles import parse_role_definitions

ACTIONS = ["list", "show", "create", "edit", "delete", "read", "*"]
RESOURCES = ["posts", "posts.views", "comments", "posts.*", "*", "users"]


def _rules(doc_rules):
    return parse_role_definitions({"r": doc_rules})["r"]


def test_blog_scenario():
    rules = _rules(
        [
            {"action": ["list", "show"], "resource": "posts"},
            {"type": "deny", "action": "read", "resource": "posts.views"},
        ]
    )
    assert can_access(rules, "read", "posts.views") is False
    assert can_access(rules, "list", "posts") is True
    assert can_access(rules, "delete", "posts") is False


def test_deny_wins_over_wildcard_allow_regardless_of_position():
    allow_all = {"action": "*", "resource": "*"}
    deny_delete = {"type": "deny", "action": "delete", "resource": "posts*"}
    for doc in ([allow_all, deny_delete], [deny_delete, allow_all]):
        rules = _rules(doc)
        assert can_access(rules, "delete", "posts") is False
        assert can_access(rules, "delete", "posts.views") is False
        assert can_access(rules, "delete", "comments") is True
        assert can_access(rules, "edit", "posts") is True


def test_default_deny_when_nothing_matches():
    rules = _rules([{"action": "list", "resource": "posts"}])
    assert can_access(rules, "list", "comments") is False
    assert can_access(rules, "create", "posts") is False


def test_rule_with_empty_action_never_matches_concrete_action():
    rules = _rules([{"action": [], "resource": "posts"}, {"resource": "posts"}])
    assert can_access(rules, "list", "posts") is False


def test_generic_query_matches_any_rule_for_the_resource():
    rules = _rules([{"action": "show", "resource": "posts"}])
    assert can_access(rules, "", "posts") is True
    assert can_access(rules, "*", "posts") is True
    assert can_access(rules, "*", "comments") is False


def test_deny_without_action_only_shadows_generic_queries():
    rules = _rules(
        [
            {"action": "*", "resource": "posts"},
            {"type": "deny", "resource": "posts"},
        ]
    )
    # concrete actions: the action-less deny never matches
    for action in ("list", "show", "create", "edit", "delete"):
        assert can_access(rules, action, "posts") is True
    # generic queries: the deny matches the resource and wins
    assert can_access(rules, "", "posts") is False
    assert can_access(rules, "*", "posts") is False


permissions = st.builds(
    Permission,
    effect=st.sampled_from([EFFECT_ALLOW, EFFECT_DENY]),
    actions=st.frozensets(st.sampled_from(ACTIONS), max_size=3),
    resource=st.sampled_from(RESOURCES),
)


@given(action=st.sampled_from(ACTIONS + [""]), resource=st.sampled_from(RESOURCES))
def test_empty_rule_list_denies_everything(action, resource):
    assert can_access((), action, resource) is False


@given(
    rules=st.lists(permissions, max_size=8),
    action=st.sampled_from(ACTIONS),
    resource=st.sampled_from(["posts", "posts.views", "comments"]),
    data=st.data(),
)
def test_decision_does_not_depend_on_rule_order(rules, action, resource, data):
    shuffled = data.draw(st.permutations(rules))
    assert can_access(rules, action, resource) == can_access(shuffled, action, resource)


@given(
    allows=st.lists(permissions.filter(lambda p: not p.is_deny), max_size=6),
    action=st.sampled_from(["list", "show", "create", "edit", "delete"]),
    resource=st.sampled_from(["posts", "posts.views", "comments"]),
    position=st.integers(min_value=0, max_value=6),
)
def test_matching_deny_always_wins(allows, action, resource, position):
    deny = Permission(effect=EFFECT_DENY, actions=frozenset({action}), resource=resource)
    rules = list(allows)
    rules.insert(min(position, len(rules)), deny)
    assert can_access(rules, action, resource) is False

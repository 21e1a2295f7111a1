import pytest

from restrbac.core.engine import can_access
from restrbac.core.model import EFFECT_ALLOW, EFFECT_DENY, Permission, RoleDefinitions
from restrbac.core.roles import RoleDefinitionError, parse_role_definitions


def test_scalar_and_list_actions_are_normalized():
    roles = parse_role_definitions(
        {
            "editor": [
                {"action": "list", "resource": "posts"},
                {"action": ["list", "show", "list"], "resource": "comments"},
            ]
        }
    )
    first, second = roles["editor"]
    assert first.actions == frozenset({"list"})
    assert second.actions == frozenset({"list", "show"})


def test_type_defaults_to_allow():
    roles = parse_role_definitions(
        {
            "r": [
                {"action": "list", "resource": "a"},
                {"type": "deny", "action": "list", "resource": "b"},
                {"type": "DENY", "action": "list", "resource": "c"},
                {"type": "bogus", "action": "list", "resource": "d"},
                {"type": 3, "action": "list", "resource": "e"},
            ]
        }
    )
    effects = [p.effect for p in roles["r"]]
    assert effects == [EFFECT_ALLOW, EFFECT_DENY, EFFECT_ALLOW, EFFECT_ALLOW, EFFECT_ALLOW]


def test_unusual_values_are_accepted():
    roles = parse_role_definitions(
        {
            "odd": [
                {"action": [], "resource": "posts"},
                {"resource": "posts"},
                {"action": ["list", 1, None], "resource": "posts"},
                {"action": 42},
            ],
            "nothing": None,
            "empty": [],
        }
    )
    odd = roles["odd"]
    assert odd[0].actions == frozenset()
    assert odd[1].actions == frozenset()
    assert odd[2].actions == frozenset({"list"})
    assert odd[3] == Permission(effect=EFFECT_ALLOW, actions=frozenset(), resource="")
    assert roles["nothing"] == ()
    assert roles["empty"] == ()


def test_rule_order_is_preserved():
    doc = {"r": [{"action": "a", "resource": str(i)} for i in range(5)]}
    roles = parse_role_definitions(doc)
    assert [p.resource for p in roles["r"]] == ["0", "1", "2", "3", "4"]


@pytest.mark.parametrize(
    "doc",
    [
        [],
        "roles",
        None,
        {"r": "not-a-list"},
        {"r": {"action": "list"}},
        {"r": ["not-a-rule"]},
        {1: []},
    ],
)
def test_structural_errors_raise(doc):
    with pytest.raises(RoleDefinitionError):
        parse_role_definitions(doc)


def test_error_carries_rule_path():
    with pytest.raises(RoleDefinitionError) as e:
        parse_role_definitions({"admin": [{"action": "list", "resource": "x"}, 7]})
    assert e.value.path == "/admin/1"
    assert isinstance(e.value, ValueError)


def test_snapshot_is_read_only():
    roles = parse_role_definitions({"r": [{"action": "list", "resource": "x"}]})
    assert isinstance(roles, RoleDefinitions)
    with pytest.raises(TypeError):
        roles["r"] = ()  # type: ignore[index]
    assert not hasattr(roles, "update")
    assert isinstance(roles["r"], tuple)


def test_parsing_a_snapshot_returns_it_unchanged():
    roles = parse_role_definitions({"r": []})
    assert parse_role_definitions(roles) is roles


def test_null_rule_is_an_empty_rule():
    roles = parse_role_definitions({"r": [None, {"action": "list", "resource": "posts"}]})
    empty, posts = roles["r"]
    assert empty.actions == frozenset() and empty.resource == "" and not empty.is_deny
    assert posts.actions == {"list"}
    assert can_access(roles["r"], "list", "posts") is True

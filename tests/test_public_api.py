import importlib


def test_public_api_imports():
    names = [
        "Guard",
        "Decision",
        "Permission",
        "RoleDefinitions",
        "RequestTarget",
        "RestConvention",
        "RoleDefinitionError",
        "FileRoleSource",
        "HotReloader",
        "can_access",
        "matches",
        "parse_role_definitions",
        "resolve_action",
        "split_path",
        "core",
        "adapters",
        "store",
        "__version__",
    ]
    mod = importlib.import_module("restrbac")
    for n in names:
        assert hasattr(mod, n), f"Missing public import: restrbac.{n}"


def test_end_to_end_from_top_level_names():
    import restrbac

    guard = restrbac.Guard(
        {
            "accountant": [
                {"action": ["list", "show"], "resource": "posts"},
                {"type": "deny", "action": "read", "resource": "posts.views"},
            ]
        }
    )
    assert guard.is_allowed("accountant", "read", "posts.views") is False
    assert guard.is_allowed("accountant", "list", "posts") is True
    assert guard.is_allowed("accountant", "delete", "posts") is False

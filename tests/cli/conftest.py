import importlib.util

import pytest


def _has_module(modname: str) -> bool:
    return importlib.util.find_spec(modname) is not None


def pytest_collection_modifyitems(config, items):
    """Skip schema-validation CLI tests when the optional 'jsonschema' is missing."""
    if _has_module("jsonschema"):
        return
    skip_validate = pytest.mark.skip(reason="optional dependency 'jsonschema' not installed")
    for item in items:
        nid = item.nodeid
        if "cli/" in nid and ("validate" in nid or "check" in nid):
            item.add_marker(skip_validate)

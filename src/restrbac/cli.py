from __future__ import annotations

import argparse
import json
import sys
from typing import Any, Dict, List, Optional, Sequence

from .core.engine import Guard
from .core.roles import RoleDefinitionError, parse_role_definitions
from .dsl.lint import analyze_roles
from .dsl.validate import iter_errors
from .store.role_loader import parse_roles_text

EXIT_OK = 0
EXIT_USAGE = 2
EXIT_SCHEMA_ERRORS = 3
EXIT_LINT_ERRORS = 4
EXIT_DENIED = 5


def _version() -> str:
    from . import __version__

    return __version__


def _read_roles(path: str) -> Dict[str, Any]:
    if path == "-":
        return parse_roles_text(sys.stdin.read())
    with open(path, "r", encoding="utf-8") as f:
        return parse_roles_text(f.read(), filename=path)


def _print(data: Any, fmt: str) -> None:
    if fmt == "json":
        sys.stdout.write(json.dumps(data, ensure_ascii=False, indent=2) + "\n")
        return
    text = data if isinstance(data, str) else str(data)
    if not text.endswith("\n"):
        text += "\n"
    sys.stdout.write(text)


def _format_issues_text(issues: List[Dict[str, Any]]) -> str:
    lines = []
    for issue in issues:
        code = issue.get("code", "SCHEMA")
        path = issue.get("path") or "/"
        lines.append(f"{code} {path}: {issue.get('message', '')}")
    return "\n".join(lines)


def _schema_issues(doc: Dict[str, Any]) -> List[Dict[str, Any]]:
    issues = [dict(err, code="SCHEMA") for err in iter_errors(doc)]
    if not issues:
        try:
            parse_role_definitions(doc)
        except RoleDefinitionError as e:
            issues.append({"code": "STRUCTURE", "message": str(e), "path": e.path or "/"})
    return issues


def _report(issues: List[Dict[str, Any]], fmt: str) -> None:
    if fmt == "json":
        _print(issues, "json")
    else:
        _print(_format_issues_text(issues) if issues else "OK", "text")


def cmd_validate(args: argparse.Namespace) -> int:
    doc = _read_roles(args.roles)
    issues = _schema_issues(doc)
    _report(issues, args.format)
    return EXIT_SCHEMA_ERRORS if issues else EXIT_OK


def cmd_lint(args: argparse.Namespace) -> int:
    doc = _read_roles(args.roles)
    try:
        issues = analyze_roles(doc)
    except RoleDefinitionError as e:
        _report([{"code": "STRUCTURE", "message": str(e), "path": e.path or "/"}], args.format)
        return EXIT_SCHEMA_ERRORS
    _report(issues, args.format)
    if issues and getattr(args, "strict", False):
        return EXIT_LINT_ERRORS
    return EXIT_OK


def cmd_check(args: argparse.Namespace) -> int:
    """Schema validation first; lint only runs on a valid document."""
    doc = _read_roles(args.roles)
    schema = _schema_issues(doc)
    if schema:
        _report(schema, args.format)
        return EXIT_SCHEMA_ERRORS
    issues = analyze_roles(doc)
    _report(issues, args.format)
    if issues and getattr(args, "strict", False):
        return EXIT_LINT_ERRORS
    return EXIT_OK


def cmd_decide(args: argparse.Namespace) -> int:
    guard = Guard(_read_roles(args.roles))
    if args.path is not None:
        decision = guard.authorize_request(args.role, args.method, args.path)
    else:
        decision = guard.evaluate(args.role, args.action or "", args.resource or "")

    result = {
        "allowed": decision.allowed,
        "decision": decision.effect,
        "reason": decision.reason,
        "role": decision.role,
        "action": decision.action,
        "resource": decision.resource,
        "identifier": decision.identifier,
        "rule_index": decision.rule_index,
    }
    if args.format == "json":
        _print(result, "json")
    else:
        _print(f"{decision.effect} ({decision.reason})", "text")
    return EXIT_OK if decision.allowed else EXIT_DENIED


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="restrbac", description="Role definition tools for REST role-based access control"
    )
    p.add_argument("--version", action="store_true", help="print version and exit")
    sub = p.add_subparsers(dest="command")

    def _common(sp: argparse.ArgumentParser) -> None:
        sp.add_argument("--roles", required=True, help="role document (JSON/YAML), '-' for stdin")
        sp.add_argument("--format", choices=("json", "text"), default="json")

    sp = sub.add_parser("validate", help="validate a role document against the schema")
    _common(sp)
    sp.set_defaults(func=cmd_validate)

    sp = sub.add_parser("lint", help="report suspicious rules")
    _common(sp)
    sp.add_argument("--strict", action="store_true", help="non-zero exit when issues are found")
    sp.set_defaults(func=cmd_lint)

    sp = sub.add_parser("check", help="validate, then lint")
    _common(sp)
    sp.add_argument("--strict", action="store_true", help="non-zero exit when lint issues are found")
    sp.set_defaults(func=cmd_check)

    sp = sub.add_parser("decide", help="evaluate one access decision")
    _common(sp)
    sp.add_argument("--role", required=True)
    target = sp.add_mutually_exclusive_group(required=True)
    target.add_argument("--path", help="request path, resolved with the REST convention")
    target.add_argument("--resource", help="resource name, used with --action")
    sp.add_argument("--method", default="GET", help="HTTP method used with --path")
    sp.add_argument("--action", help="action name used with --resource")
    sp.set_defaults(func=cmd_decide)

    return p


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.version:
        _print(f"restrbac {_version()}", "text")
        return EXIT_OK
    if not getattr(args, "func", None):
        parser.print_usage(sys.stdout)
        return EXIT_USAGE
    rc = args.func(args)
    return rc if isinstance(rc, int) else EXIT_OK


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())

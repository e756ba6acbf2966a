#!/usr/bin/env python3
"""
jwt-tutorial -- Inspect and serve the tutorial's HTTP security policy.

Usage:
  python main.py policy
  python main.py policy --json
  python main.py check GET /h2-console/login.do
  python main.py check POST /api/v1/echo
  python main.py serve --port 8080 --reload

Environment variables (see core/config.py):
  SECURITY_IGNORED_PATHS   JSON list of Ant patterns that bypass security
  CONSOLE_ENABLED          Serve the /h2-console diagnostics page (default true)
  LOG_LEVEL                Root log level for the server (default INFO)
"""

import argparse
import json
import logging
import sys

import uvicorn

from core.config import get_settings
from security.config import build_filter_chain_proxy


def _configure_logging(verbose: bool) -> None:
    """Same format as the API server. Quiet by default: only WARNING and above."""
    logging.basicConfig(
        level=get_settings().log_level if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def _print_policy(as_json: bool) -> None:
    summary = build_filter_chain_proxy().describe()
    if as_json:
        print(json.dumps(summary, indent=2))
        return
    print("\nIgnored (no security filters):")
    for matcher in summary["ignored"] or ["none"]:
        print(f"  {matcher}")
    for i, chain in enumerate(summary["chains"], start=1):
        print(f"\nChain {i}: {chain['matcher']}")
        for rule in chain["rules"] or ["no authorization rules"]:
            print(f"  {rule}")
    print()


def _check(method: str, path: str) -> int:
    """Print the policy's decision for one request. Returns the process exit code."""
    decision = build_filter_chain_proxy().evaluate(method.upper(), path)
    if decision.ignored:
        verdict = "IGNORED"
    elif decision.granted:
        verdict = "GRANTED"
    else:
        verdict = "DENIED"
    print(f"  {method.upper()} {path} -> {verdict} ({decision.reason})")
    return 0 if decision.granted else 1


def _serve(host: str, port: int, reload: bool) -> None:
    uvicorn.run("asgi:app", host=host, port=port, reload=reload)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="jwt-tutorial",
        description="Inspect and serve the HTTP security policy.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py policy
  python main.py check GET /favicon.ico
  SECURITY_IGNORED_PATHS='["/static/**"]' python main.py check GET /static/app.css
        """,
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log at LOG_LEVEL instead of WARNING",
    )
    sub = parser.add_subparsers(dest="command", metavar="COMMAND")

    policy = sub.add_parser("policy", help="Print the ignore list and filter chains")
    policy.add_argument("--json", action="store_true", help="Output structured JSON")

    check = sub.add_parser("check", help="Show the policy decision for one request")
    check.add_argument("method", metavar="METHOD", help="HTTP method, e.g. GET")
    check.add_argument("path", metavar="PATH", help="Request path, e.g. /h2-console/login.do")

    serve = sub.add_parser("serve", help="Run the web service with uvicorn")
    serve.add_argument("--host", default="127.0.0.1", help="Bind address (default: 127.0.0.1)")
    serve.add_argument("--port", type=int, default=8080, help="Bind port (default: 8080)")
    serve.add_argument("--reload", action="store_true", help="Restart on code changes")

    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    if args.command == "policy":
        _print_policy(args.json)
        return 0
    if args.command == "check":
        return _check(args.method, args.path)
    if args.command == "serve":
        _serve(args.host, args.port, args.reload)
        return 0

    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())

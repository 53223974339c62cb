"""Smoke check against a running presence server.

Usage:
    flask --app presence.wsgi presence-smoke
    flask --app presence.wsgi presence-smoke --base-url http://10.0.0.5:8080 --user-id smoke-check
    python -m presence.scripts.smoke --base-url http://127.0.0.1:8080
"""

from __future__ import annotations

import sys
from typing import Any, Dict, Optional

import click
import requests

DEFAULT_BASE_URL = "http://127.0.0.1:8080"


class SmokeFailure(Exception):
    pass


def _call(base_url: str, method: str, path: str, payload: Optional[dict] = None, timeout: float = 5.0) -> Dict[str, Any]:
    url = base_url.rstrip("/") + path
    try:
        resp = requests.request(method, url, json=payload, timeout=timeout)
    except requests.RequestException as exc:
        raise SmokeFailure(f"{method} {path}: {exc}") from exc
    if resp.status_code != 200:
        raise SmokeFailure(f"{method} {path}: HTTP {resp.status_code}")
    try:
        return resp.json()
    except ValueError as exc:
        raise SmokeFailure(f"{method} {path}: response is not JSON") from exc


def _expect_ok(body: Dict[str, Any], step: str) -> Dict[str, Any]:
    if body.get("code") != 0:
        raise SmokeFailure(f"{step}: code={body.get('code')} message={body.get('message')!r}")
    return body.get("data") or {}


def run_smoke(base_url: str, user_id: str, timeout: float = 5.0) -> None:
    """Walk one session through its whole lifecycle, echoing each step."""
    health = _call(base_url, "GET", "/api/health", timeout=timeout)
    if health.get("status") != "healthy":
        raise SmokeFailure(f"health: unexpected status {health.get('status')!r}")
    click.echo("  ✓ health")

    data = _expect_ok(_call(base_url, "POST", "/api/online/login", {"user_id": user_id}, timeout), "login")
    session_id = data.get("session_id")
    if not session_id:
        raise SmokeFailure("login: no session_id returned")
    click.echo(f"  ✓ login session={session_id} online={data.get('online_count')}")

    try:
        _expect_ok(_call(base_url, "POST", "/api/online/heartbeat", {"session_id": session_id}, timeout), "heartbeat")
        click.echo("  ✓ heartbeat")

        data = _expect_ok(_call(base_url, "POST", "/api/online/validate", {"session_id": session_id}, timeout), "validate")
        if data.get("valid") is not True:
            raise SmokeFailure("validate: fresh session reported invalid")
        click.echo("  ✓ validate")

        data = _expect_ok(_call(base_url, "GET", "/api/online/count", timeout=timeout), "count")
        if int(data.get("online_count", 0)) < 1:
            raise SmokeFailure("count: expected at least one online user")
        click.echo(f"  ✓ count online={data['online_count']}")

        data = _expect_ok(_call(base_url, "GET", "/api/online/users", timeout=timeout), "users")
        if user_id not in (data.get("users") or []):
            raise SmokeFailure(f"users: {user_id!r} not listed")
        click.echo(f"  ✓ users count={data.get('count')}")
    finally:
        _expect_ok(_call(base_url, "POST", "/api/online/logout", {"session_id": session_id}, timeout), "logout")
        click.echo("  ✓ logout")

    data = _expect_ok(_call(base_url, "POST", "/api/online/validate", {"session_id": session_id}, timeout), "validate")
    if data.get("valid") is not False:
        raise SmokeFailure("validate: session still valid after logout")
    click.echo("  ✓ session gone after logout")


@click.command("presence-smoke")
@click.option("--base-url", default=DEFAULT_BASE_URL, show_default=True, help="Server to check")
@click.option("--user-id", default="smoke-check", show_default=True, help="User id to log in as")
@click.option("--timeout", default=5.0, show_default=True, type=float, help="Per-request timeout (seconds)")
def presence_smoke_command(base_url: str, user_id: str, timeout: float):
    """Run login → heartbeat → validate → count → users → logout against a server."""
    click.echo(f"Probing {base_url} as {user_id!r}...")
    try:
        run_smoke(base_url, user_id, timeout=timeout)
    except SmokeFailure as exc:
        click.echo(f"  ✗ {exc}", err=True)
        raise click.Abort()
    click.echo("Smoke OK.")


def register_commands(app):
    """Register CLI commands with the app."""
    app.cli.add_command(presence_smoke_command)


def main(argv: list[str] | None = None) -> int:
    """Entry point for python -m presence.scripts.smoke."""
    try:
        presence_smoke_command.main(args=argv, standalone_mode=False)
    except click.exceptions.Abort:
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))

from __future__ import annotations

import json
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

from rich.console import Console
from rich.markup import escape


class VercelCliError(Exception):
    pass


class ConfigError(VercelCliError):
    pass


class UsageError(VercelCliError):
    pass


class OpError(VercelCliError):
    pass


VERCEL_TOKEN = "VERCEL_TOKEN"
VERCEL_TEAM_ID = "VERCEL_TEAM_ID"
VERCEL_API_URL = "VERCEL_API_URL"
VERCEL_ENV_FILE = "VERCEL_ENV_FILE"

DEFAULT_API_URL = "https://api.vercel.com"


def _eprint(msg: str) -> None:
    print(msg, file=sys.stderr)


_ERROR_CONSOLE = Console(stderr=True, soft_wrap=True, emoji=False)


def _rich_error(msg: str) -> None:
    _ERROR_CONSOLE.print(f"[bold red]error:[/bold red] {escape(msg)}")


def _rich_notice(msg: str) -> None:
    _ERROR_CONSOLE.print(f"[yellow]note:[/yellow] {escape(msg)}")


@dataclass(frozen=True)
class GlobalOpts:
    """Per-process configuration, built once at entry and passed down explicitly."""

    token: str
    team_id: str | None = None
    api_url: str = DEFAULT_API_URL
    pretty: bool = True
    verbose: bool = False


def _env_or_none(*names: str, env: Mapping[str, str] | None = None) -> str | None:
    source = os.environ if env is None else env
    for n in names:
        v = (source.get(n) or "").strip()
        if v:
            return v
    return None


def load_global_opts(
    *,
    pretty: bool = True,
    verbose: bool = False,
    env: Mapping[str, str] | None = None,
) -> GlobalOpts:
    token = _env_or_none(VERCEL_TOKEN, env=env)
    if not token:
        raise ConfigError(f"{VERCEL_TOKEN} not found in environment variables")
    api_url = (_env_or_none(VERCEL_API_URL, env=env) or DEFAULT_API_URL).rstrip("/")
    return GlobalOpts(
        token=token,
        team_id=_env_or_none(VERCEL_TEAM_ID, env=env),
        api_url=api_url,
        pretty=pretty,
        verbose=verbose,
    )


def _require_str(val: str | None, name: str) -> str:
    v = (val or "").strip()
    if not v:
        raise UsageError(f"missing {name}")
    return v


def _parse_int(raw: str | int | None, name: str, *, default: int) -> int:
    if raw is None or str(raw).strip() == "":
        return default
    try:
        return int(str(raw).strip())
    except ValueError as e:
        raise UsageError(f"invalid {name}: expected an integer, got {raw!r}") from e


def _parse_csv(raw: str | None) -> list[str]:
    if not raw:
        return []
    out: list[str] = []
    for part in raw.split(","):
        v = part.strip()
        if v:
            out.append(v)
    return out


def _parse_repo(raw: str | None, name: str) -> str:
    repo = _require_str(raw, name)
    parts = repo.split("/")
    if len(parts) != 2 or not parts[0].strip() or not parts[1].strip():
        raise UsageError(f"invalid {name}: expected owner/repo, got {repo!r}")
    return f"{parts[0].strip()}/{parts[1].strip()}"


def _print_json(obj: Any, *, pretty: bool) -> None:
    if pretty:
        sys.stdout.write(json.dumps(obj, indent=2) + "\n")
    else:
        sys.stdout.write(json.dumps(obj, separators=(",", ":")) + "\n")


def _write_secure_text(*, path: Path, text: str) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    except OSError as e:
        raise OpError(f"failed to write {path}: {e}") from e
    try:
        os.chmod(path, 0o600)
    except OSError as e:
        raise OpError(f"failed to apply 0600 permissions to {path}: {e}") from e

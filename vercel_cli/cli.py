from __future__ import annotations

import argparse
import contextlib
import io
import sys
from typing import Any

import click
import typer
from dotenv import find_dotenv, load_dotenv

from . import __version__
from . import commands
from .cli_shared import (
    VERCEL_API_URL,
    VERCEL_ENV_FILE,
    VERCEL_TEAM_ID,
    VERCEL_TOKEN,
    GlobalOpts,
    VercelCliError,
    _eprint,
    _env_or_none,
    _rich_error,
    load_global_opts,
)
from .logging_config import configure_logging

PROG_NAME = "vercel-api"

_PROJECTS = "Projects"
_DEPLOYMENTS = "Deployments"
_DOMAINS = "Domains"
_ENV = "Environment variables"
_DNS = "DNS"
_TEAMS = "Teams"
_SECRETS = "Secrets"
_CERTS = "Certificates"
_MISC = "Misc"

_EPILOG = (
    f"Environment: {VERCEL_TOKEN} (required API token), "
    f"{VERCEL_TEAM_ID} (optional team scope), "
    f"{VERCEL_API_URL} (optional API base URL), "
    f"{VERCEL_ENV_FILE} (optional dotenv file to load)."
)


def _bootstrap_env() -> None:
    # Exported process environment wins over dotenv values.
    path = _env_or_none(VERCEL_ENV_FILE) or find_dotenv(usecwd=True)
    if path:
        load_dotenv(dotenv_path=path, override=False)


def _root_help_text(*, root_app: typer.Typer, prog_name: str) -> str:
    buf = io.StringIO()
    try:
        with contextlib.redirect_stdout(buf):
            try:
                root_app(args=["--help"], prog_name=prog_name, standalone_mode=False)
            except (typer.Exit, click.ClickException):
                pass
    except Exception:
        return ""
    return str(buf.getvalue() or "").strip()


def _render_usage_error_with_help(*, message: str, fallback_help: str = "") -> None:
    _rich_error(message)
    help_text = str(fallback_help or "").strip()
    if help_text:
        _eprint("")
        _eprint(help_text)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"{PROG_NAME} {__version__}")
        raise typer.Exit(code=0)


app = typer.Typer(
    name=PROG_NAME,
    help="Vercel REST API client: projects, deployments, domains, DNS, env vars, teams, secrets, certs.",
    epilog=_EPILOG,
    no_args_is_help=True,
    add_completion=False,
)


@app.callback()
def app_callback(
    ctx: typer.Context,
    plain_json: bool = typer.Option(False, "--plain-json", help="Emit compact JSON output"),
    verbose: bool = typer.Option(False, "--verbose", help="Log each API request/response to stderr"),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    del version
    configure_logging(verbose=verbose)
    ctx.obj = {"pretty": not plain_json, "verbose": verbose}


def _ctx_global(ctx: typer.Context) -> GlobalOpts:
    obj = ctx.obj if isinstance(ctx.obj, dict) else {}
    return load_global_opts(
        pretty=bool(obj.get("pretty", True)),
        verbose=bool(obj.get("verbose", False)),
    )


def _invoke(ctx: typer.Context, func: Any, **kwargs: Any) -> None:
    args = argparse.Namespace(**kwargs)
    try:
        g = _ctx_global(ctx)
        code = int(func(args, g))
    except VercelCliError as e:
        _rich_error(str(e))
        raise typer.Exit(code=1)

    if code:
        raise typer.Exit(code=code)


def _invoke_from_locals(
    ctx: typer.Context,
    func: Any,
    local_vars: dict[str, Any],
    *,
    drop: tuple[str, ...] = ("ctx",),
) -> None:
    _invoke(ctx, func, **{k: v for k, v in local_vars.items() if k not in drop})


# Projects


@app.command("projects", help="List all projects.", rich_help_panel=_PROJECTS)
def projects(ctx: typer.Context) -> None:
    _invoke(ctx, commands.cmd_projects)


@app.command("project", help="Get project details.", rich_help_panel=_PROJECTS)
def project(
    ctx: typer.Context,
    name_or_id: str | None = typer.Argument(None, help="Project name or ID", show_default=False),
) -> None:
    _invoke_from_locals(ctx, commands.cmd_project, locals())


@app.command("project-create", help="Create a project.", rich_help_panel=_PROJECTS)
def project_create(
    ctx: typer.Context,
    name: str | None = typer.Argument(None, help="Project name", show_default=False),
    framework: str | None = typer.Option(None, "--framework", help="Framework preset (for example: nextjs)"),
    git_repo: str | None = typer.Option(None, "--git-repo", help="GitHub repository as owner/repo"),
) -> None:
    _invoke_from_locals(ctx, commands.cmd_project_create, locals())


@app.command("project-delete", help="Delete a project.", rich_help_panel=_PROJECTS)
def project_delete(
    ctx: typer.Context,
    name_or_id: str | None = typer.Argument(None, help="Project name or ID", show_default=False),
) -> None:
    _invoke_from_locals(ctx, commands.cmd_project_delete, locals())


@app.command("project-link", help="Link a project to a GitHub repository.", rich_help_panel=_PROJECTS)
def project_link(
    ctx: typer.Context,
    name_or_id: str | None = typer.Argument(None, help="Project name or ID", show_default=False),
    repo: str | None = typer.Option(None, "--repo", help="GitHub repository as owner/repo (required)"),
) -> None:
    _invoke_from_locals(ctx, commands.cmd_project_link, locals())


# Deployments


@app.command("deployments", help="List deployments.", rich_help_panel=_DEPLOYMENTS)
def deployments(
    ctx: typer.Context,
    project: str | None = typer.Option(None, "--project", help="Filter by project name"),
    limit: str | None = typer.Option(None, "--limit", help="Max results (default: 10)"),
) -> None:
    _invoke_from_locals(ctx, commands.cmd_deployments, locals())


@app.command("deployment", help="Get deployment details.", rich_help_panel=_DEPLOYMENTS)
def deployment(
    ctx: typer.Context,
    id_or_url: str | None = typer.Argument(None, help="Deployment ID or URL", show_default=False),
) -> None:
    _invoke_from_locals(ctx, commands.cmd_deployment, locals())


@app.command("deploy", help="Trigger a deployment from a git ref.", rich_help_panel=_DEPLOYMENTS)
def deploy(
    ctx: typer.Context,
    project: str | None = typer.Argument(None, help="Project name", show_default=False),
    ref: str | None = typer.Option(None, "--ref", help="Git ref to deploy (default: main)"),
    prod: bool = typer.Option(False, "--prod", help="Deploy to production instead of preview"),
) -> None:
    _invoke_from_locals(ctx, commands.cmd_deploy, locals())


@app.command("redeploy", help="Redeploy an existing deployment.", rich_help_panel=_DEPLOYMENTS)
def redeploy(
    ctx: typer.Context,
    deployment_id: str | None = typer.Argument(None, help="Deployment ID", show_default=False),
) -> None:
    _invoke_from_locals(ctx, commands.cmd_redeploy, locals())


@app.command("promote", help="Promote a deployment to production.", rich_help_panel=_DEPLOYMENTS)
def promote(
    ctx: typer.Context,
    deployment_id: str | None = typer.Argument(None, help="Deployment ID", show_default=False),
) -> None:
    _invoke_from_locals(ctx, commands.cmd_promote, locals())


@app.command("cancel", help="Cancel a running deployment.", rich_help_panel=_DEPLOYMENTS)
def cancel(
    ctx: typer.Context,
    deployment_id: str | None = typer.Argument(None, help="Deployment ID", show_default=False),
) -> None:
    _invoke_from_locals(ctx, commands.cmd_cancel, locals())


@app.command("delete-deployment", help="Delete a deployment.", rich_help_panel=_DEPLOYMENTS)
def delete_deployment(
    ctx: typer.Context,
    deployment_id: str | None = typer.Argument(None, help="Deployment ID", show_default=False),
) -> None:
    _invoke_from_locals(ctx, commands.cmd_delete_deployment, locals())


@app.command("logs", help="Get deployment build events (single fetch).", rich_help_panel=_DEPLOYMENTS)
def logs(
    ctx: typer.Context,
    deployment_id: str | None = typer.Argument(None, help="Deployment ID", show_default=False),
    follow: bool = typer.Option(False, "--follow", help="Accepted but not supported; prints a notice"),
) -> None:
    _invoke_from_locals(ctx, commands.cmd_logs, locals())


# Domains


@app.command("domains", help="List domains.", rich_help_panel=_DOMAINS)
def domains(
    ctx: typer.Context,
    project: str | None = typer.Option(None, "--project", help="Filter by project name"),
) -> None:
    _invoke_from_locals(ctx, commands.cmd_domains, locals())


@app.command("domain-add", help="Add a domain to a project.", rich_help_panel=_DOMAINS)
def domain_add(
    ctx: typer.Context,
    project: str | None = typer.Argument(None, help="Project name or ID", show_default=False),
    domain: str | None = typer.Argument(None, help="Domain name", show_default=False),
) -> None:
    _invoke_from_locals(ctx, commands.cmd_domain_add, locals())


@app.command("domain-remove", help="Remove a domain from a project.", rich_help_panel=_DOMAINS)
def domain_remove(
    ctx: typer.Context,
    project: str | None = typer.Argument(None, help="Project name or ID", show_default=False),
    domain: str | None = typer.Argument(None, help="Domain name", show_default=False),
) -> None:
    _invoke_from_locals(ctx, commands.cmd_domain_remove, locals())


@app.command("domain-verify", help="Verify a domain.", rich_help_panel=_DOMAINS)
def domain_verify(
    ctx: typer.Context,
    domain: str | None = typer.Argument(None, help="Domain name", show_default=False),
) -> None:
    _invoke_from_locals(ctx, commands.cmd_domain_verify, locals())


@app.command("domain-check", help="Check domain status.", rich_help_panel=_DOMAINS)
def domain_check(
    ctx: typer.Context,
    domain: str | None = typer.Argument(None, help="Domain name", show_default=False),
) -> None:
    _invoke_from_locals(ctx, commands.cmd_domain_check, locals())


# Environment variables


@app.command("env-list", help="List a project's environment variables.", rich_help_panel=_ENV)
def env_list(
    ctx: typer.Context,
    project: str | None = typer.Argument(None, help="Project name or ID", show_default=False),
    env: str | None = typer.Option(None, "--env", help="Filter by target: production|preview|development"),
) -> None:
    _invoke_from_locals(ctx, commands.cmd_env_list, locals())


@app.command("env-add", help="Add an environment variable to one or more targets.", rich_help_panel=_ENV)
def env_add(
    ctx: typer.Context,
    project: str | None = typer.Argument(None, help="Project name or ID", show_default=False),
    key: str | None = typer.Argument(None, help="Variable name", show_default=False),
    value: str | None = typer.Argument(None, help="Variable value", show_default=False),
    env: str | None = typer.Option(
        None,
        "--env",
        help="Comma-separated targets (default: production,preview,development)",
    ),
) -> None:
    _invoke_from_locals(ctx, commands.cmd_env_add, locals())


@app.command("env-remove", help="Remove an environment variable from one target.", rich_help_panel=_ENV)
def env_remove(
    ctx: typer.Context,
    project: str | None = typer.Argument(None, help="Project name or ID", show_default=False),
    key: str | None = typer.Argument(None, help="Variable name", show_default=False),
    env: str | None = typer.Option(None, "--env", help="Target to remove from (default: production)"),
) -> None:
    _invoke_from_locals(ctx, commands.cmd_env_remove, locals())


@app.command("env-pull", help="Write a project's environment variables to a KEY=value file.", rich_help_panel=_ENV)
def env_pull(
    ctx: typer.Context,
    project: str | None = typer.Argument(None, help="Project name or ID", show_default=False),
    file: str | None = typer.Option(None, "--file", help="Output file, overwritten (default: .env.local)"),
) -> None:
    _invoke_from_locals(ctx, commands.cmd_env_pull, locals())


# DNS


@app.command("dns-list", help="List DNS records for a domain.", rich_help_panel=_DNS)
def dns_list(
    ctx: typer.Context,
    domain: str | None = typer.Argument(None, help="Domain name", show_default=False),
) -> None:
    _invoke_from_locals(ctx, commands.cmd_dns_list, locals())


@app.command("dns-add", help="Add a DNS record to a domain.", rich_help_panel=_DNS)
def dns_add(
    ctx: typer.Context,
    domain: str | None = typer.Argument(None, help="Domain name", show_default=False),
    record_type: str | None = typer.Option(None, "--type", help="Record type, for example A, CNAME, TXT (required)"),
    name: str | None = typer.Option(None, "--name", help="Record name, for example @ or www (required)"),
    value: str | None = typer.Option(None, "--value", help="Record value (required)"),
    ttl: str | None = typer.Option(None, "--ttl", help="Time to live in seconds (default: 3600)"),
) -> None:
    _invoke_from_locals(ctx, commands.cmd_dns_add, locals())


@app.command("dns-remove", help="Remove a DNS record by ID.", rich_help_panel=_DNS)
def dns_remove(
    ctx: typer.Context,
    record_id: str | None = typer.Argument(None, help="DNS record ID", show_default=False),
) -> None:
    _invoke_from_locals(ctx, commands.cmd_dns_remove, locals())


# Teams and user


@app.command("teams", help="List teams.", rich_help_panel=_TEAMS)
def teams(ctx: typer.Context) -> None:
    _invoke(ctx, commands.cmd_teams)


@app.command("team", help="Get team details.", rich_help_panel=_TEAMS)
def team(
    ctx: typer.Context,
    team_id: str | None = typer.Argument(None, help="Team ID", show_default=False),
) -> None:
    _invoke_from_locals(ctx, commands.cmd_team, locals())


@app.command("user", help="Show the authenticated user.", rich_help_panel=_TEAMS)
def user(ctx: typer.Context) -> None:
    _invoke(ctx, commands.cmd_user)


# Secrets


@app.command("secrets", help="List secrets (legacy API).", rich_help_panel=_SECRETS)
def secrets(ctx: typer.Context) -> None:
    _invoke(ctx, commands.cmd_secrets)


@app.command("secret-add", help="Create a secret (legacy API).", rich_help_panel=_SECRETS)
def secret_add(
    ctx: typer.Context,
    name: str | None = typer.Argument(None, help="Secret name", show_default=False),
    value: str | None = typer.Argument(None, help="Secret value", show_default=False),
) -> None:
    _invoke_from_locals(ctx, commands.cmd_secret_add, locals())


@app.command("secret-remove", help="Delete a secret (legacy API).", rich_help_panel=_SECRETS)
def secret_remove(
    ctx: typer.Context,
    name: str | None = typer.Argument(None, help="Secret name", show_default=False),
) -> None:
    _invoke_from_locals(ctx, commands.cmd_secret_remove, locals())


# Certificates


@app.command("certs", help="List certificates.", rich_help_panel=_CERTS)
def certs(
    ctx: typer.Context,
    domain: str | None = typer.Option(None, "--domain", help="Filter by domain"),
) -> None:
    _invoke_from_locals(ctx, commands.cmd_certs, locals())


@app.command("cert", help="Get certificate details.", rich_help_panel=_CERTS)
def cert(
    ctx: typer.Context,
    cert_id: str | None = typer.Argument(None, help="Certificate ID", show_default=False),
) -> None:
    _invoke_from_locals(ctx, commands.cmd_cert, locals())


# Misc


@app.command("usage", help="Show current billing usage.", rich_help_panel=_MISC)
def usage(ctx: typer.Context) -> None:
    _invoke(ctx, commands.cmd_usage)


@app.command("aliases", help="List aliases.", rich_help_panel=_MISC)
def aliases(
    ctx: typer.Context,
    project: str | None = typer.Option(None, "--project", help="Filter by project name"),
) -> None:
    _invoke_from_locals(ctx, commands.cmd_aliases, locals())


def main(argv: list[str] | None = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)
    if not argv:
        _render_usage_error_with_help(
            message="missing command",
            fallback_help=_root_help_text(root_app=app, prog_name=PROG_NAME),
        )
        return 1
    _bootstrap_env()
    try:
        result = app(args=argv, prog_name=PROG_NAME, standalone_mode=False)
        if result is None:
            return 0
        return int(result)
    except typer.Exit as e:
        return int(e.exit_code)
    except click.UsageError as e:
        _render_usage_error_with_help(
            message=e.format_message(),
            fallback_help=_root_help_text(root_app=app, prog_name=PROG_NAME),
        )
        return 1
    except click.ClickException as e:
        _rich_error(e.format_message())
        return 1
    except VercelCliError as e:
        _rich_error(str(e))
        return 1


if __name__ == "__main__":
    raise SystemExit(main())

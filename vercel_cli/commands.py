from __future__ import annotations

import argparse
from pathlib import Path
from typing import Any, Callable

from . import endpoints
from .cli_shared import (
    GlobalOpts,
    OpError,
    UsageError,
    _parse_csv,
    _parse_int,
    _parse_repo,
    _print_json,
    _require_str,
    _rich_notice,
    _write_secure_text,
)
from .endpoints import ApiRequest
from .http_client import VercelClient, build_client


def _send_and_print(g: GlobalOpts, req: ApiRequest) -> int:
    out = build_client(g).send(req)
    _print_json(out, pretty=g.pretty)
    return 0


def _resolve_project_id(client: VercelClient, project: str) -> str:
    data = client.send(endpoints.project_get(project))
    project_id = str(data.get("id") or "").strip() if isinstance(data, dict) else ""
    if not project_id:
        raise OpError(f"project not found: {project}")
    return project_id


def _run_for_project(
    client: VercelClient,
    project: str,
    build: Callable[[str], ApiRequest],
) -> Any:
    """Resolve ``project`` to its id, then send the request ``build`` makes from it.

    A failed lookup raises before ``build`` is called, so the action request is
    never constructed.
    """
    project_id = _resolve_project_id(client, project)
    return client.send(build(project_id))


# Projects


def cmd_projects(args: argparse.Namespace, g: GlobalOpts) -> int:
    del args
    return _send_and_print(g, endpoints.projects_list())


def cmd_project(args: argparse.Namespace, g: GlobalOpts) -> int:
    name_or_id = _require_str(args.name_or_id, "project name or ID")
    return _send_and_print(g, endpoints.project_get(name_or_id))


def cmd_project_create(args: argparse.Namespace, g: GlobalOpts) -> int:
    name = _require_str(args.name, "project name")
    git_repo = _parse_repo(args.git_repo, "--git-repo") if args.git_repo else None
    req = endpoints.project_create(name, framework=(args.framework or "").strip() or None, git_repo=git_repo)
    return _send_and_print(g, req)


def cmd_project_delete(args: argparse.Namespace, g: GlobalOpts) -> int:
    name_or_id = _require_str(args.name_or_id, "project name or ID")
    return _send_and_print(g, endpoints.project_delete(name_or_id))


def cmd_project_link(args: argparse.Namespace, g: GlobalOpts) -> int:
    name_or_id = _require_str(args.name_or_id, "project name or ID")
    repo = _parse_repo(args.repo, "--repo flag")
    return _send_and_print(g, endpoints.project_link(name_or_id, repo))


# Deployments


def cmd_deployments(args: argparse.Namespace, g: GlobalOpts) -> int:
    limit = _parse_int(args.limit, "--limit", default=endpoints.DEPLOYMENTS_LIMIT_DEFAULT)
    project = (args.project or "").strip() or None
    return _send_and_print(g, endpoints.deployments_list(project=project, limit=limit))


def cmd_deployment(args: argparse.Namespace, g: GlobalOpts) -> int:
    id_or_url = _require_str(args.id_or_url, "deployment ID or URL")
    return _send_and_print(g, endpoints.deployment_get(id_or_url))


def cmd_deploy(args: argparse.Namespace, g: GlobalOpts) -> int:
    project = _require_str(args.project, "project name")
    ref = (args.ref or "").strip() or endpoints.DEPLOY_REF_DEFAULT
    return _send_and_print(g, endpoints.deployment_create(project, ref=ref, prod=bool(args.prod)))


def cmd_redeploy(args: argparse.Namespace, g: GlobalOpts) -> int:
    deployment_id = _require_str(args.deployment_id, "deployment ID")
    return _send_and_print(g, endpoints.deployment_redeploy(deployment_id))


def cmd_promote(args: argparse.Namespace, g: GlobalOpts) -> int:
    deployment_id = _require_str(args.deployment_id, "deployment ID")
    return _send_and_print(g, endpoints.deployment_promote(deployment_id))


def cmd_cancel(args: argparse.Namespace, g: GlobalOpts) -> int:
    deployment_id = _require_str(args.deployment_id, "deployment ID")
    return _send_and_print(g, endpoints.deployment_cancel(deployment_id))


def cmd_delete_deployment(args: argparse.Namespace, g: GlobalOpts) -> int:
    deployment_id = _require_str(args.deployment_id, "deployment ID")
    return _send_and_print(g, endpoints.deployment_delete(deployment_id))


def cmd_logs(args: argparse.Namespace, g: GlobalOpts) -> int:
    deployment_id = _require_str(args.deployment_id, "deployment ID")
    code = _send_and_print(g, endpoints.deployment_events(deployment_id))
    if args.follow:
        _rich_notice("--follow is not supported; printed a single snapshot of the deployment events")
    return code


# Domains


def cmd_domains(args: argparse.Namespace, g: GlobalOpts) -> int:
    project = (args.project or "").strip() or None
    return _send_and_print(g, endpoints.domains_list(project=project))


def cmd_domain_add(args: argparse.Namespace, g: GlobalOpts) -> int:
    project = _require_str(args.project, "project name or ID")
    domain = _require_str(args.domain, "domain")
    out = _run_for_project(
        build_client(g),
        project,
        lambda project_id: endpoints.project_domain_add(project_id, domain),
    )
    _print_json(out, pretty=g.pretty)
    return 0


def cmd_domain_remove(args: argparse.Namespace, g: GlobalOpts) -> int:
    project = _require_str(args.project, "project name or ID")
    domain = _require_str(args.domain, "domain")
    out = _run_for_project(
        build_client(g),
        project,
        lambda project_id: endpoints.project_domain_remove(project_id, domain),
    )
    _print_json(out, pretty=g.pretty)
    return 0


def cmd_domain_verify(args: argparse.Namespace, g: GlobalOpts) -> int:
    domain = _require_str(args.domain, "domain")
    return _send_and_print(g, endpoints.domain_verify(domain))


def cmd_domain_check(args: argparse.Namespace, g: GlobalOpts) -> int:
    domain = _require_str(args.domain, "domain")
    return _send_and_print(g, endpoints.domain_get(domain))


# Environment variables


def _env_items(payload: Any) -> list[dict[str, Any]]:
    envs = payload.get("envs") if isinstance(payload, dict) else None
    if not isinstance(envs, list):
        raise OpError("unexpected environment variable list response: missing 'envs'")
    return [e for e in envs if isinstance(e, dict)]


def _env_targets(item: dict[str, Any]) -> list[str]:
    target = item.get("target")
    if isinstance(target, str):
        return [target]
    if isinstance(target, list):
        return [str(t) for t in target]
    return []


def _find_env_id(items: list[dict[str, Any]], *, key: str, target: str) -> str | None:
    for item in items:
        if str(item.get("key") or "") != key:
            continue
        targets = _env_targets(item)
        if targets and target not in targets:
            continue
        env_id = str(item.get("id") or "").strip()
        if env_id:
            return env_id
    return None


def cmd_env_list(args: argparse.Namespace, g: GlobalOpts) -> int:
    project = _require_str(args.project, "project name")
    target = (args.env or "").strip() or None
    out = _run_for_project(
        build_client(g),
        project,
        lambda project_id: endpoints.project_env_list(project_id, target=target),
    )
    _print_json(out, pretty=g.pretty)
    return 0


def cmd_env_add(args: argparse.Namespace, g: GlobalOpts) -> int:
    project = _require_str(args.project, "project name")
    key = _require_str(args.key, "environment variable key")
    if args.value is None:
        raise UsageError("missing environment variable value")
    targets = _parse_csv(args.env if args.env is not None else endpoints.ENV_TARGETS_ALL)
    if not targets:
        raise UsageError("invalid --env: expected a comma-separated list of targets")
    out = _run_for_project(
        build_client(g),
        project,
        lambda project_id: endpoints.project_env_add(project_id, key, args.value, targets),
    )
    _print_json(out, pretty=g.pretty)
    return 0


def cmd_env_remove(args: argparse.Namespace, g: GlobalOpts) -> int:
    project = _require_str(args.project, "project name")
    key = _require_str(args.key, "environment variable key")
    target = (args.env or "").strip() or endpoints.ENV_TARGET_DEFAULT
    client = build_client(g)
    project_id = _resolve_project_id(client, project)
    items = _env_items(client.send(endpoints.project_env_list(project_id)))
    env_id = _find_env_id(items, key=key, target=target)
    if env_id is None:
        _rich_notice(f"Environment variable '{key}' not found (target: {target})")
        return 0
    out = client.send(endpoints.project_env_remove(project_id, env_id))
    _print_json(out, pretty=g.pretty)
    return 0


def cmd_env_pull(args: argparse.Namespace, g: GlobalOpts) -> int:
    project = _require_str(args.project, "project name")
    file = (args.file or "").strip() or endpoints.ENV_PULL_FILE_DEFAULT
    items = _env_items(_run_for_project(build_client(g), project, endpoints.project_env_list))
    lines = [
        f"{item['key']}={'' if item.get('value') is None else item['value']}"
        for item in items
        if item.get("key")
    ]
    path = Path(file)
    _write_secure_text(path=path, text="\n".join(lines) + ("\n" if lines else ""))
    _print_json(
        {
            "message": f"Environment variables written to {file}",
            "count": len(lines),
            "file": str(path.resolve()),
        },
        pretty=g.pretty,
    )
    return 0


# DNS


def cmd_dns_list(args: argparse.Namespace, g: GlobalOpts) -> int:
    domain = _require_str(args.domain, "domain")
    return _send_and_print(g, endpoints.dns_records_list(domain))


def cmd_dns_add(args: argparse.Namespace, g: GlobalOpts) -> int:
    domain = _require_str(args.domain, "domain")
    record_type = _require_str(args.record_type, "--type flag")
    name = _require_str(args.name, "--name flag")
    value = _require_str(args.value, "--value flag")
    ttl = _parse_int(args.ttl, "--ttl", default=endpoints.DNS_TTL_DEFAULT)
    req = endpoints.dns_record_add(domain, record_type=record_type, name=name, value=value, ttl=ttl)
    return _send_and_print(g, req)


def cmd_dns_remove(args: argparse.Namespace, g: GlobalOpts) -> int:
    record_id = _require_str(args.record_id, "DNS record ID")
    return _send_and_print(g, endpoints.dns_record_remove(record_id))


# Teams and user


def cmd_teams(args: argparse.Namespace, g: GlobalOpts) -> int:
    del args
    return _send_and_print(g, endpoints.teams_list())


def cmd_team(args: argparse.Namespace, g: GlobalOpts) -> int:
    team_id = _require_str(args.team_id, "team ID")
    return _send_and_print(g, endpoints.team_get(team_id))


def cmd_user(args: argparse.Namespace, g: GlobalOpts) -> int:
    del args
    return _send_and_print(g, endpoints.user_get())


# Secrets


def cmd_secrets(args: argparse.Namespace, g: GlobalOpts) -> int:
    del args
    return _send_and_print(g, endpoints.secrets_list())


def cmd_secret_add(args: argparse.Namespace, g: GlobalOpts) -> int:
    name = _require_str(args.name, "secret name")
    if args.value is None:
        raise UsageError("missing secret value")
    return _send_and_print(g, endpoints.secret_add(name, args.value))


def cmd_secret_remove(args: argparse.Namespace, g: GlobalOpts) -> int:
    name = _require_str(args.name, "secret name")
    return _send_and_print(g, endpoints.secret_remove(name))


# Certificates


def cmd_certs(args: argparse.Namespace, g: GlobalOpts) -> int:
    domain = (args.domain or "").strip() or None
    return _send_and_print(g, endpoints.certs_list(domain=domain))


def cmd_cert(args: argparse.Namespace, g: GlobalOpts) -> int:
    cert_id = _require_str(args.cert_id, "certificate ID")
    return _send_and_print(g, endpoints.cert_get(cert_id))


# Misc


def cmd_usage(args: argparse.Namespace, g: GlobalOpts) -> int:
    del args
    return _send_and_print(g, endpoints.billing_usage())


def cmd_aliases(args: argparse.Namespace, g: GlobalOpts) -> int:
    project = (args.project or "").strip() or None
    return _send_and_print(g, endpoints.aliases_list(project=project))

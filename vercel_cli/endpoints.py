"""Request builders for every supported Vercel API operation.

Each builder is pure: it takes already-validated values and returns an
``ApiRequest`` naming the method, versioned path, query and JSON body. The
paths are Vercel's contract and are reproduced as-is.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any
from urllib.parse import quote, urlparse

ENV_TARGETS_ALL = "production,preview,development"
ENV_TARGET_DEFAULT = "production"
DEPLOYMENTS_LIMIT_DEFAULT = 10
DNS_TTL_DEFAULT = 3600
DEPLOY_REF_DEFAULT = "main"
ENV_PULL_FILE_DEFAULT = ".env.local"


@dataclass(frozen=True)
class ApiRequest:
    method: str
    path: str
    query: dict[str, Any] = field(default_factory=dict)
    body: dict[str, Any] | None = None


def _seg(value: str) -> str:
    return quote(str(value), safe="")


def _git_repository(repo: str) -> dict[str, str]:
    return {"type": "github", "repo": repo}


# Projects


def projects_list() -> ApiRequest:
    return ApiRequest("GET", "/v10/projects")


def project_get(name_or_id: str) -> ApiRequest:
    return ApiRequest("GET", f"/v9/projects/{_seg(name_or_id)}")


def project_create(name: str, *, framework: str | None = None, git_repo: str | None = None) -> ApiRequest:
    body: dict[str, Any] = {"name": name}
    if framework:
        body["framework"] = framework
    if git_repo:
        body["gitRepository"] = _git_repository(git_repo)
    return ApiRequest("POST", "/v10/projects", body=body)


def project_delete(name_or_id: str) -> ApiRequest:
    return ApiRequest("DELETE", f"/v9/projects/{_seg(name_or_id)}")


def project_link(name_or_id: str, repo: str) -> ApiRequest:
    return ApiRequest(
        "PATCH",
        f"/v9/projects/{_seg(name_or_id)}",
        body={"gitRepository": _git_repository(repo)},
    )


# Deployments


def deployment_ref(id_or_url: str) -> str:
    """Reduce a deployment URL or hostname to its first hostname label."""
    raw = id_or_url.strip()
    if "." not in raw:
        return raw
    host = urlparse(raw if "//" in raw else f"//{raw}").hostname or raw
    return host.split(".")[0]


def deployments_list(*, project: str | None = None, limit: int = DEPLOYMENTS_LIMIT_DEFAULT) -> ApiRequest:
    return ApiRequest("GET", "/v6/deployments", query={"limit": limit, "projectName": project})


def deployment_get(id_or_url: str) -> ApiRequest:
    return ApiRequest("GET", f"/v13/deployments/{_seg(deployment_ref(id_or_url))}")


def deployment_create(project: str, *, ref: str = DEPLOY_REF_DEFAULT, prod: bool = False) -> ApiRequest:
    return ApiRequest(
        "POST",
        "/v13/deployments",
        body={
            "name": project,
            "target": "production" if prod else "preview",
            "gitSource": {"type": "github", "ref": ref},
        },
    )


def deployment_redeploy(deployment_id: str) -> ApiRequest:
    return ApiRequest("POST", f"/v13/deployments/{_seg(deployment_id)}/redeploy")


def deployment_promote(deployment_id: str) -> ApiRequest:
    return ApiRequest("PATCH", f"/v13/deployments/{_seg(deployment_id)}", body={"target": "production"})


def deployment_cancel(deployment_id: str) -> ApiRequest:
    return ApiRequest("PATCH", f"/v13/deployments/{_seg(deployment_id)}", body={"state": "CANCELED"})


def deployment_delete(deployment_id: str) -> ApiRequest:
    return ApiRequest("DELETE", f"/v13/deployments/{_seg(deployment_id)}")


def deployment_events(deployment_id: str) -> ApiRequest:
    return ApiRequest("GET", f"/v13/deployments/{_seg(deployment_id)}/events")


# Domains


def domains_list(*, project: str | None = None) -> ApiRequest:
    return ApiRequest("GET", "/v5/domains", query={"projectName": project})


def project_domain_add(project_id: str, domain: str) -> ApiRequest:
    return ApiRequest("POST", f"/v10/projects/{_seg(project_id)}/domains", body={"name": domain})


def project_domain_remove(project_id: str, domain: str) -> ApiRequest:
    return ApiRequest("DELETE", f"/v10/projects/{_seg(project_id)}/domains/{_seg(domain)}")


def domain_verify(domain: str) -> ApiRequest:
    return ApiRequest("POST", f"/v5/domains/{_seg(domain)}/verify")


def domain_get(domain: str) -> ApiRequest:
    return ApiRequest("GET", f"/v5/domains/{_seg(domain)}")


# Environment variables


def project_env_list(project_id: str, *, target: str | None = None) -> ApiRequest:
    return ApiRequest("GET", f"/v10/projects/{_seg(project_id)}/env", query={"target": target})


def project_env_add(project_id: str, key: str, value: str, targets: list[str]) -> ApiRequest:
    return ApiRequest(
        "POST",
        f"/v10/projects/{_seg(project_id)}/env",
        body={"key": key, "value": value, "target": list(targets)},
    )


def project_env_remove(project_id: str, env_id: str) -> ApiRequest:
    return ApiRequest("DELETE", f"/v10/projects/{_seg(project_id)}/env/{_seg(env_id)}")


# DNS


def dns_records_list(domain: str) -> ApiRequest:
    return ApiRequest("GET", f"/v4/domains/{_seg(domain)}/records")


def dns_record_add(domain: str, *, record_type: str, name: str, value: str, ttl: int = DNS_TTL_DEFAULT) -> ApiRequest:
    return ApiRequest(
        "POST",
        f"/v2/domains/{_seg(domain)}/records",
        body={"type": record_type, "name": name, "value": value, "ttl": ttl},
    )


def dns_record_remove(record_id: str) -> ApiRequest:
    # Record deletion is addressed by id alone; the list/add routes are domain-scoped.
    return ApiRequest("DELETE", f"/v2/domains/records/{_seg(record_id)}")


# Teams and user


def teams_list() -> ApiRequest:
    return ApiRequest("GET", "/v2/teams")


def team_get(team_id: str) -> ApiRequest:
    return ApiRequest("GET", f"/v2/teams/{_seg(team_id)}")


def user_get() -> ApiRequest:
    return ApiRequest("GET", "/v2/user")


# Secrets (legacy)


def secrets_list() -> ApiRequest:
    return ApiRequest("GET", "/v3/secrets")


def secret_add(name: str, value: str) -> ApiRequest:
    return ApiRequest("POST", "/v3/secrets", body={"name": name, "value": value})


def secret_remove(name: str) -> ApiRequest:
    return ApiRequest("DELETE", f"/v3/secrets/{_seg(name)}")


# Certificates


def certs_list(*, domain: str | None = None) -> ApiRequest:
    return ApiRequest("GET", "/v5/certs", query={"domain": domain})


def cert_get(cert_id: str) -> ApiRequest:
    return ApiRequest("GET", f"/v5/certs/{_seg(cert_id)}")


# Misc


def billing_usage() -> ApiRequest:
    return ApiRequest("GET", "/v1/billing/usage")


def aliases_list(*, project: str | None = None) -> ApiRequest:
    return ApiRequest("GET", "/v4/aliases", query={"projectName": project})

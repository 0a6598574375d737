from __future__ import annotations

import json
from http import HTTPStatus
from typing import Any, Callable
from urllib.error import HTTPError, URLError
from urllib.parse import urlencode
from urllib.request import Request, urlopen

import structlog

from . import __version__
from .cli_shared import GlobalOpts, OpError
from .endpoints import ApiRequest

logger = structlog.get_logger(__name__)

Transport = Callable[..., tuple[int, dict[str, str], bytes]]


def _http_request(
    *,
    method: str,
    url: str,
    headers: dict[str, str],
    body: bytes | None = None,
    timeout_seconds: int = 30,
) -> tuple[int, dict[str, str], bytes]:
    req = Request(url, data=body, method=str(method).upper())
    for k, v in headers.items():
        req.add_header(k, v)
    try:
        with urlopen(req, timeout=timeout_seconds) as resp:
            status = getattr(resp, "status", 200)
            hdrs = {k.lower(): v for k, v in dict(resp.headers).items()}
            data = resp.read()
            return int(status), hdrs, data
    except HTTPError as e:
        hdrs = {k.lower(): v for k, v in dict(e.headers or {}).items()}
        data = e.read() if hasattr(e, "read") else b""
        return int(getattr(e, "code", 0) or 0), hdrs, data
    except URLError as e:
        raise OpError(f"request failed: {e.reason}") from e


def _status_line(status: int) -> str:
    try:
        phrase = HTTPStatus(status).phrase
    except ValueError:
        phrase = "Unknown Status"
    return f"HTTP {status}: {phrase}"


def _error_message(status: int, parsed: Any) -> str:
    if isinstance(parsed, dict):
        err = parsed.get("error")
        if isinstance(err, dict):
            msg = str(err.get("message") or "").strip()
            if msg:
                return msg
        for key in ("message", "error"):
            val = parsed.get(key)
            if isinstance(val, str) and val.strip():
                return val.strip()
    return _status_line(status)


def _parse_body(data: bytes) -> Any:
    text = data.decode("utf-8", errors="replace")
    if not text.strip():
        return {}
    try:
        return json.loads(text)
    except ValueError:
        return {"raw": text}


class VercelClient:
    """Sends ``ApiRequest`` descriptors to the Vercel API.

    Every request carries the bearer token and, when configured, the
    ``teamId`` scope query parameter.
    """

    def __init__(self, g: GlobalOpts, *, transport: Transport | None = None) -> None:
        self.g = g
        self._transport = transport

    def _headers(self, *, has_body: bool) -> dict[str, str]:
        headers = {
            "authorization": f"Bearer {self.g.token}",
            "accept": "application/json",
            "user-agent": f"vercel-api-cli/{__version__}",
        }
        if has_body:
            headers["content-type"] = "application/json"
        return headers

    def url_for(self, req: ApiRequest) -> str:
        p = req.path if req.path.startswith("/") else f"/{req.path}"
        query = {
            k: str(v)
            for k, v in req.query.items()
            if v is not None and str(v).strip() != ""
        }
        if self.g.team_id:
            query["teamId"] = self.g.team_id
        url = f"{self.g.api_url.rstrip('/')}{p}"
        if query:
            url += f"?{urlencode(query)}"
        return url

    def send(self, req: ApiRequest) -> Any:
        transport = self._transport or _http_request
        body_bytes = None
        if req.body is not None:
            body_bytes = json.dumps(req.body, separators=(",", ":")).encode("utf-8")

        logger.debug("api request", method=req.method, path=req.path)
        try:
            status, _hdrs, data = transport(
                method=req.method,
                url=self.url_for(req),
                headers=self._headers(has_body=body_bytes is not None),
                body=body_bytes,
            )
        except OpError as e:
            logger.debug("api request failed", method=req.method, path=req.path, error=str(e))
            raise
        logger.debug("api response", method=req.method, path=req.path, status_code=status)

        parsed = _parse_body(data)
        if status < 200 or status >= 300:
            raise OpError(_error_message(status, parsed))
        return parsed


def build_client(g: GlobalOpts) -> VercelClient:
    return VercelClient(g)

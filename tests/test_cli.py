from __future__ import annotations

import json
import re
from collections.abc import Iterable

import click
import pytest
import typer
from typer.testing import CliRunner

from vercel_cli import __version__
from vercel_cli.cli import app, main

_ANSI_RE = re.compile(r"\x1b\[[0-9;?]*[ -/]*[@-~]")

runner = CliRunner()

EXPECTED_COMMANDS = {
    "projects", "project", "project-create", "project-delete", "project-link",
    "deployments", "deployment", "deploy", "redeploy", "promote", "cancel", "delete-deployment", "logs",
    "domains", "domain-add", "domain-remove", "domain-verify", "domain-check",
    "env-list", "env-add", "env-remove", "env-pull",
    "dns-list", "dns-add", "dns-remove",
    "teams", "team", "user",
    "secrets", "secret-add", "secret-remove",
    "certs", "cert",
    "usage", "aliases",
}


def _plain(s: str) -> str:
    return _ANSI_RE.sub("", s)


def _walk_click_commands(root: click.Command) -> Iterable[tuple[str, click.Command]]:
    stack: list[tuple[str, click.Command]] = [("", root)]
    while stack:
        base, cmd = stack.pop()
        if isinstance(cmd, click.Group):
            for name, sub in cmd.commands.items():
                path = f"{base} {name}".strip()
                yield path, sub
                stack.append((path, sub))


def test_typer_builds_a_click_group():
    root = typer.main.get_command(app)
    assert isinstance(root, click.Group)


def test_command_set_is_closed_and_documented():
    found = dict(_walk_click_commands(typer.main.get_command(app)))
    assert set(found) == EXPECTED_COMMANDS
    for path, cmd in found.items():
        assert str(cmd.help or "").strip(), f"missing help text for command: {path}"


@pytest.mark.parametrize(
    "argv",
    [
        ["projects"],
        ["project"],
        ["env-add", "site", "K", "v"],
        ["dns-remove"],
        ["logs", "dpl_1", "--follow"],
    ],
)
def test_missing_token_aborts_before_any_request(monkeypatch, fake_transport, argv):
    monkeypatch.delenv("VERCEL_TOKEN", raising=False)

    result = runner.invoke(app, argv)

    assert result.exit_code == 1
    assert "VERCEL_TOKEN not found" in _plain(result.stderr)
    assert result.stdout == ""
    assert fake_transport.calls == []


def test_projects_prints_pretty_response(vercel_env, fake_transport):
    payload = {"projects": [{"id": "prj_1", "name": "site"}], "pagination": {"count": 1}}
    fake_transport.queue(200, payload)

    result = runner.invoke(app, ["projects"])

    assert result.exit_code == 0
    assert json.loads(result.stdout) == payload
    assert result.stdout.startswith("{\n  ")
    assert fake_transport.calls[0]["headers"]["authorization"] == "Bearer tok-test"


def test_plain_json_emits_compact_output(vercel_env, fake_transport):
    fake_transport.queue(200, {"user": {"username": "ada"}})
    result = runner.invoke(app, ["--plain-json", "user"])
    assert result.exit_code == 0
    assert result.stdout == '{"user":{"username":"ada"}}\n'


def test_remote_error_message_is_printed_verbatim(vercel_env, fake_transport):
    fake_transport.queue(404, {"error": {"code": "not_found", "message": "The project \"ghost\" was not found"}})

    result = runner.invoke(app, ["project", "ghost"])

    assert result.exit_code == 1
    assert result.stdout == ""
    assert 'The project "ghost" was not found' in _plain(result.stderr)


def test_remote_error_message_keeps_emoji_codes(vercel_env, fake_transport):
    fake_transport.queue(400, {"error": {"message": "bad value :100: for field"}})

    result = runner.invoke(app, ["project", "site"])

    assert result.exit_code == 1
    assert _plain(result.stderr) == "error: bad value :100: for field\n"


def test_missing_argument_is_validation_error_without_calls(vercel_env, fake_transport):
    result = runner.invoke(app, ["domain-add", "site"])
    assert result.exit_code == 1
    assert "missing domain" in _plain(result.stderr)
    assert fake_transport.calls == []


def test_env_add_flag_splits_targets(vercel_env, fake_transport):
    fake_transport.queue(200, {"id": "prj_1"}).queue(200, {"created": []})

    result = runner.invoke(app, ["env-add", "site", "API_KEY", "v1", "--env", "production,preview"])

    assert result.exit_code == 0
    assert fake_transport.methods() == ["GET", "POST"]
    assert fake_transport.calls[1]["body"]["target"] == ["production", "preview"]


def test_dns_add_flags_and_default_ttl(vercel_env, fake_transport):
    result = runner.invoke(
        app,
        ["dns-add", "example.com", "--type", "CNAME", "--name", "www", "--value", "cname.vercel-dns.com"],
    )
    assert result.exit_code == 0
    assert fake_transport.calls[0]["body"]["ttl"] == 3600


def test_env_remove_not_found_is_not_fatal(vercel_env, fake_transport):
    fake_transport.queue(200, {"id": "prj_1"}).queue(200, {"envs": []})

    result = runner.invoke(app, ["env-remove", "site", "MISSING"])

    assert result.exit_code == 0
    assert result.stdout == ""
    assert "not found" in _plain(result.stderr)
    assert "DELETE" not in fake_transport.methods()


def test_version_flag():
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert f"vercel-api {__version__}" in result.stdout


def test_main_unknown_command_prints_help_to_stderr(vercel_env, fake_transport, capsys):
    rc = main(["bogus"])

    captured = capsys.readouterr()
    assert rc == 1
    assert captured.out == ""
    err = _plain(captured.err)
    assert "No such command" in err
    assert "deployments" in err
    assert fake_transport.calls == []


def test_main_global_option_without_command_prints_help(vercel_env, fake_transport, capsys):
    rc = main(["--verbose"])

    captured = capsys.readouterr()
    assert rc == 1
    assert captured.out == ""
    err = _plain(captured.err)
    assert "Missing command" in err
    assert "deployments" in err
    assert fake_transport.calls == []


def test_main_env_pull_into_directory_is_single_error_line(vercel_env, fake_transport, capsys):
    (vercel_env / "adir").mkdir()
    fake_transport.queue(200, {"id": "prj_1"}).queue(200, {"envs": [{"key": "A", "value": "1"}]})

    rc = main(["env-pull", "site", "--file", "adir"])

    captured = capsys.readouterr()
    assert rc == 1
    assert captured.out == ""
    err_lines = _plain(captured.err).splitlines()
    assert len(err_lines) == 1
    assert err_lines[0].startswith("error: failed to write adir")


def test_main_without_command_prints_help(vercel_env, capsys):
    rc = main([])
    captured = capsys.readouterr()
    assert rc == 1
    assert captured.out == ""
    assert "env-pull" in _plain(captured.err)


def test_main_returns_zero_on_success(vercel_env, fake_transport, capsys):
    fake_transport.queue(200, {"teams": []})
    assert main(["teams"]) == 0
    assert json.loads(capsys.readouterr().out) == {"teams": []}


def test_main_loads_token_from_env_file(vercel_env, monkeypatch, fake_transport, capsys):
    env_file = vercel_env / "vercel.env"
    env_file.write_text("VERCEL_TOKEN=from-file\nVERCEL_TEAM_ID=team_file\n", encoding="utf-8")
    monkeypatch.delenv("VERCEL_TOKEN", raising=False)
    monkeypatch.setenv("VERCEL_TEAM_ID", "team_exported")
    monkeypatch.setenv("VERCEL_ENV_FILE", str(env_file))

    assert main(["user"]) == 0

    capsys.readouterr()
    call = fake_transport.calls[0]
    assert call["headers"]["authorization"] == "Bearer from-file"
    assert call["query"]["teamId"] == "team_exported"


def test_main_missing_token_exits_nonzero(vercel_env, monkeypatch, fake_transport, capsys):
    monkeypatch.delenv("VERCEL_TOKEN", raising=False)
    assert main(["usage"]) == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "VERCEL_TOKEN" in _plain(captured.err)
    assert fake_transport.calls == []

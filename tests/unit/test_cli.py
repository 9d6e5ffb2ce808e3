from phonebook import cli
from phonebook.core.security import verify_access_token


def test_token_command_prints_verifiable_token(capsys):
    cli.main(["token", "65f0aa", "--username", "ada"])

    token = capsys.readouterr().out.strip()
    payload = verify_access_token(token)
    assert payload == {"id": "65f0aa", "username": "ada"}


def test_serve_command_runs_uvicorn(monkeypatch):
    calls = []
    monkeypatch.setattr(cli.uvicorn, "run", lambda app, host, port: calls.append((app, host, port)))

    cli.main(["serve", "--port", "9000"])

    assert calls == [("phonebook.api.main:app", "0.0.0.0", 9000)]

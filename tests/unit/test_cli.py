from __future__ import annotations

import json

import pytest
import requests

from aw_client import cli
from aw_client.blocking import BlockingClient


@pytest.fixture
def patched_cli(monkeypatch, asgi_adapter):
    created: list[BlockingClient] = []

    class RoutedClient(BlockingClient):
        def __init__(self, host, port, name, **kwargs):
            session = requests.Session()
            session.mount("http://", asgi_adapter)
            super().__init__(host, port, name, session=session, **kwargs)
            created.append(self)

    monkeypatch.setattr(cli, "BlockingClient", RoutedClient)
    for name in ("AW_SERVER_HOST", "AW_SERVER_PORT", "AW_TESTING", "AW_CLIENT_TIMEOUT"):
        monkeypatch.delenv(name, raising=False)
    return created


def test_info_uses_default_port(patched_cli, capsys):
    assert cli.main(["info"]) == 0

    assert json.loads(capsys.readouterr().out)["hostname"] == "fake-host"
    assert patched_cli[0].baseurl == "http://127.0.0.1:5600"


def test_testing_flag_selects_testing_port(patched_cli, capsys):
    assert cli.main(["--testing", "buckets"]) == 0

    assert json.loads(capsys.readouterr().out) == {}
    assert patched_cli[0].baseurl == "http://127.0.0.1:5666"


def test_heartbeat_then_events_and_count(patched_cli, capsys):
    client = cli.BlockingClient("127.0.0.1", 5600, "setup")
    client.create_bucket_simple("test", "test-type")

    assert cli.main(["heartbeat", "test", "--data", '{"app": "shell"}']) == 0
    capsys.readouterr()

    assert cli.main(["events", "test", "--limit", "5"]) == 0
    events = json.loads(capsys.readouterr().out)
    assert [e["data"] for e in events] == [{"app": "shell"}]

    assert cli.main(["count", "test"]) == 0
    assert json.loads(capsys.readouterr().out) == 1


def test_library_errors_exit_non_zero(patched_cli, capsys):
    assert cli.main(["delete-bucket", "missing"]) == 1

    assert "404" in capsys.readouterr().err


def test_invalid_event_data_is_rejected(patched_cli):
    with pytest.raises(SystemExit):
        cli.main(["heartbeat", "test", "--data", "[1, 2]"])


def test_port_and_timeout_flags_reach_the_client(patched_cli, capsys):
    assert cli.main(["--port", "7000", "--timeout", "3", "info"]) == 0

    assert patched_cli[0].baseurl == "http://127.0.0.1:7000"
    assert patched_cli[0].timeout_s == 3.0


def test_unparsable_environment_exits_non_zero(patched_cli, monkeypatch, capsys):
    monkeypatch.setenv("AW_SERVER_PORT", "abc")

    assert cli.main(["info"]) == 1

    assert "AW_SERVER_PORT" in capsys.readouterr().err
    assert patched_cli == []

import io
import json

import pytest

from httpget import cli
from httpget.base import Transport
from httpget.top import Fetcher

from conftest import FakeSocket, redirect, response


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("HTTPGET_MAX_REDIRECTS", "HTTPGET_CHUNK_SIZE", "HTTPGET_TIMEOUT"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def calls(monkeypatch, network):
    """Route cli.fetch through the fake network and record its arguments."""
    recorded = []

    def fake_fetch(url, parameters=None, config=None, middleware=None):
        recorded.append({"url": url, "parameters": parameters, "config": config, "middleware": middleware})
        transport = Transport(chunk_size=config.chunk_size, connector=network)
        return Fetcher(config=config, transport=transport, middleware=middleware).fetch(url, parameters)

    monkeypatch.setattr(cli, "fetch", fake_fetch)
    return recorded


def test_split_parameter_args():
    pairs, rest = cli.split_parameter_args(["-r", "2", "a=1", "b=2", "http://h/"])
    assert pairs == ["a=1", "b=2"]
    assert rest == ["http://h/"]


def test_split_parameter_args_url_first():
    pairs, rest = cli.split_parameter_args(["http://h/", "--debug", "-r", "1", "x=y"])
    assert pairs == ["x=y"]
    assert rest == ["http://h/", "--debug"]


def test_split_parameter_args_without_r():
    assert cli.split_parameter_args(["http://h/"]) == (None, ["http://h/"])


def test_split_parameter_args_stops_at_double_dash():
    pairs, rest = cli.split_parameter_args(["-r", "1", "a=1", "--", "-r", "http://h/"])
    assert pairs == ["a=1"]
    assert rest == ["--", "-r", "http://h/"]


@pytest.mark.parametrize("argv", [
    ["-r"],
    ["-r", "x", "a=1", "http://h/"],
    ["-r", "3", "a=1", "b=2"],
    ["-r", "2", "a=1", "b", "http://h/"],
    ["-r", "1", "a=1", "-r", "1", "b=2", "http://h/"],
])
def test_split_parameter_args_errors(argv):
    with pytest.raises(ValueError):
        cli.split_parameter_args(argv)


def test_main_prints_each_response(calls, network):
    final = response("200 OK", ["Content-Type: text/html"], b"<p>ok</p>")
    first = FakeSocket([redirect("/new")])
    network.add("h", 80, first, final)
    out = io.BytesIO()

    assert cli.main(["-r", "2", "a=1", "b=2", "http://h/p"], stdout=out) == 0

    first_request = b"GET /p?a=1&b=2 HTTP/1.1\r\nHost: h\r\nConnection: close\r\n\r\n"
    second_request = b"GET /new HTTP/1.1\r\nHost: h\r\nConnection: close\r\n\r\n"
    expected = (
        b"HTTP request =\n" + first_request + f"\nLEN = {len(first_request)}\n".encode()
        + redirect("/new") + f"\n  Total received response bytes: {len(redirect('/new'))}\n".encode()
        + b"HTTP request =\n" + second_request + f"\nLEN = {len(second_request)}\n".encode()
        + final + f"\n  Total received response bytes: {len(final)}\n".encode()
    )
    assert out.getvalue() == expected
    assert first.sent.startswith(b"GET /p?a=1&b=2 HTTP/1.1\r\n")
    assert calls[0]["parameters"] == "a=1&b=2"


def test_main_without_parameters(calls, network):
    network.add("h", 80, response())
    assert cli.main(["http://h/"], stdout=io.BytesIO()) == 0
    assert calls[0]["parameters"] is None


def test_main_config_precedence(calls, network, tmp_path, monkeypatch):
    network.add("h", 80, response())
    path = tmp_path / "conf.json"
    path.write_text(json.dumps({"max_redirects": 1, "chunk_size": 64, "timeout": 3}))
    monkeypatch.setenv("HTTPGET_CHUNK_SIZE", "128")

    assert cli.main(["--config", str(path), "--timeout", "7", "http://h/"], stdout=io.BytesIO()) == 0

    config = calls[0]["config"]
    assert (config.max_redirects, config.chunk_size, config.timeout) == (1, 128, 7.0)


def test_main_debug_adds_logging_middleware(calls, network):
    network.add("h", 80, response())
    cli.main(["--debug", "http://h/"], stdout=io.BytesIO())
    kinds = [type(m).__name__ for m in calls[0]["middleware"]]
    assert kinds == ["LoggingMiddleware", "ResponseEchoMiddleware"]


def test_main_fetch_error_exits_one(calls, network, capsys):
    assert cli.main(["http://h/"], stdout=io.BytesIO()) == 1
    assert "httpget: error:" in capsys.readouterr().err


def test_main_too_many_redirects(calls, network, capsys):
    network.add("h", 80, *[redirect("/again")] * 5)
    assert cli.main(["--max-redirects", "2", "http://h/again"], stdout=io.BytesIO()) == 1
    assert "redirects" in capsys.readouterr().err
    assert len(network.connects) == 3


@pytest.mark.parametrize("argv", [
    [],
    ["ftp://h/"],
    ["-r", "1", "novalue", "http://h/"],
    ["--max-redirects", "-1", "http://h/"],
    ["--timeout", "nan", "http://h/"],
    ["--timeout", "inf", "http://h/"],
    ["http://h/", "http://other/"],
])
def test_main_usage_errors(calls, argv):
    with pytest.raises(SystemExit) as info:
        cli.main(argv, stdout=io.BytesIO())
    assert info.value.code == 2
    assert calls == []


@pytest.mark.parametrize("content", [
    {"max_redirects": "5"},
    {"chunk_size": 1.5},
    {"timeout": "soon"},
])
def test_main_config_with_wrong_types_is_usage_error(calls, tmp_path, content):
    path = tmp_path / "conf.json"
    path.write_text(json.dumps(content))
    with pytest.raises(SystemExit) as info:
        cli.main(["--config", str(path), "http://h/"], stdout=io.BytesIO())
    assert info.value.code == 2
    assert calls == []


def test_main_non_finite_env_timeout_is_usage_error(calls, monkeypatch):
    monkeypatch.setenv("HTTPGET_TIMEOUT", "nan")
    with pytest.raises(SystemExit) as info:
        cli.main(["http://h/"], stdout=io.BytesIO())
    assert info.value.code == 2
    assert calls == []

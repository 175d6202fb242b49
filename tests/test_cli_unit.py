# tests/test_cli_unit.py
import socket

import pytest

from tcping import cli
from tcping.config import MAX_WAIT_MS, Settings
from tcping.errors import ValidationError


def parse(argv, env=None):
    args = cli.build_argparser(Settings.from_env(env or {})).parse_args(argv)
    return cli.parse_settings(args)


def test_defaults():
    settings, host, port = parse(["example.com"])
    assert host == "example.com"
    assert port == 80
    assert settings == Settings()
    assert settings.unbounded


def test_port_precedence():
    assert parse(["example.com", "22"])[2] == 22
    assert parse(["-p", "443", "example.com"])[2] == 443
    assert parse(["-p", "443", "example.com", "8080"])[2] == 8080


def test_flags_map_to_settings():
    settings, _, _ = parse(["-6", "-n", "5", "-t", "250", "-w", "2000", "-c", "-v", "::1"])
    assert settings == Settings(family="v6", count=5, interval_ms=250, timeout_ms=2000,
                                color=True, verbose=True)


def test_env_seeds_defaults_and_flags_win():
    env = {"TCPING_COUNT": "3", "TCPING_TIMEOUT": "500", "TCPING_COLOR": "yes"}
    settings, _, _ = parse(["-w", "900", "example.com"], env)
    assert settings.count == 3
    assert settings.timeout_ms == 900
    assert settings.color is True


def test_bad_env_value():
    with pytest.raises(ValidationError):
        Settings.from_env({"TCPING_INTERVAL": "soon"})


@pytest.mark.parametrize("argv", [
    ["-4", "-6", "example.com"],
    ["-t", "-1", "example.com"],
    ["-w", "-5", "example.com"],
    ["-n", "-2", "example.com"],
    [],
    ["example.com", "http"],
    ["example.com", "0"],
    ["example.com", "65536"],
    ["-n", "many", "example.com"],
    ["-t", "99999999999999", "example.com"],
    ["-w", "99999999999999", "example.com"],
    ["example.com", "8_0"],
    ["example.com", " 80"],
    ["example.com", "+80"],
])
def test_validation_errors(argv):
    with pytest.raises(ValidationError):
        parse(argv)


def test_main_exits_1_on_validation_error(capsys):
    assert cli.main(["-4", "-6", "example.com"]) == 1
    assert "error:" in capsys.readouterr().err


def test_main_exits_1_on_family_mismatch(capsys):
    assert cli.main(["-6", "-n", "1", "127.0.0.1"]) == 1
    assert "not an IPv6 address" in capsys.readouterr().err


def test_help_and_version_exit_0(capsys):
    with pytest.raises(SystemExit) as exc:
        cli.main(["-h"])
    assert exc.value.code == 0
    assert "examples:" in capsys.readouterr().out

    with pytest.raises(SystemExit) as exc:
        cli.main(["--version"])
    assert exc.value.code == 0
    assert "TCPing version" in capsys.readouterr().out


def test_end_to_end_single_success(capsys):
    srv = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    srv.bind(("127.0.0.1", 0))
    srv.listen(4)
    port = srv.getsockname()[1]
    try:
        assert cli.main(["-n", "1", "-w", "2000", "127.0.0.1", str(port)]) == 0
    finally:
        srv.close()

    out = capsys.readouterr().out
    assert f"TCP ping 127.0.0.1 (IPv4 - 127.0.0.1) port {port}" in out
    assert out.count("Reply from") == 1
    assert "Sent = 1, Received = 1, Lost = 0 (0.0% loss)" in out
    assert "RTT: min = " in out


def test_largest_wait_is_accepted():
    settings, _, _ = parse(["-t", str(MAX_WAIT_MS), "-w", str(MAX_WAIT_MS), "example.com"])
    assert settings.interval_ms == MAX_WAIT_MS
    assert settings.timeout_ms == MAX_WAIT_MS


def test_main_exits_1_on_huge_interval(capsys):
    assert cli.main(["-n", "2", "-t", "99999999999999", "127.0.0.1", "80"]) == 1
    assert "interval cannot exceed" in capsys.readouterr().err

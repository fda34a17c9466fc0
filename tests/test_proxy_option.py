import io

import pytest

from trojango import log
from trojango.config import from_context
from trojango.errors import TrojanError
from trojango.log import EmptyLogger
from trojango.proxy import register_proxy_creator
from trojango.proxy_option import (
    ConfigFileOption,
    StdinOption,
    detect_and_read_config,
)


@pytest.fixture(autouse=True)
def quiet_logger():
    log.register_logger(EmptyLogger())
    yield
    log.register_logger(EmptyLogger())


@pytest.fixture
def runs():
    seen = []

    class FakeProxy:
        def __init__(self, ctx):
            self.ctx = ctx

        def run(self):
            seen.append(self.ctx)

    register_proxy_creator("OPTTEST", FakeProxy)
    return seen


def test_detect_json(tmp_path):
    path = tmp_path / "a.json"
    path.write_bytes(b'{"run_type": "x"}')
    assert detect_and_read_config(str(path)) == (b'{"run_type": "x"}', True)


@pytest.mark.parametrize("suffix", [".yaml", ".yml"])
def test_detect_yaml(tmp_path, suffix):
    path = tmp_path / ("a" + suffix)
    path.write_bytes(b"run-type: x\n")
    assert detect_and_read_config(str(path)) == (b"run-type: x\n", False)


def test_detect_unsupported_format(tmp_path):
    with pytest.raises(SystemExit) as info:
        detect_and_read_config(str(tmp_path / "a.toml"))
    assert info.value.code == 1


def test_detect_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        detect_and_read_config(str(tmp_path / "absent.json"))


def test_names_and_priorities():
    assert ConfigFileOption().name() == "PROXY"
    assert StdinOption().name() == "PROXY_STDIN"
    assert ConfigFileOption().priority() < StdinOption().priority()


def test_config_file_option_runs_proxy(tmp_path, runs):
    path = tmp_path / "conf.json"
    path.write_text('{"run_type": "opttest", "log_level": 2}')
    ConfigFileOption(str(path)).handle()
    assert len(runs) == 1
    assert from_context(runs[0], "PROXY").log_level == 2
    assert from_context(runs[0], "PROXY").run_type == "opttest"


def test_config_file_option_uses_default_path(tmp_path, monkeypatch, runs):
    (tmp_path / "config.yml").write_text("run-type: opttest\n")
    monkeypatch.chdir(tmp_path)
    ConfigFileOption().handle()
    assert [from_context(ctx, "PROXY").run_type for ctx in runs] == ["opttest"]


def test_config_file_option_without_config(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    with pytest.raises(SystemExit) as info:
        ConfigFileOption().handle()
    assert info.value.code == 1


def test_config_file_option_missing_path(tmp_path):
    with pytest.raises(SystemExit):
        ConfigFileOption(str(tmp_path / "absent.json")).handle()


def test_config_file_option_unknown_type(tmp_path):
    path = tmp_path / "conf.json"
    path.write_text('{"run_type": "nosuchtype"}')
    with pytest.raises(SystemExit):
        ConfigFileOption(str(path)).handle()


def test_stdin_disabled():
    with pytest.raises(TrojanError, match="reading from stdin is disabled"):
        StdinOption("disabled").handle()


def test_stdin_nil_format():
    with pytest.raises(TrojanError, match="format specifier is nil"):
        StdinOption(None).handle()


def test_stdin_json_with_hint(runs):
    out = io.StringIO()
    StdinOption("JSON", stdin=io.BytesIO(b'{"run_type": "opttest"}'), stdout=out).handle()
    assert [from_context(ctx, "PROXY").run_type for ctx in runs] == ["opttest"]
    text = out.getvalue()
    assert text.startswith("Trojan-Go Custom Version")
    assert "Reading JSON configuration from stdin." in text


def test_stdin_yaml_suppressed_hint(runs):
    out = io.StringIO()
    StdinOption("yaml", suppress_hint=True, stdin=io.StringIO("run-type: opttest\n"),
                stdout=out).handle()
    assert out.getvalue() == ""
    assert [from_context(ctx, "PROXY").run_type for ctx in runs] == ["opttest"]
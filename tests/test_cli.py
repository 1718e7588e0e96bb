"""Tests for the depqueue command line and its settings."""

import json
import logging

import pytest

from args import parse_args
from cli_config import load_config, resolve_settings
from constants import Constants, ExitCodes
import depqueue

CATALOG = """packages:
  app:
    version: "1.0"
    requires: "gtk >= 3, zlib"
    requires_private: "png"
  gtk:
    version: "3.24"
    requires: "zlib"
  zlib:
    version: "1.3"
  png:
    version: "1.6"
"""


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    # setenv first so monkeypatch restores values main() writes into os.environ
    for var in (Constants.ENV_CATALOG, Constants.ENV_MAXDEPTH, Constants.ENV_STATIC, Constants.ENV_LOG_LEVEL):
        monkeypatch.setenv(var, "")
        monkeypatch.delenv(var)
    root = logging.getLogger()
    level = root.level
    yield
    root.setLevel(level)


@pytest.fixture
def catalog_file(tmp_path):
    path = tmp_path / "catalog.yml"
    path.write_text(CATALOG, encoding="utf-8")
    return str(path)


def _run(argv):
    with pytest.raises(SystemExit) as excinfo:
        depqueue.main(argv)
    return excinfo.value.code


class TestArgs:
    """Tests for argument parsing."""

    def test_defaults(self):
        ns = parse_args(["foo"])
        assert ns.packages == ["foo"]
        assert ns.MAXDEPTH is None
        assert ns.STATIC is False
        assert ns.LOG_LEVEL is None
        assert ns.OUTPUT_FORMAT is None

    def test_options(self):
        ns = parse_args(["-c", "cat.yml", "--maxdepth", "2", "--static", "-f", "JSON", "foo >= 1", "bar"])
        assert ns.CATALOG == "cat.yml"
        assert ns.MAXDEPTH == 2
        assert ns.STATIC is True
        assert ns.OUTPUT_FORMAT == "json"
        assert ns.packages == ["foo >= 1", "bar"]


class TestSettings:
    """Tests for config/env/CLI precedence."""

    def test_load_config_section(self, tmp_path):
        path = tmp_path / "config.yml"
        path.write_text("depqueue:\n  maxdepth: 3\n  static: true\n", encoding="utf-8")
        assert load_config(str(path)) == {"maxdepth": 3, "static": True}

    def test_load_config_missing_file(self, tmp_path):
        assert load_config(str(tmp_path / "none.yml")) == {}

    def test_load_config_json(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"depqueue": {"catalog": "x.yml"}}), encoding="utf-8")
        assert load_config(str(path)) == {"catalog": "x.yml"}

    def test_precedence(self, tmp_path, monkeypatch):
        path = tmp_path / "config.yml"
        path.write_text("depqueue:\n  catalog: from-config.yml\n  maxdepth: 3\n", encoding="utf-8")
        monkeypatch.setenv(Constants.ENV_MAXDEPTH, "5")

        settings = resolve_settings(parse_args(["--config", str(path), "foo"]))
        assert settings.catalog == "from-config.yml"
        assert settings.maxdepth == 5

        settings = resolve_settings(parse_args(["--config", str(path), "--maxdepth", "1", "-c", "cli.yml", "foo"]))
        assert settings.catalog == "cli.yml"
        assert settings.maxdepth == 1

    def test_bad_env_depth_is_ignored(self, monkeypatch):
        monkeypatch.setenv(Constants.ENV_MAXDEPTH, "deep")
        assert resolve_settings(parse_args(["foo"])).maxdepth == 0

    def test_static_from_env(self, monkeypatch):
        monkeypatch.setenv(Constants.ENV_STATIC, "yes")
        assert resolve_settings(parse_args(["foo"])).static is True


class TestMain:
    """Tests for the CLI entry point."""

    def test_prints_flattened_requires(self, catalog_file, capsys):
        assert _run(["-c", catalog_file, "app"]) == ExitCodes.SUCCESS.value
        lines = capsys.readouterr().out.splitlines()
        # zlib is reached by two edges, so it sorts first
        assert lines == ["zlib", "app", "gtk >= 3"]

    def test_static_prints_private_too(self, catalog_file, capsys):
        assert _run(["-c", catalog_file, "--static", "app"]) == ExitCodes.SUCCESS.value
        assert capsys.readouterr().out.splitlines()[-1] == "png"

    def test_json_output(self, catalog_file, capsys):
        code = _run(["-c", catalog_file, "-f", "json", "--print-requires-private", "app"])
        assert code == ExitCodes.SUCCESS.value
        data = json.loads(capsys.readouterr().out)
        assert list(data) == ["requires_private"]
        assert data["requires_private"][0]["package"] == "png"
        assert data["requires_private"][0]["resolved_version"] == "1.6"
        assert data["requires_private"][0]["hits"] == 1

    def test_output_file_infers_json(self, catalog_file, tmp_path):
        out = tmp_path / "result.json"
        assert _run(["-c", catalog_file, "-o", str(out), "app"]) == ExitCodes.SUCCESS.value
        data = json.loads(out.read_text(encoding="utf-8"))
        assert [e["package"] for e in data["requires"]] == ["zlib", "app", "gtk"]

    def test_maxdepth_limits_collection(self, catalog_file, capsys):
        assert _run(["-c", catalog_file, "--maxdepth", "1", "gtk"]) == ExitCodes.SUCCESS.value
        assert capsys.readouterr().out.splitlines() == ["gtk", "zlib"]

    def test_load_list(self, catalog_file, tmp_path, capsys):
        req = tmp_path / "requests.txt"
        req.write_text("# wanted\nzlib\n\npng\n", encoding="utf-8")
        assert _run(["-c", catalog_file, "-l", str(req)]) == ExitCodes.SUCCESS.value
        assert capsys.readouterr().out.splitlines() == ["zlib", "png"]

    def test_validate_prints_nothing(self, catalog_file, capsys):
        assert _run(["-c", catalog_file, "--validate", "app"]) == ExitCodes.SUCCESS.value
        assert capsys.readouterr().out == ""

    def test_unresolvable_request(self, catalog_file, caplog):
        with caplog.at_level(logging.ERROR):
            assert _run(["-c", catalog_file, "missing"]) == ExitCodes.RESOLUTION_ERROR.value
        assert "Package 'missing'" in caplog.text

    def test_no_requests(self, catalog_file):
        assert _run(["-c", catalog_file]) == ExitCodes.RESOLUTION_ERROR.value

    def test_missing_catalog(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        assert _run(["foo"]) == ExitCodes.FILE_ERROR.value
        assert _run(["-c", str(tmp_path / "none.yml"), "foo"]) == ExitCodes.FILE_ERROR.value

    def test_missing_list_file(self, catalog_file, tmp_path):
        assert _run(["-c", catalog_file, "-l", str(tmp_path / "none.txt")]) == ExitCodes.FILE_ERROR.value

    def test_internal_error_exit_code(self, catalog_file, monkeypatch):
        from resolution import DependencyInvariantError

        def _broken(*args, **kwargs):
            raise DependencyInvariantError("broken")

        monkeypatch.setattr(depqueue, "apply_queue", _broken)
        assert _run(["-c", catalog_file, "app"]) == ExitCodes.INTERNAL_ERROR.value

    def test_log_level_from_env_without_flag(self, catalog_file, monkeypatch):
        monkeypatch.setenv(Constants.ENV_LOG_LEVEL, "DEBUG")
        assert _run(["-c", catalog_file, "--validate", "app"]) == ExitCodes.SUCCESS.value
        assert logging.getLogger().level == logging.DEBUG

    def test_loglevel_flag_overrides_env(self, catalog_file, monkeypatch):
        monkeypatch.setenv(Constants.ENV_LOG_LEVEL, "DEBUG")
        assert _run(["-c", catalog_file, "--loglevel", "ERROR", "--validate", "app"]) == ExitCodes.SUCCESS.value
        assert logging.getLogger().level == logging.ERROR

    def test_default_log_level_is_warning(self, catalog_file):
        assert _run(["-c", catalog_file, "--validate", "app"]) == ExitCodes.SUCCESS.value
        assert logging.getLogger().level == logging.WARNING

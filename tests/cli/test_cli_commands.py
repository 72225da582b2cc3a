"""Tests for the Typer CLI: exit codes, formats, auxiliary commands."""

import json
import logging
from types import SimpleNamespace

import pytest
from typer.testing import CliRunner

from layerguard import __version__
from layerguard.cli import app
from layerguard.scanning import walker

runner = CliRunner()


def _check(root, config, *extra):
    return runner.invoke(app, ["check", "--root", str(root), "--config", str(config), *extra])


class TestCheckExitCodes:
    def test_pass_is_zero(self, clean_app, contracts_file):
        result = _check(clean_app, contracts_file)
        assert result.exit_code == 0, result.output
        assert "PASS  Models are independent" in result.output

    def test_violation_is_one(self, broken_app, contracts_file):
        result = _check(broken_app, contracts_file)
        assert result.exit_code == 1
        assert "FAIL  Models are independent" in result.output
        assert "app.models.user -> app.adapters.repo" in result.output

    def test_missing_root_is_two(self, tmp_path, contracts_file):
        result = _check(tmp_path / "nope", contracts_file)
        assert result.exit_code == 2
        assert "Cannot scan" in result.output

    def test_missing_config_is_two(self, clean_app, tmp_path):
        result = _check(clean_app, tmp_path / "nope.toml")
        assert result.exit_code == 2
        assert "config file not found" in result.output

    def test_malformed_contract_is_two(self, clean_app, tmp_path):
        path = tmp_path / "bad.toml"
        path.write_text('[[contracts]]\nname = "x"\ntype = "whatever"\n')
        result = _check(clean_app, path)
        assert result.exit_code == 2
        assert "unrecognized type" in result.output

    def test_invalid_setting_is_two(self, clean_app, tmp_path):
        path = tmp_path / "bad.toml"
        path.write_text(
            '[settings]\nlanguages = ["cobol"]\n\n'
            '[[contracts]]\nname = "x"\ntype = "forbidden"\n'
            'source_modules = ["app"]\ndestination_modules = ["app.models"]\n'
        )
        assert _check(clean_app, path).exit_code == 2

    def test_scan_time_bound_is_two(self, clean_app, contracts_file, monkeypatch):
        ticks = iter(range(0, 10**9, 1000))
        monkeypatch.setattr(walker, "time", SimpleNamespace(monotonic=lambda: next(ticks)))

        result = _check(clean_app, contracts_file)
        assert result.exit_code == 2
        assert "time bound" in result.output

    def test_config_option_required(self, clean_app):
        result = runner.invoke(app, ["check", "--root", str(clean_app)])
        assert result.exit_code == 2


class TestCheckFormats:
    def test_json_output_file(self, broken_app, contracts_file, tmp_path):
        out = tmp_path / "report.json"
        result = _check(broken_app, contracts_file, "--format", "json", "--output", str(out))

        assert result.exit_code == 1
        data = json.loads(out.read_text())
        assert data["status"] == "fail"
        assert data["contracts"][0]["violations"][0]["path"] == [
            "app.models.user",
            "app.adapters.repo",
        ]
        assert data["summary"]["violations"] == 2

    def test_text_output_file(self, clean_app, contracts_file, tmp_path):
        out = tmp_path / "report.txt"
        result = _check(clean_app, contracts_file, "--output", str(out))
        assert result.exit_code == 0
        assert "2/2 contracts kept" in out.read_text()

    def test_github_format(self, broken_app, contracts_file):
        result = _check(broken_app, contracts_file, "--format", "github")
        assert result.exit_code == 1
        assert "::error title=layerguard%3A Models are independent::" in result.output

    def test_unknown_format(self, clean_app, contracts_file):
        result = _check(clean_app, contracts_file, "--format", "xml")
        assert result.exit_code == 2

    def test_workers_and_quiet(self, broken_app, contracts_file):
        result = _check(broken_app, contracts_file, "--workers", "2", "--quiet")
        assert result.exit_code == 1

    def test_verbosity_setting_drives_logging(self, clean_app, tmp_path):
        config = tmp_path / "verbose.toml"
        config.write_text(
            '[settings]\nverbosity = "verbose"\n\n'
            '[[contracts]]\nname = "x"\ntype = "forbidden"\n'
            'source_modules = ["app.models.*"]\ndestination_modules = ["app.entrypoints.*"]\n'
        )
        assert _check(clean_app, config).exit_code == 0
        assert logging.getLogger("layerguard").level == logging.DEBUG

        assert _check(clean_app, config, "--quiet").exit_code == 0
        assert logging.getLogger("layerguard").level == logging.ERROR

    def test_cache_flag(self, clean_app, contracts_file, tmp_path, monkeypatch):
        monkeypatch.setenv("LAYERGUARD_CACHE_DIRECTORY", str(tmp_path / "cache"))
        result = _check(clean_app, contracts_file, "--cache")
        assert result.exit_code == 0
        assert (tmp_path / "cache").is_dir()


class TestOtherCommands:
    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_modules_table(self, clean_app):
        result = runner.invoke(app, ["modules", "--root", str(clean_app), "--edges"])
        assert result.exit_code == 0
        assert "app.services.signup" in result.output
        assert "app.entrypoints.cli -> app.services.signup" in result.output

    def test_modules_json(self, clean_app):
        result = runner.invoke(app, ["modules", "--root", str(clean_app), "--json", "--edges"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert len(data["modules"]) == 9
        assert ["app.adapters.repo", "app.models.user"] in data["edges"]

    def test_modules_missing_root(self, tmp_path):
        result = runner.invoke(app, ["modules", "--root", str(tmp_path / "nope")])
        assert result.exit_code == 2

    def test_cache_clear(self, clean_app, tmp_path):
        config = tmp_path / "cached.toml"
        config.write_text(
            f'[settings.cache]\nenabled = true\ndirectory = "{(tmp_path / "cache").as_posix()}"\n\n'
            '[[contracts]]\nname = "x"\ntype = "forbidden"\n'
            'source_modules = ["app.models.*"]\ndestination_modules = ["app.entrypoints.*"]\n'
        )
        assert _check(clean_app, config).exit_code == 0

        result = runner.invoke(app, ["cache-clear", "--config", str(config)])
        assert result.exit_code == 0
        assert "Cache cleared" in result.output
        assert "(9 entries removed)" in result.output

    def test_cache_clear_without_cache(self, tmp_path, monkeypatch):
        monkeypatch.setenv("LAYERGUARD_CACHE_DIRECTORY", str(tmp_path / "none"))
        result = runner.invoke(app, ["cache-clear"])
        assert result.exit_code == 0
        assert "No cache" in result.output


@pytest.mark.slow
class TestLargeTree:
    def test_many_modules(self, make_tree, tmp_path):
        files = {f"app/layer{i % 4}/m{i}.py": f"from app.layer{(i + 1) % 4} import m{i + 1}\n" for i in range(2000)}
        root = make_tree(files)
        config = tmp_path / "lg.toml"
        config.write_text(
            '[[contracts]]\nname = "layers"\ntype = "layers"\n'
            'layers = ["app.layer3.*", "app.layer2.*", "app.layer1.*", "app.layer0.*"]\n'
        )
        result = _check(root, config, "--quiet")
        assert result.exit_code == 1

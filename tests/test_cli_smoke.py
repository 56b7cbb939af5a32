"""Smoke tests for the cleanbench CLI."""

import json
import logging
import sys
from pathlib import Path

import pytest
from typer.testing import CliRunner

# Add repo root to path for imports
repo_root = Path(__file__).parent.parent
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from cleanbench import cli
from cleanbench.discovery import Contender, ContenderRegistry

runner = CliRunner()


@pytest.fixture(autouse=True)
def _restore_root_logging():
    """`run` reconfigures the root logger; put pytest's handlers back afterwards."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def samples_dir(tmp_path):
    directory = tmp_path / "samples"
    directory.mkdir()
    (directory / "a.json").write_text(json.dumps({"k": None, "v": [1, "", {}]}))
    (directory / "b.json").write_text(json.dumps([{"x": ""}, {"y": 2}]))
    return directory


def _fast_args(samples_dir):
    return ["run", "--samples", str(samples_dir), "--warmup", "0", "--iterations", "2", "--seed", "7"]


class TestRunCommand:
    """Test `cleanbench run`."""

    def test_run_all_contenders(self, samples_dir):
        result = runner.invoke(cli.app, _fast_args(samples_dir))
        assert result.exit_code == 0, result.output
        assert "Benchmark: a.json" in result.output
        assert "Overall Summary" in result.output

    def test_json_out(self, samples_dir, tmp_path):
        out = tmp_path / "report.json"
        result = runner.invoke(
            cli.app,
            _fast_args(samples_dir) + ["--contender", "recursive", "--contender", "iterative", "--json-out", str(out)],
        )
        assert result.exit_code == 0, result.output
        data = json.loads(out.read_text())
        assert set(data["overall"]["per_contender"]) == {"recursive", "iterative"}
        assert data["overall"]["manifest"]["seed"] == 7
        assert len(data["fixtures"]) == 2

    def test_unknown_contender(self, samples_dir):
        result = runner.invoke(cli.app, _fast_args(samples_dir) + ["--contender", "nope"])
        assert result.exit_code == 2
        assert "Unknown contender" in result.output

    def test_zero_iterations(self, samples_dir):
        result = runner.invoke(cli.app, ["run", "--samples", str(samples_dir), "--iterations", "0"])
        assert result.exit_code == 2

    def test_missing_samples_dir(self, tmp_path):
        result = runner.invoke(cli.app, ["run", "--samples", str(tmp_path / "nowhere")])
        assert result.exit_code == 2

    def test_failed_fixture_exit_code(self, samples_dir, monkeypatch):
        def broken(data):
            raise ValueError("boom")

        registry = ContenderRegistry([Contender("ok", lambda d: d), Contender("broken", broken)])
        monkeypatch.setattr(cli, "default_registry", lambda: registry)
        result = runner.invoke(cli.app, _fast_args(samples_dir))
        assert result.exit_code == 1
        assert "Aborted a.json" in result.output


class TestListCommand:
    """Test `cleanbench list`."""

    def test_lists_contenders_and_fixtures(self, samples_dir):
        result = runner.invoke(cli.app, ["list", "--samples", str(samples_dir)])
        assert result.exit_code == 0, result.output
        assert "recursive" in result.output
        assert "in_place" in result.output and "(mutates input)" in result.output
        assert "a.json" in result.output and "b.json" in result.output

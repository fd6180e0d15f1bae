"""
Tests for the CLI — help levels, marker docs, runs, and exit codes.
"""

import json
import textwrap
from pathlib import Path

import pytest
from click.testing import CliRunner

from markergen.core.errors import GenerationError
from markergen.core.services.generators.registry import GeneratorRegistry
from markergen.main import USAGE_HINT, cli


@pytest.fixture(autouse=True)
def _cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("MARKERGEN_LOG_FILE", raising=False)


@pytest.fixture
def stubs(stub_generators, test_rules) -> dict:
    return {"generators": stub_generators, "output_rules": test_rules}


def invoke(args, obj=None):
    return CliRunner().invoke(cli, args, obj=obj if obj is not None else {})


class TestCLIGlobal:
    """Tests for global CLI behavior."""

    def test_version(self):
        result = invoke(["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output

    def test_help(self):
        result = invoke(["--help"])
        assert result.exit_code == 0
        assert "Usage:" in result.stderr
        assert "generators" in result.stderr
        assert "crds" in result.stderr
        assert result.stdout == ""

    def test_detailed_help(self):
        result = invoke(["-hh"])
        assert result.exit_code == 0
        assert "maxDescLen" in result.stderr

    def test_json_help(self):
        result = invoke(["-hhhh"])
        assert result.exit_code == 0
        categories = {c["category"] for c in json.loads(result.stdout)}
        assert "generators" in categories

    def test_help_does_not_run_generators(self, stubs):
        result = invoke(["-h", "alpha"], obj=stubs)
        assert result.exit_code == 0
        assert stubs["generators"]["alpha"].calls == []


class TestWhichMarkers:
    def test_all_markers(self):
        result = invoke(["-w"])
        assert result.exit_code == 0
        assert "output:crds:dir" in result.stderr

    def test_generator_markers(self):
        result = invoke(["-w", "crds"])
        assert result.exit_code == 0
        assert "markergen:root" in result.stderr
        assert "markergen:resource" in result.stderr
        assert "markergen:union" not in result.stderr

    def test_json(self):
        result = invoke(["-wwww", "schemas"])
        assert result.exit_code == 0
        names = {m["name"] for c in json.loads(result.stdout) for m in c["markers"]}
        assert {"schemas", "markergen:union", "output:schemas:stdout"} <= names
        assert "crds" not in names

    def test_unknown_marker(self):
        result = invoke(["-w", "nope"])
        assert result.exit_code == 1
        assert "unknown option 'nope'" in result.stderr
        assert "Usage:" in result.stderr
        assert USAGE_HINT in result.stderr


class TestRun:
    def test_no_generators(self):
        result = invoke([])
        assert result.exit_code == 1
        assert "no generators specified" in result.stderr
        assert "Usage:" in result.stderr
        assert USAGE_HINT in result.stderr

    def test_crds_to_directory(self, api_root: Path, tmp_path: Path):
        out = tmp_path / "crd-out"
        result = invoke(["crds", f"paths={api_root}", f"output:crds:dir={out}"])
        assert result.exit_code == 0, result.output
        assert (out / "example.com_workspaces.yaml").exists()
        assert "✓ crds" in result.stderr

    def test_builtin_default_output(self, api_root: Path, tmp_path: Path):
        result = invoke(["schemas", "deepcopy", f"paths={api_root}"])
        assert result.exit_code == 0, result.output
        assert (tmp_path / "config" / "schemas" / "Workspace.json").exists()
        assert (api_root / "v1" / "zz_generated_deepcopy.py").exists()

    @pytest.mark.filterwarnings("error:.*removed in Click 9:DeprecationWarning")
    def test_stdout_output(self, api_root: Path):
        result = invoke(["schemas", f"paths={api_root}", "output:stdout"])
        assert result.exit_code == 0
        assert json.loads(result.stdout)["title"] == "Workspace"

    def test_partial_failure(self, stub_cls, test_rules, tmp_path: Path):
        generators = GeneratorRegistry(
            [stub_cls("alpha", error=GenerationError("bad sources")), stub_cls("beta")]
        )
        result = invoke(
            ["alpha", "beta", "output:dir=out"],
            obj={"generators": generators, "output_rules": test_rules},
        )
        assert result.exit_code == 1
        assert "✗ alpha" in result.stderr
        assert "bad sources" in result.stderr
        assert "✓ beta" in result.stderr
        assert "not all generators ran successfully" in result.stderr
        assert "Usage:" not in result.stderr
        assert (tmp_path / "out" / "beta-0.txt").exists()

    def test_disabled_generator(self, stubs):
        result = invoke(["alpha=false", "beta", "output:none"], obj=stubs)
        assert result.exit_code == 0
        assert "⊘ alpha" in result.stderr
        assert "Result: 1/2 succeeded" in result.stderr

    def test_quiet(self, stubs):
        result = invoke(["-q", "alpha", "output:none"], obj=stubs)
        assert result.exit_code == 0
        assert "alpha" not in result.stderr

    def test_ambiguous_output(self, stubs):
        result = invoke(["alpha", "output:alpha:dir=a", "output:alpha:none"], obj=stubs)
        assert result.exit_code == 1
        assert "conflicting output rules" in result.stderr
        assert "Usage:" in result.stderr

    def test_output_for_non_invoked_generator(self, stubs):
        result = invoke(["alpha", "output:beta:none"], obj=stubs)
        assert result.exit_code == 1
        assert "non-invoked generator" in result.stderr

    def test_bad_value(self, stubs):
        result = invoke(["alpha:size=many"], obj=stubs)
        assert result.exit_code == 1
        assert "alpha:size=many" in result.stderr
        assert USAGE_HINT in result.stderr

    def test_trailing_colon(self, stubs):
        result = invoke(["alpha:"], obj=stubs)
        assert result.exit_code == 1
        assert "'alpha:'" in result.stderr
        assert USAGE_HINT in result.stderr
        assert stubs["generators"]["alpha"].calls == []


class TestConfigFile:
    def test_cli_tokens_override_config(self, stubs, tmp_path: Path):
        config = tmp_path / "markergen.yml"
        config.write_text(
            textwrap.dedent("""\
                options:
                  - alpha:size=3
                  - output:dir=from-config
            """)
        )
        result = invoke(["-c", str(config), "alpha:size=1", "output:dir=out"], obj=stubs)
        assert result.exit_code == 0, result.output
        assert (tmp_path / "out" / "alpha-0.txt").exists()
        assert not (tmp_path / "out" / "alpha-1.txt").exists()
        assert not (tmp_path / "from-config").exists()

    def test_config_found_automatically(self, stubs, tmp_path: Path):
        (tmp_path / "markergen.yml").write_text("options: [alpha, output:none]\n")
        result = invoke([], obj=stubs)
        assert result.exit_code == 0, result.output
        assert "✓ alpha" in result.stderr

    def test_invalid_config(self, tmp_path: Path):
        config = tmp_path / "bad.yml"
        config.write_text("options: [unclosed\n")
        result = invoke(["-c", str(config), "crds"])
        assert result.exit_code == 1
        assert "Invalid YAML" in result.stderr

    def test_paths_relative_to_config_dir(self, api_root: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        (tmp_path / "markergen.yml").write_text("options: [paths=./api, output:dir=./out]\n")
        sub = tmp_path / "sub"
        sub.mkdir()
        monkeypatch.chdir(sub)

        result = invoke(["crds"])
        assert result.exit_code == 0, result.output
        assert (tmp_path / "out" / "example.com_workspaces.yaml").exists()
        assert not (sub / "out").exists()

    def test_cli_paths_relative_to_cwd(self, api_root: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        (tmp_path / "markergen.yml").write_text("options: [paths=./api, output:dir=./out]\n")
        sub = tmp_path / "sub"
        sub.mkdir()
        monkeypatch.chdir(sub)

        result = invoke(["crds", "output:dir=local"])
        assert result.exit_code == 0, result.output
        assert (sub / "local" / "example.com_workspaces.yaml").exists()

    @pytest.mark.parametrize("args", [["--help"], ["-hh"], ["-w", "crds"], ["-wwww"]])
    def test_help_ignores_broken_config(self, tmp_path: Path, args):
        (tmp_path / "markergen.yml").write_text("options: [unclosed\n")
        result = invoke(args)
        assert result.exit_code == 0, result.output
        assert "Invalid YAML" not in result.stderr

    def test_which_markers_ignores_config_tokens(self, tmp_path: Path):
        (tmp_path / "markergen.yml").write_text("options: [schemas]\n")
        result = invoke(["-w", "crds"])
        assert result.exit_code == 0
        assert "markergen:resource" in result.stderr
        assert "markergen:union" not in result.stderr


class TestRegistryConstruction:
    def test_collision_aborts(self, stub_cls, test_rules):
        generators = GeneratorRegistry([stub_cls("paths")])
        result = invoke(["paths"], obj={"generators": generators, "output_rules": test_rules})
        assert result.exit_code == 2
        assert "'paths' is already registered" in result.stderr
        assert "Usage:" not in result.stderr

    def test_collision_aborts_help_too(self, stub_cls, test_rules):
        generators = GeneratorRegistry([stub_cls("paths")])
        result = invoke(["--help"], obj={"generators": generators, "output_rules": test_rules})
        assert result.exit_code == 2

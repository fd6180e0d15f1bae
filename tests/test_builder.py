"""
Tests for the runtime builder — tokens to executable configuration.
"""

from pathlib import Path

import pytest

from markergen.adapters.filesystem import OutputArtifacts, OutputToDirectory
from markergen.adapters.stream import OutputToNothing, OutputToStdout
from markergen.core.config.options import default_options_registry
from markergen.core.engine.builder import from_options, parse_options, registry_from_options
from markergen.core.errors import (
    AmbiguousOutputError,
    NoGeneratorsError,
    OptionParseError,
    UnknownMarkerError,
)
from markergen.core.services.generators.registry import ALL_GENERATORS


@pytest.fixture
def build(stub_registry, stub_generators, tmp_path: Path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    def _build(*tokens):
        return from_options(stub_registry, list(tokens), stub_generators)

    return _build


class TestParseOptions:
    def test_unknown_marker(self, stub_registry):
        with pytest.raises(UnknownMarkerError) as exc:
            parse_options(stub_registry, ["gamma"])
        assert exc.value.token == "gamma"
        assert str(exc.value) == "unknown option 'gamma'"

    def test_bad_value_names_token(self, stub_registry):
        with pytest.raises(OptionParseError) as exc:
            parse_options(stub_registry, ["alpha:size=lots"])
        assert exc.value.token == "alpha:size=lots"

    def test_unknown_field(self, stub_registry):
        with pytest.raises(OptionParseError):
            parse_options(stub_registry, ["alpha:colour=red"])

    def test_trailing_colon_names_token(self, stub_registry):
        with pytest.raises(OptionParseError, match="empty field list") as exc:
            parse_options(stub_registry, ["alpha:"])
        assert exc.value.token == "alpha:"


class TestGenerators:
    def test_no_generators(self, build):
        with pytest.raises(NoGeneratorsError, match="no generators specified"):
            build("output:none")

    def test_no_tokens(self, build):
        with pytest.raises(NoGeneratorsError):
            build()

    def test_last_write_wins(self, build):
        config = build("alpha=true", "alpha=false")
        task = config.task("alpha")
        assert task.options.enabled is False
        assert not task.enabled

    def test_options_replaced_not_merged(self, build):
        config = build("alpha:size=3", "alpha")
        assert config.task("alpha").options.size == 1

    def test_first_activation_keeps_position(self, build):
        config = build("alpha", "beta", "alpha:size=2")
        assert config.generator_names == ["alpha", "beta"]
        assert config.task("alpha").options.size == 2

    def test_resolved_options_recorded(self, build):
        config = build("alpha", "output:none")
        assert [o.raw for o in config.options] == ["alpha", "output:none"]


class TestOutputResolution:
    def test_builtin_default(self, build):
        task = build("alpha").task("alpha")
        assert task.output_source == "builtin"
        assert task.output_rule == OutputArtifacts(config="config/alpha")

    def test_global_default(self, build):
        task = build("alpha", "output:dir=out").task("alpha")
        assert task.output_source == "default"
        assert task.output_rule == OutputToDirectory(path="out")

    def test_per_generator_wins_over_default(self, build):
        config = build("alpha", "beta", "output:artifacts:config=shared", "output:alpha:artifacts:config=outdir")
        alpha, beta = config.task("alpha"), config.task("beta")
        assert alpha.output_source == "generator"
        assert alpha.output_rule == OutputArtifacts(config="outdir")
        assert beta.output_rule == OutputArtifacts(config="shared")

    def test_crds_artifacts_precedence(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        config = from_options(
            default_options_registry(),
            ["crds", "output:artifacts:config=elsewhere", "output:crds:artifacts:config=outdir"],
            ALL_GENERATORS,
        )
        rule = config.task("crds").output_rule
        assert isinstance(rule, OutputArtifacts)
        assert rule.config == "outdir"

    def test_same_form_overwrites(self, build):
        task = build("alpha", "output:alpha:dir=a", "output:alpha:dir=b").task("alpha")
        assert task.output_rule == OutputToDirectory(path="b")

    def test_conflicting_generator_forms(self, build):
        with pytest.raises(AmbiguousOutputError):
            build("alpha", "output:alpha:dir=a", "output:alpha:stdout")

    def test_conflicting_default_forms(self, build):
        with pytest.raises(AmbiguousOutputError):
            build("alpha", "output:none", "output:stdout")

    def test_forms_at_different_levels_are_fine(self, build):
        config = build("alpha", "beta", "output:stdout", "output:alpha:none")
        assert config.task("alpha").output_rule == OutputToNothing()
        assert config.task("beta").output_rule == OutputToStdout()

    def test_output_for_non_invoked_generator(self, build):
        with pytest.raises(OptionParseError, match="non-invoked generator 'beta'"):
            build("alpha", "output:beta:dir=x")

    def test_output_for_unknown_generator(self, build):
        with pytest.raises(UnknownMarkerError):
            build("alpha", "output:gamma:dir=x")


class TestPaths:
    def test_default_is_cwd(self, build):
        assert build("alpha").roots == [Path(".")]

    def test_paths_list(self, build, tmp_path):
        (tmp_path / "a").mkdir()
        (tmp_path / "b").mkdir()
        assert build("alpha", "paths={a,b}").roots == [Path("a"), Path("b")]

    def test_missing_root(self, build):
        with pytest.raises(OptionParseError, match="not a directory"):
            build("alpha", "paths=missing")

    def test_empty_paths(self, build):
        with pytest.raises(OptionParseError):
            build("alpha", "paths={}")

    def test_exclude(self, build):
        assert build("alpha", "exclude=*_test.py;vendor/*").exclude == ["*_test.py", "vendor/*"]


class TestConfigTokens:
    @pytest.fixture
    def project(self, tmp_path: Path, monkeypatch) -> Path:
        (tmp_path / "src").mkdir()
        sub = tmp_path / "sub"
        (sub / "src").mkdir(parents=True)
        monkeypatch.chdir(sub)
        return tmp_path

    def _build(self, registry, generators, project, *tokens):
        return from_options(
            registry,
            list(tokens),
            generators,
            config_tokens=["alpha", "paths=./src", "output:dir=out"],
            config_dir=project,
        )

    def test_relative_to_config_dir(self, stub_registry, stub_generators, project):
        config = self._build(stub_registry, stub_generators, project)
        assert config.roots == [project / "src"]
        assert config.task("alpha").output_rule.path == str(project / "out")

    def test_cli_tokens_stay_relative_to_cwd(self, stub_registry, stub_generators, project):
        config = self._build(stub_registry, stub_generators, project, "paths=src", "output:dir=local")
        assert config.roots == [Path("src")]
        assert config.task("alpha").output_rule.path == "local"

    def test_config_tokens_apply_first(self, stub_registry, stub_generators, project):
        config = self._build(stub_registry, stub_generators, project, "alpha:size=2")
        assert config.generator_names == ["alpha"]
        assert config.task("alpha").options.size == 2

    def test_without_config_dir(self, stub_registry, stub_generators, project):
        config = from_options(stub_registry, [], stub_generators, config_tokens=["alpha", "paths=src"])
        assert config.roots == [Path("src")]


class TestRegistryFromOptions:
    def test_no_tokens_is_full_registry(self, stub_registry, stub_generators):
        assert registry_from_options(stub_registry, [], stub_generators) is stub_registry

    def test_named_generator(self):
        filtered = registry_from_options(default_options_registry(), ["crds"], ALL_GENERATORS)
        names = filtered.names
        assert "crds" in names
        assert "output:crds:dir" in names
        assert "markergen:root" in names
        assert "markergen:resource" in names
        assert "schemas" not in names
        assert "output:dir" not in names
        assert filtered.frozen

    def test_shared_source_markers_registered_once(self):
        filtered = registry_from_options(default_options_registry(), ["crds", "schemas"], ALL_GENERATORS)
        assert filtered.names.count("markergen:root") == 1
        assert "markergen:union" in filtered

    def test_output_token_contributes_its_marker(self):
        filtered = registry_from_options(default_options_registry(), ["output:stdout"], ALL_GENERATORS)
        assert filtered.names == ["output:stdout"]

    def test_unknown_token(self):
        with pytest.raises(UnknownMarkerError):
            registry_from_options(default_options_registry(), ["nope"], ALL_GENERATORS)

    def test_does_not_touch_options_registry(self):
        registry = default_options_registry()
        before = list(registry.names)
        registry_from_options(registry, ["crds"], ALL_GENERATORS)
        assert registry.names == before

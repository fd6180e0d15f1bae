"""
Tests for output rules — directory, artifacts, stdout, none, mock.
"""

from pathlib import Path

import pytest

from markergen.adapters.base import OutputRule
from markergen.adapters.filesystem import OutputArtifacts, OutputToDirectory
from markergen.adapters.mock import MockOutputRule
from markergen.adapters.registry import ALL_OUTPUT_RULES
from markergen.adapters.stream import OutputToNothing, OutputToStdout
from markergen.core.errors import OutputError
from markergen.core.models.artifact import Artifact


def _write(rule: OutputRule, artifact: Artifact, generator: str = "gen") -> None:
    with rule.open(generator, artifact) as fh:
        fh.write(artifact.content)


class TestOutputRuleBase:
    def test_cannot_instantiate_abstract(self):
        with pytest.raises(TypeError):
            OutputRule()  # type: ignore[abstract]

    def test_all_rules_have_help(self):
        for name, rule in ALL_OUTPUT_RULES.items():
            assert rule.name == name
            help = rule.help()
            assert help is not None
            assert help.category == "output rules"

    def test_mock_has_no_help(self):
        assert MockOutputRule.help() is None

    def test_str(self):
        assert str(OutputToDirectory(path="out")) == "dir:path=out"
        assert str(OutputToStdout()) == "stdout"
        assert str(OutputArtifacts(config="c")) == "artifacts:config=c"

    def test_rules_are_frozen(self):
        rule = OutputToDirectory(path="out")
        with pytest.raises(ValueError):
            rule.path = "elsewhere"


class TestOutputToDirectory:
    def test_writes_nested_path(self, tmp_path: Path):
        rule = OutputToDirectory(path=str(tmp_path / "out"))
        _write(rule, Artifact(path="sub/a.yaml", content="a: 1\n"))
        assert (tmp_path / "out" / "sub" / "a.yaml").read_text() == "a: 1\n"
        assert rule.destination("gen", Artifact(path="a.yaml", content="")) == str(tmp_path / "out" / "a.yaml")

    def test_refuses_escaping_paths(self, tmp_path: Path):
        rule = OutputToDirectory(path=str(tmp_path / "out"))
        with pytest.raises(OutputError, match="escapes"):
            rule.open("gen", Artifact(path="../evil.txt", content="x"))
        assert not (tmp_path / "evil.txt").exists()

    def test_unwritable_destination(self, tmp_path: Path):
        blocker = tmp_path / "file"
        blocker.write_text("")
        rule = OutputToDirectory(path=str(blocker))
        with pytest.raises(OutputError, match="cannot open"):
            _write(rule, Artifact(path="a.txt", content="x"))

    def test_empty_path_rejected(self):
        with pytest.raises(ValueError):
            OutputToDirectory(path="")

    def test_anchored(self, tmp_path: Path):
        assert OutputToDirectory(path="out").anchored(tmp_path).path == str(tmp_path / "out")
        absolute = OutputToDirectory(path=str(tmp_path / "abs"))
        assert absolute.anchored(Path("/elsewhere")) == absolute


class TestOutputArtifacts:
    def test_config_artifacts(self, tmp_path: Path):
        rule = OutputArtifacts(config=str(tmp_path / "cfg"))
        _write(rule, Artifact(path="crd.yaml", content="x"))
        assert (tmp_path / "cfg" / "crd.yaml").exists()

    def test_config_dir_required(self):
        rule = OutputArtifacts()
        with pytest.raises(OutputError, match="output:crds:artifacts:config=<dir>"):
            rule.open("crds", Artifact(path="crd.yaml", content="x"))

    def test_code_goes_next_to_package(self, tmp_path: Path):
        pkg = tmp_path / "api" / "v1"
        pkg.mkdir(parents=True)
        rule = OutputArtifacts()
        _write(rule, Artifact(path="zz_generated_x.py", content="x", kind="code", package=pkg))
        assert (pkg / "zz_generated_x.py").exists()

    def test_code_dir_overrides_package(self, tmp_path: Path):
        rule = OutputArtifacts(code=str(tmp_path / "code"))
        artifact = Artifact(path="zz.py", content="x", kind="code", package=tmp_path / "pkg")
        _write(rule, artifact)
        assert (tmp_path / "code" / "zz.py").exists()
        assert not (tmp_path / "pkg").exists()

    def test_code_without_package(self):
        with pytest.raises(OutputError):
            OutputArtifacts().open("gen", Artifact(path="zz.py", content="x", kind="code"))

    def test_anchored_keeps_unset_dirs(self, tmp_path: Path):
        rule = OutputArtifacts(config="config").anchored(tmp_path)
        assert rule.config == str(tmp_path / "config")
        assert rule.code is None


class TestStreams:
    def test_nothing_discards(self):
        rule = OutputToNothing()
        _write(rule, Artifact(path="a", content="data"))
        assert rule.destination("gen", Artifact(path="a", content="")) == "<discarded>"

    def test_stdout(self, capsysbinary):
        _write(OutputToStdout(), Artifact(path="a", content="one\n"))
        _write(OutputToStdout(), Artifact(path="b", content="two\n"))
        assert capsysbinary.readouterr().out == b"one\ntwo\n"

    def test_streams_are_not_anchored(self, tmp_path: Path):
        rule = OutputToStdout()
        assert rule.anchored(tmp_path) is rule


class TestMockOutputRule:
    def test_captures(self):
        rule = MockOutputRule()
        _write(rule, Artifact(path="a.txt", content="hi"), generator="crds")
        assert rule.written == {"crds/a.txt": b"hi"}
        rule.reset()
        assert rule.written == {}

    def test_fail(self):
        with pytest.raises(OutputError):
            MockOutputRule(fail=True).open("crds", Artifact(path="a.txt", content="hi"))

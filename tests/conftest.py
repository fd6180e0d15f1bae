"""
Shared test fixtures and configuration.
"""

import textwrap
from pathlib import Path

import pytest
from pydantic import Field

from markergen.adapters.filesystem import OutputArtifacts, OutputToDirectory
from markergen.adapters.mock import MockOutputRule
from markergen.adapters.registry import OutputRuleRegistry
from markergen.adapters.stream import OutputToNothing, OutputToStdout
from markergen.core.config.options import build_options_registry
from markergen.core.models.artifact import Artifact
from markergen.core.services.generators.base import Generator, GeneratorOptions
from markergen.core.services.generators.registry import GeneratorRegistry


class StubOptions(GeneratorOptions):
    size: int = Field(default=1, description="How many artifacts to produce.")


class StubGenerator(Generator):
    """Test generator returning fixed artifacts, or raising a given error."""

    options_model = StubOptions
    summary = "stub generator for tests"

    def __init__(self, name: str = "stub", error: Exception | None = None):
        self._name = name
        self._error = error
        self.calls = []

    @property
    def name(self) -> str:
        return self._name

    def generate(self, context):
        self.calls.append(context)
        if self._error is not None:
            raise self._error
        return [
            Artifact(path=f"{self._name}-{i}.txt", content=f"{self._name} {i}\n")
            for i in range(context.options.size)
        ]


@pytest.fixture
def stub_cls() -> type[StubGenerator]:
    return StubGenerator


@pytest.fixture
def test_rules() -> OutputRuleRegistry:
    return OutputRuleRegistry(
        [OutputToDirectory, OutputToNothing, OutputToStdout, OutputArtifacts, MockOutputRule]
    )


@pytest.fixture
def stub_generators() -> GeneratorRegistry:
    return GeneratorRegistry([StubGenerator("alpha"), StubGenerator("beta")])


@pytest.fixture
def stub_registry(stub_generators, test_rules):
    return build_options_registry(stub_generators, test_rules)


API_SOURCE = '''\
from __future__ import annotations

from pydantic import BaseModel


class WorkspaceSpec(BaseModel):
    """Desired state of a workspace."""

    # +markergen:validation:pattern=^[a-z]+$
    name: str
    """Name of the workspace."""

    # +markergen:validation:minimum=1
    # +markergen:validation:maximum=10
    replicas: int | None = None

    # +markergen:default=true
    started: bool | None = None

    source: Source | None = None

    # +markergen:ignore
    cache: dict[str, str] | None = None


# +markergen:union
class Source(BaseModel):
    git: str | None = None
    zip: str | None = None


# +markergen:root
# +markergen:resource:plural=workspaces,shortName={ws,wks}
class Workspace(BaseModel):
    """A development workspace."""

    spec: WorkspaceSpec
'''


@pytest.fixture
def api_root(tmp_path: Path) -> Path:
    """A source root with one package, ``v1``, holding a small API."""
    root = tmp_path / "api"
    pkg = root / "v1"
    pkg.mkdir(parents=True)
    (pkg / "workspace.py").write_text(API_SOURCE)
    (pkg / "zz_generated_deepcopy.py").write_text(
        textwrap.dedent("""\
            # +markergen:root
            class Leftover:
                pass
        """)
    )
    return root

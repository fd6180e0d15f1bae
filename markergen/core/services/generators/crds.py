"""
CRD generator — Kubernetes CustomResourceDefinition manifests for every
``+markergen:root`` type.

The API version of a root type is the name of its package directory
(``api/v1alpha2/workspace.py`` → ``v1alpha2``). Nested types are inlined
into the ``openAPIV3Schema``, as Kubernetes does not resolve ``$ref``.
"""

from __future__ import annotations

import logging

import yaml
from pydantic import Field

from markergen.core.models.artifact import Artifact
from markergen.core.services.generators import vocabulary as vocab
from markergen.core.services.generators.base import GenerationContext, Generator, GeneratorOptions
from markergen.core.services.generators.openapi import Schema, object_schema
from markergen.core.services.generators.source import TypeInfo, load_types

logger = logging.getLogger(__name__)


class CrdOptions(GeneratorOptions):
    max_desc_len: int | None = Field(
        default=None,
        ge=0,
        description="Maximum length of descriptions, 0 drops them entirely.",
    )
    group: str = Field(default="example.com", description="API group for resources without a group.")


class CrdGenerator(Generator):
    """Generates one CustomResourceDefinition YAML file per root type,
    named ``<group>_<plural>.yaml``."""

    options_model = CrdOptions
    summary = "generates CustomResourceDefinition objects"

    @property
    def name(self) -> str:
        return "crds"

    def markers(self):
        return vocab.with_help(
            vocab.ROOT, vocab.RESOURCE, vocab.DEFAULT, vocab.OPTIONAL, vocab.IGNORE, *vocab.VALIDATION
        )

    def generate(self, context: GenerationContext) -> list[Artifact]:
        options = context.options
        assert isinstance(options, CrdOptions)
        types = load_types(context.roots, context.exclude, self.source_registry)
        known = {t.name: t for t in types}

        artifacts = []
        for info in types:
            if not info.markers.get(vocab.ROOT.name):
                continue
            crd = self._crd(info, known, options)
            artifacts.append(
                Artifact(
                    path=f"{crd['spec']['group']}_{crd['spec']['names']['plural']}.yaml",
                    content=yaml.safe_dump(crd, sort_keys=False),
                    reason=f"CRD for {info.name}",
                )
            )
            logger.debug("CRD for %s", info.name)
        return artifacts

    def _crd(self, info: TypeInfo, known: dict[str, TypeInfo], options: CrdOptions) -> Schema:
        resource = info.markers.get(vocab.RESOURCE.name) or vocab.ResourceMarker()
        singular = info.name.lower()
        plural = resource.plural or f"{singular}s"
        group = resource.group or options.group

        def inline(name: str, _seen: tuple[str, ...] = ()) -> Schema:
            if name in _seen:
                return {"type": "object", "x-kubernetes-preserve-unknown-fields": True}
            seen = (*_seen, name)
            return object_schema(known[name], known, lambda n: inline(n, seen), options.max_desc_len)

        names: Schema = {"kind": info.name, "listKind": f"{info.name}List", "plural": plural, "singular": singular}
        if resource.short_name:
            names["shortNames"] = resource.short_name

        return {
            "apiVersion": "apiextensions.k8s.io/v1",
            "kind": "CustomResourceDefinition",
            "metadata": {"name": f"{plural}.{group}"},
            "spec": {
                "group": group,
                "names": names,
                "scope": resource.scope,
                "versions": [
                    {
                        "name": info.package.name,
                        "served": True,
                        "storage": True,
                        "schema": {"openAPIV3Schema": inline(info.name)},
                    }
                ],
            },
        }

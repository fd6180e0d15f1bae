"""
JSON schema generator — one self-contained schema per root type.
"""

from __future__ import annotations

import json

from pydantic import Field

from markergen.core.models.artifact import Artifact
from markergen.core.services.generators import vocabulary as vocab
from markergen.core.services.generators.base import GenerationContext, Generator, GeneratorOptions
from markergen.core.services.generators.openapi import Schema, object_schema
from markergen.core.services.generators.source import TypeInfo, load_types


class SchemaOptions(GeneratorOptions):
    id_prefix: str | None = Field(default=None, description="Prefix for the $id of each schema.")


class SchemaGenerator(Generator):
    """Generates ``<Type>.json`` for every root type. Nested types are
    emitted once under ``definitions`` and referenced with ``$ref``."""

    options_model = SchemaOptions
    summary = "generates JSON schemas for root types"

    @property
    def name(self) -> str:
        return "schemas"

    def markers(self):
        return vocab.with_help(vocab.ROOT, vocab.UNION, vocab.DEFAULT, vocab.OPTIONAL, vocab.IGNORE, *vocab.VALIDATION)

    def generate(self, context: GenerationContext) -> list[Artifact]:
        options = context.options
        assert isinstance(options, SchemaOptions)
        types = load_types(context.roots, context.exclude, self.source_registry)
        known = {t.name: t for t in types}

        return [
            Artifact(
                path=f"{info.name}.json",
                content=json.dumps(self._schema(info, known, options), indent=2) + "\n",
                reason=f"JSON schema for {info.name}",
            )
            for info in types
            if info.markers.get(vocab.ROOT.name)
        ]

    def _schema(self, root: TypeInfo, known: dict[str, TypeInfo], options: SchemaOptions) -> Schema:
        definitions: dict[str, Schema] = {}
        referenced: set[str] = set()

        def ref(name: str) -> Schema:
            if name == root.name:
                return {"$ref": "#"}
            referenced.add(name)
            return {"$ref": f"#/definitions/{name}"}

        body = object_schema(root, known, ref)
        while True:
            todo = sorted(referenced - set(definitions))
            if not todo:
                break
            for name in todo:
                definitions[name] = object_schema(known[name], known, ref)

        schema: Schema = {"$schema": "http://json-schema.org/draft-07/schema#"}
        if options.id_prefix:
            schema["$id"] = f"{options.id_prefix.rstrip('/')}/{root.name}.json"
        schema["title"] = root.name
        schema.update(body)
        if definitions:
            schema["definitions"] = definitions
        return schema

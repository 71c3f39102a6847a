"""
Schema document loader.

Builds the Schema model from a JSON schema document describing the target
and source record types and the declared functions of a Go package, plus the
converter catalogue and external packages of the configuration.

Document layout::

    {
      "package": "dtos",
      "external_packages": [{"alias": "db", "import_path": "example.com/app/db"}],
      "targets": [
        {
          "name": "UserDTO",
          "from": ["User", "db.UserDB"],
          "bidirectional": true,
          "fields": [{"name": "Name", "type": "string", "tag": "automapper:\\"field=FullName\\""}]
        }
      ],
      "sources": [{"name": "User", "fields": {"FullName": "string"}}],
      "functions": [{"name": "Upper", "params": ["string"], "returns": ["string"], "converter": true}]
    }

Targets and functions may carry a "doc" list of comment lines instead of the
"from" / "bidirectional" / "converter" / "inverts" keys.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from ...utils import qualifier
from ..analyzer.shapes import classify
from ..config import CodeGeneratorConfig
from ..errors import SchemaLoadError
from .nodes import (
    ConverterDef,
    FunctionSignature,
    Schema,
    SignatureKind,
    SourceField,
    SourceRecordType,
    TargetField,
    TargetRecordType,
)
from .tags import parse_annotations, parse_mapping_tag

logger = logging.getLogger(__name__)


def _require(data: dict, key: str, kind: type, where: str) -> Any:
    if key not in data:
        raise SchemaLoadError(f"{where}: missing required key '{key}'")
    value = data[key]
    if not isinstance(value, kind):
        raise SchemaLoadError(f"{where}: '{key}' must be a {kind.__name__}")
    return value


class SchemaLoader:
    """Loads schema documents into the Schema model."""

    def __init__(self, config: CodeGeneratorConfig | None = None):
        """
        Initialize the loader.

        Args:
            config: Generation config providing converters and external packages
        """
        self.config = config or CodeGeneratorConfig()

    def load_file(self, path: str | Path) -> Schema:
        """Load a schema document from a JSON file."""
        try:
            document = json.loads(Path(path).read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise SchemaLoadError(f"Cannot read schema {path}: {e}") from e
        return self.load(document)

    def load(self, document: dict) -> Schema:
        """
        Build a Schema from a parsed document.

        Args:
            document: The schema document

        Returns:
            The schema model

        Raises:
            SchemaLoadError: If the document is malformed
        """
        if not isinstance(document, dict):
            raise SchemaLoadError("Schema document must be a JSON object")

        schema = Schema(package_name=self.config.package or document.get("package", ""))
        if not schema.package_name:
            raise SchemaLoadError("Schema document has no package name and none is configured")

        schema.import_map = self._load_import_map(document)

        for i, data in enumerate(document.get("sources", [])):
            source = self._load_source(data, f"sources[{i}]", schema.import_map)
            if source.name in schema.sources:
                raise SchemaLoadError(f"sources[{i}]: duplicate source record type '{source.name}'")
            schema.sources[source.name] = source

        for i, data in enumerate(document.get("targets", [])):
            target = self._load_target(data, f"targets[{i}]")
            if schema.get_target(target.name) is not None:
                raise SchemaLoadError(f"targets[{i}]: duplicate target record type '{target.name}'")
            schema.targets.append(target)

        for i, data in enumerate(document.get("functions", [])):
            function = self._load_function(data, f"functions[{i}]")
            schema.functions[function.name] = function

        schema.converters = self._build_catalogue(schema)

        logger.info(
            "Loaded package %s: %d targets, %d sources, %d functions, %d converters",
            schema.package_name,
            len(schema.targets),
            len(schema.sources),
            len(schema.functions),
            len(schema.converters),
        )
        return schema

    def _load_import_map(self, document: dict) -> dict[str, str]:
        import_map: dict[str, str] = {}

        packages = [{"alias": p.alias, "import_path": p.import_path} for p in self.config.external_packages]
        packages.extend(document.get("external_packages", []))

        for data in packages:
            import_path = _require(data, "import_path", str, "external_packages")
            alias = data.get("alias") or import_path.rstrip("/").split("/")[-1]
            import_map[alias] = import_path

        return import_map

    def _load_source(self, data: dict, where: str, import_map: dict[str, str]) -> SourceRecordType:
        name = _require(data, "name", str, where)
        raw_fields = data.get("fields", {})

        if isinstance(raw_fields, dict):
            items = list(raw_fields.items())
        elif isinstance(raw_fields, list):
            items = [(_require(f, "name", str, where), _require(f, "type", str, where)) for f in raw_fields]
        else:
            raise SchemaLoadError(f"{where}: 'fields' must be an object or a list")

        alias = qualifier(name)
        is_external = data.get("external", bool(alias))
        return SourceRecordType(
            name=name,
            fields={field_name: SourceField(name=field_name, shape=classify(type_text)) for field_name, type_text in items},
            origin_module=data.get("module", alias),
            is_external=is_external,
            import_path=data.get("import_path", import_map.get(alias, "")),
        )

    def _load_target(self, data: dict, where: str) -> TargetRecordType:
        name = _require(data, "name", str, where)
        annotations = parse_annotations(data.get("doc"))

        sources = data.get("from", annotations.sources)
        if isinstance(sources, str):
            sources = [s.strip() for s in sources.split(",") if s.strip()]
        if not sources:
            raise SchemaLoadError(f"{where}: target '{name}' declares no source (automapper:from)")

        target = TargetRecordType(
            name=name,
            declared_sources=list(sources),
            bidirectional=data.get("bidirectional", annotations.bidirectional),
        )

        for j, field_data in enumerate(data.get("fields", [])):
            field_where = f"{where}.fields[{j}]"
            tag = parse_mapping_tag(field_data.get("tag"))
            target.fields.append(
                TargetField(
                    name=_require(field_data, "name", str, field_where),
                    declared_shape=classify(_require(field_data, "type", str, field_where)),
                    explicit_source_name=tag.field,
                    converter_ref=tag.converter,
                    nested_target_ref=tag.nested,
                    ignored=tag.ignored,
                )
            )

        return target

    def _load_function(self, data: dict, where: str) -> FunctionSignature:
        annotations = parse_annotations(data.get("doc"))
        return FunctionSignature(
            name=_require(data, "name", str, where),
            param_types=list(data.get("params", [])),
            return_types=list(data.get("returns", [])),
            is_converter=data.get("converter", annotations.converter),
            inverts=data.get("inverts", annotations.inverts),
        )

    def _build_catalogue(self, schema: Schema) -> dict[str, ConverterDef]:
        """Configured converters first, then converter-annotated functions under their own name."""
        catalogue: dict[str, ConverterDef] = {}

        for entry in self.config.converters:
            catalogue[entry.name] = ConverterDef(
                name=entry.name,
                bound_function=entry.function,
                signature_kind=SignatureKind.SAFE if entry.safe else SignatureKind.FALLIBLE,
                inverter_function=entry.inverter,
            )

        for function in schema.functions.values():
            if function.is_converter and function.name not in catalogue:
                catalogue[function.name] = ConverterDef(
                    name=function.name,
                    bound_function=function.name,
                    signature_kind=function.inferred_kind() or SignatureKind.FALLIBLE,
                    inverter_function=schema.find_inverter(function.name),
                )

        return catalogue


def load_schema(path: str | Path, config: CodeGeneratorConfig | None = None) -> Schema:
    """Convenience function: load a schema document file."""
    return SchemaLoader(config).load_file(path)

"""
Tests for the schema validator.
"""

import unittest

from automapper_gen.pipeline.analyzer.diagnostics import IGNORE_TAG, Severity
from automapper_gen.pipeline.analyzer.field_resolver import NamingPolicy
from automapper_gen.pipeline.analyzer.validator import SchemaValidator, validate
from automapper_gen.pipeline.config import CodeGeneratorConfig
from automapper_gen.pipeline.schema.loader import SchemaLoader


def load(document, **config):
    document = {"package": "dtos", **document}
    return SchemaLoader(CodeGeneratorConfig.from_dict(config)).load(document)


def target(name, sources, *fields, **extra):
    return {"name": name, "from": sources, "fields": list(fields), **extra}


def field(name, type_text, tag=None):
    data = {"name": name, "type": type_text}
    if tag:
        data["tag"] = f'automapper:"{tag}"'
    return data


UPPER = {"name": "upper", "params": ["string"], "returns": ["string"], "converter": True}


class TestScenarios(unittest.TestCase):
    def test_round_trip_has_no_diagnostics(self):
        schema = load(
            {
                "targets": [target("T", ["S"], field("ID", "int64"), field("Label", "string", "converter=upper"))],
                "sources": [{"name": "S", "fields": {"ID": "int64", "Label": "string"}}],
                "functions": [UPPER],
            }
        )

        result = validate(schema)

        self.assertEqual(result.diagnostics, [])
        self.assertTrue(result.is_valid())
        self.assertEqual(result.stats, {"targets": 1, "sources": 1, "fields": 2, "errors": 0, "warnings": 0})

    def test_missing_binding_is_single_fixable_warning(self):
        schema = load(
            {
                "targets": [target("UserDTO", ["User"], field("ID", "int64"), field("Foo", "string"))],
                "sources": [{"name": "User", "fields": {"ID": "int64"}}],
            }
        )

        result = validate(schema, NamingPolicy.SNAKE_TO_CAMEL)

        self.assertEqual(len(result.diagnostics), 1)
        diagnostic = result.diagnostics[0]
        self.assertEqual(diagnostic.severity, Severity.WARNING)
        self.assertTrue(diagnostic.fixable)
        self.assertIn(IGNORE_TAG, diagnostic.suggestion)
        self.assertEqual(diagnostic.field_name, "Foo")
        self.assertTrue(result.is_valid())

    def test_bidirectional_missing_inverter_is_warning_only(self):
        schema = load(
            {
                "targets": [
                    target(
                        "T",
                        ["S"],
                        field("ID", "int64"),
                        field("Label", "string", "converter=upper"),
                        bidirectional=True,
                    )
                ],
                "sources": [{"name": "S", "fields": {"ID": "int64", "Label": "string"}}],
                "functions": [UPPER],
            }
        )

        result = validate(schema)

        self.assertTrue(result.is_valid())
        self.assertEqual(len(result.warnings), 1)
        self.assertIn("has no inverter", result.warnings[0].message)
        self.assertIn("skipped in reverse mapping", result.warnings[0].message)


class TestNestedValidation(unittest.TestCase):
    def _cyclic_schema(self, closing_target):
        return load(
            {
                "targets": [
                    target("A", ["SA"], field("B", "*B", "dto=B")),
                    target("B", ["SB"], field("Next", f"*{closing_target}", f"dto={closing_target}")),
                    target("C", ["SC"], field("Name", "string")),
                ],
                "sources": [
                    {"name": "SA", "fields": {"B": "*SB"}},
                    {"name": "SB", "fields": {"Next": f"*S{closing_target}"}},
                    {"name": "SC", "fields": {"Name": "string"}},
                ],
            }
        )

    def test_cycle_is_error(self):
        result = validate(self._cyclic_schema("A"))

        self.assertFalse(result.is_valid())
        messages = [d.message for d in result.errors]
        self.assertIn("Circular dependency detected with B", messages)
        self.assertIn("Circular dependency detected with A", messages)

    def test_chain_is_valid(self):
        result = validate(self._cyclic_schema("C"))

        self.assertTrue(result.is_valid(), [str(d) for d in result.diagnostics])

    def test_self_nesting_is_error(self):
        schema = load(
            {
                "targets": [target("NodeDTO", ["Node"], field("Parent", "*NodeDTO", "dto=NodeDTO"))],
                "sources": [{"name": "Node", "fields": {"Parent": "*Node"}}],
            }
        )

        result = validate(schema)

        self.assertEqual([d.message for d in result.errors], ["Circular dependency detected with NodeDTO"])

    def test_missing_nested_target(self):
        schema = load(
            {
                "targets": [target("UserDTO", ["User"], field("Address", "*AddressDTO", "dto=AddressDTO"))],
                "sources": [{"name": "User", "fields": {"Address": "*Address"}}],
            }
        )

        result = validate(schema)

        self.assertEqual([d.message for d in result.errors], ["Nested target 'AddressDTO' not found"])

    def test_nested_sequence_mismatch(self):
        schema = load(
            {
                "targets": [
                    target("UserDTO", ["User"], field("Tags", "[]TagDTO", "dto=TagDTO")),
                    target("TagDTO", ["Tag"], field("Label", "string")),
                ],
                "sources": [
                    {"name": "User", "fields": {"Tags": "*Tag"}},
                    {"name": "Tag", "fields": {"Label": "string"}},
                ],
            }
        )

        result = validate(schema)

        self.assertEqual(len(result.errors), 1)
        self.assertIn("Incompatible sequence/non-sequence types", result.errors[0].message)

    def test_nested_target_must_map_from_source_type(self):
        schema = load(
            {
                "targets": [
                    target("UserDTO", ["User"], field("Address", "AddressDTO", "dto=AddressDTO")),
                    target("AddressDTO", ["Location"], field("City", "string")),
                ],
                "sources": [
                    {"name": "User", "fields": {"Address": "Address"}},
                    {"name": "Location", "fields": {"City": "string"}},
                ],
            }
        )

        result = validate(schema)

        self.assertEqual([d.message for d in result.errors], ["Nested target 'AddressDTO' does not map from Address"])


class TestFieldValidation(unittest.TestCase):
    def test_type_mismatch_is_fixable_error(self):
        schema = load(
            {
                "targets": [target("UserDTO", ["User"], field("Age", "string"))],
                "sources": [{"name": "User", "fields": {"Age": "int"}}],
            }
        )

        result = validate(schema)

        self.assertEqual(len(result.errors), 1)
        error = result.errors[0]
        self.assertTrue(error.fixable)
        self.assertEqual(error.message, "Type mismatch: string <- int (cannot convert without converter)")
        self.assertIn("converter=", error.suggestion)

    def test_pointer_conversion_is_warning(self):
        schema = load(
            {
                "targets": [target("UserDTO", ["User"], field("Email", "*string"))],
                "sources": [{"name": "User", "fields": {"Email": "string"}}],
            }
        )

        result = validate(schema)

        self.assertTrue(result.is_valid())
        self.assertEqual([d.message for d in result.warnings], ["Pointer conversion: *string <- string"])

    def test_qualified_types_are_compatible(self):
        schema = load(
            {
                "targets": [target("UserDTO", ["User"], field("Role", "Role"))],
                "sources": [{"name": "User", "fields": {"Role": "db.Role"}}],
            }
        )

        self.assertEqual(validate(schema).diagnostics, [])

    def test_missing_source_record_is_error(self):
        schema = load({"targets": [target("UserDTO", ["Ghost"], field("ID", "int64"))], "sources": []})

        result = validate(schema)

        self.assertEqual(len(result.errors), 1)
        self.assertEqual(result.errors[0].message, "Source record type not found")
        self.assertEqual(result.errors[0].location(), "Ghost -> UserDTO")

    def test_explicit_field_not_found_is_error(self):
        schema = load(
            {
                "targets": [target("UserDTO", ["User"], field("Name", "string", "field=FullName"))],
                "sources": [{"name": "User", "fields": {"Name": "string"}}],
            }
        )

        result = validate(schema)

        self.assertEqual([d.message for d in result.errors], ["Source field 'FullName' not found"])

    def test_ignored_field_is_not_checked(self):
        schema = load(
            {
                "targets": [target("UserDTO", ["User"], field("Secret", "string", "-"))],
                "sources": [{"name": "User", "fields": {}}],
            }
        )

        self.assertEqual(validate(schema).diagnostics, [])

    def test_ambiguous_transliteration_is_error(self):
        schema = load(
            {
                "targets": [target("UserDTO", ["User"], field("UserName", "string"))],
                "sources": [{"name": "User", "fields": {"user_name": "string", "User_name": "string"}}],
            }
        )

        result = validate(schema, NamingPolicy.SNAKE_TO_CAMEL)

        self.assertEqual(len(result.errors), 1)
        self.assertIn("Ambiguous source field: User_name, user_name", result.errors[0].message)

    def test_every_declared_source_is_checked(self):
        schema = load(
            {
                "targets": [target("UserDTO", ["User", "Account"], field("ID", "int64"))],
                "sources": [
                    {"name": "User", "fields": {"ID": "int64"}},
                    {"name": "Account", "fields": {"ID": "string"}},
                ],
            }
        )

        result = validate(schema)

        self.assertEqual(len(result.errors), 1)
        self.assertEqual(result.errors[0].source_name, "Account")


class TestConverterValidation(unittest.TestCase):
    def test_unknown_converter(self):
        schema = load(
            {
                "targets": [target("UserDTO", ["User"], field("Name", "string", "converter=Nope"))],
                "sources": [{"name": "User", "fields": {"Name": "int"}}],
            }
        )

        result = validate(schema)

        self.assertEqual([d.message for d in result.errors], ["Converter 'Nope' not found"])

    def test_identical_types_warning(self):
        schema = load(
            {
                "targets": [target("EventDTO", ["Event"], field("At", "string", "converter=TimeToString"))],
                "sources": [{"name": "Event", "fields": {"At": "string"}}],
                "functions": [{"name": "TimeToString", "params": ["time.Time"], "returns": ["string"], "converter": True}],
            }
        )

        result = validate(schema)

        self.assertTrue(result.is_valid())
        self.assertEqual(len(result.warnings), 1)
        self.assertTrue(result.warnings[0].fixable)
        self.assertEqual(result.warnings[0].message, "Converter specified but types are identical: string")

    def test_configured_converter_without_function(self):
        schema = load(
            {"targets": [], "sources": []},
            converters=[{"name": "Money", "function": "CentsToString", "safe": True}],
        )

        result = validate(schema)

        self.assertEqual(len(result.errors), 1)
        self.assertEqual(result.errors[0].location(), "converters")
        self.assertIn("'CentsToString' (for converter 'Money') not found", result.errors[0].message)

    def test_configured_converter_with_wrong_signature(self):
        schema = load(
            {
                "targets": [],
                "sources": [],
                "functions": [{"name": "ParseAge", "params": ["string"], "returns": ["int", "error"]}],
            },
            converters=[{"name": "Age", "function": "ParseAge", "safe": True}],
        )

        result = validate(schema)

        self.assertEqual(len(result.errors), 1)
        self.assertIn("expected: func(T) U", result.errors[0].message)

    def test_function_referenced_directly(self):
        schema = load(
            {
                "targets": [target("UserDTO", ["User"], field("Age", "int", "converter=ParseAge"))],
                "sources": [{"name": "User", "fields": {"Age": "string"}}],
                "functions": [{"name": "ParseAge", "params": ["string"], "returns": ["int", "error"]}],
            }
        )

        self.assertEqual(validate(schema).diagnostics, [])

    def test_function_with_invalid_signature_referenced_directly(self):
        schema = load(
            {
                "targets": [target("UserDTO", ["User"], field("Age", "int", "converter=Split"))],
                "sources": [{"name": "User", "fields": {"Age": "string"}}],
                "functions": [{"name": "Split", "params": ["string", "string"], "returns": ["int"]}],
            }
        )

        result = validate(schema)

        self.assertEqual(len(result.errors), 1)
        self.assertIn("cannot be used as a converter", result.errors[0].message)

    def test_inverter_with_invalid_signature(self):
        schema = load(
            {
                "targets": [
                    target("T", ["S"], field("Label", "string", "converter=upper"), bidirectional=True),
                ],
                "sources": [{"name": "S", "fields": {"Label": "string"}}],
                "functions": [
                    UPPER,
                    {"name": "lower", "params": ["string"], "returns": [], "inverts": "upper"},
                ],
            }
        )

        result = SchemaValidator(schema).validate()

        self.assertTrue(result.is_valid())
        self.assertEqual(len(result.warnings), 1)
        self.assertIn("Inverter function 'lower' has an invalid signature", result.warnings[0].message)


class TestDiagnosticFormatting(unittest.TestCase):
    def test_str_includes_location_and_suggestion(self):
        schema = load(
            {
                "targets": [target("UserDTO", ["User"], field("Foo", "string"))],
                "sources": [{"name": "User", "fields": {}}],
            }
        )

        text = str(validate(schema).diagnostics[0])

        self.assertTrue(text.startswith("[WARN]  User.Foo -> UserDTO.Foo: Source field 'Foo' not found"))
        self.assertIn("Suggestion:", text)


if __name__ == "__main__":
    unittest.main()

"""
Tests for the Go backend.
"""

from automapper_gen.pipeline.analyzer.ir_nodes import IR, Registration, RegistryPlan
from automapper_gen.pipeline.ast_backends.go_backend import GoBackend
from automapper_gen.pipeline.config import CodeGeneratorConfig
from automapper_gen.pipeline.emitter.statements import (
    AddressOf,
    Assign,
    Call,
    Comment,
    EmittedProcedure,
    FailureCheck,
    Loop,
    Name,
    NilArgumentGuard,
    ReturnSuccess,
    Selector,
)


def _backend():
    return GoBackend(CodeGeneratorConfig())


class TestImportGrouping:
    def test_standard_before_external(self):
        backend = _backend()
        backend.required_imports.update({"fmt", "errors"})
        backend.used_qualifiers.update({"time", "db"})

        groups = backend.import_groups({"db": "example.com/app/db"})

        assert groups == [
            [("", "errors"), ("", "fmt"), ("", "time")],
            [("", "example.com/app/db")],
        ]

    def test_alias_kept_when_it_differs_from_path(self):
        backend = _backend()
        backend.use_type("*models.Account")

        assert backend.import_groups({"models": "example.com/app/db"}) == [[("models", "example.com/app/db")]]

    def test_no_imports(self):
        assert _backend().import_groups({}) == []

    def test_use_type_records_every_qualifier(self):
        backend = _backend()
        backend.use_type("map[db.Key]time.Time")

        assert backend.used_qualifiers == {"db", "time"}


class TestRendering:
    def test_expressions(self):
        backend = _backend()
        src_name = Selector(Name("src"), "Name")

        assert backend.expression(Call("upper", (src_name,))) == "upper(src.Name)"
        assert backend.expression(AddressOf(Name("v"))) == "&v"

    def test_procedure_signature_and_ignored_summary(self):
        backend = _backend()
        procedure = EmittedProcedure(
            name="MapFromUserDB",
            doc="MapFromUserDB maps from db.UserDB to UserDTO",
            receiver_type="UserDTO",
            parameter_name="src",
            parameter_type="db.UserDB",
            returns_error=False,
            statements=[
                NilArgumentGuard(argument="src", message="source is nil", with_error=False),
                Assign(Selector(Name("d"), "Name"), Selector(Name("src"), "Name")),
                ReturnSuccess(with_error=False),
            ],
            ignored_fields=["Secret", "Internal"],
        )

        text = backend.render_procedure(procedure)

        assert text == (
            "// MapFromUserDB maps from db.UserDB to UserDTO\n"
            "// Ignored fields: Secret, Internal\n"
            "func (d *UserDTO) MapFromUserDB(src *db.UserDB) {\n"
            "\tif src == nil {\n"
            "\t\treturn\n"
            "\t}\n"
            "\n"
            "\td.Name = src.Name\n"
            "\n"
            "\treturn\n"
            "}\n"
        )
        assert backend.used_qualifiers == {"db"}
        assert backend.required_imports == set()

    def test_failing_guard_requires_errors(self):
        backend = _backend()

        lines = backend.build(NilArgumentGuard(argument="dst", message="destination is nil"), 1)

        assert lines[1] == '\t\treturn errors.New("destination is nil")'
        assert "errors" in backend.required_imports

    def test_failure_check_with_index(self):
        backend = _backend()

        lines = backend.build(FailureCheck(context="mapping nested field Items", index="i"), 2)

        assert lines == [
            "\t\tif err != nil {",
            '\t\t\treturn fmt.Errorf("mapping nested field Items[%d]: %w", i, err)',
            "\t\t}",
        ]
        assert "fmt" in backend.required_imports

    def test_loop_without_index(self):
        backend = _backend()

        lines = backend.build(Loop(item="item", collection=Selector(Name("src"), "Tags"), body=[Comment("x")]), 0)

        assert lines == ["for _, item := range src.Tags {", "\t// x", "}"]


class TestGenerate:
    def test_registry_and_header(self):
        backend = _backend()
        ir = IR(
            package_name="dtos",
            registry=RegistryPlan(
                registrations=[
                    Registration(name="ParseTime", function="StringToTime", input_type="string", output_type="time.Time"),
                    Registration(name="upper", function="upper", input_type="string", output_type="string", fallible=False),
                ]
            ),
            generation_comment="// Generated by automapper-gen v1.0.0 : automapper-gen schema.json",
        )

        code = backend.generate(ir, [])

        assert code.startswith(
            "// Generated by automapper-gen v1.0.0 : automapper-gen schema.json\n"
            "// Code generated by automapper-gen. DO NOT EDIT.\n"
            "\n"
            "package dtos\n"
            "\n"
            "import (\n"
            '\t"fmt"\n'
            '\t"sync"\n'
            '\t"time"\n'
            ")\n"
        )
        assert "type ConverterRegistry struct {" in code
        assert "func NewConverterRegistry() *ConverterRegistry {" in code
        assert 'Register[string, time.Time](r, "ParseTime", StringToTime)' in code
        assert 'Register[string, string](r, "upper", func(v string) (string, error) {' in code
        assert "ConverterWrongType" in code
        assert code.count("{") == code.count("}")

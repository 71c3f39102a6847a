"""
Go code generation backend.

Renders emitted procedures as Go methods and the converter registry from
Jinja2 templates. Tracks which packages the rendered code actually uses so
the import block never lists an unused package.
"""

from __future__ import annotations

import re

from ...utils import POINTER_SIGIL
from ..analyzer.ir_nodes import IR, RegistryPlan
from ..config import CodeGeneratorConfig
from ..emitter.statements import (
    AddressOf,
    Allocate,
    AllocateSequence,
    AppendTo,
    Assign,
    Call,
    Comment,
    Declare,
    Deref,
    EmittedProcedure,
    Expr,
    FailureCheck,
    Guard,
    Index,
    Invoke,
    Length,
    Literal,
    Loop,
    MethodCall,
    Name,
    NilArgumentGuard,
    ReturnSuccess,
    Scope,
    Selector,
    StatementBuilder,
)
from .base import AstBackend

QUALIFIER_PATTERN = re.compile(r"\b([A-Za-z_]\w*)\.[A-Za-z_]")


class GoBackend(AstBackend, StatementBuilder):
    """Go code generation backend."""

    TEMPLATE_LANG = "go"
    FILE_EXTENSION = "go"

    def __init__(self, config: CodeGeneratorConfig):
        super().__init__(config)
        self.header_template = self.jinja_env.get_template("header.go.jinja2")
        self.registry_template = self.jinja_env.get_template("registry.go.jinja2")
        self._reset_imports()

    def _reset_imports(self) -> None:
        self.required_imports: set[str] = set()
        self.used_qualifiers: set[str] = set()

    def use_type(self, type_text: str) -> str:
        """Record the package qualifiers of a type and return it unchanged."""
        for qualifier in QUALIFIER_PATTERN.findall(type_text):
            self.used_qualifiers.add(qualifier)
        return type_text

    def generate(self, ir: IR, procedures: list[EmittedProcedure]) -> str:
        """Generate a complete Go file."""
        self._reset_imports()

        sections = [self.render_procedure(procedure) for procedure in procedures]

        if ir.registry is not None:
            sections.insert(0, self.render_registry(ir.registry))

        header = self.header_template.render(
            generation_comment=ir.generation_comment,
            package=ir.package_name,
            import_groups=self.import_groups(ir.import_map),
        )

        return header + "\n" + "\n".join(sections)

    def import_groups(self, import_map: dict[str, str]) -> list[list[tuple[str, str]]]:
        """
        Resolve used packages into import groups.

        Args:
            import_map: alias -> import path of external packages

        Returns:
            Standard-library imports, then other imports; each a sorted list
            of (alias, path) where alias is empty when it matches the path
        """
        paths: dict[str, str] = {path: "" for path in self.required_imports}

        for qualifier in self.used_qualifiers:
            # Unknown qualifiers are standard-library packages such as time
            path = import_map.get(qualifier, qualifier)
            alias = "" if path.rstrip("/").split("/")[-1] == qualifier else qualifier
            paths[path] = alias

        standard = [(alias, path) for path, alias in paths.items() if "." not in path.split("/")[0]]
        others = [(alias, path) for path, alias in paths.items() if "." in path.split("/")[0]]

        standard.sort(key=lambda item: item[1])
        others.sort(key=lambda item: item[1])
        return [group for group in (standard, others) if group]

    def render_registry(self, registry: RegistryPlan) -> str:
        """Render the converter registry runtime."""
        self.required_imports.update({"fmt", "sync"})
        for registration in registry.registrations:
            self.use_type(registration.input_type)
            self.use_type(registration.output_type)
        return self.registry_template.render(registrations=registry.registrations)

    def render_procedure(self, procedure: EmittedProcedure) -> str:
        """Render one mapping procedure as a method."""
        parameter_type = self.use_type(procedure.parameter_type)
        lines = [f"// {procedure.doc}"]
        if procedure.ignored_fields:
            lines.append(f"// Ignored fields: {', '.join(procedure.ignored_fields)}")

        result = " error" if procedure.returns_error else ""
        lines.append(
            f"func ({procedure.receiver_name} *{procedure.receiver_type}) {procedure.name}"
            f"({procedure.parameter_name} *{parameter_type}){result} {{"
        )
        lines.extend(self.build_all(procedure.statements, 1))
        lines.append("}")
        return "\n".join(lines) + "\n"

    # --- expressions ------------------------------------------------------------

    def expression(self, expr: Expr) -> str:
        if isinstance(expr, Name):
            return expr.ident
        if isinstance(expr, Literal):
            return expr.text
        if isinstance(expr, Selector):
            return f"{self.expression(expr.owner)}.{expr.name}"
        if isinstance(expr, Deref):
            return f"{POINTER_SIGIL}{self.expression(expr.value)}"
        if isinstance(expr, AddressOf):
            return f"&{self.expression(expr.value)}"
        if isinstance(expr, Index):
            return f"{self.expression(expr.collection)}[{self.expression(expr.index)}]"
        if isinstance(expr, Length):
            return f"len({self.expression(expr.collection)})"
        if isinstance(expr, Call):
            return f"{expr.function}({self._arguments(expr.args)})"
        if isinstance(expr, MethodCall):
            return f"{self.expression(expr.receiver)}.{expr.method}({self._arguments(expr.args)})"
        raise TypeError(f"Unsupported expression: {type(expr).__name__}")

    def _arguments(self, args: tuple[Expr, ...]) -> str:
        return ", ".join(self.expression(arg) for arg in args)

    def _block(self, opener: str, body, depth: int) -> list[str]:
        pad = self.indent(depth)
        return [f"{pad}{opener}{{", *self.build_all(body, depth + 1), f"{pad}}}"]

    # --- statements -------------------------------------------------------------

    def comment(self, statement: Comment, depth: int) -> list[str]:
        return [f"{self.indent(depth)}// {statement.text}"]

    def nil_argument_guard(self, statement: NilArgumentGuard, depth: int) -> list[str]:
        pad = self.indent(depth)
        if statement.with_error:
            self.required_imports.add("errors")
            exit_line = f'return errors.New("{statement.message}")'
        else:
            exit_line = "return"
        return [
            f"{pad}if {statement.argument} == nil {{",
            f"{pad}{self.INDENT}{exit_line}",
            f"{pad}}}",
            "",
        ]

    def guard(self, statement: Guard, depth: int) -> list[str]:
        lines = self._block(f"if {self.expression(statement.subject)} != nil ", statement.body, depth)
        if statement.note:
            lines.append(f"{self.indent(depth)}// {statement.note}")
        return lines

    def scope(self, statement: Scope, depth: int) -> list[str]:
        return self._block("", statement.body, depth)

    def assign(self, statement: Assign, depth: int) -> list[str]:
        return [f"{self.indent(depth)}{self.expression(statement.target)} = {self.expression(statement.value)}"]

    def declare(self, statement: Declare, depth: int) -> list[str]:
        pad = self.indent(depth)
        if statement.value is not None:
            return [f"{pad}{statement.name} := {self.expression(statement.value)}"]
        return [f"{pad}var {statement.name} {self.use_type(statement.type_name or '')}"]

    def allocate(self, statement: Allocate, depth: int) -> list[str]:
        return [f"{self.indent(depth)}{statement.name} := &{self.use_type(statement.type_name)}{{}}"]

    def allocate_sequence(self, statement: AllocateSequence, depth: int) -> list[str]:
        element = self.use_type(statement.element_type)
        if statement.element_is_pointer:
            element = POINTER_SIGIL + element

        sizes = [self.expression(statement.length)]
        if statement.capacity is not None:
            sizes.append(self.expression(statement.capacity))

        target = self.expression(statement.target)
        return [f"{self.indent(depth)}{target} = make([]{element}, {', '.join(sizes)})"]

    def invoke(self, statement: Invoke, depth: int) -> list[str]:
        pad = self.indent(depth)
        call = self.expression(statement.call)
        if not statement.results:
            return [f"{pad}{call}"]

        results = ", ".join(self.expression(result) for result in statement.results)
        operator = ":=" if statement.declare else "="
        return [f"{pad}{results} {operator} {call}"]

    def failure_check(self, statement: FailureCheck, depth: int) -> list[str]:
        self.required_imports.add("fmt")
        pad = self.indent(depth)
        if statement.index:
            wrapped = f'fmt.Errorf("{statement.context}[%d]: %w", {statement.index}, {statement.error_var})'
        else:
            wrapped = f'fmt.Errorf("{statement.context}: %w", {statement.error_var})'
        return [
            f"{pad}if {statement.error_var} != nil {{",
            f"{pad}{self.INDENT}return {wrapped}",
            f"{pad}}}",
        ]

    def loop(self, statement: Loop, depth: int) -> list[str]:
        index = statement.index or "_"
        opener = f"for {index}, {statement.item} := range {self.expression(statement.collection)} "
        return self._block(opener, statement.body, depth)

    def append_to(self, statement: AppendTo, depth: int) -> list[str]:
        target = self.expression(statement.target)
        return [f"{self.indent(depth)}{target} = append({target}, {self.expression(statement.value)})"]

    def return_success(self, statement: ReturnSuccess, depth: int) -> list[str]:
        pad = self.indent(depth)
        return ["", f"{pad}return nil" if statement.with_error else f"{pad}return"]

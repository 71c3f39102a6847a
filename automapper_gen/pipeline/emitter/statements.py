"""
Backend-agnostic statement nodes.

The emission driver lowers procedure plans into these nodes; a rendering
backend turns them into source text through the StatementBuilder interface.
Nodes describe operations, not syntax: a Guard is "act only when the subject
is present", a FailureCheck is "abort with a wrapped error".
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

# --- expressions -------------------------------------------------------------


@dataclass(frozen=True)
class Expr:
    """Base of all expressions."""


@dataclass(frozen=True)
class Name(Expr):
    ident: str = ""


@dataclass(frozen=True)
class Literal(Expr):
    text: str = ""


@dataclass(frozen=True)
class Selector(Expr):
    """Field access ``owner.name``."""

    owner: Expr = field(default_factory=Expr)
    name: str = ""


@dataclass(frozen=True)
class Deref(Expr):
    value: Expr = field(default_factory=Expr)


@dataclass(frozen=True)
class AddressOf(Expr):
    value: Expr = field(default_factory=Expr)


@dataclass(frozen=True)
class Index(Expr):
    collection: Expr = field(default_factory=Expr)
    index: Expr = field(default_factory=Expr)


@dataclass(frozen=True)
class Length(Expr):
    collection: Expr = field(default_factory=Expr)


@dataclass(frozen=True)
class Call(Expr):
    """Call of a plain function."""

    function: str = ""
    args: tuple[Expr, ...] = ()


@dataclass(frozen=True)
class MethodCall(Expr):
    """Call of a procedure on a receiver."""

    receiver: Expr = field(default_factory=Expr)
    method: str = ""
    args: tuple[Expr, ...] = ()


# --- statements --------------------------------------------------------------


@dataclass
class Statement:
    """Base of all statements."""


@dataclass
class Comment(Statement):
    text: str = ""


@dataclass
class NilArgumentGuard(Statement):
    """End the procedure immediately when the argument is absent."""

    argument: str = ""
    message: str = ""
    with_error: bool = True  # False: plain return, no failure value


@dataclass
class Guard(Statement):
    """Run ``body`` only when ``subject`` is present; ``note`` follows the guard."""

    subject: Expr = field(default_factory=Expr)
    body: list[Statement] = field(default_factory=list)
    note: str | None = None


@dataclass
class Scope(Statement):
    """A block limiting the lifetime of its locals."""

    body: list[Statement] = field(default_factory=list)


@dataclass
class Assign(Statement):
    target: Expr = field(default_factory=Expr)
    value: Expr = field(default_factory=Expr)


@dataclass
class Declare(Statement):
    """Declare a local, either zero-valued of ``type_name`` or initialized from ``value``."""

    name: str = ""
    type_name: str | None = None
    value: Expr | None = None


@dataclass
class Allocate(Statement):
    """Declare a local pointing to a fresh zero-valued instance of ``type_name``."""

    name: str = ""
    type_name: str = ""


@dataclass
class AllocateSequence(Statement):
    """Assign a new sequence of ``length`` elements with room for ``capacity``."""

    target: Expr = field(default_factory=Expr)
    element_type: str = ""
    element_is_pointer: bool = False
    length: Expr = field(default_factory=Expr)
    capacity: Expr | None = None


@dataclass
class Invoke(Statement):
    """Evaluate ``call``; store its results, declaring them when ``declare`` is set."""

    call: Expr = field(default_factory=Expr)
    results: list[Expr] = field(default_factory=list)
    declare: bool = False


@dataclass
class FailureCheck(Statement):
    """Abort the procedure when ``error_var`` holds a failure, wrapping it with ``context``."""

    error_var: str = "err"
    context: str = ""
    index: str | None = None  # Loop index named in the wrapped message


@dataclass
class Loop(Statement):
    """Iterate ``collection``; ``index`` is None when the body does not use it."""

    item: str = "item"
    collection: Expr = field(default_factory=Expr)
    body: list[Statement] = field(default_factory=list)
    index: str | None = None


@dataclass
class AppendTo(Statement):
    target: Expr = field(default_factory=Expr)
    value: Expr = field(default_factory=Expr)


@dataclass
class ReturnSuccess(Statement):
    with_error: bool = True  # False: plain return, no failure value


@dataclass
class EmittedProcedure:
    """A procedure ready for rendering."""

    name: str = ""
    doc: str = ""
    receiver_name: str = "d"
    receiver_type: str = ""
    parameter_name: str = ""
    parameter_type: str = ""
    returns_error: bool = True
    statements: list[Statement] = field(default_factory=list)
    ignored_fields: list[str] = field(default_factory=list)


# --- builder interface -------------------------------------------------------


class StatementBuilder(ABC):
    """Narrow interface through which a backend consumes statements.

    ``build`` dispatches on the node type; each method returns the rendered
    lines of one statement at the given indentation depth.
    """

    _DISPATCH = {
        Comment: "comment",
        NilArgumentGuard: "nil_argument_guard",
        Guard: "guard",
        Scope: "scope",
        Assign: "assign",
        Declare: "declare",
        Allocate: "allocate",
        AllocateSequence: "allocate_sequence",
        Invoke: "invoke",
        FailureCheck: "failure_check",
        Loop: "loop",
        AppendTo: "append_to",
        ReturnSuccess: "return_success",
    }

    def build(self, statement: Statement, depth: int) -> list[str]:
        method = self._DISPATCH.get(type(statement))
        if method is None:
            raise TypeError(f"Unsupported statement: {type(statement).__name__}")
        return getattr(self, method)(statement, depth)

    def build_all(self, statements: list[Statement], depth: int) -> list[str]:
        lines: list[str] = []
        for statement in statements:
            lines.extend(self.build(statement, depth))
        return lines

    @abstractmethod
    def expression(self, expr: Expr) -> str:
        """Render an expression."""

    @abstractmethod
    def comment(self, statement: Comment, depth: int) -> list[str]: ...

    @abstractmethod
    def nil_argument_guard(self, statement: NilArgumentGuard, depth: int) -> list[str]: ...

    @abstractmethod
    def guard(self, statement: Guard, depth: int) -> list[str]: ...

    @abstractmethod
    def scope(self, statement: Scope, depth: int) -> list[str]: ...

    @abstractmethod
    def assign(self, statement: Assign, depth: int) -> list[str]: ...

    @abstractmethod
    def declare(self, statement: Declare, depth: int) -> list[str]: ...

    @abstractmethod
    def allocate(self, statement: Allocate, depth: int) -> list[str]: ...

    @abstractmethod
    def allocate_sequence(self, statement: AllocateSequence, depth: int) -> list[str]: ...

    @abstractmethod
    def invoke(self, statement: Invoke, depth: int) -> list[str]: ...

    @abstractmethod
    def failure_check(self, statement: FailureCheck, depth: int) -> list[str]: ...

    @abstractmethod
    def loop(self, statement: Loop, depth: int) -> list[str]: ...

    @abstractmethod
    def append_to(self, statement: AppendTo, depth: int) -> list[str]: ...

    @abstractmethod
    def return_success(self, statement: ReturnSuccess, depth: int) -> list[str]: ...

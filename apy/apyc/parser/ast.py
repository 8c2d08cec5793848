from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Union


@dataclass(frozen=True)
class Located:
    """Source position: 1-based line/column plus `[start, end)` character offsets."""

    line: int
    column: int
    start: int
    end: int


@dataclass(frozen=True)
class Erasure:
    """
    A TypeScript-only span of the parsed text.

    kind:
      - "annotation": also swallows horizontal whitespace before the span
      - "modifier": also swallows horizontal whitespace after the span
      - "exact": exactly the span (type-only declarations and imports,
        type parameter and type argument lists)
    """

    start: int
    end: int
    kind: str


class Node:
    loc: Located

    @property
    def start(self) -> int:
        return self.loc.start

    @property
    def end(self) -> int:
        return self.loc.end


class Expr(Node):
    pass


class Stmt(Node):
    pass


# --- expressions -----------------------------------------------------------


@dataclass
class Name(Expr):
    loc: Located
    name: str


@dataclass
class Literal(Expr):
    loc: Located
    kind: str  # "number" | "string" | "boolean" | "null" | "undefined" | "regex"
    raw: str


@dataclass
class TemplateLiteral(Expr):
    loc: Located
    raw: str


@dataclass
class This(Expr):
    loc: Located


@dataclass
class Super(Expr):
    loc: Located


@dataclass
class Spread(Expr):
    loc: Located
    argument: Expr


@dataclass
class ArrayLiteral(Expr):
    loc: Located
    elements: List[Expr]


@dataclass
class Property(Node):
    loc: Located
    key: Optional[str]
    value: Optional[Expr]
    kind: str = "init"  # "init" | "shorthand" | "method" | "get" | "set"
    computed_key: Optional[Expr] = None


@dataclass
class ObjectLiteral(Expr):
    loc: Located
    properties: List[Union[Property, Spread]]


@dataclass
class ArrayPattern(Expr):
    loc: Located
    names: List[str] = field(default_factory=list)


@dataclass
class ObjectPattern(Expr):
    loc: Located
    names: List[str] = field(default_factory=list)


Binding = Union[Name, ArrayPattern, ObjectPattern]


@dataclass
class Param(Node):
    loc: Located
    target: Binding
    default: Optional[Expr] = None
    rest: bool = False

    @property
    def name(self) -> Optional[str]:
        return self.target.name if isinstance(self.target, Name) else None


@dataclass
class Function(Expr):
    loc: Located
    name: Optional[str]
    params: List[Param]
    body: "Block"
    is_async: bool = False
    is_generator: bool = False


@dataclass
class Arrow(Expr):
    loc: Located
    params: List[Param]
    body: Union["Block", Expr]
    is_async: bool = False


@dataclass
class Call(Expr):
    loc: Located
    callee: Expr
    args: List[Expr]
    optional: bool = False


@dataclass
class New(Expr):
    loc: Located
    callee: Expr
    args: Optional[List[Expr]] = None


@dataclass
class Member(Expr):
    loc: Located
    object: Expr
    property: str
    optional: bool = False


@dataclass
class Index(Expr):
    loc: Located
    object: Expr
    index: Expr
    optional: bool = False


@dataclass
class Unary(Expr):
    loc: Located
    op: str
    argument: Expr


@dataclass
class Update(Expr):
    loc: Located
    op: str  # "++" | "--"
    prefix: bool
    argument: Expr


@dataclass
class Binary(Expr):
    loc: Located
    op: str
    left: Expr
    right: Expr


@dataclass
class Assign(Expr):
    loc: Located
    op: str
    target: Expr
    value: Expr


@dataclass
class Conditional(Expr):
    loc: Located
    test: Expr
    consequent: Expr
    alternate: Expr


@dataclass
class Sequence(Expr):
    loc: Located
    expressions: List[Expr]


@dataclass
class Await(Expr):
    loc: Located
    argument: Expr


@dataclass
class Paren(Expr):
    loc: Located
    expression: Expr


@dataclass
class Cast(Expr):
    """`x as T` or `x!`; only the inner expression survives type erasure."""

    loc: Located
    expression: Expr


# --- statements ------------------------------------------------------------


@dataclass
class Block(Stmt):
    loc: Located
    body: List[Stmt]


@dataclass
class ExprStmt(Stmt):
    loc: Located
    expression: Expr


@dataclass
class Declarator(Node):
    loc: Located
    target: Binding
    init: Optional[Expr] = None


@dataclass
class VarDecl(Stmt):
    loc: Located
    kind: str  # "let" | "const" | "var"
    declarations: List[Declarator]


@dataclass
class FunctionDecl(Stmt):
    loc: Located
    name: str
    params: List[Param]
    body: Optional[Block]
    is_async: bool = False
    is_generator: bool = False


@dataclass
class Method(Node):
    loc: Located
    name: Optional[str]
    params: List[Param]
    body: Optional[Block]
    kind: str = "method"  # "constructor" | "method"
    is_static: bool = False
    is_async: bool = False


@dataclass
class Accessor(Node):
    loc: Located
    name: Optional[str]
    kind: str  # "get" | "set"
    params: List[Param]
    body: Optional[Block]
    is_static: bool = False


@dataclass
class Field(Node):
    loc: Located
    name: Optional[str]
    value: Optional[Expr] = None
    is_static: bool = False


ClassMember = Union[Method, Accessor, Field]


@dataclass
class ClassDecl(Stmt):
    loc: Located
    name: str
    superclass: Optional[Expr]
    members: List[ClassMember]


@dataclass
class ImportSpecifier(Node):
    loc: Located
    imported: str
    local: str
    type_only: bool = False


@dataclass
class ImportDecl(Stmt):
    loc: Located
    source: str
    default: Optional[str] = None
    namespace: Optional[str] = None
    specifiers: List[ImportSpecifier] = field(default_factory=list)
    has_named: bool = False
    type_only: bool = False


@dataclass
class ExportDecl(Stmt):
    loc: Located
    declaration: Stmt


@dataclass
class ExportDefault(Stmt):
    loc: Located
    expression: Optional[Expr] = None
    declaration: Optional[Stmt] = None


@dataclass
class ExportNames(Stmt):
    """`export { a, b }`, `export { a } from "m"` and `export * from "m"`."""

    loc: Located
    names: List[str]
    source: Optional[str] = None
    star: bool = False


@dataclass
class Return(Stmt):
    loc: Located
    argument: Optional[Expr] = None


@dataclass
class If(Stmt):
    loc: Located
    test: Expr
    consequent: Stmt
    alternate: Optional[Stmt] = None


@dataclass
class For(Stmt):
    loc: Located
    init: Optional[Union[VarDecl, Expr]]
    test: Optional[Expr]
    update: Optional[Expr]
    body: Stmt


@dataclass
class ForIn(Stmt):
    loc: Located
    kind: str
    target: Binding
    iterable: Expr
    body: Stmt


@dataclass
class ForOf(Stmt):
    loc: Located
    kind: str
    target: Binding
    iterable: Expr
    body: Stmt
    is_await: bool = False


@dataclass
class While(Stmt):
    loc: Located
    test: Expr
    body: Stmt


@dataclass
class DoWhile(Stmt):
    loc: Located
    body: Stmt
    test: Expr


@dataclass
class Break(Stmt):
    loc: Located


@dataclass
class Continue(Stmt):
    loc: Located


@dataclass
class Throw(Stmt):
    loc: Located
    argument: Expr


@dataclass
class Try(Stmt):
    loc: Located
    block: Block
    handler_param: Optional[Binding] = None
    handler: Optional[Block] = None
    finalizer: Optional[Block] = None


@dataclass
class SwitchCase(Node):
    loc: Located
    test: Optional[Expr]
    body: List[Stmt]


@dataclass
class Switch(Stmt):
    loc: Located
    discriminant: Expr
    cases: List[SwitchCase]


@dataclass
class EnumMember(Node):
    loc: Located
    name: str
    value: Optional[Expr] = None


@dataclass
class Enum(Stmt):
    loc: Located
    name: str
    members: List[EnumMember]


@dataclass
class TypeDecl(Stmt):
    """Interface, type alias or `declare`d declaration: erased before emission."""

    loc: Located
    name: Optional[str]
    kind: str  # "interface" | "type" | "declare"


@dataclass
class Program(Node):
    loc: Located
    body: List[Stmt]
    erasures: List[Erasure] = field(default_factory=list)

    @property
    def imports(self) -> List[ImportDecl]:
        return [s for s in self.body if isinstance(s, ImportDecl)]

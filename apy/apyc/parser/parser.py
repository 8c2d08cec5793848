from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Union

from lark import Lark, Token, Tree

from .ast import (
    Accessor,
    ArrayLiteral,
    ArrayPattern,
    Arrow,
    Assign,
    Await,
    Binary,
    Binding,
    Block,
    Break,
    Call,
    Cast,
    ClassDecl,
    Conditional,
    Continue,
    Declarator,
    DoWhile,
    Enum,
    EnumMember,
    Erasure,
    ExportDecl,
    ExportDefault,
    ExportNames,
    Expr,
    ExprStmt,
    Field,
    For,
    ForIn,
    ForOf,
    Function,
    FunctionDecl,
    If,
    ImportDecl,
    ImportSpecifier,
    Index,
    Literal,
    Located,
    Member,
    Method,
    Name,
    New,
    ObjectLiteral,
    ObjectPattern,
    Param,
    Paren,
    Program,
    Property,
    Return,
    Sequence,
    Spread,
    Stmt,
    Super,
    Switch,
    SwitchCase,
    TemplateLiteral,
    This,
    Throw,
    Try,
    TypeDecl,
    Unary,
    Update,
    VarDecl,
    While,
)
from .postlex import TerminatorInserter, mask_regex_literals

_GRAMMAR_PATH = Path(__file__).with_name("grammar.lark")
_GRAMMAR_SRC = _GRAMMAR_PATH.read_text()

_PARSER = Lark(
    _GRAMMAR_SRC,
    parser="lalr",
    lexer="basic",
    start="program",
    propagate_positions=True,
    maybe_placeholders=False,
    postlex=TerminatorInserter(),
)

# Subtrees that exist only in TypeScript and are removed by type erasure.
_TYPE_TREES = {"type_annotation", "type_params", "type_args", "loose_type_args", "implements_clause"}
_TYPE_LISTS = {"type_params", "type_args", "loose_type_args"}


def parse_program(source: str) -> Program:
    """Parse TypeScript (or plain JavaScript) source into a Program.

    Raises lark.exceptions.UnexpectedInput on syntax errors.
    """
    tree = _PARSER.parse(mask_regex_literals(source))
    builder = _ProgramBuilder(source)
    body = builder.statements(tree.children)
    end = len(source)
    return Program(loc=Located(line=1, column=1, start=0, end=end), body=body, erasures=builder.erasures)


class _ProgramBuilder:
    """Turns the lark tree into Nodes and records type-only spans on the way."""

    def __init__(self, source: str) -> None:
        self.source = source
        self.erasures: List[Erasure] = []

    # ------------------------------------------------------------- erasures

    def _erase(self, node: Union[Tree, Token], kind: str = "annotation") -> None:
        first, last = _first_token(node), _last_token(node)
        if first is None or last is None:
            return
        self.erasures.append(Erasure(start=first.start_pos, end=last.end_pos, kind=kind))

    def _erase_range(self, start: Union[Tree, Token], end: Union[Tree, Token], kind: str) -> None:
        first, last = _first_token(start), _last_token(end)
        if first is None or last is None:
            return
        self.erasures.append(Erasure(start=first.start_pos, end=last.end_pos, kind=kind))

    def _strip(self, tree: Tree) -> None:
        """Erase the direct type-only children of a declaration-like tree."""
        for child in tree.children:
            if isinstance(child, Tree):
                if child.data in _TYPE_LISTS:
                    self._erase(child, "exact")
                elif child.data in _TYPE_TREES:
                    self._erase(child)
            elif child.type in ("QMARK", "BANG"):
                self._erase(child)
            elif child.type == "MODIFIER":
                self._erase(child, "modifier")

    # ----------------------------------------------------------- statements

    def statements(self, children) -> List[Stmt]:
        out: List[Stmt] = []
        for child in children:
            if isinstance(child, Tree):
                stmt = self.statement(child)
                if stmt is not None:
                    out.append(stmt)
        return out

    def statement(self, tree: Tree) -> Optional[Stmt]:
        if tree.data == "empty_stmt":
            return None
        builder = getattr(self, f"_stmt_{tree.data}", None)
        if builder is None:
            raise ValueError(f"unexpected statement node: {tree.data}")
        return builder(tree)

    def _stmt_expr_stmt(self, tree: Tree) -> ExprStmt:
        return ExprStmt(loc=_loc(tree), expression=self.expr(_trees(tree)[0]))

    def _stmt_block(self, tree: Tree) -> Block:
        return Block(loc=_loc(tree), body=self.statements(tree.children))

    def _stmt_var_stmt(self, tree: Tree) -> VarDecl:
        decl = self._var_decl(_trees(tree)[0])
        decl.loc = _loc(tree)
        return decl

    def _var_decl(self, tree: Tree) -> VarDecl:
        kind = tree.children[0].value
        declarations = [self._declarator(child) for child in _trees(tree, "declarator")]
        return VarDecl(loc=_loc(tree), kind=kind, declarations=declarations)

    def _declarator(self, tree: Tree) -> Declarator:
        self._strip(tree)
        subtrees = _trees(tree)
        target = self.binding(subtrees[0])
        init = self._after(tree, "EQUAL")
        return Declarator(loc=_loc(tree), target=target, init=self.expr(init) if init is not None else None)

    def _stmt_func_decl(self, tree: Tree) -> Stmt:
        self._strip(tree)
        body = _find(tree, "block")
        name = _token(tree, "NAME")
        params = self.params(_find(tree, "params"))
        if body is None:
            self._erase(tree, "exact")
            return TypeDecl(loc=_loc(tree), name=name.value if name else None, kind="signature")
        return FunctionDecl(
            loc=_loc(tree),
            name=name.value if name else "",
            params=params,
            body=self._stmt_block(body),
            is_async=_token(tree, "ASYNC") is not None,
            is_generator=_token(tree, "STAR") is not None,
        )

    def _stmt_class_decl(self, tree: Tree) -> ClassDecl:
        self._strip(tree)
        name = _token(tree, "NAME")
        superclass = None
        extends = _find(tree, "extends_clause")
        if extends is not None:
            self._strip(extends)
            superclass = self.expr(_trees(extends)[0])
        members = []
        for child in _trees(_find(tree, "class_body")):
            member = self._class_member(child)
            if member is not None:
                members.append(member)
        return ClassDecl(loc=_loc(tree), name=name.value if name else "", superclass=superclass, members=members)

    def _class_member(self, tree: Tree):
        if tree.data == "empty_member":
            return None
        mods = _find(tree, "member_mods")
        mod_types = {tok.type for tok in mods.children} if mods is not None else set()
        if mods is not None:
            for tok in mods.children:
                if tok.type == "MODIFIER":
                    self._erase(tok, "modifier")
        self._strip(tree)
        key = _find(tree, "prop_name")
        name = _prop_key(key)
        is_static = "STATIC" in mod_types
        if tree.data == "field":
            value = self._after(tree, "EQUAL")
            return Field(
                loc=_loc(tree),
                name=name,
                value=self.expr(value) if value is not None else None,
                is_static=is_static,
            )
        body = _find(tree, "block")
        params = self.params(_find(tree, "params"))
        block = self._stmt_block(body) if body is not None else None
        if body is None:
            self._erase(tree, "exact")
        if tree.data == "accessor":
            kind = "get" if _token(tree, "GET") is not None else "set"
            return Accessor(loc=_loc(tree), name=name, kind=kind, params=params, body=block, is_static=is_static)
        return Method(
            loc=_loc(tree),
            name=name,
            params=params,
            body=block,
            kind="constructor" if name == "constructor" and not is_static else "method",
            is_static=is_static,
            is_async="ASYNC" in mod_types,
        )

    def _stmt_enum_decl(self, tree: Tree) -> Enum:
        members = []
        for child in _trees(tree, "enum_member"):
            value = self._after(child, "EQUAL")
            members.append(
                EnumMember(
                    loc=_loc(child),
                    name=_prop_key(_find(child, "prop_name")) or "",
                    value=self.expr(value) if value is not None else None,
                )
            )
        return Enum(loc=_loc(tree), name=_token(tree, "NAME").value, members=members)

    def _stmt_interface_decl(self, tree: Tree) -> TypeDecl:
        self._erase(tree, "exact")
        return TypeDecl(loc=_loc(tree), name=_token(tree, "NAME").value, kind="interface")

    def _stmt_type_alias(self, tree: Tree) -> TypeDecl:
        self._erase(tree, "exact")
        return TypeDecl(loc=_loc(tree), name=_token(tree, "NAME").value, kind="type")

    def _stmt_modified_stmt(self, tree: Tree) -> Stmt:
        modifiers = [tok for tok in tree.children if isinstance(tok, Token)]
        inner = self.statement(_trees(tree)[0])
        if any(tok.value == "declare" for tok in modifiers):
            self._erase(tree, "exact")
            name = getattr(inner, "name", None)
            return TypeDecl(loc=_loc(tree), name=name if isinstance(name, str) else None, kind="declare")
        for tok in modifiers:
            self._erase(tok, "modifier")
        return inner

    # -------------------------------------------------------------- modules

    def _stmt_import_from(self, tree: Tree) -> ImportDecl:
        decl = ImportDecl(loc=_loc(tree), source=_unquote(_token(tree, "STRING").value))
        clause = _find(tree, "import_clause")
        default = _token(clause, "NAME")
        if default is not None:
            decl.default = default.value
        namespace = _find(clause, "namespace_import")
        if namespace is not None:
            decl.namespace = _token(namespace, "NAME").value
        named = _find(clause, "named_imports")
        if named is not None:
            decl.has_named = True
            decl.specifiers = self._named_imports(named)
        return decl

    def _named_imports(self, tree: Tree) -> List[ImportSpecifier]:
        specs: List[ImportSpecifier] = []
        children = tree.children
        for idx, child in enumerate(children):
            if not isinstance(child, Tree):
                continue
            names = [tok.value for tok in child.children if tok.type == "NAME"]
            type_only = _token(child, "TYPE_KW") is not None
            if type_only:
                # Remove the specifier together with one neighbouring comma.
                after = children[idx + 1] if idx + 1 < len(children) else None
                before = children[idx - 1] if idx > 0 else None
                if isinstance(after, Token) and after.type == "COMMA":
                    self._erase_range(child, after, "exact")
                elif isinstance(before, Token) and before.type == "COMMA":
                    self._erase_range(before, child, "exact")
                else:
                    self._erase(child, "exact")
            specs.append(
                ImportSpecifier(loc=_loc(child), imported=names[0], local=names[-1], type_only=type_only)
            )
        return specs

    def _stmt_import_bare(self, tree: Tree) -> ImportDecl:
        return ImportDecl(loc=_loc(tree), source=_unquote(_token(tree, "STRING").value))

    def _stmt_import_type(self, tree: Tree) -> ImportDecl:
        self._erase(tree, "exact")
        decl = self._stmt_import_from(tree)
        decl.type_only = True
        return decl

    def _stmt_export_decl(self, tree: Tree) -> Stmt:
        inner = self.statement(_trees(tree)[0])
        if isinstance(inner, TypeDecl):
            self._erase(tree, "exact")
            inner.loc = _loc(tree)
            return inner
        return ExportDecl(loc=_loc(tree), declaration=inner)

    def _stmt_export_default_decl(self, tree: Tree) -> ExportDefault:
        return ExportDefault(loc=_loc(tree), declaration=self.statement(_trees(tree)[0]))

    def _stmt_export_default(self, tree: Tree) -> ExportDefault:
        return ExportDefault(loc=_loc(tree), expression=self.expr(_trees(tree)[0]))

    def _stmt_export_names_stmt(self, tree: Tree) -> ExportNames:
        names = [_token(spec, "NAME").value for spec in _trees(_find(tree, "export_names"))]
        source = _token(tree, "STRING")
        return ExportNames(loc=_loc(tree), names=names, source=_unquote(source.value) if source else None)

    def _stmt_export_type(self, tree: Tree) -> TypeDecl:
        self._erase(tree, "exact")
        return TypeDecl(loc=_loc(tree), name=None, kind="type")

    def _stmt_export_all(self, tree: Tree) -> ExportNames:
        alias = _token(tree, "NAME")
        return ExportNames(
            loc=_loc(tree),
            names=[alias.value] if alias else [],
            source=_unquote(_token(tree, "STRING").value),
            star=True,
        )

    # --------------------------------------------------------- control flow

    def _stmt_if_stmt(self, tree: Tree) -> If:
        parts = _trees(tree)
        return If(
            loc=_loc(tree),
            test=self.expr(parts[0]),
            consequent=self._body(parts[1]),
            alternate=self._body(parts[2]) if len(parts) > 2 else None,
        )

    def _body(self, tree: Tree) -> Stmt:
        stmt = self.statement(tree)
        return stmt if stmt is not None else _empty_block(tree)

    def _stmt_for_stmt(self, tree: Tree) -> For:
        init = test = update = None
        init_tree = _find(tree, "for_init")
        if init_tree is not None:
            inner = _trees(init_tree)[0]
            init = self._var_decl(inner) if inner.data == "var_decl" else self.expr(inner)
        test_tree = _find(tree, "for_test")
        if test_tree is not None:
            test = self.expr(_trees(test_tree)[0])
        update_tree = _find(tree, "for_update")
        if update_tree is not None:
            update = self.expr(_trees(update_tree)[0])
        return For(loc=_loc(tree), init=init, test=test, update=update, body=self._body(_trees(tree)[-1]))

    def _stmt_for_in_stmt(self, tree: Tree) -> ForIn:
        parts = _trees(tree)
        return ForIn(
            loc=_loc(tree),
            kind=_kind_token(tree),
            target=self.binding(parts[0]),
            iterable=self.expr(parts[1]),
            body=self._body(parts[2]),
        )

    def _stmt_for_of_stmt(self, tree: Tree) -> ForOf:
        parts = _trees(tree)
        return ForOf(
            loc=_loc(tree),
            kind=_kind_token(tree),
            target=self.binding(parts[0]),
            iterable=self.expr(parts[1]),
            body=self._body(parts[2]),
            is_await=_token(tree, "AWAIT") is not None,
        )

    def _stmt_while_stmt(self, tree: Tree) -> While:
        parts = _trees(tree)
        return While(loc=_loc(tree), test=self.expr(parts[0]), body=self._body(parts[1]))

    def _stmt_do_while_stmt(self, tree: Tree) -> DoWhile:
        parts = _trees(tree)
        return DoWhile(loc=_loc(tree), body=self._body(parts[0]), test=self.expr(parts[1]))

    def _stmt_return_stmt(self, tree: Tree) -> Return:
        parts = _trees(tree)
        return Return(loc=_loc(tree), argument=self.expr(parts[0]) if parts else None)

    def _stmt_break_stmt(self, tree: Tree) -> Break:
        return Break(loc=_loc(tree))

    def _stmt_continue_stmt(self, tree: Tree) -> Continue:
        return Continue(loc=_loc(tree))

    def _stmt_throw_stmt(self, tree: Tree) -> Throw:
        return Throw(loc=_loc(tree), argument=self.expr(_trees(tree)[0]))

    def _stmt_try_stmt(self, tree: Tree) -> Try:
        node = Try(loc=_loc(tree), block=self._stmt_block(_find(tree, "block")))
        catch = _find(tree, "catch_clause")
        if catch is not None:
            self._strip(catch)
            parts = [t for t in _trees(catch) if t.data not in _TYPE_TREES]
            node.handler = self._stmt_block(parts[-1])
            if len(parts) > 1:
                node.handler_param = self.binding(parts[0])
        final = _find(tree, "finally_clause")
        if final is not None:
            node.finalizer = self._stmt_block(_find(final, "block"))
        return node

    def _stmt_switch_stmt(self, tree: Tree) -> Switch:
        parts = _trees(tree)
        cases = []
        for clause in parts[1:]:
            body = clause.children[3:] if clause.data == "case_clause" else clause.children[2:]
            test = self.expr(clause.children[1]) if clause.data == "case_clause" else None
            cases.append(SwitchCase(loc=_loc(clause), test=test, body=self.statements(body)))
        return Switch(loc=_loc(tree), discriminant=self.expr(parts[0]), cases=cases)

    # ------------------------------------------------------------- bindings

    def binding(self, tree: Tree) -> Binding:
        if tree.data == "name":
            return Name(loc=_loc(tree), name=tree.children[0].value)
        if tree.data == "array_pattern":
            names = [tok.value for tok in _tokens(tree, "NAME")]
            return ArrayPattern(loc=_loc(tree), names=names)
        if tree.data == "object_pattern":
            names = [tok.value for tok in _tokens(tree, "NAME")]
            return ObjectPattern(loc=_loc(tree), names=names)
        raise ValueError(f"unexpected binding node: {tree.data}")

    def params(self, tree: Optional[Tree]) -> List[Param]:
        if tree is None:
            return []
        out: List[Param] = []
        for child in _trees(tree):
            self._strip(child)
            parts = [t for t in _trees(child) if t.data not in _TYPE_TREES]
            default = self._after(child, "EQUAL")
            out.append(
                Param(
                    loc=_loc(child),
                    target=self.binding(parts[0]),
                    default=self.expr(default) if default is not None else None,
                    rest=child.data == "rest_param",
                )
            )
        return out

    # ---------------------------------------------------------- expressions

    def expr(self, node) -> Expr:
        if isinstance(node, Token):
            raise ValueError(f"unexpected token in expression position: {node.type}")
        builder = getattr(self, f"_expr_{node.data}", None)
        if builder is None:
            raise ValueError(f"unexpected expression node: {node.data}")
        return builder(node)

    def _expr_name(self, tree: Tree) -> Expr:
        value = tree.children[0].value
        if value == "undefined":
            return Literal(loc=_loc(tree), kind="undefined", raw=value)
        return Name(loc=_loc(tree), name=value)

    def _expr_number(self, tree: Tree) -> Literal:
        return Literal(loc=_loc(tree), kind="number", raw=tree.children[0].value)

    def _expr_string(self, tree: Tree) -> Literal:
        return Literal(loc=_loc(tree), kind="string", raw=tree.children[0].value)

    def _expr_bool_lit(self, tree: Tree) -> Literal:
        return Literal(loc=_loc(tree), kind="boolean", raw=tree.children[0].value)

    def _expr_null_lit(self, tree: Tree) -> Literal:
        return Literal(loc=_loc(tree), kind="null", raw="null")

    def _expr_template(self, tree: Tree) -> TemplateLiteral:
        return TemplateLiteral(loc=_loc(tree), raw=tree.children[0].value)

    def _expr_regex(self, tree: Tree) -> Literal:
        token = tree.children[0]
        return Literal(loc=_loc(tree), kind="regex", raw=self.source[token.start_pos : token.end_pos])

    def _expr_this_expr(self, tree: Tree) -> This:
        return This(loc=_loc(tree))

    def _expr_super_expr(self, tree: Tree) -> Super:
        return Super(loc=_loc(tree))

    def _expr_paren(self, tree: Tree) -> Paren:
        return Paren(loc=_loc(tree), expression=self.expr(_trees(tree)[0]))

    def _expr_sequence(self, tree: Tree) -> Sequence:
        left, right = _trees(tree)
        items = self.expr(left)
        expressions = items.expressions if isinstance(items, Sequence) and left.data == "sequence" else [items]
        return Sequence(loc=_loc(tree), expressions=expressions + [self.expr(right)])

    def _expr_assign(self, tree: Tree) -> Assign:
        target, op, value = tree.children
        return Assign(loc=_loc(tree), op=op.value, target=self.expr(target), value=self.expr(value))

    def _expr_conditional(self, tree: Tree) -> Conditional:
        test, consequent, alternate = _trees(tree)
        return Conditional(
            loc=_loc(tree),
            test=self.expr(test),
            consequent=self.expr(consequent),
            alternate=self.expr(alternate),
        )

    def _expr_binary(self, tree: Tree) -> Binary:
        left, op, right = tree.children
        return Binary(loc=_loc(tree), op=op.value, left=self.expr(left), right=self.expr(right))

    def _expr_as_type(self, tree: Tree) -> Cast:
        inner = tree.children[0]
        self._erase_range(tree.children[1], tree.children[-1], "annotation")
        return Cast(loc=_loc(tree), expression=self.expr(inner))

    def _expr_non_null(self, tree: Tree) -> Cast:
        self._erase(tree.children[-1])
        return Cast(loc=_loc(tree), expression=self.expr(tree.children[0]))

    def _expr_unary(self, tree: Tree) -> Unary:
        op, argument = tree.children
        return Unary(loc=_loc(tree), op=op.value, argument=self.expr(argument))

    def _expr_await_expr(self, tree: Tree) -> Await:
        return Await(loc=_loc(tree), argument=self.expr(tree.children[1]))

    def _expr_prefix_update(self, tree: Tree) -> Update:
        op, argument = tree.children
        return Update(loc=_loc(tree), op=op.value, prefix=True, argument=self.expr(argument))

    def _expr_postfix_update(self, tree: Tree) -> Update:
        argument, op = tree.children
        return Update(loc=_loc(tree), op=op.value, prefix=False, argument=self.expr(argument))

    def _expr_member(self, tree: Tree) -> Member:
        return Member(loc=_loc(tree), object=self.expr(tree.children[0]), property=tree.children[-1].value)

    def _expr_opt_member(self, tree: Tree) -> Member:
        node = self._expr_member(tree)
        node.optional = True
        return node

    def _expr_index(self, tree: Tree) -> Index:
        obj, index = _trees(tree)
        return Index(loc=_loc(tree), object=self.expr(obj), index=self.expr(index))

    def _expr_opt_index(self, tree: Tree) -> Index:
        node = self._expr_index(tree)
        node.optional = True
        return node

    def _expr_call(self, tree: Tree) -> Call:
        self._strip(tree)
        callee = tree.children[0]
        return Call(loc=_loc(tree), callee=self.expr(callee), args=self._arguments(_find(tree, "arguments")))

    def _expr_opt_call(self, tree: Tree) -> Call:
        node = self._expr_call(tree)
        node.optional = True
        return node

    def _expr_new_expr(self, tree: Tree) -> New:
        self._strip(tree)
        callee = _trees(tree)[0]
        return New(loc=_loc(tree), callee=self.expr(callee), args=self._arguments(_find(tree, "arguments")))

    def _expr_new_bare(self, tree: Tree) -> New:
        return New(loc=_loc(tree), callee=self.expr(_trees(tree)[0]), args=None)

    def _arguments(self, tree: Tree) -> List[Expr]:
        return [self.expr(child) for child in _trees(tree)]

    def _expr_spread(self, tree: Tree) -> Spread:
        return Spread(loc=_loc(tree), argument=self.expr(_trees(tree)[0]))

    def _expr_array_literal(self, tree: Tree) -> ArrayLiteral:
        return ArrayLiteral(loc=_loc(tree), elements=[self.expr(child) for child in _trees(tree)])

    def _expr_object_literal(self, tree: Tree) -> ObjectLiteral:
        properties = []
        for member in _trees(tree):
            if member.data == "spread":
                properties.append(self._expr_spread(member))
            else:
                properties.append(self._property(member))
        return ObjectLiteral(loc=_loc(tree), properties=properties)

    def _property(self, tree: Tree) -> Property:
        if tree.data == "prop_shorthand":
            name = tree.children[0]
            return Property(
                loc=_loc(tree),
                key=name.value,
                value=Name(loc=_loc(tree), name=name.value),
                kind="shorthand",
            )
        key_tree = _find(tree, "prop_name")
        computed = _computed_key(key_tree)
        prop = Property(
            loc=_loc(tree),
            key=_prop_key(key_tree),
            value=None,
            computed_key=self.expr(computed) if computed is not None else None,
        )
        if tree.data == "prop_init":
            prop.value = self.expr(_trees(tree)[-1])
            return prop
        self._strip(tree)
        params = self.params(_find(tree, "params"))
        body = self._stmt_block(_find(tree, "block"))
        prop.kind = {"prop_method": "method", "prop_get": "get", "prop_set": "set"}[tree.data]
        prop.value = Function(
            loc=_loc(tree),
            name=prop.key,
            params=params,
            body=body,
            is_async=_token(tree, "ASYNC") is not None,
            is_generator=_token(tree, "STAR") is not None,
        )
        return prop

    def _expr_function_expr(self, tree: Tree) -> Function:
        self._strip(tree)
        name = _token(tree, "NAME")
        return Function(
            loc=_loc(tree),
            name=name.value if name else None,
            params=self.params(_find(tree, "params")),
            body=self._stmt_block(_find(tree, "block")),
            is_async=_token(tree, "ASYNC") is not None,
            is_generator=_token(tree, "STAR") is not None,
        )

    def _expr_arrow_fn(self, tree: Tree) -> Arrow:
        head = _find(tree, "arrow_head")
        self._strip(head)
        name = _token(head, "ARROW_NAME")
        if name is not None:
            params = [Param(loc=_loc_token(name), target=Name(loc=_loc_token(name), name=name.value))]
        else:
            params = self.params(_find(head, "params"))
        body_tree = tree.children[-1]
        body: Union[Block, Expr]
        if isinstance(body_tree, Tree) and body_tree.data == "block":
            body = self._stmt_block(body_tree)
        else:
            body = self.expr(body_tree)
        return Arrow(loc=_loc(tree), params=params, body=body, is_async=_token(tree, "ASYNC") is not None)

    def _after(self, tree: Tree, ttype: str):
        """The child that follows the first `ttype` token, if any."""
        seen = False
        for child in tree.children:
            if seen:
                return child
            if isinstance(child, Token) and child.type == ttype:
                seen = True
        return None


# ------------------------------------------------------------------ helpers


def _first_token(node) -> Optional[Token]:
    if isinstance(node, Token):
        return node
    for child in node.children:
        tok = _first_token(child)
        if tok is not None:
            return tok
    return None


def _last_token(node) -> Optional[Token]:
    if isinstance(node, Token):
        return node
    for child in reversed(node.children):
        tok = _last_token(child)
        if tok is not None:
            return tok
    return None


def _loc(tree: Tree) -> Located:
    first, last = _first_token(tree), _last_token(tree)
    if first is None or last is None:
        meta = tree.meta
        line = getattr(meta, "line", 1)
        column = getattr(meta, "column", 1)
        pos = getattr(meta, "start_pos", 0)
        return Located(line=line, column=column, start=pos, end=pos)
    return Located(line=first.line, column=first.column, start=first.start_pos, end=last.end_pos)


def _loc_token(token: Token) -> Located:
    return Located(line=token.line, column=token.column, start=token.start_pos, end=token.end_pos)


def _trees(tree: Tree, data: Optional[str] = None) -> List[Tree]:
    return [c for c in tree.children if isinstance(c, Tree) and (data is None or c.data == data)]


def _tokens(tree: Tree, ttype: str) -> List[Token]:
    out: List[Token] = []
    for child in tree.children:
        if isinstance(child, Token):
            if child.type == ttype:
                out.append(child)
        else:
            out.extend(_tokens(child, ttype))
    return out


def _find(tree: Tree, data: str) -> Optional[Tree]:
    for child in tree.children:
        if isinstance(child, Tree) and child.data == data:
            return child
    return None


def _token(tree: Tree, ttype: str) -> Optional[Token]:
    for child in tree.children:
        if isinstance(child, Token) and child.type == ttype:
            return child
    return None


def _kind_token(tree: Tree) -> str:
    for child in tree.children:
        if isinstance(child, Token) and child.type in ("LET", "CONST", "VAR"):
            return child.value
    return "let"


def _prop_key(tree: Optional[Tree]) -> Optional[str]:
    if tree is None:
        return None
    first = tree.children[0]
    if first.type == "STRING":
        return _unquote(first.value)
    if first.type in ("NAME", "NUMBER"):
        return first.value
    return None


def _computed_key(tree: Optional[Tree]):
    if tree is None or tree.children[0].type != "LSQB":
        return None
    return tree.children[1]


def _unquote(raw: str) -> str:
    return raw[1:-1]


def _empty_block(tree: Tree) -> Block:
    return Block(loc=_loc(tree), body=[])


__all__ = ["parse_program"]

from __future__ import annotations

import re
from typing import Dict, Iterable, Iterator, List, Optional, Set, Tuple

from lark import Token

KEYWORDS = {
    "BREAK", "CASE", "CATCH", "CLASS", "CONST", "CONTINUE", "DEFAULT", "DELETE",
    "DO", "ELSE", "ENUM", "EXPORT", "EXTENDS", "FALSE", "FINALLY", "FOR",
    "FUNCTION", "IF", "IMPLEMENTS", "IMPORT", "IN", "INSTANCEOF", "LET", "NEW",
    "NULL", "RETURN", "SUPER", "SWITCH", "THIS", "THROW", "TRUE", "TRY",
    "TYPEOF", "VAR", "WHILE", "AS", "AWAIT",
}

MODIFIERS = {"public", "private", "protected", "readonly", "abstract", "override", "declare"}

OPENERS = {"LPAR": "RPAR", "LSQB": "RSQB", "LBRACE": "RBRACE"}
CLOSERS = {"RPAR", "RSQB", "RBRACE"}

# Tokens that may appear at bracket depth 0 inside an arrow function's
# return type annotation.
RETURN_TYPE_TOKENS = {
    "NAME", "DOT", "LSQB", "RSQB", "VBAR", "AMPERSAND", "STRING", "NUMBER",
    "NULL", "TRUE", "FALSE", "TYPEOF", "LPAR", "RPAR", "LBRACE", "RBRACE",
    "LESSTHAN", "MORETHAN",
}

# Tokens allowed between the angle brackets of `f<...>(args)`.
TYPE_ARG_TOKENS = {
    "NAME", "DOT", "COMMA", "LSQB", "RSQB", "VBAR", "AMPERSAND", "LESSTHAN",
    "MORETHAN", "STRING", "NUMBER", "NULL", "TRUE", "FALSE", "TYPEOF", "EXTENDS",
}

# Longest runs first.
SHIFT_OPERATORS = (
    (("MORETHAN", "MORETHAN", "GTE"), "USHR_EQ"),
    (("MORETHAN", "MORETHAN", "MORETHAN"), "USHR"),
    (("MORETHAN", "GTE"), "SHR_EQ"),
    (("MORETHAN", "MORETHAN"), "SHR"),
    (("LESSTHAN", "LTE"), "SHL_EQ"),
    (("LESSTHAN", "LESSTHAN"), "SHL"),
)

# Tokens that can start the right operand of a shift.
SHIFT_OPERANDS = {
    "NAME", "NUMBER", "STRING", "TEMPLATE", "REGEX", "TRUE", "FALSE", "NULL",
    "THIS", "SUPER", "LPAR", "ARROW_LPAR", "LSQB", "MINUS", "PLUS", "BANG",
    "TILDE", "TYPEOF", "NEW", "AWAIT", "PLUSPLUS", "MINUSMINUS",
}


class TerminatorInserter:
    """
    Automatic semicolon insertion plus contextual token typing.

    Newlines end a statement only in statement-level frames (top level,
    blocks, class and interface bodies) and only after a token that can end
    an expression. A newline followed by a token that continues the
    expression is dropped.
    """

    always_accept = ("NEWLINE", "SEMI")

    TERMINABLE = {
        "NAME", "NUMBER", "STRING", "TEMPLATE", "TRUE", "FALSE", "NULL", "THIS",
        "SUPER", "RPAR", "RSQB", "RBRACE", "RETURN", "BREAK", "CONTINUE",
        "PLUSPLUS", "MINUSMINUS", "MORETHAN", "TYPE_GT", "BANG", "REGEX",
    }

    CONTINUATION = {
        "DOT", "QDOT", "COMMA", "RPAR", "RSQB", "QMARK", "COLON", "ARROW",
        "EQUAL", "PLUS_EQ", "MINUS_EQ", "STAR_EQ", "SLASH_EQ", "PERCENT_EQ",
        "STARSTAR_EQ", "AMP_EQ", "BAR_EQ", "CARET_EQ", "ANDAND_EQ", "OROR_EQ",
        "NULLISH_EQ", "PLUS", "MINUS", "STAR", "SLASH", "PERCENT", "STARSTAR",
        "ANDAND", "OROR", "NULLISH", "VBAR", "AMPERSAND", "CIRCUMFLEX", "EQEQ",
        "NOTEQ", "STRICT_EQ", "STRICT_NE", "LESSTHAN", "MORETHAN", "LTE", "GTE",
        "INSTANCEOF", "IN", "AS", "EXTENDS", "IMPLEMENTS", "SHL", "SHR", "USHR",
        "SHL_EQ", "SHR_EQ", "USHR_EQ",
    }

    EXPECTS_EXPR = {
        "EQUAL", "PLUS_EQ", "MINUS_EQ", "STAR_EQ", "SLASH_EQ", "PERCENT_EQ",
        "STARSTAR_EQ", "AMP_EQ", "BAR_EQ", "CARET_EQ", "ANDAND_EQ", "OROR_EQ",
        "NULLISH_EQ", "LPAR", "ARROW_LPAR", "COMMA", "COLON", "LSQB", "RETURN",
        "QMARK", "ANDAND", "OROR", "NULLISH", "PLUS", "MINUS", "STAR", "SLASH",
        "PERCENT", "STARSTAR", "EQEQ", "NOTEQ", "STRICT_EQ", "STRICT_NE", "LTE",
        "GTE", "LESSTHAN", "TYPE_LT", "BANG", "TILDE", "TYPEOF", "AWAIT",
        "THROW", "IMPORT", "EXPORT", "DEFAULT", "CONST", "LET", "VAR",
        "ELLIPSIS", "IN", "OF", "CASE", "AS", "TYPE_KW", "EXTENDS", "NEW",
        "VBAR", "AMPERSAND", "CIRCUMFLEX", "DELETE", "INSTANCEOF", "KEYOF",
        "SHL", "SHR", "USHR", "SHL_EQ", "SHR_EQ", "USHR_EQ",
    }

    # Frames in which a newline may terminate a statement.
    STATEMENT_FRAMES = {"root", "block", "do", "class", "type_body"}
    MEMBER_FRAMES = {"obj", "class", "type_body"}
    MEMBER_START = {
        "LBRACE", "OBJ_LBRACE", "COMMA", "_TERMINATOR", "STATIC", "MODIFIER",
        "ASYNC", "GET", "SET", "STAR",
    }
    KEY_FOLLOWERS = {
        "COLON", "LPAR", "QMARK", "COMMA", "RBRACE", "EQUAL", "AS", "SEMI",
        "NEWLINE", "BANG", "LESSTHAN", "TYPE_LT",
    }

    def __init__(self) -> None:
        self._reset()

    def _reset(self) -> None:
        self.frames: List[str] = ["root"]
        self.can_terminate = False
        self.stmt_start = True
        self.in_module_stmt = False
        self.pending_body: Optional[str] = None
        self.case_depth: Optional[int] = None
        self.case_colon = False
        self.closed: Optional[str] = None
        self.last: Optional[str] = None
        self.prev: Optional[str] = None

    def process(self, stream: Iterable[Token]) -> Iterator[Token]:
        self._reset()
        tokens = list(stream)
        types = self._mark(tokens)
        tokens, types = self._fuse_shifts(tokens, types)
        pending: Optional[Token] = None
        for i, token in enumerate(tokens):
            ttype = types[i]
            if ttype == "NEWLINE":
                if pending is None:
                    pending = token
                continue
            if ttype == "SEMI":
                pending = None
                if self._in_statement_frame():
                    yield self._emit(Token.new_borrow_pos("_TERMINATOR", token.value, token))
                else:
                    yield self._emit(Token.new_borrow_pos("SEMICOLON", token.value, token))
                continue
            if pending is not None:
                if not self._joins(ttype) and self._in_statement_frame() and self.can_terminate:
                    yield self._emit(Token.new_borrow_pos("_TERMINATOR", "", pending))
                pending = None
            ttype = self._retype(tokens, types, i)
            if ttype == "RBRACE" and self._in_statement_frame() and self.can_terminate:
                yield self._emit(Token.new_borrow_pos("_TERMINATOR", "", token))
            if ttype == "LBRACE" and self._expects_expr():
                ttype = "OBJ_LBRACE"
            if ttype == "FUNCTION" and self.stmt_start:
                ttype = "FUNCTION_DECL"
            if ttype != token.type:
                token = Token.new_borrow_pos(ttype, token.value, token)
            yield self._emit(token)
        if self._in_statement_frame() and self.can_terminate and tokens:
            yield self._emit(Token.new_borrow_pos("_TERMINATOR", "", tokens[-1]))

    # ------------------------------------------------------------------ state

    def _in_statement_frame(self) -> bool:
        return self.frames[-1] in self.STATEMENT_FRAMES

    def _expects_expr(self) -> bool:
        if self.last == "COLON" and self.case_colon:
            return False
        return self.last in self.EXPECTS_EXPR

    def _at_member_start(self) -> bool:
        if self.frames[-1] == "class" and self.last == "RBRACE" and self.closed == "block":
            # A method body just closed on the same line.
            return True
        return self.frames[-1] in self.MEMBER_FRAMES and self.last in self.MEMBER_START

    def _joins(self, ttype: str) -> bool:
        if ttype in self.CONTINUATION:
            return True
        if ttype in ("ELSE", "CATCH", "FINALLY") and self.closed in ("block", "do"):
            return True
        if ttype == "WHILE" and self.closed == "do":
            return True
        if ttype == "LBRACE" and (self.last == "RPAR" or self.pending_body is not None):
            return True
        return False

    def _emit(self, token: Token) -> Token:
        ttype = token.type
        was_start = self.stmt_start
        closed: Optional[str] = None
        stmt_start = False
        case_colon = False

        if ttype == "_TERMINATOR":
            stmt_start = True
            self.in_module_stmt = False
            self.pending_body = None
        elif ttype == "LBRACE":
            kind = self.pending_body or "block"
            self.pending_body = None
            self.frames.append(kind)
            self.in_module_stmt = False
            stmt_start = kind in ("block", "do")
        elif ttype == "OBJ_LBRACE":
            self.frames.append("obj")
        elif ttype in ("LPAR", "ARROW_LPAR"):
            if self.last == "FOR" or (self.last == "AWAIT" and self.prev == "FOR"):
                self.frames.append("for")
            else:
                self.frames.append("paren")
        elif ttype == "LSQB":
            self.frames.append("bracket")
        elif ttype in CLOSERS:
            if len(self.frames) > 1:
                closed = self.frames.pop()
            if ttype == "RBRACE" and closed in ("block", "do"):
                stmt_start = True
        elif ttype == "CLASS":
            self.pending_body = "class"
        elif ttype == "INTERFACE":
            self.pending_body = "type_body"
        elif ttype == "DO":
            self.pending_body = "do"
        elif ttype in ("IMPORT", "EXPORT") and was_start:
            self.in_module_stmt = True
            stmt_start = True
        elif ttype in ("MODIFIER", "ASYNC"):
            stmt_start = was_start
        elif ttype == "DEFAULT" and self.last == "EXPORT":
            stmt_start = was_start
        elif ttype in ("CASE", "DEFAULT") and self.frames[-1] == "block":
            self.case_depth = len(self.frames)
        elif ttype == "COLON" and self.case_depth == len(self.frames):
            self.case_depth = None
            case_colon = True
            stmt_start = True

        self.stmt_start = stmt_start
        self.case_colon = case_colon
        self.closed = closed
        self.prev = self.last
        self.last = ttype
        self.can_terminate = ttype in self.TERMINABLE
        return token

    # --------------------------------------------------------------- retyping

    def _retype(self, tokens: List[Token], types: List[str], i: int) -> str:
        ttype = types[i]
        after_dot = self.last in ("DOT", "QDOT")
        if ttype in KEYWORDS:
            if after_dot:
                return "NAME"
            if self._at_member_start() and self._next(types, i) in self.KEY_FOLLOWERS:
                return "NAME"
            return ttype
        if ttype != "NAME" or after_dot:
            return ttype
        value = tokens[i].value
        nxt = self._next(types, i)
        if value == "type":
            if nxt == "NAME" and tokens[i + 1].value != "from" and (
                self.stmt_start or self.last in ("IMPORT", "EXPORT")
            ):
                return "TYPE_KW"
            if nxt == "LBRACE" and self.last in ("IMPORT", "EXPORT"):
                return "TYPE_KW"
            if nxt == "NAME" and self.in_module_stmt and self.frames[-1] == "obj" and self.last in ("OBJ_LBRACE", "COMMA"):
                return "TYPE_KW"
            return ttype
        if value == "interface":
            return "INTERFACE" if self.stmt_start and nxt == "NAME" else ttype
        if value == "of":
            if self.frames[-1] == "for" and self.last in ("NAME", "RSQB", "RBRACE"):
                return "OF"
            return ttype
        if value == "from":
            return "FROM" if self.in_module_stmt and nxt == "STRING" else ttype
        if value == "async":
            if nxt in ("FUNCTION", "ARROW_LPAR", "ARROW_NAME"):
                return "ASYNC"
            if self._at_member_start() and (self._is_word(nxt) or nxt in ("STRING", "LSQB", "STAR")):
                return "ASYNC"
            return ttype
        if value == "static":
            if self.frames[-1] == "class" and self._at_member_start() and (
                self._is_word(nxt) or nxt in ("STRING", "NUMBER", "LSQB", "STAR")
            ):
                return "STATIC"
            return ttype
        if value in ("get", "set"):
            if self.frames[-1] in ("class", "obj") and self._at_member_start() and (
                self._is_word(nxt) or nxt in ("STRING", "NUMBER", "LSQB")
            ):
                return value.upper()
            return ttype
        if value in MODIFIERS:
            return "MODIFIER" if self._is_word(nxt) or nxt == "LSQB" else ttype
        if value == "keyof":
            return "KEYOF" if self._is_word(nxt) or nxt == "LPAR" else ttype
        return ttype

    @staticmethod
    def _next(types: List[str], i: int) -> Optional[str]:
        return types[i + 1] if i + 1 < len(types) else None

    @staticmethod
    def _is_word(ttype: Optional[str]) -> bool:
        if ttype is None or ttype in ("IN", "INSTANCEOF", "AS"):
            return False
        return ttype == "NAME" or ttype in KEYWORDS

    # --------------------------------------------------------------- pre-pass

    def _mark(self, tokens: List[Token]) -> List[str]:
        """Retype arrow parameter lists, arrow names and call type arguments."""
        types = [tok.type for tok in tokens]
        match: Dict[int, int] = {}
        stack: List[int] = []
        for i, ttype in enumerate(types):
            if ttype in OPENERS:
                stack.append(i)
            elif ttype in CLOSERS and stack:
                match[stack.pop()] = i
        # Indices inside an arrow function's return type annotation.
        return_type: Set[int] = set()
        for i, ttype in enumerate(types):
            if ttype == "LPAR" and i in match:
                arrow = self._arrow_follows(types, match[i] + 1)
                if arrow is not None:
                    types[i] = "ARROW_LPAR"
                    return_type.update(range(match[i] + 1, arrow))
            elif ttype == "NAME" and i + 1 < len(types):
                nxt = types[i + 1]
                if nxt == "ARROW" and i not in return_type:
                    types[i] = "ARROW_NAME"
                elif nxt == "LESSTHAN":
                    end = self._type_args_end(types, i + 1)
                    if end is not None:
                        types[i + 1] = "TYPE_LT"
                        types[end] = "TYPE_GT"
        return types

    @staticmethod
    def _arrow_follows(types: List[str], k: int) -> Optional[int]:
        """Index of the `=>` that makes the parenthesis closed at `k - 1` an arrow head."""
        if k >= len(types):
            return None
        if types[k] == "ARROW":
            return k
        if types[k] != "COLON":
            return None
        depth = 0
        prev: Optional[str] = None
        for j in range(k + 1, len(types)):
            ttype = types[j]
            if depth == 0:
                if ttype == "ARROW":
                    return j if prev is not None else None
                if ttype not in RETURN_TYPE_TOKENS:
                    return None
                if ttype == "NAME" and prev == "NAME":
                    return None
                if ttype == "LBRACE" and prev not in (None, "VBAR", "AMPERSAND"):
                    return None
            if ttype in ("LPAR", "LSQB", "LBRACE", "LESSTHAN"):
                depth += 1
            elif ttype in ("RPAR", "RSQB", "RBRACE", "MORETHAN"):
                depth -= 1
                if depth < 0:
                    return None
            prev = ttype
        return None

    @staticmethod
    def _fuse_shifts(tokens: List[Token], types: List[str]):
        """Join adjacent `<`/`>` tokens into shift operators.

        The lexer never produces `<<` or `>>` itself so that nested type
        arguments (`Array<Array<T>>`) still close one bracket at a time. A run
        is fused only when its parts touch and an operand follows it.
        """
        out_tokens: List[Token] = []
        out_types: List[str] = []
        i = 0
        n = len(tokens)
        while i < n:
            for parts, fused in SHIFT_OPERATORS:
                k = i + len(parts)
                if (
                    tuple(types[i:k]) == parts
                    and all(tokens[j].start_pos == tokens[j - 1].end_pos for j in range(i + 1, k))
                    and k < n
                    and types[k] in SHIFT_OPERANDS
                ):
                    first, last = tokens[i], tokens[k - 1]
                    value = "".join(tok.value for tok in tokens[i:k])
                    out_tokens.append(
                        Token(fused, value, first.start_pos, first.line, first.column,
                              last.end_line, last.end_column, last.end_pos)
                    )
                    out_types.append(fused)
                    i = k
                    break
            else:
                out_tokens.append(tokens[i])
                out_types.append(types[i])
                i += 1
        return out_tokens, out_types

    @staticmethod
    def _type_args_end(types: List[str], start: int) -> Optional[int]:
        depth = 0
        for k in range(start, len(types)):
            ttype = types[k]
            if ttype == "LESSTHAN":
                depth += 1
            elif ttype == "MORETHAN":
                depth -= 1
                if depth == 0:
                    if k + 1 < len(types) and types[k + 1] == "LPAR":
                        return k
                    return None
            elif ttype not in TYPE_ARG_TOKENS:
                return None
        return None


# Words after which `/` starts a regular expression rather than a division.
REGEX_PRECEDING_WORDS = {
    "return", "typeof", "case", "do", "else", "in", "of", "instanceof", "new",
    "delete", "void", "throw", "await", "yield",
}

_SKIPPED = re.compile(
    r"""
    \s+
    | //[^\n]*
    | /\*.*?\*/
    """,
    re.S | re.X,
)
_OPERAND = re.compile(
    r"""
    "(?:[^"\\\n]|\\.)*"
    | '(?:[^'\\\n]|\\.)*'
    | `(?:[^`\\]|\\.)*`
    | [0-9][A-Za-z0-9_.]*
    """,
    re.S | re.X,
)
_WORD = re.compile(r"[A-Za-z_$][A-Za-z0-9_$]*")
_REGEX = re.compile(r"/(?![*/])(?:[^/\\\[\n]|\\.|\[(?:[^\]\\\n]|\\.)*\])+/[A-Za-z]*")


def mask_regex_literals(source: str) -> str:
    """Replace each regular expression literal with a same-length run of `#`.

    Whether `/` divides or opens a regex depends on the token before it, which
    the lexer cannot see. Offsets are preserved so node spans still index into
    the original text.
    """
    spans: List[Tuple[int, int]] = []
    operand = False
    pos = 0
    n = len(source)
    while pos < n:
        m = _SKIPPED.match(source, pos)
        if m:
            pos = m.end()
            continue
        m = _OPERAND.match(source, pos)
        if m:
            pos = m.end()
            operand = True
            continue
        m = _WORD.match(source, pos)
        if m:
            pos = m.end()
            operand = m.group() not in REGEX_PRECEDING_WORDS
            continue
        if source[pos] == "/" and not operand:
            m = _REGEX.match(source, pos)
            if m:
                spans.append(m.span())
                pos = m.end()
                operand = True
                continue
        if source.startswith(("++", "--"), pos):
            pos += 2
            continue
        operand = source[pos] in ")]}"
        pos += 1
    if not spans:
        return source
    parts: List[str] = []
    last = 0
    for start, end in spans:
        parts.append(source[last:start])
        parts.append("#" * (end - start))
        last = end
    parts.append(source[last:])
    return "".join(parts)


__all__ = ["TerminatorInserter", "mask_regex_literals"]

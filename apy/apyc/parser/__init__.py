"""TypeScript-subset parser: lark grammar, post-lexer and Node builder."""

from . import ast
from .parser import parse_program

__all__ = ["ast", "parse_program"]

# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""Shared compiler value types: spans and diagnostics."""

from .diagnostics import Diagnostic, has_errors
from .span import Span

__all__ = ["Diagnostic", "Span", "has_errors"]

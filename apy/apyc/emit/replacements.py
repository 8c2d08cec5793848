# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Token replacement pass.

Applies `grammar.file.token_replacements` to a unit's emitted text, in table
order, over the whole text. Tokens that begin or end with an identifier
character only match at identifier boundaries (`this` does not match inside
`thistle`, `true` does not match inside `construe`); operator tokens match
anywhere.

The pass is lexical: occurrences inside string literals are replaced too.
"""

from __future__ import annotations

import re
from functools import lru_cache

from apy.apyc.grammar import Grammar

_IDENT = "A-Za-z0-9_$"


@lru_cache(maxsize=256)
def _pattern(token: str) -> "re.Pattern[str]":
	body = re.escape(token)
	if re.match(f"[{_IDENT}]", token[0]):
		body = f"(?<![{_IDENT}])" + body
	if re.match(f"[{_IDENT}]", token[-1]):
		body = body + f"(?![{_IDENT}])"
	return re.compile(body)


def apply_replacements(text: str, grammar: Grammar) -> str:
	for token, replacement in grammar.file.token_replacements:
		if not token:
			continue
		text = _pattern(token).sub(lambda _m, r=replacement: r, text)
	return text


__all__ = ["apply_replacements"]

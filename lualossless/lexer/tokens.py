# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Token model.

A token's `text` is the unevaluated lexeme exactly as written, held as the
Latin-1 view of the source bytes (one code point per byte). That keeps string
bodies in any encoding intact while letting the rest of the toolchain work
with `str`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from enum import Enum
from typing import Iterator, Optional

from lualossless.core.span import Span

from .trivia import Trivia, trivia_text


class TokenKind(Enum):
	KEYWORD = "keyword"
	IDENTIFIER = "identifier"
	NUMBER_LITERAL = "number"
	STRING_LITERAL = "string"
	OPERATOR = "operator"
	PUNCTUATION = "punctuation"
	END_OF_FILE = "eof"


# `goto` is not listed: Lua 5.1 allows it as a name, so the parser promotes it
# to a keyword only where a goto statement starts.
KEYWORDS = frozenset(
	{
		"and",
		"break",
		"do",
		"else",
		"elseif",
		"end",
		"false",
		"for",
		"function",
		"if",
		"in",
		"local",
		"nil",
		"not",
		"or",
		"repeat",
		"return",
		"then",
		"true",
		"until",
		"while",
	}
)

PUNCTUATION = frozenset({"(", ")", "[", "]", "{", "}", ";", ":", "::", ",", ".", "..."})

OPERATORS = frozenset(
	{
		"+", "-", "*", "/", "//", "%", "^", "#",
		"&", "~", "|", "<<", ">>",
		"==", "~=", "<=", ">=", "<", ">", "=",
		"..",
	}
)

# One escape sequence at a backslash, superset of 5.1 through 5.4 and LuaJIT.
_ESCAPE = re.compile(
	r"""\\(?:
		\r\n | \n\r | [\r\n]
		| z[ \t\n\r\f\v]*
		| x[0-9A-Fa-f]{2}
		| u\{[0-9A-Fa-f]+\}
		| [0-9]{1,3}
		| [abfnrtv\\"']
	)""",
	re.VERBOSE,
)

_LONG_BRACKET_OPEN = re.compile(r"\[(=*)\[")


@dataclass(frozen=True)
class Token:
	"""
	A lexeme plus the trivia attached to it.

	`span` covers the lexeme only. Tokens built by hand (not by the lexer) have
	no span; the printer formats those with its default policy.
	"""

	kind: TokenKind
	text: str
	span: Optional[Span] = None
	leading: tuple[Trivia, ...] = ()
	trailing: tuple[Trivia, ...] = ()

	@classmethod
	def synthetic(cls, kind: TokenKind, text: str | bytes) -> "Token":
		"""
		Build a token that did not come from source.

		`bytes` are taken as-is; `str` is encoded as UTF-8 so that non-ASCII
		string contents print the way a caller would expect.
		"""
		if isinstance(text, str):
			text = text.encode("utf-8")
		return cls(kind=kind, text=text.decode("latin-1"))

	@property
	def raw(self) -> bytes:
		return self.text.encode("latin-1")

	@property
	def full_text(self) -> str:
		return trivia_text(self.leading) + self.text + trivia_text(self.trailing)

	@property
	def is_synthetic(self) -> bool:
		return self.span is None

	@property
	def is_eof(self) -> bool:
		return self.kind is TokenKind.END_OF_FILE

	def is_symbol(self, text: str) -> bool:
		return self.kind in (TokenKind.OPERATOR, TokenKind.PUNCTUATION) and self.text == text

	def is_keyword(self, text: str) -> bool:
		return self.kind is TokenKind.KEYWORD and self.text == text

	def with_trivia(
		self,
		leading: Optional[tuple[Trivia, ...]] = None,
		trailing: Optional[tuple[Trivia, ...]] = None,
	) -> "Token":
		"""Copy of this token with replaced trivia."""
		return replace(
			self,
			leading=self.leading if leading is None else leading,
			trailing=self.trailing if trailing is None else trailing,
		)


def long_bracket_level(text: str) -> Optional[int]:
	"""Level of a long-bracket lexeme (`[==[` is 2), or None for other text."""
	m = _LONG_BRACKET_OPEN.match(text)
	return len(m.group(1)) if m else None


def quote_style(token: Token) -> str:
	"""
	How a string literal is delimited: `"`, `'`, or the opening long bracket
	(for example `[==[`).
	"""
	if token.kind is not TokenKind.STRING_LITERAL:
		raise ValueError(f"not a string literal: {token.text!r}")
	if token.text[0] in "\"'":
		return token.text[0]
	level = long_bracket_level(token.text)
	return "[" + "=" * (level or 0) + "["


def iter_escapes(
	text: str, start: int = 0, end: Optional[int] = None
) -> Iterator[tuple[int, Optional[str], bool]]:
	"""
	Walk the backslash escapes of a short-string lexeme.

	Yields `(offset, escape, legacy)` for each backslash between `start` and
	`end`. `escape` is the escape text, or None when no dialect accepts the
	sequence: a decimal escape above 255, or a backslash with nothing after
	it. `legacy` marks escapes only Lua 5.1 reads, where a backslash before
	any other character stands for that character (`\\.`, `\\q`, and `\\x` or
	`\\u` not followed by a well-formed value).
	"""
	stop = len(text) if end is None else end
	i = text.find("\\", start, stop)
	while i != -1:
		m = _ESCAPE.match(text, i, stop)
		escape = m.group(0) if m else None
		legacy = False
		if escape is not None:
			body = escape[1:]
			if body[:1].isdigit() and int(body) > 255:
				escape = None
			elif body.startswith("u{") and int(body[2:-1], 16) > 0x7FFFFFFF:
				escape, legacy = escape[:2], True
		elif i + 1 < stop:
			escape, legacy = text[i:i + 2], True
		yield i, escape, legacy
		if escape is None:
			return
		i = text.find("\\", i + len(escape), stop)


__all__ = [
	"KEYWORDS",
	"OPERATORS",
	"PUNCTUATION",
	"Token",
	"TokenKind",
	"iter_escapes",
	"long_bracket_level",
	"quote_style",
]

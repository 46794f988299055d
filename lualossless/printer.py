# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Byte-exact printer.

Tokens that came from the lexer are written verbatim with their trivia, so
`print_tree(parse(source)) == source` for every source that parses.

Tokens built by hand (no span) get a fixed default layout:

- one space before a token when the previous character and the token's first
  character would otherwise lex as a single token (identifier or number
  characters on both sides, `--`, `..`, `.` before a digit, a number before
  `.`, `[[` or `[=`, `==` `<=` `>=` `~=`, `<<`, `>>`, `//`, `::`);
- one newline after every statement whose last token is synthetic and has no
  newline in its trailing trivia;
- nothing else.
"""

from __future__ import annotations

from typing import List, Optional, Union

from lualossless.lexer.tokens import Token, TokenKind
from lualossless.lexer.trivia import has_newline, trivia_text
from lualossless.parser import ast
from lualossless.parser.tree import SyntaxTree

Printable = Union[SyntaxTree, ast.Node, Token]

_MERGING_PAIRS = frozenset(
	{
		("-", "-"),
		(".", "."),
		("[", "["),
		("[", "="),
		("=", "="),
		("<", "="),
		(">", "="),
		("~", "="),
		("<", "<"),
		(">", ">"),
		("/", "/"),
		(":", ":"),
	}
)


class _StatementEnd:
	__slots__ = ("stmt",)

	def __init__(self, stmt: ast.Stmt) -> None:
		self.stmt = stmt


def _is_word(ch: str) -> bool:
	return ch.isalnum() or ch == "_"


def would_merge(left: str, right: str, *, left_is_number: bool = False) -> bool:
	"""True when `right` written directly after `left` would change how either lexes."""
	if not left or not right:
		return False
	a, b = left[-1], right[0]
	if _is_word(a) and _is_word(b):
		return True
	if a == "." and b.isdigit():
		return True
	if left_is_number and b == ".":
		return True
	return (a, b) in _MERGING_PAIRS


def render(target: Printable) -> str:
	"""Latin-1 view of the printed source (see `print_tree`)."""
	root: Union[ast.Node, Token] = target.chunk if isinstance(target, SyntaxTree) else target
	out: List[str] = []
	tail = ""
	prev: Optional[Token] = None
	stack: List[object] = [root]
	while stack:
		item = stack.pop()
		if isinstance(item, _StatementEnd):
			last = item.stmt.last_token
			if last is not None and last.is_synthetic and not has_newline(last.trailing):
				out.append("\n")
				tail = "\n"
			continue
		if isinstance(item, ast.Node):
			if isinstance(item, ast.Stmt):
				stack.append(_StatementEnd(item))
			stack.extend(reversed(list(item.elements())))
			continue
		assert isinstance(item, Token)
		text = trivia_text(item.leading) + item.text
		if prev is not None and (item.is_synthetic or prev.is_synthetic):
			if would_merge(tail, text, left_is_number=prev.kind is TokenKind.NUMBER_LITERAL and not prev.trailing):
				out.append(" ")
		text += trivia_text(item.trailing)
		if text:
			out.append(text)
			tail = text
		prev = item
	return "".join(out)


def print_tree(target: Printable) -> bytes:
	"""
	Render a tree, node, or single token back to bytes.

	For a tree produced by `parse(source)` the result equals `source`.
	"""
	return render(target).encode("latin-1")


__all__ = ["print_tree", "render", "would_merge"]

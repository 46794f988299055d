# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Snapshot helpers for tests.

Two snapshots are kept per `.lua` case file:

- `<case>.tokens.json`: the token stream, one JSON record per line with the
  token's kind, text, byte span, line/column and attached trivia.
- `<case>.tree.txt`: an indented outline of the syntax tree. Each node shows
  its type, metadata and recorded features; a node whose elements are all
  tokens lists them on its own line, otherwise every element gets a line.

Expected snapshots are checked in next to the case files; a missing one is
written out for review instead of being silently accepted.
"""

from __future__ import annotations

import json
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterable, List, Tuple, Union

from lualossless.lexer.tokens import Token
from lualossless.lexer.trivia import Trivia
from lualossless.parser import ast
from lualossless.parser.tree import SyntaxTree

_OUTLINE_ESCAPES = str.maketrans({"\n": "\\n", "\r": "\\r", "\t": "\\t"})


def _trivia_record(trivia: Iterable[Trivia]) -> List[List[str]]:
	return [[t.kind.value, t.text] for t in trivia]


def token_record(token: Token) -> Dict[str, Any]:
	record: Dict[str, Any] = {"kind": token.kind.value, "text": token.text}
	if token.span is not None:
		record["span"] = [token.span.start, token.span.end]
		record["pos"] = [token.span.line, token.span.column]
	if token.leading:
		record["leading"] = _trivia_record(token.leading)
	if token.trailing:
		record["trailing"] = _trivia_record(token.trailing)
	return record


def tokens_to_json(tokens: Iterable[Token]) -> str:
	"""A JSON array with one token record per line."""
	lines = [json.dumps(token_record(tok), ensure_ascii=True) for tok in tokens]
	return "[\n" + ",\n".join(lines) + "\n]\n"


def _token_label(token: Token) -> str:
	if token.is_eof:
		return "<eof>"
	return token.text.translate(_OUTLINE_ESCAPES)


def _node_label(node: ast.Node, tree: SyntaxTree) -> str:
	label = type(node).__name__
	meta = [
		getattr(node, name).value
		for name in ast.element_fields(type(node))
		if isinstance(getattr(node, name), Enum)
	]
	if meta:
		label += "(" + ", ".join(meta) + ")"
	features = tree.features_of(node)
	if features:
		label += " [" + ", ".join(sorted(f.value for f in features)) + "]"
	return label


def tree_outline(tree: SyntaxTree) -> str:
	lines: List[str] = []
	stack: List[Tuple[Union[Token, ast.Node], int]] = [(tree.chunk, 0)]
	while stack:
		element, depth = stack.pop()
		indent = "  " * depth
		if isinstance(element, Token):
			lines.append(indent + _token_label(element))
			continue
		children = list(element.elements())
		label = _node_label(element, tree)
		if all(isinstance(child, Token) for child in children):
			lines.append(" ".join([indent + label] + [_token_label(t) for t in children]))
			continue
		lines.append(indent + label)
		stack.extend((child, depth + 1) for child in reversed(children))
	return "\n".join(lines) + "\n"


def compare_snapshot(expected_path: Path, rendered: str) -> bool:
	"""
	Compare `rendered` with the checked-in snapshot.

	Returns False after writing `expected_path` when it did not exist yet;
	raises `AssertionError` when it exists and differs.
	"""
	if not expected_path.exists():
		expected_path.write_text(rendered)
		return False
	expected = expected_path.read_text()
	if expected != rendered:
		raise AssertionError(
			f"snapshot mismatch for {expected_path.name}\n=== expected ===\n{expected}\n=== got ===\n{rendered}"
		)
	return True


__all__ = [
	"compare_snapshot",
	"token_record",
	"tokens_to_json",
	"tree_outline",
]

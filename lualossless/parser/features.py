# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Non-universal language features a node can use.

The parser accepts the union of all supported dialects and records, per node,
which of these features the node itself uses. The dialect caster checks the
recorded set against a dialect's capabilities.
"""

from __future__ import annotations

from enum import Enum
from typing import FrozenSet

from lualossless.lexer.tokens import Token, TokenKind, iter_escapes

from . import ast


class Feature(Enum):
	GOTO = "goto"
	LABEL = "label"
	EMPTY_STATEMENT = "empty_statement"
	NON_FINAL_BREAK = "non_final_break"
	BITWISE_OPERATORS = "bitwise_operators"
	INTEGER_DIVISION = "integer_division"
	HEX_FLOAT = "hex_float"
	HEX_ESCAPE = "hex_escape"
	Z_ESCAPE = "z_escape"
	UNICODE_ESCAPE = "unicode_escape"
	INT64_SUFFIX = "int64_suffix"
	IMAGINARY_SUFFIX = "imaginary_suffix"
	ATTRIBUTES = "attributes"
	LEGACY_ESCAPE = "legacy_escape"
	GOTO_IDENTIFIER = "goto_identifier"
	UNKNOWN_SYNTAX = "unknown_syntax"


BITWISE_BINARY = frozenset({"&", "|", "~", "<<", ">>"})

_NO_FEATURES: FrozenSet[Feature] = frozenset()


def numeral_features(text: str) -> FrozenSet[Feature]:
	lower = text.lower()
	found = set()
	if lower.endswith("ll"):
		found.add(Feature.INT64_SUFFIX)
	elif lower.endswith("i"):
		found.add(Feature.IMAGINARY_SUFFIX)
	if lower.startswith("0x") and ("." in lower or "p" in lower):
		found.add(Feature.HEX_FLOAT)
	return frozenset(found)


_ESCAPE_FEATURES = {
	"x": Feature.HEX_ESCAPE,
	"z": Feature.Z_ESCAPE,
	"u": Feature.UNICODE_ESCAPE,
}


def string_features(text: str) -> FrozenSet[Feature]:
	if not text or text[0] not in "\"'":
		# Long strings have no escapes.
		return _NO_FEATURES
	found = set()
	for _, escape, legacy in iter_escapes(text, 1, len(text) - 1):
		if escape is None:
			break
		if legacy:
			found.add(Feature.LEGACY_ESCAPE)
			continue
		feature = _ESCAPE_FEATURES.get(escape[1:2])
		if feature is not None:
			found.add(feature)
	return frozenset(found)


def _token_features(token: Token) -> FrozenSet[Feature]:
	if token.kind is TokenKind.NUMBER_LITERAL:
		return numeral_features(token.text)
	if token.kind is TokenKind.STRING_LITERAL:
		return string_features(token.text)
	return _NO_FEATURES


def detect_features(node: ast.Node) -> FrozenSet[Feature]:
	"""Features used by `node` itself (not by its descendants)."""
	found = _construct_features(node)
	if _names_goto(node):
		found = found | {Feature.GOTO_IDENTIFIER}
	return found


def _names_goto(node: ast.Node) -> bool:
	# The parser promotes the `goto` of a goto statement to a keyword; any
	# identifier left spelled `goto` is a 5.1-only name.
	return any(
		isinstance(e, Token) and e.kind is TokenKind.IDENTIFIER and e.text == "goto"
		for e in node.elements()
	)


def _construct_features(node: ast.Node) -> FrozenSet[Feature]:
	if isinstance(node, ast.Literal):
		return _token_features(node.token)
	if isinstance(node, ast.StringArgs):
		return _token_features(node.string)
	if isinstance(node, ast.BinaryOp):
		if node.operator == "//":
			return frozenset({Feature.INTEGER_DIVISION})
		if node.operator in BITWISE_BINARY:
			return frozenset({Feature.BITWISE_OPERATORS})
		return _NO_FEATURES
	if isinstance(node, ast.UnaryOp):
		if node.operator == "~":
			return frozenset({Feature.BITWISE_OPERATORS})
		return _NO_FEATURES
	if isinstance(node, ast.GotoStmt):
		return frozenset({Feature.GOTO})
	if isinstance(node, ast.LabelStmt):
		return frozenset({Feature.LABEL})
	if isinstance(node, ast.EmptyStmt):
		return frozenset({Feature.EMPTY_STATEMENT})
	if isinstance(node, ast.Attribute):
		return frozenset({Feature.ATTRIBUTES})
	if isinstance(node, ast.Block):
		stmts = node.statements
		if any(isinstance(s, ast.BreakStmt) for s in stmts[:-1]):
			return frozenset({Feature.NON_FINAL_BREAK})
		return _NO_FEATURES
	if isinstance(node, (ast.UnknownStmt, ast.UnknownExpr)):
		return frozenset({Feature.UNKNOWN_SYNTAX})
	return _NO_FEATURES


__all__ = [
	"BITWISE_BINARY",
	"Feature",
	"detect_features",
	"numeral_features",
	"string_features",
]

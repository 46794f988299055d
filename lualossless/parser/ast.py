# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Lossless syntax tree.

Every node is a frozen dataclass whose fields are declared in source order.
Fields holding `Token`s, child `Node`s, or tuples of them are the node's owned
elements; concatenating the full text of those elements in field order
rebuilds the node's exact source slice. Other fields (enums, the arena id) are
metadata.

Statements and expressions are each one flat family of variants (`Stmt`,
`Expr`), each with an `Unknown*` arm holding a raw token run so extensions
can add syntax without breaking consumers that handle that arm.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import Enum
from functools import lru_cache
from typing import Iterator, Optional, Sequence, Tuple, Union

from lualossless.core.span import Span
from lualossless.lexer.tokens import Token, TokenKind, quote_style

Element = Union[Token, "Node"]


@lru_cache(maxsize=None)
def element_fields(cls: type) -> Tuple[str, ...]:
	"""Names of the fields of node class `cls` in declaration order, `node_id` excluded."""
	return tuple(f.name for f in fields(cls) if f.name != "node_id")


def _flatten(value: object) -> Iterator[Element]:
	if isinstance(value, (Token, Node)):
		yield value
	elif isinstance(value, tuple):
		for item in value:
			yield from _flatten(item)


@dataclass(frozen=True)
class Node:
	"""
	Base of all tree nodes.

	`node_id` indexes the node in its `SyntaxTree` arena; nodes built by hand
	carry -1 until `SyntaxTree.from_chunk` numbers them. It takes no part in
	equality, so two parses of the same text compare equal.
	"""

	node_id: int = field(default=-1, kw_only=True, compare=False, repr=False)

	def elements(self) -> Iterator[Element]:
		"""Owned tokens and child nodes, in source order."""
		for name in element_fields(type(self)):
			yield from _flatten(getattr(self, name))

	def child_nodes(self) -> Iterator["Node"]:
		return (e for e in self.elements() if isinstance(e, Node))

	def tokens(self) -> Iterator[Token]:
		return iter_tokens(self)

	@property
	def first_token(self) -> Optional[Token]:
		return _edge_token(self, last=False)

	@property
	def last_token(self) -> Optional[Token]:
		return _edge_token(self, last=True)

	@property
	def span(self) -> Optional[Span]:
		"""Lexeme span from the first token to the last (trivia excluded)."""
		first, last = self.first_token, self.last_token
		if first is None or last is None or first.span is None or last.span is None:
			return None
		return first.span.cover(last.span)

	@property
	def full_span(self) -> Optional[Span]:
		"""Span including the first token's leading and the last token's trailing trivia."""
		span = self.span
		if span is None:
			return None
		first, last = self.first_token, self.last_token
		assert first is not None and last is not None
		start = span.start - sum(len(t.text) for t in first.leading)
		end = span.end + sum(len(t.text) for t in last.trailing)
		return Span(start, end)

	def source_text(self) -> str:
		"""Latin-1 view of the exact source this node was parsed from."""
		return "".join(tok.full_text for tok in iter_tokens(self))


def _edge_token(node: Node, *, last: bool) -> Optional[Token]:
	stack: list[Element] = [node]
	while stack:
		item = stack.pop()
		if isinstance(item, Token):
			return item
		children = list(item.elements())
		if not last:
			children.reverse()
		stack.extend(children)
	return None


def iter_tokens(root: Element) -> Iterator[Token]:
	"""All tokens under `root` in document order (iterative, any depth)."""
	stack: list[Element] = [root]
	while stack:
		item = stack.pop()
		if isinstance(item, Token):
			yield item
			continue
		stack.extend(reversed(list(item.elements())))


def walk(root: Node) -> Iterator[Node]:
	"""Pre-order walk over `root` and every node below it."""
	stack: list[Node] = [root]
	while stack:
		node = stack.pop()
		yield node
		stack.extend(reversed(list(node.child_nodes())))


# --- shared helpers ---------------------------------------------------------


@dataclass(frozen=True)
class SeparatedList(Node):
	"""
	Items interleaved with separator tokens: `a, b, c`.

	`parts` alternates item, separator, item, ...; a trailing separator is
	allowed (table constructors use it). Items are nodes or tokens (name
	lists hold identifier tokens).
	"""

	parts: Tuple[Element, ...] = ()

	@property
	def items(self) -> Tuple[Element, ...]:
		return self.parts[0::2]

	@property
	def separators(self) -> Tuple[Token, ...]:
		return self.parts[1::2]  # type: ignore[return-value]

	def __len__(self) -> int:
		return len(self.items)

	@classmethod
	def of(cls, items: Sequence[Element], separator: str = ",") -> "SeparatedList":
		"""Build a list of synthetic separators around `items`."""
		parts: list[Element] = []
		for i, item in enumerate(items):
			if i:
				parts.append(Token.synthetic(TokenKind.PUNCTUATION, separator))
			parts.append(item)
		return cls(parts=tuple(parts))


@dataclass(frozen=True)
class Block(Node):
	statements: Tuple["Stmt", ...] = ()


@dataclass(frozen=True)
class Chunk(Node):
	"""A whole file: the top-level block plus the end-of-file token that owns the tail trivia."""

	block: Block
	eof: Token


# --- expressions ------------------------------------------------------------


@dataclass(frozen=True)
class Expr(Node):
	pass


class LiteralKind(Enum):
	NIL = "nil"
	TRUE = "true"
	FALSE = "false"
	NUMBER = "number"
	STRING = "string"
	VARARGS = "varargs"


@dataclass(frozen=True)
class Literal(Expr):
	kind: LiteralKind
	token: Token

	@property
	def text(self) -> str:
		return self.token.text

	@property
	def quote_style(self) -> str:
		return quote_style(self.token)


@dataclass(frozen=True)
class Name(Expr):
	token: Token

	@property
	def name(self) -> str:
		return self.token.text


@dataclass(frozen=True)
class Parenthesized(Expr):
	open: Token
	expr: Expr
	close: Token


@dataclass(frozen=True)
class BinaryOp(Expr):
	left: Expr
	op: Token
	right: Expr

	@property
	def operator(self) -> str:
		return self.op.text


@dataclass(frozen=True)
class UnaryOp(Expr):
	op: Token
	operand: Expr

	@property
	def operator(self) -> str:
		return self.op.text


@dataclass(frozen=True)
class Index(Expr):
	"""
	`value.key` (dot form: `key` is an identifier token, `close` is None) or
	`value[key]` (bracket form).
	"""

	value: Expr
	open: Token
	key: Union[Expr, Token]
	close: Optional[Token] = None

	@property
	def is_dot(self) -> bool:
		return self.close is None


class FieldKind(Enum):
	POSITIONAL = "positional"
	NAMED = "named"
	BRACKETED = "bracketed"


@dataclass(frozen=True)
class TableField(Node):
	"""`value`, `name = value` or `[key] = value`."""

	kind: FieldKind
	key_open: Optional[Token]
	key: Union[Expr, Token, None]
	key_close: Optional[Token]
	equals: Optional[Token]
	value: Expr


@dataclass(frozen=True)
class TableConstructor(Expr):
	open: Token
	fields: SeparatedList
	close: Token


@dataclass(frozen=True)
class FunctionBody(Node):
	"""`(params) block end`; `params` may end with a `...` token."""

	open: Token
	params: SeparatedList
	close: Token
	block: Block
	end: Token

	@property
	def is_variadic(self) -> bool:
		items = self.params.items
		return bool(items) and isinstance(items[-1], Token) and items[-1].text == "..."


@dataclass(frozen=True)
class FunctionExpr(Expr):
	function: Token
	body: FunctionBody


@dataclass(frozen=True)
class CallArgs(Node):
	pass


@dataclass(frozen=True)
class ParenArgs(CallArgs):
	open: Token
	arguments: SeparatedList
	close: Token


@dataclass(frozen=True)
class TableArgs(CallArgs):
	table: TableConstructor


@dataclass(frozen=True)
class StringArgs(CallArgs):
	string: Token


@dataclass(frozen=True)
class Call(Expr):
	callee: Expr
	args: CallArgs


@dataclass(frozen=True)
class MethodCall(Expr):
	receiver: Expr
	colon: Token
	method: Token
	args: CallArgs


@dataclass(frozen=True)
class UnknownExpr(Expr):
	"""Raw token run for syntax this model does not describe."""

	raw: Tuple[Token, ...] = ()


# --- statements -------------------------------------------------------------


@dataclass(frozen=True)
class Stmt(Node):
	pass


@dataclass(frozen=True)
class AssignmentStmt(Stmt):
	targets: SeparatedList
	equals: Token
	values: SeparatedList
	semicolon: Optional[Token] = None


@dataclass(frozen=True)
class Attribute(Node):
	"""Lua 5.4 variable attribute: `<const>` or `<close>`."""

	open: Token
	name: Token
	close: Token


@dataclass(frozen=True)
class LocalName(Node):
	name: Token
	attribute: Optional[Attribute] = None


@dataclass(frozen=True)
class LocalStmt(Stmt):
	local: Token
	names: SeparatedList
	equals: Optional[Token] = None
	values: Optional[SeparatedList] = None
	semicolon: Optional[Token] = None


@dataclass(frozen=True)
class ElseIfClause(Node):
	elseif: Token
	condition: Expr
	then: Token
	block: Block


@dataclass(frozen=True)
class ElseClause(Node):
	else_: Token
	block: Block


@dataclass(frozen=True)
class IfStmt(Stmt):
	if_: Token
	condition: Expr
	then: Token
	block: Block
	elseifs: Tuple[ElseIfClause, ...]
	else_clause: Optional[ElseClause]
	end: Token
	semicolon: Optional[Token] = None


@dataclass(frozen=True)
class WhileStmt(Stmt):
	while_: Token
	condition: Expr
	do: Token
	block: Block
	end: Token
	semicolon: Optional[Token] = None


@dataclass(frozen=True)
class RepeatStmt(Stmt):
	repeat: Token
	block: Block
	until: Token
	condition: Expr
	semicolon: Optional[Token] = None


@dataclass(frozen=True)
class NumericForStmt(Stmt):
	for_: Token
	var: Token
	equals: Token
	start: Expr
	limit_comma: Token
	limit: Expr
	step_comma: Optional[Token]
	step: Optional[Expr]
	do: Token
	block: Block
	end: Token
	semicolon: Optional[Token] = None


@dataclass(frozen=True)
class GenericForStmt(Stmt):
	for_: Token
	names: SeparatedList
	in_: Token
	exprs: SeparatedList
	do: Token
	block: Block
	end: Token
	semicolon: Optional[Token] = None


@dataclass(frozen=True)
class FunctionName(Node):
	"""`a.b.c` or `a.b:c`."""

	path: SeparatedList
	colon: Optional[Token] = None
	method: Optional[Token] = None

	@property
	def dotted(self) -> str:
		text = ".".join(tok.text for tok in self.path.items)  # type: ignore[union-attr]
		if self.method is not None:
			text += ":" + self.method.text
		return text


@dataclass(frozen=True)
class FunctionDeclStmt(Stmt):
	function: Token
	name: FunctionName
	body: FunctionBody
	semicolon: Optional[Token] = None


@dataclass(frozen=True)
class LocalFunctionStmt(Stmt):
	local: Token
	function: Token
	name: Token
	body: FunctionBody
	semicolon: Optional[Token] = None


@dataclass(frozen=True)
class ReturnStmt(Stmt):
	return_: Token
	values: SeparatedList
	semicolon: Optional[Token] = None


@dataclass(frozen=True)
class BreakStmt(Stmt):
	break_: Token
	semicolon: Optional[Token] = None


@dataclass(frozen=True)
class DoStmt(Stmt):
	do: Token
	block: Block
	end: Token
	semicolon: Optional[Token] = None


@dataclass(frozen=True)
class CallStmt(Stmt):
	call: Union[Call, MethodCall]
	semicolon: Optional[Token] = None


@dataclass(frozen=True)
class GotoStmt(Stmt):
	goto: Token
	label: Token
	semicolon: Optional[Token] = None


@dataclass(frozen=True)
class LabelStmt(Stmt):
	open: Token
	name: Token
	close: Token
	semicolon: Optional[Token] = None


@dataclass(frozen=True)
class EmptyStmt(Stmt):
	"""A `;` with no statement before it."""

	semicolon: Token


@dataclass(frozen=True)
class UnknownStmt(Stmt):
	"""Raw token run for syntax this model does not describe."""

	raw: Tuple[Token, ...] = ()
	semicolon: Optional[Token] = None


__all__ = [
	"AssignmentStmt",
	"Attribute",
	"BinaryOp",
	"Block",
	"BreakStmt",
	"Call",
	"CallArgs",
	"CallStmt",
	"Chunk",
	"DoStmt",
	"Element",
	"element_fields",
	"ElseClause",
	"ElseIfClause",
	"EmptyStmt",
	"Expr",
	"FieldKind",
	"FunctionBody",
	"FunctionDeclStmt",
	"FunctionExpr",
	"FunctionName",
	"GenericForStmt",
	"GotoStmt",
	"IfStmt",
	"Index",
	"LabelStmt",
	"Literal",
	"LiteralKind",
	"LocalFunctionStmt",
	"LocalName",
	"LocalStmt",
	"MethodCall",
	"Name",
	"Node",
	"NumericForStmt",
	"ParenArgs",
	"Parenthesized",
	"RepeatStmt",
	"ReturnStmt",
	"SeparatedList",
	"Stmt",
	"StringArgs",
	"TableArgs",
	"TableConstructor",
	"TableField",
	"UnaryOp",
	"UnknownExpr",
	"UnknownStmt",
	"WhileStmt",
	"iter_tokens",
	"walk",
]

# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Recursive-descent Lua parser.

One method per grammar production; expressions use precedence climbing over
Lua 5.3's priority table, which orders the 5.1 operators exactly as 5.1 does
and slots the 5.3 bitwise and floor-division operators in between. The
grammar is the union of every supported dialect; dialect-specific constructs
are recorded per node (see `features.py`) and checked later by the caster.

Parsing is all-or-nothing: the first grammar violation raises `ParseError`
and no partial tree is returned.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import replace
from typing import Dict, FrozenSet, List, Optional, Tuple, Type, TypeVar

from lualossless.config import DEFAULT_CONFIG, ParserConfig
from lualossless.core.errors import ParseError
from lualossless.lexer.lexer import tokenize
from lualossless.lexer.tokens import Token, TokenKind

from . import ast
from .features import Feature, detect_features
from .tree import SyntaxTree

logger = logging.getLogger(__name__)

N = TypeVar("N", bound=ast.Node)

# (left, right) binding power; right < left makes an operator right-associative.
BINARY_PRIORITY: Dict[str, Tuple[int, int]] = {
	"or": (1, 1),
	"and": (2, 2),
	"<": (3, 3),
	">": (3, 3),
	"<=": (3, 3),
	">=": (3, 3),
	"~=": (3, 3),
	"==": (3, 3),
	"|": (4, 4),
	"~": (5, 5),
	"&": (6, 6),
	"<<": (7, 7),
	">>": (7, 7),
	"..": (9, 8),
	"+": (10, 10),
	"-": (10, 10),
	"*": (11, 11),
	"/": (11, 11),
	"//": (11, 11),
	"%": (11, 11),
	"^": (14, 13),
}

UNARY_PRIORITY = 12
UNARY_OPERATORS = frozenset({"not", "-", "#", "~"})

_BLOCK_END_KEYWORDS = frozenset({"else", "elseif", "end", "until"})

# Python frames one nesting level can cost at most (a call argument goes
# through expr, simple_expr, suffixed_expr, call_args and expr_list).
_FRAMES_PER_LEVEL = 6
_FRAME_SLACK = 64


def _ensure_stack(max_depth: int) -> None:
	"""Raise the interpreter recursion limit so `max_depth` nesting levels fit."""
	depth, frame = 0, sys._getframe()
	while frame is not None:
		depth += 1
		frame = frame.f_back
	needed = depth + max_depth * _FRAMES_PER_LEVEL + _FRAME_SLACK
	if sys.getrecursionlimit() < needed:
		sys.setrecursionlimit(needed)


class Parser:
	"""
	Builds a `Chunk` from a token list produced by `tokenize`.

	Every node is registered in the parser's arena as it is constructed, so
	ids are assigned children-first and match `SyntaxTree.nodes`.
	"""

	def __init__(self, tokens: List[Token], config: ParserConfig = DEFAULT_CONFIG) -> None:
		if not tokens or not tokens[-1].is_eof:
			raise ValueError("token list must end with an END_OF_FILE token")
		# Copied: contextual keywords are promoted in place.
		self.tokens = list(tokens)
		self.config = config
		self.pos = 0
		self.depth = 0
		self.nodes: List[ast.Node] = []
		self.features: Dict[int, FrozenSet[Feature]] = {}

	# --- token helpers ------------------------------------------------------

	def peek(self, ahead: int = 0) -> Token:
		index = min(self.pos + ahead, len(self.tokens) - 1)
		return self.tokens[index]

	def advance(self) -> Token:
		tok = self.tokens[self.pos]
		if not tok.is_eof:
			self.pos += 1
		return tok

	def advance_as_keyword(self) -> Token:
		"""Consume a contextual keyword (`goto`), re-kinding it in the token list."""
		tok = replace(self.tokens[self.pos], kind=TokenKind.KEYWORD)
		self.tokens[self.pos] = tok
		self.pos += 1
		return tok

	def check(self, text: str) -> bool:
		tok = self.peek()
		if tok.kind is TokenKind.KEYWORD:
			return tok.text == text
		return tok.kind in (TokenKind.OPERATOR, TokenKind.PUNCTUATION) and tok.text == text

	def accept(self, text: str) -> Optional[Token]:
		return self.advance() if self.check(text) else None

	def expect(self, text: str, *, opener: Optional[Token] = None) -> Token:
		if self.check(text):
			return self.advance()
		expected = f"'{text}'"
		if opener is not None and opener.span is not None and opener.span.line != self.peek().span.line:
			expected += f" (to close '{opener.text}' at line {opener.span.line})"
		raise self.error(expected)

	def expect_name(self) -> Token:
		if self.peek().kind is TokenKind.IDENTIFIER:
			return self.advance()
		raise self.error("<name>")

	def error(self, expected: str) -> ParseError:
		return ParseError(expected, self.peek())

	def make(self, cls: Type[N], *args: object, **kwargs: object) -> N:
		node = cls(*args, node_id=len(self.nodes), **kwargs)  # type: ignore[arg-type]
		self.nodes.append(node)
		found = detect_features(node)
		if found:
			self.features[node.node_id] = found
		return node

	def enter(self) -> None:
		self.depth += 1
		if self.depth > self.config.max_depth:
			raise self.error("less nesting (syntax nesting limit reached)")

	def leave(self) -> None:
		self.depth -= 1

	# --- chunk and blocks ---------------------------------------------------

	def parse_chunk(self) -> ast.Chunk:
		_ensure_stack(self.config.max_depth)
		block = self.block()
		if not self.peek().is_eof:
			raise self.error("<eof>")
		return self.make(ast.Chunk, block, self.advance())

	def block_follows(self) -> bool:
		tok = self.peek()
		return tok.is_eof or (tok.kind is TokenKind.KEYWORD and tok.text in _BLOCK_END_KEYWORDS)

	def block(self) -> ast.Block:
		self.enter()
		try:
			statements: List[ast.Stmt] = []
			while not self.block_follows():
				if self.check("return"):
					statements.append(self.return_stmt())
					break
				statements.append(self.statement())
			return self.make(ast.Block, tuple(statements))
		finally:
			self.leave()

	# --- statements ---------------------------------------------------------

	def statement(self) -> ast.Stmt:
		tok = self.peek()
		if tok.is_symbol(";"):
			return self.make(ast.EmptyStmt, self.advance())
		stmt = self._statement_body(tok)
		semicolon = self.accept(";")
		if semicolon is None:
			return stmt
		return self._with_semicolon(stmt, semicolon)

	def _statement_body(self, tok: Token) -> ast.Stmt:
		if tok.kind is TokenKind.KEYWORD:
			text = tok.text
			if text == "if":
				return self.if_stmt()
			if text == "while":
				return self.while_stmt()
			if text == "do":
				return self.do_stmt()
			if text == "for":
				return self.for_stmt()
			if text == "repeat":
				return self.repeat_stmt()
			if text == "function":
				return self.function_decl_stmt()
			if text == "local":
				return self.local_stmt()
			if text == "break":
				return self.make(ast.BreakStmt, self.advance())
		if tok.is_symbol("::"):
			return self.label_stmt()
		if self._at_goto(tok):
			goto = self.advance_as_keyword()
			return self.make(ast.GotoStmt, goto, self.advance())
		return self.expr_stmt()

	def _at_goto(self, tok: Token) -> bool:
		# `goto` followed by a name can only be a goto statement; anywhere else
		# it is an ordinary identifier (Lua 5.1).
		return tok.kind is TokenKind.IDENTIFIER and tok.text == "goto" and self.peek(1).kind is TokenKind.IDENTIFIER

	def _with_semicolon(self, stmt: ast.Stmt, semicolon: Token) -> ast.Stmt:
		# Nodes are immutable; swap the arena entry for the completed copy.
		completed = replace(stmt, semicolon=semicolon)
		self.nodes[stmt.node_id] = completed
		return completed

	def if_stmt(self) -> ast.IfStmt:
		if_ = self.advance()
		condition = self.expr()
		then = self.expect("then")
		block = self.block()
		elseifs: List[ast.ElseIfClause] = []
		while self.check("elseif"):
			elseif = self.advance()
			cond = self.expr()
			then_tok = self.expect("then")
			elseifs.append(self.make(ast.ElseIfClause, elseif, cond, then_tok, self.block()))
		else_clause = None
		if self.check("else"):
			else_ = self.advance()
			else_clause = self.make(ast.ElseClause, else_, self.block())
		end = self.expect("end", opener=if_)
		return self.make(ast.IfStmt, if_, condition, then, block, tuple(elseifs), else_clause, end)

	def while_stmt(self) -> ast.WhileStmt:
		while_ = self.advance()
		condition = self.expr()
		do = self.expect("do")
		block = self.block()
		end = self.expect("end", opener=while_)
		return self.make(ast.WhileStmt, while_, condition, do, block, end)

	def do_stmt(self) -> ast.DoStmt:
		do = self.advance()
		block = self.block()
		end = self.expect("end", opener=do)
		return self.make(ast.DoStmt, do, block, end)

	def repeat_stmt(self) -> ast.RepeatStmt:
		repeat = self.advance()
		block = self.block()
		until = self.expect("until", opener=repeat)
		return self.make(ast.RepeatStmt, repeat, block, until, self.expr())

	def for_stmt(self) -> ast.Stmt:
		for_ = self.advance()
		first = self.expect_name()
		if self.check("="):
			equals = self.advance()
			start = self.expr()
			limit_comma = self.expect(",")
			limit = self.expr()
			step_comma = self.accept(",")
			step = self.expr() if step_comma is not None else None
			do = self.expect("do")
			block = self.block()
			end = self.expect("end", opener=for_)
			return self.make(
				ast.NumericForStmt,
				for_, first, equals, start, limit_comma, limit, step_comma, step, do, block, end,
			)
		if not (self.check(",") or self.check("in")):
			raise self.error("'=' or 'in'")
		parts: List[ast.Element] = [first]
		while self.check(","):
			parts.append(self.advance())
			parts.append(self.expect_name())
		names = self.make(ast.SeparatedList, tuple(parts))
		in_ = self.expect("in")
		exprs = self.expr_list()
		do = self.expect("do")
		block = self.block()
		end = self.expect("end", opener=for_)
		return self.make(ast.GenericForStmt, for_, names, in_, exprs, do, block, end)

	def function_decl_stmt(self) -> ast.FunctionDeclStmt:
		function = self.advance()
		parts: List[ast.Element] = [self.expect_name()]
		while self.check("."):
			parts.append(self.advance())
			parts.append(self.expect_name())
		path = self.make(ast.SeparatedList, tuple(parts))
		colon = self.accept(":")
		method = self.expect_name() if colon is not None else None
		name = self.make(ast.FunctionName, path, colon, method)
		return self.make(ast.FunctionDeclStmt, function, name, self.function_body(function))

	def local_stmt(self) -> ast.Stmt:
		local = self.advance()
		if self.check("function"):
			function = self.advance()
			name = self.expect_name()
			return self.make(ast.LocalFunctionStmt, local, function, name, self.function_body(function))
		parts: List[ast.Element] = [self.local_name()]
		while self.check(","):
			parts.append(self.advance())
			parts.append(self.local_name())
		names = self.make(ast.SeparatedList, tuple(parts))
		equals = self.accept("=")
		values = self.expr_list() if equals is not None else None
		return self.make(ast.LocalStmt, local, names, equals, values)

	def local_name(self) -> ast.LocalName:
		name = self.expect_name()
		attribute = None
		if self.check("<"):
			open_ = self.advance()
			attrib = self.expect_name()
			close = self.expect(">")
			attribute = self.make(ast.Attribute, open_, attrib, close)
		return self.make(ast.LocalName, name, attribute)

	def return_stmt(self) -> ast.ReturnStmt:
		return_ = self.advance()
		if self.block_follows() or self.check(";"):
			values = self.make(ast.SeparatedList, ())
		else:
			values = self.expr_list()
		stmt = self.make(ast.ReturnStmt, return_, values)
		semicolon = self.accept(";")
		if semicolon is not None:
			stmt = self._with_semicolon(stmt, semicolon)
		return stmt

	def label_stmt(self) -> ast.LabelStmt:
		open_ = self.advance()
		name = self.expect_name()
		close = self.expect("::")
		return self.make(ast.LabelStmt, open_, name, close)

	def expr_stmt(self) -> ast.Stmt:
		first = self.suffixed_expr()
		if self.check("=") or self.check(","):
			parts: List[ast.Element] = [self._assignable(first)]
			while self.check(","):
				parts.append(self.advance())
				parts.append(self._assignable(self.suffixed_expr()))
			targets = self.make(ast.SeparatedList, tuple(parts))
			equals = self.expect("=")
			return self.make(ast.AssignmentStmt, targets, equals, self.expr_list())
		if isinstance(first, (ast.Call, ast.MethodCall)):
			return self.make(ast.CallStmt, first)
		raise self.error("'=' or call arguments")

	def _assignable(self, expr: ast.Expr) -> ast.Expr:
		if isinstance(expr, (ast.Name, ast.Index)):
			return expr
		raise self.error("assignable expression (name or index) before this")

	# --- expressions --------------------------------------------------------

	def expr_list(self) -> ast.SeparatedList:
		parts: List[ast.Element] = [self.expr()]
		while self.check(","):
			parts.append(self.advance())
			parts.append(self.expr())
		return self.make(ast.SeparatedList, tuple(parts))

	def expr(self, limit: int = 0) -> ast.Expr:
		"""Parse a subexpression whose binary operators bind tighter than `limit`."""
		self.enter()
		try:
			tok = self.peek()
			left: ast.Expr
			if self._is_unary(tok):
				op = self.advance()
				left = self.make(ast.UnaryOp, op, self.expr(UNARY_PRIORITY))
			else:
				left = self.simple_expr()
			while True:
				priority = self._binary_priority(self.peek())
				if priority is None or priority[0] <= limit:
					return left
				if priority[1] < priority[0]:
					left = self._right_chain(left, priority)
					continue
				op = self.advance()
				right = self.expr(priority[1])
				left = self.make(ast.BinaryOp, left, op, right)
		finally:
			self.leave()

	def _right_chain(self, first: ast.Expr, priority: Tuple[int, int]) -> ast.Expr:
		"""
		Parse `a .. b .. c` (or a `^` chain) starting after `a`.

		Operands are parsed at the operator's own left priority, so each one
		stops at the next operator of the chain; the collected operands are
		then folded from the right. A long chain costs one nesting level, not
		one per operator.
		"""
		operands: List[ast.Expr] = [first]
		ops: List[Token] = []
		while True:
			ops.append(self.advance())
			operands.append(self.expr(priority[0]))
			following = self._binary_priority(self.peek())
			if following is None or following[0] <= priority[1]:
				break
		right = operands.pop()
		while ops:
			right = self.make(ast.BinaryOp, operands.pop(), ops.pop(), right)
		return right

	@staticmethod
	def _is_unary(tok: Token) -> bool:
		if tok.kind is TokenKind.KEYWORD:
			return tok.text == "not"
		return tok.kind is TokenKind.OPERATOR and tok.text in UNARY_OPERATORS

	@staticmethod
	def _binary_priority(tok: Token) -> Optional[Tuple[int, int]]:
		if tok.kind is TokenKind.OPERATOR or (tok.kind is TokenKind.KEYWORD and tok.text in ("and", "or")):
			return BINARY_PRIORITY.get(tok.text)
		return None

	def simple_expr(self) -> ast.Expr:
		tok = self.peek()
		if tok.kind is TokenKind.NUMBER_LITERAL:
			return self.make(ast.Literal, ast.LiteralKind.NUMBER, self.advance())
		if tok.kind is TokenKind.STRING_LITERAL:
			return self.make(ast.Literal, ast.LiteralKind.STRING, self.advance())
		if tok.kind is TokenKind.KEYWORD:
			if tok.text == "nil":
				return self.make(ast.Literal, ast.LiteralKind.NIL, self.advance())
			if tok.text == "true":
				return self.make(ast.Literal, ast.LiteralKind.TRUE, self.advance())
			if tok.text == "false":
				return self.make(ast.Literal, ast.LiteralKind.FALSE, self.advance())
			if tok.text == "function":
				function = self.advance()
				return self.make(ast.FunctionExpr, function, self.function_body(function))
		if tok.is_symbol("..."):
			return self.make(ast.Literal, ast.LiteralKind.VARARGS, self.advance())
		if tok.is_symbol("{"):
			return self.table_constructor()
		return self.suffixed_expr()

	def primary_expr(self) -> ast.Expr:
		tok = self.peek()
		if tok.kind is TokenKind.IDENTIFIER:
			return self.make(ast.Name, self.advance())
		if tok.is_symbol("("):
			open_ = self.advance()
			inner = self.expr()
			close = self.expect(")", opener=open_)
			return self.make(ast.Parenthesized, open_, inner, close)
		raise self.error("expression")

	def suffixed_expr(self) -> ast.Expr:
		expr = self.primary_expr()
		while True:
			tok = self.peek()
			if tok.is_symbol("."):
				dot = self.advance()
				expr = self.make(ast.Index, expr, dot, self.expect_name())
			elif tok.is_symbol("["):
				open_ = self.advance()
				key = self.expr()
				close = self.expect("]", opener=open_)
				expr = self.make(ast.Index, expr, open_, key, close)
			elif tok.is_symbol(":"):
				colon = self.advance()
				method = self.expect_name()
				expr = self.make(ast.MethodCall, expr, colon, method, self.call_args())
			elif tok.is_symbol("(") or tok.is_symbol("{") or tok.kind is TokenKind.STRING_LITERAL:
				expr = self.make(ast.Call, expr, self.call_args())
			else:
				return expr

	def call_args(self) -> ast.CallArgs:
		tok = self.peek()
		if tok.kind is TokenKind.STRING_LITERAL:
			return self.make(ast.StringArgs, self.advance())
		if tok.is_symbol("{"):
			return self.make(ast.TableArgs, self.table_constructor())
		if not tok.is_symbol("("):
			raise self.error("function arguments")
		open_ = self.advance()
		if self.check(")"):
			arguments = self.make(ast.SeparatedList, ())
		else:
			arguments = self.expr_list()
		close = self.expect(")", opener=open_)
		return self.make(ast.ParenArgs, open_, arguments, close)

	def table_constructor(self) -> ast.TableConstructor:
		open_ = self.expect("{")
		self.enter()
		try:
			parts: List[ast.Element] = []
			while not self.check("}"):
				parts.append(self.table_field())
				separator = self.accept(",") or self.accept(";")
				if separator is None:
					break
				parts.append(separator)
			fields = self.make(ast.SeparatedList, tuple(parts))
		finally:
			self.leave()
		close = self.expect("}", opener=open_)
		return self.make(ast.TableConstructor, open_, fields, close)

	def table_field(self) -> ast.TableField:
		tok = self.peek()
		if tok.is_symbol("["):
			key_open = self.advance()
			key = self.expr()
			key_close = self.expect("]", opener=key_open)
			equals = self.expect("=")
			return self.make(
				ast.TableField, ast.FieldKind.BRACKETED, key_open, key, key_close, equals, self.expr(),
			)
		if tok.kind is TokenKind.IDENTIFIER and self.peek(1).is_symbol("="):
			name = self.advance()
			equals = self.advance()
			return self.make(ast.TableField, ast.FieldKind.NAMED, None, name, None, equals, self.expr())
		return self.make(ast.TableField, ast.FieldKind.POSITIONAL, None, None, None, None, self.expr())

	def function_body(self, function: Token) -> ast.FunctionBody:
		open_ = self.expect("(")
		parts: List[ast.Element] = []
		if not self.check(")"):
			while True:
				if self.check("..."):
					parts.append(self.advance())
					break
				parts.append(self.expect_name())
				comma = self.accept(",")
				if comma is None:
					break
				parts.append(comma)
		params = self.make(ast.SeparatedList, tuple(parts))
		close = self.expect(")", opener=open_)
		block = self.block()
		end = self.expect("end", opener=function)
		return self.make(ast.FunctionBody, open_, params, close, block, end)

	# --- result -------------------------------------------------------------

	def finish(self, source: bytes, chunk: ast.Chunk) -> SyntaxTree:
		return SyntaxTree.build(source, chunk, tuple(self.tokens), self.nodes, self.features)


def parse(source: bytes | str, *, config: Optional[ParserConfig] = None) -> SyntaxTree:
	"""
	Parse a whole Lua chunk.

	Raises `LexError` or `ParseError` on malformed input. When
	`config.dialect` is set the result is also cast to that dialect, which
	can raise `UnsupportedConstruct`.
	"""
	config = config or DEFAULT_CONFIG
	if isinstance(source, str):
		source = source.encode("utf-8")
	tokens = tokenize(source)
	parser = Parser(tokens, config)
	chunk = parser.parse_chunk()
	tree = parser.finish(source, chunk)
	logger.debug("parsed %d tokens into %d nodes", len(tokens), len(tree.nodes))
	if config.dialect is not None:
		from lualossless.dialects import cast

		tree = cast(tree, config.dialect)
	return tree


__all__ = ["BINARY_PRIORITY", "Parser", "UNARY_PRIORITY", "parse"]

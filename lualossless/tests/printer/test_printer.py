# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import pytest

from lualossless import SyntaxTree, parse, print_tree, render
from lualossless.lexer import Token, TokenKind, Trivia, TriviaKind
from lualossless.parser import ast
from lualossless.printer import would_merge


def _tok(kind: TokenKind, text: str) -> Token:
	return Token.synthetic(kind, text)


def _kw(text: str) -> Token:
	return _tok(TokenKind.KEYWORD, text)


def _name(text: str) -> ast.Name:
	return ast.Name(_tok(TokenKind.IDENTIFIER, text))


def _num(text: str) -> ast.Literal:
	return ast.Literal(ast.LiteralKind.NUMBER, _tok(TokenKind.NUMBER_LITERAL, text))


def _eof() -> Token:
	return _tok(TokenKind.END_OF_FILE, "")


def _chunk(*statements: ast.Stmt) -> ast.Chunk:
	return ast.Chunk(ast.Block(statements), _eof())


@pytest.mark.parametrize(
	"source",
	[
		b"",
		b"\n",
		b"local x = 1",
		b"local   x\t=\t1  -- trailing\n\n\n-- tail comment",
		b"if a then\r\n  b()\r\nelse\r\n  c()\r\nend\r\n",
		b"x = '\xff\xfe' .. \"\\0\\x00\" -- \xe9\n",
		b"#!/usr/bin/env lua\nprint(1)\n",
		b"return [==[\n]]\n]==]",
		b"t = { 1 ,2;3 , }",
		b"f{a=1}:g'x'(...)",
		b";;;",
		b"--[[ only a comment ]]",
		b"a=b--c\n",
	],
)
def test_round_trip(source: bytes) -> None:
	assert print_tree(parse(source)) == source


def test_round_trip_is_idempotent() -> None:
	source = b"local function f(a, ...)\n\treturn a --[=[ x ]=]\nend\n"
	once = print_tree(parse(source))
	assert print_tree(parse(once)) == once == source


def test_printing_a_subtree() -> None:
	tree = parse("local t = { a = 1 }  -- c\nprint(t)")
	(local, _) = tree.chunk.block.statements
	assert print_tree(local) == b"local t = { a = 1 }  -- c\n"
	assert print_tree(tree.tokens[0]) == b"local "


def test_synthetic_local_statement() -> None:
	stmt = ast.LocalStmt(
		_kw("local"),
		ast.SeparatedList.of([ast.LocalName(_tok(TokenKind.IDENTIFIER, "x"))]),
		_tok(TokenKind.OPERATOR, "="),
		ast.SeparatedList.of([_num("1")]),
	)
	assert print_tree(_chunk(stmt)) == b"local x=1\n"


def test_synthetic_statements_are_separated_by_newlines() -> None:
	first = ast.CallStmt(
		ast.Call(_name("f"), ast.ParenArgs(_tok(TokenKind.PUNCTUATION, "("), ast.SeparatedList(), _tok(TokenKind.PUNCTUATION, ")")))
	)
	second = ast.ReturnStmt(_kw("return"), ast.SeparatedList.of([_name("x")]))
	assert render(_chunk(first, second)) == "f()\nreturn x\n"


def test_concat_of_numbers_gets_spaces() -> None:
	expr = ast.BinaryOp(_num("1"), _tok(TokenKind.OPERATOR, ".."), _num("2"))
	assert render(expr) == "1 .. 2"


def test_keyword_operators_are_spaced() -> None:
	expr = ast.BinaryOp(_name("a"), _kw("and"), ast.UnaryOp(_kw("not"), _name("b")))
	assert render(expr) == "a and not b"


def test_unary_minus_does_not_form_a_comment() -> None:
	expr = ast.UnaryOp(_tok(TokenKind.OPERATOR, "-"), ast.UnaryOp(_tok(TokenKind.OPERATOR, "-"), _name("x")))
	assert render(expr) == "- -x"


def test_nested_synthetic_block() -> None:
	inner = ast.BreakStmt(_kw("break"))
	loop = ast.WhileStmt(_kw("while"), ast.Literal(ast.LiteralKind.TRUE, _kw("true")), _kw("do"), ast.Block((inner,)), _kw("end"))
	assert render(_chunk(loop)) == "while true do break\nend\n"


def test_mixing_parsed_and_synthetic_statements() -> None:
	tree = parse("x = 1\n")
	(parsed,) = tree.chunk.block.statements
	call = ast.CallStmt(
		ast.Call(
			_name("print"),
			ast.ParenArgs(
				_tok(TokenKind.PUNCTUATION, "("),
				ast.SeparatedList.of([_name("x")]),
				_tok(TokenKind.PUNCTUATION, ")"),
			),
		)
	)
	chunk = ast.Chunk(ast.Block((parsed, call)), tree.chunk.eof)
	assert print_tree(SyntaxTree.from_chunk(chunk)) == b"x = 1\nprint(x)\n"


def test_synthetic_token_after_parsed_word_gets_a_space() -> None:
	tree = parse("return a")
	ret = tree.chunk.block.statements[0]
	extended = ast.ReturnStmt(
		ret.return_,
		ast.SeparatedList(ret.values.parts + (_tok(TokenKind.PUNCTUATION, ","), _name("b"))),
	)
	assert render(extended) == "return a,b\n"
	with_word = ast.ReturnStmt(
		ret.return_,
		ast.SeparatedList((ast.BinaryOp(ret.values.items[0], _kw("or"), _name("c")),)),
	)
	assert render(with_word) == "return a or c\n"


def test_synthetic_trivia_is_printed() -> None:
	tok = _tok(TokenKind.IDENTIFIER, "x").with_trivia(
		leading=(Trivia(TriviaKind.LINE_COMMENT, "-- hi"), Trivia(TriviaKind.NEWLINE, "\n")),
	)
	assert render(tok) == "-- hi\nx"


def test_synthetic_string_bytes_are_preserved() -> None:
	tok = Token.synthetic(TokenKind.STRING_LITERAL, b'"\xff"')
	assert print_tree(tok) == b'"\xff"'
	utf8 = Token.synthetic(TokenKind.STRING_LITERAL, '"é"')
	assert print_tree(utf8) == '"é"'.encode("utf-8")


@pytest.mark.parametrize(
	("left", "right", "merges"),
	[
		("local", "x", True),
		("x", "1", True),
		("1", "x", True),
		("-", "-", True),
		(".", ".", True),
		("..", ".", True),
		(".", "5", True),
		("[", "[", True),
		("[", "=", True),
		("=", "=", True),
		("<", "=", True),
		("~", "=", True),
		("<", "<", True),
		("/", "/", True),
		(":", ":", True),
		("x", "(", False),
		(")", "x", False),
		("=", "1", False),
		("-", "x", False),
		("", "x", False),
		("x", "", False),
	],
)
def test_would_merge(left: str, right: str, merges: bool) -> None:
	assert would_merge(left, right) is merges


def test_number_followed_by_dot_merges() -> None:
	assert would_merge("1", ".", left_is_number=True)
	assert not would_merge("x", ".")

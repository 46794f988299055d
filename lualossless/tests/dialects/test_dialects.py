# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import pytest

from lualossless import (
	CastError,
	Dialect,
	Feature,
	ParserConfig,
	SyntaxTree,
	UnsupportedConstruct,
	cast,
	parse,
	print_tree,
	supported_dialects,
)
from lualossless.dialects import CAPABILITIES, check, required_dialect
from lualossless.lexer import Token, TokenKind
from lualossless.parser import ast

ALL = list(Dialect)


def _cast_error(source: str, dialect: Dialect) -> UnsupportedConstruct:
	with pytest.raises(UnsupportedConstruct) as excinfo:
		cast(parse(source), dialect)
	return excinfo.value


def test_goto_is_rejected_by_lua51() -> None:
	err = _cast_error("goto continue", Dialect.LUA51)
	assert err.feature is Feature.GOTO
	assert err.feature.value == "goto"
	assert err.required_dialect is Dialect.LUA52
	assert err.dialect is Dialect.LUA51
	assert isinstance(err.node, ast.GotoStmt)
	assert isinstance(err, CastError)
	assert err.message == "goto is not supported by Lua 5.1; requires Lua 5.2"


def test_successful_cast_returns_the_same_tree() -> None:
	tree = parse("goto continue ::continue::")
	assert cast(tree, Dialect.LUA52) is tree
	assert cast(tree, "luajit") is tree


def test_cast_never_changes_the_output() -> None:
	source = b"local x <const> = 1 // 2  -- keep\n"
	tree = parse(source)
	assert print_tree(cast(tree, Dialect.LUA54)) == source


@pytest.mark.parametrize(
	("source", "feature", "accepted"),
	[
		("x = a // b", Feature.INTEGER_DIVISION, {Dialect.LUA53, Dialect.LUA54}),
		("x = a & b", Feature.BITWISE_OPERATORS, {Dialect.LUA53, Dialect.LUA54}),
		("x = a ~ b", Feature.BITWISE_OPERATORS, {Dialect.LUA53, Dialect.LUA54}),
		("x = ~a", Feature.BITWISE_OPERATORS, {Dialect.LUA53, Dialect.LUA54}),
		("x = a << 2", Feature.BITWISE_OPERATORS, {Dialect.LUA53, Dialect.LUA54}),
		("local x <const> = 1", Feature.ATTRIBUTES, {Dialect.LUA54}),
		("x = 0x1p4", Feature.HEX_FLOAT, {Dialect.LUA52, Dialect.LUA53, Dialect.LUA54, Dialect.LUAJIT}),
		("x = 0xA.8", Feature.HEX_FLOAT, {Dialect.LUA52, Dialect.LUA53, Dialect.LUA54, Dialect.LUAJIT}),
		("x = 12ULL", Feature.INT64_SUFFIX, {Dialect.LUAJIT}),
		("x = 3i", Feature.IMAGINARY_SUFFIX, {Dialect.LUAJIT}),
		("x = '\\x41'", Feature.HEX_ESCAPE, {Dialect.LUA52, Dialect.LUA53, Dialect.LUA54, Dialect.LUAJIT}),
		("x = '\\z  '", Feature.Z_ESCAPE, {Dialect.LUA52, Dialect.LUA53, Dialect.LUA54, Dialect.LUAJIT}),
		("x = '\\u{48}'", Feature.UNICODE_ESCAPE, {Dialect.LUA53, Dialect.LUA54, Dialect.LUAJIT}),
		("print '\\u{48}'", Feature.UNICODE_ESCAPE, {Dialect.LUA53, Dialect.LUA54, Dialect.LUAJIT}),
		("x = '\\.'", Feature.LEGACY_ESCAPE, {Dialect.LUA51}),
		("x = '\\q'", Feature.LEGACY_ESCAPE, {Dialect.LUA51}),
		("local goto = 1", Feature.GOTO_IDENTIFIER, {Dialect.LUA51}),
		("x = t.goto", Feature.GOTO_IDENTIFIER, {Dialect.LUA51}),
		(";", Feature.EMPTY_STATEMENT, {Dialect.LUA52, Dialect.LUA53, Dialect.LUA54, Dialect.LUAJIT}),
		("::top::", Feature.LABEL, {Dialect.LUA52, Dialect.LUA53, Dialect.LUA54, Dialect.LUAJIT}),
		(
			"while true do break; x() end",
			Feature.NON_FINAL_BREAK,
			{Dialect.LUA52, Dialect.LUA53, Dialect.LUA54},
		),
	],
)
def test_feature_support_by_dialect(source: str, feature: Feature, accepted: set) -> None:
	tree = parse(source)
	assert set(supported_dialects(tree)) == accepted
	for dialect in ALL:
		if dialect in accepted:
			assert cast(tree, dialect) is tree
		else:
			with pytest.raises(UnsupportedConstruct) as excinfo:
				cast(tree, dialect)
			assert excinfo.value.feature is feature


def test_plain_lua51_is_accepted_everywhere() -> None:
	tree = parse("local t = {1, 2} for i, v in ipairs(t) do print(i .. v) end return #t")
	assert supported_dialects(tree) == ALL
	assert check(tree, Dialect.LUA51) == []


def test_single_semicolon_after_statement_is_not_an_empty_statement() -> None:
	tree = parse("x = 1; y = 2;")
	assert Dialect.LUA51 in supported_dialects(tree)


def test_cast_reports_the_first_problem_in_document_order() -> None:
	err = _cast_error("x = a // b\ngoto done\n::done::", Dialect.LUA51)
	assert err.feature is Feature.INTEGER_DIVISION
	assert (err.line, err.column) == (1, 5)


def test_check_lists_every_problem() -> None:
	tree = parse("x = a // b\ngoto done\n::done::")
	problems = check(tree, "5.1")
	assert [p.feature for p in problems] == [Feature.INTEGER_DIVISION, Feature.GOTO, Feature.LABEL]
	assert [p.line for p in problems] == [1, 2, 3]
	assert check(tree, Dialect.LUA53) == []


def test_parse_with_dialect_in_config() -> None:
	with pytest.raises(UnsupportedConstruct):
		parse("local x <close> = f()", config=ParserConfig(dialect=Dialect.LUA53))
	tree = parse("local x <close> = f()", config=ParserConfig(dialect=Dialect.LUA54))
	assert isinstance(tree, SyntaxTree)


def test_unknown_syntax_is_rejected_by_every_dialect() -> None:
	raw = (Token.synthetic(TokenKind.IDENTIFIER, "continue"),)
	chunk = ast.Chunk(ast.Block((ast.UnknownStmt(raw),)), Token.synthetic(TokenKind.END_OF_FILE, ""))
	tree = SyntaxTree.from_chunk(chunk)
	assert supported_dialects(tree) == []
	for dialect in ALL:
		with pytest.raises(UnsupportedConstruct) as excinfo:
			cast(tree, dialect)
		assert excinfo.value.feature is Feature.UNKNOWN_SYNTAX
		assert excinfo.value.required_dialect is None
	assert "requires" not in str(excinfo.value)


@pytest.mark.parametrize(
	("name", "dialect"),
	[
		("lua51", Dialect.LUA51),
		("5.1", Dialect.LUA51),
		("Lua 5.2", Dialect.LUA52),
		("lua5.3", Dialect.LUA53),
		("LUA54", Dialect.LUA54),
		("LuaJIT", Dialect.LUAJIT),
		("jit", Dialect.LUAJIT),
		(Dialect.LUA53, Dialect.LUA53),
	],
)
def test_dialect_names(name: str, dialect: Dialect) -> None:
	assert Dialect.parse(name) is dialect


def test_unknown_dialect_name() -> None:
	with pytest.raises(ValueError):
		Dialect.parse("lua6")


def test_capability_ordering() -> None:
	assert CAPABILITIES[Dialect.LUA51] == {Feature.LEGACY_ESCAPE, Feature.GOTO_IDENTIFIER}
	assert not CAPABILITIES[Dialect.LUA51] & CAPABILITIES[Dialect.LUAJIT]
	assert required_dialect(Feature.LEGACY_ESCAPE) is Dialect.LUA51
	assert CAPABILITIES[Dialect.LUA52] < CAPABILITIES[Dialect.LUA53] < CAPABILITIES[Dialect.LUA54]
	assert Feature.NON_FINAL_BREAK not in CAPABILITIES[Dialect.LUAJIT]
	assert required_dialect(Feature.INT64_SUFFIX) is Dialect.LUAJIT
	assert required_dialect(Feature.UNKNOWN_SYNTAX) is None
	assert Dialect.LUAJIT.label == "LuaJIT"


def test_lua51_escapes_survive_and_pin_the_dialect() -> None:
	source = b'pattern = "%d+\\.%d+" .. "\\q\\["\n'
	tree = parse(source)
	assert print_tree(tree) == source
	assert supported_dialects(tree) == [Dialect.LUA51]
	err = _cast_error(source.decode(), Dialect.LUA52)
	assert err.feature is Feature.LEGACY_ESCAPE
	assert err.required_dialect is Dialect.LUA51
	assert isinstance(err.node, ast.Literal)


def test_goto_as_a_name_in_lua51_code() -> None:
	source = "local goto = 1\ngoto = goto + 1\nt.goto(goto)\n"
	tree = parse(source)
	assert print_tree(tree) == source.encode()
	assert supported_dialects(tree) == [Dialect.LUA51]
	assert all(tok.kind is not TokenKind.KEYWORD for tok in tree.tokens if tok.text == "goto")
	err = _cast_error(source, Dialect.LUA52)
	assert err.feature is Feature.GOTO_IDENTIFIER
	assert (err.line, err.column) == (1, 7)


def test_goto_statement_still_needs_lua52() -> None:
	tree = parse("goto continue ::continue::")
	assert tree.tokens[0].kind is TokenKind.KEYWORD
	assert Feature.GOTO_IDENTIFIER not in frozenset().union(*tree.features.values())
	assert Dialect.LUA51 not in supported_dialects(tree)

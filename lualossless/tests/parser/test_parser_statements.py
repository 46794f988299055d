# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from lualossless import parse
from lualossless.lexer import TokenKind
from lualossless.parser import ast


def _stmts(source: str) -> tuple[ast.Stmt, ...]:
	return parse(source).chunk.block.statements


def _one(source: str) -> ast.Stmt:
	(stmt,) = _stmts(source)
	return stmt


def test_local_statement() -> None:
	stmt = _one("local a, b = 1, 2")
	assert isinstance(stmt, ast.LocalStmt)
	assert [n.name.text for n in stmt.names.items] == ["a", "b"]
	assert stmt.equals is not None and stmt.equals.text == "="
	assert len(stmt.values) == 2


def test_local_without_values() -> None:
	stmt = _one("local x")
	assert isinstance(stmt, ast.LocalStmt)
	assert stmt.equals is None and stmt.values is None


def test_local_attributes() -> None:
	stmt = _one("local f <close>, c <const> = io.open('x'), 1")
	assert isinstance(stmt, ast.LocalStmt)
	f, c = stmt.names.items
	assert f.attribute.name.text == "close"
	assert c.attribute.name.text == "const"
	assert f.attribute.open.text == "<" and f.attribute.close.text == ">"


def test_assignment() -> None:
	stmt = _one("a, b.c, d[1] = 1, 2, 3")
	assert isinstance(stmt, ast.AssignmentStmt)
	targets = stmt.targets.items
	assert isinstance(targets[0], ast.Name)
	assert isinstance(targets[1], ast.Index) and targets[1].is_dot
	assert isinstance(targets[2], ast.Index) and not targets[2].is_dot
	assert len(stmt.values) == 3


def test_call_statements() -> None:
	call, method = _stmts("print('hi') obj:method{}")
	assert isinstance(call, ast.CallStmt) and isinstance(call.call, ast.Call)
	assert isinstance(method, ast.CallStmt) and isinstance(method.call, ast.MethodCall)
	assert isinstance(method.call.args, ast.TableArgs)


def test_if_elseif_else() -> None:
	stmt = _one("if a then x() elseif b then y() elseif c then else z() end")
	assert isinstance(stmt, ast.IfStmt)
	assert len(stmt.block.statements) == 1
	assert [c.condition.name for c in stmt.elseifs] == ["b", "c"]
	assert len(stmt.elseifs[1].block.statements) == 0
	assert stmt.else_clause is not None
	assert len(stmt.else_clause.block.statements) == 1
	assert stmt.end.text == "end"


def test_plain_if() -> None:
	stmt = _one("if a then end")
	assert stmt.elseifs == () and stmt.else_clause is None


def test_loops() -> None:
	while_, repeat = _stmts("while x do x = x - 1 end repeat y() until done")
	assert isinstance(while_, ast.WhileStmt)
	assert len(while_.block.statements) == 1
	assert isinstance(repeat, ast.RepeatStmt)
	assert repeat.condition.name == "done"


def test_numeric_for() -> None:
	stmt = _one("for i = 1, 10, 2 do end")
	assert isinstance(stmt, ast.NumericForStmt)
	assert stmt.var.text == "i"
	assert stmt.step is not None and stmt.step.text == "2"
	no_step = _one("for i = 1, n do end")
	assert no_step.step_comma is None and no_step.step is None


def test_generic_for() -> None:
	stmt = _one("for k, v in pairs(t), nil do end")
	assert isinstance(stmt, ast.GenericForStmt)
	assert [n.text for n in stmt.names.items] == ["k", "v"]
	assert len(stmt.exprs) == 2
	single = _one("for x in it do end")
	assert [n.text for n in single.names.items] == ["x"]


def test_function_declarations() -> None:
	plain, dotted, method, local = _stmts(
		"function f() end function a.b.c() end function a.b:m(x) end local function g(...) end"
	)
	assert isinstance(plain, ast.FunctionDeclStmt) and plain.name.dotted == "f"
	assert dotted.name.dotted == "a.b.c" and dotted.name.colon is None
	assert method.name.dotted == "a.b:m"
	assert [p.text for p in method.body.params.items] == ["x"]
	assert isinstance(local, ast.LocalFunctionStmt)
	assert local.name.text == "g" and local.body.is_variadic


def test_do_and_break() -> None:
	stmt = _one("do break end")
	assert isinstance(stmt, ast.DoStmt)
	(inner,) = stmt.block.statements
	assert isinstance(inner, ast.BreakStmt)


def test_return_forms() -> None:
	bare = _one("return")
	assert isinstance(bare, ast.ReturnStmt) and len(bare.values) == 0
	multi = _one("return 1, 2")
	assert len(multi.values) == 2
	with_semi = _one("return;")
	assert with_semi.semicolon is not None and len(with_semi.values) == 0


def test_return_ends_the_block() -> None:
	stmt = _one("do return 1 end")
	(ret,) = stmt.block.statements
	assert isinstance(ret, ast.ReturnStmt)


def test_goto_and_label() -> None:
	label, goto = _stmts("::top:: goto top")
	assert isinstance(label, ast.LabelStmt) and label.name.text == "top"
	assert isinstance(goto, ast.GotoStmt) and goto.label.text == "top"
	assert goto.goto.kind is TokenKind.KEYWORD


def test_goto_used_as_a_name() -> None:
	local, assign, call = _stmts("local goto = 1 goto = goto + 1 t.goto(goto)")
	assert isinstance(local, ast.LocalStmt)
	assert local.names.items[0].name.text == "goto"
	assert isinstance(assign, ast.AssignmentStmt)
	assert isinstance(assign.values.items[0], ast.BinaryOp)
	assert isinstance(call, ast.CallStmt)
	assert call.call.callee.key.text == "goto"


def test_goto_followed_by_a_name_on_the_next_line() -> None:
	stmt, label = _stmts("goto\n  done\n::done::")
	assert isinstance(stmt, ast.GotoStmt)
	assert isinstance(label, ast.LabelStmt)


def test_semicolons_attach_to_statements() -> None:
	a, b = _stmts("a = 1; f();")
	assert a.semicolon is not None and a.semicolon.text == ";"
	assert b.semicolon is not None


def test_empty_statements() -> None:
	stmts = _stmts(";; x = 1;;")
	kinds = [type(s) for s in stmts]
	assert kinds == [ast.EmptyStmt, ast.EmptyStmt, ast.AssignmentStmt, ast.EmptyStmt]
	assert stmts[2].semicolon is not None


def test_semicolon_node_replaces_arena_entry() -> None:
	tree = parse("x = 1;")
	(stmt,) = tree.chunk.block.statements
	assert tree.node(stmt.node_id) is stmt
	assert tree.parent_of(stmt) is tree.chunk.block


def test_unusual_but_valid_programs() -> None:
	source = "local t = {f = function() return end}; t.f(); (t).f()"
	stmts = _stmts(source)
	assert [type(s) for s in stmts] == [ast.LocalStmt, ast.CallStmt, ast.CallStmt]

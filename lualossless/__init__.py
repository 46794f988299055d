"""
Lossless Lua parser.

	tokenize(source) -> list[Token]
	parse(source) -> SyntaxTree
	print_tree(tree) -> bytes          # print_tree(parse(s)) == s
	cast(tree, dialect) -> SyntaxTree  # validation only, never rewrites
"""

from .config import DEFAULT_CONFIG, ParserConfig
from .core import (
	CastError,
	LexError,
	LexErrorKind,
	LuaSyntaxError,
	ParseError,
	Span,
	UnsupportedConstruct,
)
from .dialects import Dialect, cast, supported_dialects
from .lexer import Token, TokenKind, Trivia, TriviaKind, tokenize
from .parser import Feature, SyntaxTree, ast, parse
from .printer import print_tree, render

__all__ = [
	"CastError",
	"DEFAULT_CONFIG",
	"Dialect",
	"Feature",
	"LexError",
	"LexErrorKind",
	"LuaSyntaxError",
	"ParseError",
	"ParserConfig",
	"Span",
	"SyntaxTree",
	"Token",
	"TokenKind",
	"Trivia",
	"TriviaKind",
	"UnsupportedConstruct",
	"ast",
	"cast",
	"parse",
	"print_tree",
	"render",
	"supported_dialects",
	"tokenize",
]

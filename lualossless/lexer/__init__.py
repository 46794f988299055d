"""Tokenizer with trivia attachment."""

from .lexer import tokenize
from .tokens import (
	KEYWORDS,
	OPERATORS,
	PUNCTUATION,
	Token,
	TokenKind,
	iter_escapes,
	long_bracket_level,
	quote_style,
)
from .trivia import Trivia, TriviaKind, comment_body, comments, has_newline, trivia_text

__all__ = [
	"KEYWORDS",
	"OPERATORS",
	"PUNCTUATION",
	"Token",
	"TokenKind",
	"Trivia",
	"TriviaKind",
	"comment_body",
	"comments",
	"has_newline",
	"iter_escapes",
	"long_bracket_level",
	"quote_style",
	"tokenize",
	"trivia_text",
]

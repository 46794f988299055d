# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Lossless Lua lexer.

Scanning is done by lark's basic lexer over the terminals in
`lua_tokens.lark`; this module validates what lark's regular terminals cannot
(numeral shapes, escape sequences, unterminated long brackets), classifies
lark's failures into `LexError` kinds, and attaches trivia to tokens.

The source is lexed through its Latin-1 view, so string offsets are byte
offsets and every byte survives unchanged.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Optional

from lark import Lark
from lark.exceptions import UnexpectedCharacters

from lualossless.core.errors import LexError, LexErrorKind
from lualossless.core.span import Span

from .tokens import KEYWORDS, PUNCTUATION, Token, TokenKind, iter_escapes
from .trivia import Trivia, TriviaKind

logger = logging.getLogger(__name__)

_GRAMMAR_PATH = Path(__file__).with_name("lua_tokens.lark")
_GRAMMAR_SRC = _GRAMMAR_PATH.read_text()

_SCANNER = Lark(
	_GRAMMAR_SRC,
	parser="lalr",
	lexer="basic",
	start="start",
)

_TRIVIA_KINDS = {
	"WHITESPACE": TriviaKind.WHITESPACE,
	"NEWLINE": TriviaKind.NEWLINE,
	"LINE_COMMENT": TriviaKind.LINE_COMMENT,
	"LONG_COMMENT": TriviaKind.BLOCK_COMMENT,
}

_LONG_BRACKET_OPEN = re.compile(r"\[=*\[")

# Numeral shapes accepted by at least one dialect. The scanner grabs a run the
# way Lua's reader does; anything outside these shapes is malformed. LuaJIT's
# `LL`/`ULL` suffixes only follow integers; `i` follows any number.
_VALID_NUMERAL = re.compile(
	r"""
	(?:0[xX][0-9A-Fa-f]+|[0-9]+)[uU]?[lL][lL]
	| (?:
		0[xX](?:[0-9A-Fa-f]+(?:\.[0-9A-Fa-f]*)?|\.[0-9A-Fa-f]+)(?:[pP][+-]?[0-9]+)?
		| (?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?
	)[iI]?
	""",
	re.VERBOSE,
)


@dataclass(frozen=True)
class _Piece:
	"""One scanned terminal before trivia attachment."""

	type: str
	text: str
	span: Span


def tokenize(source: bytes | str) -> List[Token]:
	"""
	Split `source` into tokens with attached trivia.

	The returned list always ends with an `END_OF_FILE` token whose leading
	trivia is whatever follows the last real token's trailing trivia.
	Concatenating `leading + text + trailing` over the list rebuilds `source`.
	"""
	if isinstance(source, str):
		source = source.encode("utf-8")
	text = source.decode("latin-1")
	pieces = list(_scan(text))
	tokens = _attach_trivia(pieces, _end_span(text, pieces))
	logger.debug("tokenized %d bytes into %d tokens", len(source), len(tokens))
	return tokens


def _scan(text: str) -> Iterator[_Piece]:
	offset = 0
	if text.startswith("#"):
		# Shebang line: Lua skips it, we keep it as a comment.
		nl = re.search(r"[\r\n]", text)
		offset = nl.start() if nl else len(text)
		yield _Piece("LINE_COMMENT", text[:offset], Span(0, offset, 1, 1, 1, offset + 1))

	rest = text[offset:]
	try:
		for tok in _SCANNER.lex(rest):
			span = Span(
				start=tok.start_pos + offset,
				end=tok.end_pos + offset,
				line=tok.line,
				column=tok.column + (offset if tok.line == 1 else 0),
				end_line=tok.end_line,
				end_column=tok.end_column + (offset if tok.end_line == 1 else 0),
			)
			piece = _Piece(tok.type, str(tok), span)
			_validate(text, piece)
			yield piece
	except UnexpectedCharacters as exc:
		pos = exc.pos_in_stream + offset
		column = exc.column + (offset if exc.line == 1 else 0)
		raise _classify_failure(text, pos, exc.line, column) from exc


def _validate(text: str, piece: _Piece) -> None:
	span = piece.span
	if piece.type == "NUMERAL":
		if not _VALID_NUMERAL.fullmatch(piece.text):
			raise LexError(
				LexErrorKind.INVALID_NUMBER,
				offset=span.start,
				line=span.line,
				column=span.column,
				near=piece.text,
			)
	elif piece.type == "SHORT_STRING":
		for rel, escape, _ in iter_escapes(piece.text, 1, len(piece.text) - 1):
			if escape is None:
				raise LexError(
					LexErrorKind.INVALID_ESCAPE,
					offset=span.start + rel,
					line=span.line,
					column=span.column + rel if span.column is not None else None,
					near=piece.text[rel:rel + 2],
				)
	elif piece.type == "LINE_COMMENT" and _LONG_BRACKET_OPEN.match(piece.text, 2):
		raise _unterminated_long_bracket(text, span)
	elif piece.type == "SYMBOL" and piece.text == "[" and _LONG_BRACKET_OPEN.match(text, span.start):
		raise _unterminated_long_bracket(text, span)


def _unterminated_long_bracket(text: str, span: Span) -> LexError:
	return LexError(
		LexErrorKind.UNTERMINATED_LONG_BRACKET,
		offset=span.start,
		line=span.line,
		column=span.column,
		near=text[span.start:span.start + 8].splitlines()[0],
	)


def _classify_failure(text: str, pos: int, line: int, column: int) -> LexError:
	"""Map a position where no terminal matched onto a lexer error kind."""
	ch = text[pos]
	if ch in "\"'":
		# Short strings accept any escaped character while scanning, so the
		# only way a quote fails to lex is a line break or EOF before the
		# closing quote. Bad escapes before that point are still reported.
		end = _short_string_limit(text, pos)
		for rel, escape, _ in iter_escapes(text, pos + 1, end):
			# A backslash as the very last character is an unfinished string.
			if escape is None and rel + 1 < end:
				return LexError(
					LexErrorKind.INVALID_ESCAPE,
					offset=rel,
					line=line,
					column=column + (rel - pos),
					near=text[rel:rel + 2],
				)
		return LexError(
			LexErrorKind.UNTERMINATED_STRING,
			offset=pos,
			line=line,
			column=column,
			near=text[pos:end],
		)
	return LexError(
		LexErrorKind.INVALID_CHARACTER,
		offset=pos,
		line=line,
		column=column,
		near=ch if ch.isprintable() else f"<\\{ord(ch)}>",
	)


def _short_string_limit(text: str, pos: int) -> int:
	"""End of the unterminated string starting at `pos`: the first bare line break, or EOF."""
	i = pos + 1
	while i < len(text):
		ch = text[i]
		if ch == "\\":
			i += 3 if text[i + 1:i + 3] in ("\r\n", "\n\r") else 2
			continue
		if ch in "\r\n":
			return i
		i += 1
	return len(text)


def _end_span(text: str, pieces: List[_Piece]) -> Span:
	if not pieces:
		return Span(0, 0, 1, 1, 1, 1)
	last = pieces[-1].span
	line, column = last.end_line, last.end_column
	if pieces[-1].type == "NEWLINE" and line == last.line:
		# lark counts lines on "\n" only; a lone "\r" still ends the line.
		line, column = line + 1, 1
	return Span(len(text), len(text), line, column, line, column)


def _token_kind(piece: _Piece) -> TokenKind:
	if piece.type == "NAME":
		return TokenKind.KEYWORD if piece.text in KEYWORDS else TokenKind.IDENTIFIER
	if piece.type == "NUMERAL":
		return TokenKind.NUMBER_LITERAL
	if piece.type in ("SHORT_STRING", "LONG_STRING"):
		return TokenKind.STRING_LITERAL
	if piece.text in PUNCTUATION:
		return TokenKind.PUNCTUATION
	return TokenKind.OPERATOR


def _attach_trivia(pieces: List[_Piece], eof_span: Span) -> List[Token]:
	"""
	Distribute trivia between tokens.

	Trailing trivia of a token runs up to and including the first NEWLINE
	piece, or up to the next token if that comes first. Everything after that
	belongs to the next token's leading trivia. Block comments spanning lines
	do not end a trailing run.
	"""
	tokens: List[Token] = []
	pending: List[Trivia] = []
	trailing: List[Trivia] = []
	current: Optional[_Piece] = None
	current_leading: tuple[Trivia, ...] = ()
	in_trailing = False

	def flush() -> None:
		if current is not None:
			tokens.append(
				Token(
					kind=_token_kind(current),
					text=current.text,
					span=current.span,
					leading=current_leading,
					trailing=tuple(trailing),
				)
			)

	for piece in pieces:
		kind = _TRIVIA_KINDS.get(piece.type)
		if kind is not None:
			trivia = Trivia(kind, piece.text)
			if in_trailing:
				trailing.append(trivia)
				in_trailing = kind is not TriviaKind.NEWLINE
			else:
				pending.append(trivia)
			continue
		flush()
		current = piece
		current_leading = tuple(pending)
		pending = []
		trailing = []
		in_trailing = True

	flush()
	tokens.append(
		Token(
			kind=TokenKind.END_OF_FILE,
			text="",
			span=eof_span,
			leading=tuple(pending),
		)
	)
	return tokens


__all__ = ["tokenize"]

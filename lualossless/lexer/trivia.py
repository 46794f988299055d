# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Trivia: whitespace, newlines and comments attached to tokens.

Trivia never carries meaning for the grammar; it exists so that the exact
source bytes can be rebuilt from the token stream.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator, Sequence


class TriviaKind(Enum):
	WHITESPACE = "whitespace"
	NEWLINE = "newline"
	LINE_COMMENT = "line_comment"
	BLOCK_COMMENT = "block_comment"


@dataclass(frozen=True)
class Trivia:
	"""One run of trivia. `text` is the Latin-1 view of the raw bytes."""

	kind: TriviaKind
	text: str

	@property
	def raw(self) -> bytes:
		return self.text.encode("latin-1")

	@property
	def is_comment(self) -> bool:
		return self.kind in (TriviaKind.LINE_COMMENT, TriviaKind.BLOCK_COMMENT)

	@property
	def is_newline(self) -> bool:
		return self.kind is TriviaKind.NEWLINE


def trivia_text(trivia: Iterable[Trivia]) -> str:
	return "".join(t.text for t in trivia)


def comments(trivia: Iterable[Trivia]) -> Iterator[Trivia]:
	return (t for t in trivia if t.is_comment)


def has_newline(trivia: Sequence[Trivia]) -> bool:
	return any(t.is_newline for t in trivia)


def comment_body(comment: Trivia) -> str:
	"""
	Text of a comment without its delimiters.

	`-- note` gives `" note"`; `--[==[ note ]==]` gives `" note "`.
	"""
	if not comment.is_comment:
		raise ValueError(f"not a comment: {comment.kind.value}")
	text = comment.text
	if comment.kind is TriviaKind.LINE_COMMENT:
		return text[1:] if text.startswith("#") else text[2:]
	level = text.index("[", 3) - 3
	return text[4 + level:len(text) - 2 - level]


__all__ = [
	"Trivia",
	"TriviaKind",
	"comment_body",
	"comments",
	"has_newline",
	"trivia_text",
]

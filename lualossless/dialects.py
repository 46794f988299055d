# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Dialect casting.

`cast(tree, dialect)` validates that every feature recorded on the tree's
nodes is available in `dialect`. It never rewrites anything: on success the
very same tree object comes back, so printing it still reproduces the source.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Dict, FrozenSet, List, Optional, Union

from lualossless.core.errors import UnsupportedConstruct
from lualossless.parser.features import Feature
from lualossless.parser.tree import SyntaxTree

logger = logging.getLogger(__name__)


class Dialect(Enum):
	LUA51 = "lua51"
	LUA52 = "lua52"
	LUA53 = "lua53"
	LUA54 = "lua54"
	LUAJIT = "luajit"

	@property
	def label(self) -> str:
		return _LABELS[self]

	@classmethod
	def parse(cls, name: Union[str, "Dialect"]) -> "Dialect":
		"""Accept `Dialect` members and names like `"5.1"`, `"lua5.3"`, `"LuaJIT"`."""
		if isinstance(name, cls):
			return name
		key = str(name).strip().lower().replace(".", "").replace(" ", "").replace("-", "")
		if not key.startswith("lua"):
			key = "lua" + key
		try:
			return cls(key)
		except ValueError:
			raise ValueError(f"unknown Lua dialect: {name!r}") from None


_LABELS = {
	Dialect.LUA51: "Lua 5.1",
	Dialect.LUA52: "Lua 5.2",
	Dialect.LUA53: "Lua 5.3",
	Dialect.LUA54: "Lua 5.4",
	Dialect.LUAJIT: "LuaJIT",
}

_FROM_52 = frozenset(
	{
		Feature.GOTO,
		Feature.LABEL,
		Feature.EMPTY_STATEMENT,
		Feature.NON_FINAL_BREAK,
		Feature.HEX_FLOAT,
		Feature.HEX_ESCAPE,
		Feature.Z_ESCAPE,
	}
)
_FROM_53 = _FROM_52 | {
	Feature.BITWISE_OPERATORS,
	Feature.INTEGER_DIVISION,
	Feature.UNICODE_ESCAPE,
}

CAPABILITIES: Dict[Dialect, FrozenSet[Feature]] = {
	# What 5.2 took away: escapes of arbitrary characters and `goto` as a name.
	Dialect.LUA51: frozenset({Feature.LEGACY_ESCAPE, Feature.GOTO_IDENTIFIER}),
	Dialect.LUA52: _FROM_52,
	Dialect.LUA53: _FROM_53,
	Dialect.LUA54: _FROM_53 | {Feature.ATTRIBUTES},
	# LuaJIT 2.1 takes goto/labels and the 5.2 string escapes but keeps the
	# 5.1 rule that `break` ends a block.
	Dialect.LUAJIT: frozenset(
		{
			Feature.GOTO,
			Feature.LABEL,
			Feature.EMPTY_STATEMENT,
			Feature.HEX_FLOAT,
			Feature.HEX_ESCAPE,
			Feature.Z_ESCAPE,
			Feature.UNICODE_ESCAPE,
			Feature.INT64_SUFFIX,
			Feature.IMAGINARY_SUFFIX,
		}
	),
}


def required_dialect(feature: Feature) -> Optional[Dialect]:
	"""First dialect (in declaration order) that supports `feature`."""
	for dialect in Dialect:
		if feature in CAPABILITIES[dialect]:
			return dialect
	return None


def check(tree: SyntaxTree, dialect: Union[Dialect, str]) -> List[UnsupportedConstruct]:
	"""Every unsupported construct in `tree`, in document order."""
	target = Dialect.parse(dialect)
	allowed = CAPABILITIES[target]
	problems: List[UnsupportedConstruct] = []
	for node in tree.walk():
		for feature in sorted(tree.features_of(node) - allowed, key=lambda f: f.value):
			problems.append(
				UnsupportedConstruct(
					node=node,
					feature=feature,
					dialect=target,
					required_dialect=required_dialect(feature),
				)
			)
	return problems


def cast(tree: SyntaxTree, dialect: Union[Dialect, str]) -> SyntaxTree:
	"""
	Return `tree` unchanged if it is expressible in `dialect`.

	Raises `UnsupportedConstruct` for the first node (in document order) that
	uses a feature `dialect` lacks.
	"""
	target = Dialect.parse(dialect)
	allowed = CAPABILITIES[target]
	for node in tree.walk():
		missing = tree.features_of(node) - allowed
		if missing:
			feature = min(missing, key=lambda f: f.value)
			logger.debug("cast to %s failed: %s", target.label, feature.value)
			raise UnsupportedConstruct(
				node=node,
				feature=feature,
				dialect=target,
				required_dialect=required_dialect(feature),
			)
	logger.debug("cast of %d nodes to %s succeeded", len(tree.nodes), target.label)
	return tree


def supported_dialects(tree: SyntaxTree) -> List[Dialect]:
	used = frozenset().union(*tree.features.values()) if tree.features else frozenset()
	return [d for d in Dialect if used <= CAPABILITIES[d]]


__all__ = [
	"CAPABILITIES",
	"Dialect",
	"Feature",
	"cast",
	"check",
	"required_dialect",
	"supported_dialects",
]

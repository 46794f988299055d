# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Arena-backed syntax tree.

`SyntaxTree.nodes[i]` is the node whose `node_id` is `i`; children always
have smaller ids than their parents. Parent links and dialect features live
in side tables keyed by the same id, so the node types themselves stay plain
values and the structure stays acyclic.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Dict, FrozenSet, Iterator, List, Mapping, Optional, Tuple

from lualossless.lexer.tokens import Token

from . import ast
from .features import Feature, detect_features


@dataclass(frozen=True)
class SyntaxTree:
	"""
	One parse result.

	`source` is the input buffer (empty for trees built from a hand-made
	chunk), `tokens` the token stream the chunk was built from.
	"""

	source: bytes
	chunk: ast.Chunk
	tokens: Tuple[Token, ...]
	nodes: Tuple[ast.Node, ...] = field(repr=False)
	parents: Tuple[Optional[int], ...] = field(repr=False)
	features: Mapping[int, FrozenSet[Feature]] = field(repr=False)

	@classmethod
	def build(
		cls,
		source: bytes,
		chunk: ast.Chunk,
		tokens: Tuple[Token, ...],
		nodes: List[ast.Node],
		features: Dict[int, FrozenSet[Feature]],
	) -> "SyntaxTree":
		"""Assemble a tree from an arena whose ids are already assigned."""
		parents: List[Optional[int]] = [None] * len(nodes)
		for node in nodes:
			for child in node.child_nodes():
				parents[child.node_id] = node.node_id
		return cls(
			source=source,
			chunk=chunk,
			tokens=tokens,
			nodes=tuple(nodes),
			parents=tuple(parents),
			features=MappingProxyType(dict(features)),
		)

	@classmethod
	def from_chunk(cls, chunk: ast.Chunk, source: bytes = b"") -> "SyntaxTree":
		"""
		Index a chunk that was built by hand (or edited).

		Returns a tree over a renumbered copy of `chunk`; the argument itself
		is left untouched.
		"""
		nodes: List[ast.Node] = []
		features: Dict[int, FrozenSet[Feature]] = {}

		def number(node: ast.Node) -> ast.Node:
			changes = {}
			for name in ast.element_fields(type(node)):
				value = getattr(node, name)
				renumbered = _renumber_value(value, number)
				if renumbered is not value:
					changes[name] = renumbered
			copy = replace(node, node_id=len(nodes), **changes)
			nodes.append(copy)
			found = detect_features(copy)
			if found:
				features[copy.node_id] = found
			return copy

		indexed = number(chunk)
		assert isinstance(indexed, ast.Chunk)
		tokens = tuple(ast.iter_tokens(indexed))
		return cls.build(source, indexed, tokens, nodes, features)

	def node(self, node_id: int) -> ast.Node:
		return self.nodes[node_id]

	def parent_of(self, node: ast.Node) -> Optional[ast.Node]:
		parent_id = self.parents[self._id_of(node)]
		return None if parent_id is None else self.nodes[parent_id]

	def ancestors(self, node: ast.Node) -> Iterator[ast.Node]:
		parent = self.parent_of(node)
		while parent is not None:
			yield parent
			parent = self.parent_of(parent)

	def features_of(self, node: ast.Node) -> FrozenSet[Feature]:
		return self.features.get(self._id_of(node), frozenset())

	def walk(self) -> Iterator[ast.Node]:
		"""Every node in document (pre-)order."""
		return ast.walk(self.chunk)

	def _id_of(self, node: ast.Node) -> int:
		node_id = node.node_id
		if not 0 <= node_id < len(self.nodes) or self.nodes[node_id] is not node:
			raise ValueError(f"{type(node).__name__} does not belong to this tree")
		return node_id


def _renumber_value(value: object, number) -> object:
	if isinstance(value, ast.Node):
		return number(value)
	if isinstance(value, tuple):
		items = tuple(_renumber_value(item, number) for item in value)
		if all(a is b for a, b in zip(items, value)):
			return value
		return items
	return value


__all__ = ["SyntaxTree"]

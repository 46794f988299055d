"""
Lua parser: node model, arena tree and the recursive-descent parser.

Typical use:

	from lualossless.parser import parse
	tree = parse(b"local x = 1")
"""

from . import ast
from .features import Feature, detect_features
from .parser import Parser, parse
from .tree import SyntaxTree

__all__ = ["Feature", "Parser", "SyntaxTree", "ast", "detect_features", "parse"]

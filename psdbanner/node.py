"""
Traversal and classification of parsed design-file trees.

Nodes come from a parser collaborator and are only known by the
capabilities they expose (see `Node`). Capabilities are probed once per
node type by a `TreeAdapter` that lives as long as one root.
"""
from enum import Enum
from typing import Any, Iterator, Optional, Protocol

from .util import print

TYPE_TOOL_KEY = "typeTool"

class Node(Protocol):
	name: str
	left: int
	top: int
	right: int
	bottom: int
	layer: Any

	def is_group(self) -> bool: ...

	# optional: descendants(), get(key), activate(), children / __iter__

class LayerKind(Enum):
	TEXT = "text"
	IMAGE = "image"
	IGNORE = "ignore"

class Capabilities:
	__slots__ = ("descendants", "get", "activate", "is_group", "children", "iterable")

	def __init__(self, node):
		self.descendants = callable(getattr(node, "descendants", None))
		self.get = callable(getattr(node, "get", None))
		self.activate = callable(getattr(node, "activate", None))
		self.is_group = callable(getattr(node, "is_group", None))
		self.children = hasattr(node, "children")
		self.iterable = hasattr(node, "__iter__")

	def __repr__(self):
		on = [k for k in self.__slots__ if getattr(self, k)]
		return f"Capabilities({', '.join(on)})"

class TreeAdapter:
	"""
	Capability cache for every node reachable from one root.

	Entries are kept per node, nodes of one class may still differ in what
	they expose.
	"""

	def __init__(self, root=None):
		self.root = root
		self._cache = {}
		if root is not None:
			self.capabilities(root)

	def capabilities(self, node) -> Capabilities:
		entry = self._cache.get(id(node))
		if entry is None or entry[0] is not node:
			entry = self._cache[id(node)] = (node, Capabilities(node))
		return entry[1]

	def is_group(self, node) -> bool:
		return bool(node.is_group()) if self.capabilities(node).is_group else False

	def children(self, node) -> list:
		caps = self.capabilities(node)
		if caps.children:
			return list(getattr(node, "children", None) or [])
		if caps.iterable:
			return list(node)
		return []

	def call_get(self, node, key:str):
		if self.capabilities(node).get:
			return node.get(key)
		return None

	def activate(self, node) -> bool:
		if self.capabilities(node).activate:
			node.activate()
			return True
		return False

def walk(root, adapter:TreeAdapter=None) -> Iterator:
	"""Depth first, parent before children, children in declared order. Root excluded."""
	adapter = adapter or TreeAdapter(root)
	pending = list(reversed(adapter.children(root)))
	while pending:
		node = pending.pop()
		yield node
		pending.extend(reversed(adapter.children(node)))

def get_descendants(root, adapter:TreeAdapter=None) -> list:
	adapter = adapter or TreeAdapter(root)
	if adapter.capabilities(root).descendants:
		return list(root.descendants())
	print(f"descendants() not available on {type(root).__name__}, walking the tree")
	return list(walk(root, adapter))

def layer_field(node, key:str):
	layer = getattr(node, "layer", None)
	if layer is None:
		return None
	if isinstance(layer, dict):
		return layer.get(key)
	return getattr(layer, key, None)

def type_tool_field(node):
	record = layer_field(node, "type_tool")
	if record is None:
		record = layer_field(node, TYPE_TOOL_KEY)
	return record

def get_type_tool(node, adapter:TreeAdapter=None) -> Optional[Any]:
	"""Raw type-tool record: direct field first, generic `get` when the field is absent."""
	adapter = adapter or TreeAdapter(node)
	record = type_tool_field(node)
	if record is None:
		record = adapter.call_get(node, TYPE_TOOL_KEY)
	if callable(record):
		record = record()
	return record

def is_text(node, adapter:TreeAdapter=None) -> bool:
	adapter = adapter or TreeAdapter(node)
	record = type_tool_field(node)
	if record is not None:
		return bool(record)
	return bool(adapter.call_get(node, TYPE_TOOL_KEY))

def is_image(node, adapter:TreeAdapter=None) -> bool:
	adapter = adapter or TreeAdapter(node)
	return not adapter.is_group(node) and bool(layer_field(node, "image"))

def classify(node, adapter:TreeAdapter=None) -> LayerKind:
	adapter = adapter or TreeAdapter(node)
	# groups only contribute through their descendants
	if adapter.is_group(node):
		return LayerKind.IGNORE
	if is_text(node, adapter):
		return LayerKind.TEXT
	if is_image(node, adapter):
		return LayerKind.IMAGE
	return LayerKind.IGNORE

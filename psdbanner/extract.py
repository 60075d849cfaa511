"""
Flattens a parsed design-file tree into an ordered document of text and
image layers.

Each node is handled inside its own error boundary: a node that cannot be
extracted is reported in the run's diagnostics and skipped, the run itself
always completes. Document order is traversal order, also when image
uploads run concurrently.
"""
import asyncio
import inspect

from . import node as nodes
from .classes import (
	TEXT, IMAGE, Diagnostic, DocumentLayer, ExtractionResult, MaskRecord, PSDFileData
)
from .ids import IdGenerator
from .node import LayerKind, TreeAdapter, classify, get_type_tool, layer_field
from .text_style import extract_text_style
from .util import print, print_error, print_warning

# type-tool boxes clip tighter than the rendered glyphs
TEXT_PADDING:tuple = (15, 20)

def node_name(node) -> str:
	return getattr(node, "name", None) or ""

def bound(node, key:str):
	return getattr(node, key, None) or 0

def encode_pixels(handle) -> bytes:
	return handle.to_png()

class Assembler:
	"""Owns the document and side indices of one extraction run."""

	def __init__(self, ids=None, document:PSDFileData=None):
		self.ids = ids or IdGenerator()
		self.document = document or PSDFileData()
		self.text_layers = {}
		self.extracted_images = {}
		self.warnings = []
		self.failures = []

	def warn(self, node, message:str) -> Diagnostic:
		name = node_name(node)
		print_warning(f'{message} for "{name}"')
		d = Diagnostic("warning", name, message)
		self.warnings.append(d)
		return d

	def fail(self, node, error:Exception) -> Diagnostic:
		name = node_name(node)
		print_error(error, f'layer "{name}"')
		d = Diagnostic("error", name, f"{error.__class__.__name__}: {error}")
		self.failures.append(d)
		return d

	def add_text(self, layer:DocumentLayer, style):
		self.document.layers.append(layer)
		self.text_layers[layer.name] = style
		print(f"text layer: {layer.name} ({layer.id})")

	def add_image(self, layer:DocumentLayer, url:str):
		self.document.layers.append(layer)
		self.extracted_images[layer.name] = url
		print(f"image layer: {layer.name} -> {url}")

	def result(self) -> ExtractionResult:
		return ExtractionResult(
			document=self.document,
			text_layers=self.text_layers,
			extracted_images=self.extracted_images,
			warnings=self.warnings,
			failures=self.failures,
		)

# text

def text_geometry(node) -> tuple:
	x, y = bound(node, "left"), bound(node, "top")
	w = bound(node, "right") - x + TEXT_PADDING[0]
	h = bound(node, "bottom") - y + TEXT_PADDING[1]
	return x, y, w, h

def build_text_layer(node, assembler:Assembler, style_extractor=extract_text_style, adapter:TreeAdapter=None):
	adapter = adapter or TreeAdapter(node)

	# some parsers only expose type data on the active layer
	adapter.activate(node)

	record = get_type_tool(node, adapter)
	if not record:
		assembler.warn(node, "active layer data not found")
		return None

	style = style_extractor(record, node)
	if style is None:
		assembler.warn(node, "style not found")
		return None

	if not style.text:
		assembler.warn(node, "empty text")

	x, y, w, h = text_geometry(node)
	layer = DocumentLayer(
		id=assembler.ids(node_name(node)),
		name=node_name(node),
		type=TEXT,
		x=x, y=y, width=w, height=h,
		text_content=style.text or "",
		text_style=style,
	)
	return layer, style

def extract_text_layer(node, assembler:Assembler, style_extractor=extract_text_style, adapter:TreeAdapter=None):
	built = build_text_layer(node, assembler, style_extractor, adapter)
	if built is None:
		return None
	layer, style = built
	assembler.add_text(layer, style)
	return layer

# image

def resolve_mask(mask):
	"""Mask record worth attaching, or None when absent or empty."""
	if mask is None:
		return None
	record = mask if isinstance(mask, MaskRecord) else MaskRecord.from_source(mask)
	if not record.width or not record.height:
		return None
	return record

def image_geometry(node, mask:MaskRecord=None) -> tuple:
	if mask is not None and mask.enabled:
		return mask.left, mask.top, mask.width, mask.height
	x, y = bound(node, "left"), bound(node, "top")
	return x, y, bound(node, "right") - x, bound(node, "bottom") - y

async def store_asset(asset_store, buffer:bytes, name:str) -> str:
	url = asset_store(buffer, name)
	if inspect.isawaitable(url):
		url = await url
	return url

async def build_image_layer(node, asset_store, ids, encoder=encode_pixels) -> tuple:
	"""Encode, upload and lay out one image node. Raises on any failure."""
	name = node_name(node)
	buffer = encoder(layer_field(node, "image"))
	url = await store_asset(asset_store, buffer, name)

	mask = resolve_mask(layer_field(node, "mask"))
	x, y, w, h = image_geometry(node, mask)
	layer = DocumentLayer(
		id=ids(name),
		name=name,
		type=IMAGE,
		x=x, y=y, width=w, height=h,
		src=url,
		mask=mask,
	)
	return layer, url

def has_image(node, assembler:Assembler) -> bool:
	if not layer_field(node, "image"):
		assembler.warn(node, "no image data")
		return False
	return True

async def extract_image_layer(node, assembler:Assembler, asset_store, encoder=encode_pixels):
	if not has_image(node, assembler):
		return None
	try:
		layer, url = await build_image_layer(node, asset_store, assembler.ids, encoder)
	except Exception as e:
		assembler.fail(node, e)
		return None
	assembler.add_image(layer, url)
	return layer

# run

def _descendants(root, adapter:TreeAdapter, assembler:Assembler) -> list:
	if not adapter.capabilities(root).descendants:
		assembler.warnings.append(Diagnostic("warning", node_name(root), "descendants() unavailable, walked tree"))
	try:
		return nodes.get_descendants(root, adapter)
	except Exception as e:
		assembler.fail(root, e)
		return []

async def _run_sequential(items, assembler, asset_store, style_extractor, adapter, encoder):
	for node in items:
		try:
			kind = classify(node, adapter)
			if kind is LayerKind.TEXT:
				extract_text_layer(node, assembler, style_extractor, adapter)
			elif kind is LayerKind.IMAGE:
				await extract_image_layer(node, assembler, asset_store, encoder)
		except Exception as e:
			assembler.fail(node, e)

async def _run_concurrent(items, assembler, asset_store, style_extractor, adapter, encoder, limit=None):
	slots = []
	uploads = []
	gate = asyncio.Semaphore(limit) if limit else None

	async def upload(node):
		if gate is None:
			return await build_image_layer(node, asset_store, assembler.ids, encoder)
		async with gate:
			return await build_image_layer(node, asset_store, assembler.ids, encoder)

	for node in items:
		try:
			kind = classify(node, adapter)
			if kind is LayerKind.TEXT:
				built = build_text_layer(node, assembler, style_extractor, adapter)
				if built is not None:
					slots.append((TEXT, node, built))
			elif kind is LayerKind.IMAGE and has_image(node, assembler):
				slots.append((IMAGE, node, len(uploads)))
				uploads.append(upload(node))
		except Exception as e:
			slots.append((None, node, e))

	done = await asyncio.gather(*uploads, return_exceptions=True)

	# commit in traversal order, not completion order
	for kind, node, value in slots:
		if kind == TEXT:
			assembler.add_text(*value)
		elif kind == IMAGE:
			outcome = done[value]
			if isinstance(outcome, BaseException):
				assembler.fail(node, outcome)
			else:
				assembler.add_image(*outcome)
		else:
			assembler.fail(node, value)

async def extract_layers(root, asset_store, style_extractor=extract_text_style, concurrent:bool=False, limit:int=None, encoder=encode_pixels, ids=None) -> ExtractionResult:
	"""
	Extract every text and image layer below `root`.

	`asset_store(buffer, name)` returns the public url of an encoded image,
	directly or as an awaitable. `style_extractor(record, node)` turns a raw
	type-tool record into a `TextLayerStyle` or None. With `concurrent`,
	image uploads run together (at most `limit` at once) and are committed
	in traversal order once all of them settled.
	"""
	adapter = TreeAdapter(root)
	assembler = Assembler(ids)
	items = _descendants(root, adapter, assembler)

	if concurrent:
		await _run_concurrent(items, assembler, asset_store, style_extractor, adapter, encoder, limit)
	else:
		await _run_sequential(items, assembler, asset_store, style_extractor, adapter, encoder)

	result = assembler.result()
	print(f"extracted {len(result.document.layers)} layers from {len(items)} nodes, {len(result.warnings)} warnings, {len(result.failures)} failures")
	return result

def extract(root, asset_store, **kwargs) -> ExtractionResult:
	return asyncio.run(extract_layers(root, asset_store, **kwargs))

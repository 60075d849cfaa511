from pathlib import Path

from psd_tools import PSDImage

from . import shared, storage
from .classes import MaskRecord
from .extract import extract
from .util import get, print

class PixelHandle:
	"""Lazily renders a psd-tools layer and encodes it with Pillow."""

	def __init__(self, layer, settings:dict=None):
		self._layer = layer
		self.settings = settings

	def image(self):
		image = self._layer.topil()
		if image is None:
			image = self._layer.composite()
		if image is None:
			raise ValueError(f"layer {self._layer.name} has no pixels")
		return image

	def encode(self, settings:dict=None) -> bytes:
		return shared.encode_image(self.image(), settings or self.settings)

	def to_png(self) -> bytes:
		return shared.encode_png(self.image())

class TypeRecord:
	"""Raw type data of a psd-tools TypeLayer."""

	def __init__(self, layer):
		self.text = layer.text
		self.engine_dict = layer.engine_dict
		self.resource_dict = layer.resource_dict
		self.transform = layer.transform

def mask_record(mask) -> MaskRecord:
	flags = getattr(mask, "flags", None)
	return MaskRecord(
		top=mask.top,
		left=mask.left,
		bottom=mask.bottom,
		right=mask.right,
		width=mask.width,
		height=mask.height,
		default_color=mask.background_color,
		relative=bool(getattr(flags, "pos_relative_to_layer", False)),
		disabled=bool(mask.disabled),
		invert=bool(getattr(flags, "invert_mask", False)),
	)

class LayerRecord:
	__slots__ = ("image", "type_tool", "mask")

	def __init__(self, image=None, type_tool=None, mask=None):
		self.image = image
		self.type_tool = type_tool
		self.mask = mask

class PsdNode:
	"""psd-tools layer seen through the extractor's node contract."""

	def __init__(self, layer, settings:dict=None):
		self._layer = layer
		self.settings = settings
		self.name = layer.name
		self.left, self.top, self.right, self.bottom = layer.bbox
		self._record = None

	@property
	def kind(self) -> str:
		return self._layer.kind

	@property
	def layer(self) -> LayerRecord:
		if self._record is None:
			l = self._layer
			image = type_tool = mask = None

			if l.kind == "type":
				type_tool = lambda: TypeRecord(l)
			if not l.is_group() and l.has_pixels():
				image = PixelHandle(l, self.settings)
			if l.has_mask() and l.mask is not None:
				mask = mask_record(l.mask)

			self._record = LayerRecord(image, type_tool, mask)
		return self._record

	def is_group(self) -> bool:
		return self._layer.is_group()

	@property
	def children(self) -> list:
		if not self._layer.is_group():
			return []
		return [PsdNode(c, self.settings) for c in self._layer]

class PsdRoot:
	def __init__(self, psd, settings:dict=None):
		self._psd = psd
		self.settings = settings
		self.name = "root"
		self.width, self.height = psd.size

	def is_group(self) -> bool:
		return True

	def descendants(self) -> list:
		return [PsdNode(l, self.settings) for l in self._psd.descendants()]

def open_root(path, settings:dict=None) -> PsdRoot:
	return PsdRoot(PSDImage.open(path), settings)

def process(path, data:dict):
	path = Path(path)
	settings = shared.get_settings(data)
	# same default as the command line: a folder named after the file
	settings.setdefault("output", str(path.parent / path.stem))
	root = open_root(path, settings)
	asset_store = storage.from_settings(settings)

	result = extract(
		root,
		asset_store,
		concurrent=bool(get(settings, "concurrent", False)),
		limit=get(settings, "limit") or None,
		encoder=lambda handle: handle.encode(settings),
	)
	result.document.width = root.width
	result.document.height = root.height

	out = result.to_dict()
	data["size"] = [root.width, root.height]
	data["layers"] = out["document"]["layers"]
	data["textLayers"] = out["textLayers"]
	data["extractedImages"] = out["extractedImages"]
	data["warnings"] = out["warnings"]
	data["failures"] = out["failures"]

	print(f"{path}: {len(data['layers'])} layers")
	return result

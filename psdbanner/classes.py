from dataclasses import dataclass, field
from typing import Any, Optional

from .util import remove_empty

TEXT = "text"
IMAGE = "image"

def field_of(source, key:str, default=None):
	"""Read `key` from a dict or an attribute holder."""
	if source is None:
		return default
	if isinstance(source, dict):
		return source.get(key, default)
	return getattr(source, key, default)

@dataclass
class MaskRecord:
	top: int = 0
	left: int = 0
	bottom: int = 0
	right: int = 0
	width: int = 0
	height: int = 0
	default_color: Any = 0
	relative: bool = False
	disabled: bool = False
	invert: bool = False

	@classmethod
	def from_source(cls, mask) -> "MaskRecord":
		return cls(
			top=field_of(mask, "top", 0),
			left=field_of(mask, "left", 0),
			bottom=field_of(mask, "bottom", 0),
			right=field_of(mask, "right", 0),
			width=field_of(mask, "width", 0),
			height=field_of(mask, "height", 0),
			default_color=field_of(mask, "default_color", field_of(mask, "defaultColor", 0)),
			relative=bool(field_of(mask, "relative", False)),
			disabled=bool(field_of(mask, "disabled", False)),
			invert=bool(field_of(mask, "invert", False)),
		)

	@property
	def enabled(self) -> bool:
		return not self.disabled

	def to_dict(self) -> dict:
		return {
			"top": self.top,
			"left": self.left,
			"bottom": self.bottom,
			"right": self.right,
			"width": self.width,
			"height": self.height,
			"defaultColor": self.default_color,
			"relative": self.relative,
			"disabled": self.disabled,
			"invert": self.invert,
		}

@dataclass
class TextLayerStyle:
	text: str = ""
	fonts: list = field(default_factory=list)
	sizes: list = field(default_factory=list)
	colors: list = field(default_factory=list)
	alignment: Optional[str] = None
	font_caps: int = 0

	def to_dict(self) -> dict:
		return {
			"text": self.text,
			"fonts": list(self.fonts),
			"sizes": list(self.sizes),
			"colors": list(self.colors),
			"alignment": self.alignment,
			"fontCaps": self.font_caps,
		}

@dataclass
class DocumentLayer:
	id: str
	name: str
	type: str
	x: float
	y: float
	width: float
	height: float
	text_content: Optional[str] = None
	text_style: Optional[TextLayerStyle] = None
	src: Optional[str] = None
	mask: Optional[MaskRecord] = None

	def to_dict(self) -> dict:
		out = {
			"id": self.id,
			"name": self.name,
			"type": self.type,
			"x": self.x,
			"y": self.y,
			"width": self.width,
			"height": self.height,
		}
		if self.type == TEXT:
			out["textContent"] = self.text_content or ""
			out["textStyle"] = self.text_style.to_dict() if self.text_style else None
		else:
			out["src"] = self.src
			out["mask"] = self.mask.to_dict() if self.mask else None
		return out

@dataclass
class PSDFileData:
	layers: list = field(default_factory=list)
	width: Optional[int] = None
	height: Optional[int] = None

	def to_dict(self) -> dict:
		return remove_empty({
			"width": self.width,
			"height": self.height,
			"layers": [l.to_dict() for l in self.layers],
		})

@dataclass
class Diagnostic:
	level: str
	layer: str
	message: str

	def __str__(self):
		return f"{self.level}: {self.layer}: {self.message}"

@dataclass
class ExtractionResult:
	document: PSDFileData
	text_layers: dict
	extracted_images: dict
	warnings: list = field(default_factory=list)
	failures: list = field(default_factory=list)

	@property
	def ok(self) -> bool:
		return not self.failures

	def to_dict(self) -> dict:
		return {
			"document": self.document.to_dict(),
			"textLayers": {k: v.to_dict() for k, v in self.text_layers.items()},
			"extractedImages": dict(self.extracted_images),
			"warnings": [str(d) for d in self.warnings],
			"failures": [str(d) for d in self.failures],
		}

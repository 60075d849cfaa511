"""
Reads raw type-tool records into `TextLayerStyle`.

The record carries `text`, the parsed `engine_dict` and `resource_dict`
of the type layer and its `transform`, as psd-tools exposes them.
"""
from .classes import TextLayerStyle, field_of
from .util import get

JUSTIFICATION:dict = {
	0: "left",
	1: "right",
	2: "center",
	3: "justify",
	4: "justify",
	5: "justify",
	6: "justify",
}

def _dig(d, *keys, default=None):
	for k in keys:
		if isinstance(d, (list, tuple)):
			d = get(d, k) if isinstance(k, int) else None
		else:
			try:
				d = d[k]
			except (KeyError, IndexError, TypeError):
				return default
		if d is None:
			return default
	return d

def _append_unique(t:list, item):
	if item is not None and item not in t:
		t.append(item)

def clean_text(text) -> str:
	if text is None:
		return ""
	return str(text).replace("\r", "\n").rstrip("\n")

def font_names(resource_dict) -> list:
	out = []
	for font in _dig(resource_dict, "FontSet", default=[]) or []:
		name = _dig(font, "Name")
		if name is not None:
			out.append(str(name).strip("'\""))
	return out

def to_hex(values) -> str:
	# ARGB floats in 0..1
	if not values or len(values) < 4:
		return None
	r, g, b = [max(0, min(255, round(float(v) * 255))) for v in list(values)[1:4]]
	return f"#{r:02x}{g:02x}{b:02x}"

def scale_of(transform) -> float:
	if transform and len(transform) >= 4 and transform[3]:
		return float(transform[3])
	return 1.0

def style_runs(engine_dict) -> list:
	runs = _dig(engine_dict, "StyleRun", "RunArray", default=[]) or []
	return [_dig(r, "StyleSheet", "StyleSheetData", default={}) for r in runs]

def alignment_of(engine_dict):
	value = _dig(engine_dict, "ParagraphRun", "RunArray", 0, "ParagraphSheet", "Properties", "Justification")
	if value is None:
		return None
	return JUSTIFICATION.get(int(value), "left")

def extract_text_style(record, node=None):
	text = field_of(record, "text")
	engine_dict = field_of(record, "engine_dict")
	if text is None and engine_dict is None:
		return None

	if text is None:
		text = _dig(engine_dict, "Editor", "Text")

	resource_dict = field_of(record, "resource_dict")
	scale = scale_of(field_of(record, "transform"))
	names = font_names(resource_dict)

	style = TextLayerStyle(text=clean_text(text), alignment=alignment_of(engine_dict))
	for data in style_runs(engine_dict):
		font = _dig(data, "Font")
		if font is not None:
			_append_unique(style.fonts, get(names, int(font)))

		size = _dig(data, "FontSize")
		if size is not None:
			_append_unique(style.sizes, round(float(size) * scale, 2))

		_append_unique(style.colors, to_hex(_dig(data, "FillColor", "Values")))

		caps = _dig(data, "FontCaps")
		if caps and not style.font_caps:
			style.font_caps = int(caps)

	if not style.fonts and names:
		style.fonts.append(names[0])

	return style

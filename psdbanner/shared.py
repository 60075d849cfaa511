from io import BytesIO

import PIL
from PIL import features

from . import util
from .util import get, print

DEFAULT_SETTINGS:dict = {
	# https://pillow.readthedocs.io/en/stable/handbook/image-file-formats.html
	"format": "PNG",
	"base_url": "",
	"upload_url": "",
	"timeout": 30.0,
	"concurrent": False,
	"limit": 0,						# max simultaneous uploads, 0 = unbounded

	# can really decrease file size, but at cost of color range.
	# https://pillow.readthedocs.io/en/stable/reference/Image.html#PIL.Image.Image.quantize
	"quantize": False,
	"quantize_method": 2,
	"quantize_colors": 255,

	"PNG": {
		"optimize": True,
	},

	"WEBP": {
		"lossless": True,
		"method": 3,
		"quality": 80
	},

	"JPEG": {
		"optimize": True,
		"quality": 80
	}
}

EXTENSIONS:dict = {
	"PNG": "png",
	"WEBP": "webp",
	"JPEG": "jpg",
}

COMPLAINED_ABOUT_WEBP:bool = False

def get_settings(data) -> dict:
	settings = data.setdefault("settings", {})
	args = util.ARGS

	if args:
		if not "output" in settings: settings["output"] = str(args.output)
		if not "format" in settings: settings["format"] = args.format
		if not "base_url" in settings: settings["base_url"] = args.base_url
		if not "upload_url" in settings: settings["upload_url"] = args.upload_url
		if not "timeout" in settings: settings["timeout"] = args.timeout
		if not "concurrent" in settings: settings["concurrent"] = args.concurrent

	settings["format"] = settings.get("format", DEFAULT_SETTINGS["format"]).upper()
	return util.merge_unique(settings, DEFAULT_SETTINGS)

def get_extension(settings:dict) -> str:
	texture_format = get(settings, "format", "PNG")
	return get(settings, "extension", get(EXTENSIONS, texture_format, texture_format.lower()))

def encode_image(image, settings:dict=None) -> bytes:
	"""Encode a PIL image with the raster format and options from `settings`."""
	global COMPLAINED_ABOUT_WEBP

	settings = settings or DEFAULT_SETTINGS
	texture_format = get(settings, "format", "PNG").upper()
	texture_format_settings = get(settings, texture_format, get(DEFAULT_SETTINGS, texture_format, {}))

	# webp warning
	if texture_format == "WEBP" and not COMPLAINED_ABOUT_WEBP:
		if not features.check_module("webp"):
			COMPLAINED_ABOUT_WEBP = True
			print(f"PILLOW v{PIL.__version__}")
			print(f"  libwebp library might not be installed")

	# Optional: Quantize (Can really reduce size, but at cost of colors.)
	# 0 = median cut 1 = maximum coverage 2 = fast octree
	if get(settings, "quantize", False):
		image = image.quantize(method=settings["quantize_method"], colors=settings["quantize_colors"])

	# RGBA -> RGB
	if texture_format in ["JPEG"]:
		image = image.convert("RGB")

	buffer = BytesIO()
	image.save(buffer, texture_format, **texture_format_settings)
	return buffer.getvalue()

def encode_png(image) -> bytes:
	return encode_image(image, {"format": "PNG"})

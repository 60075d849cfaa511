"""
Asset storage collaborators.

A store is any callable `(buffer: bytes, name: str) -> url`, plain or
coroutine. Failures are raised, the extractor turns them into a skipped
layer.
"""
import asyncio
from pathlib import Path

import requests

from . import file
from .ids import sanitize_name
from .shared import get_extension
from .util import print

class UploadError(Exception):
	pass

def asset_file_name(name:str, extension:str="png") -> str:
	return f"{sanitize_name(name) or 'layer'}.{extension}"

class LocalAssetStore:
	"""Writes assets into `directory` and answers with `base_url` + file name."""

	def __init__(self, directory, base_url:str="", extension:str="png"):
		self.directory = Path(directory)
		self.base_url = base_url
		self.extension = extension
		self.used = {}

	def _file_name(self, name:str) -> str:
		file_name = asset_file_name(name, self.extension)
		count = self.used.get(file_name, 0)
		self.used[file_name] = count + 1
		if count:
			stem, ext = file_name.rsplit(".", 1)
			file_name = f"{stem}_{count}.{ext}"
		return file_name

	def url(self, file_name:str) -> str:
		if self.base_url:
			return self.base_url.rstrip("/") + "/" + file_name
		return (self.directory / file_name).resolve().as_uri()

	async def __call__(self, buffer:bytes, name:str) -> str:
		file_name = self._file_name(name)
		await asyncio.to_thread(file.save_bytes, buffer, self.directory / file_name)
		return self.url(file_name)

class HttpAssetStore:
	"""POSTs assets as multipart uploads, expects `{"url": ...}` back."""

	def __init__(self, url:str, timeout:float=30.0, extension:str="png", headers:dict=None):
		self.endpoint = url
		self.timeout = timeout
		self.extension = extension
		self.headers = headers or {}

	def _post(self, buffer:bytes, name:str) -> str:
		file_name = asset_file_name(name, self.extension)
		response = requests.post(
			self.endpoint,
			files={"file": (file_name, buffer, f"image/{self.extension}")},
			data={"name": name},
			headers=self.headers,
			timeout=self.timeout
		)

		if response.status_code not in (200, 201):
			raise UploadError(f"{self.endpoint} answered {response.status_code} for {name}")

		url = response.json().get("url")
		if not url:
			raise UploadError(f"{self.endpoint} returned no url for {name}")

		print(f"uploaded: {name} -> {url}")
		return url

	async def __call__(self, buffer:bytes, name:str) -> str:
		return await asyncio.wait_for(
			asyncio.to_thread(self._post, buffer, name),
			timeout=self.timeout
		)

def from_settings(settings:dict):
	extension = get_extension(settings)
	if settings.get("upload_url"):
		return HttpAssetStore(settings["upload_url"], settings.get("timeout", 30.0), extension)
	return LocalAssetStore(Path(settings.get("output") or ".") / "assets", settings.get("base_url", ""), extension)

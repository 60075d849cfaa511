import re
import time

_UNSAFE = re.compile(r"[^a-zA-Z0-9]")
_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"

def now_ms() -> int:
	return int(time.time() * 1000)

def to_base36(n:int) -> str:
	if n < 0:
		return "-" + to_base36(-n)
	if n == 0:
		return "0"
	out = ""
	while n:
		n, r = divmod(n, 36)
		out = _DIGITS[r] + out
	return out

def sanitize_name(name:str) -> str:
	return _UNSAFE.sub("_", name or "").lower()

def generate_layer_id(name:str, ms:int=None) -> str:
	if ms is None:
		ms = now_ms()
	return f"layer_{sanitize_name(name)}_{to_base36(ms)}"

class IdGenerator:
	"""
	Issues layer ids for one extraction run.

	Ids keep the `layer_<name>_<base36 ms>` shape. An id already issued in
	the run gets a `_<base36 counter>` suffix, so two layers with the same
	name inside the same millisecond still differ.
	"""

	def __init__(self, clock=now_ms):
		self.clock = clock
		self.counter = 0
		self.issued = set()

	def __call__(self, name:str) -> str:
		layer_id = generate_layer_id(name, self.clock())
		while layer_id in self.issued:
			self.counter += 1
			layer_id = f"{generate_layer_id(name, self.clock())}_{to_base36(self.counter)}"
		self.issued.add(layer_id)
		return layer_id

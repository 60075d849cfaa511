from inspect import stack
from pathlib import Path
import json, sys, argparse, logging

EXTENSIONS:list = [".psd"]
ARGS = None
_warnings = 0
_errors = 0
_print = print

def init(argv=None):
	global ARGS

	parser = argparse.ArgumentParser(description="psdbanner v0.1")
	parser.add_argument("path", help="Path to a layered design file.")
	parser.add_argument("--output", type=str, default="", help="Where to store the document and assets.")
	parser.add_argument("--format", type=str, default="PNG", help="Raster format of externalized images.")
	parser.add_argument("--base-url", dest="base_url", type=str, default="", help="Public prefix for stored assets.")
	parser.add_argument("--upload-url", dest="upload_url", type=str, default="", help="Upload images to this endpoint instead of the output directory.")
	parser.add_argument("--timeout", type=float, default=30.0, help="Upload timeout in seconds.")
	parser.add_argument("--concurrent", action="store_true", help="Upload all images at once.")

	parser.add_argument("--print", action="store_true", help="Debug: Print output.")
	ARGS = parser.parse_args(argv)

	ARGS.path = Path(ARGS.path)
	ARGS.output = Path(ARGS.output) if ARGS.output else ARGS.path.parent / ARGS.path.stem

	if ARGS.path.is_dir():
		_print("must be file")
		sys.exit()

	elif not ARGS.path.suffix in EXTENSIONS:
		_print(f"only files of type {EXTENSIONS} allowed.")
		sys.exit()

	elif not ARGS.path.exists():
		_print(f"no file at {ARGS.path}")
		sys.exit()

	else:
		ARGS.output.mkdir(parents=False, exist_ok=True)

		log_path = ARGS.output / f".{ARGS.path.stem}.log"
		logging.basicConfig(filename=log_path, level=logging.DEBUG)

	return ARGS

def counts() -> tuple:
	return _warnings, _errors

def _get_print_str(*args):
	return " ".join([str(x) for x in args])

def _get_stack_str(s):
	s = s[1]
	script_name = Path(s[1]).name
	script_line = s[2]
	script_func = s[3]
	return f"\t<{script_name}:{script_line} @ {script_func}>"

def _echo(msg):
	if not ARGS or ARGS.print:
		_print(msg)

def print(*args, **kwargs):
	txt = _get_print_str(*args)
	stk = _get_stack_str(stack())
	msg = f"{txt} {stk}"
	logging.info(msg)
	_echo(msg)

def print_error(e:Exception, path):
	global _errors
	_errors += 1
	txt = _get_print_str(f"{e.__class__.__name__} in {path}\n{e}")
	stk = _get_stack_str(stack())
	msg = f"{txt} {stk}"
	logging.error(msg)
	_echo(msg)

def print_warning(*args):
	global _warnings
	_warnings += 1
	txt = _get_print_str("WARNING -", *args)
	stk = _get_stack_str(stack())
	msg = f"{txt} {stk}"
	logging.warning(msg)
	_echo(msg)

def to_json(data:dict, **kwargs) -> str:
	if "pretty" in kwargs and kwargs["pretty"]:
		return json.dumps(data, allow_nan=False, ensure_ascii=False, indent=4)
	else:
		return json.dumps(data, allow_nan=False, ensure_ascii=False, separators=(',', ':'))

def get(d:dict, k:str, default=None):
	if isinstance(d, (list, tuple)):
		if k >= 0 and k < len(d):
			return d[k]
	elif isinstance(d, dict):
		if k in d:
			return d[k]
	return default

def remove_empty(d:dict):
	for k, v in list(d.items()):
		if v == None:
			del d[k]
	return d

def merge_unique(t:dict, p:dict) -> dict:
	for k in p:
		if not k in t:
			t[k] = p[k]
	return t

def dig(d, function) -> None:
	if isinstance(d, dict):
		function(d)
		for k in list(d):
			dig(d[k], function)

	elif isinstance(d, list):
		for i in range(len(d)):
			dig(d[i], function)

import json
import importlib
from pathlib import Path
from . import __info__, file, util
from .util import print

__version__ = __info__.__version__

PROCESSORS:dict = {}

def get_settings(path) -> tuple:
	path = Path(path)
	for k in [".json", ".yaml", ".yml"]:
		p = path.with_suffix(k)
		if p.exists():
			return p, file.time(p), file.load(p, {})
	return "", "", {}

def get_processor(extension:str):
	if not extension in PROCESSORS:
		PROCESSORS[extension] = importlib.import_module(f".process_{extension[1:]}", package="psdbanner")
	return PROCESSORS[extension]

# process the file given on the command line
def main(argv=None):
	process_file(argv)

def build(argv=None) -> dict:
	process_file(argv)
	path = util.ARGS.output / ("." + util.ARGS.path.stem + ".json")
	with open(path, "r") as f:
		data = json.load(f)
	return data

def make_json_safe(d):
	# make json safe for serialize
	for k in d:
		if not isinstance(d[k], (dict,list,tuple,str,int,float,bool,type(None))):
			print("JSON ", d[k])
			d[k] = str(d[k])

def process_file(argv=None) -> dict:
	util.init(argv)
	path = util.ARGS.path

	# find settings
	settings_path, settings_time, settings = get_settings(path)

	data = {
		"name": path.stem,
		"type": path.suffix,
		"time": file.time(path),
		"settings_time": settings_time,
		"settings": settings,
	}

	get_processor(path.suffix).process(path, data)

	util.dig(data, make_json_safe)

	# save to disk
	info_path = util.ARGS.output / ("." + path.stem + ".json")
	file.save(data, info_path, pretty=True)

	warnings, errors = util.counts()
	if warnings or errors:
		print(f"{warnings} warnings, {errors} errors")
	return data

def get_all_layers(data) -> list:
	return list(data.get("layers", []))

def get_layer(data, name:str):
	for l in get_all_layers(data):
		if l["name"] == name:
			return l
	return None

def get_layers_of_type(data, kind:str) -> list:
	return [l for l in get_all_layers(data) if l["type"] == kind]

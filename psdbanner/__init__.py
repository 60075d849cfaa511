from .__info__ import __version__
from .classes import DocumentLayer, ExtractionResult, MaskRecord, PSDFileData, TextLayerStyle
from .extract import extract, extract_layers
from .ids import IdGenerator, generate_layer_id
from .node import LayerKind, classify, get_descendants

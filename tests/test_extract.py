import asyncio
from types import SimpleNamespace

from psdbanner.extract import (
	Assembler, extract, extract_image_layer, extract_layers, extract_text_layer, image_geometry, resolve_mask
)
from psdbanner.ids import IdGenerator

from fakes import (
	BrokenPixels, FakeNode, FlatRoot, GetNode, Mask, MemoryStore, Pixels, Root, image, style_of, text
)


def run(root, store=None, **kwargs):
	kwargs.setdefault("style_extractor", style_of)
	return extract(root, store or MemoryStore(), **kwargs)


def layer_warnings(result):
	return [w.message for w in result.warnings if w.layer != "root"]


def layer_of(result, name):
	return next(l for l in result.document.layers if l.name == name)


def test_text_layer_geometry_and_content():
	result = run(Root([text("Title", left=10, top=20, right=110, bottom=60)]))
	layer = layer_of(result, "Title")
	assert layer.type == "text"
	assert (layer.x, layer.y, layer.width, layer.height) == (10, 20, 115, 60)
	assert layer.text_content == "Hello"
	assert result.text_layers["Title"].text == "Hello"
	assert result.ok


def test_text_layer_missing_bounds_default_to_zero():
	node = text("Loose")
	node.left = node.top = node.right = node.bottom = None
	layer = layer_of(run(Root([node])), "Loose")
	assert (layer.x, layer.y, layer.width, layer.height) == (0, 0, 15, 20)


def test_text_layer_activates_and_reads_through_get():
	node = GetNode("Headline", values={"typeTool": {"text": "Sale"}}, right=50, bottom=10)
	result = run(Root([node]))
	assert node.activations == 1
	assert layer_of(result, "Headline").text_content == "Sale"


def test_missing_style_skips_with_one_warning():
	result = run(Root([text("Broken", value=None)]))
	assert result.document.layers == []
	assert layer_warnings(result) == ["style not found"]
	assert result.failures == []


def test_missing_record_skips_with_warning():
	assembler = Assembler()
	node = GetNode("Ghost")
	assert extract_text_layer(node, assembler, style_of) is None
	assert assembler.warnings[0].message == "active layer data not found"
	assert assembler.document.layers == []


def test_empty_text_is_emitted_with_warning():
	result = run(Root([text("Placeholder", value="")]))
	assert layer_of(result, "Placeholder").text_content == ""
	assert layer_warnings(result) == ["empty text"]


def test_image_without_mask_uses_node_bounds():
	result = run(Root([image("Photo", left=5, top=6, right=205, bottom=156)]))
	layer = layer_of(result, "Photo")
	assert (layer.x, layer.y, layer.width, layer.height) == (5, 6, 200, 150)
	assert layer.mask is None
	assert layer.src == "https://cdn.test/Photo.png"
	assert result.extracted_images == {"Photo": "https://cdn.test/Photo.png"}


def test_enabled_mask_overrides_geometry():
	mask = Mask(left=10, top=5, width=100, height=80)
	result = run(Root([image("Photo", right=200, bottom=150, mask=mask)]))
	layer = layer_of(result, "Photo")
	assert (layer.x, layer.y, layer.width, layer.height) == (10, 5, 100, 80)
	assert layer.mask.width == 100
	assert layer.mask.disabled is False


def test_disabled_mask_is_attached_but_ignored_for_geometry():
	mask = Mask(left=10, top=5, width=100, height=80, disabled=True, invert=True)
	result = run(Root([image("Photo", right=200, bottom=150, mask=mask)]))
	layer = layer_of(result, "Photo")
	assert (layer.x, layer.y, layer.width, layer.height) == (0, 0, 200, 150)
	assert layer.mask.disabled is True
	assert layer.mask.invert is True


def test_empty_mask_is_not_attached():
	assert resolve_mask(Mask(left=3, top=3, width=0, height=10)) is None
	assert resolve_mask(None) is None
	node = image("Photo", right=20, bottom=10)
	assert image_geometry(node, resolve_mask(Mask(width=5))) == (0, 0, 20, 10)


def test_mask_dict_round_trips_editor_keys():
	mask = resolve_mask({"left": 1, "top": 2, "width": 3, "height": 4, "default_color": 255})
	assert mask.to_dict()["defaultColor"] == 255


def test_groups_only_contribute_their_children():
	group = FakeNode("Group", children=[image("One"), image("Two")])
	result = run(Root([group]))
	assert [l.name for l in result.document.layers] == ["One", "Two"]


def test_nodes_without_payload_are_skipped_silently():
	result = run(Root([FakeNode("Shape"), FakeNode("Empty group", group=True)]))
	assert result.document.layers == []
	assert layer_warnings(result) == []


def test_failed_upload_does_not_stop_the_run():
	store = MemoryStore(fail={"Bad"})
	result = run(Root([image("Bad"), text("After"), image("Good")]), store)
	assert [l.name for l in result.document.layers] == ["After", "Good"]
	assert "Bad" not in result.extracted_images
	assert [f.layer for f in result.failures] == ["Bad"]
	assert not result.ok


def test_encoding_failure_is_isolated():
	result = run(Root([image("Bad", image=BrokenPixels()), image("Good")]))
	assert [l.name for l in result.document.layers] == ["Good"]
	assert "ValueError" in result.failures[0].message


def test_unexpected_node_error_is_contained():
	class Exploding(FakeNode):
		def is_group(self):
			raise RuntimeError("boom")

	result = run(Root([Exploding("Weird"), image("Fine")]))
	assert [l.name for l in result.document.layers] == ["Fine"]
	assert result.failures[0].layer == "Weird"


def test_image_recheck_warns_without_pixels():
	assembler = Assembler()
	layer = asyncio.run(extract_image_layer(FakeNode("Nothing"), assembler, MemoryStore()))
	assert layer is None
	assert assembler.warnings[0].message == "no image data"


def test_concurrent_uploads_commit_in_traversal_order():
	store = MemoryStore(delays={"Slow": 0.05, "Fast": 0})
	nodes = [image("Slow"), text("Middle"), image("Fast")]
	result = run(Root(nodes), store, concurrent=True)
	assert store.finished == ["Fast", "Slow"]
	assert [l.name for l in result.document.layers] == ["Slow", "Middle", "Fast"]


def test_concurrent_failure_is_isolated_and_ordered():
	store = MemoryStore(fail={"Bad"}, delays={"Bad": 0.02})
	result = run(Root([image("Bad"), image("Good")]), store, concurrent=True, limit=1)
	assert [l.name for l in result.document.layers] == ["Good"]
	assert [f.layer for f in result.failures] == ["Bad"]


def test_sequential_and_concurrent_runs_agree():
	nodes = [image("A"), text("B"), FakeNode("G", children=[image("C")])]
	one = run(Root(nodes))
	two = run(Root(nodes), concurrent=True)
	assert [l.name for l in one.document.layers] == [l.name for l in two.document.layers]


def test_traversal_strategy_does_not_change_the_document():
	a, b = image("A"), text("B")
	group = FakeNode("G", children=[a, b])
	walked = run(Root([group]))
	listed = run(FlatRoot([group], [group, a, b]))
	assert [l.name for l in walked.document.layers] == [l.name for l in listed.document.layers]
	assert any("walked tree" in w.message for w in walked.warnings)
	assert listed.warnings == []


def test_ids_are_unique_for_duplicate_names():
	nodes = [image("Logo"), image("Logo"), text("Logo")]
	result = run(Root(nodes), ids=IdGenerator(clock=lambda: 1))
	ids = [l.id for l in result.document.layers]
	assert len(set(ids)) == 3


def test_side_index_is_last_write_wins():
	result = run(Root([text("Same", value="first"), text("Same", value="second")]))
	assert len(result.document.layers) == 2
	assert result.text_layers["Same"].text == "second"


def test_plain_function_store_is_accepted():
	result = run(Root([image("Sync")]), lambda buffer, name: f"mem://{name}")
	assert layer_of(result, "Sync").src == "mem://Sync"


def test_result_serializes_for_the_editor():
	result = run(Root([text("T"), image("I", mask=Mask(width=2, height=2))]))
	out = result.to_dict()
	kinds = [l["type"] for l in out["document"]["layers"]]
	assert kinds == ["text", "image"]
	assert out["document"]["layers"][0]["textContent"] == "Hello"
	assert out["document"]["layers"][1]["mask"]["width"] == 2
	assert out["extractedImages"]["I"].endswith("I.png")


def test_extract_layers_is_awaitable():
	result = asyncio.run(extract_layers(Root([image("A")]), MemoryStore(), style_extractor=style_of))
	assert len(result.document.layers) == 1


def test_mixed_capability_nodes_of_one_class():
	plain = SimpleNamespace(name="Plain", left=0, top=0, right=10, bottom=10, layer=None, is_group=lambda: False)
	via_get = SimpleNamespace(
		name="ViaGet", left=0, top=0, right=10, bottom=10, layer=None,
		is_group=lambda: False, get=lambda key: {"text": "Hi"} if key == "typeTool" else None
	)
	root = SimpleNamespace(name="root", children=[plain, via_get])
	result = run(root)
	assert [l.name for l in result.document.layers] == ["ViaGet"]
	assert result.ok


def test_leaf_without_children_does_not_abort_the_run():
	leaf = SimpleNamespace(name="Photo", left=0, top=0, right=4, bottom=4, layer=SimpleNamespace(image=Pixels()), is_group=lambda: False)
	root = SimpleNamespace(name="root", children=[leaf])
	result = run(root)
	assert [l.name for l in result.document.layers] == ["Photo"]


def test_traversal_failure_is_reported_not_raised():
	class BrokenRoot:
		name = "root"

		def descendants(self):
			raise RuntimeError("tree unreadable")

	result = run(BrokenRoot())
	assert result.document.layers == []
	assert [f.layer for f in result.failures] == ["root"]


def test_mask_default_color_in_editor_spelling():
	mask = resolve_mask({"left": 1, "top": 2, "width": 3, "height": 4, "defaultColor": 128})
	assert mask.default_color == 128

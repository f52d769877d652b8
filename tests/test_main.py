import pytest

from agrigraph import main
from agrigraph.browser import CropBrowser
from agrigraph.ownership import OwnershipStore


@pytest.fixture
def browser(tmp_path):
    store = OwnershipStore(tmp_path / "cropsowned.json")
    b = CropBrowser(store, {"t": {"name": "T", "file": "t.txt", "format": "txt"}},
                    fetch=lambda ds, cb: cb("C=A+B\nD=C+E\n"))
    b.switch_dataset("t")
    return b


def test_elements_mark_owned_crops(browser):
    browser.toggle_owned("C")
    elements = main.to_cytoscape_elements(browser, selected="D")
    nodes = {el["data"]["id"]: el["classes"] for el in elements if "source" not in el["data"]}
    edges = {(el["data"]["source"], el["data"]["target"]): el["classes"] for el in elements if "source" in el["data"]}

    assert nodes == {"A": "", "B": "", "C": "ownednode", "D": "selectednode", "E": ""}
    assert edges[("A", "C")] == "ownededge"
    assert edges[("C", "D")] == ""


def test_elements_follow_target(browser):
    browser.select("C")
    ids = {el["data"]["id"] for el in main.to_cytoscape_elements(browser)}
    assert ids == {"A", "B", "C", "e0", "e1"}


def test_crop_options_flag_base_crops(browser):
    options = main.crop_options(browser)
    assert [o["value"] for o in options] == ["A", "B", "C", "E", "D"]
    labels = {o["value"]: o["label"] for o in options}
    assert labels["C"] == "C"
    assert labels["A"].children == "A"


def test_target_layout_roots_at_crop():
    layout = main.target_layout("C")
    assert layout["name"] == "breadthfirst"
    assert layout["roots"] == "#C"


def test_load_dataset_reports_failure(tmp_path):
    store = OwnershipStore(tmp_path / "cropsowned.json")
    b = CropBrowser(store, {"j": {"name": "J", "file": "j.json", "format": "json"}},
                    fetch=lambda ds, cb: cb("nope"))
    msg = main.load_dataset(b, "j")
    assert msg.startswith("Could not load J")
    assert main.to_cytoscape_elements(b) == []


def test_load_dataset_reports_non_string_names(tmp_path):
    store = OwnershipStore(tmp_path / "cropsowned.json")
    b = CropBrowser(store, {"j": {"name": "J", "file": "j.json", "format": "json"}},
                    fetch=lambda ds, cb: cb('[{"parent1": null, "parent2": "b", "result": "c"}]'))
    msg = main.load_dataset(b, "j")
    assert msg.startswith("Could not load J")
    assert b.session is None


def find_component(component, component_id):
    if getattr(component, "id", None) == component_id:
        return component
    children = getattr(component, "children", None)
    if not isinstance(children, list):
        children = [children]
    for child in children:
        if hasattr(child, "to_plotly_json"):
            found = find_component(child, component_id)
            if found is not None:
                return found
    return None


@pytest.mark.parametrize("triggered, kwargs", [
    ("btn_reset.n_clicks", {}),
    ("cy.tapNode", {"tap_node": {"data": {"id": "C"}}}),
    ("select_mode.value", {"dataset_key": "t"}),
])
def test_handle_action_clears_crop_chooser(browser, triggered, kwargs):
    outputs = main.handle_action(browser, triggered, sel={"crop": None}, **kwargs)
    assert outputs[3] is None


def test_handle_action_keeps_chosen_crop(browser):
    outputs = main.handle_action(browser, "crop_select.value", crop_value="C", sel={"crop": None})
    assert outputs[3] is main.dash.no_update
    assert outputs[6] == {"crop": "C"}
    assert outputs[7] == "Showing parents of C."


def test_handle_action_tap_targets_crop(browser):
    outputs = main.handle_action(browser, "cy.tapNode", tap_node={"data": {"id": "C"}}, sel={"crop": None})
    assert browser.session.active_filter.root == "C"
    assert outputs[1] == main.target_layout("C")


def test_layout_reflects_current_browser(browser, monkeypatch):
    monkeypatch.setattr(main, "browser", browser)
    browser.select("C")
    layout = main.serve_layout()

    assert find_component(layout, "select_mode").value == "t"
    assert find_component(layout, "pack_title").children == "T"
    assert find_component(layout, "store_sel").data == {"crop": "C"}
    ids = {el["data"]["id"] for el in find_component(layout, "cy").elements}
    assert ids == {"A", "B", "C", "e0", "e1"}

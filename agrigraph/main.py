import logging
import threading

import dash
from dash import html, dcc, Input, Output, State, callback_context
import dash_cytoscape as cyto
from dash import dash_table

from . import config
from .browser import CropBrowser
from .ownership import OwnershipStore
from .rules import RuleSourceError

_LOGGER = logging.getLogger(__name__)

COSE_LAYOUT = {"name": "cose", "animate": False}

# -----------------------------
# Elements / stylesheet
# -----------------------------

def to_cytoscape_elements(b: CropBrowser, selected=None):
    if b.session is None:
        return []
    owned = b.owned_ids()
    elements = []
    for node in b.session.nodes:
        classes = []
        if node.id in owned:
            classes.append("ownednode")
        if node.id == selected:
            classes.append("selectednode")
        elements.append({"data": node.as_data(), "classes": " ".join(classes)})

    # edges into an owned crop are no longer needed
    for edge in b.session.edges:
        elements.append({
            "data": edge.as_data(),
            "classes": "ownededge" if edge.target in owned else "",
        })
    return elements

def build_stylesheet():
    return [
        {"selector": "node",
         "style": {"background-color": "#666", "label": "data(name)"}},
        {"selector": "edge",
         "style": {"width": 5, "line-color": "#ccc", "curve-style": "bezier",
                   "target-arrow-size": "5", "target-arrow-color": "#ccc",
                   "target-arrow-shape": "triangle"}},
        {"selector": ".selectednode",
         "style": {"background-color": "white", "border-color": "#DEC417", "border-width": "5px"}},
        {"selector": "node.ownednode",
         "style": {"background-color": "#EEE", "color": "#888", "shape": "diamond"}},
        {"selector": "edge.ownededge",
         "style": {"opacity": 0.5, "line-style": "dashed"}},
    ]

def target_layout(root_id):
    return {"name": "breadthfirst", "roots": f"#{root_id}", "directed": True,
            "animate": True, "animationDuration": 200}

def crop_options(b: CropBrowser):
    if b.session is None:
        return []
    base = b.session.base_crop_ids()
    out = []
    for crop in b.session.crops:
        # crops nothing breeds into are listed in italics
        label = html.I(crop.display_name) if crop.id in base else crop.display_name
        out.append({"label": label, "value": crop.id, "search": crop.display_name})
    return out

def dataset_options(datasets):
    return [{"label": d["name"], "value": key} for key, d in datasets.items()]

def describe(b: CropBrowser):
    if b.dataset_key is None:
        return "No dataset loaded."
    if b.session is None:
        return f"Loading {b.dataset_name}..."
    return f"Loaded {b.dataset_name}: {len(b.session.crops)} crops, {len(b.session.rules)} rules."

def load_dataset(b: CropBrowser, key):
    try:
        b.switch_dataset(key)
    except (RuleSourceError, OSError) as err:
        _LOGGER.error("Failed to load set %s: %s", key, err)
        return f"Could not load {b.dataset_name}: {err}"
    return describe(b)

def selected_crop(b: CropBrowser):
    if b.session is None or b.session.active_filter is None:
        return None
    return b.session.active_filter.root

# -----------------------------
# App
# -----------------------------
store = OwnershipStore(config.OWNED_PATH)
store.load_persisted()
browser = CropBrowser(store)
_browser_lock = threading.Lock()
load_dataset(browser, config.DEFAULT_DATASET)

app = dash.Dash(__name__)
app.title = "AgriCraft Breeding Graph"

def serve_layout():
    with _browser_lock:
        selected = selected_crop(browser)
        return html.Div(
            style={"display": "grid", "gridTemplateColumns": "340px 1fr", "gap": "12px", "padding": "12px"},
            children=[
                html.Div(
                    style={"border": "1px solid #ddd", "borderRadius": "12px", "padding": "12px",
                           "height": "90vh", "overflowY": "auto"},
                    children=[
                        html.H3(id="pack_title", children=browser.dataset_name),
                        dcc.Dropdown(id="select_mode", options=dataset_options(browser.datasets),
                                     value=browser.dataset_key, clearable=False),
                        html.Div(id="status", children=describe(browser), style={"whiteSpace": "pre-wrap", "fontSize": "13px", "marginTop": "8px"}),
                        html.Hr(),
                        html.H4("Crops"),
                        dcc.Dropdown(id="crop_select", options=crop_options(browser), placeholder="Choose a crop to see its parents",
                                     searchable=True, maxHeight=320),
                        html.Div("Crops in italics are not bred from anything.", style={"fontSize": "12px", "opacity": 0.85, "marginTop": "6px"}),
                        html.Div(style={"display": "grid", "gridTemplateColumns": "1fr 1fr 1fr", "gap": "6px", "marginTop": "8px"}, children=[
                            html.Button("Show all", id="btn_reset"),
                            html.Button("Toggle owned", id="btn_toggle_owned"),
                            html.Button("Clear owned", id="btn_clear_owned"),
                        ]),
                        dcc.ConfirmDialog(id="confirm_clear", message="Are you sure you want to reset all crops marked as owned?"),
                        html.Hr(),
                        html.H4("Mutations"),
                        dash_table.DataTable(
                            id="rules_table",
                            columns=[{"name": "Result", "id": "result"}, {"name": "Parent 1", "id": "parent1"}, {"name": "Parent 2", "id": "parent2"}],
                            data=browser.rule_rows(),
                            page_size=12,
                            sort_action="native",
                            filter_action="native",
                            style_table={"overflowX": "auto"},
                            style_cell={"fontSize": "11px", "padding": "6px", "whiteSpace": "normal", "height": "auto"},
                            style_header={"fontSize": "11px", "fontWeight": "bold"},
                        ),
                    ],
                ),
                html.Div(
                    style={"border": "1px solid #ddd", "borderRadius": "12px", "padding": "12px"},
                    children=[
                        cyto.Cytoscape(
                            id="cy",
                            elements=to_cytoscape_elements(browser, selected),
                            style={"width": "100%", "height": "86vh"},
                            layout=target_layout(selected) if selected else COSE_LAYOUT,
                            stylesheet=build_stylesheet(),
                        ),
                        dcc.Store(id="store_sel", data={"crop": selected}),
                    ],
                ),
            ],
        )

# rebuilt on every page load so a reload shows the server's current graph
app.layout = serve_layout

# -----------------------------
# Clear confirmation
# -----------------------------
@app.callback(
    Output("confirm_clear", "displayed"),
    Input("btn_clear_owned", "n_clicks"),
    prevent_initial_call=True,
)
def ask_clear_owned(_n):
    return True

# -----------------------------
# Graph actions
# -----------------------------
def handle_action(b: CropBrowser, triggered, dataset_key=None, crop_value=None, tap_node=None, sel=None):
    """Apply one UI request to ``b`` and return the values for the graph callback outputs.

    The crop chooser is cleared after everything except a choice made in it,
    so choosing the same crop again still fires.
    """
    sel = dict(sel or {"crop": None})
    layout = dash.no_update
    options = dash.no_update
    crop_choice = None

    if triggered == "select_mode.value":
        msg = load_dataset(b, dataset_key)
        sel["crop"] = None
        layout, options = COSE_LAYOUT, crop_options(b)

    elif b.session is None:
        msg = "No dataset loaded."

    elif triggered in ("crop_select.value", "cy.tapNode"):
        if triggered == "crop_select.value":
            crop_id = crop_value
            crop_choice = dash.no_update
        else:
            crop_id = (tap_node or {}).get("data", {}).get("id")
        if not crop_id:
            return (dash.no_update,) * 7 + ("Ready.",)
        b.select(crop_id)
        sel["crop"] = crop_id
        layout = target_layout(crop_id)
        msg = f"Showing parents of {b.session.crop(crop_id).display_name}."

    elif triggered == "btn_reset.n_clicks":
        b.reset()
        sel["crop"] = None
        layout = COSE_LAYOUT
        msg = "Showing all crops."

    elif triggered == "btn_toggle_owned.n_clicks":
        crop_choice = dash.no_update
        crop_id = sel.get("crop")
        if not crop_id:
            msg = "Select a crop first."
        else:
            owned = b.toggle_owned(crop_id)
            name = b.session.crop(crop_id).display_name
            msg = f"Marked {name} as owned." if owned else f"Marked {name} as not owned."

    elif triggered == "confirm_clear.submit_n_clicks":
        crop_choice = dash.no_update
        cleared = b.clear_owned()
        msg = f"Cleared owned marks ({len(cleared)} crops)."

    else:
        crop_choice = dash.no_update
        msg = "Ready."

    return (
        to_cytoscape_elements(b, sel.get("crop")),
        layout,
        options,
        crop_choice,
        b.dataset_name,
        b.rule_rows(),
        sel,
        msg,
    )

@app.callback(
    Output("cy", "elements"),
    Output("cy", "layout"),
    Output("crop_select", "options"),
    Output("crop_select", "value"),
    Output("pack_title", "children"),
    Output("rules_table", "data"),
    Output("store_sel", "data"),
    Output("status", "children"),
    Input("select_mode", "value"),
    Input("crop_select", "value"),
    Input("cy", "tapNode"),
    Input("btn_reset", "n_clicks"),
    Input("btn_toggle_owned", "n_clicks"),
    Input("confirm_clear", "submit_n_clicks"),
    State("store_sel", "data"),
    prevent_initial_call=True,
)
def graph_actions(dataset_key, crop_value, tap_node, _reset, _toggle, _clear, sel):
    triggered = callback_context.triggered[0]["prop_id"]
    with _browser_lock:
        return handle_action(browser, triggered, dataset_key, crop_value, tap_node, sel)


def main():
    logging.basicConfig(level=config.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    app.run(host=config.HOST, port=config.PORT, debug=config.DEBUG)


if __name__ == "__main__":
    main()

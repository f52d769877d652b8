"""Controller tying the dataset catalogue, graph sessions and ownership together."""

from __future__ import annotations

import logging
from typing import Callable, List, Optional

from . import config
from .graph import FilterDescriptor, GraphListener, GraphSession
from .ownership import OwnershipStore
from .rules import read_rules

_LOGGER = logging.getLogger(__name__)


def fetch_rule_file(dataset: dict, callback: Callable[[str], None]) -> None:
    """Read a bundled rule file and hand its text to ``callback``."""
    path = config.MUTATIONS_DIR / dataset["file"]
    callback(path.read_text(encoding="utf-8"))


class CropBrowser:
    """Holds the currently loaded dataset and answers UI requests.

    ``fetch(dataset, callback)`` retrieves a rule source and calls
    ``callback(text)`` when done, possibly later. Every switch bumps the load
    generation, so a completion arriving after a newer switch is dropped.
    """

    def __init__(
        self,
        store: OwnershipStore,
        datasets: Optional[dict] = None,
        fetch: Optional[Callable[[dict, Callable[[str], None]], None]] = None,
        listener: Optional[GraphListener] = None,
    ):
        self.store = store
        self.datasets = datasets if datasets is not None else config.DATASETS
        self.fetch = fetch or fetch_rule_file
        self.listener = listener or GraphListener()
        self.dataset_key: Optional[str] = None
        self.session: Optional[GraphSession] = None
        self.generation = 0

    @property
    def dataset_name(self) -> Optional[str]:
        if self.dataset_key is None:
            return None
        return self.datasets[self.dataset_key]["name"]

    def switch_dataset(self, key: str, on_ready: Optional[Callable[[GraphSession], None]] = None) -> None:
        """Discard the current graph and start loading dataset ``key``."""
        dataset = self.datasets[key]
        self.generation += 1
        generation = self.generation
        self.dataset_key = key
        self.session = None
        _LOGGER.info("Loading set %s (%s)", key, dataset["name"])

        def completed(text: str) -> None:
            if generation != self.generation:
                _LOGGER.info("Discarding stale load of %s", key)
                return
            rules = read_rules(text, dataset["format"])
            session = GraphSession.from_rules(rules, dataset["name"])
            session.listener = self.listener
            self.session = session
            for crop in session.crops:
                self.listener.on_crop_discovered(crop)
            _LOGGER.info("Loaded %s: %d crops, %d rules", key, len(session.crops), len(session.rules))
            if on_ready is not None:
                on_ready(session)

        self.fetch(dataset, completed)

    def _require_session(self) -> GraphSession:
        if self.session is None:
            raise RuntimeError("No dataset is loaded")
        return self.session

    def select(self, crop_id: str) -> FilterDescriptor:
        return self._require_session().target(crop_id)

    def reset(self) -> None:
        if self.session is not None:
            self.session.untarget()

    def is_owned(self, crop_id: str) -> bool:
        return self.store.is_owned(self.dataset_name, crop_id)

    def owned_ids(self) -> set:
        if self.dataset_name is None:
            return set()
        return self.store.owned_ids(self.dataset_name)

    def toggle_owned(self, crop_id: str) -> bool:
        """Flip the owned flag of ``crop_id`` and return the new value."""
        self._require_session()
        owned = not self.is_owned(crop_id)
        self.store.set_owned(self.dataset_name, crop_id, owned)
        return owned

    def clear_owned(self) -> List[str]:
        """Unmark every crop of the current dataset.

        Returns the ids of all crops in the graph, hidden ones included, so the
        renderer can reset each of them.
        """
        session = self._require_session()
        self.store.clear_all(self.dataset_name)
        return [c.id for c in session.all_crops()]

    def rule_rows(self) -> List[dict]:
        """Rules whose result is currently shown, with readable names."""
        if self.session is None:
            return []
        session = self.session
        visible = {c.id for c in session.nodes}
        rows = []
        for a, b, combined in session.rules:
            child = session.lookup(combined)
            if child.id not in visible:
                continue
            rows.append({
                "result": child.display_name,
                "parent1": session.lookup(a).display_name,
                "parent2": session.lookup(b).display_name,
            })
        return rows

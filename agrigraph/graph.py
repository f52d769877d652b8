"""Breeding graph model: crop registry, edges and the ancestor filter."""

from __future__ import annotations

import logging
import re
from collections import deque
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Set, Tuple

_LOGGER = logging.getLogger(__name__)

_UNSAFE_RE = re.compile(r"[^A-Za-z0-9\-_.]")
_LEADING_NON_LETTERS_RE = re.compile(r"^[^A-Za-z]+")
_PREFIX_RE = re.compile(r"^(\w+:)?(seed)?", re.ASCII)


def sanitize(name: str) -> str:
    """Return a node id for ``name``: safe characters only, starting with a letter."""
    return _LEADING_NON_LETTERS_RE.sub("", _UNSAFE_RE.sub("", name))


def derive_display_name(name: str) -> str:
    """Return a readable label, e.g. ``AgriCraft:seedSugar_cane`` -> ``Sugar cane``."""
    original = name

    # prefixes
    name = _PREFIX_RE.sub("", name, count=1)
    # suffixes
    name = re.sub(r"seedItem$", "", name)
    name = re.sub(r"_seeds$", "", name)

    name = name.replace("_", " ")
    name = name[:1].upper() + name[1:]

    return name or original


@dataclass(frozen=True)
class Crop:
    id: str
    raw_name: str
    display_name: str

    def as_data(self) -> dict:
        return {"id": self.id, "name": self.display_name}


@dataclass(frozen=True)
class BreedingEdge:
    id: str
    source: str
    target: str

    def as_data(self) -> dict:
        return {"id": self.id, "source": self.source, "target": self.target}


@dataclass(frozen=True)
class FilterDescriptor:
    """Elements taken out of the live graph by a target, kept for restoring."""

    root: str
    nodes: Tuple[Crop, ...]
    edges: Tuple[BreedingEdge, ...]

    @property
    def node_ids(self) -> Set[str]:
        return {c.id for c in self.nodes}

    @property
    def edge_ids(self) -> Set[str]:
        return {e.id for e in self.edges}


class GraphListener:
    """Receives graph notifications on behalf of the renderer. Methods are no-ops."""

    def on_crop_discovered(self, crop: Crop) -> None:
        pass

    def apply_filter(self, removed: FilterDescriptor) -> None:
        pass

    def restore_filter(self, removed: FilterDescriptor) -> None:
        pass

    def relayout(self, root_id: str) -> None:
        pass


class GraphSession:
    """Graph of one loaded dataset.

    The registry maps raw crop names to crops. The live node/edge dicts hold
    what is currently part of the displayed graph; ``target`` moves elements
    out of them into a :class:`FilterDescriptor` and ``untarget`` moves them
    back.
    """

    def __init__(self, dataset: str = "", listener: Optional[GraphListener] = None):
        self.dataset = dataset
        self.listener = listener or GraphListener()
        self.rules: List[Tuple[str, str, str]] = []
        self.active_filter: Optional[FilterDescriptor] = None
        self._registry: Dict[str, Crop] = {}
        self._edges: List[BreedingEdge] = []
        self._live_nodes: Dict[str, Crop] = {}
        self._live_edges: Dict[str, BreedingEdge] = {}

    @classmethod
    def from_rules(cls, rules: Iterable[Tuple[str, str, str]], dataset: str = "",
                   listener: Optional[GraphListener] = None) -> "GraphSession":
        session = cls(dataset, listener)
        for a, b, combined in rules:
            session.add_breed(a, b, combined)
        _LOGGER.debug("Built graph for %r: %d crops, %d edges",
                      dataset, len(session._registry), len(session._edges))
        return session

    # -----------------------------
    # Registry / builder
    # -----------------------------

    def register(self, raw_name: str) -> Crop:
        crop = self._registry.get(raw_name)
        if crop is not None:
            return crop
        crop = Crop(sanitize(raw_name), raw_name, derive_display_name(raw_name))
        self._registry[raw_name] = crop
        self._live_nodes.setdefault(crop.id, crop)
        self.listener.on_crop_discovered(crop)
        return crop

    def add_breed(self, a: str, b: str, combined: str) -> None:
        """Register a combination: ``a`` + ``b`` -> ``combined``."""
        parent1 = self.register(a)
        parent2 = self.register(b)
        child = self.register(combined)
        self.rules.append((a, b, combined))
        for parent in (parent1, parent2):
            edge = BreedingEdge(f"e{len(self._edges)}", parent.id, child.id)
            self._edges.append(edge)
            self._live_edges[edge.id] = edge

    @property
    def crops(self) -> List[Crop]:
        """Every registered crop, in discovery order."""
        return list(self._registry.values())

    @property
    def nodes(self) -> List[Crop]:
        return list(self._live_nodes.values())

    @property
    def edges(self) -> List[BreedingEdge]:
        return list(self._live_edges.values())

    def lookup(self, raw_name: str) -> Crop:
        return self._registry[raw_name]

    def crop(self, crop_id: str) -> Crop:
        for crop in self._registry.values():
            if crop.id == crop_id:
                return crop
        raise KeyError(crop_id)

    def all_crops(self) -> List[Crop]:
        """Live crops plus the ones hidden by the active filter."""
        crops = list(self._live_nodes.values())
        if self.active_filter is not None:
            crops.extend(self.active_filter.nodes)
        return crops

    def base_crop_ids(self) -> Set[str]:
        """Ids of crops that no rule produces."""
        produced = {e.target for e in self._edges}
        return {c.id for c in self._registry.values() if c.id not in produced}

    def snapshot(self) -> dict:
        return {
            "nodes": [c.as_data() for c in self._live_nodes.values()],
            "edges": [e.as_data() for e in self._live_edges.values()],
        }

    # -----------------------------
    # Target / untarget
    # -----------------------------

    def ancestors(self, node_id: str) -> Set[str]:
        """``node_id`` plus every live node that leads to it through breeding."""
        incoming: Dict[str, List[str]] = {}
        for e in self._live_edges.values():
            incoming.setdefault(e.target, []).append(e.source)

        seen = {node_id}
        queue = deque([node_id])
        while queue:
            current = queue.popleft()
            for parent in incoming.get(current, ()):
                if parent not in seen:
                    seen.add(parent)
                    queue.append(parent)
        return seen

    def target(self, name: str) -> FilterDescriptor:
        """Show only the crop ``name`` and its ancestors. Undoes any previous target."""
        self.untarget()

        node_id = sanitize(name)
        if node_id not in self._live_nodes:
            raise KeyError(name)

        keep = self.ancestors(node_id)
        removed_nodes = tuple(c for c in self._live_nodes.values() if c.id not in keep)
        removed_edges = tuple(
            e for e in self._live_edges.values()
            if e.source not in keep or e.target not in keep
        )
        for c in removed_nodes:
            del self._live_nodes[c.id]
        for e in removed_edges:
            del self._live_edges[e.id]

        self.active_filter = FilterDescriptor(node_id, removed_nodes, removed_edges)
        self.listener.apply_filter(self.active_filter)
        self.listener.relayout(node_id)
        return self.active_filter

    def untarget(self) -> None:
        """Restore the elements removed by the active target, if any. Does not relayout."""
        removed = self.active_filter
        if removed is None:
            return
        for c in removed.nodes:
            self._live_nodes[c.id] = c
        for e in removed.edges:
            self._live_edges[e.id] = e
        self.active_filter = None
        self.listener.restore_filter(removed)

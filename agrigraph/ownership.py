"""Per-dataset record of the crops a player already owns."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, Set

_LOGGER = logging.getLogger(__name__)


class OwnershipStore:
    """Owned flags keyed by dataset name, then crop id.

    Stored on disk as ``{dataset: {crop_id: true}}``. Unowned crops are simply
    absent. Every mutation rewrites the whole file.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self.owned: Dict[str, Set[str]] = {}

    def load_persisted(self) -> None:
        """Read the stored record. Missing or unreadable storage means nothing is owned."""
        self.owned = {}
        if not self.path.exists():
            return
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as err:
            _LOGGER.warning("Ignoring unreadable ownership file %s: %s", self.path, err)
            return
        if not isinstance(raw, dict):
            _LOGGER.warning("Ignoring malformed ownership file %s", self.path)
            return

        for dataset, crops in raw.items():
            if isinstance(crops, dict):
                self.owned[dataset] = {cid for cid, flag in crops.items() if flag is True}
        _LOGGER.debug("Loaded ownership for %d dataset(s)", len(self.owned))

    def persist(self) -> None:
        data = {
            dataset: {cid: True for cid in sorted(crops)}
            for dataset, crops in self.owned.items()
        }
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
        except OSError as err:
            _LOGGER.error("Could not save ownership to %s: %s", self.path, err)

    def is_owned(self, dataset: str, crop_id: str) -> bool:
        return crop_id in self.owned.get(dataset, ())

    def owned_ids(self, dataset: str) -> Set[str]:
        return set(self.owned.get(dataset, ()))

    def set_owned(self, dataset: str, crop_id: str, owned: bool) -> None:
        crops = self.owned.setdefault(dataset, set())
        if owned:
            crops.add(crop_id)
        else:
            crops.discard(crop_id)
        self.persist()

    def clear_all(self, dataset: str) -> None:
        self.owned[dataset] = set()
        self.persist()

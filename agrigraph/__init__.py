"""Breeding-graph browser for AgriCraft crop mutations."""

from .graph import (
    BreedingEdge,
    Crop,
    FilterDescriptor,
    GraphListener,
    GraphSession,
    derive_display_name,
    sanitize,
)
from .ownership import OwnershipStore
from .rules import RuleSourceError, read_rules_json, read_rules_txt

__all__ = [
    "BreedingEdge",
    "Crop",
    "FilterDescriptor",
    "GraphListener",
    "GraphSession",
    "OwnershipStore",
    "RuleSourceError",
    "derive_display_name",
    "read_rules_json",
    "read_rules_txt",
    "sanitize",
]

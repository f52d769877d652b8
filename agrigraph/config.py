"""Paths, dataset catalogue and server settings."""

import os
from pathlib import Path

PACKAGE_DIR = Path(__file__).resolve().parent

MUTATIONS_DIR = Path(os.getenv("AGRIGRAPH_MUTATIONS_DIR") or PACKAGE_DIR / "mutations").expanduser()
DATA_DIR = Path(os.getenv("AGRIGRAPH_DATA_DIR") or Path.home() / ".local" / "share" / "agrigraph").expanduser()
OWNED_PATH = DATA_DIR / "cropsowned.json"

HOST = os.getenv("AGRIGRAPH_HOST", "127.0.0.1")
PORT = int(os.getenv("AGRIGRAPH_PORT", "8050"))
DEBUG = os.getenv("AGRIGRAPH_DEBUG", "").lower() in ("1", "true", "yes")
LOG_LEVEL = os.getenv("AGRIGRAPH_LOG_LEVEL", "INFO").upper()

# key -> title shown to the user (also the ownership key), rule file, rule format
DATASETS = {
    "agrarianSkies2": {
        "name": "AgriCraft 1.7.10 + Agrarian Skies 2",
        "file": "Mutations_AS2.txt",
        "format": "txt",
    },
    "v_1_7_10": {
        "name": "AgriCraft 1.7.10",
        "file": "Mutations_v1.7.10.txt",
        "format": "txt",
    },
    "v1_8_9": {
        "name": "AgriCraft 1.8.9 (Alpha)",
        "file": "mutations_v1.8.9.json",
        "format": "json",
    },
}

DEFAULT_DATASET = os.getenv("AGRIGRAPH_DEFAULT_DATASET", "agrarianSkies2")
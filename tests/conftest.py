import os
import tempfile

import pytest

# keep the app module from touching the real ownership file on import
os.environ.setdefault("AGRIGRAPH_DATA_DIR", tempfile.mkdtemp(prefix="agrigraph-test-"))

from agrigraph.graph import GraphListener, GraphSession  # noqa: E402


class RecordingListener(GraphListener):
    def __init__(self):
        self.discovered = []
        self.applied = []
        self.restored = []
        self.layouts = []

    def on_crop_discovered(self, crop):
        self.discovered.append(crop)

    def apply_filter(self, removed):
        self.applied.append(removed)

    def restore_filter(self, removed):
        self.restored.append(removed)

    def relayout(self, root_id):
        self.layouts.append(root_id)


@pytest.fixture
def listener():
    return RecordingListener()


@pytest.fixture
def chain():
    """A + B -> C, C + E -> D."""
    return GraphSession.from_rules([("A", "B", "C"), ("C", "E", "D")], "test")

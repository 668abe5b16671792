import logging

from octree import load_octree
from snapshot import build_snapshot

logger = logging.getLogger(__name__)


class MapServer:
    """
    Serves one octree map, in binary form and as per-level cube markers.

    The snapshot is built once, at construction, and every read returns that
    same object. Nothing writes to it afterwards, so readers need no locking.
    """
    def __init__(self, snapshot):
        self._snapshot = snapshot

    @classmethod
    def from_octree(cls, octree, config, stamp=None):
        return cls(build_snapshot(octree, config, stamp=stamp))

    @classmethod
    def from_file(cls, filename, config, stamp=None):
        """Load a .bt map and build the server; MapLoadError propagates before anything is served."""
        server = cls.from_octree(load_octree(filename), config, stamp=stamp)
        snapshot = server.get()
        logger.info("Octomap file %s loaded (%d nodes, %d occupied visualized).",
                    filename, snapshot.node_count, snapshot.num_occupied)
        return server

    def get(self):
        return self._snapshot

    def get_binary_map(self):
        return self._snapshot.binary_map

    def get_markers(self):
        return self._snapshot.markers

    def handle_get_octomap(self, request=None):
        logger.info("Sending map data on service request")
        return self._snapshot.binary_map

    def publish_latched(self, map_publisher, marker_publisher):
        """Hand the binary map and the marker array to their publishers, once."""
        map_publisher(self._snapshot.binary_map)
        marker_publisher(self._snapshot.markers)

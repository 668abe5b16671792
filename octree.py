import logging
from pathlib import Path

import numpy as np

logger = logging.getLogger(__name__)

BINARY_HEADER = b"# Octomap OcTree binary file"


class MapLoadError(RuntimeError):
    """The map file could not be read or is not a valid binary octree."""


class OccupiedVolume:
    """One occupied octree leaf: the cube centered at `center` with edge length `size`."""
    __slots__ = ("center", "size")

    def __init__(self, center, size):
        self.center = np.asarray(center, dtype=float)
        self.size = float(size)

    def __iter__(self):
        yield self.center
        yield self.size

    def __repr__(self):
        return f"OccupiedVolume(center={self.center.tolist()}, size={self.size})"


# ---------------------- OctoMap Occupancy Octree ----------------------
class OccupancyOctree:
    """
    Read-only view of a pyoctomap OcTree with the queries the map server needs.
    """
    def __init__(self, tree):
        self.tree = tree

    @property
    def resolution(self):
        """Edge length of the finest voxels."""
        return float(self.tree.getResolution())

    def metric_bounds(self):
        """
        Axis-aligned bounds of the known space.
        Returns: (min_xyz, max_xyz) as two (3,) float arrays.
        """
        bbox_min = np.asarray(self.tree.getMetricMin(), dtype=float)
        bbox_max = np.asarray(self.tree.getMetricMax(), dtype=float)
        return bbox_min, bbox_max

    def occupied_volumes(self):
        """Yield an OccupiedVolume for every occupied leaf, in tree order."""
        for leaf in self.tree.begin_leafs():
            if self.tree.isNodeOccupied(leaf):
                yield OccupiedVolume(leaf.getCoordinate(), leaf.getSize())

    def size(self):
        """Number of nodes in the tree, inner nodes included."""
        return int(self.tree.size())

    def write_binary(self):
        """Serialize the tree in the OctoMap binary format."""
        data = self.tree.writeBinary()
        if not data:
            raise MapLoadError("octree could not be serialized")
        return bytes(data)


def load_octree(path):
    """
    Load a binary OctoMap file (.bt).
    Raises MapLoadError if the file is missing, unreadable or not a binary octree.
    """
    path = Path(path)
    try:
        with path.open("rb") as f:
            header = f.read(len(BINARY_HEADER))
    except OSError as e:
        raise MapLoadError(f"could not read map file {path}: {e}") from e
    if header != BINARY_HEADER:
        raise MapLoadError(f"{path} is not a binary OctoMap file")

    import pyoctomap

    # Resolution is replaced by the one stored in the file.
    tree = pyoctomap.OcTree(0.1)
    try:
        ok = tree.readBinary(str(path))
    except Exception as e:
        raise MapLoadError(f"could not parse octree from {path}: {e}") from e
    if not ok:
        raise MapLoadError(f"could not parse octree from {path}")
    logger.debug("Read octree from %s (resolution %g)", path, tree.getResolution())
    return OccupancyOctree(tree)

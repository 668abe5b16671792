"""Pytest configuration and shared fixtures."""

import sys
from pathlib import Path

import numpy as np
import pytest

# Add the project root to the path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from config import ServerConfig  # noqa: E402
from octree import BINARY_HEADER, OccupiedVolume  # noqa: E402


class FakeOctree:
    """In-memory stand-in for OccupancyOctree."""

    def __init__(self, volumes, resolution=0.1, bounds=None, node_count=None, data=None):
        self.volumes = [OccupiedVolume(c, s) for c, s in volumes]
        self.resolution = resolution
        if bounds is None and self.volumes:
            centers = np.array([v.center for v in self.volumes])
            half = np.array([v.size for v in self.volumes])[:, None] / 2
            bounds = ((centers - half).min(axis=0), (centers + half).max(axis=0))
        elif bounds is None:
            bounds = (np.zeros(3), np.zeros(3))
        self.bounds = (np.asarray(bounds[0], dtype=float), np.asarray(bounds[1], dtype=float))
        self.node_count = len(self.volumes) if node_count is None else node_count
        self.data = BINARY_HEADER + b"\nres 0.1\ndata\n" if data is None else data
        self.enumerations = 0

    def metric_bounds(self):
        return self.bounds

    def occupied_volumes(self):
        self.enumerations += 1
        return iter(self.volumes)

    def size(self):
        return self.node_count

    def write_binary(self):
        return self.data


@pytest.fixture
def make_octree():
    """Factory for in-memory octrees from (center, size) pairs."""
    return FakeOctree


@pytest.fixture
def default_config():
    """Server configuration with the documented defaults."""
    return ServerConfig()


@pytest.fixture
def three_voxel_octree():
    """Two finest voxels and one of twice the size, at heights 0, 1 and 2."""
    r = 0.1
    volumes = [
        ((0.0, 0.0, 0.0), r),
        ((1.0, 0.0, 1.0), r),
        ((0.0, 1.0, 2.0), 2 * r),
    ]
    return FakeOctree(volumes, resolution=r, bounds=((-1.0, -1.0, 0.0), (1.0, 1.0, 2.0)), node_count=7)

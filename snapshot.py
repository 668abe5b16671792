import json
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Tuple

import numpy as np

from voxel_buckets import MAX_LEVELS, bucketize

logger = logging.getLogger(__name__)

MARKER_NAMESPACE = "map"
CUBE_LIST = 6

# Marker actions understood by renderers.
ADD = 0
DELETE = 2


@dataclass(frozen=True)
class OctomapBinary:
    """Serialized octree, tagged with the frame its coordinates are expressed in."""
    frame_id: str
    stamp: float
    data: bytes


@dataclass(frozen=True, eq=False)
class CubeListMarker:
    """
    Renderable cube list for one level. Every cube has edge length scale[0].
    color is the fixed color; colors, when non-empty, overrides it per cube.
    """
    frame_id: str
    stamp: float
    id: int
    scale: Tuple[float, float, float]
    color: Tuple[float, float, float, float]
    action: int
    points: np.ndarray
    colors: np.ndarray
    ns: str = MARKER_NAMESPACE
    type: int = CUBE_LIST


@dataclass(frozen=True, eq=False)
class Snapshot:
    """Everything served for one loaded map. Built once, never modified."""
    frame_id: str
    stamp: float
    binary_map: OctomapBinary
    markers: Tuple[CubeListMarker, ...]
    node_count: int
    num_occupied: int
    num_finest: int
    resolution: float


# ---------------------- Snapshot Construction ----------------------
def build_snapshot(octree, config, stamp=None):
    """
    Convert a loaded octree into its served form in a single pass over the occupied voxels.

    octree: OccupancyOctree, or any object with resolution, metric_bounds(),
            occupied_volumes(), size() and write_binary()
    config: ServerConfig (frame_id and color settings)
    stamp: build time in seconds, defaults to now
    """
    if stamp is None:
        stamp = time.time()
    resolution = octree.resolution
    bbox_min, bbox_max = octree.metric_bounds()

    centers = []
    sizes = []
    for center, size in octree.occupied_volumes():
        centers.append(center)
        sizes.append(size)
    centers = np.array(centers, dtype=float).reshape(-1, 3)

    buckets = bucketize(centers, sizes, resolution, config.color,
                        z_bounds=(bbox_min[2], bbox_max[2]), max_levels=MAX_LEVELS)

    markers = []
    for bucket in buckets:
        bucket.freeze()
        size = bucket.cube_size
        markers.append(CubeListMarker(
            frame_id=config.frame_id,
            stamp=stamp,
            id=bucket.index,
            scale=(size, size, size),
            color=config.color.fixed_color,
            action=ADD if len(bucket) > 0 else DELETE,
            points=bucket.points,
            colors=bucket.colors,
        ))

    binary_map = OctomapBinary(frame_id=config.frame_id, stamp=stamp, data=octree.write_binary())

    return Snapshot(
        frame_id=config.frame_id,
        stamp=stamp,
        binary_map=binary_map,
        markers=tuple(markers),
        node_count=octree.size(),
        num_occupied=len(centers),
        num_finest=len(buckets[0]),
        resolution=resolution,
    )


# ---------------------- Export ----------------------
def save_snapshot(snapshot, directory):
    """
    Write a snapshot for other consumers:
      octomap.bt   the binary map payload
      markers.npz  points_<i>, colors_<i>, scale_<i>, action_<i> per level, plus meta (JSON)
    Returns the directory.
    """
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    (directory / "octomap.bt").write_bytes(snapshot.binary_map.data)

    arrays = {}
    for marker in snapshot.markers:
        arrays[f"points_{marker.id}"] = marker.points
        arrays[f"colors_{marker.id}"] = marker.colors
        arrays[f"scale_{marker.id}"] = np.array(marker.scale)
        arrays[f"action_{marker.id}"] = np.array(marker.action)
    meta = {
        "frame_id": snapshot.frame_id,
        "stamp": snapshot.stamp,
        "resolution": snapshot.resolution,
        "node_count": snapshot.node_count,
        "num_occupied": snapshot.num_occupied,
        "num_finest": snapshot.num_finest,
        "levels": len(snapshot.markers),
    }
    arrays["meta"] = np.array(json.dumps(meta))
    np.savez(directory / "markers.npz", **arrays)
    logger.info("Snapshot written to %s", directory)
    return directory

import logging

import numpy as np

logger = logging.getLogger(__name__)

# Upper bound on octree depth; one bucket per possible voxel size.
MAX_LEVELS = 16


class LevelOutOfRangeError(AssertionError):
    """A voxel size does not correspond to any of the MAX_LEVELS levels."""


class LevelBucket:
    """
    All occupied voxels of one size: resolution * 2**index.
    points: (N, 3) array of cube centers, in the order they were encountered
    colors: (N, 4) array of RGBA colors parallel to points, or (0, 4) when unused
    """
    def __init__(self, index, resolution, points, colors):
        self.index = index
        self.resolution = resolution
        self.points = points
        self.colors = colors

    @property
    def cube_size(self):
        return self.resolution * 2 ** self.index

    def __len__(self):
        return len(self.points)

    def freeze(self):
        self.points.flags.writeable = False
        self.colors.flags.writeable = False
        return self


# ---------------------- Level Assignment (Vectorized) ----------------------
def level_indices(sizes, resolution, max_levels=MAX_LEVELS):
    """
    Level of each voxel size: round(log2(size / resolution)), halves rounded up.
    sizes: (N,) array of cube edge lengths
    Returns: (N,) int array
    Raises LevelOutOfRangeError if any level falls outside [0, max_levels).
    """
    sizes = np.asarray(sizes, dtype=float)
    with np.errstate(divide="ignore", invalid="ignore"):
        levels = np.floor(np.log2(sizes / resolution) + 0.5)
    bad = ~((levels >= 0) & (levels < max_levels))
    if np.any(bad):
        first = int(np.argmax(bad))
        raise LevelOutOfRangeError(
            f"voxel of size {sizes[first]} maps to level {levels[first]}, "
            f"outside [0, {max_levels}) for resolution {resolution}"
        )
    return levels.astype(int)


def level_index(size, resolution, max_levels=MAX_LEVELS):
    return int(level_indices([size], resolution, max_levels)[0])


def bucketize(centers, sizes, resolution, color_config=None, z_bounds=None, max_levels=MAX_LEVELS):
    """
    Group voxels into one LevelBucket per level.

    centers: (N, 3) array of cube centers
    sizes: (N,) array of cube edge lengths
    resolution: edge length of the finest voxels
    color_config: ColorConfig; per-point colors are only produced in height-map mode
    z_bounds: (z_min, z_max) used to normalize heights, defaults to the extent of centers
    Returns: list of max_levels LevelBucket, bucket i holding voxels of size resolution * 2**i
    """
    if resolution <= 0:
        raise ValueError(f"resolution must be positive, got {resolution}")
    centers = np.asarray(centers, dtype=float).reshape(-1, 3)
    levels = level_indices(sizes, resolution, max_levels)

    colored = color_config is not None and color_config.use_height_map
    if colored:
        if z_bounds is None:
            z_bounds = (centers[:, 2].min(), centers[:, 2].max()) if len(centers) else (0.0, 0.0)
        colors = color_config.colorize(centers[:, 2], *z_bounds)

    buckets = []
    for i in range(max_levels):
        # Boolean masks keep the encounter order inside each level.
        mask = levels == i
        points = centers[mask]
        level_colors = colors[mask] if colored else np.empty((0, 4))
        buckets.append(LevelBucket(i, resolution, points, level_colors))
        if len(points):
            logger.debug("Level %d (cube size %g): %d voxels", i, buckets[-1].cube_size, len(points))
    return buckets

"""Tests for building and exporting map snapshots."""

import json

import numpy as np
import pytest

from color_map import ColorConfig, height_color
from config import ServerConfig
from snapshot import ADD, CUBE_LIST, DELETE, MARKER_NAMESPACE, build_snapshot, save_snapshot
from voxel_buckets import MAX_LEVELS, LevelOutOfRangeError


class TestBuildSnapshot:
    """Octree to markers and binary payload."""

    def test_three_voxel_map(self, three_voxel_octree, default_config):
        snapshot = build_snapshot(three_voxel_octree, default_config, stamp=12.5)
        markers = snapshot.markers
        assert len(markers) == MAX_LEVELS

        assert markers[0].points.tolist() == [[0.0, 0.0, 0.0], [1.0, 0.0, 1.0]]
        # Heights 0 and 1 in [0, 2], scaled by the 0.8 color factor.
        np.testing.assert_allclose(markers[0].colors[0], height_color(0.0))
        np.testing.assert_allclose(markers[0].colors[1], height_color(0.4))
        np.testing.assert_allclose(markers[0].colors[0], (1.0, 0.0, 0.0, 1.0))
        np.testing.assert_allclose(markers[0].colors[1], (0.0, 1.0, 0.4, 1.0))

        assert markers[1].points.tolist() == [[0.0, 1.0, 2.0]]
        np.testing.assert_allclose(markers[1].colors[0], (0.8, 0.0, 1.0, 1.0))

        assert markers[0].action == ADD
        assert markers[1].action == ADD
        for marker in markers[2:]:
            assert marker.action == DELETE
            assert len(marker.points) == 0
            assert len(marker.colors) == 0

    def test_marker_metadata(self, three_voxel_octree):
        config = ServerConfig(frame_id="/world", color=ColorConfig.fixed((1, 0, 0, 1)))
        snapshot = build_snapshot(three_voxel_octree, config, stamp=3.0)
        for i, marker in enumerate(snapshot.markers):
            assert marker.id == i
            assert marker.frame_id == "/world"
            assert marker.stamp == 3.0
            assert marker.ns == MARKER_NAMESPACE
            assert marker.type == CUBE_LIST
            assert marker.scale == pytest.approx((0.1 * 2 ** i,) * 3)
            assert marker.color == (1.0, 0.0, 0.0, 1.0)

    def test_counts(self, three_voxel_octree, default_config):
        snapshot = build_snapshot(three_voxel_octree, default_config)
        assert snapshot.num_occupied == 3
        assert snapshot.num_finest == 2
        assert snapshot.node_count == 7
        assert snapshot.resolution == 0.1

    def test_single_enumeration(self, three_voxel_octree, default_config):
        build_snapshot(three_voxel_octree, default_config)
        assert three_voxel_octree.enumerations == 1

    def test_fixed_color_has_no_per_point_colors(self, three_voxel_octree):
        config = ServerConfig(color=ColorConfig.fixed())
        snapshot = build_snapshot(three_voxel_octree, config)
        assert [len(m.points) for m in snapshot.markers[:2]] == [2, 1]
        assert all(m.colors.shape == (0, 4) for m in snapshot.markers)

    def test_same_size_voxels(self, make_octree, default_config):
        volumes = [((float(i), 0.0, float(i % 3)), 0.4) for i in range(10)]
        snapshot = build_snapshot(make_octree(volumes, resolution=0.1), default_config)
        assert len(snapshot.markers[2].points) == 10
        for marker in snapshot.markers:
            if marker.id != 2:
                assert marker.action == DELETE
                assert len(marker.points) == 0

    def test_empty_map(self, make_octree, default_config):
        snapshot = build_snapshot(make_octree([]), default_config)
        assert snapshot.num_occupied == 0
        for marker in snapshot.markers:
            assert marker.action == DELETE
            assert marker.points.shape == (0, 3)
            assert marker.colors.shape == (0, 4)

    def test_flat_map_has_deterministic_colors(self, make_octree, default_config):
        volumes = [((0.0, 0.0, 1.0), 0.1), ((1.0, 1.0, 1.0), 0.1)]
        octree = make_octree(volumes, bounds=((0, 0, 1.0), (1, 1, 1.0)))
        colors = build_snapshot(octree, default_config).markers[0].colors
        assert np.all(np.isfinite(colors))
        np.testing.assert_allclose(colors[0], height_color(0.4))
        np.testing.assert_allclose(colors[1], height_color(0.4))

    def test_binary_map_tagged_with_frame(self, three_voxel_octree):
        config = ServerConfig(frame_id="odom")
        snapshot = build_snapshot(three_voxel_octree, config, stamp=1.0)
        assert snapshot.binary_map.frame_id == "odom"
        assert snapshot.binary_map.stamp == 1.0
        assert snapshot.binary_map.data == three_voxel_octree.data

    def test_markers_are_read_only(self, three_voxel_octree, default_config):
        snapshot = build_snapshot(three_voxel_octree, default_config)
        with pytest.raises(ValueError):
            snapshot.markers[0].points[0, 0] = 5.0
        with pytest.raises(AttributeError):
            snapshot.markers[0].action = DELETE

    def test_voxel_outside_levels_aborts(self, make_octree, default_config):
        octree = make_octree([((0, 0, 0), 0.1), ((1, 1, 1), 0.1 * 2 ** MAX_LEVELS)])
        with pytest.raises(LevelOutOfRangeError):
            build_snapshot(octree, default_config)


class TestSaveSnapshot:
    """Writing a snapshot to disk for other consumers."""

    def test_files_written(self, three_voxel_octree, default_config, tmp_path):
        snapshot = build_snapshot(three_voxel_octree, default_config, stamp=2.0)
        out = save_snapshot(snapshot, tmp_path / "out")

        assert (out / "octomap.bt").read_bytes() == three_voxel_octree.data
        with np.load(out / "markers.npz") as data:
            np.testing.assert_array_equal(data["points_0"], snapshot.markers[0].points)
            np.testing.assert_array_equal(data["colors_1"], snapshot.markers[1].colors)
            assert int(data["action_0"]) == ADD
            assert int(data["action_5"]) == DELETE
            np.testing.assert_allclose(data["scale_3"], [0.8, 0.8, 0.8])
            meta = json.loads(str(data["meta"]))
        assert meta["frame_id"] == "/map"
        assert meta["num_occupied"] == 3
        assert meta["levels"] == MAX_LEVELS

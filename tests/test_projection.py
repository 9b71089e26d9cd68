"""
Test Suite: Projection Engine
=============================
Unit tests for view-mode projections and packet arcs.

Tests:
- Terrain baseline and its shared modes
- Vortex spiral and time continuity
- Cluster layout
- Packet interpolation and opacity
- Terrain mesh connectors
"""

import numpy as np
import pytest
import sys
from pathlib import Path

# Add repo root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from neural_landscape.projection import (
    ViewMode,
    NodeTier,
    NODE_TIER_COLORS,
    project_node,
    project_field,
    project_packet,
    packet_opacity,
    mesh_connectors,
    node_tier,
    node_color
)
from neural_landscape.projection.engine import VORTEX_OMEGA, vortex_angle
from neural_landscape.telemetry import Packet


def packet_at(progress, start=(0, 0), end=(5, 0)):
    return Packet(
        id="TEST01", value=1.0,
        start_x=start[0], start_y=start[1],
        end_x=end[0], end_y=end[1],
        progress=progress, color="#60a5fa", hash="0x" + "f" * 32
    )


@pytest.fixture
def field():
    return np.random.default_rng(5).uniform(5, 120, size=400)


class TestTerrainProjection:
    """Grid with height field"""

    def test_origin_node(self):
        assert project_node(0, 52.0, ViewMode.TERRAIN, 0.0, 400, 20) == (-400.0, -400.0, 52.0)

    def test_cell_size_sets_pitch(self):
        assert project_node(1, 10.0, ViewMode.TERRAIN, cell_size=50.0) == (-350.0, -400.0, 10.0)
        assert project_node(21, 10.0, ViewMode.TERRAIN, cell_size=50.0) == (-350.0, -350.0, 10.0)

    def test_grid_cell_mapping(self):
        # Index 43 -> col 3, row 2
        x, y, z = project_node(43, 10.0, ViewMode.TERRAIN, 0.0, 400, 20)
        assert (x, y, z) == (3 * 40 - 400, 2 * 40 - 400, 10.0)

    @pytest.mark.parametrize("mode", [ViewMode.NETWORK, ViewMode.FLOW])
    def test_shared_baseline_modes(self, mode, field):
        np.testing.assert_array_equal(
            project_field(field, mode, 1234.0),
            project_field(field, ViewMode.TERRAIN, 1234.0)
        )

    def test_terrain_ignores_time(self):
        assert project_node(7, 30.0, ViewMode.TERRAIN, 0.0) == project_node(7, 30.0, ViewMode.TERRAIN, 9e6)


class TestVortexProjection:
    """Polar spiral"""

    def test_first_node_at_time_zero(self):
        x, y, z = project_node(0, 50.0, ViewMode.VORTEX, 0.0, 400, 20)
        assert x == pytest.approx(10.0)
        assert y == pytest.approx(0.0)
        assert z == pytest.approx(20.0)

    def test_radius_and_height_formula(self):
        index, value = 100, 80.0
        x, y, z = project_node(index, value, ViewMode.VORTEX, 500.0, 400, 20)
        assert np.hypot(x, y) == pytest.approx(10 + 0.9 * index)
        assert z == pytest.approx(0.4 * value + 0.05 * index)

        angle = (index / 400) * 15 * np.pi + 500.0 * VORTEX_OMEGA
        assert np.arctan2(y, x) == pytest.approx(np.arctan2(np.sin(angle), np.cos(angle)))

    @pytest.mark.parametrize("index", [0, 37, 199, 399])
    def test_continuous_in_time(self, index):
        """Positions at t and t + eps differ by at most radius * eps * omega"""
        t, eps = 10_000.0, 16.0
        assert vortex_angle(index, 400, t + eps) - vortex_angle(index, 400, t) == pytest.approx(eps * VORTEX_OMEGA)

        a = np.array(project_node(index, 60.0, ViewMode.VORTEX, t, 400, 20))
        b = np.array(project_node(index, 60.0, ViewMode.VORTEX, t + eps, 400, 20))
        radius = 10 + 0.9 * index
        assert np.linalg.norm(b - a) <= radius * eps * VORTEX_OMEGA + 1e-9
        assert a[2] == b[2]


class TestClusterProjection:
    """Super-cluster layout"""

    def test_cluster_formula(self):
        # Index 245 -> col 5, row 12, cluster 2, 245 % 4 == 1
        x, y, z = project_node(245, 10.0, ViewMode.CLUSTER, 0.0, 400, 20)
        assert x == pytest.approx(2 * 200 - 300 + 5 * 12)
        assert y == pytest.approx(1 * 200 - 300 + 2 * 12)
        assert z == pytest.approx(18.0)

    def test_first_cluster_origin(self):
        assert project_node(0, 0.0, ViewMode.CLUSTER) == (-300.0, -300.0, 0.0)


class TestFieldProjection:
    """Vectorised projection agrees with the scalar form"""

    @pytest.mark.parametrize("mode", list(ViewMode))
    def test_matches_scalar_projection(self, mode, field):
        positions = project_field(field, mode, 777.0, 20)
        assert positions.shape == (400, 3)
        for i in (0, 1, 19, 20, 123, 399):
            np.testing.assert_allclose(
                positions[i],
                project_node(i, field[i], mode, 777.0, 400, 20),
                atol=1e-9
            )

    def test_node_count_defaults_to_full_grid(self):
        small = np.random.default_rng(8).uniform(5, 120, size=100)
        positions = project_field(small, ViewMode.VORTEX, 500.0, 10)
        for i in (0, 37, 99):
            np.testing.assert_allclose(
                positions[i],
                project_node(i, small[i], ViewMode.VORTEX, 500.0, grid_size=10),
                atol=1e-9
            )

    @pytest.mark.parametrize("mode", list(ViewMode))
    def test_cell_size_matches_scalar_projection(self, mode, field):
        positions = project_field(field, mode, 777.0, 20, cell_size=50.0)
        for i in (1, 20, 399):
            np.testing.assert_allclose(
                positions[i],
                project_node(i, field[i], mode, 777.0, 400, 20, cell_size=50.0),
                atol=1e-9
            )

    def test_unknown_mode_rejected(self):
        with pytest.raises(ValueError):
            project_node(0, 1.0, "SPHERE")
        with pytest.raises(ValueError):
            project_field(np.ones(4), "SPHERE", grid_size=2)

    def test_parse_mode_names(self):
        assert ViewMode.parse("vortex") is ViewMode.VORTEX
        assert ViewMode.parse(" Cluster ") is ViewMode.CLUSTER
        with pytest.raises(ValueError):
            ViewMode.parse("DIVE")


class TestPacketProjection:
    """Packet arcs and fade"""

    def test_midpoint_scenario(self):
        x, y, z = project_packet(packet_at(0.5))
        assert x == pytest.approx(100.0)
        assert y == pytest.approx(0.0)
        assert z == pytest.approx(160.0)

    def test_endpoints_sit_at_base_height(self):
        start = project_packet(packet_at(0.0, start=(2, 3), end=(7, 9)))
        assert start == pytest.approx((80.0, 120.0, 40.0))

        near_end = project_packet(packet_at(0.999999, start=(2, 3), end=(7, 9)))
        assert near_end == pytest.approx((280.0, 360.0, 40.0), abs=1e-3)

    def test_cell_size_scales_packet_path(self):
        x, y, z = project_packet(packet_at(0.5), cell_size=50.0)
        assert (x, y) == pytest.approx((125.0, 0.0))
        assert z == pytest.approx(160.0)

    def test_arc_peaks_at_midpoint(self):
        heights = [project_packet(packet_at(t))[2] for t in np.linspace(0, 0.98, 50)]
        assert max(heights) <= 160.0 + 1e-9
        assert heights[25] == pytest.approx(160.0)

    def test_opacity(self):
        assert packet_opacity(0.5) == 1.0
        assert packet_opacity(0.0) == 0.0
        assert packet_opacity(0.25) == pytest.approx(0.5)
        assert packet_opacity(0.999) == pytest.approx(0.002)


class TestMeshConnectors:
    """Terrain mesh decoration"""

    def test_segment_count_skips_last_column_and_row(self, field):
        segments = mesh_connectors(field, 20)
        assert len(segments) == 19 * 19
        indices = {s.index for s in segments}
        assert 19 not in indices      # Last column
        assert 380 not in indices     # Last row
        assert 0 in indices

    def test_tilt_follows_height_difference(self):
        values = np.full(400, 50.0)
        values[21] = 60.0
        values[22] = 40.0
        by_index = {s.index: s for s in mesh_connectors(values, 20)}

        seg = by_index[21]
        assert seg.tilt_deg == pytest.approx((40.0 - 60.0) * 0.6)
        assert (seg.left, seg.top, seg.z) == (40.0, 40.0, 60.0)
        assert by_index[20].tilt_deg == pytest.approx(6.0)
        assert by_index[0].tilt_deg == 0.0

    def test_cell_size_sets_segment_geometry(self, field):
        seg = mesh_connectors(field, 20, cell_size=50.0)[21]
        assert seg.index == 22
        assert (seg.left, seg.top, seg.width) == (100.0, 50.0, 50.0)


class TestNodeTier:

    def test_tiers(self):
        assert node_tier(120.0) is NodeTier.HOT
        assert node_tier(100.0) is NodeTier.ACTIVE
        assert node_tier(50.5) is NodeTier.ACTIVE
        assert node_tier(50.0) is NodeTier.IDLE

    def test_colors_follow_tiers(self):
        assert node_color(120.0) == NODE_TIER_COLORS[NodeTier.HOT]
        assert node_color(75.0) == NODE_TIER_COLORS[NodeTier.ACTIVE]
        assert node_color(5.0) == NODE_TIER_COLORS[NodeTier.IDLE]

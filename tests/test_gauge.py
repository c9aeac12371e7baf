import math

import numpy as np
import pytest

from termspeed import gauge
from termspeed.gauge import DUAL_DIAL_HALF, SINGLE_DIAL


def cell(grid, x, y):
    return grid[y][x]


def test_rasterize_is_pure():
    first = gauge.rasterize(42.5)
    second = gauge.rasterize(42.5)
    assert np.array_equal(first, second)
    assert gauge.render_speedometer(42.5) == gauge.render_speedometer(42.5)
    assert gauge.render_dual_speedometer(10.0, 70.0) == gauge.render_dual_speedometer(10.0, 70.0)


def test_grid_shape():
    assert gauge.rasterize(0).shape == (35, 50)
    assert gauge.rasterize(0, DUAL_DIAL_HALF).shape == (35, 45)


def test_needle_angle_endpoints():
    assert gauge.needle_angle(0) == pytest.approx(240.0)
    assert gauge.needle_angle(100) == pytest.approx(330.0)
    assert gauge.needle_angle(50) == pytest.approx(105.0)


@pytest.mark.parametrize("value", [0, 100])
def test_needle_endpoint_within_drawable_band(value):
    end_x, end_y = gauge.needle_endpoint(value)
    distance = math.hypot(end_x - SINGLE_DIAL.center_x, end_y - SINGLE_DIAL.center_y)
    assert distance <= SINGLE_DIAL.inner_radius - 3 + 1e-9


def test_rims_and_hub():
    grid = gauge.rasterize(50)
    assert cell(grid, 43, 20) == gauge.OUTER_RIM
    assert cell(grid, 39, 20) == gauge.INNER_RIM
    assert cell(grid, 25, 20) == gauge.HUB
    assert cell(grid, 26, 20) == gauge.HUB


def test_gap_at_bottom_is_not_drawn():
    grid = gauge.rasterize(50)
    # Straight down from the centre, on the inner rim radius
    assert cell(grid, 25, 34) == gauge.BLANK


@pytest.mark.parametrize("value", [0, 25, 50, 75, 100])
def test_needle_follows_value(value):
    grid = gauge.rasterize(value)
    rad = math.radians(gauge.needle_angle(value))
    x = round(SINGLE_DIAL.center_x + 7 * math.cos(rad))
    y = round(SINGLE_DIAL.center_y - 7 * math.sin(rad))
    assert cell(grid, x, y) == gauge.NEEDLE


def test_needle_moves_away():
    assert cell(gauge.rasterize(50), 23, 12) == gauge.NEEDLE
    assert cell(gauge.rasterize(0), 23, 12) != gauge.NEEDLE


def test_decorative_band_sectors():
    grid = gauge.rasterize(50)
    assert cell(grid, 15, 20) == '▓'
    assert cell(grid, 35, 20) == '░'
    assert cell(grid, 17, 26) == '▒'
    # Top sector of the band is left open
    assert cell(gauge.rasterize(0), 25, 10) == gauge.BLANK


def test_single_dial_ticks_and_labels():
    grid = gauge.rasterize(0)
    assert cell(grid, 11, 6) == gauge.TICK_MARK
    assert cell(grid, 10, 5) == '0'
    assert cell(grid, 40, 5) == 'X'


def test_dual_dial_has_no_ticks():
    grid = gauge.rasterize(0, DUAL_DIAL_HALF)
    assert not np.isin(grid, list('0123456789X' + gauge.TICK_MARK)).any()


def test_single_speedometer_layout():
    lines = gauge.render_speedometer(12.0).split('\n')
    rows = lines[3:3 + SINGLE_DIAL.rows]
    assert all(len(row) == 5 + SINGLE_DIAL.cols for row in rows)
    assert 'termspeed' in lines[1]
    assert lines[3 + SINGLE_DIAL.rows].strip().startswith('0   10')
    assert 'Speed: 12.0 Mbps' in lines[5 + SINGLE_DIAL.rows]


def test_dual_speedometer_layout():
    lines = gauge.render_dual_speedometer(10.0, 90.0).split('\n')
    assert 'DOWNLOAD' in lines[2] and 'UPLOAD' in lines[2]
    rows = lines[4:4 + DUAL_DIAL_HALF.rows]
    assert all(len(row) == 5 + 2 * DUAL_DIAL_HALF.cols for row in rows)
    readout = lines[-2]
    assert 'Download: 10.0 Mbps' in readout
    assert 'Upload: 90.0 Mbps' in readout
    assert gauge.COLORS['cyan'] in readout
    assert gauge.COLORS['red'] in readout


def test_dual_halves_match_single_rasterization():
    grid = np.hstack([gauge.rasterize(30.0, DUAL_DIAL_HALF), gauge.rasterize(60.0, DUAL_DIAL_HALF)])
    lines = gauge.render_dual_speedometer(30.0, 60.0).split('\n')
    assert lines[4:4 + DUAL_DIAL_HALF.rows] == ['     ' + row for row in gauge.grid_lines(grid)]


@pytest.mark.parametrize("value,color", [
    (0.0, 'cyan'),
    (29.9, 'cyan'),
    (30.0, 'green'),
    (59.9, 'green'),
    (60.0, 'yellow'),
    (79.9, 'yellow'),
    (80.0, 'red'),
    (140.0, 'red'),
])
def test_speed_color_tiers(value, color):
    assert gauge.speed_color(value) == gauge.COLORS[color]

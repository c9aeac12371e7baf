"""
Polar dial rasterizer.

The dial is computed over the whole cell grid at once: every cell gets a
distance and an angle from the dial centre, and glyph layers are stamped on
in priority order (rims, ticks, needle, hub, decorative band). Rendering is
a pure function of the value and the geometry.
"""

import math
from dataclasses import dataclass
from typing import Iterable

import numpy as np

COLORS = {
    'reset': '\033[0m',
    'dim': '\033[2m',
    'bold': '\033[1m',
    'red': '\033[91m',
    'green': '\033[92m',
    'yellow': '\033[93m',
    'blue': '\033[94m',
    'cyan': '\033[96m',
    'white': '\033[97m',
    'title': '\033[97;1;44m',
}

# Readout colour tiers, first threshold the value is below wins
SPEED_COLORS = [
    (30.0, COLORS['cyan']),
    (60.0, COLORS['green']),
    (80.0, COLORS['yellow']),
]
TOP_SPEED_COLOR = COLORS['red']

MAX_SPEED = 100.0
SWEEP_DEGREES = 270.0
ZERO_ANGLE = 240.0

# The arc is not drawn strictly inside this wedge (bottom of the dial)
ARC_GAP = (225.0, 315.0)

HUB_RADIUS = 3.0
NEEDLE_INSET = 3.0
NEEDLE_WIDTH = 1.2
BAND_RADII = (8.0, 12.0)

TICK_ANGLES = np.array([135, 162, 189, 216, 243, 270, 297, 324, 351, 18, 45], dtype=float)
TICK_LABELS = np.array(list('0123456789X'))
TICK_TOLERANCE = 4.0

BLANK = ' '
OUTER_RIM = '█'
INNER_RIM = '░'
TICK_MARK = '│'
NEEDLE = '━'
HUB = '●'

INDENT = ' ' * 5
SCALE = '0   10   20   30   40   50   60   70   80   90  100'


@dataclass(frozen=True)
class DialGeometry:
    cols: int
    rows: int
    center_x: float
    center_y: float
    outer_radius: float
    inner_radius: float
    ticks: bool = False

    @property
    def needle_length(self) -> float:
        return self.inner_radius - NEEDLE_INSET


SINGLE_DIAL = DialGeometry(cols=50, rows=35, center_x=25.0, center_y=20.0,
                           outer_radius=18.0, inner_radius=14.0, ticks=True)
DUAL_DIAL_HALF = DialGeometry(cols=45, rows=35, center_x=22.0, center_y=18.0,
                              outer_radius=18.0, inner_radius=14.0)


def needle_angle(value: float) -> float:
    """Needle direction in degrees, 0 = +x axis, counter-clockwise"""
    return (ZERO_ANGLE - (value / MAX_SPEED) * SWEEP_DEGREES) % 360.0


def needle_endpoint(value: float, geometry: DialGeometry = SINGLE_DIAL):
    rad = math.radians(needle_angle(value))
    length = geometry.needle_length
    return (geometry.center_x + length * math.cos(rad),
            geometry.center_y - length * math.sin(rad))


def polar_field(geometry: DialGeometry):
    """Per-cell (dx, dy, distance, angle) arrays, shape (rows, cols)"""
    x, y = np.meshgrid(np.arange(geometry.cols, dtype=float),
                       np.arange(geometry.rows, dtype=float))
    dx = x - geometry.center_x
    dy = y - geometry.center_y
    distance = np.hypot(dx, dy)
    # Screen y grows downwards, so flip it to get counter-clockwise angles
    angle = np.mod(np.degrees(np.arctan2(-dy, dx)), 360.0)
    return dx, dy, distance, angle


def _tick_layers(distance, angle, in_arc, outer):
    diff = np.abs(angle[..., np.newaxis] - TICK_ANGLES)
    diff = np.where(diff > 180.0, 360.0 - diff, diff)
    nearest = diff.argmin(axis=-1)
    near_tick = diff.min(axis=-1) < TICK_TOLERANCE

    band = in_arc & near_tick & (distance >= outer + 1.5) & (distance <= outer + 4.0)
    marks = band & (distance <= outer + 2.5)
    labels = band & (distance >= outer + 2.8)
    return [(marks, TICK_MARK), (labels, TICK_LABELS[nearest])]


def _needle_mask(value, dx, dy, distance, geometry):
    length = geometry.needle_length
    if length <= HUB_RADIUS:
        return np.zeros(distance.shape, dtype=bool)

    rad = math.radians(needle_angle(value))
    end_dx = length * math.cos(rad)
    end_dy = -length * math.sin(rad)

    line_distance = np.abs(end_dy * dx - end_dx * dy) / length
    forward = (dx * end_dx + dy * end_dy) > 0
    return ((distance >= HUB_RADIUS) & (distance <= length) &
            (line_distance < NEEDLE_WIDTH) & forward)


def _band_layers(distance, angle, in_arc):
    band = in_arc & (distance >= BAND_RADII[0]) & (distance <= BAND_RADII[1])
    return [
        (band & (angle >= 135.0) & (angle <= 216.0), '▓'),
        (band & (angle >= 216.0) & (angle <= 297.0), '▒'),
        (band & ((angle >= 297.0) | (angle <= 18.0)), '░'),
        (band & (angle >= 18.0) & (angle <= 45.0), '▓'),
    ]


def rasterize(value: float, geometry: DialGeometry = SINGLE_DIAL) -> np.ndarray:
    """Glyph grid of shape (rows, cols) for one dial showing `value`"""
    dx, dy, distance, angle = polar_field(geometry)
    in_arc = ~((angle > ARC_GAP[0]) & (angle < ARC_GAP[1]))
    outer = geometry.outer_radius
    inner = geometry.inner_radius

    layers = [
        ((distance >= outer - 1.0) & (distance <= outer + 1.0) & in_arc, OUTER_RIM),
        ((distance >= inner - 0.8) & (distance <= inner + 0.8) & in_arc, INNER_RIM),
    ]
    if geometry.ticks:
        layers.extend(_tick_layers(distance, angle, in_arc, outer))
    layers.append((_needle_mask(value, dx, dy, distance, geometry), NEEDLE))
    layers.append((distance <= HUB_RADIUS, HUB))
    layers.extend(_band_layers(distance, angle, in_arc))

    grid = np.full(distance.shape, BLANK, dtype='<U1')
    free = np.ones(distance.shape, dtype=bool)
    for mask, glyph in layers:
        hit = mask & free
        if isinstance(glyph, np.ndarray):
            grid[hit] = glyph[hit]
        else:
            grid[hit] = glyph
        free &= ~hit
    return grid


def grid_lines(grid: np.ndarray):
    return [''.join(row) for row in grid]


def speed_color(value: float) -> str:
    for threshold, color in SPEED_COLORS:
        if value < threshold:
            return color
    return TOP_SPEED_COLOR


def readout(label: str, value: float) -> str:
    return f"{COLORS['bold']}{speed_color(value)}{label}: {value:.1f} Mbps{COLORS['reset']}"


def _box(width, *lines):
    rows = ['╔' + '═' * width + '╗']
    rows.extend('║' + line + '║' for line in lines)
    rows.append('╚' + '═' * width + '╝')
    return [INDENT + row for row in rows]


def render_speedometer(value: float) -> str:
    """Single dial with tick labels, used before the transfer phases"""
    width = SINGLE_DIAL.cols - 3
    lines = _box(width, 'termspeed'.center(width))
    lines.extend(INDENT + row for row in grid_lines(rasterize(value, SINGLE_DIAL)))
    lines.append(INDENT + SCALE)
    lines.append('Mbps'.center(2 * len(INDENT) + len(SCALE)).rstrip())
    lines.append(INDENT + readout('Speed', value))
    return '\n'.join(lines) + '\n'


def render_dual_speedometer(download: float, upload: float) -> str:
    """Download and upload dials side by side"""
    half = DUAL_DIAL_HALF.cols
    width = 2 * half + 5
    left = width // 2
    lines = _box(width,
                 'termspeed'.center(width),
                 'DOWNLOAD'.center(left) + 'UPLOAD'.center(width - left))
    grid = np.hstack([rasterize(download, DUAL_DIAL_HALF),
                      rasterize(upload, DUAL_DIAL_HALF)])
    lines.extend(INDENT + row for row in grid_lines(grid))

    scale_row = (SCALE + ' ' * 5 + SCALE)
    lines.append(INDENT + scale_row)
    units = 'Mbps'.center(len(SCALE)) + ' ' * 5 + 'Mbps'.center(len(SCALE))
    lines.append((INDENT + units).rstrip())
    download_text = readout('Download', download)
    upload_text = readout('Upload', upload)
    lines.append(INDENT + download_text + ' ' * 20 + upload_text)
    return '\n'.join(lines) + '\n'


def render_history(samples: Iterable[float], height: int = 8, width: int = 50) -> str:
    """Block chart of recent samples, empty with fewer than two samples"""
    samples = np.asarray(list(samples), dtype=float)
    if samples.size < 2 or height < 2 or width < 1:
        return ""

    max_speed = max(1.0, float(samples.max()))
    window = samples[-width:]
    thresholds = np.arange(height - 1, -1, -1, dtype=float) / (height - 1) * max_speed
    filled = window[np.newaxis, :] >= thresholds[:, np.newaxis]

    rows = [''.join('█' if cell else ' ' for cell in row) for row in filled]
    return '\nSpeed History:\n' + '\n'.join(rows) + '\n'

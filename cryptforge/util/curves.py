"""Curve helpers for shaping paths: Bezier, Catmull-Rom and line rasterizing."""

from __future__ import annotations

from collections.abc import Sequence

from cryptforge.types import FloatPos, WorldTilePos


def quadratic_bezier(
    p0: FloatPos, p1: FloatPos, p2: FloatPos, t: float
) -> FloatPos:
    """Point at parameter t on a quadratic Bezier curve."""
    mt = 1.0 - t
    return (
        mt * mt * p0[0] + 2 * mt * t * p1[0] + t * t * p2[0],
        mt * mt * p0[1] + 2 * mt * t * p1[1] + t * t * p2[1],
    )


def cubic_bezier(
    p0: FloatPos, p1: FloatPos, p2: FloatPos, p3: FloatPos, t: float
) -> FloatPos:
    """Point at parameter t on a cubic Bezier curve."""
    mt = 1.0 - t
    a = mt * mt * mt
    b = 3 * mt * mt * t
    c = 3 * mt * t * t
    d = t * t * t
    return (
        a * p0[0] + b * p1[0] + c * p2[0] + d * p3[0],
        a * p0[1] + b * p1[1] + c * p2[1] + d * p3[1],
    )


def sample_bezier(control: Sequence[FloatPos], steps: int) -> list[FloatPos]:
    """Sample a quadratic (3 points) or cubic (4 points) Bezier curve.

    Returns ``steps + 1`` points including both endpoints.

    Raises:
        ValueError: If the control polygon is not 3 or 4 points long.
    """
    steps = max(1, steps)
    if len(control) == 3:
        return [quadratic_bezier(*control, i / steps) for i in range(steps + 1)]
    if len(control) == 4:
        return [cubic_bezier(*control, i / steps) for i in range(steps + 1)]
    raise ValueError(f"Bezier curves need 3 or 4 control points, got {len(control)}")


def catmull_rom(
    points: Sequence[FloatPos], tension: float = 0.5, segments: int = 10
) -> list[FloatPos]:
    """Interpolate a Catmull-Rom spline through every control point.

    The first and last points are duplicated as phantom neighbours so the
    curve passes through both ends. A two-point input degrades to linear
    interpolation with ``segments + 1`` points.

    Args:
        points: Control points the curve must pass through.
        tension: 0.5 gives the standard centripetal-looking curve.
        segments: Samples per span between consecutive control points.

    Returns:
        Interpolated points, ending exactly on the last control point.
    """
    if len(points) < 2:
        return list(points)
    segments = max(1, segments)

    if len(points) == 2:
        (x0, y0), (x1, y1) = points
        return [
            (x0 + (x1 - x0) * i / segments, y0 + (y1 - y0) * i / segments)
            for i in range(segments + 1)
        ]

    padded = [points[0], *points, points[-1]]
    result: list[FloatPos] = []
    for i in range(1, len(padded) - 2):
        p0, p1, p2, p3 = padded[i - 1], padded[i], padded[i + 1], padded[i + 2]
        for step in range(segments):
            t = step / segments
            t2 = t * t
            t3 = t2 * t
            result.append(
                (
                    tension
                    * (
                        2 * p1[0]
                        + (-p0[0] + p2[0]) * t
                        + (2 * p0[0] - 5 * p1[0] + 4 * p2[0] - p3[0]) * t2
                        + (-p0[0] + 3 * p1[0] - 3 * p2[0] + p3[0]) * t3
                    ),
                    tension
                    * (
                        2 * p1[1]
                        + (-p0[1] + p2[1]) * t
                        + (2 * p0[1] - 5 * p1[1] + 4 * p2[1] - p3[1]) * t2
                        + (-p0[1] + 3 * p1[1] - 3 * p2[1] + p3[1]) * t3
                    ),
                )
            )
    result.append(points[-1])
    return result


def bresenham_line(start: WorldTilePos, end: WorldTilePos) -> list[WorldTilePos]:
    """All grid cells on the line from start to end, inclusive."""
    x0, y0 = start
    x1, y1 = end
    dx = abs(x1 - x0)
    dy = -abs(y1 - y0)
    sx = 1 if x0 < x1 else -1
    sy = 1 if y0 < y1 else -1
    err = dx + dy

    cells: list[WorldTilePos] = []
    while True:
        cells.append((x0, y0))
        if x0 == x1 and y0 == y1:
            return cells
        e2 = 2 * err
        if e2 >= dy:
            err += dy
            x0 += sx
        if e2 <= dx:
            err += dx
            y0 += sy

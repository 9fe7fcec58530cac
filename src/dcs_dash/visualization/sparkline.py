"""Sparkline rendering utilities."""

from __future__ import annotations

import math
from typing import Iterable, Sequence

DEFAULT_SPARKLINE_BLOCKS: Sequence[str] = "▁▂▃▄▅▆▇█"
ASCII_SPARKLINE_BLOCKS: Sequence[str] = "_.-=+*#"

__all__ = ["ASCII_SPARKLINE_BLOCKS", "DEFAULT_SPARKLINE_BLOCKS", "render_sparkline"]


def render_sparkline(
    values: Iterable[float],
    *,
    width: int | None = None,
    floor: float | None = None,
    blocks: Sequence[str] = DEFAULT_SPARKLINE_BLOCKS,
) -> str:
    """Render ``values`` as a block-character sparkline.

    Parameters
    ----------
    values:
        Samples ordered oldest first.
    width:
        Optional maximum number of columns.  The most recent ``width``
        samples are kept.
    floor:
        Baseline of the vertical scale.  ``None`` scales between the series
        minimum and maximum; a number scales from that baseline to the
        maximum and renders anything below it on the lowest block.
    blocks:
        Sequence of characters representing increasing magnitudes.
    """

    data = [float(value) for value in values if math.isfinite(value)]
    if width is not None:
        if width <= 0:
            return ""
        data = data[-width:]
    palette = tuple(blocks)
    if not data or not palette:
        return ""

    minimum = min(data) if floor is None else float(floor)
    maximum = max(data)
    span = maximum - minimum
    buckets = len(palette) - 1
    if span <= 0 or not math.isfinite(span) or math.isclose(maximum, minimum) or buckets <= 0:
        return palette[0] * len(data)

    rendered: list[str] = []
    for value in data:
        ratio = (value - minimum) / span
        index = int(round(ratio * buckets))
        rendered.append(palette[max(0, min(buckets, index))])
    return "".join(rendered)

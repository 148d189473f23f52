"""Palette extraction: median cut, k-means and frequency ranking.

Every extractor works on opaque pixels only (alpha != 0). Median cut and
k-means take the full pixel population, duplicates included, so dominant
colours weigh more in box means and centroids. When the image holds no more
distinct colours than requested, all three return those colours unchanged.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from pixelpad.buffer import Color, PixelBuffer, round_half_up
from pixelpad.logging_setup import get_logger
from pixelpad.quantize.nearest import rgba_distance


ALGORITHMS = ("median-cut", "k-means", "frequency")
KMEANS_MAX_ITERATIONS = 20

logger = get_logger(__name__)


def extract_colors(buffer: PixelBuffer) -> List[Color]:
    return [color for color in buffer.pixels() if color[3] != 0]


def count_colors(buffer: PixelBuffer) -> Dict[Color, int]:
    counts: Dict[Color, int] = {}
    for color in buffer.pixels():
        if color[3] == 0:
            continue
        counts[color] = counts.get(color, 0) + 1
    return counts


def count_unique_colors(buffer: PixelBuffer) -> int:
    return len(count_colors(buffer))


def _unique(colors: Sequence[Color]) -> List[Color]:
    return list(dict.fromkeys(colors))


def _mean_color(colors: Sequence[Color]) -> Color:
    n = len(colors)
    return tuple(round_half_up(sum(c[ch] for c in colors) / n) for ch in range(4))  # type: ignore[return-value]


def median_cut(colors: Sequence[Color], target: int) -> List[Color]:
    if not colors:
        return []
    unique = _unique(colors)
    if len(unique) <= target:
        return unique

    boxes: List[List[Color]] = [list(colors)]
    while len(boxes) < target:
        best_range = -1
        best_box = 0
        best_channel = 0
        for index, box in enumerate(boxes):
            if len(box) <= 1:
                continue
            for channel in range(3):
                values = [c[channel] for c in box]
                spread = max(values) - min(values)
                if spread > best_range:
                    best_range = spread
                    best_box = index
                    best_channel = channel

        # Every remaining box is a single colour.
        if best_range <= 0:
            break

        box = sorted(boxes[best_box], key=lambda c: c[best_channel])
        median = len(box) // 2
        boxes[best_box:best_box + 1] = [box[:median], box[median:]]

    logger.debug("median cut produced %d boxes for target %d", len(boxes), target)
    return [_mean_color(box) for box in boxes if box]


def _seed_centroids(colors: Sequence[Color], target: int, rng: random.Random) -> List[Color]:
    centroids = [colors[rng.randrange(len(colors))]]
    # Running min distance to the chosen centroids, updated per new centroid.
    nearest = [rgba_distance(color, centroids[0]) for color in colors]
    while len(centroids) < target:
        best_index = 0
        best_dist = -1
        for index, dist in enumerate(nearest):
            if dist > best_dist:
                best_dist = dist
                best_index = index
        chosen = colors[best_index]
        centroids.append(chosen)
        for index, color in enumerate(colors):
            dist = rgba_distance(color, chosen)
            if dist < nearest[index]:
                nearest[index] = dist
    return centroids


def _nearest_centroid(color: Color, centroids: Sequence[Color]) -> int:
    best_index = 0
    best_dist = rgba_distance(color, centroids[0])
    for index in range(1, len(centroids)):
        dist = rgba_distance(color, centroids[index])
        if dist < best_dist:
            best_dist = dist
            best_index = index
    return best_index


def k_means(
    colors: Sequence[Color],
    target: int,
    *,
    max_iterations: int = KMEANS_MAX_ITERATIONS,
    rng: Optional[random.Random] = None,
) -> List[Color]:
    """Cluster colours into ``target`` centroids.

    Seeding is farthest-point: one random pick from ``rng`` then repeatedly the
    colour farthest from every centroid so far. Refinement stops after
    ``max_iterations`` passes or once no centroid's RGB moves. A cluster that
    ends up empty keeps its previous centroid.
    """
    if not colors:
        return []
    unique = _unique(colors)
    if len(unique) <= target:
        return unique

    rng = rng or random.Random()
    centroids = _seed_centroids(colors, target, rng)

    iterations = 0
    for _ in range(max_iterations):
        iterations += 1
        clusters: List[List[Color]] = [[] for _ in centroids]
        for color in colors:
            clusters[_nearest_centroid(color, centroids)].append(color)

        changed = False
        for index, members in enumerate(clusters):
            if not members:
                continue
            updated = _mean_color(members)
            if updated[:3] != centroids[index][:3]:
                changed = True
            centroids[index] = updated
        if not changed:
            break

    logger.debug("k-means settled after %d iterations for target %d", iterations, target)
    return centroids


def frequency_based(counts: Dict[Color, int], target: int) -> List[Color]:
    # sorted() is stable, so equal counts keep first-seen order.
    ranked = sorted(counts.items(), key=lambda item: -item[1])
    return [color for color, _ in ranked[:target]]


@dataclass(frozen=True)
class ReducerOptions:
    color_count: int = 16
    algorithm: str = "median-cut"
    dithering: bool = False

    def __post_init__(self) -> None:
        if self.algorithm not in ALGORITHMS:
            raise ValueError(f"Unknown palette algorithm: {self.algorithm}")


def extract_palette(
    buffer: PixelBuffer,
    options: ReducerOptions,
    *,
    rng: Optional[random.Random] = None,
) -> List[Color]:
    if options.algorithm == "frequency":
        return frequency_based(count_colors(buffer), options.color_count)
    colors = extract_colors(buffer)
    if options.algorithm == "median-cut":
        return median_cut(colors, options.color_count)
    return k_means(colors, options.color_count, rng=rng)

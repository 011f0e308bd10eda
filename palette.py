import logging
from typing import Iterator, NamedTuple

from errors import ConfigError
from image import Color, Colors
from quantization import DEFAULT_ITERATIONS, image_samples, kmeans, round_centroids

logger = logging.getLogger(__name__)

MIN_COLORS = 4
MAX_COLORS = 256


class Palette(NamedTuple):
    colors: list[Color]
    indices: list[int]

    def entries(self) -> Iterator[tuple[Color, int]]:
        return ((color, index) for index, color in enumerate(self.colors))

    def lookup(self) -> list[Color]:
        return [self.colors[index] for index in self.indices]


def collect_colors(pixels) -> tuple[list[Color], list[int]]:
    # first seen, first assigned
    positions = {}
    indices = []
    for color in pixels:
        index = positions.get(color)
        if index is None:
            index = positions[color] = len(positions)
        indices.append(index)
    return list(positions), indices


def build_palette(image, quantizer=kmeans, iterations=DEFAULT_ITERATIONS) -> Palette:
    if image.empty:
        raise ConfigError("cannot build a palette for an empty image")

    colors, indices = collect_colors(image)

    if len(colors) > MAX_COLORS:
        logger.debug(
            f"palette of {len(colors)} colors exceeds the maximum of {MAX_COLORS} and requires quantization"
        )
        centroids, labels = quantizer(image_samples(image), MAX_COLORS, iterations)
        centroid_colors = [Color.from_rgba(*map(int, c)) for c in round_centroids(centroids)]
        # centroids that round to the same color share one entry
        colors, remap = collect_colors(centroid_colors)
        indices = [remap[int(label)] for label in labels]
        logger.debug(f"palette reduced to {len(colors)} colors")

    while len(colors) < MIN_COLORS:
        colors.append(Colors.black)

    return Palette(colors, indices)

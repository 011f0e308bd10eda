import logging
from typing import Callable

import numpy as np
from sklearn.cluster import KMeans

from errors import ConfigError
from image import Color, Image

logger = logging.getLogger(__name__)

RANDOM_STATE = 42
DEFAULT_ITERATIONS = 20

# (samples N x 3, clusters K, iterations) -> (centroids K x 3, labels N)
Quantizer = Callable[[np.ndarray, int, int], tuple[np.ndarray, np.ndarray]]


def kmeans(samples, clusters: int, iterations: int) -> tuple[np.ndarray, np.ndarray]:
    samples = np.asarray(samples, dtype=np.float64)
    model = KMeans(n_clusters=clusters, n_init=1, max_iter=iterations, random_state=RANDOM_STATE)
    labels = model.fit_predict(samples)
    return model.cluster_centers_, labels


def round_centroids(centroids) -> np.ndarray:
    return np.clip(np.rint(np.asarray(centroids, dtype=np.float64)), 0, 255).astype(np.uint8)


def image_samples(image: Image) -> np.ndarray:
    return image.to_array()[:, :, :3].reshape(-1, 3).astype(np.float64)


def quantize_image(image: Image, palette_size: int, iterations: int = DEFAULT_ITERATIONS,
                   quantizer: Quantizer = kmeans) -> Image:
    if palette_size < 1:
        raise ConfigError(f"palette size must be positive, got {palette_size}")
    if iterations < 1:
        raise ConfigError(f"iterations must be positive, got {iterations}")
    if image.empty:
        return Image()

    clusters = min(palette_size, len(image))
    centroids, labels = quantizer(image_samples(image), clusters, iterations)
    colors = [Color.from_rgba(*map(int, centroid)) for centroid in round_centroids(centroids)]
    logger.debug(f"quantized {image!r} to {len(set(colors))} colors in {iterations} iterations or fewer")
    return Image(image.width, image.height, pixels=[colors[label] for label in labels])

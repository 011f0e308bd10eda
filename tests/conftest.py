"""
Pytest configuration and shared fixtures for the canvas codec tests.
"""

import numpy as np
import pytest

from image import Colors, Image


@pytest.fixture
def three_by_five():
    """The 3x5 red/green/blue diagonal on black used by the GIF regression vector."""
    return Image(3, 5, pixels=[
        Colors.red,   Colors.black, Colors.black,
        Colors.black, Colors.green, Colors.black,
        Colors.black, Colors.black, Colors.blue,
        Colors.black, Colors.black, Colors.black,
        Colors.black, Colors.black, Colors.black,
    ])


@pytest.fixture
def chessboard():
    """A 40x40 chessboard of 10 pixel white and turquoise squares."""
    image = Image(40, 40)
    for x in range(image.width):
        for y in range(image.height):
            image[x, y] = Colors.white if (x // 10 + y // 10) % 2 else Colors.turquoise
    return image


@pytest.fixture
def gradient():
    """A 23x20 image with 460 distinct opaque colors."""
    rng = np.random.default_rng(7)
    array = np.zeros((20, 23, 3), dtype=np.uint8)
    array[..., 0] = np.arange(23)[None, :] * 11
    array[..., 1] = np.arange(20)[:, None] * 13
    array[..., 2] = rng.integers(0, 256, size=(20, 23))
    return Image.from_array(array)


def first_cluster_quantizer(samples, clusters, iterations):
    """Deterministic stand-in for k-means: buckets samples by their red channel."""
    samples = np.asarray(samples)
    labels = (samples[:, 0].astype(int) * clusters) // 256
    centroids = np.array([[(k * 256 + 128) // clusters, 0, 0] for k in range(clusters)], dtype=float)
    return centroids, labels


@pytest.fixture
def bucket_quantizer():
    return first_cluster_quantizer


@pytest.fixture
def random_image():
    """Factory for reproducible random opaque images."""
    def make(width, height, seed=0):
        rng = np.random.default_rng(seed)
        array = rng.integers(0, 256, size=(height, width, 3), dtype=np.uint8)
        return Image.from_array(array)
    return make

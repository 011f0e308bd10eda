"""
Unit tests for the k-means collaborator and image quantization.
"""

import numpy as np
import pytest

from errors import ConfigError
from image import Color, Colors, Image
from quantization import kmeans, quantize_image, round_centroids


class TestKmeans:
    """Tests for the kmeans quantizer."""

    def test_shapes(self):
        samples = np.array([[0, 0, 0], [1, 1, 1], [250, 250, 250], [255, 255, 255]], dtype=float)

        centroids, labels = kmeans(samples, 2, 10)

        assert centroids.shape == (2, 3)
        assert labels.shape == (4,)
        assert labels[0] == labels[1]
        assert labels[2] == labels[3]
        assert labels[0] != labels[2]

    def test_deterministic(self, gradient):
        samples = gradient.to_array()[:, :, :3].reshape(-1, 3)

        first = kmeans(samples, 16, 20)
        second = kmeans(samples, 16, 20)

        assert np.array_equal(first[0], second[0])
        assert np.array_equal(first[1], second[1])


class TestRoundCentroids:
    def test_round_and_clamp(self):
        assert round_centroids([[-1.0, 0.4, 0.6], [255.4, 300.0, 127.5]]).tolist() == [[0, 0, 1], [255, 255, 128]]


class TestQuantizeImage:
    """Tests for quantize_image."""

    def test_reduces_colors(self, gradient):
        quantized = quantize_image(gradient, 10, 20)

        assert (quantized.width, quantized.height) == (gradient.width, gradient.height)
        assert len(set(quantized)) <= 10

    def test_two_color_image_is_preserved(self):
        image = Image(4, 4, Colors.white)
        image[1, 1] = Colors.red

        assert quantize_image(image, 2) == image

    def test_alpha_becomes_opaque(self):
        image = Image(2, 1, Color(0x10203040))

        assert set(quantize_image(image, 1)) == {Color(0x102030FF)}

    def test_custom_quantizer(self, gradient, bucket_quantizer):
        quantized = quantize_image(gradient, 4, quantizer=bucket_quantizer)

        assert {color.red for color in quantized} <= {32, 96, 160, 224}

    def test_empty_image(self):
        assert quantize_image(Image(), 4) == Image()

    @pytest.mark.parametrize("palette_size, iterations", [(0, 10), (4, 0)])
    def test_invalid_arguments(self, gradient, palette_size, iterations):
        with pytest.raises(ConfigError):
            quantize_image(gradient, palette_size, iterations)

import logging
import os
import time
from dataclasses import dataclass
from typing import Sequence

from PIL import Image as PILImage, UnidentifiedImageError

import bmp
import gif
from errors import CodecIOError, FormatError
from fileio import write_binary_file
from image import Image
from quantization import quantize_image

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConversionStats:
    original_size: int
    output_size: int
    time_ms: float

    @property
    def ratio(self) -> float:
        return (self.original_size / self.output_size) if self.output_size else float("inf")


def load_image(path: str) -> Image:
    if os.path.splitext(path)[1].lower() == ".bmp":
        return bmp.read_bitmap_file(path)
    try:
        with PILImage.open(path) as pil_image:
            return Image.from_pil(pil_image)
    except UnidentifiedImageError as e:
        raise FormatError(f"unsupported image file {path}") from e
    except OSError as e:
        raise CodecIOError(f"failed to read {path}: {e.strerror or e}") from e


def file_size(path: str) -> int:
    try:
        return os.path.getsize(path)
    except OSError:
        return 0


class Controller:
    def __init__(self, quantizer=None, iterations: int | None = None):
        self.options = {}
        if quantizer is not None:
            self.options["quantizer"] = quantizer
        if iterations is not None:
            self.options["iterations"] = iterations

    def _save(self, dst: str, data: bytes, original_size: int, t0: float) -> ConversionStats:
        t1 = time.perf_counter()
        write_binary_file(dst, data)
        stats = ConversionStats(original_size, file_size(dst), (t1 - t0) * 1000)
        logger.info(f"saved {dst}: {stats.output_size} bytes, ratio {stats.ratio:.3f}x")
        return stats

    def to_gif(self, src: str, dst: str) -> ConversionStats:
        image = load_image(src)
        t0 = time.perf_counter()
        data = gif.encode_gif(image, **self.options)
        return self._save(dst, data, file_size(src), t0)

    def animate(self, dst: str, sources: Sequence[str], delay: int, repetitions: int = 0) -> ConversionStats:
        frames = [load_image(src) for src in sources]
        t0 = time.perf_counter()
        data = gif.encode_animation(frames, delay, repetitions, **self.options)
        return self._save(dst, data, sum(file_size(src) for src in sources), t0)

    def to_bmp(self, src: str, dst: str) -> ConversionStats:
        image = load_image(src)
        t0 = time.perf_counter()
        data = bmp.encode_bitmap(image)
        return self._save(dst, data, file_size(src), t0)

    def quantize(self, src: str, dst: str, colors: int) -> ConversionStats:
        image = load_image(src)
        t0 = time.perf_counter()
        quantized = quantize_image(image, colors, **self.options)
        data = bmp.encode_bitmap(quantized)
        return self._save(dst, data, file_size(src), t0)

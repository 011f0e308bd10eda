from dataclasses import dataclass
from typing import Iterator, Self

import numpy as np
from PIL import Image as PILImage

from errors import ConfigError


@dataclass(frozen=True)
class Color:
    # red in the high byte, alpha in the low byte
    code: int

    def __post_init__(self) -> None:
        if not 0 <= self.code <= 0xFFFFFFFF:
            raise ConfigError(f"color code {self.code:#x} does not fit in 32 bits")

    @classmethod
    def from_rgba(cls, red, green, blue, alpha=0xFF) -> Self:
        for channel in (red, green, blue, alpha):
            if not 0 <= channel <= 0xFF:
                raise ConfigError(f"color channel {channel} is outside 0..255")
        return cls((red << 24) | (green << 16) | (blue << 8) | alpha)

    @property
    def red(self) -> int:
        return (self.code >> 24) & 0xFF

    @property
    def green(self) -> int:
        return (self.code >> 16) & 0xFF

    @property
    def blue(self) -> int:
        return (self.code >> 8) & 0xFF

    @property
    def alpha(self) -> int:
        return self.code & 0xFF

    def rgb(self) -> tuple[int, int, int]:
        return (self.red, self.green, self.blue)

    def rgba(self) -> tuple[int, int, int, int]:
        return (self.red, self.green, self.blue, self.alpha)

    def __str__(self) -> str:
        return f"#{self.code:08X}"


class Colors:
    black = Color(0x000000FF)
    white = Color(0xFFFFFFFF)
    red = Color(0xFF0000FF)
    green = Color(0x00FF00FF)
    blue = Color(0x0000FFFF)
    yellow = Color(0xFFFF00FF)
    cyan = Color(0x00FFFFFF)
    magenta = Color(0xFF00FFFF)
    turquoise = Color(0x40E0D0FF)
    cadet = Color(0x536872FF)
    bronze = Color(0xCD7F32FF)
    coconut = Color(0x965A3EFF)
    coffee = Color(0x6F4E37FF)
    rust = Color(0xB7410EFF)


class Image:
    # row-major, top row first; image[x, y] has its origin in the top-left corner

    def __init__(self, width=0, height=0, fill=Colors.black, pixels=None):
        if width < 0 or height < 0:
            raise ConfigError(
                f"invalid dimensions {width}x{height} -- width and height must be greater than or equal to zero"
            )
        if width == 0 or height == 0:
            width = height = 0
            pixels = []
        if pixels is None:
            self._pixels = [fill] * (width * height)
        else:
            self._pixels = list(pixels)
            if len(self._pixels) != width * height:
                raise ConfigError(
                    f"{len(self._pixels)} pixels provided for a {width}x{height} image"
                )
        self._width = width
        self._height = height

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def empty(self) -> bool:
        return not self._pixels

    def _index(self, x, y) -> int:
        if not (0 <= x < self._width and 0 <= y < self._height):
            raise IndexError(
                f"cannot index the ({x}, {y}) pixel in an {self._width}x{self._height} image -- "
                "indices are out of bounds"
            )
        return x + y * self._width

    def __getitem__(self, position) -> Color:
        x, y = position
        return self._pixels[self._index(x, y)]

    def __setitem__(self, position, color) -> None:
        x, y = position
        self._pixels[self._index(x, y)] = color

    def fill(self, color=Colors.black) -> None:
        self._pixels = [color] * len(self._pixels)

    def __iter__(self) -> Iterator[Color]:
        return iter(self._pixels)

    def __len__(self) -> int:
        return len(self._pixels)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Image):
            return NotImplemented
        return (self._width, self._height, self._pixels) == (other._width, other._height, other._pixels)

    def __repr__(self) -> str:
        return f"Image({self._width}x{self._height})"

    def tobytes(self) -> bytes:
        return b"".join(color.code.to_bytes(4, "big") for color in self._pixels)

    def to_array(self) -> np.ndarray:
        codes = np.array([color.code for color in self._pixels], dtype=">u4")
        return codes.view(np.uint8).reshape(self._height, self._width, 4).copy()

    @classmethod
    def from_array(cls, array) -> Self:
        array = np.asarray(array, dtype=np.uint8)
        if array.ndim != 3 or array.shape[2] not in (3, 4):
            raise ConfigError(f"expected an array of shape (height, width, 3|4), got {array.shape}")
        height, width = array.shape[:2]
        if array.shape[2] == 3:
            alpha = np.full((height, width, 1), 0xFF, dtype=np.uint8)
            array = np.concatenate((array, alpha), axis=2)
        codes = np.ascontiguousarray(array).view(">u4").reshape(-1)
        return cls(width, height, pixels=[Color(int(code)) for code in codes])

    def to_pil(self) -> PILImage.Image:
        return PILImage.frombytes("RGBA", (self._width, self._height), self.tobytes())

    @classmethod
    def from_pil(cls, pil_image) -> Self:
        return cls.from_array(np.asarray(pil_image.convert("RGBA")))

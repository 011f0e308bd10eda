import logging
import struct

import numpy as np

from errors import FormatError
from fileio import read_binary_file, write_binary_file
from image import Image

logger = logging.getLogger(__name__)

# -------- 24-bit BMP profile --------
# file header (14 bytes):
#   magic[2] = b"BM", file_size u32, reserved u32, pixel_offset u32
# BITMAPINFOHEADER (40 bytes):
#   dib_size u32, width u32, height u32, planes u16, bpp u16, compression u32,
#   pixel_array_size u32, x_ppm u32, y_ppm u32, colors_used u32, colors_important u32
# pixel rows bottom-to-top, B G R per pixel, each row zero-padded to 4 bytes
BMP_MAGIC = b"BM"
HEADER_STRUCT = "<2sIIIIIIHHIIIIII"
HEADER_SIZE = 54
DIB_HEADER_SIZE = 40
PIXEL_ARRAY_OFFSET = 54
BITS_PER_PIXEL = 24
COLOR_PLANES = 1
PIXELS_PER_METER = 2835
ROW_ALIGNMENT = 4
MAX_DIMENSION = 1048576
BITS_PER_BYTE = 8


def get_row_padding_bits(width) -> int:
    row_bits = ROW_ALIGNMENT * BITS_PER_BYTE
    return (row_bits - width * BITS_PER_PIXEL % row_bits) % row_bits


def get_row_padding(width) -> int:
    return get_row_padding_bits(width) // BITS_PER_BYTE


def get_stride(width) -> int:
    return width * 3 + get_row_padding(width)


def get_pixel_array_size(width, height) -> int:
    return height * (width * BITS_PER_PIXEL + get_row_padding_bits(width)) // BITS_PER_BYTE


def pack_header(width, height) -> bytes:
    pixel_array_size = get_pixel_array_size(width, height)
    return struct.pack(
        HEADER_STRUCT,
        BMP_MAGIC,
        PIXEL_ARRAY_OFFSET + pixel_array_size,
        0,
        PIXEL_ARRAY_OFFSET,
        DIB_HEADER_SIZE,
        width,
        height,
        COLOR_PLANES,
        BITS_PER_PIXEL,
        0,
        pixel_array_size,
        PIXELS_PER_METER,
        PIXELS_PER_METER,
        0,
        0,
    )


def _field(data, offset, size) -> int:
    return int.from_bytes(data[offset:offset + size], "little")


def validate(bmp_bytes) -> list[str]:
    if not bmp_bytes or len(bmp_bytes) < DIB_HEADER_SIZE:
        return [f"File too small to be a valid BMP (needs at least {DIB_HEADER_SIZE} bytes)"]
    errors = []
    if bmp_bytes[0:2] != BMP_MAGIC:
        errors.append(f"Not a BMP file (read magic {bmp_bytes[0:2]!r}, expected {BMP_MAGIC!r})")
    file_size = _field(bmp_bytes, 2, 4)
    if file_size != len(bmp_bytes):
        errors.append(f"Header file size ({file_size}) does not match actual size ({len(bmp_bytes)})")
    offset = _field(bmp_bytes, 10, 4)
    if offset != PIXEL_ARRAY_OFFSET:
        errors.append(f"Unsupported pixel array offset: {offset} (expected {PIXEL_ARRAY_OFFSET})")
    dib_size = _field(bmp_bytes, 14, 4)
    if dib_size != DIB_HEADER_SIZE:
        errors.append(f"Unsupported DIB header size: {dib_size} (expected {DIB_HEADER_SIZE})")
    width = _field(bmp_bytes, 18, 4)
    height = _field(bmp_bytes, 22, 4)
    if width > MAX_DIMENSION:
        errors.append(f"Width {width} is larger than the maximum of {MAX_DIMENSION}")
    if height > MAX_DIMENSION:
        errors.append(f"Height {height} is larger than the maximum of {MAX_DIMENSION}")
    planes = _field(bmp_bytes, 26, 2)
    if planes != COLOR_PLANES:
        errors.append(f"Unsupported color plane count: {planes} (expected {COLOR_PLANES})")
    bpp = _field(bmp_bytes, 28, 2)
    if bpp != BITS_PER_PIXEL:
        errors.append(f"Unsupported bits-per-pixel: {bpp} (expected {BITS_PER_PIXEL})")
    pixel_array_size = get_pixel_array_size(width, height)
    declared_pixel_array_size = _field(bmp_bytes, 34, 4)
    if declared_pixel_array_size != pixel_array_size:
        errors.append(
            f"Pixel array size ({declared_pixel_array_size}) does not match expected size ({pixel_array_size})"
        )
    if len(bmp_bytes) != PIXEL_ARRAY_OFFSET + pixel_array_size:
        errors.append(
            f"File size ({len(bmp_bytes)}) does not match expected size ({PIXEL_ARRAY_OFFSET + pixel_array_size})"
        )
    return errors


def encode_bitmap(image) -> bytes:
    width, height = image.width, image.height
    stride = get_stride(width)
    rows = np.zeros((height, stride), dtype=np.uint8)
    if not image.empty:
        # RGBA top-down -> BGR bottom-up
        bgr = image.to_array()[::-1, :, 2::-1]
        rows[:, :width * 3] = bgr.reshape(height, width * 3)
    logger.debug(f"encoding {width}x{height} bitmap with {get_row_padding(width)} padding bytes per row")
    return pack_header(width, height) + rows.tobytes()


def decode_bitmap(bmp_bytes) -> Image:
    errors = validate(bmp_bytes)
    if errors:
        raise FormatError("BMP validation failed:\n" + "\n".join(f"- {e}" for e in errors), errors)
    width = _field(bmp_bytes, 18, 4)
    height = _field(bmp_bytes, 22, 4)
    if width == 0 or height == 0:
        return Image()
    stride = get_stride(width)
    rows = np.frombuffer(bmp_bytes, dtype=np.uint8, offset=PIXEL_ARRAY_OFFSET).reshape(height, stride)
    rgb = rows[::-1, :width * 3].reshape(height, width, 3)[:, :, ::-1]
    return Image.from_array(rgb)


def read_bitmap_file(path) -> Image:
    return decode_bitmap(read_binary_file(path))


def write_bitmap_file(path, image) -> None:
    write_binary_file(path, encode_bitmap(image))

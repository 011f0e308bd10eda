import logging
import struct
from typing import Sequence

from compression import lzw_compress
from errors import ConfigError
from fileio import write_binary_file
from image import Color, Image
from palette import build_palette
from quantization import DEFAULT_ITERATIONS, Quantizer, kmeans

logger = logging.getLogger(__name__)

# -------- GIF89a --------
# acronyms: LSD = Logical Screen Descriptor, GCE = Graphic Control Extension,
#           LCT = Local Color Table
SIGNATURE = b"GIF89a"
EXTENSION_INTRODUCER = 0x21
GRAPHIC_CONTROL_LABEL = 0xF9
APPLICATION_LABEL = 0xFF
IMAGE_DESCRIPTOR_LABEL = 0x2C
BLOCK_TERMINATOR = 0x00
TRAILER = 0x3B

LSD_STRUCT = "<2H3B"
GCE_STRUCT = "<4BHBB"
APPLICATION_STRUCT = "<3B8s3s2BHB"
IMAGE_DESCRIPTOR_STRUCT = "<B4HB"

APPLICATION_IDENTIFIER = b"NETSCAPE"
APPLICATION_AUTH_CODE = b"2.0"
COLOR_RESOLUTION = 8
MAX_SUB_BLOCK_SIZE = 255
MAX_DIMENSION = 0xFFFF
MAX_DELAY = 0xFFFF
MAX_REPETITIONS = 0xFFFF


def get_table_size(color_count: int) -> int:
    size = 1
    while size < color_count:
        size <<= 1
    return size


def get_table_size_field(color_count: int) -> int:
    # the table holds 2 ** (field + 1) colors
    field = 0
    while (1 << (field + 1)) < color_count:
        field += 1
    return field


def pack_sub_blocks(data: bytes) -> bytes:
    out = bytearray()
    for pos in range(0, len(data), MAX_SUB_BLOCK_SIZE):
        chunk = data[pos:pos + MAX_SUB_BLOCK_SIZE]
        out.append(len(chunk))
        out.extend(chunk)
    out.append(BLOCK_TERMINATOR)
    return bytes(out)


def write_header(out: bytearray) -> None:
    out.extend(SIGNATURE)


def write_logical_screen(out: bytearray, width: int, height: int) -> None:
    # +-----------+------------------+-------------+-----------+
    # | GCT flag  | color resolution | sorted flag | GCT size  |
    # | 0         | 111              | 0           | 000       |
    # +-----------+------------------+-------------+-----------+
    packed_fields = (0 << 7) | ((COLOR_RESOLUTION - 1) << 4) | (0 << 3) | 0
    out.extend(struct.pack(LSD_STRUCT, width, height, packed_fields, 0, 0))


def write_application_extension(out: bytearray, repetitions: int = 0) -> None:
    out.extend(struct.pack(
        APPLICATION_STRUCT,
        EXTENSION_INTRODUCER, APPLICATION_LABEL, 0x0B,
        APPLICATION_IDENTIFIER, APPLICATION_AUTH_CODE,
        0x03, 0x01,          # sub-block size, looping sub-block id
        repetitions,         # 0 = forever
        BLOCK_TERMINATOR,
    ))


def write_graphic_control_extension(out: bytearray, delay: int) -> None:
    # no disposal method, no user input, no transparent color
    packed_fields = (0 << 2) | (0 << 1) | 0
    out.extend(struct.pack(
        GCE_STRUCT,
        EXTENSION_INTRODUCER, GRAPHIC_CONTROL_LABEL, 0x04, packed_fields,
        delay,
        0,                   # transparent color index
        BLOCK_TERMINATOR,
    ))


def write_image_descriptor(out: bytearray, width: int, height: int, color_count: int) -> None:
    # +-----------+----------------+-------------+----------+-----------+
    # | LCT flag  | interlace flag | sorted flag | reserved | LCT size  |
    # | 1         | 0              | 0           | 00       | xxx       |
    # +-----------+----------------+-------------+----------+-----------+
    packed_fields = (1 << 7) | (0 << 6) | (0 << 5) | get_table_size_field(color_count)
    out.extend(struct.pack(IMAGE_DESCRIPTOR_STRUCT, IMAGE_DESCRIPTOR_LABEL, 0, 0, width, height, packed_fields))


def write_color_table(out: bytearray, colors: Sequence[Color]) -> None:
    logger.debug(f"writing color table with {len(colors)} colors")
    for color in colors:
        out.extend(color.rgb())
    out.extend(b"\x00\x00\x00" * (get_table_size(len(colors)) - len(colors)))


def write_image_data(out: bytearray, indices: Sequence[int], color_count: int) -> None:
    lzw_data, minimum_code_size = lzw_compress(indices, color_count)
    logger.debug(f"lzw coding with minimum code size {minimum_code_size} and output of {len(lzw_data)} bytes")
    out.append(minimum_code_size)
    out.extend(pack_sub_blocks(lzw_data))


def write_frame(out: bytearray, image: Image, delay: int, quantizer: Quantizer, iterations: int) -> None:
    colors, indices = build_palette(image, quantizer, iterations)
    write_graphic_control_extension(out, delay)
    write_image_descriptor(out, image.width, image.height, len(colors))
    write_color_table(out, colors)
    write_image_data(out, indices, len(colors))


def _check_dimensions(image: Image) -> None:
    if image.width > MAX_DIMENSION or image.height > MAX_DIMENSION:
        raise ConfigError(
            f"gif image {image.width}x{image.height} exceeds the maximum dimension of {MAX_DIMENSION}"
        )


def encode_gif(image: Image, quantizer: Quantizer = kmeans, iterations: int = DEFAULT_ITERATIONS) -> bytes:
    logger.debug(f"generating gif image binary for {image!r}")
    if image is None or image.empty:
        raise ConfigError("gif image cannot be empty")
    _check_dimensions(image)

    out = bytearray()
    write_header(out)
    write_logical_screen(out, image.width, image.height)
    write_frame(out, image, 0, quantizer, iterations)
    out.append(TRAILER)
    return bytes(out)


def encode_animation(frames: Sequence[Image], delay: int, repetitions: int = 0,
                     quantizer: Quantizer = kmeans, iterations: int = DEFAULT_ITERATIONS) -> bytes:
    if not frames:
        raise ConfigError("gif animation frames cannot be empty")
    logger.debug(f"generating gif animation binary with {len(frames)} frames and {delay} cs period")
    if not 0 <= delay <= MAX_DELAY:
        raise ConfigError(f"gif frame delay {delay} is outside 0..{MAX_DELAY}")
    if not 0 <= repetitions <= MAX_REPETITIONS:
        raise ConfigError(f"gif repetitions {repetitions} is outside 0..{MAX_REPETITIONS}")
    for number, frame in enumerate(frames):
        if frame is None:
            raise ConfigError(f"gif animation frame {number} cannot be null")
        if frame.empty:
            raise ConfigError(f"gif animation frame {number} cannot be empty")
    width, height = frames[0].width, frames[0].height
    for number, frame in enumerate(frames):
        if (frame.width, frame.height) != (width, height):
            raise ConfigError(
                f"gif animation frame {number} is {frame.width}x{frame.height}, expected {width}x{height}"
            )
    _check_dimensions(frames[0])

    out = bytearray()
    write_header(out)
    write_logical_screen(out, width, height)
    write_application_extension(out, repetitions)
    for frame in frames:
        write_frame(out, frame, delay, quantizer, iterations)
    out.append(TRAILER)
    return bytes(out)


def write_gif_file(path, image: Image, quantizer: Quantizer = kmeans,
                   iterations: int = DEFAULT_ITERATIONS) -> None:
    write_binary_file(path, encode_gif(image, quantizer, iterations))


def write_animation_file(path, frames: Sequence[Image], delay: int, repetitions: int = 0,
                         quantizer: Quantizer = kmeans, iterations: int = DEFAULT_ITERATIONS) -> None:
    write_binary_file(path, encode_animation(frames, delay, repetitions, quantizer, iterations))

import argparse
import logging
import os
import sys

from controller import Controller
from errors import CodecError
from quantization import DEFAULT_ITERATIONS


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="canvas",
        description="Convert images between 24-bit BMP files and GIF images or animations.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Print more info.")
    parser.add_argument("-f", "--force", action="store_true", help="Overwrite the output file if it exists.")
    parser.add_argument(
        "-i", "--iterations", type=int, default=DEFAULT_ITERATIONS,
        help=f"Iteration budget for color quantization (default={DEFAULT_ITERATIONS}).",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    to_gif = subparsers.add_parser("gif", help="Encode one image as a GIF file.")
    to_gif.add_argument("input_file", help="Image to read (.bmp, or anything Pillow can open).")
    to_gif.add_argument("output_file", help="GIF file to write.")

    animate = subparsers.add_parser("animate", help="Encode several same-sized images as an animated GIF.")
    animate.add_argument("output_file", help="GIF file to write.")
    animate.add_argument("input_files", nargs="+", help="Frames, in order.")
    animate.add_argument(
        "-d", "--delay", type=int, default=10, help="Delay between frames in 1/100ths of a second (default=10)."
    )
    animate.add_argument(
        "-l", "--loop", type=int, default=0, help="Number of repetitions, 0 = forever (default=0)."
    )

    to_bmp = subparsers.add_parser("bmp", help="Convert an image into a 24-bit BMP file.")
    to_bmp.add_argument("input_file", help="Image to read.")
    to_bmp.add_argument("output_file", help="BMP file to write.")

    quantize = subparsers.add_parser("quantize", help="Reduce the colors of an image and save it as BMP.")
    quantize.add_argument("input_file", help="Image to read.")
    quantize.add_argument("output_file", help="BMP file to write.")
    quantize.add_argument("-c", "--colors", type=int, default=16, help="Palette size (default=16).")

    return parser


def parse_arguments(argv=None) -> argparse.Namespace:
    parser = build_parser()
    args = parser.parse_args(argv)

    inputs = args.input_files if args.command == "animate" else [args.input_file]
    for path in inputs:
        if not os.path.isfile(path):
            parser.exit(1, f"Input file not found: {path}\n")
    if os.path.exists(args.output_file) and not args.force:
        parser.exit(1, "Output file already exists.\n")
    if args.iterations < 1:
        parser.exit(1, "Invalid iteration count.\n")

    return args


def main(argv=None) -> None:
    args = parse_arguments(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    controller = Controller(iterations=args.iterations)
    try:
        if args.command == "gif":
            stats = controller.to_gif(args.input_file, args.output_file)
        elif args.command == "animate":
            stats = controller.animate(args.output_file, args.input_files, args.delay, args.loop)
        elif args.command == "bmp":
            stats = controller.to_bmp(args.input_file, args.output_file)
        else:
            stats = controller.quantize(args.input_file, args.output_file, args.colors)
    except CodecError as e:
        sys.exit(f"Error: {e}")

    print(f"Saved {args.output_file} successfully")
    print(f"original={stats.original_size} output={stats.output_size} "
          f"ratio={stats.ratio:.3f}x time_ms={stats.time_ms:.2f}")


if __name__ == "__main__":
    main()

import argparse
import sys

# local module imports
import config
import logutil
from canvas import SectorCanvas
from converter import Converter
from sc2file import DecodeError
from sc2map import load_map


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Convert a SimCity 2000 city into a block world.")
    parser.add_argument("city", help="path to a .SC2 city file")
    parser.add_argument("--segments", action="store_true",
                        help="only list the chunks in the file")
    parser.add_argument("--region", type=int, nargs=4, metavar=("X0", "Y0", "X1", "Y1"),
                        help="convert only tiles x0 <= x < x1, y0 <= y < y1")
    parser.add_argument("--seed", type=int, default=None,
                        help=f"random seed for shrubs and trees (default {config.RANDOM_SEED})")
    parser.add_argument("--quiet", action="store_true",
                        help="no progress output")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    if args.quiet:
        config.LOG_CONVERT_PROGRESS = False
        config.LOG_LEVEL = "WARNING"
    if args.seed is not None:
        config.RANDOM_SEED = args.seed

    try:
        city = load_map(args.city)
    except (OSError, DecodeError) as e:
        logutil.log("MAIN", f"could not load {args.city}: {e}", level="ERROR")
        return 1

    if args.segments:
        for tag, segment in city.segments.items():
            print(f"{tag}  raw {segment.raw_size:8d}  decompressed {segment.decompressed_size}")
        return 0

    canvas = SectorCanvas()
    try:
        stats = Converter(city.terrain, city.structures, canvas).convert(args.region)
    except IndexError as e:
        logutil.log("MAIN", f"bad region: {e}", level="ERROR")
        return 2
    logutil.log("MAIN", f"{stats['tiles']} tiles converted into {len(canvas.sectors)} sectors, "
                f"bounds {canvas.bounds()}")
    return 0


if __name__ == '__main__':
    sys.exit(main())

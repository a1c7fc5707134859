import argparse
import os
from typing import List, Optional, Tuple

import cv2

from texttag.errors import ExportError
from texttag.export import encode_csv, export_filename, write_csv
from texttag.main import run_file
from texttag.settings import (DEFAULT_SETTINGS, load_settings, reset_settings,
                              save_settings)
from texttag.visualize import draw_overlay, plot_area_histogram

EXIT_OK = 0
EXIT_PIPELINE_FAILED = 1
EXIT_EXPORT_FAILED = 2


def _parse_crop(value: str) -> Tuple[int, int, int, int]:
    parts = value.split(',')
    if len(parts) != 4:
        raise argparse.ArgumentTypeError("crop must be x,y,w,h")
    try:
        x, y, w, h = (int(float(p)) for p in parts)
    except ValueError:
        raise argparse.ArgumentTypeError("crop values must be numbers")
    return (x, y, w, h)


def _parse_ids(value: str) -> List[int]:
    try:
        return [int(v) for v in value.split(',') if v.strip()]
    except ValueError:
        raise argparse.ArgumentTypeError("exclude must be a comma separated list of ids")


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="texttag",
        description="Detect text-unit boxes on a scanned page and export YOLO-style CSV.",
    )
    parser.add_argument("--image", type=str, required=True)
    parser.add_argument("--out", type=str, default=None,
                        help="CSV output path (default: <image stem>.csv)")
    parser.add_argument("--settings", type=str, default=None,
                        help="JSON settings file to read")
    parser.add_argument("--save_settings", action="store_true",
                        help="Persist the effective settings back to --settings")
    parser.add_argument("--reset_settings", action="store_true",
                        help="Delete --settings and run with defaults")
    parser.add_argument("--crop", type=_parse_crop, default=None)
    parser.add_argument("--no_normalize", action="store_true")
    parser.add_argument("--save_overlay", type=str, default=None)
    parser.add_argument("--save_areas_plot", type=str, default=None)
    parser.add_argument("--exclude", type=_parse_ids, default=[])
    parser.add_argument("--area_lower", type=int, default=None)
    parser.add_argument("--area_upper", type=int, default=None)
    parser.add_argument("--padding", type=int, default=None)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)

    settings = DEFAULT_SETTINGS
    if args.settings:
        if args.reset_settings:
            settings = reset_settings(args.settings)
        else:
            try:
                settings = load_settings(args.settings)
            except (ValueError, TypeError) as e:
                print(f"Invalid settings file {args.settings}: {e}")
                return EXIT_PIPELINE_FAILED

    overrides = {}
    if args.area_lower is not None:
        overrides['area_lower_bound'] = args.area_lower
    if args.area_upper is not None:
        overrides['area_upper_bound'] = args.area_upper
    if args.padding is not None:
        overrides['crop_padding_width'] = args.padding
    if overrides:
        try:
            settings = settings.with_detection(**overrides)
        except ValueError as e:
            print(f"Invalid settings: {e}")
            return EXIT_PIPELINE_FAILED

    if args.settings and args.save_settings:
        save_settings(settings, args.settings)

    result = run_file(args.image, settings, crop=args.crop,
                      normalize=not args.no_normalize)
    if not result.ok:
        print(f"Error: {result.error}")
        return EXIT_PIPELINE_FAILED

    if args.save_overlay:
        overlay = draw_overlay(result.preprocessed, result.boxes)
        cv2.imwrite(args.save_overlay, overlay)
        print(f"Saved overlay to {args.save_overlay}")

    if args.save_areas_plot:
        plot_area_histogram(result.components, settings.detection, args.save_areas_plot)

    image_name = os.path.basename(args.image)
    width, height = result.image_size
    try:
        content = encode_csv(result.boxes, width, height, filename=image_name,
                             excluded_ids=args.exclude)
    except ExportError as e:
        print(f"Error: {e}")
        return EXIT_EXPORT_FAILED

    out_path = args.out or export_filename(image_name)
    write_csv(out_path, content)
    print(f"Exported {len(content.splitlines()) - 1} bounding boxes to {out_path}")

    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())

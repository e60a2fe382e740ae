"""
Allow running the package directly:
python -m mathvisual [index] [--window WxH] [--preset ID]
"""
import argparse

from .app import run


def _window_size(text):
    try:
        w, h = (int(v) for v in text.lower().split('x'))
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected WIDTHxHEIGHT, got {text!r}")
    if w < 2 or h < 2:
        raise argparse.ArgumentTypeError(f"window too small: {text!r}")
    return w, h


def _parser():
    parser = argparse.ArgumentParser(prog='mathvisual', description="Show a mathematical visual")
    parser.add_argument('index', nargs='?', type=int, default=None,
                        help="preset index (default: start_index from settings.json)")
    parser.add_argument('--window', type=_window_size, default=None, metavar='WxH',
                        help="window size in pixels")
    parser.add_argument('--preset', default=None, metavar='ID',
                        help="start on this preset id (e.g. lorenz:03) and browse its family")
    return parser


def main(argv=None):
    args = _parser().parse_args(argv)

    width, height = args.window if args.window else (None, None)
    run(args.index, width, height, preset_id=args.preset)


if __name__ == "__main__":
    main()

"""
Allow running the package directly: python -m scanbrot
"""
import logging
from argparse import ArgumentParser

from .app import render_headless, run
from .colormaps import list_colormap_names
from .compute import list_fractal_names
from .config import load_settings


def build_parser():
    parser = ArgumentParser(prog='scanbrot',
                            description='Incremental Mandelbrot set renderer')

    parser.add_argument('--width', type=int, help='surface width in pixels')
    parser.add_argument('--height', type=int, help='surface height in pixels')
    parser.add_argument('--palette', choices=list_colormap_names(),
                        help='color palette')
    parser.add_argument('--fractal', choices=list_fractal_names(),
                        help='escape-time fractal to render')
    parser.add_argument('--samples', type=int,
                        help='jittered samples per pixel (1 disables supersampling)')
    parser.add_argument('--settings', dest='settings_path', metavar='PATH',
                        help='JSON settings file to use instead of the bundled one')
    parser.add_argument('--headless', action='store_true',
                        help='render the default view once without a window and log the speed')
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='log every progress report')
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(levelname)s - %(message)s',
    )

    settings = load_settings(args.settings_path)
    for key in ('width', 'height', 'palette', 'fractal', 'samples'):
        value = getattr(args, key)
        if value is not None:
            settings[key] = value
    if settings['samples'] < 1:
        parser.error('--samples must be at least 1')
    if settings['palette'] not in list_colormap_names():
        parser.error('unknown palette %r' % settings['palette'])
    if settings['fractal'] not in list_fractal_names():
        parser.error('unknown fractal %r' % settings['fractal'])

    if args.headless:
        render_headless(settings)
    else:
        run(settings)


if __name__ == "__main__":
    main()

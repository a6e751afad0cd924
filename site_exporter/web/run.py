#!/usr/bin/env python3
"""
Start the Site Exporter web UI and JSON API.

Usage:
    site-exporter-web --port 3000
    PORT=8080 python -m site_exporter.web.run
"""

import argparse
import logging
import os

from site_exporter.web.app import run_app
from site_exporter.utils.log import set_level


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='site-exporter-web',
        description='Serve the Site Exporter UI and job API'
    )
    parser.add_argument(
        '--host',
        default='127.0.0.1',
        help='Interface to listen on (default: 127.0.0.1)'
    )
    parser.add_argument(
        '--port', '-p',
        type=int,
        default=int(os.environ.get('PORT', 3000)),
        help='Port to listen on (default: $PORT or 3000)'
    )
    parser.add_argument(
        '--debug',
        action='store_true',
        help='Run Flask in debug mode with verbose logging'
    )
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)

    set_level(logging.DEBUG if args.debug else logging.INFO)
    print(f"Site Exporter listening on http://{args.host}:{args.port}")
    run_app(host=args.host, port=args.port, debug=args.debug)


if __name__ == '__main__':
    main()

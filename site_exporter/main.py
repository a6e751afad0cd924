#!/usr/bin/env python3
"""
Site Exporter - export a website's pages into a single ZIP archive.

Crawls a site from a seed URL, renders each page with Playwright and saves
it as an A4 PDF or as tiled full-page PNG screenshots.

Usage:
    python -m site_exporter.main --url https://example.com --output site.zip --depth 2
"""

import argparse
import asyncio
import logging
import os
import sys

from site_exporter.crawler.crawler import SiteCrawler
from site_exporter.crawler.scope import ScopeMode, validate_seed
from site_exporter.errors import ArchiveWriteError, InvalidInput
from site_exporter.export.archive import ArchiveStreamer
from site_exporter.export.exporter import ExportMode
from site_exporter.jobs.models import ExportJob, JobOptions, JobStatus
from site_exporter.utils.constants import (
    ARCHIVE_FILENAME,
    DEFAULT_MAX_DEPTH,
    DEFAULT_MAX_PAGES,
    DEFAULT_PAGE_TIMEOUT,
    DEFAULT_RESOLUTION,
)
from site_exporter.utils.log import (
    set_level,
    print_status,
    print_success,
    print_error,
    print_info,
    print_warning
)


def parse_arguments(argv=None) -> argparse.Namespace:
    """
    Parse command line arguments.

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        prog='site-exporter',
        description='Export the pages of a website into a ZIP archive',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    %(prog)s --url https://example.com --output site.zip
    %(prog)s --url https://example.com/docs/guide --scope parents
    %(prog)s --url https://example.com --mode screenshot --resolution 1920
        """
    )

    parser.add_argument(
        '--url', '-u',
        type=str,
        required=True,
        help='Seed URL to start from (must start with http:// or https://)'
    )

    parser.add_argument(
        '--output', '-o',
        type=str,
        default=ARCHIVE_FILENAME,
        help=f'Path of the ZIP archive to write (default: {ARCHIVE_FILENAME})'
    )

    parser.add_argument(
        '--depth', '-d',
        type=int,
        default=DEFAULT_MAX_DEPTH,
        help=f'Maximum link depth, 1-3 (default: {DEFAULT_MAX_DEPTH})'
    )

    parser.add_argument(
        '--scope', '-s',
        choices=[m.value for m in ScopeMode],
        default=ScopeMode.CHILDREN.value,
        help='Which pages around the seed to export (default: children)'
    )

    parser.add_argument(
        '--mode',
        choices=[m.value for m in ExportMode],
        default=ExportMode.PDF.value,
        help='Export pages as PDF documents or tiled PNG screenshots (default: pdf)'
    )

    parser.add_argument(
        '--max-pages', '-m',
        type=int,
        default=DEFAULT_MAX_PAGES,
        help=f'Maximum number of pages to export (default: {DEFAULT_MAX_PAGES})'
    )

    parser.add_argument(
        '--delay-ms',
        type=int,
        default=0,
        help='Delay between pages in milliseconds (default: 0)'
    )

    parser.add_argument(
        '--resolution', '-r',
        type=int,
        default=DEFAULT_RESOLUTION,
        help=f'Viewport width for screenshots, 640-3840 (default: {DEFAULT_RESOLUTION})'
    )

    parser.add_argument(
        '--timeout',
        type=int,
        default=DEFAULT_PAGE_TIMEOUT,
        help=f'Page load timeout in milliseconds (default: {DEFAULT_PAGE_TIMEOUT})'
    )

    parser.add_argument(
        '--robots',
        action='store_true',
        help='Respect robots.txt rules'
    )

    parser.add_argument(
        '--no-headless',
        action='store_true',
        help='Run browser in visible mode (useful for debugging)'
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable verbose logging'
    )

    parser.add_argument(
        '--quiet', '-q',
        action='store_true',
        help='Suppress output except errors'
    )

    return parser.parse_args(argv)


def print_summary(job: ExportJob, output: str) -> None:
    """
    Print the export summary.

    Args:
        job: Finished job
        output: Archive path
    """
    print("\n" + "=" * 60)
    print_success("EXPORT SUMMARY")
    print("=" * 60)
    print(f"  Status:          {job.status.value}")
    print(f"  Pages exported:  {job.pages_exported}")
    print(f"  Pages skipped:   {job.pages_failed}")
    print(f"  Archive entries: {job.artifacts_written}")
    if job.completed_at:
        print(f"  Duration:        {job.completed_at - job.started_at:.1f} seconds")
    print(f"  Archive:         {os.path.abspath(output)}")

    for error in job.errors[:10]:
        print(f"    - {error['url']}: {error['error']}")
    if len(job.errors) > 10:
        print(f"    ... and {len(job.errors) - 10} more")

    print("=" * 60 + "\n")


async def export_site(job: ExportJob, output: str, headless: bool = True) -> ExportJob:
    """
    Run one export job, writing the archive straight to a file.

    Raises:
        ArchiveWriteError: If the output file cannot be created
    """
    try:
        fh = open(output, 'wb')
    except OSError as e:
        raise ArchiveWriteError(f"Cannot create {output}: {e}") from e

    with fh:
        crawler = SiteCrawler(job, headless=headless)
        return await crawler.run(ArchiveStreamer(fh))


async def main(argv=None) -> int:
    """
    Main entry point for the site exporter.

    Returns:
        Exit code (0 for success, 1 for error)
    """
    args = parse_arguments(argv)

    set_level(logging.DEBUG if args.verbose else (logging.WARNING if args.quiet else logging.INFO))

    job = None
    try:
        seed = validate_seed(args.url)
        options = JobOptions(
            max_depth=args.depth,
            max_pages=args.max_pages,
            scope=args.scope,
            page_delay_ms=args.delay_ms,
            export_mode=args.mode,
            resolution=args.resolution,
            timeout_ms=args.timeout,
            respect_robots=args.robots,
        ).validate()
        job = ExportJob(job_id="cli", seed_url=seed, options=options)

        if not args.quiet:
            print_status("Site Exporter", "bold cyan")
            print_info(f"Seed URL: {seed}")
            print_info(f"Scope: {options.scope.value}, depth: {options.max_depth}, "
                       f"mode: {options.export_mode.value}, max pages: {options.max_pages}")

        await export_site(job, args.output, headless=not args.no_headless)

    except InvalidInput as e:
        print_error(f"Invalid input: {e}")
        return 1
    except ArchiveWriteError as e:
        print_error(f"Error: {e}")
        return 1

    if not args.quiet:
        print_summary(job, args.output)

    if job.status is JobStatus.FAILED:
        print_error(job.message)
        return 1
    if job.status is JobStatus.CANCELLED:
        print_warning(job.message)
    elif not args.quiet:
        print_success(f"Site exported to: {os.path.abspath(args.output)}")
    return 0


def run() -> None:
    """Entry point wrapper for running as module."""
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        print_error("Export interrupted by user")
        sys.exit(1)


if __name__ == '__main__':
    run()

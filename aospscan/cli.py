"""
Command Line Interface for aospscan
"""

import argparse
import sys
import logging
from pathlib import Path
from typing import List, Optional

from . import __version__
from .config import ConfigLoader, REPORT_FORMATS, parse_kinds
from .errors import ConfigurationError
from .reporters import get_reporter
from .scanner import AndroidMakefileScanner


def setup_logging(verbose: bool = False, debug: bool = False) -> None:
    """Configure logging"""
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )


def parse_args(args: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments"""
    parser = argparse.ArgumentParser(
        prog='aospscan',
        description='aospscan - Extract native library build metadata from Android.mk/Android.bp',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s ~/aosp                              # Scan a whole tree, JSON to stdout
  %(prog)s ~/aosp/frameworks/av -f csv -o av.csv
  %(prog)s ~/aosp -c clang --kinds native      # Native libraries, keep clang flags
  %(prog)s ~/aosp --out-match ~/aosp/out/target/product/generic --filter-out-match
        """
    )

    parser.add_argument(
        'target',
        help='Android source directory or a single Android.mk/Android.bp'
    )

    output_group = parser.add_argument_group('Output Options')
    output_group.add_argument(
        '-o', '--output',
        help='Output file path (default: stdout)'
    )
    output_group.add_argument(
        '-f', '--format',
        choices=list(REPORT_FORMATS),
        help='Output format (default: json)'
    )
    output_group.add_argument(
        '--lib-version',
        help='Version string recorded for every module'
    )

    scan_group = parser.add_argument_group('Scan Options')
    scan_group.add_argument(
        '--config',
        help='YAML configuration file'
    )
    scan_group.add_argument(
        '-c', '--compiler',
        choices=['gcc', 'clang'],
        help='Drop flags this compiler does not support (default: gcc)'
    )
    scan_group.add_argument(
        '--kinds',
        help='Comma separated module kinds to report: native,apk,jar,apex (default: all)'
    )
    scan_group.add_argument(
        '--no-header-fallback',
        action='store_true',
        help='Do not guess header directories for modules declaring none'
    )
    scan_group.add_argument(
        '--out-match',
        help='Build output directory; replace library outputs with the built files found there'
    )
    scan_group.add_argument(
        '--filter-out-match',
        action='store_true',
        help='With --out-match, report only libraries found in the build output'
    )

    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Verbose output'
    )
    parser.add_argument(
        '--debug',
        action='store_true',
        help='Debug mode (very verbose)'
    )
    parser.add_argument(
        '-j', '--jobs',
        type=int,
        help='Number of parser threads (default: CPU count)'
    )
    parser.add_argument(
        '--version',
        action='version',
        version=f'%(prog)s {__version__}'
    )

    return parser.parse_args(args)


def run_scan(args: argparse.Namespace) -> int:
    """Run the scan and write the report"""
    config = ConfigLoader().load(Path(args.config) if args.config else None)

    # Command line flags override the config file
    if args.compiler:
        config.compiler = args.compiler
    if args.jobs is not None:
        config.jobs = args.jobs
    if args.lib_version is not None:
        config.version = args.lib_version
    if args.kinds:
        config.kinds = parse_kinds(args.kinds)
    if args.no_header_fallback:
        config.header_fallback = False
    if args.format:
        config.report_format = args.format
    config.validate()

    scanner = AndroidMakefileScanner(config.to_parser_options(), max_workers=config.jobs)
    result = scanner.scan(args.target)

    if args.out_match:
        scanner.match_built_outputs(result, args.out_match, only_found=args.filter_out_match)

    reporter = get_reporter(config.report_format)
    reporter.report(result, args.output)

    return 1 if result.errors else 0


def main(args: Optional[List[str]] = None) -> int:
    """Main entry point"""
    parsed_args = parse_args(args)

    setup_logging(verbose=parsed_args.verbose, debug=parsed_args.debug)

    target = Path(parsed_args.target)
    if not target.exists():
        print(f"Error: Target path does not exist: {target}", file=sys.stderr)
        return 1

    try:
        return run_scan(parsed_args)
    except KeyboardInterrupt:
        print("\nScan interrupted by user", file=sys.stderr)
        return 130
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        if parsed_args.debug:
            raise
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())

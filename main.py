"""
Main entry point for the voter guide application.

This script provides the command-line interface for looking up the ward and
election candidates for an address or community.
"""

import argparse
import sys
import time
from pathlib import Path

# Add the current directory to Python path for imports
sys.path.insert(0, str(Path(__file__).parent))

from voter_guide.config import ResolverConfig
from voter_guide.exceptions import ConfigurationError, DataFormatError, UpstreamError
from voter_guide.logging_config import setup_logging
from voter_guide.output.output_generator import OutputGenerator
from voter_guide.session import VoterGuideSession


def parse_arguments(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Voter Guide - find your ward and the candidates running in it"
    )

    query = parser.add_mutually_exclusive_group(required=True)
    query.add_argument(
        "--address",
        help="Street address to look up (the city and province are appended)"
    )
    query.add_argument(
        "--community",
        help="Community name to look up directly"
    )

    parser.add_argument(
        "--data-root",
        default="assets/data/calgary",
        help="Directory or base URL of the bundled ward files (default: assets/data/calgary)"
    )

    parser.add_argument(
        "--candidates-doc",
        help="Path or URL of the document holding the candidates array"
    )

    parser.add_argument(
        "--dataset-url",
        help="Path or URL of the address -> community dataset (JSON)"
    )

    parser.add_argument(
        "--ward-csv",
        help="Ward CSV to use instead of the bundled ward files"
    )

    parser.add_argument(
        "--candidates-csv",
        help="Candidate CSV to use instead of the candidate document"
    )

    parser.add_argument(
        "--proxy-url",
        help="Geocoding proxy base URL (default: SUPABASE_URL from the environment)"
    )

    parser.add_argument(
        "--timeout",
        type=float,
        help="Request timeout in seconds (default: no timeout)"
    )

    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the result as JSON"
    )

    parser.add_argument(
        "--output",
        help="Directory to write the JSON result and candidate CSV to"
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default="WARNING",
        help="Logging level (default: WARNING)"
    )

    parser.add_argument(
        "--log-file",
        help="Also write log messages to this file"
    )

    return parser.parse_args(argv)


def build_config(args) -> ResolverConfig:
    """Create the resolver configuration from arguments and environment."""
    return ResolverConfig.from_env(
        data_root=args.data_root,
        candidates_source=args.candidates_doc,
        address_dataset_url=args.dataset_url,
        proxy_base_url=args.proxy_url,
        request_timeout=args.timeout,
        log_level=args.log_level,
        log_file=args.log_file
    )


def main(argv=None):
    """Main application entry point."""
    args = parse_arguments(argv)
    start_time = time.time()

    try:
        config = build_config(args)
        logger = setup_logging(config)
        logger.info(f"Configuration: {config.to_dict()}")

        session = VoterGuideSession(config, logger=logger, show_progress=not args.json)
        session.load_bundled_data()

        if args.ward_csv:
            count = session.upload_ward_file(args.ward_csv)
            logger.info(f"Using uploaded ward mapping: {count} communities")

        if args.candidates_csv:
            count = session.upload_candidates_file(args.candidates_csv)
            logger.info(f"Using uploaded candidates: {count}")

        if args.address is not None:
            outcome = session.search(args.address)
        else:
            outcome = session.search_community(args.community)

        output_generator = OutputGenerator(args.output, logger)
        if args.json:
            print(output_generator.format_json(outcome))
        else:
            print(output_generator.format_text(outcome), end="")

        if args.output:
            generated_files = output_generator.write_outputs(outcome)
            if not args.json:
                print("\nGenerated Output Files:")
                for file_type, file_path in generated_files.items():
                    print(f"  {file_type}: {Path(file_path).name}")

        logger.info(f"Completed in {time.time() - start_time:.2f} seconds")
        return 0 if outcome.succeeded else 1

    except ConfigurationError as e:
        print(f"\nConfiguration Error: {e}", file=sys.stderr)
        if e.valid_values:
            print(f"Valid values: {', '.join(map(str, e.valid_values))}", file=sys.stderr)
        return 2

    except DataFormatError as e:
        print(f"\nData Format Error: {e}", file=sys.stderr)
        if e.missing_columns:
            print(f"Missing columns: {', '.join(e.missing_columns)}", file=sys.stderr)
        if e.available_columns:
            print(f"Available columns: {', '.join(e.available_columns)}", file=sys.stderr)
        return 2

    except UpstreamError as e:
        print(f"\nFile Error: {e}", file=sys.stderr)
        print("Please check that the uploaded files exist and are accessible.", file=sys.stderr)
        return 2

    except KeyboardInterrupt:
        print("\nProcess interrupted by user", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())

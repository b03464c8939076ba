"""
Command-line interface for adaptive paper chunking
"""

import argparse
import asyncio
import json
import logging
import os
import sys

from .core.chunker import AdaptiveChunker
from .core.config import Config, validate_config
from .core.quota import InputQuotaService, StaticQuotaProvider
from .core.table_extractor import extract_tables_from_html
from .models.section import PaperSection
from .utils.format import format_chunk_results, format_chunk_stats, format_table_extraction

logger = logging.getLogger(__name__)


def _configure_logging():
    logging.basicConfig(
        level=getattr(logging, Config.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s - %(levelname)s - %(message)s",
    )


def load_sections(path):
    """Load a JSON list of sections."""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    if not isinstance(data, list):
        raise ValueError("Sections file must contain a JSON list")

    return [PaperSection.from_dict(item) for item in data]


def chunk_command(args):
    """Chunk a sections file"""
    try:
        if not os.path.exists(args.sections_file):
            print(f"❌ Sections file not found: {args.sections_file}")
            return 1

        config = Config()
        validate_config(config)

        sections = load_sections(args.sections_file)

        if args.max_chunk_size is not None:
            quota_provider = StaticQuotaProvider(args.max_chunk_size)
        else:
            quota_provider = InputQuotaService(input_quota=args.input_quota)

        chunker = AdaptiveChunker(quota_provider, show_progress=args.progress)
        result = asyncio.run(chunker.chunk_document(sections, args.document_id))

        output = json.dumps(result.to_dict(), indent=2, ensure_ascii=False)

        if args.output:
            with open(args.output, "w", encoding="utf-8") as f:
                f.write(output)

            print(f"✂️  Chunked {len(sections)} sections of {args.document_id}")
            print(format_chunk_stats(result.stats))
            if args.preview:
                print(format_chunk_results(result.chunks))
            print(f"✅ Chunks written to {args.output}")
        else:
            print(output)
            print(format_chunk_stats(result.stats), file=sys.stderr)

    except Exception as e:
        logger.error(f"Error while chunking sections: {e}")
        return 1
    return 0


def tables_command(args):
    """Extract tables from an HTML file"""
    try:
        if not os.path.exists(args.html_file):
            print(f"❌ HTML file not found: {args.html_file}")
            return 1

        with open(args.html_file, "r", encoding="utf-8") as f:
            html = f.read()

        extractions = extract_tables_from_html(html, include_context=not args.no_context)

        if args.json:
            print(
                json.dumps(
                    [extraction.to_dict() for extraction in extractions],
                    indent=2,
                    ensure_ascii=False,
                )
            )
            return 0

        if not extractions:
            print("🔍 No tables found.")
            return 0

        print(f"🔍 Tables found ({len(extractions)}):")
        print("=" * 80)
        for extraction in extractions:
            print(format_table_extraction(extraction))
            print()

    except Exception as e:
        logger.error(f"Error while extracting tables: {e}")
        return 1
    return 0


def config_command(args):
    """Print the effective configuration"""
    config = Config()
    config.print_config()

    errors = config.validate()
    if errors:
        for error in errors:
            print(f"❌ {error}")
        return 1

    print("✅ Configuration is valid.")
    return 0


def create_parser():
    """Create the command-line argument parser"""
    parser = argparse.ArgumentParser(
        description="Adaptive chunking for research paper sections",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Chunk sections with a fixed budget
  paperchunk chunk sections.json --document-id paper-1 --max-chunk-size 1500

  # Chunk sections for a model with a 4096 token input quota
  paperchunk chunk sections.json --document-id paper-1 --input-quota 4096 --output chunks.json

  # Show the tables of an HTML paper as Markdown
  paperchunk tables paper.html

  # Show the effective configuration
  paperchunk config
        """,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # chunk command
    chunk_parser = subparsers.add_parser("chunk", help="Chunk paper sections")
    chunk_parser.add_argument("sections_file", help="JSON file with a list of sections")
    chunk_parser.add_argument("--document-id", required=True, help="Paper identifier")
    budget_group = chunk_parser.add_mutually_exclusive_group()
    budget_group.add_argument(
        "--max-chunk-size", type=int, help="Fixed max chunk size in characters"
    )
    budget_group.add_argument(
        "--input-quota",
        type=int,
        help="Model input quota in tokens (default: INPUT_QUOTA or fallback)",
    )
    chunk_parser.add_argument("--output", help="Write chunks JSON to this file")
    chunk_parser.add_argument(
        "--preview", action="store_true", help="Print chunk previews (with --output)"
    )
    chunk_parser.add_argument(
        "--progress", action="store_true", help="Show a progress bar"
    )

    # tables command
    tables_parser = subparsers.add_parser("tables", help="Extract tables from HTML")
    tables_parser.add_argument("html_file", help="HTML file path")
    tables_parser.add_argument(
        "--no-context", action="store_true", help="Leave surrounding text out of blocks"
    )
    tables_parser.add_argument("--json", action="store_true", help="Print JSON")

    # config command
    subparsers.add_parser("config", help="Show configuration")

    return parser


def main(argv=None):
    """Main entry point"""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    _configure_logging()

    # Run command
    if args.command == "chunk":
        return chunk_command(args)
    elif args.command == "tables":
        return tables_command(args)
    elif args.command == "config":
        return config_command(args)
    else:
        parser.print_help()
        return 1

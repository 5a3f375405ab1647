#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Main entry point for the Bark Lead Decoder.

This module sets up logging and provides the command-line interface for
decoding provider pages, importing their leads as contacts and inspecting the
contact store.
"""

import sys
import json
import argparse
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from bark_lead_decoder.config import config, DATA_DIR
from bark_lead_decoder.locales import Locale
from bark_lead_decoder.models.lead import RawDocument
from bark_lead_decoder.pipeline.decode_pipeline import LeadDecodePipeline
from bark_lead_decoder.storage.contact_store import ContactStore
from bark_lead_decoder.utils.fetch import PageFetcher
from bark_lead_decoder.utils.logger import configure_logging


def setup_argparse() -> argparse.ArgumentParser:
    """
    Set up command-line argument parsing.

    Returns:
        argparse.ArgumentParser: Configured argument parser
    """
    parser = argparse.ArgumentParser(
        description="Bark Lead Decoder",
        epilog="Decodes service-provider directory pages into scored CRM contacts.",
    )

    # Main commands
    parser.add_argument(
        "command",
        nargs="?",
        choices=["decode", "import", "list-contacts", "export", "status"],
        help="Command to execute",
    )

    # Input options
    parser.add_argument(
        "--file",
        type=str,
        help="HTML file to decode",
    )
    parser.add_argument(
        "--url",
        type=str,
        help="Page URL to fetch and decode",
    )
    parser.add_argument(
        "--source-url",
        type=str,
        default="",
        help="Source URL recorded for leads decoded from --file",
    )
    parser.add_argument(
        "--locale",
        type=str,
        help=f"Market locale (default: {config.locale_name})",
    )
    parser.add_argument(
        "--user-id",
        type=int,
        default=config.default_user_id,
        help=f"User recorded as creator of imported contacts (default: {config.default_user_id})",
    )

    # Storage options
    parser.add_argument(
        "--db-path",
        type=str,
        help=f"Contact database path (default: {config.db_path})",
    )
    parser.add_argument(
        "--source",
        type=str,
        help="Only list contacts with this lead source",
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=50,
        help="Maximum number of contacts to list (default: 50)",
    )

    # Export options
    parser.add_argument(
        "--output",
        type=str,
        help="Output file path for exports",
    )
    parser.add_argument(
        "--format",
        type=str,
        choices=["csv", "json"],
        default="csv",
        help="Export format (default: csv)",
    )

    # Common options
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Set logging level",
    )
    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Emit logs as JSON",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose output",
    )
    parser.add_argument(
        "--version",
        action="store_true",
        help="Show version information",
    )

    return parser


def load_document(file: Optional[str] = None, url: Optional[str] = None, source_url: str = "") -> RawDocument:
    """
    Load the document to decode from a file or URL.

    Raises:
        ValueError: If neither or both inputs are given
        FetchError: If the URL cannot be fetched
    """
    if bool(file) == bool(url):
        raise ValueError("Exactly one of --file or --url is required")

    if url:
        return PageFetcher().fetch(url)

    html = Path(file).read_text(encoding="utf-8")
    return RawDocument(html=html, source_url=source_url or Path(file).resolve().as_uri())


def _resolve_locale(name: Optional[str]) -> Optional[Locale]:
    return config.get_locale(name) if name else None


def _open_store(db_path: Optional[str] = None) -> ContactStore:
    return ContactStore(db_path=db_path or config.db_path)


def decode_document(
    file: Optional[str] = None,
    url: Optional[str] = None,
    source_url: str = "",
    locale_name: Optional[str] = None,
) -> bool:
    """
    Decode a document and print its leads as JSON.

    Returns:
        bool: True if successful, False otherwise
    """
    logger = logging.getLogger(__name__)

    try:
        document = load_document(file, url, source_url)
        pipeline = LeadDecodePipeline(locale=_resolve_locale(locale_name))
        leads = pipeline.decode(document)

        print(json.dumps([lead.to_dict() for lead in leads], indent=2))
        logger.info(f"Decoded {len(leads)} leads")
        return True

    except Exception as e:
        logger.exception(f"Error decoding document: {str(e)}")
        return False


def import_leads(
    file: Optional[str] = None,
    url: Optional[str] = None,
    source_url: str = "",
    locale_name: Optional[str] = None,
    user_id: Optional[int] = None,
    db_path: Optional[str] = None,
) -> bool:
    """
    Decode a document and store its valid leads as contacts.

    Returns:
        bool: True if successful, False otherwise
    """
    logger = logging.getLogger(__name__)

    try:
        document = load_document(file, url, source_url)
        pipeline = LeadDecodePipeline(
            repository=_open_store(db_path),
            locale=_resolve_locale(locale_name),
        )
        result = pipeline.process_and_store(document, user_id)

        print(f"Decoded {len(result.leads)} leads from {result.source_url or 'document'}")
        print(f"  Stored:   {result.stored_count}")
        print(f"  Rejected: {result.rejected_count}")
        print(f"  Failed:   {result.failed_count}")
        return True

    except Exception as e:
        logger.exception(f"Error importing leads: {str(e)}")
        return False


def list_contacts(limit: int = 50, source: Optional[str] = None, db_path: Optional[str] = None) -> bool:
    """
    Print stored contacts, newest first.

    Returns:
        bool: True if successful, False otherwise
    """
    logger = logging.getLogger(__name__)

    try:
        storage = _open_store(db_path)
        contacts, total = storage.list_contacts(lead_source=source, limit=limit)

        print(f"Showing {len(contacts)} of {total} contacts:")
        for contact in contacts:
            print(f"\n{contact.id}. {contact.first_name} {contact.last_name} ({contact.company or '-'})")
            print(f"   Phone: {contact.phone or '-'}")
            print(f"   Email: {contact.email or '-'}")
            print(f"   Source: {contact.lead_source}  Status: {contact.lead_status}")
            if contact.tags:
                print(f"   Tags: {', '.join(contact.tags)}")

        return True

    except Exception as e:
        logger.exception(f"Error listing contacts: {str(e)}")
        return False


def export_contacts(output: Optional[str] = None, format: str = "csv", db_path: Optional[str] = None) -> bool:
    """
    Export contacts to a file.

    Args:
        output: Output file path
        format: Export format (csv or json)

    Returns:
        bool: True if successful, False otherwise
    """
    logger = logging.getLogger(__name__)

    try:
        storage = _open_store(db_path)

        # Determine output file path
        if not output:
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            output = str(DATA_DIR / f"contacts_export_{timestamp}.{format}")

        # Export based on format
        if format.lower() == "csv":
            file_path = storage.export_contacts_to_csv(output)
            logger.info(f"Exported contacts to CSV: {file_path}")
        elif format.lower() == "json":
            file_path = storage.export_contacts_to_json(output)
            logger.info(f"Exported contacts to JSON: {file_path}")
        else:
            logger.error(f"Unsupported export format: {format}")
            return False

        return True

    except Exception as e:
        logger.exception(f"Error exporting contacts: {str(e)}")
        return False


def show_status(db_path: Optional[str] = None) -> bool:
    """
    Show application status information.

    Returns:
        bool: True if successful, False otherwise
    """
    logger = logging.getLogger(__name__)

    try:
        import bark_lead_decoder

        locale = config.get_locale()

        # Print version and configuration
        print(f"Bark Lead Decoder v{bark_lead_decoder.__version__}")
        print(f"Configuration:")
        print(f"  Database: {db_path or config.db_path}")
        print(f"  Log file: {config.log_file_path}")
        print(f"  Locale: {locale.name} ({locale.currency_symbol}, +{locale.country_code})")
        print(f"  Lead source tag: {config.lead_source_tag}")

        storage = _open_store(db_path)
        counts_by_status = storage.count_contacts_by_status()
        counts_by_source = storage.count_contacts_by_source()

        total_contacts = sum(counts_by_status.values())
        print(f"\nContact Statistics:")
        print(f"  Total contacts: {total_contacts}")

        print(f"\n  Contacts by status:")
        for status, count in counts_by_status.items():
            print(f"    {status}: {count}")

        print(f"\n  Contacts by source:")
        for source, count in sorted(counts_by_source.items(), key=lambda x: x[1], reverse=True):
            print(f"    {source}: {count}")

        return True

    except Exception as e:
        logger.exception(f"Error showing status: {str(e)}")
        return False


def main(argv: Optional[list] = None) -> int:
    """
    Main entry point for the application.

    Returns:
        int: Exit code (0 for success, non-zero for failure)
    """
    parser = setup_argparse()
    args = parser.parse_args(argv)

    # Show version and exit if requested
    if args.version:
        import bark_lead_decoder
        print(f"Bark Lead Decoder v{bark_lead_decoder.__version__}")
        return 0

    if not args.command:
        parser.print_help()
        return 1

    # Ensure data and log directories exist
    config.ensure_directories()

    # Configure logging
    level = "DEBUG" if args.verbose or config.debug_mode else (args.log_level or config.log_level)
    logger = configure_logging(
        level=level,
        log_file=str(config.log_file_path),
        json_logs=args.json_logs,
    )

    # Validate configuration
    errors = config.validate()
    if errors:
        for error in errors:
            logger.error(f"Configuration error: {error}")
        return 1

    # Execute the requested command
    try:
        if args.command == "decode":
            success = decode_document(args.file, args.url, args.source_url, args.locale)
        elif args.command == "import":
            success = import_leads(args.file, args.url, args.source_url, args.locale,
                                   args.user_id, args.db_path)
        elif args.command == "list-contacts":
            success = list_contacts(args.limit, args.source, args.db_path)
        elif args.command == "export":
            success = export_contacts(args.output, args.format, args.db_path)
        elif args.command == "status":
            success = show_status(args.db_path)
        else:
            logger.error(f"Unknown command: {args.command}")
            return 1

        return 0 if success else 1

    except KeyboardInterrupt:
        logger.info("Operation cancelled by user")
        return 130  # Standard exit code for SIGINT
    except Exception as e:
        logger.exception(f"Unhandled error: {str(e)}")
        return 1


if __name__ == "__main__":
    sys.exit(main())

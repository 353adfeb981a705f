#!/usr/bin/env python3
"""
Command-line front end for citeresolve.

Usage:
    citeresolve recognize "[25,26,29-31]"
    citeresolve parse-refs paper.pdf
    citeresolve resolve paper.pdf --recid 1234567 "[3]" "Weinstein and Isgur (1982)"
"""

import argparse
import datetime
import json
import logging
import os
import sys
from typing import List, Optional

from tqdm import tqdm

from . import __version__
from .config.settings import get_config
from .exceptions import CiteResolveError
from .matching.label_matcher import ResolutionCache
from .models import AUTHOR_YEAR, NUMERIC
from .parsers.author_year_references import parse_author_year_references_section
from .parsers.references_parser import ReferencesParser
from .parsers.structured_references import parse_references_from_structured_data
from .resolver import recognize, resolve
from .services.inspire_client import InspireClient
from .services.pdf_processor import PDFProcessor

logger = logging.getLogger(__name__)


def setup_logging(debug_mode=False, level=None):
    """Set up logging configuration"""
    root_logger = logging.getLogger()
    if level is None:
        level = logging.DEBUG if debug_mode else logging.INFO
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    formatter = logging.Formatter('%(asctime)s - %(levelname)s - %(message)s')

    if debug_mode:
        log_dir = get_config()["output"]["logs_dir"]
        os.makedirs(log_dir, exist_ok=True)
        log_file = os.path.join(log_dir, f"citeresolve_{datetime.datetime.now().strftime('%Y%m%d_%H%M%S')}.log")
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    console_handler = logging.StreamHandler(stream=sys.stdout)
    console_handler.setLevel(logging.DEBUG if debug_mode else logging.INFO)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # urllib3 connection chatter is not useful even in debug mode
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def _print_json(data):
    print(json.dumps(data, indent=2, ensure_ascii=False))


def cmd_recognize(args) -> int:
    citation = recognize(
        args.text,
        enable_fuzzy=args.fuzzy,
        max_known_label=args.max_label,
        prefer_author_year=args.author_year,
    )
    if citation is None:
        print("No citation recognized")
        return 1
    _print_json(citation.to_dict())
    return 0


def _parse_document(text: str, author_year: bool):
    if author_year:
        return None, parse_author_year_references_section(text)
    return ReferencesParser().parse_references_section(text), None


def cmd_parse_refs(args) -> int:
    processor = PDFProcessor()
    if args.structured:
        mapping = parse_references_from_structured_data(processor.extract_structured_chars(args.document))
        ay_mapping = None
    else:
        mapping, ay_mapping = _parse_document(processor.extract_text(args.document), args.author_year)

    if ay_mapping is not None:
        _print_json({
            "total_references": ay_mapping.total_references,
            "keys": len(ay_mapping.author_year_map),
            "confidence": ay_mapping.confidence,
            "sample": sorted(ay_mapping.author_year_map)[:20],
        })
        return 0
    if mapping is not None:
        multi = {label: count for label, count in mapping.label_counts.items() if count > 1}
        _print_json({
            "total_labels": mapping.total_labels,
            "confidence": mapping.confidence,
            "multi_paper_labels": multi,
        })
        return 0

    print("No reference list found")
    return 1


def cmd_resolve(args) -> int:
    config = get_config()
    text = PDFProcessor(config).extract_text(args.document)

    client = InspireClient(config["inspire"])
    try:
        entries = client.fetch_references(args.recid)
    finally:
        client.close()
    logger.info(f"Fetched {len(entries)} canonical references for record {args.recid}")

    citations = [recognize(c, enable_fuzzy=args.fuzzy) for c in args.citations]
    author_year = any(c is not None and c.type == AUTHOR_YEAR for c in citations)
    mapping, ay_mapping = _parse_document(text, author_year)

    cache = ResolutionCache(config)
    output = []
    for raw, citation in tqdm(list(zip(args.citations, citations)), desc="Resolving citations", disable=len(citations) < 2):
        if citation is None:
            output.append({"citation": raw, "recognized": None, "matches": []})
            continue

        if citation.sub_citations:
            groups = [sub.labels for sub in citation.sub_citations]
        else:
            groups = [citation.labels]

        matches = []
        for labels in groups:
            results = resolve(
                labels,
                entries,
                document_mapping=mapping,
                author_year_mapping=ay_mapping,
                cache=cache,
                document_id=args.recid,
                citation_type=AUTHOR_YEAR if citation.type == AUTHOR_YEAR else NUMERIC,
            )
            for result in results:
                item = result.to_dict()
                item["title"] = entries[result.entry_index].title
                matches.append(item)

        output.append({"citation": raw, "recognized": citation.to_dict(), "matches": matches})

    _print_json(output)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="citeresolve",
        description="Recognize citation markers and resolve them to canonical references",
    )
    parser.add_argument("--debug", action="store_true",
                        help="Run in debug mode with verbose logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command")

    p_recognize = subparsers.add_parser("recognize", help="Recognize the citation marker in a text")
    p_recognize.add_argument("text", help="Selected text containing a citation")
    p_recognize.add_argument("--fuzzy", action="store_true",
                             help="Enable heuristics for broken text layers")
    p_recognize.add_argument("--author-year", action="store_true",
                             help="Try author-year parsing first")
    p_recognize.add_argument("--max-label", type=int,
                             help="Largest label in the document, used to repair concatenated ranges")
    p_recognize.set_defaults(func=cmd_recognize)

    p_parse = subparsers.add_parser("parse-refs", help="Parse the reference list of a PDF or text file")
    p_parse.add_argument("document", help="Path to a PDF or text file")
    p_parse.add_argument("--author-year", action="store_true",
                         help="Parse an alphabetical (author-year) bibliography")
    p_parse.add_argument("--structured", action="store_true",
                         help="Segment entries from PDF character layout instead of flat text")
    p_parse.set_defaults(func=cmd_parse_refs)

    p_resolve = subparsers.add_parser("resolve", help="Resolve citations against an INSPIRE record's references")
    p_resolve.add_argument("document", help="Path to a PDF or text file")
    p_resolve.add_argument("--recid", required=True, help="INSPIRE literature record id")
    p_resolve.add_argument("--fuzzy", action="store_true",
                           help="Enable heuristics for broken text layers")
    p_resolve.add_argument("citations", nargs="+", help="Citation texts, e.g. \"[3]\" or \"Guo et al. (2015)\"")
    p_resolve.set_defaults(func=cmd_resolve)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main function to parse arguments and run a subcommand"""
    parser = build_parser()
    args = parser.parse_args(argv)

    debug = args.debug or get_config()["debug"]
    setup_logging(debug_mode=debug)

    if not getattr(args, "func", None):
        parser.print_help()
        return 1

    try:
        return args.func(args)
    except FileNotFoundError as e:
        logger.error(str(e))
        return 1
    except CiteResolveError as e:
        logger.error(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())

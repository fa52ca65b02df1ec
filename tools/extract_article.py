import argparse
import json
import sys
from pathlib import Path
from typing import Optional, Sequence

from dotenv import load_dotenv

if __package__ in {None, ""}:
    sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from newsprint.services.exceptions import ExtractionError, error_report  # noqa: E402
from newsprint.services.parser import extract_article  # noqa: E402
from newsprint.utils.logging_config import setup_logging  # noqa: E402


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Extract a news article and print it as JSON."
    )
    parser.add_argument("url", help="Article URL (http or https).")
    parser.add_argument(
        "--no-translate",
        action="store_true",
        help="Skip language detection and translation.",
    )
    parser.add_argument(
        "--indent", type=int, default=2, help="JSON indentation (default: 2)."
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Print the full error trace on failure.",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None, *, extractor=extract_article) -> int:
    args = build_parser().parse_args(argv)
    load_dotenv()
    setup_logging()

    try:
        record = extractor(args.url, translate=not args.no_translate)
    except ExtractionError as exc:
        report = error_report(exc)
        print(f"Error: {report['error']}", file=sys.stderr)
        if args.verbose:
            print(report["detail"], file=sys.stderr)
        return 1

    print(json.dumps(record.to_dict(), indent=args.indent, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())

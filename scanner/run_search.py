from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Optional

import requests

ROOT_DIR = Path(__file__).resolve().parent.parent
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from importscout import get_logger
from importscout.config import (
    DEFAULT_ELIGIBLE_FILTER,
    DEFAULT_LIMIT,
    DEFAULT_SOON_MONTHS,
    ConfigurationError,
    SearchSettings,
)
from importscout.env import load_dotenv
from importscout.models import RequestValidationError, SearchRequest
from importscout.pipeline import ListingSearchPipeline
from importscout.search_provider import UpstreamError

LOGGER = get_logger()


def _parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Search marketplaces for import-eligible vehicle listings.")
    parser.add_argument("query", help="Free-text search, e.g. 'BMW E36'.")
    parser.add_argument(
        "--eligible",
        default=DEFAULT_ELIGIBLE_FILTER,
        help="Eligibility filter: all, now, soon or uncertain.",
    )
    parser.add_argument(
        "--soon-months",
        type=int,
        default=DEFAULT_SOON_MONTHS,
        help="Months ahead that still count as eligible soon (1-36).",
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=DEFAULT_LIMIT,
        help="Maximum number of results to request (1-30).",
    )
    parser.add_argument(
        "--no-images",
        action="store_true",
        help="Skip preview image lookups.",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Write the JSON response to this path instead of stdout.",
    )
    return parser.parse_args(argv)


def _write_payload(payload: dict[str, Any], output: Optional[Path]) -> None:
    text = json.dumps(payload, indent=2, ensure_ascii=False)
    if output is None:
        print(text)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(text + "\n", encoding="utf-8")
    LOGGER.info("Wrote %s result(s) to %s", len(payload.get("results", [])), output)


def run(argv: Optional[list[str]] = None) -> int:
    args = _parse_args(argv)
    overrides: dict[str, object] = {}
    if args.no_images:
        overrides["fetch_images"] = False
    settings = SearchSettings.from_env(**overrides)
    try:
        search_request = SearchRequest(
            query=args.query,
            eligible=args.eligible,
            soon_months=args.soon_months,
            limit=args.limit,
        )
        response = ListingSearchPipeline(settings).run(search_request)
    except RequestValidationError as exc:
        LOGGER.error("Invalid search: %s", exc)
        return 2
    except ConfigurationError as exc:
        LOGGER.error("%s", exc)
        return 2
    except UpstreamError as exc:
        LOGGER.error("Search provider error status=%s details=%s", exc.status, exc.details)
        return 2
    except requests.RequestException as exc:
        LOGGER.error("Search provider request failed: %s", exc)
        return 2
    _write_payload(response.to_dict(), args.output)
    return 0


def main() -> None:
    load_dotenv(ROOT_DIR / ".env")
    raise SystemExit(run())


if __name__ == "__main__":
    main()

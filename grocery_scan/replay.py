"""
Scan replay - run saved Vision responses (or a live photo) through scan_once().

Zero-cost iteration on ranking rules by replaying prior API responses.

Usage:
    grocery-scan-replay --in response.json [--hint bananas] [--groceries list.json]
    grocery-scan-replay --image photo.jpg --groceries list.json --json
"""
import sys
import json
import asyncio
import argparse
from pathlib import Path
from typing import Any, List, Optional

import aiohttp
from dotenv import load_dotenv
from pydantic import ValidationError

from .config_loader import load_ranker_config
from .feature_flags import FLAGS
from .run import scan_once
from .schemas import GroceryItem, ScanResult
from .vision_client import VisionAPIError, VisionClient


def load_grocery_file(path: Path) -> List[Any]:
    """Load a grocery list: a JSON array, or an object with an 'items' array."""
    with open(path) as f:
        data = json.load(f)
    if isinstance(data, dict):
        data = data.get("items", [])
    if not isinstance(data, list):
        raise ValueError(f"Grocery file must hold a list of items: {path}")
    return data


def validate_grocery_items(entries: List[Any]) -> List[GroceryItem]:
    """Validate every grocery entry up front so a bad list fails before scanning."""
    return [GroceryItem.model_validate(entry) for entry in entries]


def format_result(result: ScanResult) -> str:
    lines = [f"Detected: {result.detected_label or '(nothing)'}"]
    for i, cand in enumerate(result.candidates, 1):
        lines.append(f"  {i}. {cand}")
    if result.specific_item:
        lines.append(f"Specific item: {result.specific_item}")
    if result.best_label:
        lines.append(f"Best label (legacy): {result.best_label}")
    for match in result.grocery_matches:
        lines.append(f"On your list: {match.item.name} <- {match.candidate} ({match.score:.2f})")
    lines.append(f"Config: {result.config_version}")
    return "\n".join(lines)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Replay Vision responses through the grocery scan ranker"
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "--in",
        dest="input_file",
        type=Path,
        help="Saved Vision response JSON (envelope or single response)"
    )
    source.add_argument(
        "--image",
        type=Path,
        help="Photo to annotate live (needs GCV_API_KEY)"
    )
    parser.add_argument("--hint", help="Specific-item hint (e.g. object detector label)")
    parser.add_argument("--groceries", type=Path, help="Grocery list JSON to match against")
    parser.add_argument("--config-dir", type=Path, help="Directory with ranker_thresholds.yml")
    parser.add_argument("--json", action="store_true", help="Print ScanResult as JSON")
    parser.add_argument("--flags", action="store_true", help="Print feature flag status")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)

    if args.flags:
        FLAGS.print_status()

    try:
        cfg = load_ranker_config(str(args.config_dir) if args.config_dir else None)
        groceries = None
        if args.groceries:
            groceries = validate_grocery_items(load_grocery_file(args.groceries))

        if args.image:
            client = VisionClient()
            response = asyncio.run(client.annotate_image(args.image))
        else:
            with open(args.input_file) as f:
                response = json.load(f)
    except (FileNotFoundError, ValueError, ValidationError, VisionAPIError, aiohttp.ClientError) as e:
        print(f"[REPLAY] Error: {e}", file=sys.stderr)
        return 1

    result = scan_once(response, hint=args.hint, grocery_items=groceries, cfg=cfg)

    if args.json:
        print(result.model_dump_json(indent=2))
    else:
        print(format_result(result))
    return 0


if __name__ == "__main__":
    sys.exit(main())

#!/usr/bin/env python3
"""
Report Model Runner

Runs the insight pipeline over a directory of already-fetched provider
payloads and writes the report model as JSON.

The payload directory holds one envelope per source kind, named after the
kind: keywords.json, pages.json, audience-device.json, audience-country.json
(or a single audience.json list), trend-timeseries.json, sitemap.json,
appearance.json, external-trend.json, external-competitor.json. Missing
files are treated as missing sources.

Usage:
    # With a reply captured earlier:
    python scripts/run_report.py payloads/ --site https://example.com --reply reply.json

    # Calling Claude directly:
    export ANTHROPIC_API_KEY=your_key
    python scripts/run_report.py payloads/ --site https://example.com -o report.json
"""

import asyncio
import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from insight_engine.analyzer.client import ClaudeClient
from insight_engine.collector.models import SourceKind
from insight_engine.collector.orchestrator import CollectionInput
from insight_engine.output.parser import ModelReply
from insight_engine.pipeline import InsightPipeline
from insight_engine.utils.config import get_settings

logger = logging.getLogger(__name__)

PAYLOAD_NAMES = [kind.value for kind in SourceKind] + ["audience"]


def load_envelopes(directory: Path) -> Dict[str, Any]:
    """Load every known payload file found in the directory."""
    envelopes = {}
    for name in PAYLOAD_NAMES:
        path = directory / f"{name}.json"
        if not path.exists():
            continue
        try:
            envelopes[name] = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            logger.warning(f"Could not read {path.name}: {e}")
            envelopes[name] = {"succeeded": False, "errorMessage": f"Invalid JSON: {e}"}
    return envelopes


def load_reply(path: Path) -> ModelReply:
    """Load a reply envelope; non-JSON files are taken as the message text."""
    text = path.read_text(encoding="utf-8")
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        return ModelReply(succeeded=True, message_text=text)
    if isinstance(data, dict) and ("succeeded" in data or "messageText" in data):
        return ModelReply.from_dict(data)
    return ModelReply(succeeded=True, message_text=text)


async def run_report(
    payload_dir: Path,
    site_url: str,
    reply_path: Optional[Path] = None,
) -> str:
    """Run the pipeline and return the report model JSON."""
    settings = get_settings()

    envelopes = load_envelopes(payload_dir)
    logger.info(f"Loaded {len(envelopes)} payload files from {payload_dir}")

    reply = load_reply(reply_path) if reply_path else None

    client = None
    if reply is None and settings.ANTHROPIC_API_KEY:
        client = ClaudeClient(api_key=settings.ANTHROPIC_API_KEY, model=settings.CLAUDE_MODEL)

    pipeline = InsightPipeline(client=client, settings=settings)
    report = await pipeline.run(
        CollectionInput.from_envelopes(envelopes),
        site_url=site_url or settings.SITE_URL,
        reply=reply,
    )

    if client:
        usage = client.get_usage_summary()
        logger.info(f"Claude usage: {usage['total_tokens']} tokens, ${usage['estimated_cost']:.4f}")

    return report.to_json()


def main():
    from dotenv import load_dotenv

    load_dotenv()

    parser = argparse.ArgumentParser(
        description="Build a search insight report model from provider payloads"
    )
    parser.add_argument(
        "payload_dir",
        type=Path,
        help="Directory with one JSON envelope per source kind"
    )
    parser.add_argument(
        "--site",
        default="",
        help="Property URL (default: SITE_URL setting)"
    )
    parser.add_argument(
        "--reply",
        type=Path,
        default=None,
        help="Model reply file (envelope JSON or raw text); skips the Claude call"
    )
    parser.add_argument(
        "-o", "--output",
        type=Path,
        default=None,
        help="Write report JSON here instead of stdout"
    )

    args = parser.parse_args()

    # Configure logging
    logging.basicConfig(
        level=get_settings().LOG_LEVEL.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    if not args.payload_dir.is_dir():
        print(f"ERROR: {args.payload_dir} is not a directory")
        sys.exit(1)

    output = asyncio.run(run_report(args.payload_dir, args.site, args.reply))

    if args.output:
        args.output.write_text(output, encoding="utf-8")
        print(f"\nReport model saved to: {args.output}")
    else:
        print(output)


if __name__ == "__main__":
    main()

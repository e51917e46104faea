#!/usr/bin/env python3
"""
stream_client.py
Command-line smoke client for the RewriteForge streaming endpoints.

Requirements:
  pip install httpx

Examples:
  # Stream a pirate rewrite from the local mock backend, word by word
  python scripts/stream_client.py -t "Hello world, how are you today?" -s pirate --mock

  # Stream from OpenAI with no metadata event and only the final summary
  python scripts/stream_client.py -t "Good morning" -l openai --no-metadata -q

  # Character granularity with a slow replay against a remote instance
  python scripts/stream_client.py --base-url http://10.0.0.5:3000 -t "Hi there" -g character -d 200 -vv
"""

import sys
import json
import time
import asyncio
import logging
import argparse
from typing import Any, AsyncIterator, Dict, List

import httpx


# ---------- Logging ----------
def setup_logging(verbosity: int) -> None:
    level = logging.WARNING if verbosity == 0 else logging.INFO if verbosity == 1 else logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")

log = logging.getLogger("stream_client")


# ---------- SSE ----------
async def iter_events(lines: AsyncIterator[str]) -> AsyncIterator[Dict[str, Any]]:
    """Decode `data: <json>` lines; blank separator lines and comments are skipped."""
    async for line in lines:
        if not line.startswith("data: "):
            continue
        try:
            yield json.loads(line[len("data: "):])
        except json.JSONDecodeError:
            log.warning("Unparseable frame: %s", line)


def render_event(event: Dict[str, Any], quiet: bool) -> None:
    kind = event.get("type")
    data = event.get("data", {})

    if kind == "content":
        if not quiet:
            sep = "" if data.get("isPartial") else " "
            print(data.get("chunk", "") + sep, end="", flush=True)
    elif kind == "metadata":
        log.info("metadata: llm=%s style=%s granularity=%s", data.get("llm"), data.get("style"), data.get("granularity"))
    elif kind == "progress":
        log.debug("progress: %s%%", data.get("progress"))
    elif kind == "error":
        print(f"\n[error] {data.get('message')}", file=sys.stderr)


# ---------- Streaming ----------
def build_payload(args) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "text": args.text,
        "style": args.style,
        "granularity": args.granularity,
        "includeMetadata": not args.no_metadata,
    }
    if args.delay is not None:
        payload["delay"] = args.delay
    if not args.mock:
        payload["llm"] = args.llm
    return payload


async def stream_rewrite(args) -> int:
    endpoint = "stream/mock" if args.mock else "stream"
    url = f"{args.base_url.rstrip('/')}{args.prefix}/rewrite/{endpoint}"
    payload = build_payload(args)
    log.info("POST %s %s", url, payload)

    counts: Dict[str, int] = {}
    final: List[Dict[str, Any]] = []
    started = time.perf_counter()

    async with httpx.AsyncClient(timeout=args.timeout) as client:
        async with client.stream("POST", url, json=payload) as response:
            if response.status_code != 200:
                body = await response.aread()
                print(f"HTTP {response.status_code}: {body.decode(errors='replace')}", file=sys.stderr)
                return 2

            async for event in iter_events(response.aiter_lines()):
                kind = event.get("type", "unknown")
                counts[kind] = counts.get(kind, 0) + 1
                render_event(event, args.quiet)
                if kind in ("complete", "error"):
                    final.append(event)

    elapsed = time.perf_counter() - started
    print()
    print(f"events: {json.dumps(counts)}  elapsed: {elapsed:.2f}s")

    if not final or final[-1]["type"] != "complete":
        return 1
    data = final[-1]["data"]
    print(f"rewritten: {data.get('rewritten')}" + ("  (cached)" if data.get("isCached") else ""))
    return 0


# ---------- CLI ----------
def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Stream a rewrite from a RewriteForge server and print the events.")
    parser.add_argument("--base-url", default="http://localhost:3000", help="Server base URL.")
    parser.add_argument("--prefix", default="/v1", help="API prefix.")
    parser.add_argument("-t", "--text", required=True, help="Text to rewrite.")
    parser.add_argument("-s", "--style", default="formal", choices=["formal", "pirate", "haiku"])
    parser.add_argument("-l", "--llm", default="localmoc", choices=["localmoc", "openai", "anthropic"])
    parser.add_argument("-g", "--granularity", default="word", choices=["word", "character", "sentence"])
    parser.add_argument("-d", "--delay", type=int, help="Delay between chunks in ms (server default if omitted).")
    parser.add_argument("--mock", action="store_true", help="Use the mock streaming endpoint.")
    parser.add_argument("--no-metadata", action="store_true", help="Skip the leading metadata event.")
    parser.add_argument("-q", "--quiet", action="store_true", help="Only print the summary.")
    parser.add_argument("--timeout", type=float, default=60.0, help="Request timeout in seconds.")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="-v for INFO, -vv for DEBUG.")
    return parser


def main():
    parser = build_arg_parser()
    args = parser.parse_args()
    setup_logging(args.verbose)
    try:
        sys.exit(asyncio.run(stream_rewrite(args)))
    except KeyboardInterrupt:
        print("\nInterrupted.")
    except httpx.HTTPError as e:
        log.error("Request failed: %s", e)
        sys.exit(1)

if __name__ == "__main__":
    main()

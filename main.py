"""Command-line entry point: issue one API call and print the JSON result."""

import argparse
import asyncio
import json
import logging
import os
import sys
from dataclasses import dataclass
from typing import Any

from typed_api_client import ApiClient, ApiClientError, Settings


def _configure_logging() -> None:
    log_level = os.getenv("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )


def _pairs(parser: argparse.ArgumentParser, values: list[str], option: str) -> list[tuple[str, str]]:
    pairs = []
    for value in values:
        key, sep, rest = value.partition("=")
        if not sep or not key:
            parser.error(f"{option} expects KEY=VALUE, got {value!r}")
        pairs.append((key, rest))
    return pairs


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Call a JSON API configured through environment variables.")
    parser.add_argument("method", type=str.upper, choices=["GET", "POST", "PUT", "PATCH", "DELETE"])
    parser.add_argument("path", help="Path relative to API_BASE_URL.")
    parser.add_argument("--query", action="append", default=[], metavar="KEY=VALUE", help="GET only; repeatable.")
    parser.add_argument("--header", action="append", default=[], metavar="KEY=VALUE", help="Repeatable.")
    parser.add_argument("--data", help="JSON request body for POST, PUT and PATCH.")
    return parser


@dataclass(frozen=True)
class CallArgs:
    """A validated command line: everything needed for one API call."""

    method: str
    path: str
    query: list[tuple[str, str]] | None
    headers: dict[str, str] | None
    body: Any


def parse_call_args(argv: list[str] | None = None) -> CallArgs:
    """Parse ``argv`` and reject options that do not apply to the chosen method."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.query and args.method != "GET":
        parser.error(f"--query is only supported with GET, not {args.method}")
    if args.data is not None and args.method in ("GET", "DELETE"):
        parser.error(f"--data is not supported with {args.method}")

    body = None
    if args.data is not None:
        try:
            body = json.loads(args.data)
        except json.JSONDecodeError as exc:
            parser.error(f"--data is not valid JSON: {exc}")

    return CallArgs(
        method=args.method,
        path=args.path,
        query=_pairs(parser, args.query, "--query") or None,
        headers=dict(_pairs(parser, args.header, "--header")) or None,
        body=body,
    )


async def _run(settings: Settings, call: CallArgs) -> Any:
    async with ApiClient.from_settings(settings) as client:
        if call.method == "GET":
            return await client.get(call.path, Any, call.query, call.headers)
        if call.method == "DELETE":
            return await client.delete(call.path, Any, call.headers)
        verb = getattr(client, call.method.lower())
        return await verb(call.path, Any, call.body, call.headers)


def main() -> None:
    """Parse arguments, perform the call and print the response."""
    call = parse_call_args()
    _configure_logging()
    logger = logging.getLogger("typed-api-client")
    settings = Settings.load()

    try:
        result = asyncio.run(_run(settings, call))
    except ApiClientError:
        logger.exception("API call failed.")
        sys.exit(1)
    print(json.dumps(result, indent=2, default=str))


if __name__ == "__main__":
    main()

#!/usr/bin/env python3
"""Submit page URLs to a running media scraper, optionally in a repeated load pattern."""

import argparse
import sys
import time
from pathlib import Path
from typing import Iterable, List

import httpx


def read_urls(paths: Iterable[Path], inline: Iterable[str]) -> List[str]:
    urls: List[str] = [url.strip() for url in inline if url.strip()]
    for path in paths:
        for line in path.read_text(encoding="utf-8").splitlines():
            cleaned = line.strip()
            if cleaned and not cleaned.startswith("#"):
                urls.append(cleaned)
    return urls


def chunked(items: List[str], size: int) -> Iterable[List[str]]:
    for start in range(0, len(items), size):
        yield items[start : start + size]


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="POST URL lists to /api/scrape.")
    parser.add_argument("urls", nargs="*", help="URLs to submit")
    parser.add_argument(
        "--file",
        dest="files",
        type=Path,
        action="append",
        default=[],
        help="File with one URL per line (repeatable)",
    )
    parser.add_argument(
        "--base-url",
        default="http://localhost:8080",
        help="Base URL of the scraper API (default: http://localhost:8080)",
    )
    parser.add_argument("--chunk-size", type=int, default=5000, help="URLs per request (default: 5000)")
    parser.add_argument("--repeat", type=int, default=1, help="Number of times to submit the list (default: 1)")
    parser.add_argument(
        "--interval",
        type=float,
        default=1.0,
        help="Seconds to sleep between repeated submissions (default: 1.0)",
    )
    parser.add_argument("--timeout", type=float, default=30.0, help="Request timeout in seconds (default: 30)")
    return parser.parse_args()


def main() -> int:
    args = parse_args()
    urls = read_urls(args.files, args.urls)
    if not urls:
        raise SystemExit("No URLs to submit")
    if args.chunk_size < 1:
        raise SystemExit("--chunk-size must be at least 1")

    endpoint = f"{args.base_url.rstrip('/')}/api/scrape"
    failures = 0
    latencies: List[float] = []
    with httpx.Client(timeout=args.timeout) as client:
        for round_number in range(max(1, args.repeat)):
            for chunk in chunked(urls, args.chunk_size):
                started = time.monotonic()
                try:
                    response = client.post(endpoint, json=chunk)
                except httpx.HTTPError as exc:
                    failures += 1
                    print(f"Request failed: {exc}", file=sys.stderr)
                    continue
                latencies.append(time.monotonic() - started)
                if response.status_code != 202:
                    failures += 1
                    print(f"Unexpected status {response.status_code}: {response.text}", file=sys.stderr)
                    continue
                payload = response.json()
                print(f"[{round_number + 1}] {payload['message']} queueLength={payload['queueLength']}")
            if round_number + 1 < args.repeat:
                time.sleep(args.interval)

    if latencies:
        slowest = max(latencies) * 1000
        average = sum(latencies) / len(latencies) * 1000
        print(f"{len(latencies)} requests, avg {average:.0f}ms, max {slowest:.0f}ms, {failures} failed")
    return 0 if failures == 0 else 1


if __name__ == "__main__":
    raise SystemExit(main())

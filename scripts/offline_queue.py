#!/usr/bin/env python3
"""Inspect, flush or clear a file-backed offline queue.

Auto-save coordinators built on :class:`weekyear.JsonFileStorage` keep
changes made while offline in a JSON file. This tool shows what is
pending and can replay the newest entry against the server.

Usage
-----
::

    python scripts/offline_queue.py --file ~/.weekyear/queue.json list
    python scripts/offline_queue.py --file queue.json show weekly-review-3
    export WEEKYEAR_BASE_URL="https://workbook.example.com"
    export WEEKYEAR_SESSION_COOKIE="..."
    python scripts/offline_queue.py --file queue.json flush weekly-review-3 --procedure weeklyReview.upsert
    python scripts/offline_queue.py --file queue.json clear weekly-review-3
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

# Allow running from the repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from weekyear import (  # noqa: E402
    JsonFileStorage,
    OfflineQueue,
    WorkbookClient,
    WorkbookConfig,
    status_label,
)
from weekyear._constants import OFFLINE_STORAGE_PREFIX  # noqa: E402


def _format_ts(timestamp_ms: int) -> str:
    return datetime.fromtimestamp(timestamp_ms / 1000, tz=UTC).isoformat(timespec="seconds")


def _cmd_list(storage: JsonFileStorage) -> int:
    keys = [k for k in storage.keys() if k.startswith(OFFLINE_STORAGE_PREFIX)]
    if not keys:
        print("No queued changes.")
        return 0
    for full_key in sorted(keys):
        storage_key = full_key[len(OFFLINE_STORAGE_PREFIX) :]
        entries = OfflineQueue(storage, storage_key).entries()
        newest = _format_ts(entries[-1].timestamp) if entries else "-"
        print(f"{storage_key:<32} pending={len(entries)} newest={newest}")
    return 0


def _cmd_show(storage: JsonFileStorage, storage_key: str) -> int:
    entries = OfflineQueue(storage, storage_key).entries()
    if not entries:
        print(f"Queue '{storage_key}' is empty.")
        return 0
    for index, entry in enumerate(entries):
        marker = "*" if index == len(entries) - 1 else " "
        print(f"{marker} {_format_ts(entry.timestamp)}")
        print(json.dumps(entry.data, indent=2, ensure_ascii=False))
    print("\n* newest entry, the only one replayed on flush")
    return 0


def _cmd_clear(storage: JsonFileStorage, storage_key: str) -> int:
    queue: OfflineQueue[Any] = OfflineQueue(storage, storage_key)
    count = len(queue)
    queue.clear()
    print(f"Discarded {count} queued change(s) from '{storage_key}'.")
    return 0


async def _cmd_flush(storage: JsonFileStorage, storage_key: str, procedure: str) -> int:
    config = WorkbookConfig.from_env()
    async with WorkbookClient(config) as client:
        if not await client.check_connectivity():
            print(f"Server {config.base_url} is unreachable; nothing flushed.", file=sys.stderr)
            return 2

        async def _save(payload: Any) -> None:
            await client.mutate(procedure, payload)

        async with client.autosave(_save, storage_key=storage_key, storage=storage) as saver:
            if saver.pending_changes == 0:
                print(f"Queue '{storage_key}' is empty.")
                return 0
            await saver.retry()
            state = saver.state

    print(f"{storage_key}: {status_label(state.status)}")
    if state.error_message:
        print(f"  error: {state.error_message}", file=sys.stderr)
        return 1
    return 0


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Inspect and replay weekyear offline queues.")
    parser.add_argument("--file", "-f", required=True, type=Path, help="JSON storage file")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("list", help="List queues with pending changes")

    show = sub.add_parser("show", help="Print queued entries for one key")
    show.add_argument("storage_key")

    flush = sub.add_parser("flush", help="Replay the newest entry for one key")
    flush.add_argument("storage_key")
    flush.add_argument("--procedure", required=True, help="Mutation to call, e.g. weeklyReview.upsert")

    clear = sub.add_parser("clear", help="Discard all entries for one key")
    clear.add_argument("storage_key")

    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING)

    storage = JsonFileStorage(args.file.expanduser())

    if args.command == "list":
        return _cmd_list(storage)
    if args.command == "show":
        return _cmd_show(storage, args.storage_key)
    if args.command == "clear":
        return _cmd_clear(storage, args.storage_key)
    return asyncio.run(_cmd_flush(storage, args.storage_key, args.procedure))


if __name__ == "__main__":
    sys.exit(main())

#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Offline catch sync tool
Queue catches locally while offline and push them to the server later
"""

import argparse
import json
import sys
import time

from dotenv import load_dotenv

from app.core.config import load_sync_client_config
from app.logger import logger
from app.offline import OfflineSyncScheduler, build_offline_queue


def _parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Offline catch queue")
    sub = parser.add_subparsers(dest="command", required=True)

    enqueue = sub.add_parser("enqueue", help="queue a catch locally")
    enqueue.add_argument("species")
    enqueue.add_argument("--size", type=float)
    enqueue.add_argument("--weight", type=float)
    enqueue.add_argument("--lake", dest="lake_name")
    enqueue.add_argument("--lat", dest="latitude", type=float)
    enqueue.add_argument("--lng", dest="longitude", type=float)
    enqueue.add_argument("--temperature", type=float)
    enqueue.add_argument("--depth", type=float)
    enqueue.add_argument("--lure")
    enqueue.add_argument("--comments")

    sub.add_parser("flush", help="push pending catches to the server")
    sub.add_parser("status", help="show queue status")

    list_parser = sub.add_parser("list", help="list queued catches")
    list_parser.add_argument("--state", choices=("pending", "syncing", "synced"))

    sub.add_parser("prune", help="delete catches that are already synced")
    sub.add_parser("watch", help="keep running and sync whenever the server is reachable")
    return parser.parse_args(argv)


def _catch_fields(args) -> dict:
    fields = (
        "species", "size", "weight", "lake_name", "latitude", "longitude",
        "temperature", "depth", "lure", "comments",
    )
    return {name: getattr(args, name) for name in fields if getattr(args, name) is not None}


def _watch(queue, config):
    scheduler = OfflineSyncScheduler(
        queue,
        poll_seconds=config.connectivity_poll_seconds,
        debounce_seconds=config.flush_debounce_seconds,
        timezone=config.scheduler_timezone,
    )
    scheduler.start()
    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        logger.info("收到中断信号，退出")
    finally:
        scheduler.stop()


def main(argv=None) -> int:
    """Main function"""
    load_dotenv()
    args = _parse_args(argv)
    config = load_sync_client_config()
    queue = build_offline_queue(config)

    if args.command == "enqueue":
        try:
            record = queue.enqueue(_catch_fields(args))
        except ValueError as exc:
            logger.error(f"入队失败: {exc}")
            return 2
        logger.info(f"已入队: {record['id']}")
        if config.auto_sync:
            summary = queue.flush()
            logger.info(summary.message)
        return 0

    if args.command == "flush":
        summary = queue.flush()
        print(json.dumps(summary.to_dict(), ensure_ascii=False))
        return 0 if summary.success else 1

    if args.command == "status":
        records = queue.list_records()
        pending = sum(1 for r in records if not r["synced"])
        print(json.dumps({
            "server_url": config.server_url,
            "sync_status": queue.get_sync_status(),
            "total": len(records),
            "unsynced": pending,
            "synced": len(records) - pending,
        }, ensure_ascii=False))
        return 0

    if args.command == "list":
        for record in queue.list_records(args.state):
            print(json.dumps({
                "id": record["id"],
                "state": record["state"],
                "attempts": record["attempts"],
                "last_error": record["last_error"],
                "catch": record["payload"],
            }, ensure_ascii=False))
        return 0

    if args.command == "prune":
        removed = queue.prune_synced()
        logger.info(f"已清理 {removed} 条已同步记录")
        return 0

    if args.command == "watch":
        _watch(queue, config)
        return 0

    return 2


if __name__ == "__main__":
    sys.exit(main())

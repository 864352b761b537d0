from __future__ import annotations

import argparse
import asyncio
import json
import os
import sys
from typing import Sequence

from ..config import load_db_path, load_remote
from ..logging import get_logger, set_level
from ..paths import expand_abs
from ..remote.client import RemoteDataClient, RemoteDataError
from ..store import service
from ..store.db import LocalStoreError
from ..store.sync import refresh_customers, refresh_vocabularies

LOG = get_logger("cli-main")

_SEARCHES = {
    "mobile": service.search_mobile_nos,
    "name": service.search_customer_names,
    "description": service.search_descriptions,
    "remark": service.search_remarks,
}


def _handle_init(ns: argparse.Namespace) -> int:
    async def _run() -> str:
        db = await service.get_store(ns.db)
        return db.db_path

    path = asyncio.run(_run())
    LOG.info(f"Local store ready at: {path}")
    print(path)
    return 0


def _handle_export(ns: argparse.Namespace) -> int:
    async def _run() -> str:
        await service.get_store(ns.db)
        return await service.write_export(expand_abs(ns.output_dir))

    print(asyncio.run(_run()))
    return 0


def _handle_search(ns: argparse.Namespace) -> int:
    async def _run() -> list:
        await service.get_store(ns.db)
        return await _SEARCHES[ns.kind](ns.text)

    print(json.dumps(asyncio.run(_run()), ensure_ascii=False))
    return 0


def _handle_refresh(ns: argparse.Namespace) -> int:
    remote_cfg = load_remote()
    if remote_cfg is None:
        LOG.error("SUPABASE_URL/SUPABASE_KEY missing. Set them in env/.env to refresh.")
        return 2
    client = RemoteDataClient(*remote_cfg, timeout=ns.timeout)

    async def _run() -> dict:
        await service.get_store(ns.db)
        summary = {}
        if ns.target in ("customers", "all"):
            summary["customers"] = await refresh_customers(client)
        if ns.target in ("vocabularies", "all"):
            summary["descriptions"], summary["remarks"] = await refresh_vocabularies(client)
        return summary

    try:
        summary = asyncio.run(_run())
    finally:
        client.close()
    print(json.dumps(summary))
    return 0


def _handle_serve(ns: argparse.Namespace) -> int:
    from ..api import create_app
    import uvicorn

    set_level(ns.log_level)
    allow_origins = ns.allow_origins
    if allow_origins and len(allow_origins) == 1 and allow_origins[0] == "*":
        allow_origins = ["*"]

    app = create_app(ns.db or load_db_path(), allow_origins=allow_origins)
    uvicorn.run(
        app,
        host=ns.host,
        port=ns.port,
        log_level=ns.log_level,
    )
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    provided = list(argv) if argv is not None else sys.argv[1:]
    LOG.debug(f"CLI invoked with arguments: {provided}")

    parser = argparse.ArgumentParser(
        prog="pms-local",
        description="Manage the on-device suggestion store of the parcel booking client.",
    )
    parser.add_argument("--db", help="Path to the local store (defaults to PMS_LOCAL_DB or var/localdb)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log at DEBUG level")
    subparsers = parser.add_subparsers(dest="command", required=True)

    init = subparsers.add_parser("init", help="Create or migrate the local store and print its path")
    init.set_defaults(handler=_handle_init)

    export = subparsers.add_parser("export", help="Write every collection to pms-local-data.json")
    export.add_argument("--output-dir", default=os.getcwd(), help="Directory for the export file (default: cwd)")
    export.set_defaults(handler=_handle_export)

    search = subparsers.add_parser("search", help="Query the store the way the intake form does")
    search.add_argument("kind", choices=sorted(_SEARCHES))
    search.add_argument("text", nargs="?", default="")
    search.set_defaults(handler=_handle_search)

    refresh = subparsers.add_parser("refresh", help="Pull contacts and vocabularies from the hosted backend")
    refresh.add_argument("target", choices=["customers", "vocabularies", "all"], nargs="?", default="all")
    refresh.add_argument("--timeout", type=int, default=30, help="HTTP timeout in seconds")
    refresh.set_defaults(handler=_handle_refresh)

    serve = subparsers.add_parser("serve", help="Run the JSON API for the intake form")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8002)
    serve.add_argument("--log-level", default="info")
    serve.add_argument(
        "--allow-origin",
        action="append",
        dest="allow_origins",
        help="Allowed CORS origin (can be provided multiple times, use '*' for any).",
    )
    serve.set_defaults(handler=_handle_serve)

    args = parser.parse_args(provided)
    if args.verbose:
        set_level("DEBUG")
    try:
        code = args.handler(args)
    except (LocalStoreError, RemoteDataError, OSError) as exc:
        LOG.error(f"{args.command} failed: {exc}")
        code = 1
    finally:
        service.shutdown_store()
    LOG.debug(f"Subcommand '{args.command}' finished with exit code {code}.")
    return code


if __name__ == "__main__":
    sys.exit(main())

#!/usr/bin/env python3

"""
Quote Sync

Keep a small collection of quotes (text + category) on disk, show random
ones, and keep it in step with a REST endpoint.

Sync cycle
----------
Every tick first pushes the whole local collection (POST), then fetches the
remote list (GET), maps the first few items to quotes in the "Server"
category and merges those not held locally. Nothing is ever deleted or
updated by a sync; a failed half is simply retried on the next tick.

Requirements
------------
- Python 3.10+
- Packages: requests (fastapi + uvicorn for the web UI)
- config.json and local_storage.json stored next to the script
  (or in /config when containerized, or in $QUOTE_SYNC_CONFIG_DIR).
"""

import argparse
import builtins
import datetime
import sys
import time
from pathlib import Path
from typing import List, Optional

from _config import config_path, load_config
from _runtime import Runtime, build_runtime
from _scheduling import SyncScheduler
from _selector import ALL, format_quote, pick_random, restore_filter, visible_set
from modules._mod_base import EmptySelectionError, QuoteError, SyncStatus

__VERSION__ = "0.4.0"

# --- timestamped & colored print ---
ANSI_DIM    = "\033[90m"  # grey
ANSI_BLUE   = "\033[94m"  # blue
ANSI_YELLOW = "\033[33m"  # yellow/orange
ANSI_RESET  = "\033[0m"   # reset (local to logger)
ANSI_G = "\033[92m"
ANSI_R = "\033[91m"


def log_print(*args, **kwargs):
    ts = datetime.datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    prefix = f"{ANSI_DIM}[{ts}]{ANSI_RESET}"
    new_args = []
    for a in args:
        if isinstance(a, str):
            a = (a.replace("[i]",     f"{ANSI_BLUE}[i]{ANSI_RESET}")
                   .replace("[debug]", f"{ANSI_YELLOW}[debug]{ANSI_RESET}")
                   .replace("[✓]",    f"{ANSI_G}[✓]{ANSI_RESET}")
                   .replace("[!]",    f"{ANSI_R}[!]{ANSI_RESET}"))
        new_args.append(a)
    builtins.print(prefix, *new_args, flush=True, **kwargs)

print = log_print
# -----------------------------------


def print_banner() -> None:
    # Use builtins.print to avoid the timestamp wrapper
    builtins.print("")
    builtins.print(f"{ANSI_G}Quote{ANSI_RESET} ⇄ {ANSI_R}Server{ANSI_RESET} Sync {ANSI_G}Version {__VERSION__}{ANSI_RESET}")


def build_parser(include_examples: bool = False) -> argparse.ArgumentParser:
    epilog = None
    if include_examples:
        epilog = (
            "Examples:\n"
            "  ./quote_sync.py --random\n"
            "  ./quote_sync.py --random --category life\n"
            "  ./quote_sync.py --add \"Carpe diem\" Latin\n"
            "  ./quote_sync.py --export quotes.json\n"
            "  ./quote_sync.py --import quotes.json\n"
            "  ./quote_sync.py --sync --debug\n"
            "  ./quote_sync.py --watch\n"
        )
    ap = argparse.ArgumentParser(
        prog="quote_sync.py",
        description="Quote collection with local storage and periodic server sync.",
        epilog=epilog,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    ap.add_argument("--random", action="store_true", help="Print a random quote (honours the saved filter)")
    ap.add_argument("--category", help="With --random: filter by this category and remember it ('all' resets)")
    ap.add_argument("--add", nargs=2, metavar=("TEXT", "CATEGORY"), help="Add a quote")
    ap.add_argument("--categories", action="store_true", help="List categories")
    ap.add_argument("--export", metavar="PATH", help="Write the collection as pretty-printed JSON")
    ap.add_argument("--import", dest="import_path", metavar="PATH", help="Append quotes from a JSON array file")
    ap.add_argument("--sync", action="store_true", help="Run one sync tick (push, then fetch and merge)")
    ap.add_argument("--watch", action="store_true", help="Keep syncing on the configured interval until Ctrl-C")
    ap.add_argument("--reset", action="store_true", help="Delete local storage (next run re-seeds defaults)")
    ap.add_argument("--debug", action="store_true", help="Enable verbose logging")
    ap.add_argument("--version", action="store_true", help="Print version info and exit")
    return ap


# --------------------------- Commands ----------------------------------------
def cmd_random(rt: Runtime, category: Optional[str]) -> int:
    quotes = rt.collection.get()
    selected = restore_filter(rt.collection.load_filter(), rt.collection.categories())
    if category:
        selected = restore_filter(category, rt.collection.categories())
        if category != ALL and selected == ALL:
            print(f"[!] Unknown category {category!r}; showing all.")
        rt.collection.save_filter(selected)
    try:
        q = pick_random(visible_set(quotes, selected))
    except EmptySelectionError:
        print("[i] No quotes available in this category.")
        return 0
    builtins.print(format_quote(q))
    return 0


def cmd_add(rt: Runtime, text: str, category: str) -> int:
    q = rt.collection.add(text, category)
    print(f"[✓] Quote added successfully! ({q.category}) total={len(rt.collection)}")
    return 0


def cmd_categories(rt: Runtime) -> int:
    for c in rt.collection.categories():
        builtins.print(c)
    return 0


def cmd_export(rt: Runtime, path: str) -> int:
    p = Path(path)
    p.write_text(rt.collection.export_json() + "\n", encoding="utf-8")
    print(f"[✓] Exported {len(rt.collection)} quotes to {p}")
    return 0


def cmd_import(rt: Runtime, path: str) -> int:
    p = Path(path)
    try:
        raw = p.read_text(encoding="utf-8")
    except OSError as e:
        print(f"[!] Could not read {p}: {e}")
        return 1
    added = rt.collection.import_json(raw)
    print(f"[✓] Quotes imported successfully! added={len(added)} total={len(rt.collection)}")
    return 0


def cmd_sync(rt: Runtime) -> int:
    print_banner()
    print(f"[i] Remote: {rt.engine.url}")
    print(f"[i] Pre-sync: local={len(rt.collection)}")
    res = rt.engine.tick()
    for n in rt.notifier.active():
        tag = "[!]" if n["kind"] == "error" else "[✓]" if n["kind"] == "success" else "[i]"
        print(f"{tag} {n['message']}")
    print(f"[i] Post-sync: local={len(rt.collection)} added={res.items_added} → {res.status.name}")
    return 0 if res.status in (SyncStatus.SUCCESS, SyncStatus.WARNING) else 1


def cmd_watch(rt: Runtime) -> int:
    print_banner()
    interval = (rt.cfg.get("sync") or {}).get("interval_sec")
    print(f"[i] Syncing with {rt.engine.url} every {interval}s (Ctrl-C to stop)")
    sched = SyncScheduler(
        lambda: rt.cfg,
        run_sync_fn=lambda: rt.engine.tick().status in (SyncStatus.SUCCESS, SyncStatus.WARNING),
        is_sync_running_fn=rt.engine.is_running,
    )
    sched.run_once()
    sched.start()
    try:
        while True:
            time.sleep(1.0)
    except KeyboardInterrupt:
        print("\n[!] Stopped")
    finally:
        sched.stop()
    return 0


# --------------------------- Main --------------------------------------------
def main(argv: Optional[List[str]] = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)

    # If user requested help, show help WITH examples
    if any(h in argv for h in ("-h", "--help")):
        build_parser(include_examples=True).print_help()
        return 0

    ap = build_parser(include_examples=False)
    if not argv:
        ap.print_help()
        return 0
    args = ap.parse_args(argv)

    if args.version:
        builtins.print(f"Quote_Sync version: {__VERSION__}")
        return 0

    cfg = load_config()
    if args.debug:
        cfg.setdefault("runtime", {})["debug"] = True

    rt = build_runtime(cfg)
    if args.debug:
        print(f"[debug] config: {config_path()}  storage: {rt.store.path}")

    try:
        if args.reset:
            rt.store.clear()
            print("[✓] Cleared local storage (next run re-seeds defaults).")
            return 0
        if args.add:
            return cmd_add(rt, args.add[0], args.add[1])
        if args.import_path:
            return cmd_import(rt, args.import_path)
        if args.export:
            return cmd_export(rt, args.export)
        if args.categories:
            return cmd_categories(rt)
        if args.random:
            return cmd_random(rt, args.category)
        if args.sync:
            return cmd_sync(rt)
        if args.watch:
            return cmd_watch(rt)
    except QuoteError as e:
        print(f"[!] {e}")
        return 1

    ap.print_help()
    return 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\n[!] Aborted")

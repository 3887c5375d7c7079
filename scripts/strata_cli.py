#!/usr/bin/env python3
"""
strata CLI

Usage modes:
- Default run: compile a storyboard, replay a scroll log, print the final
  state (era lifecycle states and every surface element) or write JSON
- Utility: list bundled storyboards, show version

Without --events every era is entered at t=0.
"""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import json
import logging
import sys
from glob import glob
from pathlib import Path
from typing import Any, Dict, List

from strata_core.compiler import Storyboard, compile_storyboard_from_file  # type: ignore
from strata_anim.adapters.jsonl import JsonlScrollSource  # type: ignore
from strata_anim.models.events import ScrollEvent, StepEnter  # type: ignore
from strata_anim.runner import replay, replay_realtime  # type: ignore


def parse_args(argv: List[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        description="Replay a scroll log against a storyboard and dump the final state",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    # Utilities / meta
    p.add_argument("--version", action="store_true", help="Print version and exit")
    p.add_argument("-v", "--verbose", action="count", default=0, help="Increase verbosity (-v, -vv)")
    p.add_argument("--list-storyboards", action="store_true", help="List bundled storyboard YAML files and exit")

    # Primary input
    p.add_argument("storyboard", nargs="?", help="Path to storyboard YAML (e.g., scripts/storyboard.yaml)")
    p.add_argument("--events", type=str, default="", help="JSONL scroll log to replay")

    # Execution
    p.add_argument("--until", type=float, default=None, help="Time (ms) of the dumped state; defaults to the last event")
    p.add_argument("--omit", action="append", default=[], metavar="ERA", help="Leave the container of ERA unmounted (repeatable)")
    p.add_argument("--realtime", action="store_true", help="Play in wall-clock time on the asyncio event loop")
    p.add_argument("--out", type=str, default="", help="Optional output JSON file path")

    # Timeline config overrides
    p.add_argument("--seed", type=int, default=None, help="Random seed for the procedural generators")
    p.add_argument("--frame-ms", type=float, default=None, help="Frame interval in ms")
    p.add_argument("--keep-on-exit", action="store_true", help="Do not reset a vignette when its section is left")

    return p.parse_args(argv)


def build_storyboard(args: argparse.Namespace) -> Storyboard:
    sb = compile_storyboard_from_file(args.storyboard)
    overrides: Dict[str, Any] = {}
    if args.seed is not None:
        overrides["seed"] = args.seed
    if args.frame_ms is not None:
        overrides["frame_interval_ms"] = float(args.frame_ms)
    if args.keep_on_exit:
        overrides["reset_on_exit"] = False
    if overrides:
        sb.config = dataclasses.replace(sb.config, **overrides)
    return sb


def load_events(args: argparse.Namespace, sb: Storyboard) -> List[ScrollEvent]:
    if args.events:
        return list(JsonlScrollSource(args.events).stream_events())
    return [StepEnter(era=key, index=i, t=0.0) for i, key in enumerate(sb.keys())]


def setup_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s")


def find_storyboards() -> List[str]:
    # Search relative to repo root and this script location
    here = Path(__file__).resolve()
    repo_root = here.parent.parent
    candidates = []
    for base in [repo_root, here.parent]:
        candidates.extend(sorted(glob(str(base / "*.yaml"))))
        candidates.extend(sorted(glob(str(base / "scripts" / "*.yaml"))))
    # Deduplicate while preserving order
    seen = set()
    result = []
    for c in candidates:
        if c not in seen:
            seen.add(c)
            result.append(c)
    return result


def main(argv: List[str] | None = None) -> int:
    from strata_core import __version__ as strata_version  # type: ignore

    args = parse_args(argv)
    setup_logging(args.verbose)

    if args.version:
        print(strata_version)
        return 0

    if args.list_storyboards:
        print(json.dumps(find_storyboards(), indent=2))
        return 0

    if not args.storyboard:
        print("error: missing storyboard path (try --list-storyboards)", file=sys.stderr)
        return 2

    logging.info("Compiling storyboard from %s", args.storyboard)
    sb = build_storyboard(args)
    events = load_events(args, sb)

    if args.realtime:
        state = asyncio.run(replay_realtime(sb, events, until_ms=args.until, omit=args.omit))
    else:
        state = replay(sb, events, until_ms=args.until, omit=args.omit)

    if args.out:
        with open(args.out, "w", encoding="utf-8") as f:
            json.dump(state, f, indent=2)
    else:
        print(json.dumps(state, indent=2))

    return 0


if __name__ == "__main__":
    raise SystemExit(main())

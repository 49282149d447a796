from __future__ import annotations

import argparse
import json
import sys
from typing import List, Optional

from .config import DEFAULT_RELOAD_CONFIG, ReloadConfig, get_preset, list_presets
from .decision import ReloadJobGiver, evaluate_reload_need
from .logging_config import configure_logging, get_logger
from .snapshot import load_snapshot
from .validation import SnapshotError

EXIT_RELOAD = 0
EXIT_NO_RELOAD = 1
EXIT_INVALID = 2


def _resolve_config(args: argparse.Namespace) -> Optional[ReloadConfig]:
    if args.config:
        return ReloadConfig.load(args.config)
    if args.preset:
        return get_preset(args.preset)
    return DEFAULT_RELOAD_CONFIG


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(
        prog="reload-check",
        description="Decide whether an agent snapshot needs a reload",
    )
    ap.add_argument("snapshot", help="Agent snapshot (.json, .yaml or .yml)")
    source = ap.add_mutually_exclusive_group()
    source.add_argument("--config", help="ReloadConfig file (.json or .yaml)")
    source.add_argument("--preset", choices=list_presets(), help="Built-in config preset")
    ap.add_argument("--json", action="store_true", help="Print the decision as JSON")
    ap.add_argument("--log-dir", help="Also write rotating log files here")
    ap.add_argument("--verbose", action="store_true", help="Enable debug logging")

    args = ap.parse_args(argv)

    configure_logging(level="DEBUG" if args.verbose else "WARNING", log_dir=args.log_dir)
    log = get_logger("reload_engine.decisions")

    config = _resolve_config(args)
    if config is None:
        print(f"error: cannot load config {args.config}", file=sys.stderr)
        return EXIT_INVALID

    try:
        agent = load_snapshot(args.snapshot)
    except SnapshotError as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_INVALID

    decision = evaluate_reload_need(agent)
    priority = ReloadJobGiver(config).get_priority(agent)
    log.event(
        decision.reason.value,
        f"Evaluated {agent.agent_id}",
        agent_id=agent.agent_id,
        subsystem="cli",
        priority=priority,
    )

    if args.json:
        print(json.dumps({**decision.to_dict(), "priority": priority}, indent=2))
    elif decision.needed:
        link = decision.link.label if decision.link and decision.link.label else "current link"
        print(f"[reload] {agent.agent_id}: {decision.weapon.name} with {link} "
              f"({decision.branch.value}, priority {priority})")
    else:
        print(f"[no reload] {agent.agent_id}: {decision.reason.value}")

    return EXIT_RELOAD if decision.needed else EXIT_NO_RELOAD


if __name__ == "__main__":
    sys.exit(main())

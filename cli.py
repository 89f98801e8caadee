import argparse
import json
import logging
import time

from engine import SimulationEngine
from modifiers import load_modifiers


def _engine_from_args(args) -> SimulationEngine:
    mods = load_modifiers(args.config) if args.config else None
    eng = SimulationEngine(size=args.size, seed=args.seed, modifiers=mods)
    eng.initialize(civilization_count=args.civs, resource_source_count=args.sources)
    return eng


def format_summary(s: dict) -> str:
    leader = None
    if s["civs"]:
        leader = max(s["civs"].items(), key=lambda kv: kv[1]["territories"])
    line = (f"tick={s['tick']} civs={len(s['civs'])} occupied={s['occupied']}"
            f" conflicts={s['conflicts']} discovered={s['discovered']}/{s['resource_sources']}")
    if leader is not None:
        cid, info = leader
        line += (f" leader={cid} ({info['stage'].lower()}, pop={info['population']},"
                 f" cells={info['territories']})")
    return line


def cmd_run(args):
    eng = _engine_from_args(args)
    eng.start()
    for _ in range(args.ticks):
        if not eng.is_running:
            break
        eng.tick()
        if args.every and eng.tick_count % args.every == 0:
            print(format_summary(eng.summary()))
        if args.interval > 0:
            time.sleep(args.interval)

    print(format_summary(eng.summary()))
    dom = eng.dominant_civilization
    if dom is not None:
        print(f"Civilization {dom.id} dominates after {eng.tick_count} ticks"
              f" with {dom.size} cells")
    else:
        print(f"No dominant civilization after {eng.tick_count} ticks")


def cmd_summary(args):
    eng = _engine_from_args(args)
    print(json.dumps(eng.summary(), indent=2))


def _add_world_args(p):
    p.add_argument("--size", type=int, default=None, help="Grid side length")
    p.add_argument("--civs", type=int, default=10, help="Initial civilizations")
    p.add_argument("--sources", type=int, default=20, help="Resource sources")
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--config", default=None, help="Balance JSON overriding modifiers")


def main(argv=None):
    ap = argparse.ArgumentParser(description="Headless CLI for simulation")
    ap.add_argument("--log-level", default="WARNING",
                    choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    sub = ap.add_subparsers()

    ap_run = sub.add_parser("run", help="Tick the world until dominance or the tick limit")
    _add_world_args(ap_run)
    ap_run.add_argument("--ticks", type=int, default=1000)
    ap_run.add_argument("--interval", type=float, default=0.0,
                        help="Seconds to wait between ticks")
    ap_run.add_argument("--every", type=int, default=100,
                        help="Print a summary every N ticks (0 disables)")
    ap_run.set_defaults(func=cmd_run)

    ap_sum = sub.add_parser("summary", help="Print the initial world as JSON")
    _add_world_args(ap_sum)
    ap_sum.set_defaults(func=cmd_summary)

    args = ap.parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level),
                        format="%(levelname)s %(name)s: %(message)s")
    if hasattr(args, "func"):
        args.func(args)
    else:
        ap.print_help()


if __name__ == "__main__":
    main()

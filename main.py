#!/usr/bin/env python3
"""
main.py - Orchestrator for the plant growth simulation

Usage examples:
    python main.py list
    python main.py sim_run --biome forest --seed fern --ticks 3600 --plot
    python main.py render --ticks 1200 --out plant.png
    python main.py train_ppo --demo

This script expects to be run from the project root.
"""
import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path

from baseline_controller import drive
from config import get_biome, get_params, get_seed, get_settings, load_biomes, load_config, load_seeds
from rl.train_ppo import build_parser as ppo_parser
from rl.train_ppo import main as ppo_main
from sim.engine import create_state, run

ROOT = Path(__file__).resolve().parent
logger = logging.getLogger(__name__)


def _state_from_args(args):
    cfg = load_config(args.config)
    biome = get_biome(args.biome or cfg.get('biome', 'plains'))
    seed = get_seed(args.seed or cfg.get('plant_seed', 'oak'))
    rng = args.rng_seed if args.rng_seed is not None else cfg.get('seed')
    return create_state(biome, seed, get_settings(cfg), get_params(cfg), rng=rng)


def list_cmd(args):
    print("Biomes:")
    for bid, biome in sorted(load_biomes().items()):
        print(f"  {bid:<12} {biome.name:<20} sun={biome.sunlight:.2f} rain={biome.rainfall:.2f} "
              f"temp={biome.temp_range[0]:.0f}..{biome.temp_range[1]:.0f}C")
    print("Seeds:")
    for sid, seed in sorted(load_seeds().items()):
        kind = 'annual' if seed.is_annual else 'perennial'
        print(f"  {sid:<12} {seed.name:<20} {kind}")


def sim_run(args):
    log_dir = ROOT / "logs"
    log_dir.mkdir(exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = log_dir / f"sim_run_{timestamp}.log"

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s | %(levelname)s | %(name)s | %(message)s',
        handlers=[
            logging.FileHandler(log_file, mode='w'),
            logging.StreamHandler()
        ]
    )

    state = _state_from_args(args)
    logger.info("=" * 80)
    logger.info("SIMULATION RUN STARTED")
    logger.info("Biome: %s | Seed: %s | Ticks: %d", state.biome.name, state.seed.name, args.ticks)
    logger.info("Log file: %s", log_file)
    logger.info("=" * 80)

    history = drive(state, args.ticks)

    p = state.plant
    logger.info("=" * 80)
    logger.info("SIMULATION RUN FINISHED at day %d (%s)", state.day, state.season_name)
    logger.info("Health %.1f | seeds %d | rings %d | nodes %d | root segments %d",
                state.health, p.seeds_produced, p.growth_rings, len(p.nodes),
                len(p.root_graph.all_segments()))
    if state.life_complete:
        logger.info("Life cycle complete")
    logger.info("=" * 80)

    if args.plot:
        from viz.plot_utils import plot_run_summary
        plot_run_summary(history, state=state, out_dir=args.plot_dir, prefix=f"{state.biome.id}_{state.seed.id}")
    if args.render:
        from viz.render import render_plant
        render_plant(state, out_path=args.render)
        logger.info("Final plant saved to %s", args.render)
    return state


def render_cmd(args):
    from viz.render import render_plant

    state = _state_from_args(args)
    if args.baseline:
        drive(state, args.ticks)
    else:
        run(state, args.ticks)
    render_plant(state, out_path=args.out)
    print(f"[main] Plant at day {state.day} saved to {args.out}")


def train_ppo_cmd(args):
    ppo_main(args)


def _add_state_args(p):
    p.add_argument("--config", type=str, default=None, help="config file path")
    p.add_argument("--biome", type=str, default=None, help="biome id (see `list`)")
    p.add_argument("--seed", type=str, default=None, help="plant seed id (see `list`)")
    p.add_argument("--rng_seed", type=int, default=None, help="random seed (default: config seed)")


def parse_args(argv=None):
    p = argparse.ArgumentParser(description="Plant growth simulation - main orchestrator")
    sub = p.add_subparsers(dest="cmd")

    sub.add_parser("list", help="List available biomes and seeds")

    s = sub.add_parser("sim_run", help="Run a simulation driven by the baseline controller")
    _add_state_args(s)
    s.add_argument("--ticks", type=int, default=3600, help="ticks to run (10 per day)")
    s.add_argument("--plot", action='store_true', help="save time series, final render and summary")
    s.add_argument("--plot_dir", type=str, default="plots", help="plot output directory")
    s.add_argument("--render", type=str, default=None, help="save a picture of the final plant to this file")
    s.add_argument("--verbose", action='store_true', help="debug-level logging")

    r = sub.add_parser("render", help="Advance a plant and save a picture of it")
    _add_state_args(r)
    r.add_argument("--ticks", type=int, default=1200, help="ticks to run before rendering")
    r.add_argument("--baseline", action='store_true', help="let the baseline controller play")
    r.add_argument("--out", type=str, default="plant.png", help="output filename")

    t = sub.add_parser("train_ppo", help="Train a PPO agent")
    ppo_parser(t)

    return p.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    if args.cmd == "list":
        list_cmd(args)
    elif args.cmd == "sim_run":
        sim_run(args)
    elif args.cmd == "render":
        render_cmd(args)
    elif args.cmd == "train_ppo":
        logging.basicConfig(level=logging.INFO, format='%(asctime)s [%(levelname)s] %(name)s: %(message)s')
        train_ppo_cmd(args)
    else:
        print("No command given. Use -h for help.")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())

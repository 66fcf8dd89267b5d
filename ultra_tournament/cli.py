#!/usr/bin/env python3
"""
ultra_tournament/cli.py - Command line interface for Ultra Tournament

Usage:
    ultra-tournament run [--battle NAME] [--entrants N | --values V ...] [options]
    ultra-tournament list-battles
    ultra-tournament info <battle>
"""

import argparse
import logging
import random
import sys
from pathlib import Path

# Set up logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger(__name__)


def cmd_run(args):
    """Build a tournament, solve it, and show the bracket."""
    from ultra_tournament.config import load_config
    from ultra_tournament.errors import TournamentError
    from ultra_tournament.render import print_tournament
    from ultra_tournament.tournament import Tournament

    config = load_config(args.config)
    _apply_config(config, args)

    name = args.battle or config.tournament.battle_system
    seed = args.seed if args.seed is not None else config.tournament.seed

    system = load_battle_system(name, seed)
    if system is None:
        return 1

    # Entrants: explicit values, or generated
    try:
        if args.values:
            entrants = [system.parse_entrant(v) for v in args.values]
        else:
            count = args.entrants if args.entrants is not None else config.tournament.entrants
            rng = random.Random(seed)
            entrants = [system.random_entrant(rng) for _ in range(count)]
    except NotImplementedError as e:
        logger.error(str(e))
        return 1
    except ValueError as e:
        logger.error(f"Bad entrant value: {e}")
        return 1

    try:
        tournament = Tournament(entrants, system)

        if args.round_by_round:
            # Children always have higher ids than their parent round
            for node_id in reversed(tournament.graph.node_indices()):
                result = tournament.solve_round(node_id)
                if result is not None:
                    logger.info(f"   Round {node_id}: {tournament.node(node_id)}")

        tournament.solve()

        if not args.no_tree:
            print_tournament(tournament)
    except TournamentError as e:
        logger.error(f"Tournament error: {e}")
        return 1

    champion = tournament.winner_entrant(tournament.grand_finals)
    print(f"\n🏆 Champion: {champion}")
    print(f"   {tournament.len_entrants()} entrants, {tournament.len_rounds()} rounds")
    return 0


def cmd_list_battles(args):
    """List available battle systems."""
    from ultra_tournament.config import load_config
    from ultra_tournament.registry import list_battle_systems

    _apply_config(load_config(args.config), args)
    systems = list_battle_systems()

    print("\n📋 Available Battle Systems\n")
    print(f"{'Name':<15} {'Source':<10} {'Entrants':<16} {'Description'}")
    print("-" * 72)

    for s in systems:
        description = s.description
        if len(description) > 40:
            description = description[:37] + "..."
        print(f"{s.name:<15} {s.source:<10} {s.entrant_type or '?':<16} {description}")

    print()
    return 0


def cmd_info(args):
    """Show detailed info about a battle system."""
    from ultra_tournament.config import load_config
    from ultra_tournament.registry import get_battle_system_info

    _apply_config(load_config(args.config), args)

    info = get_battle_system_info(args.battle)
    if info is None:
        logger.error(f"Unknown battle system: {args.battle}")
        return 1

    print(f"\n⚔️  {info.display_name or info.name}")
    print()
    print(f"   Name: {info.name}")
    print(f"   Source: {info.source}")
    print(f"   Entrants: {info.entrant_type or '?'}")
    print(f"   Entry point: {info.entry_point}")
    print()
    print(f"   {info.description}")
    print()
    return 0


def load_battle_system(name: str, seed: int | None = None):
    """Load a battle system by name via the registry."""
    from ultra_tournament.registry import (
        load_battle_system as registry_load,
        BattleSystemNotFoundError,
        BattleSystemLoadError,
    )

    kwargs = {"seed": seed} if seed is not None else {}
    try:
        return registry_load(name, **kwargs)
    except BattleSystemNotFoundError as e:
        logger.error(e.args[0])
        return None
    except BattleSystemLoadError as e:
        logger.error(str(e))
        return None


def _apply_config(config, args) -> None:
    """Register config battle systems and apply the configured log level."""
    from ultra_tournament.registry import load_from_config

    load_from_config(config)

    # --verbose wins over the config file
    if getattr(args, "verbose", False):
        return
    level = logging.getLevelName(config.log_level)
    if isinstance(level, int):
        logging.getLogger().setLevel(level)
    else:
        logger.warning(f"Unknown log level in config: {config.log_level!r}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ultra-tournament",
        description="Single-elimination tournaments with pluggable battle systems",
    )
    parser.add_argument("--config", type=Path, default=None, help="Config file (default: ~/.ultra_tournament/config.toml)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log every round")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # run command
    run_parser = subparsers.add_parser("run", help="Build and solve a tournament")
    run_parser.add_argument("--battle", "-b", default=None, help="Battle system (default: from config, else int)")
    run_parser.add_argument("--entrants", "-n", type=int, default=None, help="Number of generated entrants (default: from config, else 16)")
    run_parser.add_argument("--values", nargs="+", default=None, help="Explicit entrants in seeding order, parsed by the battle system")
    run_parser.add_argument("--seed", type=int, default=None, help="Random seed for entrants and tiebreakers")
    run_parser.add_argument("--round-by-round", action="store_true", help="Solve and log each round before the grand finals")
    run_parser.add_argument("--no-tree", action="store_true", help="Don't print the bracket tree")
    run_parser.set_defaults(func=cmd_run)

    # list-battles command
    list_parser = subparsers.add_parser("list-battles", help="List available battle systems")
    list_parser.set_defaults(func=cmd_list_battles)

    # info command
    info_parser = subparsers.add_parser("info", help="Show info about a battle system")
    info_parser.add_argument("battle", help="Battle system name")
    info_parser.set_defaults(func=cmd_info)

    return parser


def main():
    parser = build_parser()
    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    sys.exit(args.func(args))


if __name__ == "__main__":
    main()

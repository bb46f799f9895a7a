"""
Blitz CLI - Command-line interface for the simulator.

Usage:
    blitz simulate [--rounds N] [--players N] [--seed N]   Run rounds headless
    blitz serve [--host H] [--port P]                      Run the HTTP API
"""

import argparse
import logging
import sys


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Blitz - Dutch Blitz Simulator",
        prog="blitz",
    )
    parser.add_argument("--verbose", "-v", action="count", default=0,
                        help="Log engine events (-v for rounds, -vv for everything)")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Simulate command
    simulate_parser = subparsers.add_parser("simulate", help="Run rounds headless and print stats")
    simulate_parser.add_argument("--rounds", "-n", type=int, default=10, help="Rounds to play")
    simulate_parser.add_argument("--players", type=int, default=None, help="Number of bots")
    simulate_parser.add_argument("--seed", type=int, default=None, help="Random seed")
    simulate_parser.add_argument("--policy", choices=["heuristic", "random"], default="heuristic",
                                 help="Bot policy for every seat")
    simulate_parser.add_argument("--max-ticks", type=int, default=None,
                                 help="Ticks before a round is called off")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    if args.command == "simulate":
        cmd_simulate(args)
    elif args.command == "serve":
        cmd_serve(args)
    else:
        parser.print_help()
        sys.exit(1)


def configure_logging(verbosity: int):
    level = {0: logging.WARNING, 1: logging.INFO}.get(verbosity, logging.DEBUG)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def cmd_simulate(args):
    """Play rounds back to back and print the statistics table."""
    from .config import GameConfig
    from .session import GameLoop, SessionManager

    if args.rounds < 1:
        print("Error: --rounds must be at least 1")
        sys.exit(1)

    try:
        config = GameConfig.from_env(
            player_count=args.players,
            seed=args.seed,
            max_ticks=args.max_ticks,
        )
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(1)

    manager = SessionManager()
    session = manager.create_session(config=config, policy=args.policy)
    loop = GameLoop(session)

    print(f"Simulating {args.rounds} round(s) with {config.player_count} {args.policy} bot(s)")
    for player in session.players:
        print(f"  {player.name}: {player.strategy or 'random'}")
    print()

    for summary in loop.run_rounds(args.rounds):
        outcome = summary.winner or f"no winner ({summary.reason})"
        print(f"Round {summary.round_number}: {outcome}, {summary.move_count} moves")

    stats = session.stats.snapshot()
    print()
    print(f"Games played: {stats.total_games}")
    print(f"Average round duration: {stats.average_round_duration}s")
    print()
    print(f"{'Player':<10} {'Wins':>5} {'Win %':>6} {'Avg plays':>10} {'Total plays':>12}")
    for p in stats.players:
        print(f"{p.name:<10} {p.wins:>5} {p.win_rate:>5}% {p.average_plays_per_game:>10} {p.total_plays:>12}")


def cmd_serve(args):
    """Run the API under uvicorn."""
    import uvicorn
    from .api import create_app

    uvicorn.run(create_app(), host=args.host, port=args.port)


if __name__ == "__main__":
    main()

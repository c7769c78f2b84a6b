"""Mytherra CLI entry point."""

import argparse
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv
from pydantic import ValidationError

env_file = Path(__file__).parent.parent / ".env"
load_dotenv(env_file)

from mytherra import __version__
from mytherra.config import get_settings
from mytherra.exceptions import MytherraError
from mytherra.game import Game

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

logger = logging.getLogger(__name__)

CONFIG_TEMPLATE = """# Mytherra Configuration
# Operational parameters for the world simulation and the divine betting market.
# Secrets (LOGFIRE_TOKEN) belong in .env, not here.

simulation:
  seed: 1337
  starting_year: 1
  player_id: SINGLE_PLAYER
  initial_favor: 100

economy:
  favor_per_tick: 10

betting:
  min_odds: 1.0
  min_stake: 10
  max_stake: 1000
  lock_timeout_seconds: 2.0

evolution:
  decline_threshold: 25
  growth_factor: 0.10
  max_growth_rate: 0.15
  chance_to_move: 0.30
  discovery_chance: 0.10

scheduler:
  tick_interval_seconds: 60

api:
  host: 0.0.0.0
  port: 8000
"""


def _init_logfire() -> None:
    """Initialize Logfire if available, without failing commands."""
    try:
        from mytherra.observability import initialize_logfire

        initialize_logfire(get_settings())
    except Exception as e:
        logger.warning(f"Failed to initialize Logfire: {e}")


def _load_game() -> Game:
    return Game.from_settings(get_settings())


def cmd_init(args: argparse.Namespace) -> int:
    """Initialize data directory, configuration file and seeded world state."""
    try:
        settings = get_settings()
        data_dir = settings.data_dir
        data_dir.mkdir(parents=True, exist_ok=True)
        logger.info(f"Created data directory: {data_dir}")

        config_path = data_dir / "config.yaml"
        if not config_path.exists():
            config_path.write_text(CONFIG_TEMPLATE, encoding="utf-8")
            logger.info(f"Created config template: {config_path}")
        else:
            logger.info(f"Config file already exists: {config_path}")

        if settings.state_path.exists():
            logger.info(f"State file already exists: {settings.state_path}")
        else:
            Game.from_settings(settings)
            logger.info(f"Created seeded world state: {settings.state_path}")

        print(f"\n✓ Data directory initialized at {data_dir}")
        print("\nNext steps:")
        print("1. Review and customize data/config.yaml if needed")
        print("2. Run 'python -m mytherra status' to inspect the world")
        print("3. Run 'python -m mytherra run' to start the yearly ticks\n")
        return 0

    except Exception as e:
        logger.error(f"Failed to initialize: {e}")
        print(f"\n❌ Initialization failed: {e}\n")
        return 1


def cmd_config(args: argparse.Namespace) -> int:
    """Display merged configuration."""
    try:
        settings = get_settings()

        print("\n=== Mytherra Configuration ===\n")
        print(f"Data Directory: {settings.data_dir}")
        print(f"Environment: {settings.environment}\n")

        print("Simulation:")
        print(f"  Seed: {settings.simulation.seed}")
        print(f"  Starting Year: {settings.simulation.starting_year}")
        print(f"  Player: {settings.simulation.player_id}")
        print(f"  Initial Favor: {settings.simulation.initial_favor}\n")

        print("Economy:")
        print(f"  Favor per Tick: {settings.economy.favor_per_tick}\n")

        print("Betting:")
        print(f"  Min Odds: {settings.betting.min_odds}")
        print(f"  Stake Range: {settings.betting.min_stake} - {settings.betting.max_stake}")
        print(f"  Lock Timeout: {settings.betting.lock_timeout_seconds}s")
        betting_config = settings.betting_config_path
        print(f"  Tables: {betting_config if betting_config.exists() else 'built-in defaults'}\n")

        print("Scheduler:")
        print(f"  Tick Interval: {settings.scheduler.tick_interval_seconds}s\n")

        print("API:")
        print(f"  Listen: {settings.api.host}:{settings.api.port}\n")

        print(f"Logfire: {'✓ Set' if settings.logfire_token else '✗ Not set'}\n")
        return 0

    except ValidationError as e:
        print("\n❌ Configuration Error:\n")
        for error in e.errors():
            print(f"  • {'.'.join(str(x) for x in error['loc'])}: {error['msg']}")
        print()
        return 1
    except Exception as e:
        logger.error(f"Failed to load config: {e}")
        print(f"\n❌ Failed to load configuration: {e}\n")
        return 1


def cmd_status(args: argparse.Namespace) -> int:
    """Display the current year, divine favor, world and recent events."""
    try:
        game = _load_game()
        summary = game.world_summary()
        favor = summary["favor"]

        print("\n=== Mytherra World Status ===\n")
        print(f"Year: {summary['current_year']}")
        print(f"Divine Favor: {favor['balance']} (reserved {favor['reserved']})")
        print(f"Active Bets: {summary['active_bets']}\n")

        print("Regions:")
        for region in summary["regions"]:
            print(
                f"  • {region['name']} [{region['status']}] "
                f"prosperity {region['prosperity']}, chaos {region['chaos']}"
            )
        print()

        print("Settlements:")
        for settlement in summary["settlements"]:
            print(
                f"  • {settlement['name']} ({settlement['type']}, {settlement['status']}) "
                f"pop {settlement['population']}"
            )
        print()

        events = game.recent_events(5)
        print("Recent Events:")
        if events:
            for event in events:
                print(f"  {event.year}: {event.title}")
        else:
            print("  (None)")
        print()
        return 0

    except Exception as e:
        logger.error(f"Failed to read status: {e}")
        print(f"\n❌ Failed to read status: {e}\n")
        return 1


def cmd_tick(args: argparse.Namespace) -> int:
    """Advance the world manually."""
    try:
        game = _load_game()
        for _ in range(args.count):
            result = game.run_tick()
            if not result.completed:
                print(f"\n❌ Tick for year {result.year} failed: {result.error}\n")
                return 1
            resolved = result.resolution.processed_count if result.resolution else 0
            print(
                f"✓ Year {result.year} complete: {len(result.events)} events, "
                f"{resolved} bets resolved"
            )
            for event in result.events:
                print(f"    • {event.title}")

        account = game.get_account()
        print(f"\nNow year {game.clock.current_year}. Divine favor: {account.balance}\n")
        return 0

    except Exception as e:
        logger.error(f"Tick failed: {e}", exc_info=True)
        print(f"\n❌ Tick failed: {e}\n")
        return 1


def cmd_odds(args: argparse.Namespace) -> int:
    """Quote odds for a prospective bet."""
    try:
        game = _load_game()
        quote = game.get_odds(
            args.bet_type,
            args.target_id,
            target_type=args.target_type,
            confidence=args.confidence,
            timeframe=args.timeframe,
            stake=args.stake,
        )
        print(f"\n{quote.bet_type} on {quote.target_type} {quote.target_id}")
        print(f"  Confidence: {quote.confidence}, timeframe {quote.timeframe} years")
        print(f"  Odds: {quote.odds:.2f} (implied probability {quote.implied_probability:.0%})")
        if quote.payout is not None:
            print(f"  Payout for {quote.stake}: {quote.payout}")
        print()
        return 0

    except MytherraError as e:
        print(f"\n❌ {e.message}\n")
        return 1
    except Exception as e:
        logger.error(f"Odds quote failed: {e}", exc_info=True)
        print(f"\n❌ Odds quote failed: {e}\n")
        return 1


def cmd_bet(args: argparse.Namespace) -> int:
    """Place a bet with divine favor."""
    try:
        game = _load_game()
        bet = game.place_bet(
            bet_type=args.bet_type,
            target_id=args.target_id,
            description=args.description,
            timeframe=args.timeframe,
            confidence=args.confidence,
            divine_favor_stake=args.stake,
            target_type=args.target_type,
        )
        account = game.get_account()
        print(f"\n✓ Bet placed: {bet.id}")
        print(f"  Odds: {bet.current_odds:.2f}, potential payout {bet.potential_payout}")
        print(f"  Expires after year {bet.expiry_year}")
        print(f"  Divine favor: {account.balance} (reserved {account.reserved})\n")
        return 0

    except MytherraError as e:
        print(f"\n❌ Bet rejected: {e.message}\n")
        return 1
    except Exception as e:
        logger.error(f"Bet failed: {e}", exc_info=True)
        print(f"\n❌ Bet failed: {e}\n")
        return 1


def cmd_run(args: argparse.Namespace) -> int:
    """Start the scheduled world ticks."""
    try:
        _init_logfire()

        if args.debug:
            logging.getLogger().setLevel(logging.DEBUG)

        from mytherra.scheduler import start_scheduler

        settings = get_settings()
        game = Game.from_settings(settings)

        print("\n=== Mytherra World Engine ===\n")
        print(f"Version: {__version__}")
        print(f"Year: {game.clock.current_year}")
        print(f"Tick Interval: {settings.scheduler.tick_interval_seconds}s")
        print(f"Data Directory: {settings.data_dir}\n")

        print("Starting scheduler...\n")
        start_scheduler(game, settings)
        return 0

    except KeyboardInterrupt:
        print("\n\nReceived interrupt signal. Shutting down...\n")
        return 0
    except Exception as e:
        logger.error(f"Failed to start engine: {e}", exc_info=True)
        print(f"\nFailed to start: {e}\n")
        return 1


def cmd_serve(args: argparse.Namespace) -> int:
    """Serve the HTTP API with uvicorn."""
    try:
        _init_logfire()

        import uvicorn

        from mytherra.api.server import create_app
        from mytherra.scheduler import build_background_scheduler

        settings = get_settings()
        game = Game.from_settings(settings)
        scheduler = None if args.no_ticks else build_background_scheduler(game, settings)
        app = create_app(game, scheduler)
        uvicorn.run(
            app,
            host=args.host or settings.api.host,
            port=args.port or settings.api.port,
        )
        return 0

    except Exception as e:
        logger.error(f"Failed to start API server: {e}", exc_info=True)
        print(f"\nFailed to start: {e}\n")
        return 1


def _add_bet_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--bet-type", required=True, help="Bet type code")
    parser.add_argument("--target-id", required=True, help="Target entity ID")
    parser.add_argument("--target-type", default=None, help="Target kind (inferred when omitted)")
    parser.add_argument("--confidence", default="possible", help="Confidence level code")
    parser.add_argument("--timeframe", type=int, default=5, help="Timeframe in years")


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Mytherra: a living fantasy world with a divine betting market",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"Mytherra {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    parser_init = subparsers.add_parser(
        "init",
        help="Initialize data directory, configuration and world state",
    )
    parser_init.set_defaults(func=cmd_init)

    parser_config = subparsers.add_parser(
        "config",
        help="Display merged configuration",
    )
    parser_config.set_defaults(func=cmd_config)

    parser_status = subparsers.add_parser(
        "status",
        help="Display current world status",
    )
    parser_status.set_defaults(func=cmd_status)

    parser_tick = subparsers.add_parser(
        "tick",
        help="Advance the world by one or more years",
    )
    parser_tick.add_argument(
        "--count",
        type=int,
        default=1,
        help="Number of ticks to run",
    )
    parser_tick.set_defaults(func=cmd_tick)

    parser_odds = subparsers.add_parser(
        "odds",
        help="Quote odds for a prospective bet",
    )
    _add_bet_arguments(parser_odds)
    parser_odds.add_argument("--stake", type=int, default=None, help="Stake to price a payout for")
    parser_odds.set_defaults(func=cmd_odds)

    parser_bet = subparsers.add_parser(
        "bet",
        help="Place a bet with divine favor",
    )
    _add_bet_arguments(parser_bet)
    parser_bet.add_argument("--stake", type=int, required=True, help="Divine favor to stake")
    parser_bet.add_argument("--description", required=True, help="What you predict will happen")
    parser_bet.set_defaults(func=cmd_bet)

    parser_run = subparsers.add_parser(
        "run",
        help="Start the scheduled world ticks",
    )
    parser_run.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )
    parser_run.set_defaults(func=cmd_run)

    parser_serve = subparsers.add_parser(
        "serve",
        help="Serve the HTTP API",
    )
    parser_serve.add_argument("--host", default=None, help="Bind address")
    parser_serve.add_argument("--port", type=int, default=None, help="Bind port")
    parser_serve.add_argument(
        "--no-ticks",
        action="store_true",
        help="Serve without running scheduled ticks in this process",
    )
    parser_serve.set_defaults(func=cmd_serve)

    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())

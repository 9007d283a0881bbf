"""
TradeLab - Main application entry point.

An educational trading simulator. By default this starts the HTTP proxy
that forwards oracle message requests; ``-play`` runs a scenario in the
terminal instead.
"""

import asyncio
import sys

import uvicorn
from dotenv import load_dotenv

# Load environment variables first
load_dotenv()

from tradelab.config.logging import get_logger
from tradelab.config.settings import get_settings
from tradelab.exceptions import TradeLabException
from tradelab.oracle.client import OracleClient
from tradelab.scheduler import shutdown_scheduler
from tradelab.services.game.controller import GameController
from tradelab.services.scenario.catalog import get_builtin_scenario, list_builtin_scenarios
from tradelab.services.trading.analytics import format_currency, format_percent
from tradelab.services.trading.models import TradeSide
from tradelab.utils.config import initialize_application, validate_environment

PLAY_HELP = """Commands:
  buy SYMBOL QTY    Buy at the current price
  sell SYMBOL QTY   Sell at the current price
  next [N]          Advance N days (default 1)
  assets            Show current prices
  status            Show the portfolio
  advice            Ask the oracle for market advice
  quit              Finish and evaluate the run"""


def print_assets(controller: GameController) -> None:
    for asset in controller.assets:
        print(
            f"  {asset.symbol:<8} {format_currency(asset.current_price):>14} "
            f"{format_percent(asset.change_24h):>9}"
        )


def print_status(controller: GameController) -> None:
    state = controller.state
    portfolio = state.portfolio
    print(f"Day {state.current_day}/{state.scenario.duration}")
    print(f"  Cash:  {format_currency(portfolio.cash)}")
    for position in portfolio.positions.values():
        print(
            f"  {position.symbol:<8} x{position.quantity:<6} "
            f"{format_currency(position.total_value):>14} "
            f"{format_percent(position.profit_loss_percent):>9}"
        )
    print(f"  Total: {format_currency(portfolio.total_value)}")


async def play_terminal(category: str) -> None:
    """Interactive scenario mode for playing without a frontend."""
    logger = get_logger(__name__)
    scenario = get_builtin_scenario(category)
    if scenario is None:
        names = ", ".join(s.category.value for s in list_builtin_scenarios())
        print(f"Unknown scenario '{category}'. Available: {names}")
        return

    oracle_client = OracleClient()
    if not await oracle_client.check_backend_health():
        print(f"Warning: no proxy at {oracle_client.base_url}; advice and evaluation will fall back.")

    controller = GameController(oracle_client=oracle_client)
    controller.start_scenario(scenario, user_id="terminal")
    logger.info("Starting terminal play", scenario_id=scenario.id)

    print(f"{scenario.title}: {scenario.description}")
    for objective in scenario.objectives:
        print(f"  - {objective.description}")
    print(PLAY_HELP)
    print_assets(controller)

    try:
        while not controller.is_complete():
            parts = input("> ").strip().split()
            if not parts:
                continue
            command = parts[0].lower()

            if command == "quit":
                break
            elif command in ("buy", "sell") and len(parts) == 3:
                try:
                    quantity = int(parts[2])
                except ValueError:
                    print("Quantity must be a whole number")
                    continue
                result = controller.execute_trade(parts[1].upper(), TradeSide(command), quantity)
                if result.success:
                    print(
                        f"{command.title()} {quantity} {result.trade.symbol} "
                        f"at {format_currency(result.trade.price)}"
                    )
                else:
                    print(f"Trade rejected: {result.error_message}")
            elif command == "next":
                days = int(parts[1]) if len(parts) > 1 and parts[1].isdigit() else 1
                for _ in range(days):
                    if not controller.advance_day():
                        break
                if controller.last_error:
                    print(f"Error: {controller.last_error}")
                print_status(controller)
            elif command == "assets":
                print_assets(controller)
            elif command == "status":
                print_status(controller)
            elif command == "advice":
                advice = await controller.market_advice()
                print(advice or "No advice available right now.")
            else:
                print(PLAY_HELP)

        result = await controller.complete_scenario()
        if result is not None:
            print(
                f"Final value {format_currency(result.final_value)} "
                f"({format_percent(result.return_percent)}), score {result.score}/100"
            )
            print(result.feedback)
    except TradeLabException as e:
        logger.error("Terminal play failed", error=e.message)
        print(f"Error: {e.message}")
    finally:
        controller.shutdown()


def main() -> None:
    """Main application entry point."""
    # Initialize application (logging, config, resources)
    initialize_application()

    # Get logger after initialization
    logger = get_logger(__name__)
    logger.info("Starting TradeLab application")

    settings = get_settings()

    if "-play" in sys.argv:
        index = sys.argv.index("-play")
        category = sys.argv[index + 1] if len(sys.argv) > index + 1 else "crisis"
        try:
            asyncio.run(play_terminal(category))
        except (KeyboardInterrupt, EOFError):
            logger.info("Received interrupt signal")
            print("\nShutting down...")
        finally:
            shutdown_scheduler()
        return

    if not validate_environment():
        # The proxy still starts; requests answer 500 until the key is set
        print("ANTHROPIC_API_KEY is not set; proxied requests will fail.")

    logger.info(
        "Starting proxy server",
        host=settings.endpoint_host,
        port=settings.endpoint_port,
    )
    print("Starting TradeLab proxy...")

    try:
        uvicorn.run(
            "tradelab.webapi.app:create_app",
            factory=True,
            host=settings.endpoint_host,
            port=settings.endpoint_port,
            reload=settings.api_reload,
            log_level=settings.api_log_level.lower(),
        )
    except KeyboardInterrupt:
        logger.info("Received interrupt signal")
        print("\nShutting down...")


if __name__ == "__main__":
    main()

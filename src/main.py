import asyncio
import os
import sys
import logging
from dotenv import load_dotenv

from src.infrastructure.github_client import GitHubRestClient
from src.application.stats_service import StatsService
from src.domain.settings import StatsSettings
from src.presentation.console_renderer import ConsoleRenderer

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s [%(levelname)s] %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )


async def main(argv=None) -> int:
    # Load environment variables from .env file
    load_dotenv()
    configure_logging()

    args = sys.argv[1:] if argv is None else argv
    username = args[0] if args else os.getenv("GITHUB_USERNAME")

    if not username:
        logger.error("Usage: python -m src.main <username> (or set GITHUB_USERNAME).")
        return 1

    settings = StatsSettings.from_env()
    github_client = GitHubRestClient(settings=settings)
    stats_service = StatsService(
        github_client=github_client,
        renderer=ConsoleRenderer(),
        settings=settings,
    )

    try:
        result = await stats_service.run_query(username)
    except KeyboardInterrupt:
        logger.info("Query interrupted by user. Exiting gracefully.")
        return 1
    except Exception as e:
        logger.exception(f"An unexpected error occurred: {e}")
        return 1

    return 0 if result.succeeded else 1


def run() -> None:
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()

"""Command-line entry point for memory maintenance and the extraction function."""

import argparse
import asyncio
import logging
import sys
from dataclasses import asdict

from aiohttp import web

from wisdom.core.config import SystemConfig, load_config, validate_config
from wisdom.functions import create_app
from wisdom.inference import ChatCompletionClient, ExtractionEngine, create_llm_client
from wisdom.memory import MemoryService
from wisdom.storage import create_store
from wisdom.utils.logging_config import setup_logging

logger = logging.getLogger(__name__)


async def run_command(config: SystemConfig, command: str) -> int:
    """Run one maintenance command against the configured store."""
    store = create_store(config.storage)
    try:
        memory = await MemoryService.create(store, create_llm_client(config), config.memory)

        if command == "stats":
            stats = await memory.get_memory_stats()
            for key, value in asdict(stats).items():
                print(f"{key}: {value}")
        elif command == "context":
            print(await memory.build_prompt_context())
        elif command == "prune":
            removed = await memory.prune_old_data()
            logger.info(
                f"Pruned {removed['insights_removed']} insights and "
                f"{removed['summaries_removed']} summaries"
            )
        elif command == "clear":
            await memory.clear_all_memories()
    finally:
        close = getattr(store, "close", None)
        if close is not None:
            await close()
    return 0


def serve(config: SystemConfig) -> None:
    """Serve the extraction function backed by the configured chat model."""
    engine = ExtractionEngine(ChatCompletionClient(config.chat_model))
    logger.info(f"Serving extraction function on {config.server.host}:{config.server.port}")
    web.run_app(create_app(engine), host=config.server.host, port=config.server.port)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="WisdomWise memory tools")
    parser.add_argument(
        "command",
        choices=["stats", "context", "prune", "clear", "serve"],
        help="Maintenance command to run"
    )
    parser.add_argument("--config", help="Path to memory YAML overrides")
    args = parser.parse_args(argv)

    config = load_config(args.config)
    setup_logging(config.debug_mode, config.log_level, config.log_dir)

    if args.command == "serve":
        # The function itself always runs the local engine
        config.llm.mode = "local"

    errors = validate_config(config)
    if errors:
        logger.error("Configuration errors:")
        for error in errors:
            logger.error(f"  - {error}")
        return 1

    if args.command == "serve":
        serve(config)
        return 0

    try:
        return asyncio.run(run_command(config, args.command))
    except KeyboardInterrupt:
        logger.info("Interrupted")
        return 130


if __name__ == "__main__":
    sys.exit(main())

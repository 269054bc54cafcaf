"""
Lunch Bot - Main Entry Point

Slack bot that:
- Answers `lb ...` commands in channels and DMs
- Expires old lunch proposals periodically
- Backs up and recovers its state when a backup file is configured
"""

import sys
import json
import argparse
import logging
from pathlib import Path
from dotenv import load_dotenv

from slack_bolt import App
from slack_bolt.adapter.socket_mode import SocketModeHandler

from lunchbot import (
    BotConfig,
    ConfigError,
    Dispatcher,
    LunchBotEngine,
    PeriodicTask,
    SlackMembershipResolver,
    StateDecodeError,
    USAGE,
    backup_state,
    recover_state,
)

BOT_DIR = Path(__file__).parent

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def parse_args():
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(description="Lunch Bot")
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to bot config JSON file (e.g., bots/lunch_bot.json)"
    )
    return parser.parse_args()


def load_environment(config_file: str | None = None) -> BotConfig:
    """Load and validate environment variables."""
    overrides = {}
    if config_file:
        with open(BOT_DIR / config_file) as f:
            overrides = json.load(f)
        logger.info(f"Loaded bot config: {overrides.get('name', config_file)}")

    env_file = overrides.get("env_file")
    load_dotenv(BOT_DIR / env_file if env_file else BOT_DIR / ".env")

    try:
        return BotConfig.from_env(overrides=overrides)
    except ConfigError as e:
        logger.error(str(e))
        sys.exit(1)


def create_app(config: BotConfig, engine: LunchBotEngine) -> App:
    """Create the Slack app and register its listeners."""
    app = App(token=config.slack_bot_token)
    dispatcher = Dispatcher(engine, SlackMembershipResolver(app.client))

    @app.event("message")
    def handle_message(event, say):
        """Handle incoming messages in channels and DMs."""
        # Ignore bot messages
        if event.get("bot_id"):
            return

        text = event.get("text", "")
        if not text:
            return

        dispatcher.handle_message(text, say)

    @app.command("/lunch-help")
    def handle_help_command(ack, say):
        """Show the command language."""
        ack()
        say(USAGE)

    return app


def start_maintenance(engine: LunchBotEngine, config: BotConfig) -> list[PeriodicTask]:
    """Start proposal cleanup and, if configured, periodic backups."""
    tasks = [
        PeriodicTask("cleanup", config.cleanup_interval, engine.expire_proposals)
    ]

    if config.backup_file is not None:
        backup_file = config.backup_file

        def backup():
            try:
                backup_state(engine, backup_file)
            except OSError as e:
                logger.error(f"Failed to backup the state: {e}")

        tasks.append(PeriodicTask("backup", config.backup_interval, backup))

    for task in tasks:
        task.start()
    return tasks


def main():
    """Start the bot."""
    args = parse_args()
    config = load_environment(args.config)

    logger.info(f"Starting {config.name}...")

    engine = LunchBotEngine(config.channel)

    if config.backup_file is not None:
        try:
            recover_state(engine, config.backup_file)
        except (OSError, StateDecodeError) as e:
            logger.error(f"Failed to recover state: {e}")

    app = create_app(config, engine)
    handler = SocketModeHandler(app, config.slack_app_token)

    tasks = start_maintenance(engine, config)

    logger.info("Bot is running! Press Ctrl+C to stop.")
    try:
        handler.start()
    finally:
        for task in tasks:
            task.stop()


if __name__ == "__main__":
    main()

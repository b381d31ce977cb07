"""Entry point for `python -m linguabridge`."""

from __future__ import annotations

import logging
import sys

from dotenv import load_dotenv


def main() -> None:
    # Load .env from canonical locations before anything else.
    load_dotenv("config/.env")  # Primary (Docker + local)
    load_dotenv()               # Fallback (CWD/.env)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    log = logging.getLogger("linguabridge")

    from linguabridge.config import get_settings, has_config

    if not has_config():
        log.error("No configuration found (missing DISCORD_TOKEN / DEEPL_API_KEY).")
        log.error("Copy config/.env.example to config/.env and fill it in, then restart.")
        sys.exit(1)

    # Validate config early
    try:
        settings = get_settings()
    except Exception as e:
        log.error("Configuration error: %s", e)
        log.error("")
        log.error("  How to fix:")
        log.error("  1. Edit config/.env (or set environment variables)")
        log.error("  2. Ensure DISCORD_TOKEN and DEEPL_API_KEY are set")
        log.error("  3. POSTGRES_URL must point at a reachable database")
        sys.exit(1)

    log.info("Starting LinguaBridge...")
    log.info("Settings: %r", settings)

    from linguabridge.bot import LinguaBridgeBot

    bot = LinguaBridgeBot(settings)
    bot.run(settings.DISCORD_TOKEN, log_handler=None)


if __name__ == "__main__":
    main()

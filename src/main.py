"""Buddi ETL — invocation entry points.

Run locally (one pass, configuration from the environment or .env):
    python -m src.main

Scheduled invocation:
    src.main.handler(event)
"""

from __future__ import annotations

import asyncio
import logging
import sys
from typing import Any

from src.buddi.task import BuddiTask, SchemaType
from src.config import Settings, get_settings

logger = logging.getLogger("buddi")


# ---------- Logging ----------

def configure_logging(settings: Settings) -> None:
    level = logging.DEBUG if settings.debug else getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)-8s %(name)s — %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
    )
    # basicConfig is a no-op when the runtime already installed a root handler
    logging.getLogger("buddi").setLevel(level)
    # httpx logs every request URL at INFO, query strings included
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ---------- Handler ----------

async def run(event: dict[str, Any] | None = None, settings: Settings | None = None) -> dict[str, Any]:
    """Serve one invocation.

    ``{"type": "schema:input"}`` / ``{"type": "schema:output"}`` events return
    the task's schema; anything else runs an ingestion pass.
    """
    event = event or {}
    kind = str(event.get("type", ""))
    if kind.startswith("schema:"):
        return BuddiTask.schema(SchemaType(kind.split(":", 1)[1]))

    settings = settings or get_settings()
    configure_logging(settings)
    task = BuddiTask(settings)
    try:
        return await task.control()
    except Exception:
        logger.exception("%s run failed", task.name)
        raise


def handler(event: dict[str, Any] | None = None, context: Any = None) -> dict[str, Any]:
    return asyncio.run(run(event))


if __name__ == "__main__":
    handler()

#!/usr/bin/env python3
"""Startup script for the duel game backend"""

import os
import uvicorn

from .rules import rules_from_env


def main():
    port = int(os.getenv("PORT", 8000))
    host = os.getenv("HOST", "0.0.0.0")
    # Fail on bad DUEL_* settings before uvicorn spawns anything
    rules = rules_from_env()

    print(f"🃏 Starting Duel Game Backend on {host}:{port}")
    print(f"⏱️  Reset delay: {rules.reset_delay}s, rematch: {rules.auto_rematch}, "
          f"stalled passes: {rules.stalled_pass_policy}")
    print(f"🔌 WebSocket endpoint: ws://{host}:{port}/ws")

    uvicorn.run(
        "duel_engine.main:app",
        host=host,
        port=port,
        reload=os.getenv("RELOAD", "false").lower() == "true",
        log_level=os.getenv("LOG_LEVEL", "info").lower()
    )


if __name__ == "__main__":
    main()

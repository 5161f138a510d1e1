"""FastAPI main application for the duel card game backend"""

import logging
from typing import Optional

from fastapi import FastAPI, WebSocket
from fastapi.middleware.cors import CORSMiddleware

from .rules import RuleConfig, rules_from_env
from .ws.server import GameWebSocketManager

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def create_app(rules: Optional[RuleConfig] = None) -> FastAPI:
    rules = rules or rules_from_env()
    game_manager = GameWebSocketManager(rules)

    app = FastAPI(title="Duel Card Game API", version="1.0.0")
    app.state.game_manager = game_manager

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/")
    async def root():
        return {"message": "Duel Card Game API", "version": "1.0.0"}

    @app.get("/health")
    async def health_check():
        return game_manager.health()

    @app.websocket("/ws")
    async def websocket_endpoint(websocket: WebSocket):
        await game_manager.handle_websocket(websocket)

    logger.info(f"Rules: {rules.model_dump()}")
    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)

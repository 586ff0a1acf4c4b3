"""
WebSocket game server for a squad tactics renderer.

Each connection owns one mission. The client sends player actions, the server
answers with the fog-filtered state, and streams the scripted enemy turn one
step at a time with a presentation delay between steps.
"""

import os
import json
import asyncio
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

load_dotenv(Path(__file__).parent / ".env")

import websockets

from tactics import (
    TurnManager, Team, Rejected,
    load_mission_config, state_to_dict, battle_result,
)
from advisors import SquadAdvisor

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

DATA_PATH = Path("data")
STEP_DELAY = float(os.environ.get("STEP_DELAY", "0.4"))


class GameSession:
    """Wraps the engine for a single player-vs-script mission."""

    def __init__(self, data_path: Path = DATA_PATH, seed: Optional[int] = None):
        self.config = load_mission_config(data_path)
        self.manager = TurnManager(rng_seed=seed, config=self.config)
        self.advisor = SquadAdvisor.create_default()
        logger.info(f"Mission initialized: seed={seed}")

    def get_player_view(self) -> dict:
        """State as the player may see it: enemies under fog are left out."""
        state = self.manager.state
        view = state_to_dict(state)
        view["units"] = [
            u for u, unit in zip(view["units"], state.units)
            if unit.team == Team.PLAYER or not state.is_hidden(unit.position)
        ]
        view["winner"] = self.manager.winner.value if self.manager.winner else None
        view["result"] = battle_result(state)
        return view

    def handle_action(self, msg: dict):
        """Apply one player action message. Returns the engine result."""
        msg_type = msg.get("type", "")
        unit_id = msg.get("unit_id", "")
        target = msg.get("target")
        position = (target["x"], target["y"]) if isinstance(target, dict) else None

        if msg_type == "move":
            return self.manager.move(unit_id, position)
        if msg_type == "rotate":
            return self.manager.rotate(unit_id, msg.get("facing", "up"))
        if msg_type == "attack":
            return self.manager.attack(unit_id, msg.get("target_id", ""))
        if msg_type == "grenade":
            return self.manager.grenade(unit_id, position)
        if msg_type == "special":
            return self.manager.special(unit_id, msg.get("kind", ""))
        if msg_type == "select":
            return self.manager.select(msg.get("unit_id"))
        if msg_type == "undo":
            return self.manager.undo()
        raise ValueError(f"Unknown message type: {msg_type}")


# ── WebSocket Game Server ──

ACTION_TYPES = ("move", "rotate", "attack", "grenade", "special", "select", "undo")


async def handle_websocket(websocket):
    """Handle a single WebSocket connection (one mission)."""
    session = None

    async def send_json(msg_type: str, data: dict):
        await websocket.send(json.dumps({"type": msg_type, **data}, default=str))

    async def send_state():
        await send_json("state", {"state": session.get_player_view()})
        if session.manager.game_over:
            await send_json("game_over", {
                "winner": session.manager.winner.value if session.manager.winner else None,
                "result": battle_result(session.manager.state),
            })

    try:
        async for raw in websocket:
            try:
                msg = json.loads(raw)
            except json.JSONDecodeError:
                await send_json("error", {"message": "Invalid JSON"})
                continue

            msg_type = msg.get("type", "")

            if msg_type == "start_game":
                seed = msg.get("seed")
                logger.info(f"Starting mission: seed={seed}")
                session = GameSession(seed=seed)
                await send_state()
                continue

            if session is None:
                await send_json("error", {"message": "No game in progress"})
                continue

            if msg_type in ACTION_TYPES:
                try:
                    result = session.handle_action(msg)
                except (KeyError, TypeError, ValueError) as e:
                    await send_json("error", {"message": f"Malformed action: {e}"})
                    continue
                if isinstance(result, Rejected):
                    await send_json("rejected", {
                        "reason": result.reason.value,
                        "message": result.message,
                    })
                else:
                    await send_state()

            elif msg_type == "end_turn":
                result = session.manager.end_turn()
                if isinstance(result, Rejected):
                    await send_json("rejected", {
                        "reason": result.reason.value,
                        "message": result.message,
                    })
                    continue
                await send_state()

                # Stream the scripted turn; pacing is presentation only
                while session.manager.step_opponent() is not None:
                    await send_json("opponent_step", {"state": session.get_player_view()})
                    await asyncio.sleep(STEP_DELAY)
                await send_state()

            elif msg_type == "advice":
                await send_json("processing", {"message": "Contacting tactical advisor..."})
                # Run in executor to not block the event loop
                loop = asyncio.get_event_loop()
                advice = await loop.run_in_executor(
                    None, session.advisor.get_advice, session.manager.state
                )
                await send_json("advice", {"text": advice})

            else:
                await send_json("error", {"message": f"Unknown message type: {msg_type}"})

    except websockets.exceptions.ConnectionClosed:
        logger.info("Client disconnected")


async def main():
    host = os.environ.get("HOST", "0.0.0.0")
    port = int(os.environ.get("PORT", "8080"))

    logger.info(f"Starting server on ws://{host}:{port}")

    async with websockets.serve(
        handle_websocket,
        host,
        port,
        max_size=1024 * 1024,
    ):
        await asyncio.Future()  # run forever


if __name__ == "__main__":
    asyncio.run(main())

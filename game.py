"""
Headless match runner for the squad tactics engine.

Plays a seeded mission to the end: the player squad is autoplayed with the
same policy as the scripted enemy, and every accepted state is written to a
battle log for replay.
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from tactics import (
    TurnManager, Team, IntentKind, Rejected,
    choose_action, load_mission_config, save_battle, battle_result,
)
from advisors import SquadAdvisor

load_dotenv(Path(__file__).parent / ".env")

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


class MatchSimulation:
    """Main simulation orchestrator."""

    def __init__(
        self,
        data_path: str = "data",
        seed: Optional[int] = None,
        log_dir: str = "logs",
        advisor: Optional[SquadAdvisor] = None,
    ):
        self.data_path = Path(data_path)
        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(exist_ok=True)
        self.seed = seed

        logger.info("Loading mission config...")
        self.config = load_mission_config(self.data_path)

        logger.info("Creating mission...")
        self.manager = TurnManager(rng_seed=seed, config=self.config)
        self.advisor = advisor

        self.start_time: Optional[datetime] = None

    def play_player_turn(self) -> int:
        """Autoplay every living player unit until it runs out of options."""
        actions = 0
        for unit in self.manager.state.living(Team.PLAYER):
            while True:
                current = self.manager.state.get_unit(unit.id)
                intent = choose_action(self.manager.state, current)
                if intent is None:
                    break
                if intent.kind == IntentKind.ATTACK:
                    result = self.manager.attack(intent.unit_id, intent.target_id)
                else:
                    result = self.manager.move(intent.unit_id, intent.position)
                if isinstance(result, Rejected):
                    logger.debug(f"{unit.id}: {result.message}")
                    break
                actions += 1
                if self.manager.game_over:
                    return actions
        return actions

    def run_turn(self) -> dict:
        """Run one player turn followed by the scripted enemy turn."""
        state = self.manager.state
        turn = state.turn_number
        logger.info(f"{'='*60}")
        logger.info(f"TURN {turn}")
        logger.info(f"{'='*60}")

        if self.advisor:
            logger.info(f"Advisor: {self.advisor.get_advice(state)}")

        history_mark = len(state.history)
        player_actions = self.play_player_turn()

        if not self.manager.game_over:
            self.manager.end_turn()
            self.manager.run_opponent_turn()

        state = self.manager.state
        for line in state.history[history_mark:]:
            logger.info(f"  {line}")

        turn_log = {
            "turn": turn,
            "player_actions": player_actions,
            "player_alive": len(state.living(Team.PLAYER)),
            "enemy_alive": len(state.living(Team.ENEMY)),
            "cover_standing": len(state.blocking_obstacles()),
        }
        logger.info(
            f"Turn {turn} complete: player {turn_log['player_alive']} alive, "
            f"enemy {turn_log['enemy_alive']} alive"
        )
        return turn_log

    def run_game(self, max_turns: int = 50) -> dict:
        """Run the match until one squad is wiped out or max_turns pass."""
        self.start_time = datetime.now()
        turns = []

        while not self.manager.game_over and self.manager.state.turn_number <= max_turns:
            turns.append(self.run_turn())

        results = self._compile_results(turns)
        self._save_battle_log()
        return results

    def _compile_results(self, turns: list[dict]) -> dict:
        state = self.manager.state
        winner = self.manager.winner
        return {
            "seed": self.seed,
            "turns_played": len(turns),
            "winner": winner.value if winner else None,
            "result": battle_result(state),
            "surviving_forces": {
                "player": len(state.living(Team.PLAYER)),
                "enemy": len(state.living(Team.ENEMY)),
            },
            "states_recorded": len(self.manager.history),
            "duration": str(datetime.now() - self.start_time) if self.start_time else None,
        }

    def _save_battle_log(self) -> Path:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_path = self.log_dir / f"battle_{timestamp}.json"
        save_battle(log_path, self.manager.history)
        logger.info(f"Battle log saved to: {log_path}")
        return log_path


def main():
    """Run a headless squad match."""
    import argparse

    parser = argparse.ArgumentParser(description="Squad tactics headless match")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for cover and enemy order")
    parser.add_argument("--turns", type=int, default=50, help="Max turns")
    parser.add_argument("--data", default="data", help="Data directory path")
    parser.add_argument("--logs", default="logs", help="Log directory path")
    parser.add_argument("--advice", action="store_true", help="Ask the advisor each turn")

    args = parser.parse_args()

    sim = MatchSimulation(
        data_path=args.data,
        seed=args.seed,
        log_dir=args.logs,
        advisor=SquadAdvisor.create_default() if args.advice else None,
    )

    results = sim.run_game(max_turns=args.turns)

    print("\n" + "="*60)
    print("FINAL RESULTS")
    print("="*60)
    print(json.dumps(results, indent=2))


if __name__ == "__main__":
    main()

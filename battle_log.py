#!/usr/bin/env python3
"""
Live battle log - streams events as they happen.
"""

import sys
import time
import argparse
from pathlib import Path

from dotenv import load_dotenv
load_dotenv(Path(__file__).parent / ".env")

from tactics import TurnManager, Team
from game import MatchSimulation

# Pause between scripted steps, seconds
STEP_DELAY = 0.05


def log(side, message, turn=None):
    """Print a battle log entry."""
    prefixes = {
        "player": "▲ SQUAD",
        "enemy": "▼ HOSTILE",
        "system": "⚡ SYSTEM",
    }
    prefix = prefixes.get(side, side.upper())
    turn_prefix = f"[T{turn:02d}] " if turn is not None else ""
    print(f"{turn_prefix}{prefix}: {message}")
    sys.stdout.flush()
    time.sleep(STEP_DELAY)


def log_header(text):
    """Print a header."""
    print(f"\n{'='*70}")
    print(f"  {text}")
    print(f"{'='*70}\n")
    sys.stdout.flush()


def run_turn(sim: MatchSimulation):
    """Run one full turn with live logging."""
    manager: TurnManager = sim.manager
    turn = manager.state.turn_number
    log_header(f"TURN {turn}")

    mark = len(manager.state.history)
    sim.play_player_turn()
    for line in manager.state.history[mark:]:
        log("player", line, turn)

    if manager.game_over:
        return

    manager.end_turn()
    log("system", "Hostile squad moving...", turn)
    while True:
        mark = len(manager.state.history)
        if manager.step_opponent() is None:
            break
        events = manager.state.history[mark:]
        for line in events:
            log("enemy", line, turn)
        acting = manager.state.selected_unit_id
        unit = manager.state.get_unit(acting) if acting else None
        if unit is not None and not events:
            log("enemy", f"{unit.id} advances to ({unit.x},{unit.y})", turn)

    state = manager.state
    print(f"\n📊 Turn {turn} Summary")
    print(f"   Squad alive: {len(state.living(Team.PLAYER))} | Hostiles alive: {len(state.living(Team.ENEMY))}")
    print(f"   Cover standing: {len(state.blocking_obstacles())}")


def main():
    parser = argparse.ArgumentParser(description="Live squad battle log")
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--turns", type=int, default=10)
    parser.add_argument("--data", default="data")
    args = parser.parse_args()

    sim = MatchSimulation(data_path=args.data, seed=args.seed)
    config = sim.config
    log_header(f"OPERATION BEGINS - {config.width}x{config.height} GRID")
    log("system", sim.manager.state.history[0])

    while not sim.manager.game_over and sim.manager.state.turn_number <= args.turns:
        run_turn(sim)

    winner = sim.manager.winner
    log_header("MISSION COMPLETE" if winner else "SIMULATION PAUSED")
    if winner:
        print(f"Winner: {winner.value}")


if __name__ == "__main__":
    main()

#!/usr/bin/env python
"""
Ejemplo 1 — Partida headless entre un buscador minimax y un bot aleatorio.

Muestra cómo:
  • Crear el motor (SkirmishEngine) con dos jugadores.
  • Avanzar ply a ply e inspeccionar el estado.
  • Detectar el final de la partida y el ganador.

Uso
----
    python examples/01_headless_match.py
"""

from __future__ import annotations

import sys
import time

sys.path.insert(0, ".")

from skirmish_engine.core.actions import Side, describe_joint_action
from skirmish_engine.core.arena import create_skirmish_snapshot
from skirmish_engine.core.engine import SkirmishEngine
from skirmish_engine.players.player_interface import MinimaxPlayer, RandomPlayer


def main() -> None:
    engine = SkirmishEngine(
        player_max=MinimaxPlayer(Side.MAX, depth=3),
        player_min=RandomPlayer(Side.MIN, seed=42),
        snapshot=create_skirmish_snapshot(with_wall=True),
        max_plies=120,
    )

    print("═" * 60)
    print("  Partida headless: Minimax (depth=3) vs Random")
    print("═" * 60)

    t0 = time.perf_counter()

    while True:
        state, done = engine.step()

        # Resumen cada 10 plies
        if engine.plies_played % 10 == 0 or done:
            ply, side, action = engine.history[-1]
            hp_max = sum(u.health for u in state.units_of(Side.MAX))
            hp_min = sum(u.health for u in state.units_of(Side.MIN))
            print(
                f"  [ply {ply:3d}]  {side.value:>3}: {describe_joint_action(action):<30}  |  "
                f"HP melee={hp_max:4d}  HP ranged={hp_min:4d}  |  eval={state.evaluate():8.2f}"
            )

        if done:
            break

    elapsed = time.perf_counter() - t0
    winner = engine.get_winner()

    print("─" * 60)
    if winner is not None:
        print(f"  Resultado: ¡Gana {winner.value.upper()}!")
    else:
        print("  Resultado: ¡Empate!")
    print(f"  Plies jugados: {engine.plies_played}")
    print(f"  Tiempo real: {elapsed:.2f}s")
    print(f"  Velocidad: {engine.plies_played / elapsed:.1f} plies/s")
    print("═" * 60)


if __name__ == "__main__":
    main()

#!/usr/bin/env python
"""
Ejemplo 2 — Usar el entorno Gymnasium con acciones aleatorias.

Muestra cómo:
  • Crear SkirmishEnv (agente melee vs MinimaxPlayer de profundidad 1).
  • Recorrer el loop reset / step / done estándar de Gymnasium.
  • Muestrear acciones con la máscara de acciones válidas.
  • Comparar reward sparse vs dense.

Uso
----
    python examples/02_gymnasium_random_agent.py
"""

from __future__ import annotations

import sys
import time

import numpy as np

sys.path.insert(0, ".")

from skirmish_engine.env.gymnasium_env import SkirmishEnv


def run_episode(env: SkirmishEnv, label: str, use_mask: bool) -> None:
    obs, info = env.reset(seed=0)
    total_reward = 0.0
    steps = 0
    valid_actions = 0

    t0 = time.perf_counter()

    while True:
        if use_mask:
            action = env.action_space.sample(mask=info["action_mask"].astype(np.int8))
        else:
            action = env.action_space.sample()
        obs, reward, terminated, truncated, info = env.step(action)

        total_reward += reward
        steps += 1
        if info.get("action_valid", False):
            valid_actions += 1

        if terminated or truncated:
            break

    elapsed = time.perf_counter() - t0
    winner = env.engine.get_winner()

    print(f"\n  [{label}]")
    print(f"    Steps: {steps}")
    print(f"    Acciones válidas: {valid_actions} / {steps} ({100 * valid_actions / max(steps, 1):.1f}%)")
    print(f"    Reward total: {total_reward:.4f}")
    print(f"    Ganador: {winner.value.upper() if winner is not None else 'Empate'}")
    print(f"    Obs shape: {obs.shape}")
    print(f"    Tiempo real: {elapsed:.2f}s")


def main() -> None:
    print("═" * 60)
    print("  Gymnasium: agente aleatorio vs MinimaxPlayer")
    print("═" * 60)

    # ── Episodio con reward sparse, acciones sin máscara ─────────────
    env_sparse = SkirmishEnv(reward_shaping="sparse", max_plies=80)
    run_episode(env_sparse, "Reward SPARSE (sin máscara)", use_mask=False)

    # ── Episodio con reward dense, acciones con máscara ──────────────
    env_dense = SkirmishEnv(reward_shaping="dense", max_plies=80)
    run_episode(env_dense, "Reward DENSE (con máscara)", use_mask=True)

    # ── Mostrar spaces ────────────────────────────────────────────────
    print("\n  Espacios:")
    print(f"    action_space  = {env_sparse.action_space}")
    print(f"    obs_space     = {env_sparse.observation_space}")
    print(f"    obs_space.shape = {env_sparse.observation_space.shape}")

    print("\n" + "═" * 60)


if __name__ == "__main__":
    main()

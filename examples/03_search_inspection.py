#!/usr/bin/env python
"""
Ejemplo 3 — Inspeccionar la búsqueda alpha-beta.

Muestra cómo:
  • Construir un estado raíz desde un snapshot en formato dict.
  • Listar las acciones conjuntas legales y su orden de exploración.
  • Comparar el valor alpha-beta con minimax sin poda y contar nodos.

Uso
----
    python examples/03_search_inspection.py
"""

from __future__ import annotations

import sys
import time

sys.path.insert(0, ".")

from skirmish_engine.core.actions import Side, describe_joint_action
from skirmish_engine.core.arena import create_skirmish_snapshot
from skirmish_engine.core.search import AlphaBetaSearch, minimax_value
from skirmish_engine.core.state import build_root_state
from skirmish_engine.systems.evaluation import StateEvaluator
from skirmish_engine.systems.ordering import MoveOrdering


def main() -> None:
    print("═" * 60)
    print("  Inspección de la búsqueda alpha-beta")
    print("═" * 60)

    # ── Estado raíz desde un dict (como lo enviaría un simulador) ────
    raw = create_skirmish_snapshot(with_wall=True).to_dict()
    root = build_root_state(raw)
    print(f"\n  {root!r}")

    print("\n  ── Features de evaluación ──")
    for name, value in StateEvaluator.features(root).items():
        print(f"    {name:<24} {value:8.3f}")
    print(f"    {'valor':<24} {root.evaluate():8.3f}")

    # ── Hijos en orden de exploración ────────────────────────────────
    children = MoveOrdering().order(root.get_children(Side.MAX))
    print(f"\n  ── {len(children)} acciones conjuntas de MAX (ordenadas) ──")
    for child in children[:8]:
        print(f"    {describe_joint_action(child.joint_action):<36} eval={child.resulting_state.evaluate():8.2f}")
    if len(children) > 8:
        print(f"    … y {len(children) - 8} más")

    # ── Alpha-beta vs minimax por profundidad ────────────────────────
    print("\n  ── Alpha-beta vs minimax ──")
    for depth in (1, 2, 3):
        for order_moves in (False, True):
            searcher = AlphaBetaSearch(order_moves=order_moves)
            t0 = time.perf_counter()
            best = searcher.search(root, depth)
            elapsed = time.perf_counter() - t0
            print(
                f"    depth={depth} ordenado={str(order_moves):<5}  "
                f"valor={best.value:8.2f}  nodos={searcher.nodes_visited:6d}  "
                f"cortes={searcher.cutoffs:5d}  {elapsed * 1000:7.1f} ms  "
                f"→ {describe_joint_action(best.joint_action)}"
            )
        print(f"    depth={depth} minimax        valor={minimax_value(root, depth):8.2f}")

    print("\n" + "═" * 60)


if __name__ == "__main__":
    main()

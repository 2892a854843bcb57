"""Circular import detection over a whole dependency table."""

from __future__ import annotations

import logging

from revdep.models import DependencyTable

logger = logging.getLogger(__name__)


def _targets(table: DependencyTable, module_id: str) -> list[str]:
    return [e.target_id for e in table.get(module_id) or [] if e.target_id is not None]


def find_cycles(table: DependencyTable, start_ids: list[str] | None = None) -> list[list[str]]:
    """Import cycles found by a depth-first walk of ``table``.

    Each cycle starts and ends with the same module: ``[a, b, a]``. Modules
    are visited once, so a cycle is reported from the first module of it the
    walk reaches. ``start_ids`` defaults to every module in sorted order.
    """
    cycles: list[list[str]] = []
    seen: set[tuple[str, ...]] = set()
    visited: set[str] = set()

    for start in sorted(table) if start_ids is None else start_ids:
        if start in visited or start not in table:
            continue
        visited.add(start)
        chain = [start]
        on_chain = {start}
        stack = [iter(_targets(table, start))]

        while stack:
            target = next(stack[-1], None)
            if target is None:
                stack.pop()
                on_chain.discard(chain.pop())
                continue

            if target in on_chain:
                cycle = chain[chain.index(target):] + [target]
                key = tuple(cycle)
                if key not in seen:
                    seen.add(key)
                    cycles.append(cycle)
                    logger.debug("cycle: %s", " -> ".join(cycle))
                continue

            # Unanalyzed or external modules cannot close a cycle
            if target in visited or target not in table:
                continue
            visited.add(target)
            chain.append(target)
            on_chain.add(target)
            stack.append(iter(_targets(table, target)))

    return cycles

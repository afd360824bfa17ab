"""Chain class — ordered container and execution plan for ChainSteps."""

from __future__ import annotations

from dataclasses import dataclass

from meadowlark.step import ChainStep


@dataclass(frozen=True)
class ResolvedChain:
    """Immutable, pre-computed execution plan."""

    steps: tuple[ChainStep, ...]


class Chain:
    """Ordered container of ChainStep instances."""

    def __init__(self, *steps: ChainStep | Chain) -> None:
        self._items: list[ChainStep | Chain] = list(steps)
        self._resolved: ResolvedChain | None = None

    def add(self, *steps: ChainStep | Chain) -> Chain:
        self._items.extend(steps)
        self._resolved = None
        return self

    def resolve(self) -> ResolvedChain:
        if self._resolved is not None:
            return self._resolved

        flat: list[ChainStep] = []
        self._flatten(self._items, flat)

        # sorted() is stable: registration order is kept within a category
        ordered = sorted(flat, key=lambda s: s.category.order)

        self._resolved = ResolvedChain(steps=tuple(ordered))
        return self._resolved

    @staticmethod
    def _flatten(items: list[ChainStep | Chain], out: list[ChainStep]) -> None:
        for item in items:
            if isinstance(item, Chain):
                Chain._flatten(item._items, out)
            else:
                out.append(item)

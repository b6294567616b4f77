"""Declarative parameter spaces for optimizer searches.

A search is a list of SimulationParams built from a base parameter set and
named value lists, instead of hand-written nested loops.

Example:
    >>> space = ParameterSpace(SimulationParams(max_spread=20))
    >>> candidates = space.combine(
    ...     space.sweep(spread_shrinkage=[0.1, 0.2]),
    ...     space.grid(rating_cap=[0, 5], max_spread=[8, 12]),
    ... )
    >>> len(candidates)
    6
"""

import itertools
from collections.abc import Iterable, Sequence

from elo_betting_engine.models.schema import SimulationParams

_FIELDS = frozenset(SimulationParams.model_fields)


class ParameterSpace:
    """Builds candidate parameter sets around a base.

    Args:
        base: Values for every axis not being varied
    """

    def __init__(self, base: SimulationParams | None = None) -> None:
        self.base = base if base is not None else SimulationParams()

    def _check_axes(self, axes: dict[str, Sequence[float]]) -> None:
        unknown = set(axes) - _FIELDS
        if unknown:
            raise ValueError(f"Unknown parameter(s): {', '.join(sorted(unknown))}")

    def with_values(self, **values: float) -> SimulationParams:
        """Base parameters with some fields replaced (validated)."""
        self._check_axes({name: [v] for name, v in values.items()})
        return SimulationParams(**{**self.base.model_dump(), **values})

    def grid(self, **axes: Sequence[float]) -> list[SimulationParams]:
        """Cartesian product of the axes, in axis order."""
        self._check_axes(axes)
        names = list(axes)
        return [
            self.with_values(**dict(zip(names, combo)))
            for combo in itertools.product(*(axes[name] for name in names))
        ]

    def sweep(self, **axes: Sequence[float]) -> list[SimulationParams]:
        """Vary one axis at a time, holding the others at the base."""
        self._check_axes(axes)
        return [self.with_values(**{name: value}) for name, values in axes.items() for value in values]

    @staticmethod
    def combine(*candidate_lists: Iterable[SimulationParams]) -> list[SimulationParams]:
        """Concatenate candidate lists, dropping repeated parameter sets.

        The first occurrence of each parameter set keeps its position.
        """
        seen: set[tuple[float, ...]] = set()
        combined: list[SimulationParams] = []
        for params in itertools.chain.from_iterable(candidate_lists):
            key = params.key()
            if key in seen:
                continue
            seen.add(key)
            combined.append(params)
        return combined

"""
driver.py

Multi-generation evolution of a universe.

`run` applies `step` n times. Generations are atomic: cancellation
(`should_stop`) is only checked between generations, so the grid returned is
always a fully computed one.

`Simulation` keeps the current grid, colour map and generation counter for
callers that advance a universe piece by piece (e.g. a renderer reading the
colour map between batches).
"""

import threading
from multiprocessing import Pool
from typing import Callable, List, Optional, Union

import numpy as np

from turing_ca.config import SimulationConfig
from turing_ca.engine import check_state, step
from turing_ca.grid import Dimensions, Grid
from turing_ca.params import Parameters
from turing_ca.seeding import initialize

GenerationCallback = Callable[[int, Grid, np.ndarray], None]


def run(
    n: int,
    parameters: Parameters,
    dimensions: Dimensions,
    grid: Grid,
    color_map: np.ndarray,
    *,
    accumulation: str = "sequential",
    clamp: bool = False,
    sweep: str = "array",
    workers: int = 1,
    history: Optional[List[Grid]] = None,
    should_stop: Optional[Callable[[], bool]] = None,
    on_generation: Optional[GenerationCallback] = None,
) -> Grid:
    """
    Evolve `grid` for `n` generations and return the last one.

    Parameters
    ----------
    n : int
        Number of generations, >= 0. n == 0 returns `grid` itself.
    history : list, optional
        If given, every completed generation is appended to it.
    should_stop : callable, optional
        Polled before each generation; returning True ends the run early.
    on_generation : callable, optional
        Called as on_generation(generation, grid, color_map) after each
        generation, generation counted from 1.
    workers : int
        Processes for the row-range sweep; 1 runs in-process.
    """
    n = int(n)
    if n < 0:
        raise ValueError(f"number of generations must be >= 0, got {n}")
    if workers < 1:
        raise ValueError(f"workers must be >= 1, got {workers}")
    check_state(dimensions, grid, color_map)

    def _loop(pool):
        current = grid
        for gen in range(1, n + 1):
            if should_stop is not None and should_stop():
                break
            current = step(
                parameters,
                dimensions,
                current,
                color_map,
                accumulation=accumulation,
                clamp=clamp,
                sweep=sweep,
                pool=pool,
                chunks=workers,
            )
            if history is not None:
                history.append(current)
            if on_generation is not None:
                on_generation(gen, current, color_map)
        return current

    if workers > 1 and n > 0:
        with Pool(workers) as P:
            return _loop(P)
    return _loop(None)


class Simulation:
    """Current state of one universe plus the settings used to evolve it."""

    def __init__(
        self,
        parameters: Parameters,
        grid: Grid,
        color_map: np.ndarray,
        *,
        accumulation: str = "sequential",
        clamp: bool = False,
        sweep: str = "array",
        workers: int = 1,
        keep_history: bool = False,
        generation: int = 0,
    ):
        check_state(grid.dimensions, grid, color_map)
        self.parameters = parameters
        self.dimensions = grid.dimensions
        self.grid = grid
        self.color_map = color_map
        self.accumulation = accumulation
        self.clamp = clamp
        self.sweep = sweep
        self.workers = workers
        self.generation = generation
        self.history: Optional[List[Grid]] = [grid] if keep_history else None
        self._stop = threading.Event()

    @classmethod
    def create(
        cls,
        config: SimulationConfig,
        rng: Union[None, int, np.random.Generator] = None,
        keep_history: bool = False,
    ) -> "Simulation":
        """Seed a new universe from `config`; `rng` defaults to `config.seed`."""
        grid, color_map = initialize(config.dimensions, config.seeding, config.seed if rng is None else rng)
        return cls(
            config.parameters,
            grid,
            color_map,
            accumulation=config.accumulation,
            clamp=config.clamp,
            sweep=config.sweep,
            workers=config.workers,
            keep_history=keep_history,
        )

    def request_stop(self) -> None:
        """Ask a running `advance` to stop after the generation in progress."""
        self._stop.set()

    @property
    def stop_requested(self) -> bool:
        return self._stop.is_set()

    def advance(self, n: int = 1, on_generation: Optional[GenerationCallback] = None) -> Grid:
        """Evolve the current grid by up to `n` generations."""
        self._stop.clear()
        start = self.generation

        def _track(gen, grid, color_map):
            self.grid = grid
            self.generation = start + gen
            if on_generation is not None:
                on_generation(self.generation, grid, color_map)

        run(
            n,
            self.parameters,
            self.dimensions,
            self.grid,
            self.color_map,
            accumulation=self.accumulation,
            clamp=self.clamp,
            sweep=self.sweep,
            workers=self.workers,
            history=self.history,
            should_stop=self._stop.is_set,
            on_generation=_track,
        )
        return self.grid

"""Batch runner -- many independent battles, optionally in parallel.

Each battle gets its own :class:`Engine` (targets, modifiers, event bus
and RNG), so battles share nothing mutable and can run on separate
worker processes without synchronisation.  The caller supplies:

- a *catalog factory*: a picklable zero-argument callable that returns a
  populated :class:`Catalog` (each worker process builds its own);
- a *scenario*: a picklable callable ``scenario(engine) -> Any`` that sets
  up targets and drives the battle.

Aborting a battle means discarding its engine; there is no mid-turn
cancellation.
"""

from __future__ import annotations

import logging
import multiprocessing
from dataclasses import dataclass, field
from typing import Any, Callable

from srsim.sim.engine import Engine
from srsim.sim.registry import Catalog
from srsim.sim.settings import EngineSettings
from srsim.sim.telemetry import TargetSnapshot

logger = logging.getLogger(__name__)

CatalogFactory = Callable[[], Catalog]
Scenario = Callable[[Engine], Any]


@dataclass
class BattleResult:
    """Outcome of one simulated battle.

    Attributes
    ----------
    seed:
        Seed of the engine's RNG.
    turns:
        Value of the engine's turn counter when the scenario returned.
    value:
        Whatever the scenario returned.
    snapshots:
        Final snapshots of every target still in the battle.
    mutations:
        Number of recorded mutations.
    """

    seed: int
    turns: int
    value: Any = None
    snapshots: list[TargetSnapshot] = field(default_factory=list)
    mutations: int = 0


def run_single(
    catalog: Catalog,
    scenario: Scenario,
    settings: EngineSettings,
) -> BattleResult:
    """Build a fresh engine for *settings* and run *scenario* on it."""
    engine = Engine(catalog, settings)
    value = scenario(engine)
    return BattleResult(
        seed=settings.seed,
        turns=engine.turn,
        value=value,
        snapshots=engine.snapshots(),
        mutations=len(engine.log),
    )


def _worker_run_single(
    args: tuple[CatalogFactory, Scenario, dict[str, Any]],
) -> BattleResult:
    """Worker entry point: rebuild the catalog in this process, then run."""
    catalog_factory, scenario, settings_data = args
    return run_single(catalog_factory(), scenario, EngineSettings(**settings_data))


class BatchRunner:
    """Runs one scenario over many seeds.

    Parameters
    ----------
    catalog_factory:
        Builds the catalog.  Called once for sequential runs and once per
        worker process for parallel runs.
    scenario:
        The battle to run on each engine.
    settings:
        Template settings; each run overrides only ``seed``.
    """

    def __init__(
        self,
        catalog_factory: CatalogFactory,
        scenario: Scenario,
        settings: EngineSettings | None = None,
    ) -> None:
        self.catalog_factory = catalog_factory
        self.scenario = scenario
        self.settings = settings or EngineSettings()

    def run_batch(
        self,
        n_runs: int,
        base_seed: int = 42,
        parallel: bool = False,
    ) -> list[BattleResult]:
        """Run *n_runs* battles with seeds ``base_seed .. base_seed + n_runs - 1``.

        Results are returned in seed order in both modes.
        """
        if n_runs < 0:
            raise ValueError(f"n_runs must be >= 0, got {n_runs}")
        seeds = [base_seed + i for i in range(n_runs)]
        logger.info("Running %d battles (parallel=%s)", n_runs, parallel)

        if parallel and n_runs > 1:
            return self._run_parallel(seeds)
        return self._run_sequential(seeds)

    def _settings_for(self, seed: int) -> EngineSettings:
        return self.settings.model_copy(update={"seed": seed})

    def _run_sequential(self, seeds: list[int]) -> list[BattleResult]:
        catalog = self.catalog_factory()
        return [
            run_single(catalog, self.scenario, self._settings_for(seed))
            for seed in seeds
        ]

    def _run_parallel(self, seeds: list[int]) -> list[BattleResult]:
        """Run battles across a process pool.

        Rather than pickling the catalog (which holds ability callables
        bound to the parent's module state), each worker rebuilds it from
        the factory.
        """
        work_items = [
            (self.catalog_factory, self.scenario, self._settings_for(seed).model_dump())
            for seed in seeds
        ]
        n_workers = min(len(seeds), multiprocessing.cpu_count() or 1)

        with multiprocessing.Pool(processes=n_workers) as pool:
            results = pool.map(_worker_run_single, work_items)

        return results

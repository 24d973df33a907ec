# src/cyclecalc/simulate.py
from __future__ import annotations

import asyncio
import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Sequence

from .decoder import Decoder
from .encoding import decode_result
from .solvers import evaluate_decoded_cycle
from .types import Config, CycleCalculation, CycleDescription, Data, DecodedXYList, XYList

logger = logging.getLogger(__name__)


def run_cycle(cycle: Sequence[CycleDescription], data: Data, config: Config | None = None):
    """
    High-level wrapper: decode a symbolic cycle against `data`, then evaluate it.

    Returns result key -> XYList with tick indices as x.
    """
    config = config or Config()
    calculation = Decoder(config, data).decode(cycle)
    return evaluate_decoded_cycle(calculation, config)


def run_cycle_decoded(cycle: Sequence[CycleDescription], data: Data,
                      config: Config | None = None) -> dict[str, DecodedXYList]:
    """Same as run_cycle, with x re-expressed as durations since time zero."""
    config = config or Config()
    return decode_result(run_cycle(cycle, data, config), config)


class Evaluator:
    """
    Evaluates cycles on a bounded thread pool.

    The pool only limits how many requests are computed at once; a single cycle is
    always evaluated sequentially. Evaluations share no state, so cancelling one
    future leaves every other evaluation untouched.

    policy : n_threads sizes the pool; also the default config for evaluations
    """

    def __init__(self, policy: Config | None = None):
        self.policy = policy or Config()
        self._pool = ThreadPoolExecutor(max_workers=self.policy.n_threads,
                                        thread_name_prefix="cyclecalc-eval")

    def submit(self, cycle: CycleCalculation, config: Config | None = None) -> Future:
        """Schedule an evaluation; the future resolves to result key -> XYList."""
        config = config or self.policy
        logger.debug("submitting cycle with %d compounds", len(cycle.compounds))
        return self._pool.submit(evaluate_decoded_cycle, cycle, config)

    def evaluate(self, cycle: CycleCalculation, config: Config | None = None) -> dict[str, XYList]:
        return self.submit(cycle, config).result()

    async def evaluate_async(self, cycle: CycleCalculation,
                             config: Config | None = None) -> dict[str, XYList]:
        return await asyncio.wrap_future(self.submit(cycle, config))

    def shutdown(self, cancel_pending: bool = False) -> None:
        self._pool.shutdown(wait=True, cancel_futures=cancel_pending)

    def __enter__(self) -> Evaluator:
        return self

    def __exit__(self, *exc) -> None:
        self.shutdown()

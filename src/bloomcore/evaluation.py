"""Empirical false positive measurement.

The evaluator inserts a seeded batch of random keys into a fresh filter,
probes it with keys that were never inserted and compares the observed false
positive rate with the one the filter was sized for. Every trial also
re-checks the inserted keys, so a single false negative marks the run as
failed.
"""

import dataclasses
import random
import statistics
import time
from typing import Callable, List, Optional

from loguru import logger

from bloomcore.config import EvaluationConfig
from bloomcore.filter import Filter
from bloomcore.params import best_error_rate

FilterFactory = Callable[[], Filter]


@dataclasses.dataclass(slots=True)
class TrialMetrics:
    seed: int
    build_time_s: float
    query_time_s: float
    false_positives: int
    false_negatives: int
    total_positive_queries: int
    total_negative_queries: int
    fill_ratio: float

    @property
    def false_positive_rate(self) -> float:
        if self.total_negative_queries == 0:
            return 0.0
        return self.false_positives / self.total_negative_queries

    @property
    def false_negative_rate(self) -> float:
        if self.total_positive_queries == 0:
            return 0.0
        return self.false_negatives / self.total_positive_queries


@dataclasses.dataclass(slots=True)
class EvaluationResult:
    success: bool
    trials: List[TrialMetrics]
    false_positive_rate: float
    false_negative_rate: float
    configured_error_rate: float
    theoretical_error_rate: float
    mean_fill_ratio: float
    mean_build_time_ms: float
    mean_query_time_ms: float
    within_tolerance: bool = False
    error: Optional[str] = None


class Evaluator:
    """Runs one trial per configured seed against filters from ``factory``."""

    def __init__(self, config: Optional[EvaluationConfig] = None) -> None:
        self.config = config or EvaluationConfig()

    def __call__(self, factory: FilterFactory) -> EvaluationResult:
        trials: List[TrialMetrics] = []
        errors: List[str] = []
        reference: Optional[Filter] = None

        for seed in self.config.seeds:
            bloom: Optional[Filter] = None
            try:
                bloom = factory()
                reference = reference or bloom
                trials.append(self._run_trial(bloom, seed))
            except Exception as exc:  # noqa: BLE001 - recorded on the result
                errors.append(f"seed {seed}: {exc!r}")
                logger.exception("Filter evaluation failed for seed {}", seed)
            finally:
                if bloom is not None:
                    bloom.dispose()

        configured = reference.error_rate if reference else 1.0
        theoretical = (
            best_error_rate(reference.hash_count, reference.capacity, self.config.positives)
            if reference
            else 1.0
        )

        if not trials:
            message = ", ".join(errors) if errors else "no successful trials"
            logger.error("Evaluator produced no successful trials: {}", message)
            return EvaluationResult(
                success=False,
                trials=[],
                false_positive_rate=1.0,
                false_negative_rate=1.0,
                configured_error_rate=configured,
                theoretical_error_rate=theoretical,
                mean_fill_ratio=0.0,
                mean_build_time_ms=0.0,
                mean_query_time_ms=0.0,
                error=message,
            )

        fp_rate = statistics.fmean(t.false_positive_rate for t in trials)
        fn_rate = statistics.fmean(t.false_negative_rate for t in trials)
        fill = statistics.fmean(t.fill_ratio for t in trials)
        build_ms = statistics.fmean(t.build_time_s for t in trials) * 1e3
        query_ms = statistics.fmean(t.query_time_s for t in trials) * 1e3

        message = ", ".join(errors) if errors else None
        if message:
            logger.warning("Evaluator encountered partial failures: {}", message)

        logger.debug(
            "Evaluation complete: fp_rate={:.4f} (configured {:.4f}, theoretical {:.4f}), "
            "fn_rate={:.4f}, fill={:.3f}, build={:.2f}ms, query={:.2f}ms",
            fp_rate,
            configured,
            theoretical,
            fn_rate,
            fill,
            build_ms,
            query_ms,
        )
        return EvaluationResult(
            success=not errors and fn_rate == 0.0,
            trials=trials,
            false_positive_rate=fp_rate,
            false_negative_rate=fn_rate,
            configured_error_rate=configured,
            theoretical_error_rate=theoretical,
            mean_fill_ratio=fill,
            mean_build_time_ms=build_ms,
            mean_query_time_ms=query_ms,
            within_tolerance=fp_rate <= configured * self.config.tolerance,
            error=message,
        )

    def _run_trial(self, bloom: Filter, seed: int) -> TrialMetrics:
        cfg = self.config
        rng = random.Random(seed)

        positives = self._draw_keys(rng, cfg.positives, set())
        negatives = self._draw_keys(rng, cfg.negatives, set(positives))

        build_start = time.perf_counter()
        bloom.update(positives)
        build_time = time.perf_counter() - build_start

        query_start = time.perf_counter()
        false_negatives = sum(1 for key in positives if not bloom.contains(key))
        false_positives = sum(1 for key in negatives if bloom.contains(key))
        query_time = time.perf_counter() - query_start

        return TrialMetrics(
            seed=seed,
            build_time_s=build_time,
            query_time_s=query_time,
            false_positives=false_positives,
            false_negatives=false_negatives,
            total_positive_queries=len(positives),
            total_negative_queries=len(negatives),
            fill_ratio=bloom.fill_ratio(),
        )

    def _draw_keys(self, rng: random.Random, needed: int, exclude: set) -> List[str]:
        keys: List[str] = []
        seen = set(exclude)
        if needed + len(seen) > 1 << (self.config.key_bytes * 8):
            raise ValueError(f"cannot draw {needed} distinct {self.config.key_bytes}-byte keys")
        while len(keys) < needed:
            candidate = rng.getrandbits(self.config.key_bytes * 8).to_bytes(
                self.config.key_bytes, "little"
            ).hex()
            if candidate in seen:
                continue
            seen.add(candidate)
            keys.append(candidate)
        return keys

# src/qecvector/experiments/monte_carlo.py
"""Monte Carlo estimates of the logical error rate."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple, Union

import numpy as np
from scipy import stats

from qecvector.codes import CodeType, LogicalState
from qecvector.experiments.simulator import QECSimulator, SimulationResult, SimulatorConfig
from qecvector.noise.models import (
    NoiseConfig,
    NoiseType,
    repetition_logical_error_rate,
    shor_logical_error_rate,
)
from qecvector.utils import coerce_enum

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MonteCarloResult:
    """Failure count of a batch of full cycles.

    ``confidence_interval`` is the 95% Wilson interval on the logical error
    rate. ``fidelities`` holds every trial's final fidelity; full
    ``results`` (each carrying its state vector and history) are only kept
    when requested.
    """
    logical_error_rate: float
    num_trials: int
    num_failures: int
    confidence_interval: Tuple[float, float]
    fidelities: List[float]
    results: List[SimulationResult] = field(default_factory=list)


@dataclass(frozen=True)
class QBERPoint:
    """One point of a logical-vs-physical error rate curve."""
    probability: float
    logical_error_rate: float
    theoretical_rate: float


def run_monte_carlo_simulation(
    config: SimulatorConfig,
    num_trials: int,
    fidelity_threshold: float = 0.99,
    seed: Optional[Union[int, np.random.Generator]] = None,
    keep_results: bool = False,
) -> MonteCarloResult:
    """Run ``num_trials`` full cycles and count failures.

    A trial fails when its post-correction fidelity with the encoded target
    is below ``fidelity_threshold``. All trials draw from one generator
    seeded by ``seed``. Each trial's SimulationResult is retained only with
    ``keep_results=True``.
    """
    if num_trials < 1:
        raise ValueError(f"num_trials must be >= 1. Got {num_trials}")
    rng = np.random.default_rng(seed)
    fidelities = []
    results = []
    failures = 0
    for _ in range(num_trials):
        result = QECSimulator(config, rng=rng).run_full_cycle()
        fidelities.append(result.final_fidelity)
        if keep_results:
            results.append(result)
        if result.final_fidelity < fidelity_threshold:
            failures += 1
    rate = failures / num_trials
    logger.info(
        "%s, %s: %d/%d failures (rate %.4f)",
        config.code_type.value, config.noise_config.type.value, failures, num_trials, rate,
    )
    ci = stats.binomtest(failures, num_trials).proportion_ci(
        confidence_level=0.95, method="wilson"
    )
    return MonteCarloResult(
        rate, num_trials, failures, (float(ci.low), float(ci.high)), fidelities, results
    )


def generate_qber_data(
    code_type: Union[CodeType, str],
    initial_state: Union[LogicalState, str],
    noise_type: Union[NoiseType, str],
    probabilities: Sequence[float],
    trials_per_point: int = 100,
    seed: Optional[Union[int, np.random.Generator]] = None,
) -> List[QBERPoint]:
    """Logical error rate per physical error probability, with the reference curve."""
    code_type = coerce_enum(CodeType, code_type, "code type")
    theory = (
        repetition_logical_error_rate
        if code_type is CodeType.REPETITION
        else shor_logical_error_rate
    )
    rng = np.random.default_rng(seed)
    points = []
    for p in probabilities:
        config = SimulatorConfig(
            code_type=code_type,
            initial_state=initial_state,
            noise_config=NoiseConfig(type=noise_type, probability=p),
        )
        outcome = run_monte_carlo_simulation(config, trials_per_point, seed=rng)
        points.append(QBERPoint(float(p), outcome.logical_error_rate, theory(p)))
    return points

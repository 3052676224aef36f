"""Tests for Monte Carlo logical-error-rate estimation."""
import pytest

from qecvector.experiments import (
    SimulatorConfig,
    generate_qber_data,
    run_monte_carlo_simulation,
)
from qecvector.noise import NoiseConfig, repetition_logical_error_rate


def _make_config(code_type="repetition", initial_state="zero", **noise):
    return SimulatorConfig(
        code_type=code_type,
        initial_state=initial_state,
        noise_config=NoiseConfig(**noise) if noise else NoiseConfig(),
    )


class TestRunMonteCarlo:

    def test_noiseless(self):
        result = run_monte_carlo_simulation(_make_config(), num_trials=5, seed=1)
        assert result.num_failures == 0
        assert result.logical_error_rate == 0
        assert result.fidelities == pytest.approx([1.0] * 5)
        low, high = result.confidence_interval
        assert low == pytest.approx(0)
        assert 0 < high < 1

    def test_full_results_are_opt_in(self):
        config = _make_config(type="bit-flip", probability=0.3)
        lean = run_monte_carlo_simulation(config, num_trials=6, seed=5)
        full = run_monte_carlo_simulation(config, num_trials=6, seed=5, keep_results=True)
        assert lean.results == []
        assert len(full.results) == 6
        assert [r.final_fidelity for r in full.results] == lean.fidelities
        assert lean.num_failures == sum(f < 0.99 for f in lean.fidelities)

    def test_certain_failure(self):
        config = _make_config(type="bit-flip", probability=1.0)
        result = run_monte_carlo_simulation(config, num_trials=4, seed=1)
        assert result.logical_error_rate == 1
        assert result.confidence_interval[1] == pytest.approx(1)

    def test_single_errors_always_corrected(self):
        config = SimulatorConfig(
            code_type="shor",
            initial_state="one",
            noise_config=NoiseConfig.exact("depolarizing", 1),
        )
        result = run_monte_carlo_simulation(config, num_trials=4, seed=3)
        assert result.num_failures == 0

    def test_seed_reproducibility(self):
        config = _make_config(type="bit-flip", probability=0.3)
        first = run_monte_carlo_simulation(config, num_trials=30, seed=42)
        second = run_monte_carlo_simulation(config, num_trials=30, seed=42)
        assert first.num_failures == second.num_failures
        assert first.confidence_interval == second.confidence_interval

    def test_interval_contains_estimate(self):
        config = _make_config(type="bit-flip", probability=0.3)
        result = run_monte_carlo_simulation(config, num_trials=40, seed=7)
        low, high = result.confidence_interval
        assert low <= result.logical_error_rate <= high

    def test_needs_at_least_one_trial(self):
        with pytest.raises(ValueError):
            run_monte_carlo_simulation(_make_config(), num_trials=0)


class TestQBERData:

    def test_curve_endpoints(self):
        points = generate_qber_data(
            "repetition", "zero", "bit-flip", [0.0, 1.0], trials_per_point=4, seed=0
        )
        assert [p.probability for p in points] == [0.0, 1.0]
        assert points[0].logical_error_rate == 0
        assert points[1].logical_error_rate == 1
        assert points[1].theoretical_rate == pytest.approx(repetition_logical_error_rate(1.0))

    def test_shor_reference_curve(self):
        (point,) = generate_qber_data(
            "shor", "zero", "phase-flip", [0.1], trials_per_point=2, seed=0
        )
        assert point.theoretical_rate == pytest.approx(0.012)

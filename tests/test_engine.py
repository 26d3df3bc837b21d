import math
import unittest

import pandas as pd

from obscov.core.validator import DomainError
from obscov.engine import CoverageEngine, simulate_cv_coverage
from obscov.models import SamplingDesign, SimulationRequest, SimulationResults


class CoverageEngineTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls) -> None:
        cls.engine = CoverageEngine()
        cls.request = SimulationRequest(total_effort=200, rate=0.5, dispersion=2.0, replicates=200, seed=7)
        cls.results = cls.engine.simulate(cls.request)

    def test_results_bundle(self) -> None:
        results = self.results
        self.assertIsInstance(results, SimulationResults)
        self.assertEqual(results.percentile, 80)
        self.assertEqual(results.total_effort, 200)
        self.assertEqual(results.parameters()["design"], "finite_population")
        self.assertEqual(results.metadata["seed_entropy"], 7)
        self.assertEqual(results.metadata["rows"], len(results.replicates))
        self.assertEqual(len(results.summary), results.metadata["coverage_levels"])
        self.assertTrue(results.summary["coverage"].is_monotonic_increasing)

    def test_summary_matches_worker_count(self) -> None:
        parallel = CoverageEngine(max_workers=3).simulate(self.request)
        pd.testing.assert_frame_equal(self.results.summary, parallel.summary)

    def test_full_coverage_always_meets_target(self) -> None:
        last = self.results.summary.iloc[-1]
        self.assertEqual(last["coverage"], 1.0)
        self.assertEqual(last["qcv"], 0.0)

    def test_higher_percentile_needs_at_least_as_much_coverage(self) -> None:
        at_80 = self.engine.minimum_coverage_for_cv(self.results, 0.3, method="scan")
        at_95 = self.engine.minimum_coverage_for_cv(self.results, 0.3, percentile=95, method="scan")
        self.assertEqual(at_80.percentile, 80)
        self.assertEqual(at_95.percentile, 95)
        self.assertGreaterEqual(at_95.min_coverage, at_80.min_coverage)
        # re-summarizing leaves the stored bundle untouched
        self.assertEqual(self.results.percentile, 80)

    def test_resummarize(self) -> None:
        summary = self.engine.summarize(self.results, 95)
        pd.testing.assert_series_equal(summary["qcv"], summary["q95"], check_names=False)

    def test_validation_passes(self) -> None:
        validation = self.engine.validate(self.results)
        self.assertEqual(validation.status, "PASS")
        self.assertEqual(validation.to_dict()["failed_checks"], [])

    def test_sample_size_table(self) -> None:
        table = self.engine.sample_size(self.results)
        self.assertEqual(
            list(table.columns),
            ["coverage", "observed_units", "positive_replicates", "prob_zero_observed", "prob_zero_total"],
        )
        self.assertTrue(table["positive_replicates"].between(0, 200).all())
        expected = (0.5 ** 0.5) ** table["observed_units"]
        pd.testing.assert_series_equal(table["prob_zero_observed"], expected, check_names=False)
        self.assertAlmostEqual(table["prob_zero_total"].iloc[0], (0.5 ** 0.5) ** 200)

    def test_failing_progress_callback_does_not_abort_run(self) -> None:
        def broken(step, total, message):
            raise RuntimeError("display went away")

        engine = CoverageEngine(progress_interval=50)
        with self.assertLogs("obscov.engine", level="WARNING") as logs:
            results = engine.simulate(self.request, progress_callback=broken)
        self.assertTrue(any("Progress callback failed" in line for line in logs.output))
        pd.testing.assert_frame_equal(results.replicates, self.results.replicates)
        pd.testing.assert_frame_equal(results.summary, self.results.summary)

    def test_analytic_wrappers_use_default_dispersion(self) -> None:
        self.assertAlmostEqual(self.engine.probability_zero([4], 0.5)[0], 0.25)
        result = self.engine.minimum_coverage_for_detection(1000, 0.1)
        self.assertEqual(result.target, 80)


class ScenarioTests(unittest.TestCase):
    def test_minimum_coverage_for_thirty_percent_cv(self) -> None:
        results = simulate_cv_coverage(1000, 0.1, 2, 1000, seed=2024)
        result = CoverageEngine().minimum_coverage_for_cv(results, 0.3)
        self.assertIsNotNone(result)
        self.assertEqual(result.percentile, 80)
        self.assertGreater(result.min_coverage, 0)
        self.assertLess(result.min_coverage, 1)
        self.assertEqual(result.observed_units, math.ceil(result.min_coverage * 1000))

    def test_rare_bycatch_flags_insufficient_data(self) -> None:
        with self.assertLogs("obscov.engine", level="WARNING"):
            results = simulate_cv_coverage(30, 0.001, 1, 20, seed=1)
        self.assertTrue((results.summary["replicates"] == 0).any())
        validation = CoverageEngine().validate(results)
        self.assertIn("insufficient_data", validation.warnings)


class ResamplingDesignTests(unittest.TestCase):
    def test_resampling_summary_and_target(self) -> None:
        engine = CoverageEngine()
        results = simulate_cv_coverage(40, 1.0, 1.5, 100, design=SamplingDesign.RESAMPLING, seed=3)
        self.assertIn("cv", results.summary.columns)
        self.assertNotIn("qcv", results.summary.columns)
        self.assertAlmostEqual(results.summary["cv"].iloc[-1], 0.0)
        result = engine.minimum_coverage_for_cv(results, 0.3)
        self.assertIsNotNone(result)
        self.assertIsNone(result.percentile)
        with self.assertRaises(DomainError):
            engine.validate(results)
        with self.assertRaises(DomainError):
            engine.sample_size(results)


class EngineConfigurationTests(unittest.TestCase):
    def test_invalid_engine_settings(self) -> None:
        with self.assertRaises(DomainError):
            CoverageEngine(max_workers=0)
        with self.assertRaises(DomainError):
            CoverageEngine(chunk_cells=0)

    def test_invalid_percentile(self) -> None:
        request = SimulationRequest(total_effort=10, rate=1.0, replicates=5, seed=1)
        with self.assertRaises(DomainError):
            CoverageEngine().simulate(request, percentile=100)


if __name__ == "__main__":
    unittest.main()

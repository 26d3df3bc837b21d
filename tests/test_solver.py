import math
import unittest

import numpy as np
import pandas as pd

from obscov.core.solver import solve_cv_target, solve_detection_target
from obscov.core.validator import DomainError
from obscov.core.zero_probability import detection_probability


class SolveCvTargetTests(unittest.TestCase):
    def setUp(self) -> None:
        self.summary = pd.DataFrame(
            {
                "coverage": [0.125, 0.25, 0.5, 0.75, 1.0],
                "observed_units": [8, 16, 32, 48, 64],
                "replicates": [0, 90, 100, 100, 100],
                "qcv": [np.nan, 0.75, 0.5, 0.25, 0.0],
            }
        )

    def test_interpolates_between_bracketing_levels(self) -> None:
        result = solve_cv_target(self.summary, 0.375, total_effort=64, percentile=80)
        self.assertEqual(result.mode, "cv")
        self.assertEqual(result.method, "interpolate")
        self.assertAlmostEqual(result.min_coverage, 0.625)
        self.assertEqual(result.observed_units, 40)
        self.assertEqual(result.percentile, 80)

    def test_scan_returns_first_grid_level(self) -> None:
        result = solve_cv_target(self.summary, 0.375, total_effort=64, method="scan")
        self.assertEqual(result.min_coverage, 0.75)
        self.assertEqual(result.observed_units, 48)

    def test_levels_without_data_are_skipped(self) -> None:
        result = solve_cv_target(self.summary, 0.9, total_effort=64)
        self.assertEqual(result.min_coverage, 0.25)
        self.assertEqual(result.observed_units, 16)

    def test_first_level_reports_its_own_unit_count(self) -> None:
        # 0.55 * 100 evaluates to 55.00000000000001 in floating point
        summary = pd.DataFrame(
            {
                "coverage": [0.55, 0.6, 1.0],
                "observed_units": [55, 60, 100],
                "replicates": [100, 100, 100],
                "qcv": [0.2, 0.1, 0.0],
            }
        )
        for method in ("interpolate", "scan"):
            result = solve_cv_target(summary, 0.3, total_effort=100, method=method)
            self.assertEqual(result.min_coverage, 0.55)
            self.assertEqual(result.observed_units, 55)

    def test_interpolated_units_ignore_float_noise(self) -> None:
        summary = pd.DataFrame(
            {
                "coverage": [0.5, 0.6],
                "observed_units": [50, 60],
                "replicates": [100, 100],
                "qcv": [0.4, 0.2],
            }
        )
        result = solve_cv_target(summary, 0.3, total_effort=100)
        self.assertAlmostEqual(result.min_coverage, 0.55)
        self.assertEqual(result.observed_units, 55)

    def test_unreachable_target_returns_none(self) -> None:
        summary = self.summary.copy()
        summary["qcv"] = [np.nan, 0.9, 0.8, 0.7, 0.6]
        with self.assertLogs("obscov.core.solver", level="WARNING"):
            self.assertIsNone(solve_cv_target(summary, 0.3, total_effort=64))

    def test_solving_is_idempotent(self) -> None:
        first = solve_cv_target(self.summary, 0.3, total_effort=64)
        second = solve_cv_target(self.summary, 0.3, total_effort=64)
        self.assertEqual(first, second)

    def test_invalid_arguments(self) -> None:
        with self.assertRaises(DomainError):
            solve_cv_target(self.summary, 1.0, total_effort=64)
        with self.assertRaises(DomainError):
            solve_cv_target(self.summary, 0.3, total_effort=64, method="bisect")
        with self.assertRaises(DomainError):
            solve_cv_target(self.summary, 0.3, total_effort=64, column="q99")


class SolveDetectionTargetTests(unittest.TestCase):
    def test_inverse_of_detection_probability(self) -> None:
        result = solve_detection_target(1000, 0.1, 2, 80)
        self.assertEqual(result.mode, "detection")
        self.assertEqual(result.method, "analytic")
        self.assertGreater(result.min_coverage, 0)
        self.assertLess(result.min_coverage, 1)
        forward = detection_probability(result.min_coverage, 1000, 0.1, 2)[0]
        self.assertAlmostEqual(forward, 80.0, delta=0.01)
        self.assertEqual(result.observed_units, math.ceil(result.min_coverage * 1000))
        rounded_up = detection_probability(result.observed_units / 1000, 1000, 0.1, 2)[0]
        self.assertGreaterEqual(rounded_up, 80.0 - 1e-9)

    def test_poisson_limit(self) -> None:
        result = solve_detection_target(500, 0.01, 1, 50)
        forward = detection_probability(result.min_coverage, 500, 0.01, 1)[0]
        self.assertAlmostEqual(forward, 50.0, delta=0.01)

    def test_certain_detection_requires_full_coverage(self) -> None:
        # any bycatch in total effort is certain to double precision here
        result = solve_detection_target(1000, 0.1, 2, 100)
        self.assertEqual(result.min_coverage, 1.0)
        self.assertEqual(result.observed_units, 1000)
        result = solve_detection_target(5000, 1.0, 1, 100)
        self.assertEqual(result.min_coverage, 1.0)
        self.assertEqual(result.observed_units, 5000)

    def test_certain_detection_with_rare_bycatch(self) -> None:
        result = solve_detection_target(50, 0.001, 1, 100)
        self.assertEqual(result.min_coverage, 1.0)
        self.assertEqual(result.observed_units, 50)

    def test_higher_target_needs_more_coverage(self) -> None:
        low = solve_detection_target(2000, 0.02, 3, 50)
        high = solve_detection_target(2000, 0.02, 3, 95)
        self.assertLess(low.min_coverage, high.min_coverage)

    def test_invalid_target(self) -> None:
        for bad in (0, -5, 100.5):
            with self.assertRaises(DomainError):
                solve_detection_target(1000, 0.1, 2, bad)


if __name__ == "__main__":
    unittest.main()

import unittest

import numpy as np

from obscov.core.coverage_grid import coverage_grid, coverage_levels, detection_grid
from obscov.core.validator import DomainError


class CoverageGridTests(unittest.TestCase):
    def test_small_effort_uses_every_unit(self) -> None:
        grid = coverage_grid(10)
        np.testing.assert_allclose(grid, np.arange(1, 11) / 10)

    def test_large_effort_uses_fixed_multiresolution_grid(self) -> None:
        grid = coverage_grid(1000)
        self.assertEqual(len(grid), 29)
        self.assertAlmostEqual(grid[0], 0.001)
        self.assertAlmostEqual(grid[5], 0.01)
        self.assertAlmostEqual(grid[10], 0.10)
        self.assertEqual(grid[-1], 1.0)
        self.assertTrue(np.all(np.diff(grid) > 0))

    def test_observed_units_non_decreasing_and_end_at_total_effort(self) -> None:
        for total_effort in (3, 7, 19, 20, 137, 1000, 54321):
            levels = coverage_levels(total_effort, min_units=1)
            units = [level.observed_units for level in levels]
            self.assertTrue(all(a <= b for a, b in zip(units, units[1:])))
            self.assertEqual(levels[-1].proportion, 1.0)
            self.assertEqual(levels[-1].observed_units, total_effort)

    def test_levels_below_minimum_units_are_dropped(self) -> None:
        levels = coverage_levels(1000, min_units=2)
        self.assertEqual(levels[0].observed_units, 2)
        self.assertAlmostEqual(levels[0].proportion, 0.002)

    def test_minimum_effort_still_has_usable_levels(self) -> None:
        self.assertEqual(len(coverage_levels(2, min_units=1)), 2)
        levels = coverage_levels(3, min_units=2)
        self.assertEqual([level.observed_units for level in levels], [2, 3])

    def test_integral_float_effort_is_accepted(self) -> None:
        self.assertEqual(len(coverage_grid(10.0)), 10)

    def test_invalid_effort_raises_domain_error(self) -> None:
        for bad in (1, 0, -5, 2.5, "100", True):
            with self.assertRaises(DomainError):
                coverage_grid(bad)

    def test_detection_grid_resolution(self) -> None:
        self.assertEqual(len(detection_grid(500)), 500)
        grid = detection_grid(5000)
        self.assertEqual(len(grid), 1000)
        self.assertAlmostEqual(grid[0], 0.001)
        self.assertEqual(grid[-1], 1.0)


if __name__ == "__main__":
    unittest.main()

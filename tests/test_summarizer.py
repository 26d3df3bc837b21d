import unittest

import numpy as np
import pandas as pd

from obscov.core.summarizer import SUMMARY_COLUMNS, quantile_label, summarize, summarize_rmse
from obscov.core.validator import DomainError


class SummarizeTests(unittest.TestCase):
    def setUp(self) -> None:
        self.replicates = pd.DataFrame(
            {
                "coverage": [0.5] * 5 + [1.0] * 2,
                "observed_units": [5] * 5 + [10] * 2,
                "observed_total": [1.0, 2.0, 3.0, 4.0, 0.0, 0.0, 0.0],
                "cv": [0.1, 0.4, 0.2, 0.3, np.nan, np.nan, np.nan],
            }
        )

    def test_linear_quantiles_exclude_zero_totals(self) -> None:
        summary = summarize(self.replicates, 0.8)
        self.assertEqual(list(summary.columns), SUMMARY_COLUMNS)
        row = summary.iloc[0]
        self.assertEqual(row["replicates"], 4)
        self.assertAlmostEqual(row["qcv"], 0.34)
        self.assertAlmostEqual(row["q50"], 0.25)
        self.assertAlmostEqual(row["q80"], 0.34)
        self.assertAlmostEqual(row["q95"], 0.385)
        self.assertAlmostEqual(row["mean_total"], 2.5)
        self.assertEqual(row["min_total"], 1.0)
        self.assertEqual(row["max_total"], 4.0)

    def test_level_without_positive_replicates_is_kept(self) -> None:
        summary = summarize(self.replicates, 0.8)
        self.assertEqual(summary["coverage"].tolist(), [0.5, 1.0])
        empty = summary.iloc[1]
        self.assertEqual(empty["replicates"], 0)
        self.assertEqual(empty["observed_units"], 10)
        self.assertTrue(np.isnan(empty["qcv"]))

    def test_probability_selects_qcv(self) -> None:
        summary = summarize(self.replicates, 0.5)
        self.assertAlmostEqual(summary.iloc[0]["qcv"], 0.25)

    def test_invalid_inputs(self) -> None:
        with self.assertRaises(DomainError):
            summarize(self.replicates, 1.0)
        with self.assertRaises(DomainError):
            summarize(self.replicates.drop(columns="cv"))

    def test_quantile_label(self) -> None:
        self.assertEqual(quantile_label(0.95), "q95")
        self.assertEqual(quantile_label(0.5), "q50")


class SummarizeRmseTests(unittest.TestCase):
    def test_root_mean_square_error_relative_to_rate(self) -> None:
        replicates = pd.DataFrame(
            {
                "coverage": [0.5, 0.5, 1.0, 1.0],
                "observed_units": [2, 2, 4, 4],
                "error": [0.1, -0.1, 0.0, 0.0],
            }
        )
        summary = summarize_rmse(replicates, 0.5)
        self.assertEqual(list(summary.columns), ["coverage", "observed_units", "replicates", "cv"])
        self.assertAlmostEqual(summary.iloc[0]["cv"], 0.2)
        self.assertEqual(summary.iloc[1]["cv"], 0.0)
        self.assertEqual(summary["replicates"].tolist(), [2, 2])


if __name__ == "__main__":
    unittest.main()

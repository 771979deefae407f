import math
import sys
from pathlib import Path

import numpy as np
import pandas as pd
import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

from logistic_fit import FittedLogit
from metrics import METRIC_COLUMNS, MetricRow, compute_metric_row, correlation, f1_or_undefined


def _constant_model(intercept: float) -> FittedLogit:
    return FittedLogit(coef=np.array([intercept, 0.0, 0.0]), converged=True, n_iter=1, deviance=0.0)


def test_correlation_of_vector_with_itself_is_one():
    a = np.random.default_rng(0).exponential(1.0, 500)
    assert correlation(a, a) == pytest.approx(1.0)


def test_correlation_of_short_vector_with_itself_is_one():
    a = [1.0, 2.0, 4.0]
    assert correlation(a, a) == pytest.approx(1.0)
    assert correlation(a, [-x for x in a]) == pytest.approx(-1.0)


def test_correlation_matches_pearson():
    rng = np.random.default_rng(3)
    a = rng.normal(size=50)
    b = 0.5 * a + rng.normal(size=50)
    assert correlation(a, b) == pytest.approx(np.corrcoef(a, b)[0, 1])


def test_correlation_is_symmetric():
    rng = np.random.default_rng(1)
    a = rng.normal(size=200)
    b = a + rng.normal(size=200)
    assert correlation(a, b) == correlation(b, a)


def test_correlation_of_constant_vector_is_nan():
    assert math.isnan(correlation([1.0, 1.0, 1.0], [1.0, 2.0, 3.0]))


def test_f1_known_value():
    assert f1_or_undefined([1, 1, 0, 0], [1, 0, 1, 0]) == pytest.approx(0.5)


def test_f1_undefined_when_no_true_positive_but_predicted_positive():
    assert math.isnan(f1_or_undefined([0, 0, 1], [1, 0, 0]))


def test_f1_undefined_when_nothing_predicted_positive():
    assert math.isnan(f1_or_undefined([0, 1, 1], [0, 0, 0]))


def test_compute_metric_row_perfect_predictions_give_f1_one():
    reference = pd.DataFrame({"X1": [1.0, 2.0, 3.0, 4.0], "X2": [2.0, 1.0, 4.0, 3.0], "Y": [0, 1, 0, 1]})
    test = pd.DataFrame({"X1": [0.5, 1.5, 2.5], "X2": [0.1, 0.2, 0.3], "Y": [1, 1, 1]})

    row = compute_metric_row(reference, _constant_model(10.0), test)

    assert row.f1 == 1.0
    assert row.mean_x1 == pytest.approx(2.5)
    assert row.mean_x2 == pytest.approx(2.5)
    assert row.var_x1 == pytest.approx(5.0 / 3.0)
    assert row.var_x2 == pytest.approx(5.0 / 3.0)
    assert row.corr_x1_x2 == pytest.approx(correlation(reference["X1"], reference["X2"]))
    assert (row.beta0, row.beta1, row.beta2) == (10.0, 0.0, 0.0)


def test_compute_metric_row_marks_undefined_f1():
    reference = pd.DataFrame({"X1": [1.0, 2.0, 3.0], "X2": [1.0, 3.0, 2.0], "Y": [0, 1, 0]})
    test = pd.DataFrame({"X1": [0.5, 1.5], "X2": [0.1, 0.2], "Y": [0, 0]})

    row = compute_metric_row(reference, _constant_model(5.0), test)
    assert math.isnan(row.f1)


def test_metric_row_serialises_in_column_order():
    row = MetricRow(*range(9))
    assert row.as_list() == list(range(9))
    assert list(row.as_dict()) == METRIC_COLUMNS

import numpy as np
import pytest

from gradopt.losses import LeastSquaresLoss
from gradopt.optimize import SCD, InvalidConfiguration, select_coordinate
from gradopt.optimize.scd import predicted_descent, soft_threshold_steps


def _curvature(X):
    return float(np.max(np.sum(X * X, axis=0)) / X.shape[0])


def test_soft_threshold_branches():
    w = np.zeros(3)
    grad = np.array([-3.0, 3.0, 0.5])
    eta = soft_threshold_steps(w, grad, rho=1.0, lambda_=1.0)
    assert np.allclose(eta, [2.0, -2.0, 0.0])
    descent = predicted_descent(w, grad, eta, 1.0, 1.0)
    assert np.allclose(descent, [2.0, 2.0, 0.0])

    best = select_coordinate(w, grad, rho=1.0, lambda_=1.0)
    assert best.index == 0
    assert best.eta == pytest.approx(2.0)
    assert best.descent == pytest.approx(2.0)


def test_soft_threshold_zeroes_small_weights():
    w = np.array([0.2])
    eta = soft_threshold_steps(w, np.array([0.1]), rho=1.0, lambda_=1.0)
    assert np.allclose(w + eta, [0.0])


def test_scd_without_penalty_solves_least_squares(rng):
    X = rng.normal(size=(60, 3))
    y = X @ np.array([1.0, -1.0, 2.0]) + 0.05 * rng.normal(size=60)
    res = SCD(
        np.zeros(3), LeastSquaresLoss(), max_iter=3000, rho=_curvature(X), lambda_=0.0,
        tol=1e-14,
    ).optimize(X, y)
    expected, *_ = np.linalg.lstsq(X, y, rcond=None)
    assert np.allclose(res.x, expected, atol=1e-4)


def test_scd_objective_never_increases(rng):
    X = rng.normal(size=(50, 6))
    y = X[:, 0] - 2.0 * X[:, 3] + 0.1 * rng.normal(size=50)
    res = SCD(
        np.zeros(6), LeastSquaresLoss(), max_iter=300, rho=_curvature(X), lambda_=0.05
    ).optimize(X, y)
    assert np.all(np.diff(res.fun_history) <= 1e-12)
    assert res.fun == res.fun_history[-1]


def test_scd_lasso_recovers_sparse_support(rng):
    X = rng.normal(size=(100, 8))
    w_true = np.zeros(8)
    w_true[[1, 5]] = [3.0, -2.0]
    y = X @ w_true + 0.01 * rng.normal(size=100)
    res = SCD(
        np.zeros(8), LeastSquaresLoss(), max_iter=2000, rho=_curvature(X), lambda_=0.1,
        tol=1e-12,
    ).optimize(X, y)
    support = np.flatnonzero(np.abs(res.x) > 1e-8)
    assert set(support) == {1, 5}
    assert res.success
    assert res.message == "Predicted descent tolerance satisfied."


def test_scd_stops_at_stationary_point():
    X = np.eye(2)
    y = np.zeros(2)
    res = SCD(np.zeros(2), LeastSquaresLoss(), lambda_=0.1, shuffle=False).optimize(X, y)
    assert res.success
    assert res.nit == 0
    assert res.njev == 1
    assert np.array_equal(res.x, np.zeros(2))


def test_scd_counts_evaluations(rng):
    X = rng.normal(size=(20, 3))
    y = rng.normal(size=20)
    res = SCD(
        np.zeros(3), LeastSquaresLoss(), max_iter=5, rho=_curvature(X), lambda_=0.0,
        tol=0.0, history=True,
    ).optimize(X, y)
    assert res.nit == 5
    assert res.nfev == res.nit + 1
    assert len(res.fun_history) == res.nit + 1
    assert len(res.history) == res.nit + 1


@pytest.mark.parametrize("kwargs", [{"rho": 0.0}, {"rho": -1.0}, {"lambda_": -0.1}])
def test_scd_rejects_invalid_options(kwargs):
    with pytest.raises(InvalidConfiguration):
        SCD(np.zeros(2), LeastSquaresLoss(), **kwargs)

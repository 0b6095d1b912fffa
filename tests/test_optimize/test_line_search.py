import numpy as np
import pytest

from gradopt.optimize import (
    BacktrackingLineSearch,
    BracketingLineSearch,
    InvalidConfiguration,
    LineSearchCondition,
    LineSearchExhausted,
    LineSearchParams,
    LineSearchPolicy,
    LineSearchState,
    NonDescentDirection,
    StepOutOfBounds,
    create_line_search,
)


class QuadraticLoss:
    """0.5 * (w - y)^T X (w - y), counting its evaluations."""

    def __init__(self):
        self.n_evaluate = 0
        self.n_gradient = 0

    def evaluate(self, X, y, w):
        self.n_evaluate += 1
        e = w - y
        return float(0.5 * e @ (X @ e))

    def gradient(self, X, y, w):
        self.n_gradient += 1
        return X @ (w - y)


class LinearLoss:
    """f(w) = -sum(w): every step along +1 decreases it at a constant rate."""

    def evaluate(self, X, y, w):
        return float(-np.sum(w))

    def gradient(self, X, y, w):
        return -np.ones_like(w)


class RosenbrockLoss:
    def evaluate(self, X, y, w):
        return float((1 - w[0]) ** 2 + 100 * (w[1] - w[0] ** 2) ** 2)

    def gradient(self, X, y, w):
        return np.array(
            [
                -2 * (1 - w[0]) - 400 * w[0] * (w[1] - w[0] ** 2),
                200 * (w[1] - w[0] ** 2),
            ]
        )


def _state(loss, X, y, x, d=None, step=1.0):
    fx = loss.evaluate(X, y, x)
    g = loss.gradient(X, y, x)
    if d is None:
        d = -g
    return LineSearchState(x=x, fx=fx, g=g, d=d, step=step)


def test_backtracking_satisfies_armijo_on_rosenbrock():
    loss = RosenbrockLoss()
    X, y = np.zeros((1, 2)), np.zeros(1)
    state = _state(loss, X, y, np.array([-1.2, 1.0]))
    search = BacktrackingLineSearch(X, y, loss)
    result = search.search(state)

    ftol = search.params.ftol
    assert 0 < result.step < 1.0
    assert result.fx <= state.fx + result.step * ftol * (state.d @ state.g)
    assert np.allclose(result.x, state.x + result.step * state.d)
    assert np.isclose(result.fx, loss.evaluate(X, y, result.x))
    assert np.allclose(result.g, loss.gradient(X, y, result.x))
    assert result.n_evals > 1


def test_backtracking_armijo_holds_for_random_descent_directions(rng):
    loss = QuadraticLoss()
    M = rng.normal(size=(4, 4))
    A = M @ M.T + np.eye(4)
    c = rng.normal(size=4)
    search = BacktrackingLineSearch(A, c, loss)
    for _ in range(20):
        x = rng.normal(size=4) * 3
        g = loss.gradient(A, c, x)
        d = -g + 0.1 * np.linalg.norm(g) * rng.normal(size=4)
        if d @ g >= 0:
            continue
        state = LineSearchState(x=x, fx=loss.evaluate(A, c, x), g=g, d=d, step=10.0)
        result = search.search(state)
        assert result.fx <= state.fx + result.step * search.params.ftol * (d @ g)


def test_search_does_not_mutate_snapshot():
    loss = QuadraticLoss()
    A, c = np.diag([1.0, 4.0]), np.array([1.0, -1.0])
    x = np.array([3.0, 3.0])
    state = _state(loss, A, c, x.copy())
    g_before = state.g.copy()
    BracketingLineSearch(A, c, loss).search(state)
    assert np.array_equal(state.x, x)
    assert np.array_equal(state.g, g_before)


@pytest.mark.parametrize("policy", ["backtracking", "bracketing"])
def test_ascent_direction_rejected_without_evaluating_loss(policy):
    loss = QuadraticLoss()
    A, c = np.eye(2), np.zeros(2)
    x = np.array([1.0, 2.0])
    g = loss.gradient(A, c, x)
    state = LineSearchState(x=x, fx=2.5, g=g, d=g.copy(), step=1.0)
    search = create_line_search(policy, A, c, loss)
    with pytest.raises(NonDescentDirection) as excinfo:
        search.search(state)
    assert excinfo.value.directional_derivative > 0
    assert loss.n_evaluate == 0


@pytest.mark.parametrize("policy", ["backtracking", "bracketing"])
@pytest.mark.parametrize("bad", [np.nan, -np.inf])
def test_non_finite_direction_rejected_without_evaluating_loss(policy, bad):
    loss = QuadraticLoss()
    A, c = np.eye(2), np.zeros(2)
    x = np.array([1.0, 2.0])
    state = LineSearchState(
        x=x, fx=2.5, g=loss.gradient(A, c, x), d=np.array([bad, 0.0]), step=1.0
    )
    search = create_line_search(policy, A, c, loss)
    with pytest.raises(NonDescentDirection):
        search.search(state)
    assert loss.n_evaluate == 0


def test_non_positive_step_is_invalid():
    loss = QuadraticLoss()
    A, c = np.eye(1), np.zeros(1)
    state = _state(loss, A, c, np.array([1.0]), step=0.0)
    with pytest.raises(InvalidConfiguration):
        BacktrackingLineSearch(A, c, loss).search(state)


def test_step_below_min_step_raises():
    loss = QuadraticLoss()
    A, c = np.array([[2.0]]), np.zeros(1)
    state = _state(loss, A, c, np.array([1.0]), step=100.0)
    params = LineSearchParams(min_step=10.0)
    with pytest.raises(StepOutOfBounds) as excinfo:
        BacktrackingLineSearch(A, c, loss, params).search(state)
    assert excinfo.value.step == pytest.approx(6.25)
    assert excinfo.value.bound == 10.0


def test_trial_budget_exhausted():
    loss = QuadraticLoss()
    A, c = np.array([[2.0]]), np.zeros(1)
    state = _state(loss, A, c, np.array([1.0]), step=100.0)
    params = LineSearchParams(max_linesearch=2)
    with pytest.raises(LineSearchExhausted) as excinfo:
        BacktrackingLineSearch(A, c, loss, params).search(state)
    assert excinfo.value.count == 2
    assert loss.n_evaluate == 1 + 2


def test_bracketing_step_above_max_step_raises():
    loss = LinearLoss()
    X, y = np.zeros((1, 1)), np.zeros(1)
    state = _state(loss, X, y, np.zeros(1), d=np.ones(1), step=1.0)
    params = LineSearchParams(max_step=10.0, condition="WOLFE")
    with pytest.raises(StepOutOfBounds) as excinfo:
        BracketingLineSearch(X, y, loss, params).search(state)
    assert excinfo.value.step > 10.0
    assert excinfo.value.bound == 10.0


def test_bracketing_armijo_condition_accepts_first_decrease():
    loss = LinearLoss()
    X, y = np.zeros((1, 1)), np.zeros(1)
    state = _state(loss, X, y, np.zeros(1), d=np.ones(1), step=1.0)
    params = LineSearchParams(condition=LineSearchCondition.ARMIJO)
    result = BracketingLineSearch(X, y, loss, params).search(state)
    assert result.step == 1.0
    assert result.n_evals == 1


def test_backtracking_ignores_curvature_condition():
    loss = LinearLoss()
    X, y = np.zeros((1, 1)), np.zeros(1)
    state = _state(loss, X, y, np.zeros(1), d=np.ones(1), step=1.0)
    params = LineSearchParams(condition=LineSearchCondition.STRONG_WOLFE)
    result = BacktrackingLineSearch(X, y, loss, params).search(state)
    assert result.step == 1.0


def test_bracketing_wolfe_grows_short_steps():
    loss = QuadraticLoss()
    A, c = np.eye(1), np.array([10.0])
    state = _state(loss, A, c, np.zeros(1), step=0.01)
    params = LineSearchParams(condition="wolfe")
    result = BracketingLineSearch(A, c, loss, params).search(state)
    dg_init = state.d @ state.g
    assert result.step == pytest.approx(0.01 * 2.1**4)
    assert result.n_evals == 5
    assert state.d @ result.g >= params.wolfe * dg_init
    assert result.fx <= state.fx + result.step * params.ftol * dg_init


def test_strong_wolfe_shrinks_overshooting_step():
    loss = QuadraticLoss()
    A, c = np.eye(1), np.array([10.0])
    state = _state(loss, A, c, np.zeros(1), step=1.95)

    wolfe = BracketingLineSearch(A, c, loss, LineSearchParams(condition="WOLFE"))
    assert wolfe.search(state).step == 1.95

    strong = BracketingLineSearch(A, c, loss, LineSearchParams(condition="STRONG_WOLFE"))
    result = strong.search(state)
    assert result.step == pytest.approx(0.975)
    assert result.n_evals == 2
    dg_init = state.d @ state.g
    assert abs(state.d @ result.g) <= -0.9 * dg_init


def test_non_finite_trial_counts_as_failure():
    class Exploding:
        def evaluate(self, X, y, w):
            return float("nan") if w[0] > 1.0 else float((w[0] - 1.0) ** 2)

        def gradient(self, X, y, w):
            return np.array([2.0 * (w[0] - 1.0)])

    loss = Exploding()
    X, y = np.zeros((1, 1)), np.zeros(1)
    state = _state(loss, X, y, np.zeros(1), step=4.0)
    result = BacktrackingLineSearch(X, y, loss).search(state)
    assert np.isfinite(result.fx)
    assert result.x[0] <= 1.0


def test_create_line_search_dispatch():
    loss = QuadraticLoss()
    A, c = np.eye(1), np.zeros(1)
    assert isinstance(create_line_search("BRACKETING", A, c, loss), BracketingLineSearch)
    assert isinstance(
        create_line_search(LineSearchPolicy.BACKTRACKING, A, c, loss),
        BacktrackingLineSearch,
    )
    with pytest.raises(InvalidConfiguration):
        create_line_search("golden-section", A, c, loss)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"ftol": 0.0},
        {"ftol": 0.6},
        {"wolfe": 1e-5},
        {"wolfe": 1.0},
        {"min_step": 0.0},
        {"min_step": 1.0, "max_step": 0.5},
        {"decrease_factor": 1.0},
        {"increase_factor": 1.0},
        {"max_linesearch": 0},
        {"condition": "GOLDSTEIN"},
    ],
)
def test_line_search_params_validation(kwargs):
    with pytest.raises(InvalidConfiguration):
        LineSearchParams(**kwargs)


def test_line_search_params_errors_are_value_errors():
    with pytest.raises(ValueError):
        LineSearchParams(decrease_factor=2.0)


def test_line_search_params_parses_condition_names():
    assert LineSearchParams(condition="ARMIJO").condition is LineSearchCondition.ARMIJO
    assert LineSearchParams().condition is LineSearchCondition.WOLFE

import numpy as np
import pytest

from exact_tsne.affinities import joint_probabilities, student_t_affinities
from exact_tsne.distances import pairwise_squared_distances
from exact_tsne.optimizer import gradient, init_embedding, momentum_schedule, optimize
from exact_tsne.perplexity import calibrate_sigmas


@pytest.fixture
def P(random_matrix):
    D = pairwise_squared_distances(random_matrix)
    return joint_probabilities(D, calibrate_sigmas(D, 5.0))


@pytest.fixture
def Y0(random_matrix):
    return init_embedding(random_matrix.shape[0], 2, np.random.default_rng(3))


def brute_force_gradient(P, Y):
    Q, _ = student_t_affinities(pairwise_squared_distances(Y))
    n, dims = Y.shape
    grad = np.zeros((n, dims))
    for i in range(n):
        for j in range(n):
            d = np.sum((Y[i] - Y[j]) ** 2)
            for k in range(dims):
                grad[i, k] += 4 * (P[i, j] - Q[i, j]) / (1 + d) * (Y[i, k] - Y[j, k])
    return grad


def test_momentum_ramp():
    assert momentum_schedule(0, 100) == pytest.approx(0.5)
    assert momentum_schedule(50, 100) == pytest.approx(0.65)
    assert momentum_schedule(99, 100) == pytest.approx(0.797)


def test_init_embedding_range():
    Y = init_embedding(50, 3, np.random.default_rng(0))
    assert Y.shape == (50, 3)
    assert np.all(Y >= -0.5)
    assert np.all(Y < 0.5)


def test_gradient_matches_pairwise_sum(P, Y0):
    Q, numerator = student_t_affinities(pairwise_squared_distances(Y0))
    np.testing.assert_allclose(gradient(P, Q, numerator, Y0), brute_force_gradient(P, Y0),
                               atol=1e-12)


def test_gradient_vanishes_when_distributions_match(Y0):
    Q, numerator = student_t_affinities(pairwise_squared_distances(Y0))
    np.testing.assert_allclose(gradient(Q.copy(), Q, numerator, Y0), 0.0, atol=1e-15)


def test_zero_iterations_returns_copy(P, Y0):
    Y, history = optimize(P, Y0, 0, 1.0)
    np.testing.assert_array_equal(Y, Y0)
    assert Y is not Y0
    assert history == []


def test_runs_exactly_n_iter_steps(P, Y0):
    calls = []
    Y, history = optimize(P, Y0, 37, 1.0, callback=lambda it, Y, kl: calls.append(it))
    assert calls == list(range(37))
    assert len(history) == 37


def test_first_steps_follow_momentum_update(P, Y0):
    lr = 2.0
    snapshots = {}
    optimize(P, Y0, 2, lr, callback=lambda it, Y, kl: snapshots.setdefault(it, Y.copy()))

    # No displacement yet, so the first step is plain gradient descent.
    Y1 = Y0 - lr * brute_force_gradient(P, Y0)
    np.testing.assert_allclose(snapshots[0], Y1, atol=1e-12)

    Y2 = Y1 - lr * brute_force_gradient(P, Y1) + momentum_schedule(1, 2) * (Y1 - Y0)
    np.testing.assert_allclose(snapshots[1], Y2, atol=1e-12)


def test_inputs_are_not_modified(P, Y0):
    P_before, Y_before = P.copy(), Y0.copy()
    optimize(P, Y0, 5, 1.0)
    np.testing.assert_array_equal(P, P_before)
    np.testing.assert_array_equal(Y0, Y_before)


def test_kl_decreases_over_run(P, Y0):
    _, history = optimize(P, Y0, 200, 10.0)
    assert history[-1] < history[0]

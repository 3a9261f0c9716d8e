import numpy as np
import pytest

from exact_tsne.distances import pairwise_squared_distances
from exact_tsne.perplexity import (SIGMA_LOWER_BOUND, binary_search_sigma, calibrate_sigmas,
                                   conditional_affinities, row_perplexity, sigma_upper_bound)


@pytest.fixture
def distances(random_matrix):
    return pairwise_squared_distances(random_matrix)


def test_uniform_row_perplexity_is_support_size():
    assert row_perplexity([0.0, 0.25, 0.25, 0.25, 0.25]) == pytest.approx(4.0, rel=1e-6)


def test_one_hot_row_perplexity_is_one():
    assert row_perplexity([0.0, 1.0, 0.0]) == pytest.approx(1.0, rel=1e-6)


def test_upper_bound_formula():
    D = np.array([[0.0, 4.0], [4.0, 0.0]])
    assert sigma_upper_bound(D) == pytest.approx(np.log(4.0 + 1e-6) + 10.0)


def test_conditional_rows_are_distributions(distances):
    sigmas = calibrate_sigmas(distances, 5.0)
    for i, sigma in enumerate(sigmas):
        row = conditional_affinities(distances[i], sigma, i)
        assert row[i] == 0.0
        assert np.all(row >= 0)
        assert row.sum() == pytest.approx(1.0)


def test_closer_points_get_more_affinity():
    d = np.array([0.0, 1.0, 4.0, 9.0])
    row = conditional_affinities(d, 1.0, 0)
    assert row[1] > row[2] > row[3]


def test_tiny_sigma_degrades_to_nearest_neighbor():
    d = np.array([0.0, 1e4, 2e4, 3e4])
    row = conditional_affinities(d, SIGMA_LOWER_BOUND, 0)
    assert np.all(np.isfinite(row))
    np.testing.assert_allclose(row, [0.0, 1.0, 0.0, 0.0])


def test_calibrated_perplexity_within_tolerance_or_capped(distances):
    upper = sigma_upper_bound(distances)
    for i in range(distances.shape[0]):
        sigma, perplexity, n_steps = binary_search_sigma(
            distances[i], i, 5.0, SIGMA_LOWER_BOUND, upper, tol=1e-6, max_iter=50)
        assert abs(perplexity - 5.0) <= 1e-6 or n_steps == 50
        assert perplexity == pytest.approx(
            row_perplexity(conditional_affinities(distances[i], sigma, i)))


def test_calibrate_sigmas_matches_single_point_search(distances):
    sigmas = calibrate_sigmas(distances, 5.0)
    upper = sigma_upper_bound(distances)
    for i in (0, 7, 19):
        sigma, _, _ = binary_search_sigma(distances[i], i, 5.0, SIGMA_LOWER_BOUND, upper)
        assert sigmas[i] == sigma


def test_higher_perplexity_needs_wider_kernels(distances):
    narrow = calibrate_sigmas(distances, 3.0)
    wide = calibrate_sigmas(distances, 10.0)
    assert np.all(narrow > 0)
    assert np.all(wide > narrow)


def test_unreachable_target_exhausts_cap_without_error():
    # Equidistant points give a uniform row (perplexity 4) for every sigma.
    D = pairwise_squared_distances(np.eye(5))
    sigma, perplexity, n_steps = binary_search_sigma(
        D[0], 0, 2.0, SIGMA_LOWER_BOUND, sigma_upper_bound(D), max_iter=50)
    assert n_steps == 50
    assert perplexity == pytest.approx(4.0, rel=1e-6)
    assert sigma == pytest.approx(SIGMA_LOWER_BOUND, rel=1e-6)


def test_early_stop_uses_fewer_steps_with_loose_tolerance(distances):
    upper = sigma_upper_bound(distances)
    _, _, strict = binary_search_sigma(distances[0], 0, 5.0, SIGMA_LOWER_BOUND, upper, tol=1e-9)
    _, _, loose = binary_search_sigma(distances[0], 0, 5.0, SIGMA_LOWER_BOUND, upper, tol=0.5)
    assert loose < strict

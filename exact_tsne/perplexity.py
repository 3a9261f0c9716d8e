"""
Per-point bandwidth calibration.

Each point i gets its own Gaussian width sigma_i, chosen by bisection so
that the conditional distribution p(j|i) has the requested perplexity:

    p(j|i) = exp(-d_ij / 2 sigma_i^2) / sum_{k != i} exp(-d_ik / 2 sigma_i^2)
    Perp(P_i) = 2^{H(P_i)},  H(P_i) = -sum_j p(j|i) log2 p(j|i)

Wider kernel -> flatter row -> higher perplexity. The search therefore
raises the lower bound when perplexity is too low and lowers the upper
bound when it is too high.
"""

import logging

import numpy as np

log = logging.getLogger(__name__)

SIGMA_LOWER_BOUND = 1e-3
DEFAULT_TOL = 1e-6
DEFAULT_MAX_ITER = 50


def row_perplexity(p):
    """2^H for a probability row, with 1e-10 inside the logarithm."""
    p = np.asarray(p, dtype=np.float64)
    entropy = -np.sum(p * np.log2(p + 1e-10))
    return float(2.0 ** entropy)


def conditional_affinities(distances_i, sigma, i):
    """
    Normalized Gaussian affinities of point i to every point.

    The exponent is shifted by the smallest off-diagonal distance, which
    cancels in the normalization but keeps the row sum >= 1 when sigma
    is tiny compared with the distances.
    """
    distances_i = np.asarray(distances_i, dtype=np.float64)
    others = np.ones(distances_i.shape[0], dtype=bool)
    others[i] = False

    shift = distances_i[others].min()
    row = np.zeros_like(distances_i)
    with np.errstate(under='ignore'):
        row[others] = np.exp(-(distances_i[others] - shift) / (2.0 * sigma * sigma))
    return row / row.sum()


def sigma_upper_bound(distances):
    """Search ceiling scaled to the largest distance in the matrix."""
    max_distance = max(float(np.max(distances)), 0.0)
    return float(np.log(max_distance + 1e-6) + 10.0)


def binary_search_sigma(distances_i, i, target_perplexity, lower, upper,
                        tol=DEFAULT_TOL, max_iter=DEFAULT_MAX_ITER):
    """
    Bisect sigma for one point.

    Returns:
        sigma: bandwidth in use when the search stopped
        perplexity: perplexity of the row at that sigma
        n_steps: bisection steps taken (== max_iter if the cap was hit)
    """
    sigma = (lower + upper) / 2.0
    perplexity = row_perplexity(conditional_affinities(distances_i, sigma, i))
    n_steps = 0

    for step in range(max_iter):
        n_steps = step + 1
        sigma = (lower + upper) / 2.0
        perplexity = row_perplexity(conditional_affinities(distances_i, sigma, i))

        if abs(perplexity - target_perplexity) <= tol:
            break

        if perplexity < target_perplexity:
            lower = sigma  # need a wider kernel
        else:
            upper = sigma

    return sigma, perplexity, n_steps


def calibrate_sigmas(distances, target_perplexity, tol=DEFAULT_TOL,
                     max_iter=DEFAULT_MAX_ITER):
    """
    Find sigma_i for every point of a pairwise distance matrix.

    Points are searched independently over [1e-3, ln(max_d + 1e-6) + 10].
    Hitting max_iter is not an error; the last sigma is kept.

    Args:
        distances: (n, n) squared distance matrix
        target_perplexity: desired 2^H of every conditional row
        tol: absolute perplexity tolerance for early stopping
        max_iter: bisection steps per point

    Returns:
        sigmas: shape (n,)
    """
    n = distances.shape[0]
    upper = sigma_upper_bound(distances)
    sigmas = np.empty(n)
    n_capped = 0

    for i in range(n):
        sigma, perplexity, n_steps = binary_search_sigma(
            distances[i], i, target_perplexity, SIGMA_LOWER_BOUND, upper,
            tol=tol, max_iter=max_iter)
        sigmas[i] = sigma
        if abs(perplexity - target_perplexity) > tol:
            n_capped += 1

    if n_capped:
        log.debug("%d of %d points did not reach perplexity %.3f within tol=%g",
                  n_capped, n, target_perplexity, tol)

    return sigmas

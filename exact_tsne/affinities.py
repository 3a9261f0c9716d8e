"""
High-D and low-D affinity matrices.

HIGH-D (fixed target):
    p_ij = (p(j|i) + p(i|j)) / 2n       Gaussian rows, calibrated sigma

LOW-D (recomputed every iteration):
    q_ij = (1 + ||y_i - y_j||^2)^(-1) / sum_{k != l} (1 + ||y_k - y_l||^2)^(-1)

Student-t (df=1) has heavier tails than the Gaussian, so moderately
distant points get pushed further apart in the embedding.
"""

import numpy as np

from .perplexity import conditional_affinities


def joint_probabilities(distances, sigmas):
    """
    Symmetric joint affinities P from calibrated bandwidths.

    Returns:
        P: (n, n), symmetric, zero diagonal, sums to 1
    """
    n = distances.shape[0]
    conditional = np.empty((n, n))
    for i in range(n):
        conditional[i] = conditional_affinities(distances[i], sigmas[i], i)

    P = (conditional + conditional.T) / (2.0 * n)
    np.fill_diagonal(P, 0.0)
    return P


def student_t_affinities(distances, out=None, numerator=None):
    """
    Low-dimensional affinities Q using the Student-t kernel.

    Args:
        distances: (n, n) squared distances between embedding points
        out: optional (n, n) buffer that receives Q
        numerator: optional (n, n) buffer that receives 1 / (1 + d)

    Returns:
        Q, numerator
    """
    if numerator is None:
        numerator = np.empty_like(distances)
    np.add(distances, 1.0, out=numerator)
    np.reciprocal(numerator, out=numerator)
    np.fill_diagonal(numerator, 0.0)

    if out is None:
        out = np.empty_like(distances)
    np.divide(numerator, numerator.sum(), out=out)
    return out, numerator


def kl_divergence(P, Q):
    """KL(P || Q) = sum p_ij log(p_ij / q_ij), over entries with p_ij > 0."""
    mask = P > 0
    return float(np.sum(P[mask] * np.log(P[mask] / np.maximum(Q[mask], 1e-12))))

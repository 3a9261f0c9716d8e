"""
Momentum gradient descent on KL(P || Q).

GRADIENT:
    dKL/dy_i = 4 sum_j (p_ij - q_ij)(y_i - y_j)(1 + ||y_i - y_j||^2)^(-1)

    p_ij > q_ij: attractive, pull y_i toward y_j
    p_ij < q_ij: repulsive, push y_i away from y_j

UPDATE:
    Y_new = Y - lr * grad + momentum * (Y - Y_prev)

Momentum ramps linearly from 0.5 to 0.8. The loop always runs the full
iteration count; there is no convergence check.
"""

import logging

import numpy as np

from .affinities import kl_divergence, student_t_affinities
from .distances import pairwise_squared_distances

log = logging.getLogger(__name__)

MOMENTUM_START = 0.5
MOMENTUM_END = 0.8
LOG_EVERY = 25


class _Workspace:
    """Scratch arrays owned by one optimize() call, reused every iteration."""

    def __init__(self, n, n_dims):
        self.numerator = np.empty((n, n))
        self.Q = np.empty((n, n))
        self.weights = np.empty((n, n))
        self.grad = np.empty((n, n_dims))


def momentum_schedule(iteration, n_iter, start=MOMENTUM_START, end=MOMENTUM_END):
    """Linear ramp from start (iteration 0) toward end (iteration n_iter)."""
    return start + (end - start) * iteration / n_iter


def init_embedding(n, n_dims, rng):
    """Independent uniform coordinates in [-0.5, 0.5)."""
    return rng.random((n, n_dims)) - 0.5


def gradient(P, Q, numerator, Y, out=None, weights=None):
    """
    Gradient of KL(P || Q) with respect to every embedding coordinate.

    With W = (P - Q) * numerator:
        grad_i = 4 (sum_j W_ij) y_i - 4 sum_j W_ij y_j
    The diagonal of W is 0, so self terms drop out.
    """
    if weights is None:
        weights = np.empty_like(P)
    np.subtract(P, Q, out=weights)
    weights *= numerator

    if out is None:
        out = np.empty_like(Y)
    np.matmul(weights, Y, out=out)
    np.subtract(weights.sum(axis=1)[:, np.newaxis] * Y, out, out=out)
    out *= 4.0
    return out


def optimize(P, Y, n_iter, learning_rate, callback=None, verbose=False):
    """
    Run exactly n_iter momentum steps starting from Y.

    Args:
        P: (n, n) joint affinities, never modified
        Y: (n, n_dims) initial embedding, copied
        n_iter: number of steps
        learning_rate: gradient step scale
        callback: optional f(iteration, Y, kl), called after each step
        verbose: report progress at INFO instead of DEBUG

    Returns:
        Y: final embedding
        kl_history: KL(P || Q) measured at each step, before the update
    """
    level = logging.INFO if verbose else logging.DEBUG
    Y = np.array(Y, dtype=np.float64)
    Y_prev = Y.copy()
    ws = _Workspace(*Y.shape)
    kl_history = []

    for iteration in range(n_iter):
        momentum = momentum_schedule(iteration, n_iter)

        distances = pairwise_squared_distances(Y)
        Q, numerator = student_t_affinities(distances, out=ws.Q, numerator=ws.numerator)
        grad = gradient(P, Q, numerator, Y, out=ws.grad, weights=ws.weights)

        Y_new = Y - learning_rate * grad + momentum * (Y - Y_prev)
        Y_prev, Y = Y, Y_new

        kl = kl_divergence(P, Q)
        kl_history.append(kl)

        if (iteration + 1) % LOG_EVERY == 0 or iteration + 1 == n_iter:
            log.log(level, "Iteration %d/%d, KL=%.4f, momentum=%.3f",
                    iteration + 1, n_iter, kl, momentum)

        if callback is not None:
            callback(iteration, Y, kl)

    return Y, kl_history

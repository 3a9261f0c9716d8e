"""Squared Euclidean distances, pairwise and between two vectors."""

import numpy as np
from scipy.spatial.distance import pdist, squareform


def squared_euclidean_distance(a, b):
    """Sum of squared per-dimension differences between two vectors."""
    diff = np.asarray(a, dtype=np.float64) - np.asarray(b, dtype=np.float64)
    return float(np.dot(diff, diff))


def pairwise_squared_distances(vectors):
    """
    Compute pairwise squared Euclidean distances.

    Only the upper triangle is evaluated (condensed form), then mirrored
    into a symmetric (n, n) matrix with a zero diagonal. Works for any
    number of columns, so the same routine serves the input space and
    the low-dimensional embedding.
    """
    vectors = np.asarray(vectors, dtype=np.float64)
    if vectors.shape[0] < 2 or vectors.shape[1] == 0:
        return np.zeros((vectors.shape[0], vectors.shape[0]))
    return squareform(pdist(vectors, metric='sqeuclidean'))

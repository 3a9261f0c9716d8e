"""
Synthetic inputs for experiments and tests.

make_duplicate_pairs and make_ordered_axis reproduce the two layouts the
embedding checks care about (exact duplicates, items ordered along one
semantic axis) without calling an external embedding service.
"""

import numpy as np


def make_high_dim_clusters(n_samples=300, n_features=50, n_clusters=5, random_state=42):
    """High-dimensional clusters, each informative in 3 dims."""
    rng = np.random.default_rng(random_state)
    n_per = n_samples // n_clusters
    X, labels = [], []
    for c in range(n_clusters):
        center = np.zeros(n_features)
        center[c * 3:(c + 1) * 3] = 5.0
        X.append(rng.standard_normal((n_per, n_features)) * 0.8 + center)
        labels.append(np.full(n_per, c))
    return np.vstack(X), np.concatenate(labels)


def make_swiss_roll(n_samples=500, random_state=42):
    """Swiss roll in 3D, colored by position along the roll."""
    rng = np.random.default_rng(random_state)
    t = 1.5 * np.pi * (1 + 2 * rng.random(n_samples))
    x = t * np.cos(t)
    y = 30 * rng.random(n_samples)
    z = t * np.sin(t)
    return np.column_stack([x, y, z]), t


def make_two_moons_hd(n_samples=300, n_features=20, noise=0.1, random_state=42):
    """Two moons embedded in high dimensions by a random linear map."""
    rng = np.random.default_rng(random_state)
    n = n_samples // 2
    theta = np.linspace(0, np.pi, n)
    X_2d = np.vstack([
        np.column_stack([np.cos(theta), np.sin(theta)]),
        np.column_stack([1 - np.cos(theta), -np.sin(theta) + 0.5])
    ]) + rng.standard_normal((2 * n, 2)) * noise

    W = rng.standard_normal((2, n_features))
    X = X_2d @ W + rng.standard_normal((2 * n, n_features)) * 0.1
    labels = np.array([0] * n + [1] * n)
    return X, labels


def make_duplicate_pairs(n_features=16, scale=1.0, noise=0.0, random_state=0):
    """
    Six vectors laid out as A, A, B, C, C, D.

    The four distinct items sit on orthogonal axes, so every distinct
    pair is equally far apart; rows 0/1 and 3/4 are exact duplicates
    unless noise > 0.
    """
    if n_features < 4:
        raise ValueError(f"Need at least 4 features for 4 distinct items, got {n_features}")
    rng = np.random.default_rng(random_state)
    labels = ['A', 'A', 'B', 'C', 'C', 'D']
    axis = {'A': 0, 'B': 1, 'C': 2, 'D': 3}

    X = np.zeros((len(labels), n_features))
    for row, label in enumerate(labels):
        X[row, axis[label]] = scale
    X += rng.standard_normal(X.shape) * noise
    return X, labels


def make_ordered_axis(n_features=8, gap=8.0, step=0.5, noise=0.01, random_state=0):
    """
    A base item plus five items at increasing distance along axis 0.

    Positions: 0, step, 2*step, gap, gap + step, gap + 2*step. The first
    three form the "near" group, the last three the "far" group.
    """
    rng = np.random.default_rng(random_state)
    labels = ['base', 'very_near', 'near', 'neutral', 'far', 'very_far']
    positions = np.array([0.0, step, 2 * step, gap, gap + step, gap + 2 * step])

    X = rng.standard_normal((len(labels), n_features)) * noise
    X[:, 0] += positions
    return X, labels

import numpy as np
import pytest

from exact_tsne.datasets import make_high_dim_clusters


@pytest.fixture
def clusters():
    return make_high_dim_clusters(n_samples=40, n_features=10, n_clusters=2, random_state=0)


@pytest.fixture
def random_matrix():
    return np.random.default_rng(7).standard_normal((20, 5))

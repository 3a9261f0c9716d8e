"""Exact t-SNE: project high-dimensional vectors while keeping neighborhoods."""

from .distances import squared_euclidean_distance
from .tsne import TSNE
from .validation import DataValidationError

__version__ = "1.0.0"

__all__ = ['TSNE', 'DataValidationError', 'squared_euclidean_distance']

"""
Ablations and figures for exact t-SNE.

    python -m exact_tsne.demo --out-dir figures

Prints how perplexity, learning rate, iteration count and seed change
the final KL divergence, then saves three figures.
"""

import argparse
import logging
import os

import matplotlib
matplotlib.use('Agg')  # Non-interactive backend for saving figures
import matplotlib.pyplot as plt
import numpy as np

from .affinities import joint_probabilities
from .datasets import make_high_dim_clusters, make_swiss_roll, make_two_moons_hd
from .distances import pairwise_squared_distances
from .optimizer import init_embedding, optimize
from .perplexity import calibrate_sigmas
from .tsne import TSNE
from .validation import validate_input


# ============================================================
# ABLATION EXPERIMENTS
# ============================================================

def ablation_experiments(n_samples=120, n_iter=200):
    """
    ABLATION: What happens when you change each knob?
    Returns {experiment: [(value, final_kl), ...]}.
    """
    results = {}
    X, labels = make_high_dim_clusters(n_samples, n_features=20, n_clusters=4)

    print("\n" + "=" * 60)
    print("ABLATION EXPERIMENTS")
    print("=" * 60)

    # -------- Experiment 1: Perplexity --------
    print("\n1. EFFECT OF PERPLEXITY")
    print("-" * 40)
    results['perplexity'] = []
    for perp in [5, 15, 30]:
        tsne = TSNE(perplexity=perp, n_iter=n_iter, learning_rate=10.0, random_state=42)
        tsne.transform(X)
        results['perplexity'].append((perp, tsne.kl_divergence_))
        print(f"   perplexity={perp:<4} final_KL={tsne.kl_divergence_:.4f}")
    print("→ Low perplexity: tight local clusters, may fragment")
    print("→ High perplexity: broader neighborhoods")

    # -------- Experiment 2: Learning rate --------
    print("\n2. EFFECT OF LEARNING RATE")
    print("-" * 40)
    results['learning_rate'] = []
    for lr in [1.0, 10.0, 50.0]:
        tsne = TSNE(perplexity=15, n_iter=n_iter, learning_rate=lr, random_state=42)
        Y = tsne.transform(X)
        results['learning_rate'].append((lr, tsne.kl_divergence_))
        print(f"   lr={lr:<6} KL={tsne.kl_divergence_:.4f}  spread={Y.std():.2f}")
    print("→ Too small: clusters barely move away from the random start")

    # -------- Experiment 3: Iterations --------
    print("\n3. EFFECT OF ITERATION COUNT")
    print("-" * 40)
    results['n_iter'] = []
    for steps in [25, 100, n_iter]:
        tsne = TSNE(perplexity=15, n_iter=steps, learning_rate=10.0, random_state=42)
        tsne.transform(X)
        results['n_iter'].append((steps, tsne.kl_divergence_))
        print(f"   n_iter={steps:<5} KL={tsne.kl_divergence_:.4f}")
    print("→ Every run performs exactly n_iter steps; no early stop")

    # -------- Experiment 4: Seed --------
    print("\n4. STOCHASTICITY: different seeds, same P")
    print("-" * 40)
    results['seed'] = []
    for seed in [0, 1, 2]:
        tsne = TSNE(perplexity=15, n_iter=n_iter, learning_rate=10.0, random_state=seed)
        Y = tsne.transform(X)
        results['seed'].append((seed, tsne.kl_divergence_))
        print(f"   seed={seed}: Y_mean=({Y[:, 0].mean():.2f}, {Y[:, 1].mean():.2f})  "
              f"KL={tsne.kl_divergence_:.4f}")
    print("→ Cluster POSITIONS change between runs, neighborhoods do not")

    return results


# ============================================================
# VISUALIZATIONS
# ============================================================

def visualize_tsne_perplexity(X=None, labels=None, perplexities=(5, 15, 30), n_iter=200):
    """Effect of perplexity on the embedding."""
    if X is None:
        X, labels = make_high_dim_clusters(120, n_features=20, n_clusters=4)

    fig, axes = plt.subplots(1, len(perplexities), figsize=(4 * len(perplexities), 4))
    axes = np.atleast_1d(axes)

    for ax, perp in zip(axes, perplexities):
        tsne = TSNE(perplexity=perp, n_iter=n_iter, learning_rate=10.0, random_state=42)
        Y = tsne.transform(X)

        ax.scatter(Y[:, 0], Y[:, 1], c=labels, cmap='tab10', s=20, alpha=0.7)
        ax.set_title(f'Perplexity = {perp}\nKL = {tsne.kl_divergence_:.3f}', fontsize=11)
        ax.set_aspect('equal')
        ax.set_xticks([])
        ax.set_yticks([])

    plt.suptitle('t-SNE: Effect of Perplexity\n'
                 'Low = local structure, High = broader neighborhoods',
                 fontsize=12, fontweight='bold')
    plt.tight_layout()
    return fig


def visualize_tsne_evolution(X=None, labels=None, n_iter=200,
                             snapshots=(0, 10, 25, 50, 100, 199)):
    """From noise to clusters: embedding snapshots during optimization."""
    if X is None:
        X, labels = make_high_dim_clusters(120, n_features=20, n_clusters=4)

    history = {}

    def record(iteration, Y, kl):
        if iteration in snapshots:
            history[iteration] = Y.copy()

    X = validate_input(X)
    distances = pairwise_squared_distances(X)
    P = joint_probabilities(distances, calibrate_sigmas(distances, 15.0))
    Y0 = init_embedding(X.shape[0], 2, np.random.default_rng(42))
    optimize(P, Y0, n_iter, 10.0, callback=record)

    shown = [it for it in snapshots if it in history]
    fig, axes = plt.subplots(1, len(shown), figsize=(3.5 * len(shown), 3.5))
    axes = np.atleast_1d(axes)

    for ax, iteration in zip(axes, shown):
        Y = history[iteration]
        ax.scatter(Y[:, 0], Y[:, 1], c=labels, cmap='tab10', s=15, alpha=0.7)
        ax.set_title(f'Iter {iteration + 1}', fontsize=10)
        ax.set_xticks([])
        ax.set_yticks([])

    plt.suptitle('t-SNE EVOLUTION: Noise → Clusters', fontsize=12, fontweight='bold')
    plt.tight_layout()
    return fig


def visualize_tsne_datasets(n_samples=120, n_iter=200):
    """Embeddings of clusters, moons and a swiss roll, colored by ground truth."""
    datasets = {
        'High-D Clusters': make_high_dim_clusters(n_samples, n_features=20, n_clusters=4),
        'Moons (20D)': make_two_moons_hd(n_samples, n_features=20),
        'Swiss Roll (3D)': make_swiss_roll(n_samples),
    }

    fig, axes = plt.subplots(1, len(datasets), figsize=(4 * len(datasets), 4))

    for ax, (name, (X, y)) in zip(axes, datasets.items()):
        tsne = TSNE(perplexity=15, n_iter=n_iter, learning_rate=10.0, random_state=42)
        Y = tsne.transform(X)

        ax.scatter(Y[:, 0], Y[:, 1], c=y, cmap='Spectral', s=15, alpha=0.7)
        ax.set_title(f't-SNE: {name}', fontsize=10)
        ax.set_aspect('equal')
        ax.set_xticks([])
        ax.set_yticks([])

    plt.suptitle('t-SNE keeps neighborhoods on nonlinear data',
                 fontsize=12, fontweight='bold')
    plt.tight_layout()
    return fig


def visualize_kl_curve(X=None, learning_rates=(1.0, 10.0, 50.0), n_iter=200):
    """KL(P || Q) per iteration for several learning rates."""
    if X is None:
        X, _ = make_high_dim_clusters(120, n_features=20, n_clusters=4)

    fig, ax = plt.subplots(figsize=(7, 4))
    for lr in learning_rates:
        tsne = TSNE(perplexity=15, n_iter=n_iter, learning_rate=lr, random_state=42)
        tsne.transform(X)
        ax.plot(tsne.kl_history_, label=f'lr={lr}')

    ax.set_xlabel('Iteration')
    ax.set_ylabel('KL(P || Q)')
    ax.set_title('KL divergence during optimization', fontsize=11)
    ax.legend()
    ax.grid(True, alpha=0.2)
    plt.tight_layout()
    return fig


# ============================================================
# MAIN
# ============================================================

def parse_args(argv=None):
    parser = argparse.ArgumentParser(description=__doc__.strip().splitlines()[0])
    parser.add_argument('--out-dir', default='.', help='directory for the saved figures')
    parser.add_argument('--n-iter', type=int, default=200)
    parser.add_argument('--skip-ablations', action='store_true')
    parser.add_argument('-v', '--verbose', action='store_true')
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING,
                        format='%(asctime)s %(name)s %(levelname)s %(message)s')

    if not args.skip_ablations:
        ablation_experiments(n_iter=args.n_iter)

    print("\n" + "=" * 60)
    print("GENERATING VISUALIZATIONS")
    print("=" * 60)

    os.makedirs(args.out_dir, exist_ok=True)
    figures = {
        'tsne_perplexity.png': visualize_tsne_perplexity(n_iter=args.n_iter),
        'tsne_evolution.png': visualize_tsne_evolution(
            n_iter=args.n_iter, snapshots=(0, 10, 25, 50, 100, args.n_iter - 1)),
        'tsne_kl_curve.png': visualize_kl_curve(n_iter=args.n_iter),
        'tsne_datasets.png': visualize_tsne_datasets(n_iter=args.n_iter),
    }
    for name, fig in figures.items():
        save_path = os.path.join(args.out_dir, name)
        fig.savefig(save_path, dpi=150, bbox_inches='tight')
        print(f"Saved: {save_path}")
        plt.close(fig)


if __name__ == '__main__':
    main()

"""Property-based tests using Hypothesis for loader invariants.

These tests verify:
1. Every loaded (individual, site) triple is a normalized distribution
2. Binary write + load of normalized log-probabilities is lossless
3. Distances are positive within a chromosome and infinite at its start
"""

from __future__ import annotations

import tempfile
from pathlib import Path

import numpy as np
from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from ngsread.core import normalize_log_triple
from ngsread.io import (
    ProbabilityScale,
    load_distances,
    load_genotypes,
    write_genotype_binary,
)

# -----------------------------------------------------------------------------
# Custom Strategies for Genetic Data
# -----------------------------------------------------------------------------


@st.composite
def likelihood_matrix(draw, max_individuals=8, max_sites=12):
    """Generate positive genotype likelihoods, shape (n_ind, n_sites, 3)."""
    n_individuals = draw(st.integers(min_value=1, max_value=max_individuals))
    n_sites = draw(st.integers(min_value=1, max_value=max_sites))
    seed = draw(st.integers(min_value=0, max_value=2**32 - 1))

    rng = np.random.default_rng(seed)
    # Likelihoods between 1e-30 and 1
    return 10.0 ** rng.uniform(-30, 0, size=(n_individuals, n_sites, 3))


@st.composite
def position_rows(draw, max_sites=30):
    """Generate (chromosome, position) rows sorted within each chromosome."""
    n_sites = draw(st.integers(min_value=1, max_value=max_sites))
    gaps = draw(
        st.lists(
            st.integers(min_value=1, max_value=10_000),
            min_size=n_sites,
            max_size=n_sites,
        )
    )
    breaks = draw(st.lists(st.booleans(), min_size=n_sites, max_size=n_sites))

    rows = []
    chrom = 1
    pos = 0
    for gap, new_chrom in zip(gaps, breaks):
        if new_chrom and rows:
            chrom += 1
            pos = 0
        pos += gap
        rows.append((f"chr{chrom}", pos))
    return rows


class TestGenotypeProperties:
    """Property tests for load_genotypes."""

    @given(likelihoods=likelihood_matrix())
    @settings(
        max_examples=30, deadline=None, suppress_health_check=[HealthCheck.too_slow]
    )
    def test_text_triples_sum_to_one(self, likelihoods):
        n_ind, n_sites, _ = likelihoods.shape
        rows = likelihoods.transpose(1, 0, 2).reshape(n_sites, n_ind * 3)

        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "gl.geno"
            path.write_text(
                "".join(" ".join(f"{v:.17g}" for v in row) + "\n" for row in rows)
            )
            geno = load_genotypes(path, n_ind, n_sites)

        probs = geno.probabilities()[:, 1:, :]
        assert not np.isnan(geno.log_probs).any()
        np.testing.assert_allclose(probs.sum(axis=2), 1.0, rtol=1e-10)

    @given(likelihoods=likelihood_matrix())
    @settings(
        max_examples=30, deadline=None, suppress_health_check=[HealthCheck.too_slow]
    )
    def test_binary_roundtrip_is_lossless(self, likelihoods):
        n_ind, n_sites, _ = likelihoods.shape
        normalized = normalize_log_triple(np.log(likelihoods))

        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "geno.bin"
            write_genotype_binary(path, normalized)
            geno = load_genotypes(
                path, n_ind, n_sites, binary=True, scale=ProbabilityScale.LOG
            )

        np.testing.assert_allclose(geno.log_probs[:, 1:, :], normalized, atol=1e-12)


class TestDistanceProperties:
    """Property tests for load_distances."""

    @given(rows=position_rows())
    @settings(max_examples=50, deadline=None)
    def test_distances_match_position_gaps(self, rows):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "sites.pos"
            path.write_text("".join(f"{chrom}\t{pos}\n" for chrom, pos in rows))
            dist = load_distances(path, len(rows))

        for s, (chrom, pos) in enumerate(rows, start=1):
            if s == 1 or rows[s - 2][0] != chrom:
                assert dist.distances[s] == np.inf
            else:
                assert dist.distances[s] == pos - rows[s - 2][1]
                assert dist.distances[s] >= 1


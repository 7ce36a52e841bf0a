"""Tests for memory estimation module."""

from unittest.mock import MagicMock, patch

import psutil
import pytest

from ngsread.core import (
    MemorySnapshot,
    check_memory_available,
    estimate_genotype_memory,
    get_memory_snapshot,
    log_memory_snapshot,
)


@pytest.mark.tier0
class TestGenotypeMemoryEstimation:
    """Tests for estimate_genotype_memory."""

    def test_includes_sentinel_site(self):
        """One individual, one site: 2 sites x 3 genotypes x 8 bytes."""
        assert estimate_genotype_memory(1, 1) == pytest.approx(48 / 1e9)

    def test_scales_linearly(self):
        small = estimate_genotype_memory(100, 10_000)
        large = estimate_genotype_memory(200, 10_000)

        assert large == pytest.approx(2 * small)

    def test_biobank_scale(self):
        """1k individuals x 1M sites is ~24GB."""
        assert 23.9 < estimate_genotype_memory(1_000, 1_000_000) < 24.1


@pytest.mark.tier0
class TestCheckMemoryAvailable:
    """Tests for check_memory_available."""

    def test_small_requirement_passes(self):
        assert check_memory_available(0.001)

    def test_insufficient_raises(self):
        with patch("ngsread.core.memory.psutil.virtual_memory") as mock_vm:
            mock_vm.return_value = MagicMock(available=2e9)
            with pytest.raises(MemoryError, match="Insufficient memory for loading"):
                check_memory_available(10.0, operation="loading")

    def test_margin_is_applied(self):
        """2GB needed with 10% margin does not fit in 2.1GB."""
        with patch("ngsread.core.memory.psutil.virtual_memory") as mock_vm:
            mock_vm.return_value = MagicMock(available=2.1e9)
            with pytest.raises(MemoryError):
                check_memory_available(2.0)


@pytest.mark.tier0
class TestMemorySnapshot:
    """Tests for memory snapshots."""

    def test_snapshot_values(self):
        snap = get_memory_snapshot()

        assert isinstance(snap, MemorySnapshot)
        assert snap.rss_gb > 0
        assert snap.total_gb == pytest.approx(psutil.virtual_memory().total / 1e9)

    def test_log_snapshot_returns_snapshot(self, log_messages):
        snap = log_memory_snapshot("after_load", level="INFO")

        assert isinstance(snap, MemorySnapshot)
        assert any("[after_load] Memory:" in m for m in log_messages)

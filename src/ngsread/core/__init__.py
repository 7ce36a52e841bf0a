"""Core numerical and runtime modules for ngsread.

This package contains:
- config: Output configuration dataclass
- memory: Pre-allocation memory checks
- normalize: Log-space conversion and genotype normalization
- progress: Progress display for site-by-site loading
"""

from ngsread.core.config import OutputConfig
from ngsread.core.memory import (
    MemorySnapshot,
    check_memory_available,
    estimate_genotype_memory,
    get_memory_snapshot,
    log_memory_snapshot,
)
from ngsread.core.normalize import has_nan, normalize_log_triple, to_log_scale

__all__ = [
    "OutputConfig",
    "MemorySnapshot",
    "check_memory_available",
    "estimate_genotype_memory",
    "get_memory_snapshot",
    "log_memory_snapshot",
    "has_nan",
    "normalize_log_triple",
    "to_log_scale",
]

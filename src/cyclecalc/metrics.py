# src/cyclecalc/metrics.py
"""Per-block statistics used by the transformers. Each takes one window of a series."""
import numpy as np


def midrange(block: np.ndarray) -> float:
    """Halfway between the block's peak and trough: (max + min) / 2."""
    return (float(np.max(block)) + float(np.min(block))) / 2.0

def peak(block: np.ndarray) -> float:
    """Maximum active dose in the block (mg)."""
    return float(np.max(block))

def trough(block: np.ndarray) -> float:
    """Minimum active dose in the block (mg)."""
    return float(np.min(block))

def mean(block: np.ndarray) -> float:
    """Average active dose over the block (mg)."""
    return float(np.mean(block))

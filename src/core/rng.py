# core/rng.py
import numpy as np

def make_rng(seed: int, frame_index: int, task_index: int) -> np.random.Generator:
    """
    Independent generator for one parallel task of one frame.

    The stream is a pure function of (seed, frame_index, task_index), so runs
    are reproducible and no two tasks ever share generator state.
    """
    if seed < 0 or frame_index < 0 or task_index < 0:
        raise ValueError("seed, frame_index and task_index must be non-negative")
    return np.random.default_rng([seed, frame_index, task_index])

import os
import sys

# Device tests run on numba's CUDA simulator; must be set before numba.cuda is imported.
os.environ.setdefault("NUMBA_ENABLE_CUDASIM", "1")

# Add src directory to path to allow imports without installing
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'src')))

import numpy as np
import pytest

from core.vector import Vector3
from scenes import diffuse_sky_scene, emissive_fill_scene, fill_camera, mixed_scene

@pytest.fixture
def rng():
    return np.random.default_rng(1234)

@pytest.fixture
def emissive_scene():
    return emissive_fill_scene(Vector3(0.8, 0.6, 0.4))

@pytest.fixture
def sky_scene():
    # Albedo 0.5 under a unit sky: every pixel is exactly 0.5
    return diffuse_sky_scene(Vector3(0.5, 0.5, 0.5), (1.0, 1.0, 1.0))

@pytest.fixture
def busy_scene():
    return mixed_scene()

@pytest.fixture
def small_camera():
    return fill_camera(4, 4)

class ScriptedControls:
    """Controls stand-in returning queued (move, dyaw, dpitch) tuples, then nothing."""

    def __init__(self, script=()):
        self.script = list(script)
        self.polls = 0

    def poll(self):
        self.polls += 1
        if self.script:
            return self.script.pop(0)
        return Vector3(0, 0, 0), 0.0, 0.0

@pytest.fixture
def scripted_controls():
    return ScriptedControls

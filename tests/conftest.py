import numpy as np
import pytest

from helpers import write_ppm16


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def random_pair(rng):
    def make(w, h, low=0, high=65536):
        a = rng.integers(low, high, size=(h, w, 3), dtype=np.uint16)
        b = rng.integers(low, high, size=(h, w, 3), dtype=np.uint16)
        return a, b
    return make


@pytest.fixture
def ppm_pair(tmp_path, random_pair):
    def make(w=8, h=6, stem="frame00001", folder=None):
        folder = folder or tmp_path
        a, b = random_pair(w, h, 8000, 50000)
        path_a = write_ppm16(folder / f"{stem}A.ppm", a)
        path_b = write_ppm16(folder / f"{stem}B.ppm", b)
        return path_a, path_b, a, b
    return make

import numpy as np
import pytest

from sgmlib import Parameters


def shifted_pair(height, width, shift=2):
  '''
  Period-3 texture where right(x) = left(x + shift): neighbours one or two columns apart differ by >= 100
  '''
  y, x = np.mgrid[0:height, 0:width]
  left = (100 * ((x + y) % 3)).astype(np.uint8)
  right = (100 * ((x + shift + y) % 3)).astype(np.uint8)
  return left, right


@pytest.fixture
def random_pair():
  rng = np.random.default_rng(1234)
  left = rng.integers(0, 256, size=(9, 13)).astype(np.uint8)
  right = np.roll(left, -3, axis=1)
  right[:, -3:] = rng.integers(0, 256, size=(9, 3))
  return left, right


@pytest.fixture
def small_parameters():
  def _make(left, **kwargs):
    kwargs.setdefault('max_disparity', 6)
    return Parameters(width=left.shape[1], height=left.shape[0], **kwargs)
  return _make

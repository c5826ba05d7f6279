import numpy as np

from .sgm_errors import SGMConfigError


class Direction:
  def __init__(self, direction=(0, 0), name='invalid'):
    """
    represent a cardinal direction in image coordinates (top left = (0, 0) and bottom right = (1, 1)).
    the direction is the step taken along the path, so the predecessor of pixel p is p - direction.
    :param direction: (x, y) for cardinal direction.
    :param name: common name of said direction.
    """
    self.direction = direction
    self.name = name

  def __repr__(self):
    return 'Direction({}, {})'.format(self.name, self.direction)

# 8 defined directions for sgm
N = Direction(direction=(0, -1), name='north')
NE = Direction(direction=(1, -1), name='north-east')
E = Direction(direction=(1, 0), name='east')
SE = Direction(direction=(1, 1), name='south-east')
S = Direction(direction=(0, 1), name='south')
SW = Direction(direction=(-1, 1), name='south-west')
W = Direction(direction=(-1, 0), name='west')
NW = Direction(direction=(-1, -1), name='north-west')

# Summation order used by every disparity selector
ORDER = [E, W, S, N, SE, SW, NW, NE]
DIRECTIONS = {d.name: d for d in ORDER}

# Directions whose predecessor has always been seen by a single raster pass
STREAM_DIRECTIONS = [E, S, SE, SW]

PATH_PRESETS = {
  1: (E,),
  2: (E, S),
  4: (E, S, SE, SW),
}

# Left/right + top/bottom topology of the original floating-point kernel (batch only)
BIDIRECTIONAL_PATHS = ('east', 'west', 'south', 'north')


def is_streamable(direction):
  dx, dy = direction.direction
  return dy > 0 or (dy == 0 and dx > 0)


class Paths:
  def __init__(self, paths=4):
    """
    represent the set of active aggregation directions.
    :param paths: 1, 2 or 4 for the streaming presets, or a sequence of direction names.
    """
    if isinstance(paths, bool):
      raise SGMConfigError('paths must be 1, 2, 4 or a list of direction names, got {!r}'.format(paths))
    if isinstance(paths, (int, np.integer)):
      try:
        selected = PATH_PRESETS[int(paths)]
      except KeyError:
        raise SGMConfigError('path count must be one of {}, got {}'.format(sorted(PATH_PRESETS), paths))
    elif isinstance(paths, (str, list, tuple)):
      names = [paths] if isinstance(paths, str) else list(paths)
      if not names:
        raise SGMConfigError('at least one aggregation direction is required')
      try:
        selected = [DIRECTIONS[str(name).strip().lower()] for name in names]
      except KeyError as e:
        raise SGMConfigError('unknown direction {} (expected one of {})'.format(e, ', '.join(DIRECTIONS)))
      if len(set(d.name for d in selected)) != len(selected):
        raise SGMConfigError('duplicate direction in {}'.format(names))
    else:
      raise SGMConfigError('paths must be 1, 2, 4 or a list of direction names, got {!r}'.format(paths))

    self.paths = [d for d in ORDER if d in selected]
    self.size = len(self.paths)
    self.names = [d.name for d in self.paths]

  def is_streamable(self):
    return all(is_streamable(d) for d in self.paths)

  def __contains__(self, direction):
    return any(d.direction == direction.direction for d in self.paths)

  def __iter__(self):
    return iter(self.paths)

  def __len__(self):
    return self.size

SGMPaths = Paths


def in_frame(x, y, height, width):
  return 0 <= x < width and 0 <= y < height


def get_path_starts(direction, height, width):
  """
  every pixel whose predecessor along the direction lies outside the frame, in raster order.
  each one begins exactly one path; diagonal paths entering from a side edge start there too.
  :param direction: aggregation direction.
  :param height: H of the cost volume.
  :param width: W of the cost volume.
  :return: list of (x, y) start pixels.
  """
  dx, dy = direction.direction
  return [(x, y) for y in range(height) for x in range(width)
          if not in_frame(x - dx, y - dy, height, width)]


def get_indices(start, direction, height, width):
  """
  return the array of indices for the path beginning at start, in traversal order.
  :param start: (x, y) first pixel of the path.
  :param direction: current aggregation direction.
  :param height: H of the cost volume.
  :param width: W of the cost volume.
  :return: arrays for the y (H dimension) and x (W dimension) indices.
  """
  x0, y0 = start
  dx, dy = direction.direction
  steps = []
  if dx > 0:
    steps.append(width - x0)
  elif dx < 0:
    steps.append(x0 + 1)
  if dy > 0:
    steps.append(height - y0)
  elif dy < 0:
    steps.append(y0 + 1)
  dim = min(steps)
  i = np.arange(dim)
  return y0 + dy * i, x0 + dx * i

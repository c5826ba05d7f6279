"""
Streaming semi-global matching.

One pixel is consumed per step in strict raster order. Every active direction keeps
only the state its recursion needs: a register set for the horizontal path, a
line buffer of frame width for the vertical and diagonal paths. No cost volume
is ever materialized.
"""
from collections import namedtuple

import numpy as np

from .sgm_aggregate import accept
from .sgm_cost import check_pair, cost_vector
from .sgm_errors import SGMConfigError
from .sgm_paths import STREAM_DIRECTIONS, Paths
from .sgm_select import select_disparity_vector
from .sgm_utils import get_print_function

PixelSample = namedtuple('PixelSample', ['x', 'y', 'left', 'right', 'valid'])
DisparityResult = namedtuple('DisparityResult', ['x', 'y', 'disparity', 'valid'])


def raster_samples(left, right):
  'Pixel samples of an image pair in row-major order'
  left = np.asarray(left)
  right = np.asarray(right)
  height, width = left.shape
  for y in range(height):
    for x in range(width):
      yield PixelSample(x, y, left[y, x], right[y, x], True)


class ScanPosition:
  def __init__(self, width, height):
    self.width = width
    self.height = height
    self.x = 0
    self.y = 0

  def advance(self):
    if self.x == self.width - 1:
      self.x = 0
      # wraps so the next frame needs no external reset
      self.y = 0 if self.y == self.height - 1 else self.y + 1
    else:
      self.x += 1

  def reset(self):
    self.x = 0
    self.y = 0

  def is_path_start(self, direction):
    dx, dy = direction.direction
    px, py = self.x - dx, self.y - dy
    return not (0 <= px < self.width and 0 <= py < self.height)

  def __repr__(self):
    return 'ScanPosition(x={}, y={})'.format(self.x, self.y)


class RegisterStore:
  'Path state of the horizontal direction: the previous column only'

  def __init__(self, disparities, dtype):
    self.costs = np.zeros(disparities, dtype=dtype)
    self.minimum = dtype.type(0)

  def read(self, position):
    return self.costs, self.minimum

  def write(self, position, costs, minimum):
    self.costs = costs
    self.minimum = minimum


class LineBufferStore:
  def __init__(self, width, disparities, dtype, offset=0):
    """
    path state of a direction whose predecessor is in the row above, one cost vector per column.
    :param width: W of the frame.
    :param disparities: D.
    :param dtype: cost dtype.
    :param offset: x step of the direction, the predecessor column is x - offset.
    """
    self.costs = np.zeros(shape=(width, disparities), dtype=dtype)
    self.minimums = np.zeros(width, dtype=dtype)
    self.offset = offset
    # column x-1 of the row above, evicted when the current row overwrote it
    self.held = None

  def read(self, position):
    if self.offset == 1:
      return self.held
    column = position.x - self.offset
    return self.costs[column], self.minimums[column]

  def write(self, position, costs, minimum):
    x = position.x
    if self.offset == 1:
      self.held = (self.costs[x].copy(), self.minimums[x])
    self.costs[x] = costs
    self.minimums[x] = minimum


class PathAggregator:
  def __init__(self, direction, parameters):
    """
    path aggregation engine for one direction; owns its path state exclusively.
    :param direction: one of the streamable directions.
    :param parameters: structure containing parameters of the algorithm.
    """
    dx, dy = direction.direction
    if dy < 0 or (dy == 0 and dx <= 0):
      raise SGMConfigError('direction {} cannot be aggregated in a single raster pass'.format(direction.name))
    self.direction = direction
    self.P1, self.P2 = parameters.penalties()
    dtype = parameters.cost_dtype
    if dy == 0:
      self.store = RegisterStore(parameters.max_disparity, dtype)
    else:
      self.store = LineBufferStore(parameters.width, parameters.max_disparity, dtype, offset=dx)

  def accept(self, cost, predecessor):
    return accept(cost, predecessor, self.P1, self.P2)

  def step(self, position, cost):
    predecessor = None if position.is_path_start(self.direction) else self.store.read(position)
    aggregated, minimum = self.accept(cost, predecessor)
    self.store.write(position, aggregated, minimum)
    return aggregated


class StreamingSGM:
  def __init__(self, parameters, verbose=0):
    """
    raster scan controller driving the cost unit, the path engines and the selector in lockstep.
    :param parameters: structure containing parameters of the algorithm.
    :param verbose: 0 silent, 1 info, 2 debug.
    """
    paths = Paths(parameters.paths)
    if not paths.is_streamable():
      raise SGMConfigError('streaming supports {} only, got {}'.format(
        ', '.join(d.name for d in STREAM_DIRECTIONS), ', '.join(paths.names)))
    self.parameters = parameters
    self.paths = paths
    self.dprint = get_print_function(verbose)
    self.position = ScanPosition(parameters.width, parameters.height)
    self.right_row = np.zeros(parameters.width, dtype=parameters.cost_dtype)
    self.aggregators = [PathAggregator(d, parameters) if d in paths else None for d in STREAM_DIRECTIONS]
    self.zero_vector = np.zeros(parameters.max_disparity, dtype=parameters.cost_dtype)
    self.frame_size = parameters.width * parameters.height
    self.accepted = 0
    self.frames = 0

  @property
  def end_of_frame(self):
    return self.accepted == 0 and self.frames > 0

  def reset(self):
    'Rewind to the start of a frame; stale path state is never read thanks to the path-start rule'
    self.position.reset()
    self.accepted = 0

  def step(self, left, right, valid=True):
    """
    consume one pixel sample.
    :param left: left intensity at the current scan position.
    :param right: right intensity at the current scan position.
    :param valid: False while the source is stalled; nothing advances.
    :return: DisparityResult for this step.
    """
    x, y = self.position.x, self.position.y
    if not valid:
      return DisparityResult(x, y, 0, False)

    self.right_row[x] = right
    cost = cost_vector(left, self.right_row, x, self.parameters)
    aggregated = [aggregator.step(self.position, cost) if aggregator is not None else self.zero_vector
                  for aggregator in self.aggregators]
    disparity = select_disparity_vector(aggregated)

    self.accepted += 1
    if self.accepted == self.frame_size:
      self.accepted = 0
      self.frames += 1
      self.dprint('Frame {} complete'.format(self.frames))
    self.position.advance()
    return DisparityResult(x, y, disparity, True)

  def feed(self, samples):
    for sample in samples:
      yield self.step(sample.left, sample.right, sample.valid)

  def compute_disparity(self, left, right):
    """
    run one full frame.
    :param left: left image, H x W.
    :param right: right image, H x W.
    :return: disparity image.
    """
    left, right = check_pair(left, right, self.parameters)
    self.reset()
    disparity_map = np.zeros(shape=left.shape, dtype=np.int64)
    for result in self.feed(raster_samples(left, right)):
      disparity_map[result.y, result.x] = result.disparity
    return disparity_map

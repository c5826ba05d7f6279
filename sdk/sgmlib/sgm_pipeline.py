import time as t

from .sgm_aggregate import aggregate_costs
from .sgm_cost import compute_costs
from .sgm_paths import Paths
from .sgm_select import select_disparity
from .sgm_stream import StreamingSGM
from .sgm_utils import get_print_function

MODES = ('batch', 'stream')


def batch_disparity(left, right, parameters, verbose=0):
  """
  reference model: full cost volume, one sweep per direction, then winner-takes-all.
  :param left: left image.
  :param right: right image.
  :param parameters: structure containing parameters of the algorithm.
  :param verbose: 0 silent, 1 info, 2 debug.
  :return: disparity image.
  """
  cost_volume = compute_costs(left, right, parameters, verbose=verbose)
  aggregation_volume = aggregate_costs(cost_volume, parameters, Paths(parameters.paths), verbose=verbose)
  return select_disparity(aggregation_volume)


def stream_disparity(left, right, parameters, verbose=0):
  'Line-buffer model: one raster pass, one pixel per step'
  return StreamingSGM(parameters, verbose=verbose).compute_disparity(left, right)


def compute_disparity(left, right, parameters, mode='batch', verbose=0):
  dprint = get_print_function(verbose)
  if mode not in MODES:
    raise ValueError('mode must be one of {}, got {!r}'.format(', '.join(MODES), mode))
  dawn = t.time()
  if mode == 'batch':
    disparity_map = batch_disparity(left, right, parameters, verbose=verbose)
  else:
    disparity_map = stream_disparity(left, right, parameters, verbose=verbose)
  dusk = t.time()
  dprint('{} disparity done in {:.2f}s'.format(mode.capitalize(), dusk - dawn))
  return disparity_map

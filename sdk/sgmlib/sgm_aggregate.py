import multiprocessing as mp
import time as t

import numpy as np

from .sgm_paths import Paths, get_indices, get_path_starts
from .sgm_utils import get_print_function


def accept(cost, predecessor, P1, P2):
  """
  one step of the path recursion:
    L(p, d) = C(p, d) + min(L(p-r, d), L(p-r, d-1) + P1, L(p-r, d+1) + P1, min_k L(p-r, k) + P2) - min_k L(p-r, k)
  the +-1 terms are omitted where d-1 or d+1 falls outside 0..D-1.
  :param cost: D vector of matching costs C(p, .).
  :param predecessor: (L(p-r, .), min_k L(p-r, k)), or None at a path start.
  :param P1: small jump penalty, in the cost dtype.
  :param P2: large jump penalty, in the cost dtype.
  :return: aggregated D vector L(p, .) and its minimum.
  """
  if predecessor is None:
    aggregated = np.array(cost, copy=True)
    return aggregated, aggregated.min()

  previous, previous_min = predecessor
  transition = np.array(previous, copy=True)
  np.minimum(transition[1:], previous[:-1] + P1, out=transition[1:])
  np.minimum(transition[:-1], previous[1:] + P1, out=transition[:-1])
  np.minimum(transition, previous_min + P2, out=transition)
  # normalization keeps L - C within [0, P2] along arbitrarily long paths
  aggregated = cost + (transition - previous_min)
  return aggregated, aggregated.min()


def get_path_cost(slice, parameters):
  """
  part of the aggregation step, finds the minimum costs in a M x D slice (where M = the number of pixels in the
  given direction). the first pixel of the slice is the path start.
  :param slice: M x D array from the cost volume, in traversal order.
  :param parameters: structure containing parameters of the algorithm.
  :return: M x D array of the minimum costs for a given slice in a given direction.
  """
  P1, P2 = parameters.penalties()
  minimum_cost_path = np.zeros(shape=slice.shape, dtype=slice.dtype)
  predecessor = None
  for i in range(0, slice.shape[0]):
    aggregated, minimum = accept(slice[i, :], predecessor, P1, P2)
    minimum_cost_path[i, :] = aggregated
    predecessor = (aggregated, minimum)
  return minimum_cost_path


def aggregate_direction(cost_volume, direction, parameters):
  """
  sweep the whole cost volume along one direction.
  :param cost_volume: H x W x D array of matching costs.
  :param direction: aggregation direction.
  :param parameters: structure containing parameters of the algorithm.
  :return: H x W x D array L_r for this direction.
  """
  height, width = cost_volume.shape[0], cost_volume.shape[1]
  aggregation = np.zeros(shape=cost_volume.shape, dtype=cost_volume.dtype)
  for start in get_path_starts(direction, height, width):
    y_idx, x_idx = get_indices(start, direction, height, width)
    aggregation[y_idx, x_idx, :] = get_path_cost(cost_volume[y_idx, x_idx, :], parameters)
  return aggregation


def aggregate_costs(cost_volume, parameters, paths=None, verbose=0):
  """
  second step of the sgm algorithm, aggregates matching costs for every active direction.
  directions only read the shared cost volume, so with parameters.processes > 1 they run in worker processes.
  :param cost_volume: array containing the matching costs.
  :param parameters: structure containing parameters of the algorithm.
  :param paths: structure containing all directions in which to aggregate costs.
  :param verbose: 0 silent, 1 info, 2 debug.
  :return: H x W x D x N array of matching cost for all defined directions.
  """
  dprint = get_print_function(verbose)
  paths = paths if paths is not None else Paths(parameters.paths)
  height, width, disparities = cost_volume.shape

  aggregation_volume = np.zeros(shape=(height, width, disparities, paths.size), dtype=cost_volume.dtype)

  dawn = t.time()
  if parameters.processes > 1 and paths.size > 1:
    dprint('Processing paths {} in {} processes...'.format(', '.join(paths.names), parameters.processes))
    with mp.Pool(processes=min(parameters.processes, paths.size)) as pool:
      results = pool.starmap(aggregate_direction, [(cost_volume, path, parameters) for path in paths])
    for path_id, main_aggregation in enumerate(results):
      aggregation_volume[:, :, :, path_id] = main_aggregation
  else:
    for path_id, path in enumerate(paths):
      dawn_path = t.time()
      aggregation_volume[:, :, :, path_id] = aggregate_direction(cost_volume, path, parameters)
      dprint('Processing path {}... (done in {:.2f}s)'.format(path.name, t.time() - dawn_path))
  dusk = t.time()
  dprint('Cost aggregation done in {:.2f}s'.format(dusk - dawn))

  return aggregation_volume

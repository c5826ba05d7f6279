import numpy as np


def sum_path_costs(path_costs):
  """
  S(p, d) = sum over r of L_r(p, d), accumulated in the given order so every caller rounds identically.
  :param path_costs: sequence of equally shaped arrays, one per direction (zeros for inactive ones).
  :return: summed array.
  """
  path_costs = list(path_costs)
  total = np.array(path_costs[0], copy=True)
  for costs in path_costs[1:]:
    total += costs
  return total


def select_disparity_vector(aggregated_vectors):
  """
  winner-takes-all for a single pixel; the lowest disparity wins a tie.
  :param aggregated_vectors: D vectors, one per direction.
  :return: disparity index.
  """
  return int(np.argmin(sum_path_costs(aggregated_vectors)))


def select_disparity(aggregation_volume):
  """
  last step of the sgm algorithm, corresponding to equation 14 followed by winner-takes-all approach.
  :param aggregation_volume: H x W x D x N array of matching cost for all defined directions.
  :return: disparity image.
  """
  volume = sum_path_costs([aggregation_volume[:, :, :, n] for n in range(aggregation_volume.shape[3])])
  disparity_map = np.argmin(volume, axis=2)
  return disparity_map


def costvolume_disparity(cost_volume):
  'Winner-takes-all on the raw matching costs, without any aggregation'
  return np.argmin(cost_volume, axis=2)

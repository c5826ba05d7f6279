import numpy as np

from .sgm_errors import SGMShapeError
from .sgm_utils import get_print_function


def check_pair(left, right, parameters):
  left = np.asarray(left)
  right = np.asarray(right)
  if left.ndim != 2 or right.ndim != 2:
    raise SGMShapeError('left & right must be single-channel images, got shapes {} and {}'.format(left.shape, right.shape))
  if left.shape != right.shape:
    raise SGMShapeError('left & right must have the same shape, got {} and {}'.format(left.shape, right.shape))
  if left.shape != (parameters.height, parameters.width):
    raise SGMShapeError('images are {}x{} but the frame is configured as {}x{}'.format(
      left.shape[1], left.shape[0], parameters.width, parameters.height))
  return left, right


def compute_costs(left, right, parameters, verbose=0):
  """
  first step of the sgm algorithm, matching cost based on the absolute difference of intensities.
  :param left: left (reference) image.
  :param right: right (target) image.
  :param parameters: structure containing parameters of the algorithm.
  :param verbose: 0 silent, 1 info, 2 debug.
  :return: H x W x D array with the matching costs.
  """
  dprint = get_print_function(verbose)
  left, right = check_pair(left, right, parameters)
  dtype = parameters.cost_dtype
  width = parameters.width
  disparity = parameters.max_disparity

  left = left.astype(dtype)
  right = right.astype(dtype)

  dprint('Computing cost volume...', debug='{}x{}x{} {}'.format(parameters.height, width, disparity, dtype))
  cost_volume = np.full(shape=(parameters.height, width, disparity), fill_value=parameters.sentinel(), dtype=dtype)
  for d in range(0, min(disparity, width)):
    # pixels closer than d to the left border keep the sentinel
    cost_volume[:, d:, d] = np.abs(left[:, d:] - right[:, :width - d])
  return cost_volume


def cost_vector(left_value, right_row, x, parameters):
  """
  matching cost of one pixel for every disparity, computed on demand from a one-row buffer of the right image.
  :param left_value: intensity of the left pixel at column x.
  :param right_row: right image row, valid at least up to column x.
  :param x: column of the pixel.
  :param parameters: structure containing parameters of the algorithm.
  :return: D vector of matching costs.
  """
  dtype = parameters.cost_dtype
  costs = np.full(parameters.max_disparity, parameters.sentinel(), dtype=dtype)
  n = min(parameters.max_disparity, x + 1)
  # right_row[x - d] for d = 0..n-1
  costs[:n] = np.abs(dtype.type(left_value) - right_row[x - n + 1:x + 1][::-1])
  return costs

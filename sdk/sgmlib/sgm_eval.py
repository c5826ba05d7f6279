import numpy as np

from .sgm_errors import SGMShapeError


def _same_shape(disparity, other):
  disparity = np.asarray(disparity)
  other = np.asarray(other)
  if disparity.shape != other.shape:
    raise SGMShapeError('disparity maps differ in shape: {} and {}'.format(disparity.shape, other.shape))
  return disparity, other


def get_recall(disparity, gt, threshold=3, mask=None):
  """
  computes the recall of the disparity map.
  :param disparity: disparity image.
  :param gt: ground-truth disparity image, same units.
  :param threshold: largest absolute error still counted as correct.
  :param mask: optional boolean image of the pixels to evaluate.
  :return: rate of correct predictions.
  """
  disparity, gt = _same_shape(disparity, gt)
  error = np.abs(disparity.astype(np.float64) - gt.astype(np.float64))
  if mask is not None:
    error = error[np.asarray(mask, dtype=bool)]
  if error.size == 0:
    return 0.0
  correct = np.count_nonzero(error <= threshold)
  return float(correct) / error.size


def compare_disparity(disparity, reference):
  'Number of pixels where two disparity maps disagree'
  disparity, reference = _same_shape(disparity, reference)
  return int(np.count_nonzero(disparity != reference))

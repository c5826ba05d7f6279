import copy

import numpy as np
import yaml

from .sgm_errors import SGMConfigError
from .sgm_paths import Paths

# Geometry and penalties of the reference hardware core
HEIGHT = 240
WIDTH = 272
MAX_DISP = 16
P1_PENALTY = 8
P2_PENALTY = 128
SENTINEL_COST = 1000.0

COST_DTYPES = ('float32', 'float64', 'int32', 'int64')


class Parameters:
  def __init__(self, width=WIDTH, height=HEIGHT, max_disparity=MAX_DISP, P1=P1_PENALTY, P2=P2_PENALTY,
               paths=4, sentinel_cost=SENTINEL_COST, dtype='float32', bsize=(3, 3), processes=1):
    """
    represent all parameters used in the sgm algorithm. immutable for the duration of a frame.
    :param width: W of the frame.
    :param height: H of the frame.
    :param max_disparity: number of disparity candidates D, searched as 0..D-1.
    :param P1: penalty for disparity difference = 1
    :param P2: penalty for disparity difference > 1
    :param paths: 1, 2 or 4 directions, or a list of direction names.
    :param sentinel_cost: matching cost when the target pixel falls off the left edge.
    :param dtype: numeric type of cost vectors.
    :param bsize: size of the kernel for blurring the images and median filtering, None to disable.
    :param processes: worker processes for the batch aggregation, 1 to run serially.
    """
    self.width = width
    self.height = height
    self.max_disparity = max_disparity
    self.P1 = P1
    self.P2 = P2
    self.paths = paths
    self.sentinel_cost = sentinel_cost
    self.dtype = dtype
    self.bsize = tuple(bsize) if isinstance(bsize, (list, tuple)) else bsize
    self.processes = processes
    self.validate()

  def validate(self):
    for name in ('width', 'height', 'max_disparity', 'processes'):
      value = getattr(self, name)
      if isinstance(value, bool) or not isinstance(value, (int, np.integer)) or value <= 0:
        raise SGMConfigError('{} must be a positive integer, got {!r}'.format(name, value))
    for name in ('P1', 'P2'):
      value = getattr(self, name)
      if isinstance(value, bool) or not isinstance(value, (int, float, np.number)) or value < 0:
        raise SGMConfigError('{} must be a non-negative number, got {!r}'.format(name, value))
    if (isinstance(self.sentinel_cost, bool) or not isinstance(self.sentinel_cost, (int, float, np.number)) or
        self.sentinel_cost <= 0):
      raise SGMConfigError('sentinel_cost must be positive, got {!r}'.format(self.sentinel_cost))
    try:
      dtype_name = str(np.dtype(self.dtype))
    except (TypeError, ValueError):
      dtype_name = None
    if dtype_name not in COST_DTYPES:
      raise SGMConfigError('dtype must be one of {}, got {!r}'.format(', '.join(COST_DTYPES), self.dtype))
    if self.bsize is not None:
      if (not isinstance(self.bsize, tuple) or len(self.bsize) != 2 or
          any(isinstance(k, bool) or not isinstance(k, (int, np.integer)) or k <= 0 or k % 2 == 0 for k in self.bsize)):
        raise SGMConfigError('bsize must be two odd positive integers, got {!r}'.format(self.bsize))
    Paths(self.paths)

  @property
  def cost_dtype(self):
    return np.dtype(self.dtype)

  def penalties(self):
    'P1 and P2 in the cost dtype, so both execution models add identical scalars'
    scalar = self.cost_dtype.type
    return scalar(self.P1), scalar(self.P2)

  def sentinel(self):
    return self.cost_dtype.type(self.sentinel_cost)

  def for_images(self, image):
    'Copy of these parameters with the frame geometry of an H x W image'
    parameters = copy.copy(self)
    parameters.height, parameters.width = int(image.shape[0]), int(image.shape[1])
    parameters.validate()
    return parameters

  def as_dict(self):
    return {
      'width': self.width,
      'height': self.height,
      'max_disparity': self.max_disparity,
      'P1': self.P1,
      'P2': self.P2,
      'paths': self.paths if isinstance(self.paths, (int, str)) else list(self.paths),
      'sentinel_cost': self.sentinel_cost,
      'dtype': str(self.cost_dtype),
      'bsize': list(self.bsize) if self.bsize is not None else None,
      'processes': self.processes,
    }

SGMParameters = Parameters

PARAMETER_NAMES = tuple(Parameters().as_dict())


def load_config(file_path):
  """
  Loads a YAML configuration file and returns the contents as a dictionary.

  Args:
      file_path (str): Path to the YAML configuration file to be loaded.

  Returns:
      dict: Contents of the YAML file as a dictionary, empty for an empty file.
  """
  with open(file_path, 'r') as file:
    try:
      return yaml.safe_load(file) or {}
    except yaml.YAMLError as e:
      raise SGMConfigError('cannot parse {}: {}'.format(file_path, e))


def parameters_from_config(config, **overrides):
  """
  build Parameters from the 'sgm' section of a configuration dictionary (or the dictionary itself).
  :param config: dictionary, usually from load_config.
  :param overrides: values that win over the file, None entries are ignored.
  :return: validated Parameters.
  """
  config = config or {}
  if not isinstance(config, dict):
    raise SGMConfigError('configuration must be a mapping, got {}'.format(type(config).__name__))
  section = config.get('sgm', config)
  if not isinstance(section, dict):
    raise SGMConfigError("'sgm' section must be a mapping, got {}".format(type(section).__name__))
  section = dict(section)
  unknown = sorted(str(k) for k in set(section) - set(PARAMETER_NAMES))
  if unknown:
    raise SGMConfigError('unknown configuration keys: {}'.format(', '.join(unknown)))
  section.update({k: v for k, v in overrides.items() if v is not None})
  return Parameters(**section)

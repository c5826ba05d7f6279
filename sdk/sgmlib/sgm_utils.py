from time import gmtime, strftime

import numpy as np


def get_print_function(verbosity):
  '''
  Returns a progress print function for the given verbosity:
    > 0 silent
    > 1 info lines
    > 2 timestamped info lines plus the 'debug' keyword payload
  '''
  def dprint(*a, **kwargs):
    tstamp_f = "[%Y-%m-%d %H:%M:%S]"
    print(strftime(tstamp_f, gmtime()) + '[Info]>', *a, flush=True)
    if 'debug' in kwargs.keys():
      print(strftime(tstamp_f, gmtime()) + '[Debug]>', kwargs['debug'], flush=True)
  if verbosity == 0 or verbosity is None:
    return lambda *a, **kw: None
  elif verbosity == 1:
    return lambda *a, **kw: print('[Info]>', *a, flush=True)
  elif verbosity == 2:
    return dprint
  else:
    raise ValueError("Verbose can only be set to 0 (silent), 1 (info), or 2 (debug)")


def img_float_to_uint8(image):
  '''
  Converts a float image to a uint8 image for saving
  '''
  image = np.asarray(image, dtype=np.float64)
  span = image.max() - image.min()
  if span == 0:
    return np.zeros(image.shape, dtype=np.uint8)
  return ((image - image.min()) / span * 255.).astype(np.uint8)


def pprint(d, indent=0, indent_size=2):
  '''
  Pretty prints a dictionary
  '''
  indent_str = ' ' * indent_size
  for key, value in d.items():
    print(indent_str * indent + str(key))
    if isinstance(value, dict):
      pprint(value, indent=indent+1, indent_size=indent_size)
    else:
      print(indent_str * (indent+1) + str(value))

from os.path import splitext

import cv2
import numpy as np
from skimage import color, io, img_as_float

from .sgm_errors import SGMShapeError
from .sgm_select import costvolume_disparity
from .sgm_utils import img_float_to_uint8


def grayscale_and_normalize(im):
  if im.ndim == 3:
    if im.shape[2] == 4:
      im = color.rgba2rgb(im)
    im = color.rgb2gray(im)
  return img_as_float(im)


def read_images(*file_paths):
  'Reads images as single-channel floats in [0, 1]'
  output_list = [grayscale_and_normalize(io.imread(fpath)) for fpath in file_paths]
  return output_list if len(file_paths) > 1 else output_list[0]


def _imread_gray(name):
  image = cv2.imread(name, cv2.IMREAD_GRAYSCALE)
  if image is None:
    raise FileNotFoundError('could not read image {}'.format(name))
  return image


def load_images(left_name, right_name, parameters):
  """
  read and blur stereo image pair as 8-bit intensities.
  :param left_name: name of the left image.
  :param right_name: name of the right image.
  :param parameters: structure containing parameters of the algorithm.
  :return: blurred left and right images.
  """
  left = _imread_gray(left_name)
  right = _imread_gray(right_name)
  if parameters.bsize is not None:
    left = cv2.GaussianBlur(left, parameters.bsize, 0, 0)
    right = cv2.GaussianBlur(right, parameters.bsize, 0, 0)
  return left, right


def load_pixel_vector(path, height, width):
  """
  read a test vector with one intensity per line, in raster order.
  :param path: text file.
  :param height: H of the frame.
  :param width: W of the frame.
  :return: H x W float32 image.
  """
  try:
    pixels = np.loadtxt(path, dtype=np.float32, ndmin=1)
  except ValueError as e:
    raise SGMShapeError('{} is not a list of intensities: {}'.format(path, e))
  if pixels.size != height * width:
    raise SGMShapeError('{} holds {} pixels, expected {}x{} = {}'.format(path, pixels.size, width, height, height * width))
  return pixels.reshape(height, width)


def save_disparity_vector(path, disparity):
  'Writes one integer disparity per line, in raster order'
  np.savetxt(path, np.asarray(disparity).reshape(-1), fmt='%d')


def read_disparity(path, shape=None, scale=1.0):
  """
  read a disparity map from an image or a text file.
  :param path: image file, or text file (one value per line, or comma separated rows).
  :param shape: (H, W) for one-value-per-line text files.
  :param scale: stored value = disparity * scale.
  :return: float32 disparity image.
  """
  if splitext(path)[1].lower() in ('.txt', '.csv'):
    with open(path) as fp:
      delimiter = ',' if ',' in fp.readline() else None
    disparity = np.loadtxt(path, delimiter=delimiter, ndmin=1)
    if shape is not None:
      if disparity.size != shape[0] * shape[1]:
        raise SGMShapeError('{} holds {} values, expected {}'.format(path, disparity.size, shape[0] * shape[1]))
      disparity = disparity.reshape(shape)
  else:
    disparity = cv2.imread(path, cv2.IMREAD_UNCHANGED)
    if disparity is None:
      raise FileNotFoundError('could not read disparity image {}'.format(path))
    if disparity.ndim == 3:
      disparity = disparity[:, :, 0]
  return disparity.astype(np.float32) / scale


def normalize(volume, parameters):
  """
  transforms values from the range (0, D) to (0, 255).
  :param volume: n dimension array to normalize.
  :param parameters: structure containing parameters of the algorithm.
  :return: normalized array.
  """
  return 255.0 * volume / parameters.max_disparity


def save_disparity_image(img_path, disparity, parameters, median=False):
  disparity_image = np.uint8(normalize(disparity, parameters))
  if median and parameters.bsize is not None:
    disparity_image = cv2.medianBlur(disparity_image, parameters.bsize[0])
  cv2.imwrite(img_path, disparity_image)
  return disparity_image


def save_costvolume_image(img_path, cost_volume, parameters):
  disparity_image = np.uint8(normalize(costvolume_disparity(cost_volume), parameters))
  cv2.imwrite(img_path, disparity_image)


def save_intensity_image(img_path, image):
  cv2.imwrite(img_path, img_float_to_uint8(image))

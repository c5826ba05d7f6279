import cv2
import numpy as np
import pytest

from sgmlib import Parameters, SGMShapeError
from sgmlib.sgm_eval import compare_disparity, get_recall
from sgmlib.sgm_io import (load_images, load_pixel_vector, normalize, read_disparity, read_images,
                           save_disparity_image, save_disparity_vector)


@pytest.fixture
def image_pair(tmp_path):
  left = np.tile(np.arange(0, 240, 20, dtype=np.uint8), (6, 1))
  right = left[::-1].copy()
  left_path, right_path = str(tmp_path / 'left.png'), str(tmp_path / 'right.png')
  cv2.imwrite(left_path, left)
  cv2.imwrite(right_path, right)
  return left, right, left_path, right_path


def test_load_images_without_blur_is_lossless(image_pair):
  left, right, left_path, right_path = image_pair
  loaded_left, loaded_right = load_images(left_path, right_path, Parameters(bsize=None))
  np.testing.assert_array_equal(loaded_left, left)
  np.testing.assert_array_equal(loaded_right, right)


def test_load_images_blurs(image_pair):
  left, _, left_path, right_path = image_pair
  loaded_left, _ = load_images(left_path, right_path, Parameters(bsize=(3, 3)))
  assert loaded_left.shape == left.shape
  assert loaded_left.dtype == np.uint8


def test_missing_image(tmp_path):
  with pytest.raises(FileNotFoundError):
    load_images(str(tmp_path / 'nope.png'), str(tmp_path / 'nope.png'), Parameters())


def test_read_images_normalizes(image_pair, tmp_path):
  left, _, left_path, _ = image_pair
  color_path = str(tmp_path / 'color.png')
  cv2.imwrite(color_path, np.dstack([left, left, left]))
  gray, color = read_images(left_path, color_path)
  assert gray.ndim == 2 and color.ndim == 2
  assert gray.max() <= 1.0
  np.testing.assert_allclose(gray, left / 255.0)
  np.testing.assert_allclose(color, gray, atol=1e-3)


def test_pixel_vectors(tmp_path):
  path = tmp_path / 'left_pixels.txt'
  path.write_text('\n'.join(str(v) for v in range(6)) + '\n')
  image = load_pixel_vector(str(path), 2, 3)
  np.testing.assert_array_equal(image, [[0, 1, 2], [3, 4, 5]])
  with pytest.raises(SGMShapeError):
    load_pixel_vector(str(path), 2, 2)


def test_pixel_vector_with_text(tmp_path):
  path = tmp_path / 'left_pixels.txt'
  path.write_text('1\na\n3\n4\n')
  with pytest.raises(SGMShapeError):
    load_pixel_vector(str(path), 2, 2)


def test_disparity_vector_is_one_integer_per_line(tmp_path):
  path = tmp_path / 'hls_disparity.txt'
  save_disparity_vector(str(path), np.array([[1, 0], [3, 2]]))
  assert path.read_text().split() == ['1', '0', '3', '2']
  np.testing.assert_array_equal(read_disparity(str(path), shape=(2, 2)), [[1, 0], [3, 2]])


def test_read_comma_separated_disparity(tmp_path):
  path = tmp_path / 'gt_disparity.txt'
  path.write_text('1.5,2\n3,4\n')
  np.testing.assert_array_equal(read_disparity(str(path)), [[1.5, 2], [3, 4]])


def test_disparity_image(tmp_path):
  parameters = Parameters(max_disparity=4)
  disparity = np.array([[0, 1], [2, 3]])
  np.testing.assert_allclose(normalize(disparity, parameters), [[0, 63.75], [127.5, 191.25]])
  path = str(tmp_path / 'disp.png')
  written = save_disparity_image(path, disparity, parameters)
  np.testing.assert_array_equal(cv2.imread(path, cv2.IMREAD_UNCHANGED), written)
  np.testing.assert_array_equal(read_disparity(path, scale=255.0 / 4).round(), [[0, 1], [2, 3]])


def test_recall_and_comparison():
  gt = np.array([[0, 4], [8, 12]])
  disparity = np.array([[1, 4], [3, 16]])
  assert get_recall(disparity, gt) == 0.5
  assert get_recall(disparity, gt, threshold=5) == 1.0
  assert get_recall(disparity, gt, mask=gt > 0) == pytest.approx(1 / 3)
  assert compare_disparity(disparity, gt) == 3
  with pytest.raises(SGMShapeError):
    compare_disparity(disparity, gt[:1])

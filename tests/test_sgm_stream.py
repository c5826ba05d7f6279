import numpy as np
import pytest

from conftest import shifted_pair
from sgmlib import (Parameters, PathAggregator, PixelSample, ScanPosition, SGMConfigError, StreamingSGM,
                    aggregate_costs, batch_disparity, compute_costs, cost_vector, raster_samples,
                    stream_disparity)
from sgmlib.sgm_paths import BIDIRECTIONAL_PATHS, E, S, SE, SW, Paths
from sgmlib.sgm_select import sum_path_costs


def test_scan_position_wraps_rows_and_frames():
  position = ScanPosition(width=3, height=2)
  visited = []
  for _ in range(7):
    visited.append((position.x, position.y))
    position.advance()
  assert visited == [(0, 0), (1, 0), (2, 0), (0, 1), (1, 1), (2, 1), (0, 0)]


def test_path_start_conditions():
  position = ScanPosition(width=4, height=3)
  assert all(position.is_path_start(d) for d in (E, S, SE, SW))
  position.x, position.y = 3, 1
  assert not position.is_path_start(E)
  assert not position.is_path_start(S)
  assert not position.is_path_start(SE)
  assert position.is_path_start(SW)
  position.x = 0
  assert position.is_path_start(E) and position.is_path_start(SE)
  assert not position.is_path_start(SW)


def test_horizontal_engine_starts_each_row_from_raw_cost():
  parameters = Parameters(width=3, height=2, max_disparity=3)
  aggregator = PathAggregator(E, parameters)
  position = ScanPosition(3, 2)
  right_row = np.array([10, 50, 90], dtype=np.float32)
  for x, left_value in enumerate([10, 60, 10]):
    cost = cost_vector(left_value, right_row, x, parameters)
    aggregated = aggregator.step(position, cost)
    if x == 0:
      np.testing.assert_array_equal(aggregated, cost)
    position.advance()
  cost = cost_vector(7, right_row, 0, parameters)
  np.testing.assert_array_equal(aggregator.step(position, cost), cost)


@pytest.mark.parametrize('paths', [1, 2, 4, ['south'], ['south-east'], ['south-west'], ['east', 'south-west']])
def test_streaming_matches_batch_bit_for_bit(random_pair, small_parameters, paths):
  left, right = random_pair
  parameters = small_parameters(left, paths=paths)
  np.testing.assert_array_equal(stream_disparity(left, right, parameters),
                                batch_disparity(left, right, parameters))


def test_streaming_matches_batch_on_float_images(small_parameters):
  rng = np.random.default_rng(99)
  left = rng.random((7, 11))
  right = np.roll(left, -1, axis=1)
  parameters = small_parameters(left, P1=0.05, P2=0.4, paths=4)
  np.testing.assert_array_equal(stream_disparity(left, right, parameters),
                                batch_disparity(left, right, parameters))


def test_streaming_matches_batch_fixed_point(random_pair, small_parameters):
  left, right = random_pair
  parameters = small_parameters(left, dtype='int32')
  np.testing.assert_array_equal(stream_disparity(left, right, parameters),
                                batch_disparity(left, right, parameters))


def test_disparities_stay_in_range(random_pair, small_parameters):
  left, right = random_pair
  parameters = small_parameters(left)
  disparity = stream_disparity(left, right, parameters)
  assert disparity.min() >= 0 and disparity.max() <= parameters.max_disparity - 1


def test_uniform_pair_gives_zero_disparity():
  image = np.full((4, 4), 50, dtype=np.uint8)
  parameters = Parameters(width=4, height=4, max_disparity=4, P1=8, P2=128, paths=1)
  np.testing.assert_array_equal(stream_disparity(image, image, parameters), np.zeros((4, 4)))
  np.testing.assert_array_equal(batch_disparity(image, image, parameters), np.zeros((4, 4)))


def test_known_shift_is_recovered():
  left, right = shifted_pair(8, 12, shift=2)
  parameters = Parameters(width=12, height=8, max_disparity=5, P1=8, P2=128, paths=4)
  streamed = stream_disparity(left, right, parameters)
  np.testing.assert_array_equal(streamed[:, 2:], 2)
  np.testing.assert_array_equal(streamed, batch_disparity(left, right, parameters))


def test_summed_minimum_never_drops_when_directions_are_added(random_pair, small_parameters):
  left, right = random_pair
  parameters = small_parameters(left)
  aggregation_volume = aggregate_costs(compute_costs(left, right, parameters), parameters, Paths(4))
  minima = [sum_path_costs([aggregation_volume[..., n] for n in range(count)]).min(axis=2) for count in (1, 2, 4)]
  assert np.all(minima[0] <= minima[1])
  assert np.all(minima[1] <= minima[2])


def test_stalls_hold_state(random_pair, small_parameters):
  left, right = random_pair
  parameters = small_parameters(left)
  expected = stream_disparity(left, right, parameters)

  engine = StreamingSGM(parameters)
  disparity = np.full(left.shape, -1)
  for i, sample in enumerate(raster_samples(left, right)):
    if i % 4 == 0:
      stalled = engine.step(0, 255, valid=False)
      assert not stalled.valid
      assert (stalled.x, stalled.y) == (sample.x, sample.y)
    result = engine.step(sample.left, sample.right)
    assert (result.x, result.y) == (sample.x, sample.y)
    disparity[result.y, result.x] = result.disparity
  np.testing.assert_array_equal(disparity, expected)


def test_consecutive_frames_are_identical(random_pair, small_parameters):
  left, right = random_pair
  parameters = small_parameters(left)
  engine = StreamingSGM(parameters)
  samples = list(raster_samples(left, right))
  first = [r.disparity for r in engine.feed(samples)]
  assert engine.end_of_frame and engine.frames == 1
  # no reset between frames
  second = [r.disparity for r in engine.feed(samples)]
  assert first == second
  assert engine.frames == 2


def test_feed_accepts_pixel_samples():
  parameters = Parameters(width=2, height=1, max_disparity=2, paths=1)
  engine = StreamingSGM(parameters)
  results = list(engine.feed([PixelSample(0, 0, 5, 5, True), PixelSample(0, 0, 0, 0, False),
                              PixelSample(1, 0, 9, 9, True)]))
  assert [r.valid for r in results] == [True, False, True]
  assert [(r.x, r.disparity) for r in results if r.valid] == [(0, 0), (1, 0)]
  assert engine.end_of_frame


def test_non_causal_directions_are_rejected():
  with pytest.raises(SGMConfigError):
    StreamingSGM(Parameters(width=4, height=4, max_disparity=2, paths=list(BIDIRECTIONAL_PATHS)))

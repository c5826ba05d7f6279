import argparse
import os
import sys
import time as t

from .sgm_config import load_config, parameters_from_config
from .sgm_cost import compute_costs
from .sgm_db import StereoDB
from .sgm_errors import SGMError
from .sgm_eval import compare_disparity, get_recall
from .sgm_io import (load_images, load_pixel_vector, read_disparity, read_images, save_costvolume_image,
                     save_disparity_image, save_disparity_vector, save_intensity_image)
from .sgm_pipeline import compute_disparity
from .sgm_utils import get_print_function, pprint


def parse_paths(value):
  'Path count ("1", "2", "4") or comma separated direction names'
  if value is None:
    return None
  value = value.strip()
  if value.isdigit():
    return int(value)
  return [name.strip() for name in value.split(',') if name.strip()]


def build_parser():
  parser = argparse.ArgumentParser(prog='sgm', description='semi-global matching disparity for a rectified stereo pair')
  parser.add_argument('--left', default=None, help='name (path) to the left image')
  parser.add_argument('--right', default=None, help='name (path) to the right image')
  parser.add_argument('--left-vector', default=None, help='left test vector, one intensity per line')
  parser.add_argument('--right-vector', default=None, help='right test vector, one intensity per line')
  parser.add_argument('--db', default=None, help='stereo scene directory (see StereoDB)')
  parser.add_argument('--scene', default=None, help='scene name inside --db')
  parser.add_argument('--config', default=None, help='YAML configuration file')
  parser.add_argument('--mode', default='batch', choices=['batch', 'stream', 'both'],
                      help='batch reference, streaming engine, or both and compare')
  parser.add_argument('--paths', default=None, help='1, 2, 4 or comma separated direction names')
  parser.add_argument('--disp', default=None, type=int, help='number of disparity candidates')
  parser.add_argument('--p1', default=None, type=float, help='penalty for disparity changes of 1')
  parser.add_argument('--p2', default=None, type=float, help='penalty for disparity changes > 1')
  parser.add_argument('--width', default=None, type=int, help='frame width for test vectors')
  parser.add_argument('--height', default=None, type=int, help='frame height for test vectors')
  parser.add_argument('--processes', default=None, type=int, help='worker processes for batch aggregation')
  parser.add_argument('--float', action='store_true', help='read images as floats in [0, 1] instead of blurred 8-bit')
  parser.add_argument('--output', default=None, help='name of the output disparity image')
  parser.add_argument('--vector-output', default=None, help='write the disparity as one integer per line')
  parser.add_argument('--median', action='store_true', help='median filter the output image')
  parser.add_argument('--gt', default=None, help='ground-truth disparity to evaluate against')
  parser.add_argument('--gt-scale', default=1.0, type=float, help='stored ground-truth value per disparity unit')
  parser.add_argument('--images', default=None, help='directory to save intermediate representations')
  parser.add_argument('--verbose', default=1, type=int, help='0 silent, 1 info, 2 debug')
  return parser


def _resolve_sources(args):
  """
  pick the input pair from --db/--scene, image paths or test vectors.
  :return: (kind, left source, right source, ground-truth path or None)
  """
  gt = args.gt
  if args.db is not None:
    if args.scene is None:
      raise SGMError('--db requires --scene')
    stereodb = StereoDB(args.db)
    try:
      left_item, right_item = stereodb.get_pair(args.scene, 'image')
      kind = 'image'
    except KeyError:
      left_item, right_item = stereodb.get_pair(args.scene, 'vector')
      kind = 'vector'
    if gt is None:
      gt_item = stereodb.get_ground_truth(args.scene)
      gt = gt_item['path'] if gt_item else None
    return kind, left_item['path'], right_item['path'], gt
  if args.left and args.right:
    return 'image', args.left, args.right, gt
  if args.left_vector and args.right_vector:
    return 'vector', args.left_vector, args.right_vector, gt
  raise SGMError('give --left/--right, --left-vector/--right-vector or --db/--scene')


def run(args, dprint):
  kind, left_source, right_source, gt_path = _resolve_sources(args)

  config = load_config(args.config) if args.config else {}
  parameters = parameters_from_config(config, max_disparity=args.disp, P1=args.p1, P2=args.p2,
                                      paths=parse_paths(args.paths), width=args.width,
                                      height=args.height, processes=args.processes)

  dprint('Loading {} pair...'.format(kind))
  if kind == 'image':
    if args.float:
      left, right = read_images(left_source, right_source)
    else:
      left, right = load_images(left_source, right_source, parameters)
    parameters = parameters.for_images(left)
  else:
    left = load_pixel_vector(left_source, parameters.height, parameters.width)
    right = load_pixel_vector(right_source, parameters.height, parameters.width)

  if args.verbose:
    pprint(parameters.as_dict(), indent=1)

  if args.images:
    os.makedirs(args.images, exist_ok=True)
    save_intensity_image(os.path.join(args.images, 'left.png'), left)
    save_intensity_image(os.path.join(args.images, 'right.png'), right)
    save_costvolume_image(os.path.join(args.images, 'disp_map_cost_volume.png'),
                          compute_costs(left, right, parameters), parameters)

  status = 0
  if args.mode == 'both':
    dprint('Starting batch reference...')
    disparity_map = compute_disparity(left, right, parameters, mode='batch', verbose=args.verbose)
    dprint('Starting streaming engine...')
    streamed = compute_disparity(left, right, parameters, mode='stream', verbose=args.verbose)
    mismatches = compare_disparity(streamed, disparity_map)
    dprint('Batch and streaming disagree on {} of {} pixels'.format(mismatches, disparity_map.size))
    if mismatches:
      status = 1
  else:
    dprint('Starting {} disparity computation...'.format(args.mode))
    disparity_map = compute_disparity(left, right, parameters, mode=args.mode, verbose=args.verbose)

  if args.output:
    save_disparity_image(args.output, disparity_map, parameters, median=args.median)
    dprint('Disparity image saved to {}'.format(args.output))
  if args.vector_output:
    save_disparity_vector(args.vector_output, disparity_map)
    dprint('Disparity vector saved to {}'.format(args.vector_output))

  if gt_path:
    dprint('Evaluating disparity map...')
    gt = read_disparity(gt_path, shape=disparity_map.shape, scale=args.gt_scale)
    recall = get_recall(disparity_map, gt)
    dprint('\tRecall = {:.2f}%'.format(recall * 100.0))

  return status, disparity_map


def sgm(argv=None):
  """
  main function applying the semi-global matching algorithm.
  :return: exit status.
  """
  args = build_parser().parse_args(argv)
  try:
    dprint = get_print_function(args.verbose)
  except ValueError as e:
    print('Error: {}'.format(e), file=sys.stderr)
    return 1

  dawn = t.time()
  try:
    status, _ = run(args, dprint)
  except (SGMError, OSError, KeyError) as e:
    print('Error: {}'.format(e), file=sys.stderr)
    return 1
  dusk = t.time()
  dprint('Fin. Total execution time = {:.2f}s'.format(dusk - dawn))
  return status


def main():
  sys.exit(sgm())


if __name__ == '__main__':
  main()

import sys
from os import listdir
from os.path import isdir, splitext, join as joinpath
from collections.abc import MutableMapping

IMAGE_EXTENSIONS = ('.png', '.pgm', '.ppm', '.tif', '.tiff', '.jpg', '.bmp')


class StereoDB(MutableMapping):
  """
  index of stereo scenes laid out as <basepath>/<scene>/<item>:
    left.png, right.png          rectified image pair
    disp.png, disp.txt           ground-truth disparity
    left_pixels.txt, right_pixels.txt   raster-order test vectors
    <anything>_disparity.txt     stored results to compare against
  """

  def __init__(self, basepath=None, missing_str='-'):
    self.db = {}
    self.missing_str = missing_str
    self.basepath = basepath if basepath else self._get_basepath()
    try:
      self._populate_db(self.basepath)
    except FileNotFoundError:
      sys.exit("No stereo data found at {}... exiting.".format(self.basepath))

  def _get_basepath(self):
    from . import SDK_BASEPATH
    return joinpath(SDK_BASEPATH, 'data')

  def _populate_db(self, basepath):
    item_id = 0
    for scene in sorted(listdir(basepath)):
      scene_path = joinpath(basepath, scene)
      if not isdir(scene_path):
        continue
      for item in sorted(listdir(scene_path)):
        item_path = joinpath(scene_path, item)
        item_name, ext = splitext(item)
        ext = ext.lower()

        if item_name in ('left', 'right') and ext in IMAGE_EXTENSIONS:
          # Rectified Images
          db_item = {'name': item_name, 'type': 'image', 'side': item_name}
        elif item_name in ('left_pixels', 'right_pixels') and ext == '.txt':
          # Raster-order Test Vectors
          db_item = {'name': item_name, 'type': 'vector', 'side': item_name.split('_')[0]}
        elif item_name in ('disp', 'gt_disparity') and (ext in IMAGE_EXTENSIONS or ext == '.txt'):
          # Ground Truth Disparity
          db_item = {'name': item_name, 'type': 'disparity', 'side': self.missing_str}
        elif item_name.endswith('_disparity') and ext == '.txt':
          # Stored Results
          db_item = {'name': item_name, 'type': 'result', 'side': self.missing_str}
        else:
          continue

        db_item.update({'scene': scene, 'path': item_path})
        self.db[item_id] = db_item
        item_id += 1

  def search(self, key, value):
    return [k for k, v in self.db.items() if key in v.keys() and v[key] == value]

  def multisearch(self, *keyvalues, fn=all):
    '''
    Key/value pairs; a value starting with '!' matches anything but the rest of it
    '''
    if len(keyvalues) % 2 != 0:
      raise ValueError('multisearch takes key, value pairs, got {} arguments'.format(len(keyvalues)))
    keyvalues = list(zip(keyvalues[0::2], keyvalues[1::2]))
    res = []
    for k, v in self.db.items():
      l = []
      for key, value in keyvalues:
        if value[0] == '!':
          l.append(key in v.keys() and v[key] != value[1:])
        else:
          l.append(key in v.keys() and v[key] == value)
      if fn(l):
        res.append(k)
    return res

  def scenes(self):
    return sorted(set(v['scene'] for v in self.db.values()))

  def get_pair(self, scene, type='image'):
    '''
    Returns the (left, right) items of a scene for type 'image' or 'vector'
    '''
    left_id = self.multisearch('scene', scene, 'type', type, 'side', 'left')
    right_id = self.multisearch('scene', scene, 'type', type, 'side', 'right')
    if not left_id or not right_id:
      raise KeyError('scene {} has no {} pair'.format(scene, type))
    return self.db[left_id[0]], self.db[right_id[0]]

  def get_ground_truth(self, scene):
    gt_id = self.multisearch('scene', scene, 'type', 'disparity')
    return self.db[gt_id[0]] if gt_id else None

  def __getitem__(self, key):
    if type(key) in [list, tuple]:
      return [self.db[self.__keytransform__(k)] for k in key]
    return self.db[self.__keytransform__(key)]

  def __setitem__(self, key, value):
    self.db[self.__keytransform__(key)] = value

  def __delitem__(self, key):
    del self.db[self.__keytransform__(key)]

  def __iter__(self):
    return iter(self.db)

  def __len__(self):
    return len(self.db)

  def __keytransform__(self, key):
    return key

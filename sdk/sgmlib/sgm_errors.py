class SGMError(Exception):
  'Base class for errors raised by sgmlib'


class SGMConfigError(SGMError, ValueError):
  'Malformed pipeline configuration; raised before any pixel is processed'


class SGMShapeError(SGMError, ValueError):
  'Stereo inputs disagree with each other or with the configured frame geometry'

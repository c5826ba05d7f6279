from os.path import realpath, dirname, join as joinpath
SDK_BASEPATH = dirname(dirname(realpath(__file__)))
SCRATCH_BASEPATH = joinpath(SDK_BASEPATH, 'scratch')
from .sgm_errors import SGMError, SGMConfigError, SGMShapeError
from .sgm_config import Parameters, SGMParameters, load_config, parameters_from_config
from .sgm_paths import Direction, Paths, SGMPaths, N, NE, E, SE, S, SW, W, NW
from .sgm_cost import compute_costs, cost_vector
from .sgm_aggregate import accept, aggregate_costs, aggregate_direction, get_path_cost
from .sgm_select import select_disparity, select_disparity_vector
from .sgm_stream import StreamingSGM, PathAggregator, ScanPosition, PixelSample, DisparityResult, raster_samples
from .sgm_pipeline import batch_disparity, stream_disparity, compute_disparity
from .sgm_db import StereoDB

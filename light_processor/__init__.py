from .config import CAPACITY, GRID_SIDE, CHANNELS, BATCH_SIZE, ProcessorConfig, load_config
from .errors import LightProcessorError, UnsupportedFormatError, IngestionError
from .registry import Word, WordRegistry
from .encoder import VisualEncoder
from .walker import PredictionWalker
from .pipeline import IngestionPipeline, IngestionReport, MutationQueue
from .processor import LightProcessor

__all__ = [
    'CAPACITY',
    'GRID_SIDE',
    'CHANNELS',
    'BATCH_SIZE',
    'ProcessorConfig',
    'load_config',
    'LightProcessorError',
    'UnsupportedFormatError',
    'IngestionError',
    'Word',
    'WordRegistry',
    'VisualEncoder',
    'PredictionWalker',
    'IngestionPipeline',
    'IngestionReport',
    'MutationQueue',
    'LightProcessor',
]

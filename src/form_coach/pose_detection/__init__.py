from .base_detector import BasePoseSource
from .landmark_file_source import JsonLinesPoseSource

__all__ = ['BasePoseSource', 'JsonLinesPoseSource']

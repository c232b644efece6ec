# Stages package

from stages.analyzer import DatasetAnalyzer
from stages.base import StageResult
from stages.cleaner import DatasetCleaner
from stages.harmonizer import SchemaHarmonizer
from stages.merger import DatasetMerger
from stages.reporter import DatasetReporter
from stages.rules import CleaningRule, ValidationRule
from stages.validator import DatasetValidator

__all__ = [
    "CleaningRule",
    "DatasetAnalyzer",
    "DatasetCleaner",
    "DatasetMerger",
    "DatasetReporter",
    "DatasetValidator",
    "SchemaHarmonizer",
    "StageResult",
    "ValidationRule",
]

#!/usr/bin/env python3
"""
Stats package for per-player behavioral counters and classification.
"""

from src.stats.aggregator import StatsAggregator, compute_increments
from src.stats.classifier import classify, confidence_bucket, confidence_label

__all__ = ['StatsAggregator', 'compute_increments', 'classify', 'confidence_bucket', 'confidence_label']

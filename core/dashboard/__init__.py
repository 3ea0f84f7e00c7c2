"""
Dashboard metrics module
Aggregates datamart rows into persona-specific indicators, with synthetic
fallbacks when history is missing
"""

from .aggregator import MetricsAggregator
from .keys import ApplicationKey, ById, ByName, parse_application_key
from .results import DashboardResult, collect
from .synthesizer import RandomTrendSynthesizer, SyntheticCweProvider, TrendSynthesizer

__all__ = [
    'MetricsAggregator',
    'ApplicationKey',
    'ById',
    'ByName',
    'parse_application_key',
    'DashboardResult',
    'collect',
    'RandomTrendSynthesizer',
    'SyntheticCweProvider',
    'TrendSynthesizer'
]

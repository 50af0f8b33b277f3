from .cache import StatsCache
from .github_client import GitHubClient, Profile, RepositorySummary, UpstreamError
from .stats import AggregateResult, StatsAggregator, aggregate, get_default_aggregator

__all__ = [
    'AggregateResult',
    'GitHubClient',
    'Profile',
    'RepositorySummary',
    'StatsAggregator',
    'StatsCache',
    'UpstreamError',
    'aggregate',
    'get_default_aggregator',
]

"""
Aggregation of GitHub profile and repository data into card statistics.
"""
import logging
import threading
from collections import Counter
from dataclasses import dataclass, asdict, field
from typing import Dict, List, Optional

from .cache import StatsCache
from .github_client import GitHubClient, Profile, RepositorySummary

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AggregateResult:
    """Profile, repositories and the totals derived from them."""
    profile: Profile
    repositories: List[RepositorySummary]
    total_stars: int
    total_forks: int
    language_counts: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> Dict:
        """Serialize to the JSON shape served by /api/stats."""
        return {
            'user': asdict(self.profile),
            'repos': [asdict(repo) for repo in self.repositories],
            'totalStars': self.total_stars,
            'totalForks': self.total_forks,
            'languages': dict(self.language_counts),
        }


def aggregate(profile: Profile, repositories: List[RepositorySummary]) -> AggregateResult:
    """Compute totals and the per-language repository count."""
    total_stars = sum(repo.stargazers_count for repo in repositories)
    total_forks = sum(repo.forks_count for repo in repositories)
    language_counts = Counter(repo.language for repo in repositories if repo.language)

    return AggregateResult(
        profile=profile,
        repositories=list(repositories),
        total_stars=total_stars,
        total_forks=total_forks,
        language_counts=dict(language_counts),
    )


class StatsAggregator:
    """Fetches a user's profile and repositories and aggregates them, with caching."""

    def __init__(self, client: Optional[GitHubClient] = None, cache: Optional[StatsCache] = None):
        self.client = client or GitHubClient()
        self.cache = cache if cache is not None else StatsCache()

    def fetch_stats(self, username: str) -> AggregateResult:
        """
        Return aggregated stats for username.

        Raises UpstreamError if either the profile or the repository request
        fails. The handle length is validated by the caller.
        """
        return self.cache.get_or_compute(username, lambda: self._fetch(username))

    def _fetch(self, username: str) -> AggregateResult:
        logger.info("Fetching GitHub stats for %s", username)
        profile = self.client.get_user(username)
        repositories = self.client.get_repositories(username)
        return aggregate(profile, repositories)


_default_aggregator: Optional[StatsAggregator] = None
_default_lock = threading.Lock()


def get_default_aggregator() -> StatsAggregator:
    """Process-wide aggregator sharing one cache across requests."""
    global _default_aggregator
    with _default_lock:
        if _default_aggregator is None:
            _default_aggregator = StatsAggregator()
    return _default_aggregator

"""
GitHub API client for fetching user profiles and repositories.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, List, Optional
from urllib.parse import quote

import requests
from django.conf import settings

logger = logging.getLogger(__name__)


class UpstreamError(ValueError):
    """Raised when the GitHub API does not answer with a successful response."""

    def __init__(self, status: Optional[int], message: str = ''):
        self.status = status
        super().__init__(message or f"GitHub API error: {status}")


@dataclass(frozen=True)
class Profile:
    """Profile fields for a GitHub user. Missing values stay None."""
    login: str
    name: Optional[str] = None
    bio: Optional[str] = None
    avatar_url: Optional[str] = None
    followers: Optional[int] = None
    following: Optional[int] = None
    public_repos: Optional[int] = None

    @classmethod
    def from_api(cls, data: Dict) -> 'Profile':
        return cls(
            login=data['login'],
            name=data.get('name'),
            bio=data.get('bio'),
            avatar_url=data.get('avatar_url'),
            followers=data.get('followers'),
            following=data.get('following'),
            public_repos=data.get('public_repos'),
        )


@dataclass(frozen=True)
class RepositorySummary:
    """A single repository as listed by the GitHub API."""
    name: str
    description: Optional[str] = None
    stargazers_count: int = 0
    forks_count: int = 0
    open_issues_count: int = 0
    language: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_api(cls, data: Dict) -> 'RepositorySummary':
        return cls(
            name=data['name'],
            description=data.get('description'),
            stargazers_count=data.get('stargazers_count') or 0,
            forks_count=data.get('forks_count') or 0,
            open_issues_count=data.get('open_issues_count') or 0,
            language=data.get('language'),
            updated_at=data.get('updated_at'),
        )


class GitHubClient:
    """Client for interacting with GitHub API."""

    BASE_URL = "https://api.github.com"
    MAX_REPOSITORIES = 100

    def __init__(self, token: Optional[str] = None, base_url: Optional[str] = None,
                 timeout: Optional[float] = None):
        self.token = token or getattr(settings, 'GITHUB_TOKEN', None)
        self.base_url = (base_url or getattr(settings, 'GITHUB_API_URL', None) or self.BASE_URL).rstrip('/')
        self.timeout = timeout or getattr(settings, 'GITHUB_API_TIMEOUT', 10)
        self.headers = {
            'Accept': 'application/vnd.github.v3+json',
        }
        if self.token:
            self.headers['Authorization'] = f'Bearer {self.token}'

    def _get(self, endpoint: str, params: Optional[Dict] = None):
        """Make a GET request to GitHub API and return the decoded JSON body."""
        url = f"{self.base_url}{endpoint}"
        try:
            response = requests.get(url, headers=self.headers, params=params, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except requests.exceptions.HTTPError as e:
            raise self._http_error(e.response, endpoint) from e
        except requests.exceptions.JSONDecodeError as e:
            raise UpstreamError(None, f"Invalid JSON from GitHub API for {endpoint}") from e
        except requests.exceptions.RequestException as e:
            raise UpstreamError(None, f"Network error: {e}") from e

    def _http_error(self, response, endpoint: str) -> UpstreamError:
        status = response.status_code
        if status == 404:
            return UpstreamError(status, f"GitHub resource not found: {endpoint}")
        if status in (403, 429) and response.headers.get('X-RateLimit-Remaining') == '0':
            message = "GitHub API rate limit exceeded"
            message += " (authenticated)." if self.token else " (no token configured)."
            reset = response.headers.get('X-RateLimit-Reset')
            if reset and reset.isdigit():
                reset_time = datetime.fromtimestamp(int(reset), tz=timezone.utc)
                message += f" Resets at {reset_time.strftime('%H:%M:%S UTC')}"
            return UpstreamError(status, message)
        return UpstreamError(status, f"GitHub API error: {status}")

    def get_user(self, username: str) -> Profile:
        """Fetch the public profile of a user."""
        data = self._get(f"/users/{quote(username, safe='')}")
        try:
            return Profile.from_api(data)
        except (KeyError, TypeError, AttributeError) as e:
            raise UpstreamError(None, f"Unexpected profile payload for '{username}'") from e

    def get_repositories(self, username: str) -> List[RepositorySummary]:
        """Fetch the most recently updated repositories of a user (one page, up to 100)."""
        data = self._get(
            f"/users/{quote(username, safe='')}/repos",
            {"per_page": self.MAX_REPOSITORIES, "sort": "updated"},
        )
        if not isinstance(data, list):
            raise UpstreamError(None, f"Unexpected repository payload for '{username}'")
        try:
            return [RepositorySummary.from_api(repo) for repo in data[:self.MAX_REPOSITORIES]]
        except (KeyError, TypeError, AttributeError) as e:
            raise UpstreamError(None, f"Unexpected repository payload for '{username}'") from e

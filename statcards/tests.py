"""
Tests for the statcards app.
"""
import json
import os
import tempfile
import threading
from io import StringIO
from unittest.mock import MagicMock, patch

import requests
from django.core.cache import caches
from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import SimpleTestCase, TestCase, Client, override_settings

from .cards import UnsupportedCardType, build_user_card, error_card, render_card, render_user_card
from .services.cache import StatsCache
from .services.github_client import GitHubClient, Profile, RepositorySummary, UpstreamError
from .services.stats import StatsAggregator, aggregate
from .themes import DEFAULT_THEME, THEMES, get_theme


OCTOCAT_USER = {
    'login': 'octocat',
    'name': 'The Octocat',
    'bio': "GitHub's mascot",
    'avatar_url': 'https://avatars.githubusercontent.com/u/583231',
    'followers': 4523,
    'following': 9,
    'public_repos': 8,
}

OCTOCAT_REPOS = [
    {'name': 'Hello-World', 'description': 'My first repository', 'stargazers_count': 2000,
     'forks_count': 1000, 'open_issues_count': 3, 'language': 'Ruby', 'updated_at': '2024-05-01T00:00:00Z'},
    {'name': 'Spoon-Knife', 'description': None, 'stargazers_count': 845,
     'forks_count': 253, 'open_issues_count': 0, 'language': 'HTML', 'updated_at': '2024-04-01T00:00:00Z'},
    {'name': 'octocat.github.io', 'description': None, 'stargazers_count': 0,
     'forks_count': 0, 'open_issues_count': 0, 'language': None, 'updated_at': '2024-03-01T00:00:00Z'},
]


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


def make_response(status, payload=None, headers=None):
    response = requests.Response()
    response.status_code = status
    response._content = json.dumps(payload).encode('utf-8') if payload is not None else b''
    response.headers.update(headers or {})
    return response


def fake_github(users=None, repos=None, statuses=None):
    """Build a requests.get replacement routing on the URL path."""
    users = users if users is not None else {'octocat': OCTOCAT_USER}
    repos = repos if repos is not None else {'octocat': OCTOCAT_REPOS}
    statuses = statuses or {}

    def fake_get(url, headers=None, params=None, timeout=None):
        path = url.replace('https://api.github.com', '')
        if path in statuses:
            return make_response(statuses[path], {'message': 'error'})
        parts = path.strip('/').split('/')
        if len(parts) == 2 and parts[1] in users:
            return make_response(200, users[parts[1]])
        if len(parts) == 3 and parts[2] == 'repos' and parts[1] in repos:
            return make_response(200, repos[parts[1]])
        return make_response(404, {'message': 'Not Found'})

    return MagicMock(side_effect=fake_get)


class ThemeTests(SimpleTestCase):
    """Tests for theme resolution."""

    def test_get_theme_known(self):
        """Test looking up a known theme."""
        theme = get_theme('light')
        self.assertEqual(theme.id, 'light')
        self.assertEqual(theme.background, '#ffffff')
        self.assertEqual(theme.border, '#e1e4e8')

    def test_get_theme_dark_palette(self):
        """Test the dark theme palette values."""
        self.assertEqual(get_theme('dark').palette(), {
            'background': '#0d1117',
            'border': '#30363d',
            'title': '#c9d1d9',
            'text': '#8b949e',
            'value': '#c9d1d9',
        })

    def test_get_theme_invalid_returns_dark(self):
        """Test unknown theme names fall back to dark."""
        for name in ('purple', '', None, 'Dark', 'LIGHT', ' light'):
            self.assertEqual(get_theme(name).palette(), get_theme('dark').palette())
        self.assertEqual(DEFAULT_THEME, 'dark')

    def test_get_theme_is_idempotent(self):
        """Test repeated lookups return the same palette."""
        for name in list(THEMES) + ['purple']:
            self.assertEqual(get_theme(name).palette(), get_theme(name).palette())

    def test_gradient_theme_has_stops(self):
        """Test gradient theme carries its gradient stops."""
        theme = get_theme('gradient')
        self.assertEqual(theme.background, 'url(#gradient)')
        self.assertEqual(len(theme.gradient_stops), 2)


class StatsCacheTests(SimpleTestCase):
    """Tests for the stats cache."""

    def setUp(self):
        caches['stats'].clear()

    def test_set_and_get(self):
        """Test storing and reading a value."""
        cache = StatsCache(timeout=3600, clock=FakeClock())
        cache.set('octocat', 'stats')
        self.assertEqual(cache.get('octocat'), 'stats')
        self.assertIsNone(cache.get('ghost'))

    def test_entry_expires_after_timeout(self):
        """Test entries expire once the clock reaches the timeout."""
        clock = FakeClock()
        cache = StatsCache(timeout=3600, clock=clock)
        cache.set('octocat', 'stats')
        clock.now += 3599
        self.assertEqual(cache.get('octocat'), 'stats')
        clock.now += 1
        self.assertIsNone(cache.get('octocat'))

    def test_expired_entry_removed_from_backend(self):
        """Test reading an expired entry deletes it from the Django cache."""
        clock = FakeClock()
        cache = StatsCache(timeout=10, clock=clock)
        cache.set('octocat', 'stats')
        self.assertEqual(caches['stats'].get('github_stats_octocat')[0], 'stats')
        clock.now += 10
        self.assertIsNone(cache.get('octocat'))
        self.assertIsNone(caches['stats'].get('github_stats_octocat'))

    def test_get_or_compute_caches_value(self):
        """Test a computed value is reused."""
        cache = StatsCache(timeout=60, clock=FakeClock())
        compute = MagicMock(return_value='stats')
        self.assertEqual(cache.get_or_compute('octocat', compute), 'stats')
        self.assertEqual(cache.get_or_compute('octocat', compute), 'stats')
        compute.assert_called_once()

    def test_get_or_compute_does_not_cache_failure(self):
        """Test a failed computation is not cached."""
        cache = StatsCache(timeout=60, clock=FakeClock())
        compute = MagicMock(side_effect=[UpstreamError(502), 'stats'])
        with self.assertRaises(UpstreamError):
            cache.get_or_compute('octocat', compute)
        self.assertEqual(cache.get_or_compute('octocat', compute), 'stats')
        self.assertEqual(compute.call_count, 2)

    def test_concurrent_callers_share_one_computation(self):
        """Test concurrent misses trigger a single computation."""
        cache = StatsCache(timeout=60)
        calls = []
        started = threading.Event()
        release = threading.Event()
        results = []

        def compute():
            calls.append(1)
            started.set()
            release.wait(5)
            return 'stats'

        def worker():
            results.append(cache.get_or_compute('octocat', compute))

        threads = [threading.Thread(target=worker) for _ in range(5)]
        for thread in threads:
            thread.start()
        started.wait(5)
        release.set()
        for thread in threads:
            thread.join(5)

        self.assertEqual(len(calls), 1)
        self.assertEqual(results, ['stats'] * 5)

    def test_waiters_after_failed_computation_share_one_retry(self):
        """Test callers queued behind a failed computation retry only once."""
        cache = StatsCache(timeout=60)
        calls = []
        started = threading.Event()
        release = threading.Event()
        results = []
        errors = []

        def compute():
            calls.append(1)
            if len(calls) == 1:
                started.set()
                release.wait(5)
                raise UpstreamError(502)
            return 'stats'

        def worker():
            try:
                results.append(cache.get_or_compute('octocat', compute))
            except UpstreamError as e:
                errors.append(e)

        first = threading.Thread(target=worker)
        first.start()
        started.wait(5)
        waiters = [threading.Thread(target=worker) for _ in range(4)]
        for thread in waiters:
            thread.start()
        release.set()
        for thread in [first] + waiters:
            thread.join(5)

        self.assertEqual(len(calls), 2)
        self.assertEqual(len(errors), 1)
        self.assertEqual(results, ['stats'] * 4)
        self.assertEqual(cache._key_locks, {})


@override_settings(GITHUB_TOKEN=None)
class GitHubClientTests(SimpleTestCase):
    """Tests for GitHub client."""

    @patch('statcards.services.github_client.requests.get')
    def test_get_user_success(self, mock_get):
        """Test successful profile retrieval."""
        mock_get.return_value = make_response(200, OCTOCAT_USER)

        profile = GitHubClient().get_user('octocat')

        self.assertEqual(profile.login, 'octocat')
        self.assertEqual(profile.name, 'The Octocat')
        self.assertEqual(profile.followers, 4523)
        url = mock_get.call_args[0][0]
        self.assertEqual(url, 'https://api.github.com/users/octocat')
        headers = mock_get.call_args[1]['headers']
        self.assertEqual(headers['Accept'], 'application/vnd.github.v3+json')
        self.assertNotIn('Authorization', headers)

    @patch('statcards.services.github_client.requests.get')
    def test_missing_profile_fields_stay_unknown(self, mock_get):
        """Test absent profile fields are kept as None."""
        mock_get.return_value = make_response(200, {'login': 'octocat'})

        profile = GitHubClient().get_user('octocat')

        self.assertIsNone(profile.name)
        self.assertIsNone(profile.public_repos)

    @patch('statcards.services.github_client.requests.get')
    def test_token_sent_as_bearer(self, mock_get):
        """Test the token is sent as a bearer header."""
        mock_get.return_value = make_response(200, OCTOCAT_USER)

        GitHubClient(token='secret').get_user('octocat')

        headers = mock_get.call_args[1]['headers']
        self.assertEqual(headers['Authorization'], 'Bearer secret')

    @override_settings(GITHUB_TOKEN='from-settings')
    @patch('statcards.services.github_client.requests.get')
    def test_token_read_from_settings(self, mock_get):
        """Test the token defaults to the GITHUB_TOKEN setting."""
        mock_get.return_value = make_response(200, OCTOCAT_USER)

        GitHubClient().get_user('octocat')

        self.assertEqual(mock_get.call_args[1]['headers']['Authorization'], 'Bearer from-settings')

    @patch('statcards.services.github_client.requests.get')
    def test_get_repositories_requests_recent_page(self, mock_get):
        """Test repositories are requested sorted by update, 100 per page."""
        mock_get.return_value = make_response(200, OCTOCAT_REPOS)

        repos = GitHubClient().get_repositories('octocat')

        self.assertEqual([repo.name for repo in repos], ['Hello-World', 'Spoon-Knife', 'octocat.github.io'])
        self.assertIsNone(repos[2].language)
        self.assertEqual(mock_get.call_args[0][0], 'https://api.github.com/users/octocat/repos')
        self.assertEqual(mock_get.call_args[1]['params'], {'per_page': 100, 'sort': 'updated'})

    @patch('statcards.services.github_client.requests.get')
    def test_username_is_quoted(self, mock_get):
        """Test the username is encoded as a single path segment."""
        mock_get.return_value = make_response(200, OCTOCAT_USER)

        GitHubClient().get_user('../orgs')

        self.assertEqual(mock_get.call_args[0][0], 'https://api.github.com/users/..%2Forgs')

    @patch('statcards.services.github_client.requests.get')
    def test_not_found_raises_upstream_error(self, mock_get):
        """Test handling of user not found."""
        mock_get.return_value = make_response(404, {'message': 'Not Found'})

        with self.assertRaises(UpstreamError) as ctx:
            GitHubClient().get_user('ghost')
        self.assertEqual(ctx.exception.status, 404)
        self.assertIsInstance(ctx.exception, ValueError)

    @patch('statcards.services.github_client.requests.get')
    def test_rate_limit_raises_upstream_error(self, mock_get):
        """Test handling of an exhausted rate limit."""
        mock_get.return_value = make_response(
            403, {'message': 'API rate limit exceeded'},
            headers={'X-RateLimit-Remaining': '0', 'X-RateLimit-Reset': '1700000000'},
        )

        with self.assertRaises(UpstreamError) as ctx:
            GitHubClient().get_repositories('octocat')
        self.assertEqual(ctx.exception.status, 403)
        self.assertIn('rate limit', str(ctx.exception))
        self.assertIn('no token configured', str(ctx.exception))

    @patch('statcards.services.github_client.requests.get')
    def test_network_error_raises_upstream_error(self, mock_get):
        """Test handling of connection failures."""
        mock_get.side_effect = requests.ConnectionError('connection refused')

        with self.assertRaises(UpstreamError) as ctx:
            GitHubClient().get_user('octocat')
        self.assertIsNone(ctx.exception.status)

    @patch('statcards.services.github_client.requests.get')
    def test_unexpected_payload_raises_upstream_error(self, mock_get):
        """Test handling of a malformed repository payload."""
        mock_get.return_value = make_response(200, {'message': 'not a list'})

        with self.assertRaises(UpstreamError):
            GitHubClient().get_repositories('octocat')


class AggregateTests(SimpleTestCase):
    """Tests for stats aggregation."""

    def setUp(self):
        self.profile = Profile.from_api(OCTOCAT_USER)
        self.repos = [RepositorySummary.from_api(repo) for repo in OCTOCAT_REPOS]

    def test_totals_are_sums_over_repositories(self):
        """Test star and fork totals."""
        stats = aggregate(self.profile, self.repos)
        self.assertEqual(stats.total_stars, 2845)
        self.assertEqual(stats.total_forks, 1253)

    def test_language_counts_skip_missing_language(self):
        """Test repositories without a language are not counted."""
        repos = self.repos + [RepositorySummary(name='extra', language='Ruby')]
        stats = aggregate(self.profile, repos)
        self.assertEqual(stats.language_counts, {'Ruby': 2, 'HTML': 1})
        self.assertEqual(sum(stats.language_counts.values()),
                         len([repo for repo in repos if repo.language]))

    def test_empty_repositories(self):
        """Test aggregation of a user without repositories."""
        stats = aggregate(self.profile, [])
        self.assertEqual(stats.total_stars, 0)
        self.assertEqual(stats.total_forks, 0)
        self.assertEqual(stats.language_counts, {})

    def test_to_dict(self):
        """Test the JSON serialization shape."""
        data = aggregate(self.profile, self.repos).to_dict()
        self.assertEqual(data['user']['login'], 'octocat')
        self.assertEqual(data['totalStars'], 2845)
        self.assertEqual(data['totalForks'], 1253)
        self.assertEqual(data['languages'], {'Ruby': 1, 'HTML': 1})
        self.assertEqual(len(data['repos']), 3)
        self.assertEqual(data['repos'][0]['stargazers_count'], 2000)


class StatsAggregatorTests(SimpleTestCase):
    """Tests for the cached aggregator."""

    def setUp(self):
        caches['stats'].clear()
        self.clock = FakeClock()
        self.client = MagicMock()
        self.client.get_user.return_value = Profile.from_api(OCTOCAT_USER)
        self.client.get_repositories.return_value = [RepositorySummary.from_api(r) for r in OCTOCAT_REPOS]
        self.aggregator = StatsAggregator(self.client, StatsCache(timeout=3600, clock=self.clock))

    def test_fetch_stats(self):
        """Test fetching profile and repositories."""
        stats = self.aggregator.fetch_stats('octocat')
        self.assertEqual(stats.total_stars, 2845)
        self.client.get_user.assert_called_once_with('octocat')
        self.client.get_repositories.assert_called_once_with('octocat')

    def test_results_cached_within_window(self):
        """Test repeated calls within the window reuse the result."""
        first = self.aggregator.fetch_stats('octocat')
        self.clock.now += 1800
        second = self.aggregator.fetch_stats('octocat')
        self.assertEqual(first, second)
        self.assertEqual(self.client.get_user.call_count, 1)

    def test_results_refetched_after_expiry(self):
        """Test stats are fetched again after expiry."""
        self.aggregator.fetch_stats('octocat')
        self.clock.now += 3600
        self.aggregator.fetch_stats('octocat')
        self.assertEqual(self.client.get_user.call_count, 2)

    def test_profile_failure_propagates(self):
        """Test a profile failure is raised to the caller."""
        self.client.get_user.side_effect = UpstreamError(404)
        with self.assertRaises(UpstreamError):
            self.aggregator.fetch_stats('ghost')

    def test_repository_failure_is_not_cached(self):
        """Test a repository failure does not poison the cache."""
        self.client.get_repositories.side_effect = [UpstreamError(500), self.client.get_repositories.return_value]
        with self.assertRaises(UpstreamError):
            self.aggregator.fetch_stats('octocat')
        self.assertEqual(self.aggregator.fetch_stats('octocat').total_forks, 1253)


class CardTests(SimpleTestCase):
    """Tests for SVG card rendering."""

    def setUp(self):
        self.stats = aggregate(
            Profile.from_api(OCTOCAT_USER),
            [RepositorySummary.from_api(repo) for repo in OCTOCAT_REPOS],
        )

    def test_user_card_contains_formatted_values(self):
        """Test the card shows grouped numbers."""
        svg = build_user_card(self.stats, 'octocat', get_theme('dark'))
        self.assertIn('width="400" height="200"', svg)
        self.assertIn('2,845', svg)
        self.assertIn('4,523', svg)
        self.assertIn('1,253', svg)
        self.assertIn('The Octocat', svg)
        self.assertIn('#0d1117', svg)

    def test_title_and_subtitle_fallbacks(self):
        """Test handle and default subtitle are used when name and bio are missing."""
        stats = aggregate(Profile(login='octocat'), [])
        svg = build_user_card(stats, 'octocat', get_theme('light'))
        self.assertIn('>octocat</text>', svg)
        self.assertIn('GitHub stats for @octocat', svg)

    def test_user_text_is_escaped(self):
        """Test user supplied text is escaped."""
        stats = aggregate(Profile(login='x', name='<script>alert(1)</script>'), [])
        svg = build_user_card(stats, 'x', get_theme('dark'))
        self.assertNotIn('<script>', svg)
        self.assertIn('&lt;script&gt;', svg)

    def test_long_bio_is_truncated(self):
        """Test long bios are shortened."""
        stats = aggregate(Profile(login='x', bio='a' * 200), [])
        svg = build_user_card(stats, 'x', get_theme('dark'))
        self.assertNotIn('a' * 61, svg)
        self.assertIn('…', svg)

    def test_gradient_theme_defines_gradient(self):
        """Test the gradient theme emits its gradient definition."""
        svg = build_user_card(self.stats, 'octocat', get_theme('gradient'))
        self.assertIn('<linearGradient id="gradient"', svg)
        self.assertIn('url(#gradient)', svg)
        self.assertNotIn('linearGradient', build_user_card(self.stats, 'octocat', get_theme('dark')))

    def test_render_user_card_failure_returns_error_card(self):
        """Test fetch failures render the error card."""
        aggregator = MagicMock()
        aggregator.fetch_stats.side_effect = UpstreamError(404)
        svg = render_user_card('ghost', 'dark', aggregator)
        self.assertIn('height="120"', svg)
        self.assertIn('Error loading GitHub stats', svg)
        self.assertIn('Please check the username and try again.', svg)

    def test_render_user_card_unknown_theme_matches_dark(self):
        """Test an unknown theme renders like dark."""
        aggregator = MagicMock()
        aggregator.fetch_stats.return_value = self.stats
        self.assertEqual(
            render_user_card('octocat', 'purple', aggregator),
            render_user_card('octocat', 'dark', aggregator),
        )

    def test_render_card_unsupported_types(self):
        """Test unimplemented card types are rejected."""
        for card_type in ('repo', 'languages', 'contributions'):
            with self.assertRaises(UnsupportedCardType) as ctx:
                render_card(card_type, 'octocat', 'dark', MagicMock())
            self.assertIn(card_type, str(ctx.exception))

    def test_error_card(self):
        """Test the generic error card."""
        svg = error_card('Error generating image', 'Please check the parameters and try again.')
        self.assertIn('width="400" height="120"', svg)
        self.assertIn('#f8d7da', svg)
        self.assertIn('Error generating image', svg)


@override_settings(GITHUB_TOKEN=None)
class ViewTests(TestCase):
    """Tests for the API views."""

    def setUp(self):
        self.client = Client()
        caches['stats'].clear()
        self.aggregator = StatsAggregator(GitHubClient(), StatsCache(timeout=3600))
        patcher = patch('statcards.views.get_default_aggregator', return_value=self.aggregator)
        patcher.start()
        self.addCleanup(patcher.stop)

    @patch('statcards.services.github_client.requests.get', new_callable=fake_github)
    def test_stats_view_success(self, mock_get):
        """Test stats JSON for a known user."""
        response = self.client.get('/api/stats', {'username': 'octocat'})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response['Content-Type'], 'application/json')
        data = response.json()
        self.assertEqual(data['totalStars'], 2845)
        self.assertEqual(data['totalForks'], 1253)
        self.assertEqual(data['languages'], {'Ruby': 1, 'HTML': 1})
        self.assertEqual(data['user']['followers'], 4523)

    def test_stats_view_missing_username(self):
        """Test stats view without a username."""
        response = self.client.get('/api/stats')
        self.assertEqual(response.status_code, 400)
        data = response.json()
        self.assertEqual(data['error'], 'Invalid parameters')
        self.assertIn('username', data['details'])

    def test_stats_view_username_too_long(self):
        """Test stats view with an overlong username."""
        response = self.client.get('/api/stats', {'username': 'a' * 40})
        self.assertEqual(response.status_code, 400)
        self.assertIn('username', response.json()['details'])

    @patch('statcards.services.github_client.requests.get', new_callable=fake_github)
    def test_stats_view_upstream_failure(self, mock_get):
        """Test stats view when GitHub returns 404."""
        response = self.client.get('/api/stats', {'username': 'ghost'})
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {'error': 'Failed to fetch GitHub stats'})

    def test_stats_view_rejects_post(self):
        """Test stats view only accepts GET."""
        response = self.client.post('/api/stats', {'username': 'octocat'})
        self.assertEqual(response.status_code, 405)

    @patch('statcards.services.github_client.requests.get', new_callable=fake_github)
    def test_image_view_success(self, mock_get):
        """Test SVG card for a known user."""
        response = self.client.get('/api/image', {'username': 'octocat'})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response['Content-Type'], 'image/svg+xml')
        self.assertEqual(response['Cache-Control'], 'public, max-age=3600')
        svg = response.content.decode()
        self.assertIn('2,845', svg)
        self.assertIn('4,523', svg)

    @patch('statcards.services.github_client.requests.get', new_callable=fake_github)
    def test_image_view_uses_cache(self, mock_get):
        """Test repeated image requests hit GitHub once."""
        self.client.get('/api/image', {'username': 'octocat'})
        self.client.get('/api/image', {'username': 'octocat', 'theme': 'light'})
        self.assertEqual(mock_get.call_count, 2)

    def test_image_view_missing_username(self):
        """Test image view without a username."""
        response = self.client.get('/api/image')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response['Content-Type'], 'application/json')
        self.assertIn('username', response.json()['details'])

    def test_image_view_invalid_type(self):
        """Test image view with an unknown card type."""
        response = self.client.get('/api/image', {'username': 'octocat', 'type': 'badge'})
        self.assertEqual(response.status_code, 400)
        self.assertIn('type', response.json()['details'])

    def test_image_view_unsupported_type(self):
        """Test image view with an unimplemented card type."""
        response = self.client.get('/api/image', {'username': 'octocat', 'type': 'contributions'})
        self.assertEqual(response.status_code, 501)
        self.assertIn('contributions', response.json()['error'])

    @patch('statcards.services.github_client.requests.get', new_callable=fake_github)
    def test_image_view_upstream_failure_renders_error_card(self, mock_get):
        """Test image view renders the error card when GitHub returns 404."""
        response = self.client.get('/api/image', {'username': 'ghost'})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response['Content-Type'], 'image/svg+xml')
        svg = response.content.decode()
        self.assertIn('height="120"', svg)
        self.assertIn('Error loading GitHub stats', svg)

    @patch('statcards.services.github_client.requests.get', new_callable=fake_github)
    def test_image_view_theme_fallback(self, mock_get):
        """Test an unknown theme renders like dark."""
        purple = self.client.get('/api/image', {'username': 'octocat', 'theme': 'purple'})
        dark = self.client.get('/api/image', {'username': 'octocat', 'theme': 'dark'})
        self.assertEqual(purple.status_code, 200)
        self.assertEqual(purple.content, dark.content)

    @patch('statcards.views.render_card', side_effect=RuntimeError('boom'))
    def test_image_view_unexpected_error_renders_error_card(self, mock_render):
        """Test unexpected errors render the generic error card."""
        response = self.client.get('/api/image', {'username': 'octocat'})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response['Content-Type'], 'image/svg+xml')
        self.assertIn('Error generating image', response.content.decode())


class RenderCardCommandTests(SimpleTestCase):
    """Tests for the render_card management command."""

    def setUp(self):
        self.aggregator = aggregator = MagicMock()
        aggregator.fetch_stats.return_value = aggregate(
            Profile.from_api(OCTOCAT_USER),
            [RepositorySummary.from_api(repo) for repo in OCTOCAT_REPOS],
        )
        patcher = patch('statcards.management.commands.render_card.get_default_aggregator', return_value=aggregator)
        patcher.start()
        self.addCleanup(patcher.stop)

    def test_writes_svg_to_stdout(self):
        """Test the card is written to stdout."""
        out = StringIO()
        call_command('render_card', 'octocat', '--theme', 'light', stdout=out)
        self.assertIn('2,845', out.getvalue())
        self.assertIn('#ffffff', out.getvalue())

    def test_unsupported_type(self):
        """Test unimplemented card types fail."""
        with self.assertRaises(CommandError):
            call_command('render_card', 'octocat', '--type', 'repo', stdout=StringIO())

    def test_username_too_long(self):
        """Test overlong usernames fail."""
        with self.assertRaises(CommandError):
            call_command('render_card', 'a' * 40, stdout=StringIO())

    def test_writes_svg_to_file(self):
        """Test the card is written to the output file."""
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, 'card.svg')
            out = StringIO()
            call_command('render_card', 'octocat', '--output', path, stdout=out)
            with open(path, encoding='utf-8') as fh:
                self.assertIn('2,845', fh.read())
            self.assertIn('Wrote', out.getvalue())

    def test_upstream_failure_leaves_output_untouched(self):
        """Test a GitHub failure raises and keeps the existing file."""
        self.aggregator.fetch_stats.side_effect = UpstreamError(404)
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, 'card.svg')
            with open(path, 'w', encoding='utf-8') as fh:
                fh.write('<svg>previous card</svg>')
            out = StringIO()
            with self.assertRaises(CommandError):
                call_command('render_card', 'ghost', '--output', path, stdout=out)
            with open(path, encoding='utf-8') as fh:
                self.assertEqual(fh.read(), '<svg>previous card</svg>')
            self.assertNotIn('Wrote', out.getvalue())

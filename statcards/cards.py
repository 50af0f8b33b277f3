"""
SVG stat card rendering.
"""
import logging
from typing import Optional

from django.contrib.humanize.templatetags.humanize import intcomma
from django.utils.html import escape

from .services.stats import AggregateResult, StatsAggregator, get_default_aggregator
from .themes import Theme, get_theme

logger = logging.getLogger(__name__)

CARD_TYPES = ('user', 'repo', 'languages', 'contributions')
FONT_FAMILY = '-apple-system, BlinkMacSystemFont, Segoe UI, Helvetica, Arial, sans-serif'
MAX_SUBTITLE_LENGTH = 60


class UnsupportedCardType(Exception):
    """Card type is known but has no renderer yet."""

    def __init__(self, card_type: str):
        self.card_type = card_type
        super().__init__(f"Stats type '{card_type}' not yet implemented")


def format_number(value: Optional[int]) -> str:
    """Locale-aware thousands grouping; unknown counts render as 0."""
    return intcomma(value if value is not None else 0)


def _truncate(text: str, length: int = MAX_SUBTITLE_LENGTH) -> str:
    if len(text) <= length:
        return text
    return text[:length - 1].rstrip() + '…'


def _gradient_defs(theme: Theme) -> str:
    if not theme.gradient_stops:
        return ''
    start, end = theme.gradient_stops
    return f'''<defs>
    <linearGradient id="gradient" x1="0%" y1="0%" x2="100%" y2="100%">
      <stop offset="0%" stop-color="{start}" />
      <stop offset="100%" stop-color="{end}" />
    </linearGradient>
  </defs>'''


def build_user_card(stats: AggregateResult, username: str, theme: Theme) -> str:
    """Render the 400x200 user card for already aggregated stats."""
    profile = stats.profile
    title = escape(profile.name or username)
    subtitle = escape(_truncate(profile.bio or f"GitHub stats for @{username}"))

    return f'''<svg width="400" height="200" viewBox="0 0 400 200" xmlns="http://www.w3.org/2000/svg">
  {_gradient_defs(theme)}
  <style>
    .card {{ fill: {theme.background}; stroke: {theme.border}; stroke-width: 1; }}
    .title {{ fill: {theme.title_color}; font-size: 18px; font-weight: bold; font-family: {FONT_FAMILY}; }}
    .stat-label {{ fill: {theme.text_color}; font-size: 12px; font-family: {FONT_FAMILY}; }}
    .stat-value {{ fill: {theme.value_color}; font-size: 16px; font-weight: bold; font-family: {FONT_FAMILY}; }}
  </style>
  <rect class="card" x="0" y="0" width="400" height="200" rx="6" />
  <text class="title" x="20" y="30">{title}</text>
  <text class="stat-label" x="20" y="50">{subtitle}</text>

  <text class="stat-label" x="25" y="80">Stars</text>
  <text class="stat-value" x="25" y="100">{format_number(stats.total_stars)}</text>

  <text class="stat-label" x="125" y="80">Forks</text>
  <text class="stat-value" x="125" y="100">{format_number(stats.total_forks)}</text>

  <text class="stat-label" x="225" y="80">Repositories</text>
  <text class="stat-value" x="225" y="100">{format_number(profile.public_repos)}</text>

  <text class="stat-label" x="25" y="140">Followers</text>
  <text class="stat-value" x="25" y="160">{format_number(profile.followers)}</text>

  <text class="stat-label" x="125" y="140">Following</text>
  <text class="stat-value" x="125" y="160">{format_number(profile.following)}</text>
</svg>
'''


def error_card(heading: str = 'Error loading GitHub stats',
               message: str = 'Please check the username and try again.') -> str:
    """Fixed 400x120 error card."""
    return f'''<svg width="400" height="120" viewBox="0 0 400 120" xmlns="http://www.w3.org/2000/svg">
  <rect fill="#f8d7da" x="0" y="0" width="400" height="120" rx="6" />
  <text fill="#721c24" font-size="16" font-weight="bold" font-family="sans-serif" x="20" y="40">{escape(heading)}</text>
  <text fill="#721c24" font-size="14" font-family="sans-serif" x="20" y="70">{escape(message)}</text>
</svg>
'''


def render_user_card(username: str, theme: Optional[str] = 'dark',
                     aggregator: Optional[StatsAggregator] = None) -> str:
    """
    Render the user card for username.

    Any failure while fetching stats is logged and rendered as the error card,
    so callers always get a displayable SVG.
    """
    aggregator = aggregator or get_default_aggregator()
    try:
        stats = aggregator.fetch_stats(username)
    except Exception:
        logger.warning("Error generating card for %s", username, exc_info=True)
        return error_card()
    return build_user_card(stats, username, get_theme(theme))


def render_card(card_type: str, username: str, theme: Optional[str] = 'dark',
                aggregator: Optional[StatsAggregator] = None) -> str:
    """Render a card of the given type. Only the user card is implemented."""
    if card_type == 'user':
        return render_user_card(username, theme, aggregator)
    raise UnsupportedCardType(card_type)

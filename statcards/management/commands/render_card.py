"""
Render a stat card to stdout or a file.
"""
from django.core.management.base import BaseCommand, CommandError

from statcards.cards import CARD_TYPES, UnsupportedCardType, build_user_card
from statcards.forms import USERNAME_MAX_LENGTH
from statcards.services.github_client import UpstreamError
from statcards.services.stats import get_default_aggregator
from statcards.themes import DEFAULT_THEME, get_theme, get_theme_names


class Command(BaseCommand):
    help = "Render a GitHub stat card as SVG, e.g. for committing into a README."

    def add_arguments(self, parser):
        parser.add_argument('username')
        parser.add_argument(
            '--theme', default=DEFAULT_THEME,
            help="One of: %s. Unknown themes fall back to %s." % (
                ', '.join(theme_id for theme_id, _ in get_theme_names()), DEFAULT_THEME),
        )
        parser.add_argument('--type', dest='card_type', choices=CARD_TYPES, default='user')
        parser.add_argument('--output', '-o', help="Write the SVG to this file instead of stdout.")

    def handle(self, *args, **options):
        username = options['username']
        if not 1 <= len(username) <= USERNAME_MAX_LENGTH:
            raise CommandError(f"username must be 1-{USERNAME_MAX_LENGTH} characters")

        card_type = options['card_type']
        if card_type != 'user':
            raise CommandError(str(UnsupportedCardType(card_type)))

        # an upstream failure must leave any existing output file untouched
        try:
            stats = get_default_aggregator().fetch_stats(username)
        except UpstreamError as e:
            raise CommandError(f"Could not fetch GitHub stats for {username}: {e}")
        svg = build_user_card(stats, username, get_theme(options['theme']))

        output = options.get('output')
        if output:
            with open(output, 'w', encoding='utf-8') as fh:
                fh.write(svg)
            self.stdout.write(self.style.SUCCESS(f"Wrote {output}"))
        else:
            self.stdout.write(svg, ending='')

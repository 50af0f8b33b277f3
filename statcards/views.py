"""
Views for the stat card API.
"""
import logging

from django.http import HttpResponse, JsonResponse
from django.views.decorators.http import require_http_methods

from .cards import UnsupportedCardType, error_card, render_card
from .forms import ImageQueryForm, StatsQueryForm
from .services.github_client import UpstreamError
from .services.stats import get_default_aggregator

logger = logging.getLogger(__name__)

SVG_CONTENT_TYPE = 'image/svg+xml'


def _invalid_parameters(form):
    return JsonResponse({'error': 'Invalid parameters', 'details': form.error_details()}, status=400)


@require_http_methods(["GET"])
def stats_view(request):
    """
    Aggregated GitHub stats for a user as JSON.
    """
    form = StatsQueryForm(request.GET)
    if not form.is_valid():
        return _invalid_parameters(form)

    username = form.cleaned_data['username']
    try:
        stats = get_default_aggregator().fetch_stats(username)
    except UpstreamError as e:
        logger.warning("Error in stats API for %s: %s (status %s)", username, e, e.status)
        return JsonResponse({'error': 'Failed to fetch GitHub stats'}, status=500)
    except Exception:
        logger.exception("Unexpected error in stats API for %s", username)
        return JsonResponse({'error': 'Failed to fetch GitHub stats'}, status=500)

    return JsonResponse(stats.to_dict())


@require_http_methods(["GET"])
def image_view(request):
    """
    SVG stat card for embedding in READMEs.
    Fetch failures are rendered as an error card, never as an HTTP error,
    since the consumer is usually an <img> tag.
    """
    form = ImageQueryForm(request.GET)
    if not form.is_valid():
        return _invalid_parameters(form)

    username = form.cleaned_data['username']
    card_type = form.cleaned_data['type']
    try:
        svg = render_card(card_type, username, form.cleaned_data['theme'], get_default_aggregator())
    except UnsupportedCardType as e:
        return JsonResponse({'error': str(e)}, status=501)
    except Exception:
        logger.exception("Error in image API for %s", username)
        svg = error_card('Error generating image', 'Please check the parameters and try again.')
        return HttpResponse(svg, content_type=SVG_CONTENT_TYPE)

    response = HttpResponse(svg, content_type=SVG_CONTENT_TYPE)
    response['Cache-Control'] = 'public, max-age=3600'  # Cache for 1 hour
    return response

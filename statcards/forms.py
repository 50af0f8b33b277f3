"""
Query parameter validation for the card API.
"""
from django import forms

from .cards import CARD_TYPES
from .themes import DEFAULT_THEME

# GitHub's username length ceiling
USERNAME_MAX_LENGTH = 39


class StatsQueryForm(forms.Form):
    username = forms.CharField(min_length=1, max_length=USERNAME_MAX_LENGTH)

    def error_details(self):
        """Field-level errors as a JSON-serializable dict."""
        return self.errors.get_json_data()


class ImageQueryForm(StatsQueryForm):
    # unknown themes fall back to the default palette instead of failing
    theme = forms.CharField(required=False)
    type = forms.ChoiceField(choices=[(t, t) for t in CARD_TYPES], required=False)

    def clean_theme(self):
        return self.cleaned_data.get('theme') or DEFAULT_THEME

    def clean_type(self):
        return self.cleaned_data.get('type') or 'user'

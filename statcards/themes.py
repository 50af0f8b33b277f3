"""
Color themes for rendered stat cards.
"""
from typing import Dict, List, Optional, Tuple


class Theme:
    """Card palette."""

    def __init__(
        self,
        id: str,
        name: str,
        background: str,
        border: str,
        title_color: str,
        text_color: str,
        value_color: str,
        gradient_stops: Optional[Tuple[str, str]] = None,
    ):
        self.id = id
        self.name = name
        self.background = background
        self.border = border
        self.title_color = title_color
        self.text_color = text_color
        self.value_color = value_color
        # start/end colors for the url(#gradient) background
        self.gradient_stops = gradient_stops

    def palette(self) -> Dict[str, str]:
        return {
            'background': self.background,
            'border': self.border,
            'title': self.title_color,
            'text': self.text_color,
            'value': self.value_color,
        }

    def __repr__(self):
        return f"<Theme {self.id}>"


# Theme registry
THEMES: Dict[str, Theme] = {
    'light': Theme(
        id='light',
        name='Light',
        background='#ffffff',
        border='#e1e4e8',
        title_color='#24292e',
        text_color='#586069',
        value_color='#24292e',
    ),
    'dark': Theme(
        id='dark',
        name='Dark',
        background='#0d1117',
        border='#30363d',
        title_color='#c9d1d9',
        text_color='#8b949e',
        value_color='#c9d1d9',
    ),
    'gradient': Theme(
        id='gradient',
        name='Gradient',
        background='url(#gradient)',
        border='rgba(255, 255, 255, 0.2)',
        title_color='#ffffff',
        text_color='rgba(255, 255, 255, 0.8)',
        value_color='#ffffff',
        gradient_stops=('#667eea', '#764ba2'),
    ),
    'transparent': Theme(
        id='transparent',
        name='Transparent',
        background='none',
        border='rgba(255, 255, 255, 0.2)',
        title_color='currentColor',
        text_color='currentColor',
        value_color='currentColor',
    ),
}

DEFAULT_THEME = 'dark'


def get_theme(theme_id: Optional[str]) -> Theme:
    """Get a theme by ID, returning default if not found."""
    return THEMES.get(theme_id, THEMES[DEFAULT_THEME])


def get_theme_names() -> List[tuple]:
    """Get list of (id, name) tuples for theme selection."""
    return [(theme.id, theme.name) for theme in THEMES.values()]

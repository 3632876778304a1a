"""
Theme renderer - Level-dependent colour tokens.

The active level's HSL bundle is emitted as CSS custom properties so every
other stylesheet can reference var(--primary) and friends.
"""

from lexlingo.classroom.progression import level_band, theme_for_level

def get_theme_css(level: int) -> str:
    """CSS variables for a level's theme (unknown levels fall back to level 1)."""
    theme = theme_for_level(level)
    return f"""
    <style>
    :root {{
        --primary: {theme.primary};
        --primary-foreground: {theme.primary_foreground};
        --accent: {theme.accent};
        --ring: {theme.ring};
    }}
    .level-badge {{
        display: inline-block;
        background: hsl(var(--primary));
        color: hsl(var(--primary-foreground));
        border-radius: 999px;
        padding: 0.2em 0.8em;
        font-weight: 600;
        font-size: 0.9em;
    }}
    </style>
    """


def render_level_badge(level: int) -> str:
    band = level_band(level)
    return f'<span class="level-badge">Level {band.level} · {band.name}</span>'

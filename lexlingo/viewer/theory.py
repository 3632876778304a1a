"""Theory renderer - Section header and reading progress."""

import html

from lexlingo.schemas import TheorySection


def get_theory_css() -> str:
    return """
    <style>
    .theory-header {
        border-bottom: 2px solid hsl(var(--primary));
        padding-bottom: 0.5em;
        margin-bottom: 1em;
    }
    .theory-position {
        color: #666;
        font-size: 0.85em;
    }
    .theory-title {
        font-size: 1.4em;
        font-weight: 600;
        color: #333;
    }
    .theory-bonus {
        background: #fff3e0;
        color: #e65100;
        border-radius: 8px;
        padding: 0.6em 1em;
        font-size: 0.9em;
    }
    </style>
    """


def render_theory_header(section: TheorySection, index: int, total: int) -> str:
    return (
        '<div class="theory-header">'
        f'<div class="theory-position">Section {index + 1} of {total}</div>'
        f'<div class="theory-title">{html.escape(section.title)}</div>'
        '</div>'
    )


def render_theory_bonus_notice(bonus_xp: int, already_passed: bool) -> str:
    """Hint shown under the navigation buttons."""
    if already_passed:
        return '<div class="theory-bonus">Theory already reviewed. No bonus this time.</div>'
    return f'<div class="theory-bonus">Finish or skip the theory to earn +{bonus_xp} XP.</div>'

"""
LexLingo Viewer - HTML rendering components for the Streamlit app.

This module provides:
- Level theme CSS variables
- Dashboard cards (profile, daily goal, tracks, topics, roadmap)
- Theory section and quiz rendering
"""

from .theme import (
    get_theme_css,
    render_level_badge,
)

from .dashboard import (
    get_dashboard_css,
    render_progress_bar,
    render_profile_card,
    render_daily_goal_footer,
    render_track_card,
    render_topic_card,
    render_roadmap,
    render_history_summary,
    AVAILABILITY_ICONS,
)

from .theory import (
    get_theory_css,
    render_theory_header,
    render_theory_bonus_notice,
)

from .quiz import (
    get_quiz_css,
    render_question,
    render_answer_feedback,
    calculate_quiz_score,
    render_quiz_score,
    render_lesson_complete,
)

__all__ = [
    # Theme
    "get_theme_css",
    "render_level_badge",
    # Dashboard
    "get_dashboard_css",
    "render_progress_bar",
    "render_profile_card",
    "render_daily_goal_footer",
    "render_track_card",
    "render_topic_card",
    "render_roadmap",
    "render_history_summary",
    "AVAILABILITY_ICONS",
    # Theory
    "get_theory_css",
    "render_theory_header",
    "render_theory_bonus_notice",
    # Quiz
    "get_quiz_css",
    "render_question",
    "render_answer_feedback",
    "calculate_quiz_score",
    "render_quiz_score",
    "render_lesson_complete",
]

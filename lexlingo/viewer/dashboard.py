"""
Dashboard renderer - Profile, daily goal, curriculum and roadmap cards.

Provides:
- Profile summary (XP, level, streak)
- Daily goal footer with progress bar
- Track and topic cards with lock state and crowns
- Level roadmap
"""

import html

from lexlingo.classroom.daily_goal import DailyGoalStatus
from lexlingo.classroom.navigator import NavigationTopic, NavigationTrack, TopicAvailability
from lexlingo.classroom.progression import (
    RoadmapEntry,
    level_band,
    progress_to_next_level,
    theme_for_level,
    xp_to_next_level,
)
from lexlingo.classroom.stats import HistorySummary
from lexlingo.schemas import Profile


AVAILABILITY_ICONS = {
    TopicAvailability.LOCKED: "🔒",
    TopicAvailability.AVAILABLE: "▶",
    TopicAvailability.IN_PROGRESS: "◐",
    TopicAvailability.COMPLETED: "✓",
}


def get_dashboard_css() -> str:
    """Get CSS styles for dashboard cards."""
    return """
    <style>
    .profile-card, .track-card, .topic-card, .roadmap-item {
        background: white;
        border: 1px solid #e0e0e0;
        border-radius: 12px;
        padding: 1em 1.2em;
        margin: 0.6em 0;
    }
    .profile-stats {
        display: flex;
        gap: 1.5em;
        font-weight: 600;
    }
    .progress-bar {
        background: #eee;
        border-radius: 999px;
        height: 10px;
        overflow: hidden;
        margin-top: 0.4em;
    }
    .progress-fill {
        background: hsl(var(--primary));
        height: 100%;
    }
    .daily-goal-footer {
        position: sticky;
        bottom: 0;
        background: hsl(var(--primary) / 0.08);
        border-top: 2px solid hsl(var(--primary));
        padding: 0.8em 1.2em;
        border-radius: 12px 12px 0 0;
    }
    .daily-goal-reached {
        color: #388E3C;
        font-weight: 600;
    }
    .card-locked {
        opacity: 0.55;
    }
    .card-title {
        font-weight: 600;
        font-size: 1.05em;
    }
    .card-meta {
        color: #666;
        font-size: 0.85em;
    }
    .roadmap-item.current {
        border: 2px solid hsl(var(--primary));
    }
    .roadmap-item.completed {
        background: #f1f8e9;
    }
    .theme-swatch {
        display: inline-block;
        width: 1em;
        height: 1em;
        border-radius: 50%;
        vertical-align: middle;
        margin-right: 0.4em;
    }
    </style>
    """


def render_progress_bar(percent: float) -> str:
    percent = max(0.0, min(100.0, percent))
    return f'<div class="progress-bar"><div class="progress-fill" style="width: {percent:.0f}%"></div></div>'


def render_profile_card(profile: Profile) -> str:
    """XP, level and streak with progress towards the next level."""
    band = level_band(profile.level)
    name = html.escape(profile.name or profile.email or "Learner")
    remaining = xp_to_next_level(profile.xp)

    parts = ['<div class="profile-card">']
    parts.append(f'<div class="card-title">{name}</div>')
    parts.append('<div class="profile-stats">')
    parts.append(f'<span>⭐ {profile.xp} XP</span>')
    parts.append(f'<span>🏅 Level {band.level} · {band.name}</span>')
    parts.append(f'<span>🔥 {profile.streak} day streak</span>')
    parts.append('</div>')
    parts.append(render_progress_bar(progress_to_next_level(profile.xp)))
    if remaining:
        parts.append(f'<div class="card-meta">{remaining} XP to the next level</div>')
    else:
        parts.append('<div class="card-meta">Top level reached</div>')
    parts.append('</div>')
    return ''.join(parts)


def render_daily_goal_footer(status: DailyGoalStatus) -> str:
    """Today's XP against the goal for the learner's level."""
    parts = ['<div class="daily-goal-footer">']
    parts.append(f'<div class="card-title">Daily goal: {status.earned_xp} / {status.goal_xp} XP</div>')
    parts.append(render_progress_bar(status.percentage))
    if status.is_goal_reached:
        parts.append('<div class="daily-goal-reached">Goal reached for today!</div>')
    else:
        parts.append(f'<div class="card-meta">{status.remaining_xp} XP to go</div>')
    parts.append('</div>')
    return ''.join(parts)


def render_track_card(nav_track: NavigationTrack) -> str:
    track = nav_track.track
    locked_class = "" if nav_track.unlocked else " card-locked"
    icon = "" if nav_track.unlocked else "🔒 "
    percent = nav_track.completed_count / nav_track.total_count * 100 if nav_track.total_count else 0

    parts = [f'<div class="track-card{locked_class}">']
    parts.append(f'<div class="card-title">{icon}{html.escape(track.title)}</div>')
    if track.description:
        parts.append(f'<div class="card-meta">{html.escape(track.description)}</div>')
    parts.append(render_progress_bar(percent))
    parts.append(
        f'<div class="card-meta">{nav_track.completed_count} of {nav_track.total_count} topics complete</div>'
    )
    parts.append('</div>')
    return ''.join(parts)


def render_topic_card(nav_topic: NavigationTopic) -> str:
    topic = nav_topic.topic
    locked_class = " card-locked" if nav_topic.locked else ""
    icon = AVAILABILITY_ICONS[nav_topic.availability]
    shown = min(nav_topic.lessons_completed, topic.total_lessons)

    parts = [f'<div class="topic-card{locked_class}">']
    parts.append(f'<div class="card-title">{icon} {html.escape(topic.title)}</div>')
    if topic.description:
        parts.append(f'<div class="card-meta">{html.escape(topic.description)}</div>')
    parts.append(render_progress_bar(nav_topic.progress_percent))
    meta = f"{shown} / {topic.total_lessons} lessons"
    if nav_topic.crowns:
        meta += f" · 👑 {nav_topic.crowns}"
    parts.append(f'<div class="card-meta">{meta}</div>')
    parts.append('</div>')
    return ''.join(parts)


def render_roadmap(entries: list[RoadmapEntry]) -> str:
    """Every level band, marking completed, current and future levels."""
    parts = []
    for entry in entries:
        band = entry.band
        theme = theme_for_level(band.level)
        if entry.is_current:
            state = "current"
        elif entry.is_completed:
            state = "completed"
        else:
            state = "future"
        xp_range = f"{band.min_xp}+ XP" if band.max_xp is None else f"{band.min_xp} – {band.max_xp} XP"

        parts.append(f'<div class="roadmap-item {state}">')
        parts.append(
            f'<span class="theme-swatch" style="background: hsl({theme.primary});"></span>'
            f'<span class="card-title">Level {band.level} · {band.name}</span>'
        )
        parts.append(f'<div class="card-meta">{xp_range}</div>')
        parts.append('</div>')
    return ''.join(parts)


def render_history_summary(summary: HistorySummary, days: int) -> str:
    return (
        '<div class="profile-card">'
        f'<div class="card-title">Last {days} days</div>'
        '<div class="profile-stats">'
        f'<span>{summary.total_days} active days</span>'
        f'<span>{summary.total_points} XP</span>'
        f'<span>{summary.average_points:.1f} XP / active day</span>'
        '</div>'
        '</div>'
    )

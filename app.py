"""
LexLingo - Gamified Legal Education

Streamlit application for studying law through short theory sections and
multiple-choice quizzes, with XP, levels, streaks and a daily goal.

Usage:
    python scripts/compile_content.py
    streamlit run app.py
"""

import logging
from datetime import datetime, timezone
from typing import Callable, Optional

import streamlit as st

from lexlingo.config import configure_logging, get_settings
from lexlingo.exceptions import LexLingoError, StoreError, TopicLocked, Unauthenticated
from lexlingo.classroom import (
    HISTORY_PERIODS,
    THEORY_BONUS_XP,
    AdminService,
    AuthEvent,
    ContentLoader,
    DailyGoalTracker,
    LessonSession,
    Navigator,
    ProgressTracker,
    ResumeManager,
    Session,
    SessionGateway,
    daily_history,
    is_admin,
    roadmap,
    summarize_history,
)
from lexlingo.schemas import LessonPhase
from lexlingo.viewer import (
    get_dashboard_css,
    get_quiz_css,
    get_theme_css,
    get_theory_css,
    render_answer_feedback,
    render_daily_goal_footer,
    render_history_summary,
    render_lesson_complete,
    render_level_badge,
    render_profile_card,
    render_question,
    render_roadmap,
    render_theory_bonus_notice,
    render_theory_header,
    render_topic_card,
    render_track_card,
)

configure_logging()
logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Configuration
# -----------------------------------------------------------------------------

st.set_page_config(
    page_title="LexLingo",
    page_icon="⚖️",
    layout="centered",
    initial_sidebar_state="expanded",
)


# -----------------------------------------------------------------------------
# Session State Initialization
# -----------------------------------------------------------------------------

def init_session_state():
    """Initialize session state variables."""
    settings = get_settings()

    if "progress" not in st.session_state:
        st.session_state.progress = ProgressTracker(settings.progress_db)

    if "loader" not in st.session_state:
        if settings.content_db.exists():
            st.session_state.loader = ContentLoader(settings.content_db)
        else:
            st.session_state.loader = None

    if "navigator" not in st.session_state and st.session_state.loader:
        st.session_state.navigator = Navigator(st.session_state.loader, st.session_state.progress)

    if "gateway" not in st.session_state:
        gateway = SessionGateway(st.session_state.progress)
        st.session_state.auth_subscription = gateway.on_auth_state_change(on_auth_state_change)
        st.session_state.gateway = gateway

    if "daily_goal" not in st.session_state:
        st.session_state.daily_goal = DailyGoalTracker(st.session_state.progress)

    if "resume" not in st.session_state:
        st.session_state.resume = ResumeManager(st.session_state.progress)

    if "view" not in st.session_state:
        st.session_state.view = "auth"  # auth, dashboard, topics, lesson, complete, roadmap, stats, admin

    for key in ("track_id", "lesson", "resume_payload", "last_result",
                "daily_status", "daily_watch", "daily_watch_key"):
        if key not in st.session_state:
            st.session_state[key] = None


def on_auth_state_change(event: AuthEvent, session: Optional[Session]):
    """Drop per-user state on every auth change; route to sign-in once signed out."""
    stop_daily_goal_watch()
    if session is None:
        for key in ("track_id", "lesson", "resume_payload", "last_result"):
            st.session_state[key] = None
        st.session_state.view = "auth"
        logger.info(f"Auth state {event.value}: routed to sign-in")


def watch_daily_goal(user_id: str):
    """Keep daily_status current for the signed-in user through change events."""
    daily_goal = st.session_state.daily_goal
    key = (user_id, daily_goal.today())
    if st.session_state.daily_watch_key == key:
        return
    stop_daily_goal_watch()

    def update(status):
        st.session_state.daily_status = status

    st.session_state.daily_status = daily_goal.get_today_progress(user_id)
    st.session_state.daily_watch = daily_goal.watch(user_id, update)
    st.session_state.daily_watch_key = key


def stop_daily_goal_watch():
    subscription = st.session_state.get("daily_watch")
    if subscription is not None:
        subscription.unsubscribe()
    st.session_state.daily_watch = None
    st.session_state.daily_watch_key = None
    st.session_state.daily_status = None


def go(view: str, **state):
    """Switch view and rerun. Leaving the lesson drops any unconsumed quiz payload."""
    for key, value in state.items():
        st.session_state[key] = value
    if view != "lesson":
        st.session_state.resume_payload = None
    st.session_state.view = view
    st.rerun()


def run_action(action: Callable, *args, **kwargs):
    """
    Run a domain action, reporting failures in the UI.

    Returns the action's result, or None when it failed.
    """
    try:
        return action(*args, **kwargs)
    except Unauthenticated:
        go("auth")
    except TopicLocked:
        st.warning("Complete the previous topic to unlock this one.")
    except StoreError as e:
        logger.error(f"Store failure in {getattr(action, '__name__', action)}: {e}")
        st.error("Could not save your progress. Please try again.")
    except LexLingoError as e:
        st.error(str(e))
    return None


def current_user_id() -> str:
    return st.session_state.gateway.require_session().user_id


# -----------------------------------------------------------------------------
# Sidebar
# -----------------------------------------------------------------------------

def render_sidebar():
    """Render the sidebar with profile summary and navigation."""
    st.sidebar.title("⚖️ LexLingo")

    session = st.session_state.gateway.get_session()
    if session is None:
        return

    profile = st.session_state.progress.get_profile(session.user_id)
    if profile:
        st.sidebar.markdown(render_level_badge(profile.level), unsafe_allow_html=True)
        st.sidebar.markdown(f"**{profile.xp} XP** · 🔥 {profile.streak}")

    st.sidebar.divider()
    if st.sidebar.button("🏠 Dashboard", use_container_width=True):
        go("dashboard", lesson=None)
    if st.sidebar.button("🗺️ Level roadmap", use_container_width=True):
        go("roadmap", lesson=None)
    if st.sidebar.button("📈 Streak stats", use_container_width=True):
        go("stats", lesson=None)
    if is_admin(session.email, get_settings()):
        if st.sidebar.button("🛠️ Admin", use_container_width=True):
            go("admin", lesson=None)

    st.sidebar.divider()
    if st.sidebar.button("Sign out", use_container_width=True):
        st.session_state.gateway.sign_out()
        st.toast("Signed out")
        st.rerun()


def render_daily_goal():
    status = st.session_state.daily_status
    if status is None:
        return
    st.markdown(render_daily_goal_footer(status), unsafe_allow_html=True)


# -----------------------------------------------------------------------------
# Auth View
# -----------------------------------------------------------------------------

def render_auth_view():
    st.title("Welcome to LexLingo")
    gateway = st.session_state.gateway

    sign_in_tab, sign_up_tab = st.tabs(["Sign in", "Create account"])

    with sign_in_tab:
        with st.form("sign_in"):
            email = st.text_input("Email")
            password = st.text_input("Password", type="password")
            if st.form_submit_button("Sign in", type="primary"):
                if run_action(gateway.sign_in, email, password):
                    st.toast("Welcome back!")
                    go("dashboard")

    with sign_up_tab:
        with st.form("sign_up"):
            name = st.text_input("Name")
            email = st.text_input("Email", key="sign_up_email")
            password = st.text_input("Password", type="password", key="sign_up_password")
            if st.form_submit_button("Create account", type="primary"):
                if run_action(gateway.sign_up, email, password, name or None):
                    st.toast("Account created!")
                    go("dashboard")


# -----------------------------------------------------------------------------
# Dashboard / Topics
# -----------------------------------------------------------------------------

def render_dashboard_view():
    user_id = current_user_id()
    nav = st.session_state.navigator

    profile = st.session_state.progress.get_profile(user_id)
    if profile:
        st.markdown(render_profile_card(profile), unsafe_allow_html=True)

    summary = nav.get_progress_summary(user_id)
    st.caption(
        f"{summary['completed_topics']}/{summary['total_topics']} topics complete "
        f"({summary['completion_percent']}%)"
    )

    st.subheader("Tracks")
    for nav_track in nav.get_track_overview(user_id):
        st.markdown(render_track_card(nav_track), unsafe_allow_html=True)
        if nav_track.unlocked:
            if st.button("Open", key=f"track_{nav_track.track.id}"):
                go("topics", track_id=nav_track.track.id)


def render_topics_view():
    user_id = current_user_id()
    nav = st.session_state.navigator
    track_id = st.session_state.track_id

    track = st.session_state.loader.get_track(track_id) if track_id is not None else None
    if track is None or not nav.is_track_available(user_id, track_id):
        go("dashboard", track_id=None)

    if st.button("← Tracks"):
        go("dashboard", track_id=None)
    st.title(track.title)

    for nav_topic in nav.get_topic_overview(user_id, track_id):
        st.markdown(render_topic_card(nav_topic), unsafe_allow_html=True)
        if not nav_topic.locked:
            if st.button("Study", key=f"topic_{nav_topic.topic.id}"):
                open_lesson(nav_topic.topic.id)


def open_lesson(topic_id: int, review_theory: bool = False):
    """Open a topic at its entry phase, restoring any saved quiz state."""
    user_id = current_user_id()
    lesson = run_action(
        LessonSession.open,
        st.session_state.navigator,
        st.session_state.loader,
        st.session_state.daily_goal,
        user_id,
        topic_id,
        review_theory=review_theory,
    )
    if lesson is None:
        return
    if lesson.phase == LessonPhase.QUIZ:
        restore_quiz(lesson)
    go("lesson", lesson=lesson)


def restore_quiz(lesson: LessonSession):
    payload = st.session_state.resume_payload
    st.session_state.resume_payload = None
    snapshot = st.session_state.resume.consume(lesson.user_id, lesson.topic.id, payload)
    if snapshot is not None:
        run_action(lesson.restore, snapshot)


# -----------------------------------------------------------------------------
# Lesson View
# -----------------------------------------------------------------------------

def render_lesson_view():
    lesson: Optional[LessonSession] = st.session_state.lesson
    if lesson is None:
        go("dashboard")

    if st.button("← Topics", disabled=lesson.busy):
        go("topics", lesson=None, track_id=lesson.topic.track_id)
    st.title(lesson.topic.title)

    if lesson.phase == LessonPhase.THEORY:
        render_theory_phase(lesson)
    elif lesson.phase == LessonPhase.QUIZ:
        render_quiz_phase(lesson)
    else:
        go("complete", last_result=lesson.result, lesson=None)


def finish_theory(lesson: LessonSession, action: Callable[[], int]):
    awarded = run_action(action)
    if awarded is None:
        return
    if awarded:
        st.toast(f"+{awarded} XP")
    restore_quiz(lesson)
    st.rerun()


def render_theory_phase(lesson: LessonSession):
    st.markdown(get_theory_css(), unsafe_allow_html=True)

    section = lesson.current_section
    if section is None:
        st.info("This topic has no theory. Skip straight to the quiz.")
    else:
        st.markdown(
            render_theory_header(section, lesson.section_index, len(lesson.sections)),
            unsafe_allow_html=True,
        )
        st.markdown(section.content)
        if section.image_url:
            st.image(section.image_url)

    col1, col2, col3 = st.columns(3)
    with col1:
        if st.button("← Previous", disabled=lesson.section_index == 0 or lesson.busy):
            run_action(lesson.previous_section)
            st.rerun()
    with col2:
        if st.button("Skip theory", disabled=lesson.busy):
            finish_theory(lesson, lesson.skip_theory)
    with col3:
        label = "Start quiz" if lesson.is_last_section else "Next →"
        if st.button(label, type="primary", disabled=lesson.busy):
            if lesson.is_last_section:
                finish_theory(lesson, lesson.complete_theory)
            else:
                run_action(lesson.next_section)
                st.rerun()

    progress = st.session_state.progress.get_topic_progress(lesson.user_id, lesson.topic.id)
    already_passed = progress is not None and progress.theory_gate_passed
    st.markdown(render_theory_bonus_notice(THEORY_BONUS_XP, already_passed), unsafe_allow_html=True)


def render_quiz_phase(lesson: LessonSession):
    st.markdown(get_quiz_css(), unsafe_allow_html=True)

    question = lesson.question
    if question is None:
        if st.button("Finish lesson", type="primary", disabled=lesson.busy):
            run_action(lesson.next_question)
            st.rerun()
        return

    st.progress(lesson.quiz_progress_percent / 100)
    st.markdown(
        render_question(question, lesson.current_question, len(lesson.questions)),
        unsafe_allow_html=True,
    )

    for index, option in enumerate(question.options):
        marker = "🔘" if lesson.selected_answer == index else "⚪"
        if st.button(
            f"{marker} {option}",
            key=f"option_{question.id}_{index}",
            use_container_width=True,
            disabled=lesson.show_feedback or lesson.busy,
        ):
            run_action(lesson.select_answer, index)
            st.rerun()

    if lesson.show_feedback:
        feedback = run_action(lesson.check_answer)
        if feedback is not None:
            st.markdown(render_answer_feedback(feedback, question), unsafe_allow_html=True)
        label = "Finish lesson" if lesson.is_last_question else "Next question →"
        if st.button(label, type="primary", disabled=lesson.busy):
            result = run_action(lesson.next_question)
            if result is not None:
                go("complete", last_result=result, lesson=None)
            st.rerun()
    else:
        if st.button("Check answer", type="primary", disabled=lesson.busy):
            run_action(lesson.check_answer)
            st.rerun()

    st.divider()
    if st.button("📖 Review theory", disabled=lesson.busy):
        payload = run_action(
            st.session_state.resume.save, lesson.user_id, lesson.topic.id, lesson.snapshot()
        )
        if payload is not None:
            st.session_state.resume_payload = payload
            open_lesson(lesson.topic.id, review_theory=True)


def render_complete_view():
    result = st.session_state.last_result
    if result is None:
        go("dashboard")

    st.title("Lesson complete! 🎉")
    st.markdown(get_quiz_css(), unsafe_allow_html=True)
    st.markdown(render_lesson_complete(result), unsafe_allow_html=True)

    col1, col2 = st.columns(2)
    with col1:
        if st.button("Study again"):
            open_lesson(result.topic_id)
    with col2:
        if st.button("Back to topics", type="primary"):
            go("topics", track_id=result.track_id, last_result=None)


# -----------------------------------------------------------------------------
# Roadmap / Stats
# -----------------------------------------------------------------------------

def render_roadmap_view():
    user_id = current_user_id()
    profile = st.session_state.progress.get_profile(user_id)
    xp = profile.xp if profile else 0

    st.title("Level roadmap")
    st.markdown(render_roadmap(roadmap(xp)), unsafe_allow_html=True)


def render_stats_view():
    user_id = current_user_id()
    profile = st.session_state.progress.get_profile(user_id)

    st.title("Streak stats")
    if profile:
        st.metric("Current streak", f"{profile.streak} days")

    days = st.radio("Period", HISTORY_PERIODS, format_func=lambda d: f"{d} days", horizontal=True)
    today = datetime.now(timezone.utc).date()
    frame = daily_history(st.session_state.progress, user_id, days, today)

    st.markdown(render_history_summary(summarize_history(frame), days), unsafe_allow_html=True)
    if frame.empty:
        st.info("No activity in this period yet.")
    else:
        st.line_chart(frame["points"])


# -----------------------------------------------------------------------------
# Admin View
# -----------------------------------------------------------------------------

def render_admin_view():
    session = st.session_state.gateway.require_session()
    if not is_admin(session.email, get_settings()):
        st.error("Admins only.")
        return

    admin = AdminService(st.session_state.progress)
    st.title("Admin")

    for profile in admin.list_users():
        label = f"{profile.name or profile.email or profile.id} · {profile.xp} XP · level {profile.level}"
        with st.expander(label):
            with st.form(f"edit_{profile.id}"):
                xp = st.number_input("XP", min_value=0, value=profile.xp, step=10)
                streak = st.number_input("Streak", min_value=0, value=profile.streak, step=1)
                if st.form_submit_button("Save"):
                    if run_action(admin.update_user, profile.id, xp=int(xp), streak=int(streak)):
                        st.toast("Profile updated")
                        st.rerun()
            if st.button("Reset all progress", key=f"reset_{profile.id}"):
                if run_action(admin.reset_user, profile.id):
                    st.toast("User reset")
                    st.rerun()


# -----------------------------------------------------------------------------
# Main App
# -----------------------------------------------------------------------------

VIEWS = {
    "dashboard": render_dashboard_view,
    "topics": render_topics_view,
    "lesson": render_lesson_view,
    "complete": render_complete_view,
    "roadmap": render_roadmap_view,
    "stats": render_stats_view,
    "admin": render_admin_view,
}


def main():
    """Main application entry point."""
    init_session_state()

    if not st.session_state.loader:
        st.error("Content database not found. Please compile the content first.")
        st.code("python scripts/compile_content.py")
        return

    session = st.session_state.gateway.get_session()
    if session is None:
        render_auth_view()
        return
    if st.session_state.view == "auth":
        st.session_state.view = "dashboard"

    profile = st.session_state.progress.get_profile(session.user_id)
    st.markdown(get_theme_css(profile.level if profile else 1), unsafe_allow_html=True)
    st.markdown(get_dashboard_css(), unsafe_allow_html=True)

    watch_daily_goal(session.user_id)
    render_sidebar()
    try:
        VIEWS[st.session_state.view]()
    except Unauthenticated:
        go("auth")
    render_daily_goal()


if __name__ == "__main__":
    main()

"""
Quiz renderer - Multiple-choice question display and results.

Provides:
- Question header with position and progress
- Answer feedback (correct / incorrect with explanation)
- Quiz scoring and lesson-complete summary
"""

import html

from lexlingo.classroom.lesson import AnswerFeedback, LessonResult
from lexlingo.schemas import Question


def get_quiz_css() -> str:
    """Get CSS styles for quiz display."""
    return """
    <style>
    .quiz-container {
        background: hsl(var(--primary) / 0.06);
        border-radius: 12px;
        padding: 1.5em;
        margin: 1.5em 0;
        border-left: 4px solid hsl(var(--primary));
    }
    .quiz-position {
        color: #666;
        font-size: 0.9em;
        margin-bottom: 0.5em;
    }
    .quiz-question {
        font-size: 1.1em;
        color: #333;
        line-height: 1.6;
    }
    .quiz-feedback {
        border-radius: 8px;
        padding: 1em;
        margin-top: 1em;
    }
    .quiz-feedback.correct {
        background: #e8f5e9;
        border-left: 4px solid #388E3C;
    }
    .quiz-feedback.incorrect {
        background: #ffebee;
        border-left: 4px solid #D32F2F;
    }
    .quiz-feedback-label {
        font-weight: 600;
        margin-bottom: 0.5em;
    }
    .quiz-score-box {
        background: #e8f5e9;
        border-radius: 8px;
        padding: 1em;
        margin-top: 1.5em;
        text-align: center;
    }
    .quiz-score-value {
        font-size: 2em;
        font-weight: 700;
        color: #388E3C;
    }
    .quiz-score-label {
        color: #666;
        font-size: 0.9em;
    }
    .quiz-xp {
        font-size: 1.3em;
        font-weight: 600;
        color: hsl(var(--primary));
    }
    </style>
    """


def render_question(question: Question, index: int, total: int) -> str:
    """
    Render the question text with its position.

    Args:
        question: Question being asked
        index: 0-based position in the quiz
        total: Number of questions in the quiz

    Returns:
        HTML string for the question card
    """
    parts = ['<div class="quiz-container">']
    parts.append(f'<div class="quiz-position">Question {index + 1} of {total}</div>')
    parts.append(f'<div class="quiz-question">{html.escape(question.question)}</div>')
    parts.append('</div>')
    return ''.join(parts)


def render_answer_feedback(feedback: AnswerFeedback, question: Question) -> str:
    """Correct/incorrect banner, naming the right option when missed."""
    css_class = "correct" if feedback.is_correct else "incorrect"
    label = "Correct!" if feedback.is_correct else "Not quite."

    parts = [f'<div class="quiz-feedback {css_class}">']
    parts.append(f'<div class="quiz-feedback-label">{label}</div>')
    if not feedback.is_correct:
        answer = question.options[feedback.correct_answer]
        parts.append(f'<div>Correct answer: <strong>{html.escape(answer)}</strong></div>')
    if feedback.explanation:
        parts.append(f'<div>{html.escape(feedback.explanation)}</div>')
    parts.append('</div>')
    return ''.join(parts)


def calculate_quiz_score(correct_count: int, total: int) -> dict:
    """
    Calculate quiz score.

    Args:
        correct_count: Number answered correctly
        total: Total questions

    Returns:
        Dict with score info
    """
    if total == 0:
        return {"score": 1.0, "percent": 100, "correct": 0, "total": 0}

    score = correct_count / total
    return {
        "score": round(score, 2),
        "percent": round(score * 100),
        "correct": correct_count,
        "total": total,
    }


def render_quiz_score(score_info: dict) -> str:
    """Render quiz score display."""
    return f"""
    <div class="quiz-score-box">
        <div class="quiz-score-value">{score_info['percent']}%</div>
        <div class="quiz-score-label">{score_info['correct']} of {score_info['total']} correct</div>
    </div>
    """


def render_lesson_complete(result: LessonResult) -> str:
    """Summary card shown after the last question."""
    score_info = calculate_quiz_score(result.correct_answers, result.total_questions)
    parts = [render_quiz_score(score_info)]
    parts.append(f'<div class="quiz-xp">+{result.xp_earned} XP</div>')
    if result.award is not None and result.award.leveled_up:
        parts.append(f'<div class="quiz-xp">Level up! You reached level {result.award.level}.</div>')
    return ''.join(parts)

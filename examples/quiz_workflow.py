"""
Quiz workflow example: Definition → Attempt → Submission → Breakdown

Demonstrates end-to-end use of the scoring components:
1. Load and validate a quiz definition (JSON shape)
2. Take the quiz through a QuizAttempt
3. Submit and score a snapshot of the answers
4. Print the per-question breakdown, including manual-review items
5. Score an answer sheet directly with the engine
"""

import json
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.config import config
from src.models import QuizAttempt, GradingStatus, score_quiz
from src.utils import load_answers, load_quiz

QUIZ_DEFINITION = {
    "quiz_id": "quiz-geo-101",
    "title": "World Capitals",
    "passing_score": 70,
    "time_limit_minutes": 15,
    "questions": [
        {
            "question_id": "q1",
            "question_text": "Which of these cities are capitals?",
            "question_type": "multiple_choice",
            "points": 10,
            "options": [
                {"option_id": "A", "text": "Ottawa", "is_correct": True},
                {"option_id": "B", "text": "Toronto", "is_correct": False},
                {"option_id": "C", "text": "Canberra", "is_correct": True},
                {"option_id": "D", "text": "Sydney", "is_correct": False},
            ],
        },
        {
            "question_id": "q2",
            "question_text": "Paris is the capital of France.",
            "question_type": "true_false",
            "points": 5,
            "options": [
                {"option_id": "T", "text": "True", "is_correct": True},
                {"option_id": "F", "text": "False", "is_correct": False},
            ],
        },
        {
            "question_id": "q3",
            "question_text": "The capital of Japan is ____.",
            "question_type": "fill_in_blank",
            "points": 5,
            "acceptable_answers": ["Tokyo", "Tōkyō"],
        },
        {
            "question_id": "q4",
            "question_text": "Match each country to its capital.",
            "question_type": "matching",
            "points": 10,
            "matching_pairs": [
                {"prompt": "Kenya", "answer": "Nairobi"},
                {"prompt": "Peru", "answer": "Lima"},
            ],
        },
        {
            "question_id": "q5",
            "question_text": "Why are capitals often not the largest city?",
            "question_type": "essay",
            "points": 20,
            "min_words": 25,
        },
    ],
}


def main():
    config.configure_logging()

    # ==================== Step 1: Load Quiz ====================
    print("=" * 60)
    print("STEP 1: Loading Quiz Definition")
    print("=" * 60)

    quiz = load_quiz(QUIZ_DEFINITION)
    print(f"✓ Loaded '{quiz.title}' ({len(quiz.questions)} questions, {quiz.total_points} points)")
    print(f"  Passing score: {quiz.passing_score}%")
    print(f"  Time limit: {quiz.time_limit_minutes} minutes")
    print()

    # ==================== Step 2: Take Quiz ====================
    print("=" * 60)
    print("STEP 2: Taking the Quiz")
    print("=" * 60)

    attempt = QuizAttempt(quiz, learner_id="learner-demo")
    attempt.toggle_option("q1", "A")
    attempt.toggle_option("q1", "C")
    attempt.select_option("q2", "T")
    attempt.set_text("q3", "  tokyo ")
    attempt.set_match("q4", 0, "Nairobi")
    attempt.set_match("q4", 1, "Lima")
    attempt.set_text("q5", "Capitals are frequently chosen as compromise sites.")

    print(f"✓ Answered {attempt.answered_count()}/{len(quiz.questions)} questions")
    print(f"  Ready to submit: {attempt.can_submit()}")
    print(f"  Time remaining: {attempt.time_remaining_seconds()}s")
    print()

    # ==================== Step 3: Submit ====================
    print("=" * 60)
    print("STEP 3: Submitting")
    print("=" * 60)

    result = attempt.submit()
    print(f"✓ Score: {result.earned_points}/{result.total_points} ({result.percentage}%)")
    print(f"  {'PASSED' if result.passed else 'NOT PASSED'}")
    if result.has_pending_review:
        print(f"  Provisional (auto-graded only): {result.auto_graded_percentage}%")
        print(f"  Awaiting teacher review: {', '.join(result.pending_review_ids)}")
    print()

    # ==================== Step 4: Breakdown ====================
    print("=" * 60)
    print("STEP 4: Per-question Breakdown")
    print("=" * 60)

    icons = {
        GradingStatus.CORRECT: "✓",
        GradingStatus.INCORRECT: "✗",
        GradingStatus.PENDING_MANUAL_REVIEW: "…",
    }
    for outcome in result.outcomes:
        line = (
            f"  {icons[outcome.status]} {outcome.question_id} "
            f"[{outcome.question_type.display_name}] "
            f"{outcome.points_earned}/{outcome.points_possible}"
        )
        if outcome.word_count is not None:
            line += f" ({outcome.word_count} words, minimum met: {outcome.meets_min_words})"
        print(line)
    print()

    # ==================== Step 5: Answer Sheet ====================
    print("=" * 60)
    print("STEP 5: Scoring an Answer Sheet")
    print("=" * 60)

    sheet = {
        "quiz_id": quiz.quiz_id,
        "answers": {
            "q1": {"selected_option_ids": ["A"]},
            "q2": {"selected_option_ids": ["T"]},
            "q3": {"response_text": "Kyoto"},
        },
    }
    sheet_result = score_quiz(quiz, load_answers(sheet))
    print(json.dumps(sheet_result.to_dict(), indent=2))


if __name__ == "__main__":
    main()

"""
Unit tests for the quiz scoring engine.

Tests:
- Choice questions graded by exact set equality
- Text questions: trimming, case sensitivity, accepted answers
- Matching and essay always pending manual review
- Aggregate points, percentage flooring and pass threshold
- Unknown ids, wrong answer shapes, empty quizzes
"""

import threading

import pytest

from src.models import (
    GradingStatus,
    Option,
    Question,
    QuestionType,
    Quiz,
    QuizScoringEngine,
    ScoreResult,
    SubmittedAnswer,
    count_words,
    score_quiz,
)


def _quiz(*questions, passing_score=70):
    return Quiz(quiz_id="quiz-test", questions=questions, passing_score=passing_score)


def _mcq(question_id, points, correct=("A",), option_ids=("A", "B", "C", "D")):
    return Question(
        question_id=question_id,
        question_text=f"Question {question_id}",
        question_type=QuestionType.MULTIPLE_CHOICE,
        points=points,
        options=tuple(Option(oid, f"Option {oid}", is_correct=oid in correct) for oid in option_ids),
    )


class TestChoiceQuestions:
    """Multiple choice and true/false grading."""

    def test_exact_match_scores_full_points(self, mcq_question):
        result = score_quiz(_quiz(mcq_question), {"q-mcq": SubmittedAnswer.for_choices(["A"])})
        assert result.earned_points == 10
        assert result.total_points == 10
        assert result.percentage == 100
        assert result.passed is True
        assert result.outcomes[0].status is GradingStatus.CORRECT

    @pytest.mark.parametrize(
        "selected",
        [
            ["A"],  # subset
            ["A", "C", "D"],  # superset
            ["B", "D"],  # disjoint
            [],  # nothing selected
        ],
    )
    def test_any_other_selection_scores_zero(self, multi_select_question, selected):
        result = score_quiz(
            _quiz(multi_select_question),
            {"q-multi": SubmittedAnswer.for_choices(selected)},
        )
        assert result.earned_points == 0
        assert result.outcomes[0].status is GradingStatus.INCORRECT

    def test_multi_select_requires_all_correct_options(self, multi_select_question):
        result = score_quiz(
            _quiz(multi_select_question),
            {"q-multi": SubmittedAnswer.for_choices(["C", "A"])},
        )
        assert result.earned_points == 4
        assert result.outcomes[0].is_correct is True

    def test_true_false_compared_as_set(self, true_false_question):
        engine = QuizScoringEngine()
        right = engine.grade_question(true_false_question, SubmittedAnswer.for_choices({"T"}))
        wrong = engine.grade_question(true_false_question, SubmittedAnswer.for_choices({"F"}))
        both = engine.grade_question(true_false_question, SubmittedAnswer.for_choices({"T", "F"}))
        assert right.status is GradingStatus.CORRECT
        assert wrong.status is GradingStatus.INCORRECT
        assert both.status is GradingStatus.INCORRECT


class TestTextQuestions:
    """Short answer and fill-in-the-blank grading."""

    def test_case_insensitive_match(self, short_answer_question):
        result = score_quiz(
            _quiz(short_answer_question), {"q-short": SubmittedAnswer.for_text("paris")}
        )
        assert result.earned_points == 5
        assert result.outcomes[0].status is GradingStatus.CORRECT

    @pytest.mark.parametrize("text", ["PARIS", "pArIs", "  Paris  ", "\tparis\n"])
    def test_case_and_surrounding_whitespace_ignored(self, short_answer_question, text):
        outcome = QuizScoringEngine().grade_question(
            short_answer_question, SubmittedAnswer.for_text(text)
        )
        assert outcome.status is GradingStatus.CORRECT

    @pytest.mark.parametrize("text", ["Pari", "Paris, France", "Par is", "Lyon", ""])
    def test_equality_not_substring(self, short_answer_question, text):
        outcome = QuizScoringEngine().grade_question(
            short_answer_question, SubmittedAnswer.for_text(text)
        )
        assert outcome.status is GradingStatus.INCORRECT
        assert outcome.points_earned == 0

    def test_case_sensitive_question(self, fill_in_question):
        engine = QuizScoringEngine()
        assert (
            engine.grade_question(fill_in_question, SubmittedAnswer.for_text("H2O")).status
            is GradingStatus.CORRECT
        )
        assert (
            engine.grade_question(fill_in_question, SubmittedAnswer.for_text("h2o")).status
            is GradingStatus.INCORRECT
        )
        assert (
            engine.grade_question(fill_in_question, SubmittedAnswer.for_text(" water ")).status
            is GradingStatus.CORRECT
        )

    def test_any_accepted_answer_matches(self, fill_in_question):
        outcome = QuizScoringEngine().grade_question(
            fill_in_question, SubmittedAnswer.for_text("water")
        )
        assert outcome.points_earned == 3

    def test_accepted_answers_are_trimmed(self):
        question = Question(
            question_id="q-trim",
            question_text="Largest ocean?",
            question_type=QuestionType.SHORT_ANSWER,
            points=1,
            acceptable_answers=(" Pacific ",),
        )
        outcome = QuizScoringEngine().grade_question(question, SubmittedAnswer.for_text("pacific"))
        assert outcome.status is GradingStatus.CORRECT


class TestManualReviewQuestions:
    """Matching and essay questions are never auto-scored."""

    @pytest.mark.parametrize(
        "answer",
        [
            None,
            SubmittedAnswer.for_matching({0: "Nairobi", 1: "Lima", 2: "Tokyo"}),
            SubmittedAnswer.for_matching({0: "Lima", 1: "Nairobi", 2: "Tokyo"}),
            SubmittedAnswer.for_matching({}),
        ],
    )
    def test_matching_always_pending(self, matching_question, answer):
        answers = {} if answer is None else {"q-match": answer}
        result = score_quiz(_quiz(matching_question), answers)
        outcome = result.outcomes[0]
        assert outcome.status is GradingStatus.PENDING_MANUAL_REVIEW
        assert outcome.points_earned == 0
        assert outcome.is_correct is None
        assert result.total_points == 6

    @pytest.mark.parametrize(
        "text", ["", "Too short", "Water evaporates, condenses, then falls as rain."]
    )
    def test_essay_always_pending(self, essay_question, text):
        result = score_quiz(_quiz(essay_question), {"q-essay": SubmittedAnswer.for_text(text)})
        outcome = result.outcomes[0]
        assert outcome.status is GradingStatus.PENDING_MANUAL_REVIEW
        assert outcome.points_earned == 0
        assert result.earned_points == 0
        assert result.total_points == 20

    def test_essay_word_count_is_informational(self, essay_question):
        engine = QuizScoringEngine()
        short = engine.grade_question(essay_question, SubmittedAnswer.for_text("Rain falls down"))
        long = engine.grade_question(
            essay_question, SubmittedAnswer.for_text("Water evaporates,  condenses\nand falls")
        )
        missing = engine.grade_question(essay_question, None)

        assert short.word_count == 3
        assert short.meets_min_words is False
        assert long.word_count == 5
        assert long.meets_min_words is True
        assert missing.word_count == 0
        assert missing.answered is False
        assert short.points_earned == long.points_earned == 0

    def test_essay_without_minimum_always_meets_it(self):
        question = Question(
            question_id="q-free",
            question_text="Any thoughts?",
            question_type=QuestionType.ESSAY,
            points=5,
            min_words=0,
        )
        outcome = QuizScoringEngine().grade_question(question, SubmittedAnswer.for_text(""))
        assert outcome.word_count == 0
        assert outcome.meets_min_words is True


class TestAggregation:
    """Totals, percentage and pass/fail."""

    def test_essay_and_correct_mcq(self, essay_question):
        quiz = _quiz(essay_question, _mcq("q-mcq", 10))
        result = score_quiz(
            quiz,
            {
                "q-mcq": SubmittedAnswer.for_choices(["A"]),
                "q-essay": SubmittedAnswer.for_text("A thoughtful essay about water."),
            },
        )
        assert result.earned_points == 10
        assert result.total_points == 30
        assert result.percentage == 33
        assert result.get_outcome("q-essay").status is GradingStatus.PENDING_MANUAL_REVIEW
        assert result.has_pending_review is True
        assert result.pending_review_ids == ("q-essay",)

    def test_passing_boundary_is_inclusive(self):
        questions = [_mcq(f"q{i}", 1) for i in range(10)]
        answers = {f"q{i}": SubmittedAnswer.for_choices(["A"]) for i in range(7)}
        result = score_quiz(_quiz(*questions, passing_score=70), answers)
        assert result.percentage == 70
        assert result.passed is True

    def test_just_below_threshold_fails(self):
        questions = [_mcq(f"q{i}", 1) for i in range(10)]
        answers = {f"q{i}": SubmittedAnswer.for_choices(["A"]) for i in range(6)}
        result = score_quiz(_quiz(*questions, passing_score=70), answers)
        assert result.percentage == 60
        assert result.passed is False

    def test_percentage_is_floored(self):
        quiz = _quiz(_mcq("q1", 2), _mcq("q2", 1))
        result = score_quiz(quiz, {"q1": SubmittedAnswer.for_choices(["A"])})
        # 2/3 = 66.66...
        assert result.percentage == 66

    def test_total_independent_of_answers(self, mixed_quiz):
        assert score_quiz(mixed_quiz, {}).total_points == mixed_quiz.total_points == 46

    def test_unanswered_auto_gradable_questions_are_incorrect(self, mixed_quiz):
        result = score_quiz(mixed_quiz, {})
        assert result.earned_points == 0
        assert result.correct_count == 0
        assert result.incorrect_count == 4
        assert len(result.pending_review_ids) == 2
        assert all(not o.answered for o in result.outcomes)

    def test_mixed_quiz_breakdown(self, mixed_quiz):
        answers = {
            "q-mcq": SubmittedAnswer.for_choices(["A"]),
            "q-tf": SubmittedAnswer.for_choices(["F"]),
            "q-short": SubmittedAnswer.for_text(" PARIS "),
            "q-fill": SubmittedAnswer.for_text("water"),
            "q-match": SubmittedAnswer.for_matching({0: "Nairobi", 1: "Lima", 2: "Tokyo"}),
            "q-essay": SubmittedAnswer.for_text("one two three four five six"),
        }
        result = score_quiz(mixed_quiz, answers)

        statuses = [o.status for o in result.outcomes]
        assert statuses == [
            GradingStatus.CORRECT,
            GradingStatus.INCORRECT,
            GradingStatus.CORRECT,
            GradingStatus.CORRECT,
            GradingStatus.PENDING_MANUAL_REVIEW,
            GradingStatus.PENDING_MANUAL_REVIEW,
        ]
        assert result.earned_points == 18
        assert result.total_points == 46
        assert result.percentage == 39
        assert result.passed is False
        # 18 of the 20 auto-gradable points
        assert result.auto_gradable_points == 20
        assert result.auto_graded_percentage == 90

    def test_outcomes_follow_quiz_order(self, mixed_quiz):
        result = score_quiz(mixed_quiz, {})
        assert tuple(o.question_id for o in result.outcomes) == mixed_quiz.question_ids


class TestEdgeCases:
    """Empty quizzes, unknown ids and mismatched answers."""

    def test_empty_quiz(self):
        result = score_quiz(_quiz(passing_score=70), {})
        assert result.total_points == 0
        assert result.earned_points == 0
        assert result.percentage == 0
        assert result.passed is False
        assert result.outcomes == ()

    def test_empty_quiz_with_zero_threshold_passes(self):
        result = score_quiz(_quiz(passing_score=0), {})
        assert result.percentage == 0
        assert result.passed is True

    def test_only_pending_questions_gives_zero_provisional_percentage(self, essay_question):
        # Only pending questions and nothing auto-gradable
        result = score_quiz(_quiz(essay_question), {})
        assert result.auto_gradable_points == 0
        assert result.auto_graded_percentage == 0

    def test_unknown_question_ids_ignored(self, mcq_question):
        answers = {
            "q-mcq": SubmittedAnswer.for_choices(["A"]),
            "q-does-not-exist": SubmittedAnswer.for_choices(["A"]),
        }
        result = score_quiz(_quiz(mcq_question), answers)
        assert result.earned_points == 10
        assert len(result.outcomes) == 1

    def test_wrong_answer_shape_counts_as_unanswered(self, mcq_question, short_answer_question):
        answers = {
            "q-mcq": SubmittedAnswer.for_text("A"),
            "q-short": SubmittedAnswer.for_choices(["Paris"]),
        }
        result = score_quiz(_quiz(mcq_question, short_answer_question), answers)
        assert result.earned_points == 0
        assert all(o.status is GradingStatus.INCORRECT for o in result.outcomes)
        assert all(not o.answered for o in result.outcomes)


class TestDeterminism:
    """Scoring is pure and repeatable."""

    def test_idempotent(self, mixed_quiz):
        answers = {
            "q-mcq": SubmittedAnswer.for_choices(["A"]),
            "q-short": SubmittedAnswer.for_text("paris"),
            "q-essay": SubmittedAnswer.for_text("some words here"),
        }
        first = score_quiz(mixed_quiz, answers)
        second = score_quiz(mixed_quiz, answers)
        assert first == second
        assert first.to_dict() == second.to_dict()

    def test_inputs_not_mutated(self, mixed_quiz):
        answers = {"q-mcq": SubmittedAnswer.for_choices(["A"])}
        before = dict(answers)
        score_quiz(mixed_quiz, answers)
        assert answers == before

    def test_concurrent_scoring(self, mixed_quiz):
        engine = QuizScoringEngine()
        answers = {"q-mcq": SubmittedAnswer.for_choices(["A"])}
        expected = engine.score(mixed_quiz, answers)
        results = []

        def worker():
            for _ in range(50):
                results.append(engine.score(mixed_quiz, answers))

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(results) == 200
        assert all(r == expected for r in results)

    def test_result_is_immutable(self, mcq_question):
        result = score_quiz(_quiz(mcq_question), {})
        assert isinstance(result, ScoreResult)
        with pytest.raises(AttributeError):
            result.percentage = 100


class TestCountWords:
    @pytest.mark.parametrize(
        "text,expected",
        [
            (None, 0),
            ("", 0),
            ("   \n\t ", 0),
            ("one", 1),
            ("one two", 2),
            ("  leading and trailing  ", 3),
            ("line\nbreaks\tand  tabs", 4),
        ],
    )
    def test_count_words(self, text, expected):
        assert count_words(text) == expected


def test_result_to_dict(mixed_quiz):
    result = score_quiz(mixed_quiz, {"q-essay": SubmittedAnswer.for_text("a b c")})
    data = result.to_dict()
    assert data["total_points"] == 46
    assert data["has_pending_review"] is True
    assert data["pending_review_ids"] == ["q-match", "q-essay"]
    essay = next(o for o in data["outcomes"] if o["question_id"] == "q-essay")
    assert essay["status"] == "pending_manual_review"
    assert essay["word_count"] == 3
    assert essay["meets_min_words"] is False


class TestAnsweredState:
    """Missing, empty and partial answers are treated the same way."""

    @pytest.mark.parametrize(
        "answers",
        [
            {},
            {"q1": SubmittedAnswer.for_choices([])},
        ],
    )
    def test_empty_selection_never_correct(self, answers):
        # Unvalidated question with no correct option
        quiz = _quiz(_mcq("q1", 5, correct=(), option_ids=("A", "B")))
        outcome = score_quiz(quiz, answers).outcomes[0]
        assert outcome.status is GradingStatus.INCORRECT
        assert outcome.points_earned == 0
        assert outcome.answered is False

    def test_blank_text_never_correct(self):
        question = Question(
            question_id="q-blank",
            question_text="Anything?",
            question_type=QuestionType.SHORT_ANSWER,
            points=2,
            acceptable_answers=("",),
        )
        engine = QuizScoringEngine()
        missing = engine.grade_question(question, None)
        blank = engine.grade_question(question, SubmittedAnswer.for_text("  "))
        assert missing.status is blank.status is GradingStatus.INCORRECT
        assert missing.points_earned == blank.points_earned == 0

    def test_partial_matching_is_not_answered(self, matching_question):
        engine = QuizScoringEngine()
        partial = engine.grade_question(
            matching_question, SubmittedAnswer.for_matching({0: "Nairobi"})
        )
        full = engine.grade_question(
            matching_question,
            SubmittedAnswer.for_matching({0: "Nairobi", 1: "Lima", 2: "Tokyo"}),
        )
        assert partial.answered is False
        assert full.answered is True
        assert partial.status is full.status is GradingStatus.PENDING_MANUAL_REVIEW

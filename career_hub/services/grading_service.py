"""
Quiz grading service
Choice questions: option id match
Short answer: case-insensitive, trimmed exact match
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, Any, List, Optional, Tuple, Union

from career_hub.exceptions import PreconditionError

logger = logging.getLogger(__name__)


@dataclass
class GradingResult:
    """Aggregate outcome of grading one submission"""
    score: float
    total_points: float
    percentage: float
    passed: bool
    breakdown: List[Dict[str, Any]] = field(default_factory=list)


class GradingService:
    """
    Service for grading quiz submissions

    Strategy:
    - multiple-choice / true-false: the submitted option id must equal the
      single option flagged correct
    - short-answer: normalized string equality with the stored answer
    - anything else: zero points

    Every question is all-or-nothing, there is no partial credit.
    """

    CHOICE_TYPES = ("multiple-choice", "true-false")

    def grade_quiz(
        self,
        questions: List[Dict[str, Any]],
        answers: Union[List[Any], Dict[str, Any]],
        passing_score: float
    ) -> GradingResult:
        """
        Grade a complete quiz submission

        Args:
            questions: Question dictionaries in authored order
            answers: Answers by position, or by question id
            passing_score: Percentage needed to pass

        Returns:
            GradingResult with the per-question breakdown

        Raises:
            PreconditionError: the quiz has no point-bearing question
        """
        total_points = sum(q.get("points", 1) for q in questions)
        if total_points <= 0:
            raise PreconditionError("Quiz has no point-bearing questions and cannot be graded")

        breakdown = []
        earned_points = 0.0

        for index, question in enumerate(questions):
            q_type = question.get("type", "multiple-choice")
            points = question.get("points", 1)
            user_answer = self._answer_for(question, index, answers)

            if q_type in self.CHOICE_TYPES:
                is_correct, correct_text = self._grade_choice(question, user_answer)
            elif q_type == "short-answer":
                is_correct, correct_text = self._grade_short_answer(question, user_answer)
            else:
                logger.warning(f"Unknown question type '{q_type}' in question {question.get('id')}")
                is_correct, correct_text = False, None

            points_earned = points if is_correct else 0
            earned_points += points_earned

            breakdown.append({
                "question_id": question.get("id"),
                "answer": user_answer,
                "is_correct": is_correct,
                "points_earned": points_earned,
                "points": points,
                "correct_answer": correct_text,
                "explanation": question.get("explanation"),
            })

        percentage = earned_points / total_points * 100
        passed = percentage >= passing_score

        logger.info(
            f"Quiz graded: {earned_points:g}/{total_points:g} "
            f"({percentage:.1f}%), passed={passed}"
        )

        return GradingResult(
            score=earned_points,
            total_points=total_points,
            percentage=percentage,
            passed=passed,
            breakdown=breakdown,
        )

    @staticmethod
    def _answer_for(
        question: Dict[str, Any],
        index: int,
        answers: Union[List[Any], Dict[str, Any]]
    ) -> Any:
        if isinstance(answers, dict):
            return answers.get(question.get("id"))
        return answers[index] if index < len(answers) else None

    def _grade_choice(
        self,
        question: Dict[str, Any],
        user_answer: Any
    ) -> Tuple[bool, Optional[str]]:
        """
        Grade a choice question by option id

        Returns:
            Tuple of (is_correct, correct_option_text)
        """
        correct = [opt for opt in question.get("options", []) if opt.get("is_correct")]

        if len(correct) != 1:
            # Authoring validation rejects this; stored data predating it is never scored
            logger.warning(
                f"Question {question.get('id')} has {len(correct)} correct options, awarding zero"
            )
            return False, None

        correct_option = correct[0]
        is_correct = user_answer is not None and str(user_answer) == str(correct_option.get("id"))
        return is_correct, correct_option.get("text")

    def _grade_short_answer(
        self,
        question: Dict[str, Any],
        user_answer: Any
    ) -> Tuple[bool, Optional[str]]:
        """
        Grade a short answer with case-insensitive, whitespace-trimmed equality
        """
        correct_answer = question.get("correct_answer") or ""

        if not isinstance(user_answer, str) or not user_answer.strip():
            return False, correct_answer

        is_correct = user_answer.strip().lower() == correct_answer.strip().lower()
        return is_correct, correct_answer


# Global instance
grading_service = GradingService()

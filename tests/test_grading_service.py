import unittest

from career_hub.exceptions import PreconditionError
from career_hub.services.grading_service import GradingService

from tests.helpers import choice_question, short_question


class GradeQuizTests(unittest.TestCase):
    def setUp(self) -> None:
        self.grader = GradingService()
        self.questions = [choice_question(points=10), short_question(answer="Python", points=5)]

    def test_all_correct_scores_full_marks(self) -> None:
        result = self.grader.grade_quiz(self.questions, ["opt-a", "python"], passing_score=70)

        self.assertEqual(result.score, 15)
        self.assertEqual(result.total_points, 15)
        self.assertEqual(result.percentage, 100)
        self.assertTrue(result.passed)
        self.assertEqual([item["is_correct"] for item in result.breakdown], [True, True])

    def test_wrong_choice_scores_zero_for_that_question(self) -> None:
        result = self.grader.grade_quiz(self.questions, ["opt-b", "Python"], passing_score=70)

        self.assertEqual(result.score, 5)
        self.assertAlmostEqual(result.percentage, 100 * 5 / 15)
        self.assertFalse(result.passed)
        self.assertEqual(result.breakdown[0]["correct_answer"], "Right")
        self.assertEqual(result.breakdown[0]["explanation"], "Right is right.")

    def test_short_answer_is_trimmed_and_case_insensitive(self) -> None:
        result = self.grader.grade_quiz([short_question("Python")], ["  pYTHON \n"], passing_score=50)
        self.assertTrue(result.breakdown[0]["is_correct"])

        result = self.grader.grade_quiz([short_question("Python")], ["Pythons"], passing_score=50)
        self.assertFalse(result.breakdown[0]["is_correct"])

    def test_answers_by_question_id(self) -> None:
        result = self.grader.grade_quiz(self.questions, {"q2": "python", "q1": "opt-a"}, passing_score=70)
        self.assertEqual(result.percentage, 100)

    def test_missing_answers_score_zero(self) -> None:
        result = self.grader.grade_quiz(self.questions, [], passing_score=70)

        self.assertEqual(result.score, 0)
        self.assertFalse(result.passed)
        self.assertIsNone(result.breakdown[0]["answer"])

    def test_pass_threshold_is_inclusive(self) -> None:
        questions = [dict(choice_question(points=7), id="a"), dict(short_question(points=3), id="b")]
        result = self.grader.grade_quiz(questions, ["opt-a", "wrong"], passing_score=70)

        self.assertEqual(result.percentage, 70)
        self.assertTrue(result.passed)

    def test_unknown_question_type_scores_zero(self) -> None:
        question = dict(short_question(), type="essay")
        result = self.grader.grade_quiz([question], ["Python"], passing_score=0)

        self.assertEqual(result.score, 0)
        self.assertFalse(result.breakdown[0]["is_correct"])

    def test_choice_question_with_two_correct_options_awards_nothing(self) -> None:
        question = choice_question()
        question["options"][1]["is_correct"] = True

        result = self.grader.grade_quiz([question], ["opt-a"], passing_score=50)

        self.assertEqual(result.score, 0)
        self.assertIsNone(result.breakdown[0]["correct_answer"])

    def test_quiz_without_points_cannot_be_graded(self) -> None:
        with self.assertRaises(PreconditionError):
            self.grader.grade_quiz([choice_question(points=0)], ["opt-a"], passing_score=70)

    def test_percentage_stays_within_bounds(self) -> None:
        for answers in (["opt-a", "Python"], ["opt-b", "nope"], ["opt-a"], []):
            result = self.grader.grade_quiz(self.questions, answers, passing_score=70)
            self.assertGreaterEqual(result.percentage, 0)
            self.assertLessEqual(result.percentage, 100)
            self.assertEqual(result.passed, result.percentage >= 70)


if __name__ == "__main__":
    unittest.main()

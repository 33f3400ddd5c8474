"""
Pydantic schemas for quiz-related requests and responses
"""
from pydantic import BaseModel, Field, model_validator
from typing import List, Dict, Any, Optional, Union, Literal
from uuid import UUID, uuid4
from datetime import datetime

QuestionType = Literal["multiple-choice", "true-false", "short-answer"]
CHOICE_TYPES = ("multiple-choice", "true-false")


class QuizOption(BaseModel):
    """Answer option of a choice question"""
    id: Optional[str] = None
    text: str
    is_correct: bool = False


class QuizQuestion(BaseModel):
    """Authored question including its answer key"""
    id: Optional[str] = None
    question: str = Field(..., min_length=1)
    type: QuestionType = "multiple-choice"
    options: List[QuizOption] = []
    correct_answer: Optional[str] = None  # short-answer only
    points: float = Field(1, ge=0)
    explanation: Optional[str] = None

    @model_validator(mode="after")
    def check_answer_key(self):
        if self.type == "true-false" and not self.options and self.correct_answer:
            # Shorthand: build the two options from a "true"/"false" answer
            answer = self.correct_answer.strip().lower()
            if answer not in ("true", "false"):
                raise ValueError("true-false correct_answer must be 'true' or 'false'")
            self.options = [
                QuizOption(text="True", is_correct=answer == "true"),
                QuizOption(text="False", is_correct=answer == "false"),
            ]

        if self.type in CHOICE_TYPES:
            correct = [opt for opt in self.options if opt.is_correct]
            if len(correct) != 1:
                raise ValueError(
                    f"Question '{self.question}' must have exactly one correct option "
                    f"(found {len(correct)})"
                )
        elif not (self.correct_answer and self.correct_answer.strip()):
            raise ValueError(f"Short-answer question '{self.question}' needs a correct_answer")

        self.id = self.id or uuid4().hex
        for opt in self.options:
            opt.id = opt.id or uuid4().hex
        return self


def _check_points(questions: List[QuizQuestion]) -> None:
    if not questions:
        raise ValueError("A quiz needs at least one question")
    if sum(q.points for q in questions) <= 0:
        raise ValueError("A quiz needs at least one point-bearing question")


class QuizCreate(BaseModel):
    """Schema for authoring a lesson quiz"""
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    questions: List[QuizQuestion]
    passing_score: float = Field(70, ge=0, le=100, description="Passing percentage")
    time_limit: Optional[int] = Field(None, ge=1, description="Minutes")
    attempts: int = Field(3, ge=1, description="Maximum attempts allowed")

    @model_validator(mode="after")
    def check_questions(self):
        _check_points(self.questions)
        return self


class QuizUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    questions: Optional[List[QuizQuestion]] = None
    passing_score: Optional[float] = Field(None, ge=0, le=100)
    time_limit: Optional[int] = Field(None, ge=1)
    attempts: Optional[int] = Field(None, ge=1)

    @model_validator(mode="after")
    def check_questions(self):
        if self.questions is not None:
            _check_points(self.questions)
        return self


class QuizOut(BaseModel):
    """Full quiz including the answer key (admin view)"""
    id: UUID
    lesson_id: UUID
    course_id: UUID
    title: str
    description: Optional[str] = None
    questions: List[QuizQuestion]
    passing_score: float
    time_limit: Optional[int] = None
    attempts: int

    class Config:
        from_attributes = True


class LearnerOption(BaseModel):
    id: str
    text: str


class LearnerQuestion(BaseModel):
    """Question as shown to a learner, answer key removed"""
    id: str
    question: str
    type: str
    options: List[LearnerOption] = []
    points: float


class LearnerQuiz(BaseModel):
    id: UUID
    lesson_id: UUID
    course_id: UUID
    title: str
    description: Optional[str] = None
    questions: List[LearnerQuestion]
    passing_score: float
    time_limit: Optional[int] = None


class LearnerQuizResponse(BaseModel):
    quiz: LearnerQuiz
    attempts: int
    max_attempts: int
    can_retake: bool
    best_score: Optional[float] = None


class QuizSubmission(BaseModel):
    """
    Schema for quiz submission

    answers is either a list in question order or a mapping of question id
    to answer; choice answers are option ids, short answers are text.
    """
    answers: Union[List[Any], Dict[str, Any]]
    time_spent: int = Field(0, ge=0, description="Seconds spent on the attempt")


class GradedAnswer(BaseModel):
    """Grading details for a single question"""
    question_id: str
    answer: Any = None
    is_correct: bool
    points_earned: float
    points: float
    correct_answer: Optional[str] = None
    explanation: Optional[str] = None


class AttemptSummary(BaseModel):
    score: float
    total_points: float
    percentage: float  # one decimal
    passed: bool
    attempt_number: int
    max_attempts: int


class QuizGradingResponse(BaseModel):
    """Response after quiz grading"""
    attempt: AttemptSummary
    answers: List[GradedAnswer]
    can_retake: bool


class QuizAttemptOut(BaseModel):
    id: UUID
    quiz_id: UUID
    score: float
    total_points: float
    percentage: float
    passed: bool
    attempt_number: int
    time_spent: Optional[int] = None
    answers: List[GradedAnswer] = []
    completed_at: Optional[datetime] = None

    class Config:
        from_attributes = True

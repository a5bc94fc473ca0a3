"""Exam and exam attempt endpoints."""

from fastapi import APIRouter, Depends, Path, status

from eduprogress.core.exam_engine import ExamAttemptEngine
from eduprogress.db.database import MAX_ROW_ID
from eduprogress.web.deps import CurrentUser, get_current_user, get_exam_engine
from eduprogress.web.schemas import (
    AttemptResponse,
    ExamDetailResponse,
    ExamResponse,
    SubmitAnswersRequest,
)

router = APIRouter(prefix="/api/exams", tags=["exams"])


@router.get("/course/{course_id}", response_model=list[ExamResponse])
async def list_course_exams(
    course_id: int = Path(..., ge=0, le=MAX_ROW_ID),
    engine: ExamAttemptEngine = Depends(get_exam_engine),
) -> list[ExamResponse]:
    """List the exams of a course."""
    return [ExamResponse(**exam.to_dict()) for exam in engine.list_course_exams(course_id)]


@router.get("/attempts/{attempt_id}", response_model=AttemptResponse)
async def get_attempt(
    attempt_id: int = Path(..., ge=0, le=MAX_ROW_ID),
    user: CurrentUser = Depends(get_current_user),
    engine: ExamAttemptEngine = Depends(get_exam_engine),
) -> AttemptResponse:
    """Get one of the caller's attempts with its graded answers."""
    attempt = engine.get_attempt(attempt_id, user.id)
    return AttemptResponse(**attempt.to_dict(include_answers=True))


@router.get("/{exam_id}", response_model=ExamDetailResponse)
async def get_exam(
    exam_id: int = Path(..., ge=0, le=MAX_ROW_ID),
    engine: ExamAttemptEngine = Depends(get_exam_engine),
) -> ExamDetailResponse:
    """Get an exam with its questions. Answer keys are never included."""
    exam, questions = engine.get_exam(exam_id)
    return ExamDetailResponse(
        **exam.to_dict(),
        questions=[q.to_public_dict() for q in questions],
    )


@router.post(
    "/{exam_id}/start",
    response_model=AttemptResponse,
    status_code=status.HTTP_201_CREATED,
)
async def start_attempt(
    exam_id: int = Path(..., ge=0, le=MAX_ROW_ID),
    user: CurrentUser = Depends(get_current_user),
    engine: ExamAttemptEngine = Depends(get_exam_engine),
) -> AttemptResponse:
    """Start a new attempt at an exam."""
    attempt = engine.start_attempt(exam_id, user.id)
    return AttemptResponse(**attempt.to_dict())


@router.post("/attempts/{attempt_id}/submit", response_model=AttemptResponse)
async def submit_attempt(
    body: SubmitAnswersRequest,
    attempt_id: int = Path(..., ge=0, le=MAX_ROW_ID),
    user: CurrentUser = Depends(get_current_user),
    engine: ExamAttemptEngine = Depends(get_exam_engine),
) -> AttemptResponse:
    """Submit answers (question id -> answer) and get the scored attempt."""
    attempt = engine.submit_answers(attempt_id, user.id, body.answers)
    return AttemptResponse(**attempt.to_dict(include_answers=True))

# rest_api.py

from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .errors import (
    AnswerValidationError,
    DataIntegrityError,
    NotFoundError,
    RecordStoreError,
)
from .handlers.submission_handler import SubmissionHandler
from .logger import logger
from .models import FlowState, Recommendation
from .schema import AnswerSubmit, SubmissionCreate, SubmissionCreated


def create_app(handler: SubmissionHandler) -> FastAPI:
    app = FastAPI(title="Use case roadmap advisor")

    @app.exception_handler(AnswerValidationError)
    async def answer_validation_error(request: Request, exc: AnswerValidationError):
        return JSONResponse(status_code=422, content={"error": str(exc), "field": exc.field})

    @app.exception_handler(NotFoundError)
    async def not_found_error(request: Request, exc: NotFoundError):
        return JSONResponse(status_code=404, content={"error": str(exc)})

    @app.exception_handler(DataIntegrityError)
    async def data_integrity_error(request: Request, exc: DataIntegrityError):
        logger.error(f"Data integrity fault on {request.url.path}: {exc}")
        return JSONResponse(
            status_code=500,
            content={"error": "Questionnaire data is inconsistent", "problems": exc.problems},
        )

    @app.exception_handler(RecordStoreError)
    async def record_store_error(request: Request, exc: RecordStoreError):
        return JSONResponse(status_code=503, content={"error": "Record store unavailable"})

    # Health check route
    @app.get("/health")
    def health_check():
        return JSONResponse(status_code=200, content={"status": "ok"})

    @app.post("/submissions", response_model=SubmissionCreated, status_code=201)
    def create_submission(payload: SubmissionCreate):
        submission = handler.start_submission(payload.model_dump())
        return SubmissionCreated(submission_id=submission.id)

    @app.get("/submissions/{submission_id}/flow", response_model=FlowState)
    def get_flow(submission_id: str, cursor: Optional[int] = 0):
        return handler.flow_state(submission_id, cursor)

    @app.put("/submissions/{submission_id}/answers/{question_id}", response_model=FlowState)
    def put_answer(submission_id: str, question_id: str, payload: AnswerSubmit):
        return handler.submit_answer(submission_id, question_id, payload.value, payload.cursor)

    @app.post("/submissions/{submission_id}/advance", response_model=FlowState)
    def post_advance(submission_id: str, cursor: Optional[int] = 0):
        return handler.advance(submission_id, cursor)

    @app.post("/submissions/{submission_id}/back", response_model=FlowState)
    def post_back(submission_id: str, cursor: Optional[int] = 0):
        return handler.back(submission_id, cursor)

    @app.post("/submissions/{submission_id}/complete", response_model=Recommendation)
    def post_complete(submission_id: str):
        return handler.complete(submission_id)

    return app

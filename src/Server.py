import json
import logging
import sys

from starlette.applications import Starlette
from starlette.concurrency import run_in_threadpool
from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from AnswerClient import AnswerClient
from ChatEntry import FEEDBACK_STATES
from ChatStorageService import ChatStorageService
from ChatStore import ChatStore, connect_store
from Config import Settings, load_settings
from Errors import NotFoundError, ValidationError
from FaqService import FaqService
from FeedbackService import FeedbackService
from OriginGuard import OriginGuardMiddleware
from QuestionService import QuestionService


def configure_logging(log_level="INFO"):
    logging.basicConfig(level=log_level, stream=sys.stderr, format='%(asctime)s - %(levelname)s - %(message)s')


async def read_payload(request: Request, allow_empty=False) -> dict:
    if allow_empty and not await request.body():
        return {}
    try:
        payload = await request.json()
    except json.JSONDecodeError as e:
        raise ValidationError("Invalid JSON payload.") from e
    if not isinstance(payload, dict):
        raise ValidationError("JSON payload must be an object.")
    return payload


def required_text(payload, field):
    value = payload.get(field)
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field} is required")
    return value


def error_response(error, message):
    if isinstance(error, NotFoundError):
        return JSONResponse({"error": "Chat not found."}, status_code=404)
    if isinstance(error, ValidationError):
        return JSONResponse({"error": str(error)}, status_code=400)
    return JSONResponse({"error": message}, status_code=500)


async def healthcheck(_: Request) -> JSONResponse:
    return JSONResponse({"status": "ok"})


async def process_question(request: Request) -> JSONResponse:
    try:
        payload = await read_payload(request)
        question = required_text(payload, "question")
        entry = await run_in_threadpool(request.app.state.question_service.process_question, question)
    except Exception as e:  # noqa: BLE001
        logging.error(f"Error processing question: {e}")
        return error_response(e, "Failed to process the question.")

    return JSONResponse({"answer": entry.answer, "_id": str(entry.id)})


async def store_chat(request: Request) -> JSONResponse:
    try:
        payload = await read_payload(request)
        question = required_text(payload, "question")
        answer = required_text(payload, "answer")
        category = payload.get("category") or ""
        if not isinstance(category, str):
            raise ValidationError("category must be a string")
        feedback = payload.get("feedback")
        if feedback is not None and feedback not in FEEDBACK_STATES:
            raise ValidationError(f"feedback must be one of {', '.join(FEEDBACK_STATES)}")

        entry, created = await run_in_threadpool(
            request.app.state.chat_storage_service.store_chat, question, category, answer, feedback
        )
    except Exception as e:  # noqa: BLE001
        logging.error(f"Error saving chat history: {e}")
        return error_response(e, "Failed to save chat history.")

    message = "Chat history saved." if created else "Chat updated"
    return JSONResponse({"_id": str(entry.id), "message": message})


async def list_faqs(request: Request) -> JSONResponse:
    category = request.query_params.get("category")
    try:
        faqs = await run_in_threadpool(request.app.state.faq_service.get_faqs, category)
    except Exception as e:  # noqa: BLE001
        logging.error(f"Error fetching FAQs: {e}")
        return error_response(e, "Failed to fetch FAQs.")

    return JSONResponse(faqs)


async def update_feedback(request: Request) -> JSONResponse:
    entry_id = request.path_params["id"]
    try:
        payload = await read_payload(request, allow_empty=True)
        entry = await run_in_threadpool(
            request.app.state.feedback_service.update_feedback, entry_id, payload.get("feedback")
        )
    except Exception as e:  # noqa: BLE001
        logging.error(f"Error updating feedback: {e}")
        return error_response(e, "Failed to update feedback.")

    return JSONResponse({"message": "Feedback updated successfully.", "chat": entry.as_json()})


def create_app(settings: Settings | None = None, store=None, answer_client=None) -> Starlette:
    settings = settings or load_settings()
    store = store or ChatStore()
    answer_client = answer_client or AnswerClient(settings.answer_service_url, timeout=settings.http_timeout)

    routes = [
        Route("/health", healthcheck, methods=["GET"]),
        Route("/process_question", process_question, methods=["POST"]),
        Route("/storeChat", store_chat, methods=["POST"]),
        Route("/faqs", list_faqs, methods=["GET"]),
        Route("/updateFeedback/{id}", update_feedback, methods=["PUT"]),
    ]

    middleware = [
        Middleware(OriginGuardMiddleware, allowed_origins=settings.allowed_origins),
        Middleware(
            CORSMiddleware,
            allow_origins=list(settings.allowed_origins),
            allow_methods=["GET", "POST", "PUT", "OPTIONS"],
            allow_headers=["*"],
        ),
    ]

    app = Starlette(routes=routes, middleware=middleware)
    app.state.question_service = QuestionService(store, answer_client)
    app.state.chat_storage_service = ChatStorageService(store)
    app.state.faq_service = FaqService(store)
    app.state.feedback_service = FeedbackService(store)
    return app


app = create_app()


def main() -> None:
    import uvicorn

    settings = load_settings()
    configure_logging(settings.log_level)
    connect_store(settings.mongo_uri)

    logging.info(f"Server running on http://{settings.host}:{settings.port}")
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()

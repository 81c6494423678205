# main.py
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from chat import ChatFailedError, ChatModel, ChatService, InvalidMessageError
from gemini import GeminiModel
from logging_utils import setup_logging
from models import ChatRequest, ChatResponse, HistorySummary, Message, ResetResponse, Session
from settings import Settings, load_system_instruction
from storage import ChatStore, MemoryStore


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[ChatStore] = None,
    model: Optional[ChatModel] = None,
) -> FastAPI:
    settings = settings or Settings()
    setup_logging(settings.LOG_LEVEL, settings.LOG_FORMAT, settings.LOG_DIR or None)

    app = FastAPI(title="Rhythia Assistant API", version="1.0.0")

    # --- CORS ---
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # --- State: store, model gateway, orchestrator ---
    # In-memory only; pass a different ChatStore for persistence.
    app.state.settings = settings
    app.state.store = store if store is not None else MemoryStore()
    app.state.chat = ChatService(
        store=app.state.store,
        model=model if model is not None else GeminiModel(settings),
        system_instruction=load_system_instruction(settings.SYSTEM_INSTRUCTION_PATH),
        context_window=settings.CONTEXT_WINDOW,
        max_message_length=settings.MAX_MESSAGE_LENGTH,
    )
    logger.info(
        "Config: model={} context_window={} temperature={}",
        settings.MODEL_NAME, settings.CONTEXT_WINDOW, settings.TEMPERATURE,
    )

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content={"detail": "Invalid request data", "errors": jsonable_encoder(exc.errors())},
        )

    register_routes(app)
    return app


def get_store(request: Request) -> ChatStore:
    return request.app.state.store


def get_chat(request: Request) -> ChatService:
    return request.app.state.chat


def register_routes(app: FastAPI) -> None:
    @app.get("/healthz")
    def healthz():
        return {"ok": True}

    @app.get("/api/messages", response_model=List[Message])
    def list_messages(
        session_id: Optional[str] = Query(None, alias="sessionId"),
        store: ChatStore = Depends(get_store),
    ):
        return store.list(session_id)

    @app.post("/api/sessions", response_model=Session)
    def create_session(store: ChatStore = Depends(get_store)):
        session = store.create_session()
        logger.info("Created session {}", session.id)
        return session

    @app.post("/api/chat", response_model=ChatResponse)
    def chat(
        req: ChatRequest,
        session_id: Optional[str] = Query(None, alias="sessionId"),
        service: ChatService = Depends(get_chat),
    ):
        if not session_id:
            raise HTTPException(status_code=400, detail="Session ID is required")
        try:
            return service.send(session_id, req.message)
        except InvalidMessageError as e:
            raise HTTPException(status_code=400, detail=str(e))
        except ChatFailedError as e:
            raise HTTPException(status_code=500, detail=str(e))

    @app.delete("/api/chat/reset", response_model=ResetResponse)
    def reset(
        session_id: Optional[str] = Query(None, alias="sessionId"),
        store: ChatStore = Depends(get_store),
    ):
        if not session_id:
            raise HTTPException(status_code=400, detail="Session ID is required")
        store.clear(session_id)
        logger.info("Cleared session {}", session_id)
        return ResetResponse(message="Chat reset successfully")

    @app.get("/api/history/{session_id}", response_model=HistorySummary)
    def history_summary(session_id: str, store: ChatStore = Depends(get_store)):
        return HistorySummary(messages=store.count(session_id))


app = create_app()

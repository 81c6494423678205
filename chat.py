# chat.py
from datetime import datetime, timezone
from typing import Any, Dict, List, Protocol, Sequence

from loguru import logger

from gemini import extract_reply
from models import ChatResponse, Message
from storage import ChatStore

CONTEXT_WINDOW = 10
MAX_MESSAGE_LENGTH = 4000
UNEXPECTED_ERROR = "An unexpected error occurred. Please try again later."


class InvalidMessageError(ValueError):
    pass


class ChatFailedError(Exception):
    """Raised after the failure text has been stored in the conversation."""


class ChatModel(Protocol):
    def generate(self, contents: List[Dict[str, Any]]) -> Any:
        ...


def message_length(text: str) -> int:
    """Length in UTF-16 code units, the unit browsers count in."""
    return len(text.encode("utf-16-le")) // 2


def to_content(text: str, role: str) -> Dict[str, Any]:
    return {"role": role, "parts": [{"text": text}]}


def build_contents(system_instruction: str, history: Sequence[Message], message: str,
                   window: int = CONTEXT_WINDOW) -> List[Dict[str, Any]]:
    """System block, then the last ``window`` history turns, then the new message."""
    recent = list(history)[-window:] if window > 0 else []
    contents = [to_content(system_instruction, "model")]
    contents.extend(to_content(m.content, "user" if m.is_user else "model") for m in recent)
    contents.append(to_content(message, "user"))
    return contents


class ChatService:
    def __init__(self, store: ChatStore, model: ChatModel, system_instruction: str,
                 context_window: int = CONTEXT_WINDOW,
                 max_message_length: int = MAX_MESSAGE_LENGTH):
        self.store = store
        self.model = model
        self.system_instruction = system_instruction
        self.context_window = context_window
        self.max_message_length = max_message_length

    def validate(self, session_id: str, message: str) -> None:
        if not session_id:
            raise InvalidMessageError("Session ID is required")
        if not message:
            raise InvalidMessageError("Message must not be empty")
        if message_length(message) > self.max_message_length:
            raise InvalidMessageError(
                f"Message must be at most {self.max_message_length} characters"
            )

    def send(self, session_id: str, message: str) -> ChatResponse:
        self.validate(session_id, message)

        stored = self.store.append(session_id, message, is_user=True)
        # prior turns only; unlike the old Node server, the new message is not also counted in the window
        history = [m for m in self.store.list(session_id) if m.id != stored.id]
        logger.info(
            "Incoming chat: session_id={} message_len={} history={}",
            session_id, len(message), len(history),
        )

        try:
            contents = build_contents(self.system_instruction, history, message, self.context_window)
            reply = extract_reply(self.model.generate(contents))
        except Exception as e:
            logger.exception("Chat failed for session_id={}", session_id)
            error_text = str(e) or UNEXPECTED_ERROR
            self.store.append(session_id, error_text, is_user=False)
            raise ChatFailedError(error_text) from e

        self.store.append(session_id, reply, is_user=False)
        logger.info("Model responded: session_id={} chars={}", session_id, len(reply))
        return ChatResponse(response=reply, timestamp=datetime.now(timezone.utc).isoformat())

"""HTTP surface: streamed chat turns and conversation management."""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import Depends, FastAPI, Header, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, StreamingResponse
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from synergi import __version__
from synergi.agent.router.agent_router import get_available_agents
from synergi.chat.orchestrator import ChatOrchestrator
from synergi.chat.sse import SSE_HEADERS
from synergi.config.schema import Config
from synergi.errors import ConversationNotFoundError, InvalidRequestError
from synergi.storage.base import ChatStore


class SendMessageRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    message: str = Field(min_length=1)
    conversation_id: Optional[str] = None


class MissingUserError(Exception):
    pass


async def get_user_id(x_user_id: Optional[str] = Header(default=None, alias="X-User-Id")) -> str:
    """Caller identity, asserted by the upstream gateway."""
    if not x_user_id or not x_user_id.strip():
        raise MissingUserError()
    return x_user_id.strip()


def create_app(
    config: Optional[Config] = None,
    store: Optional[ChatStore] = None,
    orchestrator: Optional[ChatOrchestrator] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Without an explicit store/orchestrator, both are wired from `config`
    with a LiteLLM provider.
    """
    config = config or Config()

    if store is None:
        from synergi.storage import create_store
        store = create_store(config.storage)

    if orchestrator is None:
        from synergi.providers.litellm_provider import LiteLLMProvider
        provider = LiteLLMProvider(
            api_key=config.providers.openrouter.api_key or None,
            api_base=config.providers.openrouter.api_base,
            default_model=config.providers.default_model,
            extra_headers=config.providers.openrouter.extra_headers,
        )
        orchestrator = ChatOrchestrator.from_config(config, store, provider)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"synergi API v{__version__} starting")
        yield
        await store.close()

    app = FastAPI(title="synergi", version=__version__, lifespan=lifespan)
    app.state.store = store
    app.state.orchestrator = orchestrator

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.server.cors_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(MissingUserError)
    async def missing_user_handler(request: Request, exc: MissingUserError):
        return JSONResponse(status_code=401, content={"error": "Missing X-User-Id header"})

    @app.exception_handler(RequestValidationError)
    async def validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content={"error": "Invalid request data", "details": jsonable_errors(exc)},
        )

    @app.exception_handler(InvalidRequestError)
    async def invalid_request_handler(request: Request, exc: InvalidRequestError):
        return JSONResponse(status_code=400, content={"error": "Invalid request data", "details": str(exc)})

    @app.exception_handler(ConversationNotFoundError)
    async def not_found_handler(request: Request, exc: ConversationNotFoundError):
        return JSONResponse(status_code=404, content={"error": "Conversation not found"})

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled exception: {exc}")
        return JSONResponse(status_code=500, content={"error": "Internal server error"})

    @app.get("/health")
    async def health_check():
        return {"status": "ok", "version": __version__}

    @app.post("/api/chat/send")
    async def send_message(body: SendMessageRequest, user_id: str = Depends(get_user_id)):
        async def event_stream() -> AsyncIterator[str]:
            async for event in orchestrator.run_turn(user_id, body.message, body.conversation_id):
                yield event.encode()

        return StreamingResponse(event_stream(), media_type="text/event-stream", headers=SSE_HEADERS)

    @app.get("/api/chat/conversations")
    async def list_conversations(
        page: int = Query(1, ge=1),
        limit: int = Query(20, ge=1, le=100),
        user_id: str = Depends(get_user_id),
    ):
        result = await store.list_conversations(user_id, page=page, limit=limit)
        return {
            "conversations": [summary.to_dict() for summary in result.items],
            "pagination": result.pagination(),
        }

    @app.get("/api/chat/conversations/{conversation_id}/messages")
    async def list_messages(
        conversation_id: str,
        page: int = Query(1, ge=1),
        limit: int = Query(50, ge=1, le=100),
        user_id: str = Depends(get_user_id),
    ):
        conversation = await store.get_conversation(conversation_id, user_id)
        result = await store.list_messages(conversation_id, user_id, page=page, limit=limit)
        return {
            "conversationId": conversation.id,
            "conversationTitle": conversation.title,
            "messages": [message.to_dict() for message in result.items],
            "pagination": result.pagination(),
        }

    @app.delete("/api/chat/conversations/{conversation_id}")
    async def delete_conversation(conversation_id: str, user_id: str = Depends(get_user_id)):
        await store.delete_conversation(conversation_id, user_id)
        return {"message": "Conversation deleted successfully"}

    @app.get("/api/agents")
    async def list_agents():
        return {"agents": [agent.to_dict() for agent in get_available_agents()]}

    return app


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    return [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg", ""), "type": error.get("type", "")}
        for error in exc.errors()
    ]

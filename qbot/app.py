# ============================================================
# QBOT FastAPI App
# ------------------------------------------------------------
# This app exposes the response orchestrator:
#   - POST /chat     one message in, one GenerationResult out
#   - POST /chat/clear  drop the requester's provider thread
#   - GET  /models   providers with credentials configured
#   - health checks
# Provider failures never change the status code; only a
# malformed request gets a non-2xx answer.
# ============================================================

from fastapi import Depends, FastAPI, HTTPException
from pydantic import BaseModel, Field
from typing import List, Optional, Literal
from functools import lru_cache

# --- Local imports ---
from qbot.settings import settings
from qbot.logs import setup_logging
from qbot.generate import (
    GenerationRequest,
    Language,
    Message,
    ProfileRef,
    ProviderId,
    ResponseOrchestrator,
)
from qbot.generate.errors import InvalidRequest

setup_logging(settings.LOG_LEVEL)

# ------------------------------------------------------------
# 🔧 Orchestrator (built once from configuration)
# ------------------------------------------------------------
@lru_cache(maxsize=1)
def get_orchestrator() -> ResponseOrchestrator:
    return ResponseOrchestrator.from_settings(settings)

# ------------------------------------------------------------
# 🚀 FastAPI init
# ------------------------------------------------------------
app = FastAPI(title="QBOT Orchestrator API", version="0.3")

# ------------------------------------------------------------
# 📦 Pydantic models
# ------------------------------------------------------------
class ChatTurn(BaseModel):
    role: Literal["user", "assistant"]
    content: str

class Requester(BaseModel):
    identity_key: Optional[str] = None
    rank: Optional[str] = None
    vessel: Optional[str] = None
    is_premium: bool = False
    is_admin: bool = False

class ChatRequest(BaseModel):
    message: str = Field(..., min_length=1)
    category: str = "Maritime Technical Support"
    language: Language = Language.DEFAULT
    requester: Requester = Field(default_factory=Requester)
    active_rules: Optional[str] = None
    history: List[ChatTurn] = Field(default_factory=list)
    preferred_provider: Optional[ProviderId] = None

class ChatPayload(BaseModel):
    content: str
    provider_id: str
    tokens_used: Optional[int] = None
    latency_ms: int
    tier: Optional[str] = None

class ClearRequest(BaseModel):
    identity_key: str = Field(..., min_length=1)

# ------------------------------------------------------------
# 💬 Main chat route
# ------------------------------------------------------------
@app.post("/chat", response_model=ChatPayload)
def chat(req: ChatRequest, orchestrator: ResponseOrchestrator = Depends(get_orchestrator)):
    request = GenerationRequest(
        message=req.message,
        category=req.category,
        language=req.language,
        profile=ProfileRef(**req.requester.model_dump()),
        active_rules=req.active_rules,
        history=tuple(Message(role=h.role, content=h.content) for h in req.history),
        preferred_provider=req.preferred_provider,
    )
    try:
        out = orchestrator.generate(request)
    except InvalidRequest as e:
        raise HTTPException(status_code=422, detail=str(e))

    return ChatPayload(
        content=out.content,
        provider_id=out.provider_id.value,
        tokens_used=out.tokens_used,
        latency_ms=out.latency_ms,
        tier=out.tier.value if out.tier else None,
    )

# ------------------------------------------------------------
# 🧹 Clear chat
# ------------------------------------------------------------
@app.post("/chat/clear")
def clear_chat(req: ClearRequest, orchestrator: ResponseOrchestrator = Depends(get_orchestrator)):
    return {"cleared": orchestrator.clear_conversation(req.identity_key)}

# ------------------------------------------------------------
# 🤖 Provider discovery
# ------------------------------------------------------------
@app.get("/models")
def list_models(orchestrator: ResponseOrchestrator = Depends(get_orchestrator)):
    return {"models": [p.value for p in orchestrator.registry.available()]}

# ------------------------------------------------------------
# 🧭 Health checks
# ------------------------------------------------------------
@app.get("/healthz")
def healthz():
    return {
        "ok": True,
        "env": settings.ENV,
        "debug": settings.DEBUG,
        "app": settings.app_name,
    }

@app.get("/health")
def health():
    return {"status": "ok", "env": settings.ENV}

@app.get("/")
def hello():
    return {"message": "QBOT orchestrator running."}

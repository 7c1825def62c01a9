"""
FastAPI Web Application - Arcade Studio API.
Generate, edit, preview, export and import educational minigames, and chat with AINARA.
"""

import asyncio
import os
import uuid
from pathlib import Path
from threading import Lock
from typing import Any, Dict, List, Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, PlainTextResponse
from fastapi.templating import Jinja2Templates
from pydantic import BaseModel, Field
from dotenv import load_dotenv

from .chains.game_chain import GameStudioChain, StudioResult
from .parsers.chat_parser import split_idea_offers, strip_idea_markers
from .prompts.templates import FIX_SYMPTOMS
from .session import OperationInProgress, SessionStore, StudioSession
from .utils.export import export_filename, export_game
from .utils.preview import render_preview

load_dotenv()

# Initialize FastAPI app
app = FastAPI(
    title="Arcade Studio",
    description="Educational minigame generator for language teachers",
    version="1.0.0"
)

# CORS middleware - restrict origins for security
app.add_middleware(
    CORSMiddleware,
    allow_origins=os.getenv("CORS_ORIGINS", "http://localhost:8000,http://127.0.0.1:8000").split(","),
    allow_credentials=True,
    allow_methods=["GET", "POST", "DELETE"],
    allow_headers=["*"],
)

# Setup directories
BASE_DIR = Path(__file__).parent.parent
TEMPLATES_DIR = BASE_DIR / "templates"

# Setup templates
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

# Chain and sessions are created on first use so importing the app needs no API key
_chain: Optional[GameStudioChain] = None
_chain_lock = Lock()
_store = SessionStore()


def get_chain() -> GameStudioChain:
    global _chain
    with _chain_lock:
        if _chain is None:
            _chain = GameStudioChain()
        return _chain


def get_store() -> SessionStore:
    return _store


# ============ REQUEST/RESPONSE MODELS ============

class GenerateRequest(BaseModel):
    session_id: str = Field("", description="Client-generated session ID")
    idea: str = Field("", max_length=4000, description="Game idea in plain words")
    target_lang: str = Field("", max_length=40, description="Language being learned")
    comf_lang: str = Field("", max_length=40, description="Language the students are comfortable in")


class EditRequest(BaseModel):
    session_id: str
    parameter_changes: Dict[str, float] = Field(default_factory=dict)
    features: List[str] = Field(default_factory=list)
    general_request: str = ""
    fix: bool = False
    fix_context: str = ""
    fix_symptoms: List[str] = Field(default_factory=list)


class ImportRequest(BaseModel):
    session_id: str = ""
    content: str


class ChatRequest(BaseModel):
    session_id: str = ""
    message: str = Field(..., min_length=1, max_length=4000)


class StudioResponse(BaseModel):
    """Result of a studio action plus the session state after it."""
    success: bool
    session_id: str
    status: Optional[str] = None
    error: Optional[str] = None
    auth_required: bool = False
    generation_time: Optional[float] = None
    steps_completed: List[str] = []
    state: Dict[str, Any] = {}


class ChatSegment(BaseModel):
    text: str
    idea: Optional[str] = None


class ChatResponse(BaseModel):
    success: bool
    session_id: str
    header: str = ""
    body: str = ""
    footer: str = ""
    language: str = "en"
    segments: List[ChatSegment] = []
    copy_text: str = ""
    auth_required: bool = False


# ============ HELPERS ============

def _session_for(store: SessionStore, session_id: str) -> StudioSession:
    return store.get_or_create(session_id or uuid.uuid4().hex)


def _existing_session(store: SessionStore, session_id: str) -> StudioSession:
    session = store.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Unknown session")
    return session


def _studio_response(session: StudioSession, result: StudioResult) -> StudioResponse:
    return StudioResponse(
        success=result.success,
        session_id=session.session_id,
        status=result.status,
        error=result.error,
        auth_required=session.auth_required,
        generation_time=round(result.generation_time, 2),
        steps_completed=result.steps_completed,
        state=session.snapshot(),
    )


async def _run_guarded(func, *args, **kwargs):
    """Run a blocking studio action in a worker thread; busy purposes become 409."""
    try:
        return await asyncio.to_thread(func, *args, **kwargs)
    except OperationInProgress as e:
        raise HTTPException(status_code=409, detail=str(e))


# ============ API ENDPOINTS ============

@app.get("/", response_class=HTMLResponse)
async def home(request: Request):
    """Serve the main web interface."""
    return templates.TemplateResponse(request, "index.html", {"fix_symptoms": FIX_SYMPTOMS})


@app.post("/api/generate", response_model=StudioResponse)
async def generate_game(
    request: GenerateRequest,
    chain: GameStudioChain = Depends(get_chain),
    store: SessionStore = Depends(get_store),
):
    """Generate a new game: oracle call, parse, then best-effort analysis."""
    session = _session_for(store, request.session_id)
    result = await _run_guarded(chain.generate, session, request.idea, request.target_lang, request.comf_lang)
    return _studio_response(session, result)


@app.post("/api/edit", response_model=StudioResponse)
async def edit_game(
    request: EditRequest,
    chain: GameStudioChain = Depends(get_chain),
    store: SessionStore = Depends(get_store),
):
    """Apply parameter changes, features, a general request or a fix to the current game."""
    session = _existing_session(store, request.session_id)
    if not session.script:
        raise HTTPException(status_code=400, detail="There is no game to edit.")
    result = await _run_guarded(
        chain.edit,
        session,
        parameter_changes=request.parameter_changes,
        features=request.features,
        general_request=request.general_request,
        fix=request.fix,
        fix_context=request.fix_context,
        fix_symptoms=request.fix_symptoms,
    )
    return _studio_response(session, result)


@app.post("/api/import", response_model=StudioResponse)
async def import_game_file(
    request: ImportRequest,
    chain: GameStudioChain = Depends(get_chain),
    store: SessionStore = Depends(get_store),
):
    """Load a previously exported game file into the session."""
    session = _session_for(store, request.session_id)
    result = await _run_guarded(chain.import_file, session, request.content)
    return _studio_response(session, result)


@app.get("/api/export/{session_id}")
async def export_game_file(session_id: str, store: SessionStore = Depends(get_store)):
    """Download the current game as a plain-text file."""
    session = _existing_session(store, session_id)
    if not session.has_game:
        raise HTTPException(status_code=404, detail="There is no game to export.")
    return PlainTextResponse(
        export_game(session.descriptor, session.script),
        headers={"Content-Disposition": f'attachment; filename="{export_filename(session.descriptor)}"'},
    )


@app.get("/api/preview/{session_id}", response_class=HTMLResponse)
async def preview_game(session_id: str, store: SessionStore = Depends(get_store)):
    """Sandbox harness page for the iframe."""
    session = store.get(session_id)
    if session is None or not session.has_game:
        return HTMLResponse(render_preview(None, None))
    return HTMLResponse(render_preview(session.descriptor, session.script))


@app.get("/api/session/{session_id}")
async def get_session(session_id: str, store: SessionStore = Depends(get_store)):
    """Current studio state."""
    return _existing_session(store, session_id).snapshot()


@app.post("/api/chat", response_model=ChatResponse)
async def chat(
    request: ChatRequest,
    chain: GameStudioChain = Depends(get_chain),
    store: SessionStore = Depends(get_store),
):
    """Send a message to AINARA."""
    if not request.message.strip():
        raise HTTPException(status_code=400, detail="Message is empty.")
    session = _session_for(store, request.session_id)
    turn = await _run_guarded(chain.chat, session, request.message)
    return ChatResponse(
        success=not session.auth_required and turn.header not in ("API Error", "Response Error"),
        session_id=session.session_id,
        header=turn.header,
        body=turn.body,
        footer=turn.footer,
        language=turn.language,
        segments=[ChatSegment(text=s.text, idea=s.idea) for s in split_idea_offers(turn.body)],
        copy_text=strip_idea_markers(turn.body),
        auth_required=session.auth_required,
    )


@app.delete("/api/chat/{session_id}")
async def clear_chat(
    session_id: str,
    chain: GameStudioChain = Depends(get_chain),
    store: SessionStore = Depends(get_store),
):
    """Forget the conversation."""
    session = _existing_session(store, session_id)
    chain.clear_chat(session)
    return {"success": True, "message": "Chat cleared"}


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "version": "1.0.0",
        "provider": os.getenv("ORACLE_PROVIDER", "gemini"),
        "sessions": len(_store),
    }


# Run with: uvicorn arcade_studio.main:app --reload
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="127.0.0.1", port=int(os.getenv("PORT", "8000")))

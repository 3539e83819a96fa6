"""FastAPI server for the drafting assistant.

Exposes the drafting operations and the contract renderer as JSON endpoints
for the form UI.

Usage:
    GROQ_API_KEY=... CLAUSEDRAFT_TEMPLATES=data/templates.json \
        uvicorn clausedraft.server:app --reload --port 5000

Without ``GROQ_API_KEY`` every AI endpoint answers with deterministic mock
output.
"""
from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse
from pydantic import BaseModel, ConfigDict, Field

from clausedraft.config import DraftingConfig
from clausedraft.drafting import analyze_risks, generate_contract, suggest_clauses
from clausedraft.drafting_types import Clause, ClauseSuggestion, ContractTemplate
from clausedraft.errors import (
    GenerationError,
    MissingFieldsError,
    ResponseParseError,
    TemplateNotFoundError,
)
from clausedraft.generator import TextGenerator, build_text_generator
from clausedraft.io_utils import load_json
from clausedraft.markdown_render import render_contract
from clausedraft.placeholders import fill_template

log = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Globals
# ---------------------------------------------------------------------------
_config = DraftingConfig.from_env()
_generator: TextGenerator | None = build_text_generator(_config)
_templates: dict[str, ContractTemplate] = {}


def _load_templates(config: DraftingConfig) -> None:
    """Load the template catalogue (JSON list of template objects)."""
    _templates.clear()
    path = config.templates_path
    if path is None:
        log.info("No CLAUSEDRAFT_TEMPLATES configured; template drafting disabled")
        return
    if not path.exists():
        log.warning("Template catalogue not found at %s", path)
        return
    raw = load_json(path)
    rows = raw.get("templates", []) if isinstance(raw, dict) else raw
    for row in rows:
        if not isinstance(row, dict):
            continue
        try:
            template = ContractTemplate.from_dict(row)
        except ValueError as e:
            log.warning("Skipping template row: %s", e)
            continue
        _templates[template.template_id] = template
    log.info("Templates loaded: %d from %s", len(_templates), path)


def _get_template(template_id: str) -> ContractTemplate:
    template = _templates.get(template_id)
    if template is None:
        raise TemplateNotFoundError(template_id)
    return template


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------
@asynccontextmanager
async def lifespan(app: FastAPI):  # noqa: ARG001
    try:
        _load_templates(_config)
    except (OSError, ValueError) as e:
        log.warning("Could not load templates: %s", e)
    backend = _generator.model_version() if _generator is not None else "mock"
    log.info("Drafting API ready (backend=%s)", backend)
    yield


# ---------------------------------------------------------------------------
# App
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Clause Drafting API",
    version="0.1.0",
    default_response_class=ORJSONResponse,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(_config.cors_origins),
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------
class ClauseModel(BaseModel):
    title: str = ""
    content: str | None = ""

    def to_clause(self) -> Clause:
        return Clause(title=self.title, content=self.content or "")


class SuggestionModel(ClauseModel):
    used: bool = False

    def to_suggestion(self) -> ClauseSuggestion:
        return ClauseSuggestion(title=self.title, content=self.content or "", used=self.used)


class AnalyzeRisksRequest(BaseModel):
    clauses: list[ClauseModel] = Field(default_factory=list)


class SuggestRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    document_type: str = Field(default="", alias="documentType")
    user_clauses: list[ClauseModel] = Field(default_factory=list, alias="userClauses")
    language: str = "English"


class GenerateDocumentRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    template_id: str = Field(default="", alias="templateId")
    user_clauses: list[ClauseModel] | None = Field(default=None, alias="userClauses")
    ai_suggestions: list[SuggestionModel] = Field(default_factory=list, alias="aiSuggestions")
    language: str = "English"


class GenerateContractRequest(BaseModel):
    clauses: list[str] = Field(default_factory=list)


class RenderRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    markdown: str = ""
    dedupe_signatures: bool = Field(default=True, alias="dedupeSignatures")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def _http_error(exc: Exception, *, message: str) -> HTTPException:
    """Map a drafting exception to the HTTP error the UI expects."""
    if isinstance(exc, MissingFieldsError):
        return HTTPException(status_code=400, detail=str(exc))
    if isinstance(exc, TemplateNotFoundError):
        return HTTPException(status_code=404, detail="Template not found")
    log.error("%s: %s", message, exc)
    return HTTPException(status_code=500, detail=message)


# ---------------------------------------------------------------------------
# Routes: Health
# ---------------------------------------------------------------------------
@app.get("/api/health")
async def health():
    return {
        "status": "ok",
        "backend": "groq" if _generator is not None else "mock",
        "model": _generator.model_version() if _generator is not None else None,
        "templates_loaded": len(_templates),
    }


# ---------------------------------------------------------------------------
# Routes: AI drafting
# ---------------------------------------------------------------------------
@app.post("/api/ai/analyze-risks")
async def analyze_risks_route(req: AnalyzeRisksRequest) -> dict[str, Any]:
    """Risk level, risks and suggested improvements per clause."""
    clauses = [c.to_clause() for c in req.clauses]
    try:
        result = await asyncio.to_thread(analyze_risks, clauses, _generator)
    except (MissingFieldsError, ResponseParseError) as e:
        raise _http_error(e, message="Error processing risk analysis results") from e
    except GenerationError as e:
        raise _http_error(e, message="Failed to analyze risks") from e
    return {"riskAnalysis": [r.to_dict() for r in result]}


@app.post("/api/ai/suggest")
async def suggest_route(req: SuggestRequest) -> dict[str, Any]:
    """Additional clause suggestions for a document type."""
    clauses = [c.to_clause() for c in req.user_clauses]
    try:
        result = await asyncio.to_thread(
            suggest_clauses, req.document_type, clauses, _generator, language=req.language,
        )
    except (MissingFieldsError, ResponseParseError) as e:
        raise _http_error(e, message="Error processing AI suggestions") from e
    except GenerationError as e:
        raise _http_error(e, message="Error generating AI suggestions") from e
    return {"suggestions": [s.to_dict() for s in result]}


@app.post("/api/ai/generate")
async def generate_document_route(req: GenerateDocumentRequest) -> dict[str, Any]:
    """Fill a stored template's placeholders with clauses."""
    try:
        if not req.template_id or req.user_clauses is None:
            raise MissingFieldsError(
                "Missing required fields: templateId and userClauses are required"
            )
        template = _get_template(req.template_id)
    except (MissingFieldsError, TemplateNotFoundError) as e:
        raise _http_error(e, message="Error generating document") from e

    drafted = fill_template(
        template,
        [c.to_clause() for c in req.user_clauses],
        [s.to_suggestion() for s in req.ai_suggestions],
        language=req.language,
    )
    return drafted.to_dict()


@app.post("/api/ai/generate-contract")
async def generate_contract_route(req: GenerateContractRequest) -> dict[str, Any]:
    """Generate a full contract from clause texts, rendered as HTML."""
    try:
        html = await asyncio.to_thread(generate_contract, req.clauses, _generator)
    except (MissingFieldsError, GenerationError) as e:
        raise _http_error(e, message="Failed to generate contract") from e
    return {"contract": html}


# ---------------------------------------------------------------------------
# Routes: Rendering
# ---------------------------------------------------------------------------
@app.post("/api/render")
async def render_route(req: RenderRequest) -> dict[str, Any]:
    """Render caller-supplied markdown with the contract renderer."""
    return {"contract": render_contract(req.markdown, dedupe_signatures=req.dedupe_signatures)}

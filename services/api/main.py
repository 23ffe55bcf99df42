import os
import logging
import sys
from typing import Any, Dict, List, Optional

from pythonjsonlogger import jsonlogger
from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

# local modules
from services.api.errors import ApiError, ModelInvocationError, ValidationError
from services.api.llm import build_invoker
from services.api.prompt import (
    build_chat_prompt,
    build_compare_prompt,
    build_factibility_prompt,
    build_investigate_fallback_prompt,
    build_investigate_prompt,
    wrap_fallback_answer,
)
from services.corpus.provider import CorpusLoadError, CorpusProvider
from services.retrieval.context import (
    COMPARISON_POLICY,
    assemble_context,
    build_factibility_context,
    dedupe_citations,
    policy_for,
)


# ========= Structured Logging Setup =========
def setup_logging():
    """Configure structured JSON logging to stdout."""
    formatter = jsonlogger.JsonFormatter(
        fmt="%(asctime)s %(name)s %(levelname)s %(message)s",
        rename_fields={"asctime": "timestamp", "levelname": "level", "name": "logger"},
    )
    level = os.getenv("LOG_LEVEL", "INFO").upper()

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    root_handler = logging.StreamHandler(sys.stdout)
    root_handler.setFormatter(formatter)
    root_logger.addHandler(root_handler)

    for logger_name in ["uvicorn", "uvicorn.access", "uvicorn.error"]:
        uvicorn_logger = logging.getLogger(logger_name)
        uvicorn_logger.handlers.clear()
        uvicorn_logger.propagate = False

        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(formatter)
        uvicorn_logger.addHandler(handler)
        uvicorn_logger.setLevel(level)


setup_logging()
logger = logging.getLogger(__name__)


# ========= Env & Defaults =========
LLM_BACKEND = os.getenv("LLM_BACKEND", "gemini").lower().strip()
GEMINI_API_KEY = os.getenv("GEMINI_API_KEY")
LLM_MODEL = os.getenv("LLM_MODEL", "gemini-2.5-flash")
SEARCH_MODEL = os.getenv("SEARCH_MODEL", "gemini-2.5-flash")  # used with Google Search grounding
FALLBACK_MODEL = os.getenv("FALLBACK_MODEL", "gemini-2.5-flash-lite")
AWS_REGION = os.getenv("AWS_REGION", "us-east-1")
BEDROCK_MODEL = os.getenv("BEDROCK_MODEL", "anthropic.claude-3-haiku-20240307-v1:0")
CORPUS_PATH = os.getenv("CORPUS_PATH")
CORS_ALLOW_ORIGIN = os.getenv("CORS_ALLOW_ORIGIN", "*")

FLOW_PATHS = ["/api/chat", "/api/compare", "/api/factibility", "/api/investigate"]

CHAT_ERROR_RESPONSE = "Ocurrió un error al procesar tu consulta. Intenta nuevamente."
CORPUS_ERROR_RESPONSE = "No se pudieron cargar los planes de gobierno. Intenta nuevamente."


# ========= FastAPI app =========
app = FastAPI(title="VotoInformado API", version="0.1.0")
app.state.corpus = CorpusProvider(CORPUS_PATH)
app.state.llm = build_invoker(
    LLM_BACKEND,
    gemini_api_key=GEMINI_API_KEY,
    gemini_model=LLM_MODEL,
    aws_region=AWS_REGION,
    bedrock_model=BEDROCK_MODEL,
)


@app.on_event("startup")
async def startup_event():
    logger.info(
        "API server starting",
        extra={
            "backend": LLM_BACKEND,
            "llm_model": LLM_MODEL,
            "search_model": SEARCH_MODEL,
            "corpus_candidates": [str(p) for p in app.state.corpus.candidates()],
        },
    )


def _cors_headers() -> Dict[str, str]:
    return {
        "Access-Control-Allow-Origin": CORS_ALLOW_ORIGIN,
        "Access-Control-Allow-Headers": "Content-Type",
    }


@app.middleware("http")
async def cors_middleware(request: Request, call_next):
    resp = await call_next(request)
    resp.headers.update(_cors_headers())
    resp.headers["Strict-Transport-Security"] = (
        "max-age=31536000; includeSubDomains; preload"
    )
    return resp


# ========= Error envelope =========
@app.exception_handler(ApiError)
async def api_error_handler(request: Request, exc: ApiError):
    return JSONResponse(exc.to_body(), status_code=exc.status_code, headers=_cors_headers())


@app.exception_handler(CorpusLoadError)
async def corpus_error_handler(request: Request, exc: CorpusLoadError):
    logger.error("Corpus load failed", extra={"path": request.url.path, "error": str(exc)})
    return JSONResponse(
        {"error": str(exc), "response": CORPUS_ERROR_RESPONSE},
        status_code=500,
        headers=_cors_headers(),
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    headers = dict(exc.headers or {})
    headers.update(_cors_headers())
    return JSONResponse({"error": exc.detail}, status_code=exc.status_code, headers=headers)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    logger.info("Rejected request body", extra={"path": request.url.path})
    return JSONResponse(
        {"error": "Solicitud inválida: revisa el cuerpo JSON"},
        status_code=400,
        headers=_cors_headers(),
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    # runs outside the http middleware, so CORS headers are set here
    logger.exception("Unhandled error", extra={"path": request.url.path})
    return JSONResponse(
        {"error": "Error interno: " + str(exc), "response": CHAT_ERROR_RESPONSE},
        status_code=500,
        headers=_cors_headers(),
    )


# ========= Request models =========
class ChatIn(BaseModel):
    question: Optional[str] = None
    partyId: Optional[str] = None
    mode: Optional[str] = None


class CompareIn(BaseModel):
    partyIds: Optional[List[str]] = None
    partyNames: Optional[List[str]] = None


class FactibilityIn(BaseModel):
    question: Optional[str] = None
    partyId: Optional[str] = None


class InvestigateIn(BaseModel):
    question: Optional[str] = None


def _require_question(question: Optional[str], message: str) -> str:
    q = (question or "").strip()
    if not q:
        raise ValidationError(message)
    return q


def _generate(
    llm, prompt: str, error_prefix: str, response_prefix: str, with_detail: bool = True
):
    try:
        return llm.generate(prompt)
    except ModelInvocationError as e:
        logger.error("LLM call failed", extra={"error": e.message})
        response = response_prefix + e.message if with_detail else response_prefix
        raise ModelInvocationError(error_prefix + e.message, response=response) from e


# ========= Routes =========
@app.get("/health")
def health(request: Request):
    return {
        "ok": True,
        "backend": LLM_BACKEND,
        "corpusLoaded": request.app.state.corpus.loaded,
    }


@app.head("/health")
def health_head():
    return Response(status_code=200)


def preflight():
    return Response(status_code=200)


for _path in FLOW_PATHS:
    app.add_api_route(_path, preflight, methods=["OPTIONS"], include_in_schema=False)


@app.get("/api/parties")
def list_parties(request: Request):
    corpus = request.app.state.corpus.get()
    return {
        "parties": [
            {
                "id": p.id,
                "name": p.name,
                "candidate": p.candidate,
                "ideology": p.ideology,
                "chunkCount": len(p.chunks),
            }
            for p in corpus.parties
        ]
    }


@app.post("/api/chat")
def chat(request: Request, inp: Optional[ChatIn] = None):
    inp = inp or ChatIn()
    question = _require_question(inp.question, "Falta la pregunta")
    party_id = inp.partyId or None

    logger.info(
        "Processing chat query",
        extra={"query_length": len(question), "party_id": party_id, "mode": inp.mode},
    )

    llm = request.app.state.llm
    llm.ensure_configured()
    corpus = request.app.state.corpus.get()

    # 1) retrieve + assemble
    if party_id:
        parties = [p for p in corpus.parties if p.id == party_id]
    else:
        parties = list(corpus.parties)
    ctx = assemble_context(parties, question, policy_for(party_id))

    # 2) LLM
    reply = _generate(
        llm,
        build_chat_prompt(question, ctx.text),
        error_prefix="Error interno: ",
        response_prefix=CHAT_ERROR_RESPONSE,
        with_detail=False,
    )

    # 3) citations
    citations = dedupe_citations(ctx.citations)
    logger.info(
        "Chat query processed",
        extra={"citation_count": len(citations), "answer_length": len(reply.text)},
    )
    return {"response": reply.text, "citations": [c.to_dict() for c in citations]}


@app.post("/api/compare")
def compare(request: Request, inp: Optional[CompareIn] = None):
    inp = inp or CompareIn()
    if not inp.partyIds or len(inp.partyIds) < 2:
        raise ValidationError("Se necesitan al menos 2 partidos")

    llm = request.app.state.llm
    llm.ensure_configured()
    corpus = request.app.state.corpus.get()

    parties = [p for p in (corpus.find(pid) for pid in inp.partyIds) if p is not None]
    names = inp.partyNames or [p.name for p in parties] or list(inp.partyIds)
    logger.info(
        "Processing comparison",
        extra={"party_ids": inp.partyIds, "resolved_count": len(parties)},
    )

    ctx = assemble_context(parties, "", COMPARISON_POLICY)
    reply = _generate(
        llm,
        build_compare_prompt(ctx.text, names),
        error_prefix="",
        response_prefix="Error al comparar partidos: ",
    )
    return {"response": reply.text}


@app.post("/api/factibility")
def factibility(request: Request, inp: Optional[FactibilityIn] = None):
    inp = inp or FactibilityIn()
    question = _require_question(inp.question, "Falta la propuesta a analizar")

    llm = request.app.state.llm
    llm.ensure_configured()

    party = None
    if inp.partyId:
        corpus = request.app.state.corpus.get_optional()
        if corpus is not None:
            party = corpus.find(inp.partyId)

    logger.info(
        "Processing feasibility check",
        extra={"query_length": len(question), "party_id": inp.partyId, "party_found": party is not None},
    )
    reply = _generate(
        llm,
        build_factibility_prompt(question, build_factibility_context(party)),
        error_prefix="",
        response_prefix="Error al analizar factibilidad: ",
    )
    return {"response": reply.text}


@app.post("/api/investigate")
def investigate(request: Request, inp: Optional[InvestigateIn] = None):
    inp = inp or InvestigateIn()
    question = _require_question(inp.question, "Falta la pregunta")

    llm = request.app.state.llm
    llm.ensure_configured()
    logger.info("Processing investigation", extra={"query_length": len(question)})

    try:
        reply = llm.generate(
            build_investigate_prompt(question), model=SEARCH_MODEL, search=True
        )
    except ModelInvocationError as err:
        logger.warning(
            "Search-grounded call failed, using fallback model",
            extra={"error": err.message, "fallback_model": FALLBACK_MODEL},
        )
        try:
            fallback = llm.generate(
                build_investigate_fallback_prompt(question), model=FALLBACK_MODEL
            )
        except ModelInvocationError as fallback_err:
            logger.error("Fallback call failed", extra={"error": fallback_err.message})
            raise ModelInvocationError(
                "Error: " + err.message,
                response="Error al buscar información. " + err.message,
            ) from err
        return {"response": wrap_fallback_answer(fallback.text), "sources": []}

    sources: List[Dict[str, Any]] = [s.to_dict() for s in reply.sources]
    logger.info("Investigation processed", extra={"source_count": len(sources)})
    return {"response": reply.text, "sources": sources}

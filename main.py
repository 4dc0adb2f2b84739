# main.py
import logging
import os
import tempfile
from typing import Optional

from fastapi import Depends, FastAPI, File, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from sqlalchemy.exc import SQLAlchemyError

from config import Settings, load_settings
from csv_io import export_leads_csv, parse_leads_csv
from errors import InvalidCSV, LeadScoringError, NoResults, UploadTooLarge
from llm import build_backends
from models import Backend, Intent, OfferIn, ScoreRequest
from scoring import run_scoring
from storage import Store

logger = logging.getLogger(__name__)

UPLOAD_CHUNK_BYTES = 64 * 1024


def get_store(request: Request) -> Store:
    return request.app.state.store


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def jsonable_errors(exc: RequestValidationError) -> list:
    return [{"loc": list(e.get("loc", ())), "msg": e.get("msg")} for e in exc.errors()]


def save_upload(file: UploadFile, upload_dir: str, max_bytes: int) -> str:
    """Copy an upload to a temp file in bounded chunks; returns its path."""
    os.makedirs(upload_dir, exist_ok=True)
    fd, path = tempfile.mkstemp(dir=upload_dir, suffix=".csv")
    written = 0
    try:
        with os.fdopen(fd, "wb") as out:
            while True:
                chunk = file.file.read(UPLOAD_CHUNK_BYTES)
                if not chunk:
                    break
                written += len(chunk)
                if written > max_bytes:
                    raise UploadTooLarge(f"File exceeds the {max_bytes} byte upload limit")
                out.write(chunk)
    except BaseException:
        os.unlink(path)
        raise
    return path


def create_app(settings: Optional[Settings] = None, store: Optional[Store] = None, backends: Optional[dict] = None) -> FastAPI:
    settings = settings or load_settings()
    logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    app = FastAPI(title="Lead Scoring API", version="0.2")
    app.state.settings = settings
    app.state.store = store or Store.from_url(settings.database_url)
    app.state.backends = backends or build_backends(settings)

    @app.exception_handler(LeadScoringError)
    async def _scoring_error(request: Request, exc: LeadScoringError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse({"detail": exc.message}, status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError):
        if request.url.path.endswith("/offer"):
            detail = "Missing required fields: name, value_props, ideal_use_cases"
        else:
            detail = "Invalid request"
        return JSONResponse({"detail": detail, "errors": jsonable_errors(exc)}, status_code=400)

    @app.exception_handler(SQLAlchemyError)
    async def _db_error(request: Request, exc: SQLAlchemyError):
        logger.exception("Database error on %s %s", request.method, request.url.path)
        return JSONResponse({"detail": "Internal Server Error"}, status_code=500)

    @app.get("/")
    async def root():
        return {"success": True, "message": "Health check done!"}

    @app.post("/api/v1/offer", status_code=201)
    async def post_offer(offer: OfferIn, store: Store = Depends(get_store)):
        saved = store.create_offer(offer.name, offer.value_props, offer.ideal_use_cases)
        logger.info("Offer saved: id=%s name=%r", saved.id, saved.name)
        return {"message": "Offer created successfully", "offer": saved.model_dump(mode="json")}

    @app.post("/api/v1/leads/upload")
    def upload_leads(
        file: UploadFile = File(...),
        store: Store = Depends(get_store),
        settings: Settings = Depends(get_settings),
    ):
        if not (file.filename or "").lower().endswith((".csv", ".txt")):
            raise InvalidCSV("Only CSV files supported.")
        path = save_upload(file, settings.upload_dir, settings.max_upload_bytes)
        try:
            rows = parse_leads_csv(path)
            inserted = store.bulk_insert_leads(rows)
        finally:
            os.unlink(path)
        logger.info("Uploaded %d rows (%d inserted)", len(rows), inserted)
        return {"message": f"Uploaded {len(rows)} rows", "inserted": inserted}

    @app.post("/api/v1/score")
    async def score(req: Optional[ScoreRequest] = None, store: Store = Depends(get_store)):
        choice = Backend.resolve(req.llm_client if req else None)
        results = await run_scoring(store, app.state.backends[choice])
        logger.info("Leads scored: %d", len(results))
        return {"message": "Leads scored successfully", "results": [r.model_dump(mode="json") for r in results]}

    @app.get("/api/v1/results")
    async def get_results(
        intent: Optional[str] = None,
        min_score: Optional[float] = None,
        limit: Optional[int] = None,
        store: Store = Depends(get_store),
    ):
        filters = {}
        wanted = Intent.normalize(intent) if intent else None
        if wanted:
            filters["intent"] = wanted.value
        if min_score is not None:
            filters["score"] = {"gte": min_score}
        leads = store.find_leads(intent=wanted, min_score=min_score, limit=limit)
        logger.info("%d leads fetched", len(leads))
        return {
            "message": "Results fetched successfully.",
            "filters": filters,
            "count": len(leads),
            "results": [lead.model_dump(mode="json") for lead in leads],
        }

    @app.get("/api/v1/results/export")
    async def export_results(store: Store = Depends(get_store)):
        leads = store.all_leads()
        if not leads:
            raise NoResults("No leads found to export")
        csv_text = export_leads_csv(leads)
        return Response(
            csv_text,
            media_type="text/csv",
            headers={"Content-Disposition": "attachment; filename=scored_leads.csv"},
        )

    return app


app = create_app()

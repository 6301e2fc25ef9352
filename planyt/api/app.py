from __future__ import annotations
import os
import time
from datetime import datetime, timezone

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.requests import Request
from fastapi.responses import JSONResponse

from planyt.api.models import (
    AutoMapRequest,
    AutoMapResponse,
    ConverseRequest,
    ConverseResponse,
    ForecastRequest,
    ForecastResponse,
)
from planyt.api import services
from planyt.errors import ConfigurationError, EmbeddingError, InvalidInputError
from planyt.utils.logger import logger

API_TITLE = "Planyt Planning API"
API_VERSION = os.getenv("API_VERSION", "v1")

app = FastAPI(title=API_TITLE, version=API_VERSION, openapi_url="/openapi.json")

# CORS
origins = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Request Logging Middleware
@app.middleware("http")
async def log_requests(request, call_next):
    start_time = time.time()
    try:
        response = await call_next(request)
        process_time = (time.time() - start_time) * 1000

        log_data = {
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "duration_ms": round(process_time, 2),
        }
        logger.info(f"Request processed: {log_data}")
        return response
    except Exception as e:
        process_time = (time.time() - start_time) * 1000
        logger.error(f"Request failed: {request.method} {request.url.path} - {str(e)} - {process_time:.2f}ms")
        raise


# Global Exception Handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception: {str(exc)}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal Server Error", "error": str(exc)},
    )


@app.get("/api/v1/health")
def health():
    return {
        "status": "ok",
        "time": datetime.now(timezone.utc).isoformat(),
        "version": API_VERSION,
    }


@app.post("/api/v1/automap", response_model=AutoMapResponse)
def automap(payload: AutoMapRequest):
    candidates = [c.to_candidate() for c in payload.candidates]
    try:
        mappings, persisted = services.run_auto_mapping(
            payload.rows,
            candidates,
            model=payload.model,
            tenant_id=payload.tenant_id,
            dataset_id=payload.dataset_id,
        )
    except InvalidInputError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ConfigurationError as e:
        raise HTTPException(status_code=503, detail=str(e))
    except EmbeddingError as e:
        logger.error(f"Auto-mapping failed: {e}")
        raise HTTPException(status_code=502, detail=f"Embedding backend failed: {e}")
    return {"mappings": [m.to_dict() for m in mappings], "persisted": persisted}


@app.post("/api/v1/forecast", response_model=ForecastResponse)
def forecast(payload: ForecastRequest):
    try:
        return services.run_forecast(
            payload.start_date,
            payload.end_date,
            product=payload.product,
            table=payload.table,
            timeout_seconds=payload.job_timeout_seconds,
            user_id=payload.user_id,
        )
    except Exception as e:
        logger.error(f"Forecast job failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to run forecast job: {e}")


@app.post("/api/v1/converse", response_model=ConverseResponse)
def converse(payload: ConverseRequest):
    response = services.converse(payload.text, payload.user_id)
    return response.to_dict()

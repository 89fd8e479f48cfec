from __future__ import annotations

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from rebrander.api.routes import details, mock, update
from rebrander.config import APP_VERSION, get_settings
from rebrander.core.exceptions import global_exception_handler, http_exception_handler, request_validation_exception_handler
from rebrander.core.lifespan import lifespan
from rebrander.core.middleware import RequestLoggingMiddleware

settings = get_settings()

app = FastAPI(title="Ghost Rebrander", version=APP_VERSION, lifespan=lifespan, docs_url=None, redoc_url=None, openapi_url=None)

if settings.allowed_origins:
  app.add_middleware(CORSMiddleware, allow_origins=list(settings.allowed_origins), allow_credentials=False, allow_methods=["GET", "POST", "OPTIONS"], allow_headers=["content-type"])

app.add_exception_handler(Exception, global_exception_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, request_validation_exception_handler)

app.add_middleware(RequestLoggingMiddleware)


@app.get("/health", include_in_schema=False)
async def health_check() -> dict[str, str]:
  """Return a simple health status."""
  return {"status": "ok", "version": APP_VERSION}


app.include_router(details.router, prefix="/details", tags=["details"])
app.include_router(update.router, prefix="/update", tags=["update"])
app.include_router(mock.router, prefix="/mock", tags=["mock"])

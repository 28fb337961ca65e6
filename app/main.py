"""FastAPI entry point for the raffle admin dashboard."""
from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from urllib.parse import quote

from fastapi import FastAPI, HTTPException, Request, Response, status
from fastapi.responses import JSONResponse, RedirectResponse

from app import __version__
from app.commission import ReportUnavailable
from app.database import init_db
from app.dependencies import templates
from app.routers import (
    affiliates,
    auth,
    commissions,
    customers,
    dashboard,
    draws,
    landing,
    sales,
    settings,
)

logging.basicConfig(
    level=os.getenv("SORTEIO_LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

REPORT_UNAVAILABLE_MESSAGE = "Não foi possível carregar os dados de comissões. Tente novamente."


@asynccontextmanager
async def lifespan(_: FastAPI):
    init_db()
    yield


app = FastAPI(title="Sorteio Admin", version=__version__, lifespan=lifespan)

app.include_router(auth.router)
app.include_router(dashboard.router)
app.include_router(affiliates.router)
app.include_router(customers.router)
app.include_router(sales.router)
app.include_router(commissions.router)
app.include_router(draws.router)
app.include_router(settings.router)
app.include_router(landing.router)


@app.get("/")
def root() -> RedirectResponse:
    return RedirectResponse(url="/login")


@app.get("/health")
def health() -> Response:
    """Simple health endpoint for load balancers and platform checks."""
    return Response(content='{"status":"ok"}', media_type="application/json")


@app.exception_handler(HTTPException)
async def http_exception_redirect_login(request: Request, exc: HTTPException):
    """Redirect 401 HTML page requests to /login; keep JSON for API calls.

    The original path (and query string) is passed along as ``next`` so the
    login form can send the user back after authenticating.
    """
    if exc.status_code != status.HTTP_401_UNAUTHORIZED:
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=exc.headers)

    accept = request.headers.get("accept", "")
    wants_html = "text/html" in accept or "*/*" in accept  # browsers often send */*
    if wants_html:
        target = request.url.path
        if request.url.query:
            target = f"{target}?{request.url.query}"
        return RedirectResponse(url=f"/login?next={quote(target, safe='')}", status_code=status.HTTP_303_SEE_OTHER)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


@app.exception_handler(ReportUnavailable)
async def report_unavailable(request: Request, exc: ReportUnavailable):
    """Render an error page for browsers and a JSON body for API clients."""
    logger.error("Commission report unavailable for %s: %s", request.url.path, exc)
    if "text/html" in request.headers.get("accept", ""):
        return templates.TemplateResponse(
            request,
            "error.html",
            {"message": REPORT_UNAVAILABLE_MESSAGE, "retry_url": request.url.path},
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        )
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": REPORT_UNAVAILABLE_MESSAGE},
    )

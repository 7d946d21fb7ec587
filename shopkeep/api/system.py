from pathlib import Path

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from shopkeep.core.envelope import ok

BASE_DIR = Path(__file__).resolve().parent.parent

templates = Jinja2Templates(directory=BASE_DIR / "frontend" / "templates")

router = APIRouter()

ROUTES = [
    ("GET", "/ping", "none"),
    ("POST", "/auth/login", "x-api-key"),
    ("GET", "/products", "x-api-key"),
    ("GET", "/products/:id", "x-api-key"),
    ("POST", "/products", "Bearer token, role editor/admin"),
    ("PUT", "/products/:id", "Bearer token, role editor/admin"),
    ("DELETE", "/products/:id", "Bearer token, role admin"),
]


@router.get("/", response_class=HTMLResponse)
def banner(request: Request):
    """Human-readable service banner"""
    return templates.TemplateResponse(
        request,
        "index.html",
        {"title": request.app.title, "routes": ROUTES},
    )


@router.get("/ping")
def ping(request: Request):
    """Liveness check"""
    return ok(request, {"pong": True})

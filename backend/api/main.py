"""
FastAPI application entry point.

Run with: uvicorn api.main:app --reload
"""
from fastapi import FastAPI, Request, Response
from pathlib import Path
from dotenv import load_dotenv
from starlette.middleware.base import BaseHTTPMiddleware

# Load environment variables from backend/.env (optional) before other imports that read env
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(env_path)

from api.routes import autocomplete
from settings import FUNCTIONS_PATH

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}


class CorsHeadersMiddleware(BaseHTTPMiddleware):
    """Answer preflight requests and stamp CORS headers on every response."""

    async def dispatch(self, request: Request, call_next):
        if request.method == "OPTIONS":
            return Response(status_code=200, headers=CORS_HEADERS)

        response = await call_next(request)
        for name, value in CORS_HEADERS.items():
            response.headers[name] = value
        return response


# Create app
app = FastAPI(
    title="Address Autocomplete API",
    description="Region-biased address suggestions backed by OpenStreetMap Nominatim",
    version="0.1.0",
)

app.add_middleware(CorsHeadersMiddleware)

# Include routers
app.include_router(autocomplete.router, prefix=FUNCTIONS_PATH, tags=["autocomplete"])


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "service": "Address Autocomplete API"}


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}

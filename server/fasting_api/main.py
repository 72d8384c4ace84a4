"""Fasting Session Store API - FastAPI application entry point."""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import get_settings
from .routes import sessions, email

settings = get_settings()

app = FastAPI(
    title="Fasting Session Store API",
    description="Key-value store for fasting sessions shared between browsers",
    version="1.0.0",
)

# Configure CORS for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "DELETE"],
    allow_headers=["*"],
)

# Include routers
app.include_router(sessions.router)
app.include_router(email.router)


@app.get("/health")
async def health_check():
    """Health check endpoint for the API."""
    return {"status": "healthy", "service": "fasting-session-store"}


if __name__ == "__main__":
    import uvicorn

    from .logging_config import setup_logging

    setup_logging()
    uvicorn.run(
        "server.fasting_api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=True,
    )

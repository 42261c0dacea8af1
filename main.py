from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from dotenv import load_dotenv
import logging
import os

from database.connection import engine, Base
from routes import host, public
from utils.errors import BingoError
from utils.settings import LOG_LEVEL

import models  # noqa: F401  registers every table on Base

# Load environment variables
load_dotenv()

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("bingo")

# Create database tables
Base.metadata.create_all(bind=engine)

# Initialize FastAPI app
app = FastAPI(
    title="Music Video Bingo API",
    description="Event activation, game configuration and card dealing for venue bingo nights",
    version="1.0.0"
)

# CORS configuration - the player and host web apps
allowed_origins = [
    "http://localhost:3000",
    "http://localhost:3001",
]
if os.getenv("FRONTEND_ORIGIN"):
    allowed_origins.append(os.getenv("FRONTEND_ORIGIN"))

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "DELETE"],
    allow_headers=["Content-Type"],
)


@app.exception_handler(BingoError)
def bingo_error_handler(request: Request, exc: BingoError):
    """Every service failure leaves as {"ok": false, "error": "..."}"""
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"ok": False, "error": exc.message})


# Include routers (no /api prefix - routes are at root level)
app.include_router(host.router, tags=["Host"])
app.include_router(public.router, tags=["Public"])


@app.get("/")
def root():
    """Root endpoint"""
    return {"message": "Music Video Bingo API", "version": "1.0.0"}


@app.get("/health")
def health_check():
    """Health check endpoint"""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    host_addr = os.getenv("API_HOST", "0.0.0.0")
    port = int(os.getenv("API_PORT", 8001))
    uvicorn.run("main:app", host=host_addr, port=port, reload=os.getenv("ENVIRONMENT") == "development")

"""Main FastAPI application entry point for the YouTube Video Summarizer.

This is the main application file that starts the FastAPI server.
It imports from src.api.main to keep the structure organized.
"""

import os

from src.api.main import app

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "src.main:app",
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "3000")),
        reload=os.getenv("ENVIRONMENT") != "production",
    )

"""
Entry point for the Tourney JSON API.

Development (hot-reload):
    uv run python web_main.py       ← API on :8000, docs at /docs
"""

import uvicorn

if __name__ == "__main__":
    uvicorn.run(
        "tourney.web.app:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )

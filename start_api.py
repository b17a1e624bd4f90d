#!/usr/bin/env python3
"""
Seed the reference data (catalog, promo codes) when missing, then start uvicorn.
"""
import os
import sys

from app.seed import run as run_seed

run_seed()

# Start uvicorn (replace current process)
os.execv(
    sys.executable,
    [sys.executable, "-m", "uvicorn", "app.main:app", "--host", "0.0.0.0", "--port", os.environ.get("PORT", "8000")],
)

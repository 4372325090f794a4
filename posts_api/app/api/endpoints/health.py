"""Liveness endpoint."""

import time
from typing import Any, Dict

from fastapi import APIRouter

router = APIRouter()


@router.get("/health")
async def health_check() -> Dict[str, Any]:
    """Report that the process is up.  Does not touch the store."""
    return {"status": "healthy", "timestamp": int(time.time())}

"""
FastAPI dependencies
"""

from fastapi import Request
from core.database import get_session
from importer.base import JobStore
from importer.worker import ImportWorker

# Database session for the request
get_db = get_session


def get_job_store(request: Request) -> JobStore:
    return request.app.state.job_store


def get_worker(request: Request) -> ImportWorker:
    return request.app.state.worker

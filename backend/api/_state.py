"""Shared state for API.

Routes never touch module-level globals; the objects created by
``create_app`` live on ``app.state`` and are injected with ``Depends``.
"""
from __future__ import annotations
from fastapi import Request
from backend.config import Settings
from backend.core.profanity import ProfanityDetector
from backend.edit.engine import EditEngine
from backend.edit.transcript import Transcriber
from backend.store import SessionStore


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> SessionStore:
    return request.app.state.store


def get_engine(request: Request) -> EditEngine:
    return request.app.state.engine


def get_transcriber(request: Request) -> Transcriber:
    return request.app.state.transcriber


def get_detector(request: Request) -> ProfanityDetector:
    return request.app.state.detector

from __future__ import annotations

from fastapi import Request

from app.services.generation_services import GenerationServices


def get_services(request: Request) -> GenerationServices:
    return request.app.state.services

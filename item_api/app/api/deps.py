"""
FastAPI dependencies shared by the endpoint modules.

The service, executor and recorder are created once per application in
``create_app`` and stored on ``app.state``; these helpers hand them to
route handlers.
"""

from fastapi import Request

from item_api.app.core.diagnostics import FallbackRecorder
from item_api.app.core.executor import BoundedExecutor
from item_api.app.services.item_service import ItemService


def get_item_service(request: Request) -> ItemService:
    return request.app.state.item_service


def get_executor(request: Request) -> BoundedExecutor:
    return request.app.state.executor


def get_recorder(request: Request) -> FallbackRecorder:
    return request.app.state.recorder

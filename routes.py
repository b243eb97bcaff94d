# routes.py
from fastapi import FastAPI
from controller.checklist_controller import checklist_router
from controller.process_controller import process_router
from controller.upload_controller import upload_router
from controller.validation_controller import validation_router


def register_routes(app: FastAPI) -> None:
    """Register & Access control controllers here."""
    app.include_router(validation_router)
    app.include_router(upload_router)
    app.include_router(checklist_router)
    app.include_router(process_router)

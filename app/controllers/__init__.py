"""Controller layer for handling HTTP requests."""
from app.controllers.cv_controller import CVController

__all__ = ["CVController"]

"""Controllers module - Application-level controllers for coordinating business logic."""

from controllers.app_controller import AppController, AppSnapshot, Renderer, Stage, StageState

__all__ = ["AppController", "AppSnapshot", "Renderer", "Stage", "StageState"]

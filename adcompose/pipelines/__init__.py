"""Pipeline orchestrators for Ad Compose."""

from adcompose.pipelines.compile_project import build_plan, main

__all__ = ["build_plan", "main"]

"""HTTP API exposing the engine entry points."""

from mmm_attribution.api.app import create_app

__all__ = ["create_app"]

"""Web interface helpers."""

from .result_builder import prepare_lenses, prepare_payload

__all__ = ["prepare_lenses", "prepare_payload"]

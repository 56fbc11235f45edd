"""Pydantic request/response models (camelCase on the wire)."""

from .common import ApiModel, ApiResponse, MessageResponse, PaginationInfo

__all__ = ["ApiModel", "ApiResponse", "MessageResponse", "PaginationInfo"]

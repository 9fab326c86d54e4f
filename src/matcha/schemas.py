"""Shared response envelopes."""

from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class DataResponse(BaseModel, Generic[T]):
    """Standard ``{"data": ...}`` wrapper consumed by the dashboard."""

    data: T


class MessageResponse(BaseModel):
    """Plain acknowledgement body."""

    message: str

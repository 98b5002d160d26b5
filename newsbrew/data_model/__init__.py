"""Shared data model primitives."""

from newsbrew.data_model.base import StrictBaseModel
from newsbrew.data_model.item import (
    CanonicalItem,
    Engagement,
    ItemState,
    SourceRef,
)


__all__ = [
    "CanonicalItem",
    "Engagement",
    "ItemState",
    "SourceRef",
    "StrictBaseModel",
]

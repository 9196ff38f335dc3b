"""Core type definitions."""

from enum import Enum
from typing import NewType

# Opaque identifier assigned by the catalog store (e.g., "65f1c2...")
CategoryId = NewType("CategoryId", str)


class CategoryType(Enum):
    """Kind of tree node. Values are the wire representation."""

    STRUCTURAL = "category"
    LEAF = "content"


class ContentKind(Enum):
    """Kind of material attachable to a leaf category."""

    TEXT = "text"
    IMAGE = "image"
    PDF = "pdf"
    VIDEO = "video"

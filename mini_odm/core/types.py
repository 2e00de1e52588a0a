"""Shared core type aliases used across contracts, queries, and ports."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Tuple

Document = Mapping[str, Any]
MutableDocument = Dict[str, Any]

FilterDocument = Dict[str, Any]
SortDocument = List[Tuple[str, int]]

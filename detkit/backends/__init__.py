"""
Optional inference engines for detkit.

Kept separate so the geometric pipeline can be used without installing an
inference runtime. Each backend exposes `infer(blob) -> output`.
"""

from __future__ import annotations

__all__ = []

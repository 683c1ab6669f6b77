"""
Utilities
=========

Helper functions and utilities for long-video orchestration.
"""

from .storage import (
    save_inline_clip,
    save_metadata,
    load_metadata,
    ensure_dir,
    generate_filename,
    derive_path,
)

__all__ = [
    "save_inline_clip",
    "save_metadata",
    "load_metadata",
    "ensure_dir",
    "generate_filename",
    "derive_path",
]

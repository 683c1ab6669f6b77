"""
Storage Utilities
=================

Helper functions for file names, inline clip payloads and run metadata.
"""

import base64
import json
import logging
import uuid
from datetime import datetime
from pathlib import Path
from typing import Optional, Dict, Any, Union

import yaml

logger = logging.getLogger(__name__)


def save_inline_clip(
    payload: str,
    output_path: Union[str, Path],
) -> str:
    """
    Decode a base64 clip payload into a file.

    Args:
        payload: Base64 encoded video bytes
        output_path: Path to save the video

    Returns:
        Path to saved video
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, "wb") as f:
        f.write(base64.b64decode(payload))

    logger.info(f"Clip saved to {output_path}")
    return str(output_path)


def save_metadata(
    metadata: Dict[str, Any],
    output_path: Union[str, Path],
    format: Optional[str] = None,
) -> str:
    """
    Save metadata to a file.

    Args:
        metadata: Metadata dictionary (e.g. ``LongVideoResult.to_dict()``)
        output_path: Path to save the metadata
        format: Output format (json or yaml); inferred from the suffix if omitted

    Returns:
        Path to saved metadata
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    if format is None:
        format = "yaml" if output_path.suffix in (".yml", ".yaml") else "json"

    metadata = dict(metadata)
    metadata["saved_at"] = datetime.now().isoformat()

    with open(output_path, "w") as f:
        if format == "yaml":
            yaml.safe_dump(metadata, f, default_flow_style=False, sort_keys=False)
        else:
            json.dump(metadata, f, indent=2, default=str)

    logger.debug(f"Metadata saved to {output_path}")
    return str(output_path)


def load_metadata(
    path: Union[str, Path],
) -> Optional[Dict[str, Any]]:
    """
    Load metadata from a file.

    Args:
        path: Path to metadata file

    Returns:
        Metadata dictionary, or None if missing or unreadable
    """
    path = Path(path)

    if not path.exists():
        return None

    try:
        with open(path, "r") as f:
            if path.suffix in (".yml", ".yaml"):
                return yaml.safe_load(f)
            return json.load(f)
    except (OSError, ValueError, yaml.YAMLError) as e:
        logger.error(f"Failed to load metadata from {path}: {e}")
        return None


def ensure_dir(path: Union[str, Path]) -> Path:
    """Ensure a directory exists, creating it if necessary."""
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    return path


def generate_filename(
    prefix: str = "video",
    suffix: str = ".mp4",
    include_timestamp: bool = True,
) -> str:
    """
    Generate a unique filename.

    Args:
        prefix: Filename prefix
        suffix: File extension
        include_timestamp: Timestamp (True) or random hex (False) discriminator

    Returns:
        Generated filename
    """
    if include_timestamp:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        return f"{prefix}_{timestamp}{suffix}"
    return f"{prefix}_{uuid.uuid4().hex[:8]}{suffix}"


def derive_path(path: str, tag: str, suffix: str = ".mp4") -> str:
    """``/out/video.mp4`` + ``enhanced`` -> ``/out/video_enhanced.mp4``.

    Works on plain strings so that URLs returned by a render engine survive.
    """
    base, dot, extension = path.rpartition(".")
    if not dot or "/" in extension:
        base = path
    return f"{base}_{tag}{suffix}"

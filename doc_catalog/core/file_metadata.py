# doc_catalog/core/file_metadata.py

import logging
import mimetypes
import os
import random
from pathlib import Path
from typing import List, Optional

from .categories import infer_category
from .models import DocumentDraft

logger = logging.getLogger(__name__)

# The platform MIME database does not always know the Office Open XML formats.
mimetypes.add_type("application/vnd.openxmlformats-officedocument.wordprocessingml.document", ".docx")
mimetypes.add_type("application/vnd.openxmlformats-officedocument.spreadsheetml.sheet", ".xlsx")
mimetypes.add_type("application/vnd.openxmlformats-officedocument.presentationml.presentation", ".pptx")

# Bounds of the synthetic size given to documents added without a file.
PLACEHOLDER_SIZE_MIN = 100_000
PLACEHOLDER_SIZE_MAX = 5_100_000

IGNORED_FILE_NAMES = ['thumbs.db', '.ds_store', 'desktop.ini']


def parse_tags(raw: Optional[str]) -> List[str]:
    """Splits a comma-separated tag string, dropping blank entries."""
    if not raw:
        return []
    return [tag.strip() for tag in raw.split(',') if tag.strip()]


def placeholder_size(rng: Optional[random.Random] = None) -> int:
    """A plausible byte count for a document that has no real file behind it."""
    return (rng or random).randint(PLACEHOLDER_SIZE_MIN, PLACEHOLDER_SIZE_MAX - 1)


def guess_mime_type(file_path: Path) -> Optional[str]:
    mime_type, _ = mimetypes.guess_type(file_path.name)
    return mime_type


def describe_file(
        file_path: Path,
        name: Optional[str] = None,
        category: Optional[str] = None,
        tags: Optional[List[str]] = None,
        description: Optional[str] = None,
) -> DocumentDraft:
    """
    Pre-fills a draft from a file on disk. Only the name, size and MIME type
    are read; the file content is never stored.

    Args:
        file_path: The file being "uploaded".
        name: Overrides the file name as the display name.
        category: Overrides the category inferred from the MIME type.
        tags: Tags to attach to the draft.
        description: Optional free text.

    Returns:
        A draft whose `type` mirrors its category.
    """
    size = file_path.stat().st_size
    chosen_category = category or infer_category(guess_mime_type(file_path))
    return DocumentDraft(
        name=(name or file_path.name).strip(),
        type=chosen_category,
        size=size,
        category=chosen_category,
        tags=list(tags or []),
        description=(description or "").strip() or None,
    )


def scan_directory(source_dir: Path, recursive: bool = False) -> List[Path]:
    """
    Lists the files under a directory that are worth cataloguing, skipping
    hidden files and common system-generated ones like Thumbs.db.
    """
    logger.info(f"Scanning directory: {source_dir}")
    if not source_dir.is_dir():
        logger.error(f"Source path is not a valid directory: {source_dir}")
        return []

    found_files = []
    for root, dirs, filenames in os.walk(source_dir):
        dirs[:] = sorted(d for d in dirs if not d.startswith('.')) if recursive else []
        for filename in sorted(filenames):
            if filename.lower() in IGNORED_FILE_NAMES or filename.startswith('.'):
                logger.debug(f"Ignoring system file: {filename}")
                continue
            found_files.append(Path(root) / filename)

    logger.info(f"Scan complete. Found {len(found_files)} files.")
    return found_files

# doc_catalog/core/persistence.py

import json
import logging
import shutil
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from .document_store import DocumentStore
from .models import Document, FIELD_NAMES

logger = logging.getLogger(__name__)

TIMESTAMP_FIELDS = ("created_at", "modified_at")


class PersistedDataError(ValueError):
    """Raised internally when a persisted record cannot be turned back into a Document."""


# --- Serialization ---

def parse_timestamp(value: Any) -> datetime:
    """
    Rebuilds a timestamp from its persisted form.

    ISO-8601 text (with or without a trailing 'Z') and numeric epoch
    milliseconds are accepted. Naive values are taken to be UTC.
    """
    if isinstance(value, bool):
        raise PersistedDataError(f"Not a timestamp: {value!r}")
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (ValueError, OverflowError, OSError) as e:
            raise PersistedDataError(f"Not a timestamp: {value!r}") from e
    if isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError as e:
            raise PersistedDataError(f"Not a timestamp: {value!r}") from e
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    raise PersistedDataError(f"Not a timestamp: {value!r}")


def document_to_dict(document: Document) -> Dict[str, Any]:
    data = {}
    for attr, key in FIELD_NAMES.items():
        value = getattr(document, attr)
        if attr in TIMESTAMP_FIELDS:
            value = value.isoformat()
        elif attr == "tags":
            value = list(value)
        data[key] = value
    return data


def document_from_dict(data: Dict[str, Any]) -> Document:
    """Builds a Document from a persisted record, validating its shape."""
    if not isinstance(data, dict):
        raise PersistedDataError(f"Expected an object, got {type(data).__name__}.")

    missing = [key for key in ("id", "name", "createdAt", "modifiedAt") if key not in data]
    if missing:
        raise PersistedDataError(f"Record is missing required fields: {missing}")

    tags = data.get("tags") or []
    if not isinstance(tags, list):
        raise PersistedDataError(f"'tags' must be a list in record {data.get('id')!r}.")

    doc_id = data.get("id")
    if not isinstance(data["name"], str):
        raise PersistedDataError(f"'name' must be text in record {doc_id!r}.")
    for key in ("description", "url"):
        if data.get(key) is not None and not isinstance(data[key], str):
            raise PersistedDataError(f"'{key}' must be text in record {doc_id!r}.")
    if not isinstance(data.get("isFavorite", False), bool):
        raise PersistedDataError(f"'isFavorite' must be true or false in record {doc_id!r}.")

    try:
        size = int(data.get("size", 0))
    except (TypeError, ValueError, OverflowError) as e:
        raise PersistedDataError(f"'size' is not a number in record {doc_id!r}.") from e
    if size < 0:
        raise PersistedDataError(f"'size' is negative in record {doc_id!r}.")

    created_at = parse_timestamp(data["createdAt"])
    modified_at = parse_timestamp(data["modifiedAt"])
    if created_at > modified_at:
        raise PersistedDataError(f"Record {doc_id!r} was modified before it was created.")

    return Document(
        id=str(data["id"]),
        name=data["name"],
        type=str(data.get("type", data.get("category", ""))),
        size=size,
        created_at=created_at,
        modified_at=modified_at,
        category=str(data.get("category", "")),
        tags=[str(tag) for tag in tags],
        description=data.get("description"),
        url=data.get("url"),
        is_favorite=data.get("isFavorite", False),
    )


# --- The JSON Repository ---

class JsonDocumentRepository:
    """
    Mirrors the canonical document collection to a single JSON file.

    The whole collection is written on every save; there is no incremental
    diff and no transaction log. Neither `load` nor `save` ever raises: the
    store keeps working in memory whatever happens on disk.
    """

    def __init__(self, data_file: Path):
        self.data_file = Path(data_file)

    @property
    def backup_file(self) -> Path:
        return self.data_file.with_suffix(self.data_file.suffix + ".bak")

    def load(self) -> Optional[List[Document]]:
        """
        Reads the persisted collection.

        Returns:
            The stored documents (possibly an empty list if the user deleted
            everything), or None when nothing usable is on disk.
        """
        if not self.data_file.exists():
            logger.info(f"No saved documents at {self.data_file}. First run.")
            return None

        try:
            with open(self.data_file, 'r', encoding='utf-8') as f:
                raw = json.load(f)
            if not isinstance(raw, list):
                raise PersistedDataError(f"Expected a list of documents, got {type(raw).__name__}.")
            documents = [document_from_dict(item) for item in raw]
        except (OSError, json.JSONDecodeError, PersistedDataError) as e:
            logger.error(f"Could not load documents from {self.data_file}: {e}", exc_info=True)
            return None

        ids = [document.id for document in documents]
        if len(set(ids)) != len(ids):
            logger.error(f"Saved documents in {self.data_file} contain duplicate ids. Ignoring the file.")
            return None

        logger.info(f"Loaded {len(documents)} documents from {self.data_file}.")
        return documents

    def save(self, documents: List[Document]):
        """
        Overwrites the data file with the given collection.

        The previous file is copied to a backup first and restored if the
        write fails, so a half-written file never replaces good data.
        """
        backup_path = None
        try:
            self.data_file.parent.mkdir(parents=True, exist_ok=True)
            if self.data_file.exists():
                backup_path = self.backup_file
                shutil.copy(self.data_file, backup_path)
                logger.debug(f"Data backup created at: {backup_path}")

            payload = [document_to_dict(document) for document in documents]
            with open(self.data_file, 'w', encoding='utf-8') as f:
                json.dump(payload, f, indent=2, ensure_ascii=False)
            logger.debug(f"Saved {len(documents)} documents to {self.data_file}.")

        except Exception as e:
            logger.error(f"Failed to save documents to {self.data_file}: {e}", exc_info=True)
            if backup_path is not None and backup_path.exists():
                try:
                    shutil.copy(backup_path, self.data_file)
                    logger.warning("Restored the document file from backup after a failed save.")
                except OSError as restore_error:
                    logger.critical(f"!!! Could not restore {self.data_file} from {backup_path}: {restore_error}",
                                    exc_info=True)

    def attach(self, store: DocumentStore):
        """Registers this repository to persist the store after every mutation."""
        store.add_mutation_hook(self.save)

    def hydrate(self, store: DocumentStore, seed: List[Document]):
        """Loads the saved collection into the store, falling back to `seed`."""
        loaded = self.load()
        if loaded is None:
            logger.info(f"Starting from {len(seed)} seed documents.")
            store.init(seed)
        else:
            store.init(loaded)

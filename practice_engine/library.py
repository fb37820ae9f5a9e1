"""Collaborator interfaces for the image/tag library and user notifications."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Protocol, Sequence, Set

from practice_engine.models import ImageRef, Tag

_LOGGER_NAME = "DrawStack.Engine"
_ENGINE_LOGGER = logging.getLogger(_LOGGER_NAME)


class ImageStore(Protocol):
    async def get_image(self, image_id: str) -> Optional[ImageRef]: ...

    async def get_library_images(self) -> List[ImageRef]: ...

    async def get_images_by_tags(self, tag_ids: Iterable[str]) -> List[ImageRef]: ...


class TagStore(Protocol):
    async def get_all_tags(self) -> List[Tag]: ...


class Notifier(Protocol):
    def warning(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...


class LoggingNotifier:
    """Notifier that only writes to the engine log; the window swaps in a visible one."""

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self._logger = logger or _ENGINE_LOGGER

    def warning(self, message: str) -> None:
        self._logger.warning(message)

    def error(self, message: str) -> None:
        self._logger.error(message)


class JsonLibrary:
    """Read-only image/tag store backed by a library export file.

    Expected layout::

        {"images": [{"id", "filename", "fullPath"}],
         "tags": [{"id", "name", "parentId"}],
         "imageTags": [{"imageId", "tagId"}]}
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._images: Dict[str, ImageRef] = {}
        self._order: List[str] = []
        self._tags: List[Tag] = []
        self._image_tags: Dict[str, Set[str]] = {}
        self.reload()

    @classmethod
    def from_payload(cls, payload: Dict[str, Any], path: Optional[Path] = None) -> "JsonLibrary":
        library = cls.__new__(cls)
        library.path = Path(path) if path is not None else Path("<memory>")
        library._images = {}
        library._order = []
        library._tags = []
        library._image_tags = {}
        library._ingest(payload)
        return library

    def reload(self) -> None:
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            _ENGINE_LOGGER.warning("Library file %s not found; starting with an empty library", self.path)
            payload = {}
        except (OSError, json.JSONDecodeError) as exc:
            _ENGINE_LOGGER.warning("Library file %s unreadable (%s); starting with an empty library", self.path, exc)
            payload = {}
        self._images.clear()
        self._order.clear()
        self._tags.clear()
        self._image_tags.clear()
        if isinstance(payload, dict):
            self._ingest(payload)

    def _ingest(self, payload: Dict[str, Any]) -> None:
        for raw in payload.get("images") or []:
            if not isinstance(raw, dict):
                continue
            image_id = str(raw.get("id") or "").strip()
            filename = str(raw.get("filename") or "").strip()
            full_path = str(raw.get("fullPath") or raw.get("path") or "").strip()
            if not image_id or not filename or not full_path:
                _ENGINE_LOGGER.debug("Skipping invalid library image record: %s", raw)
                continue
            if image_id not in self._images:
                self._order.append(image_id)
            self._images[image_id] = ImageRef(id=image_id, filename=filename, path=full_path)
        for raw in payload.get("tags") or []:
            if not isinstance(raw, dict):
                continue
            tag_id = str(raw.get("id") or "").strip()
            name = str(raw.get("name") or "").strip()
            if not tag_id or not name:
                _ENGINE_LOGGER.debug("Skipping invalid tag record: %s", raw)
                continue
            parent = raw.get("parentId")
            last_used = raw.get("lastUsed")
            self._tags.append(
                Tag(
                    id=tag_id,
                    name=name,
                    parent_id=str(parent) if parent else None,
                    last_used=float(last_used) if isinstance(last_used, (int, float)) else None,
                )
            )
        for raw in payload.get("imageTags") or []:
            if not isinstance(raw, dict):
                continue
            image_id = str(raw.get("imageId") or "")
            tag_id = str(raw.get("tagId") or "")
            if image_id and tag_id:
                self._image_tags.setdefault(image_id, set()).add(tag_id)

    async def get_image(self, image_id: str) -> Optional[ImageRef]:
        return self._images.get(image_id)

    async def get_library_images(self) -> List[ImageRef]:
        return [self._images[image_id] for image_id in self._order]

    async def get_images_by_tags(self, tag_ids: Iterable[str]) -> List[ImageRef]:
        required = set(tag_ids)
        if not required:
            return await self.get_library_images()
        return [
            self._images[image_id]
            for image_id in self._order
            if required.issubset(self._image_tags.get(image_id, set()))
        ]

    async def get_all_tags(self) -> List[Tag]:
        return list(self._tags)

    def image_ids(self) -> Sequence[str]:
        return tuple(self._order)

"""
Generated results and the history list.

History is an ordered, newest-first sequence of GeneratedResult, unique by id.
It is stored as a JSON array under one key of a KeyValueStorage, using the
camelCase field names (imageUrl, timestamp) shared with the web client.
"""

import json
import time
import uuid
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator
from pydantic import ValidationError as PydanticValidationError

from pixelforge.core.reference import extension_for_mime, parse_data_url
from pixelforge.core.styles import ArtStyle, SpriteType
from pixelforge.logging_config import get_logger
from pixelforge.utils.exceptions import PersistenceParseError, ValidationError

logger = get_logger(__name__)

HISTORY_STORAGE_KEY = "pixelForgeHistory"
DOWNLOAD_PREFIX = "pixelforge"


@dataclass(frozen=True)
class GeneratedResult:
    """One generated image and the request that produced it."""

    id: str
    image_url: str
    prompt: str
    style: ArtStyle
    type: SpriteType
    created_at: int  # milliseconds since the epoch

    @property
    def mime_type(self) -> str:
        if not self.image_url.startswith("data:"):
            return "image/png"
        return self.image_url[5 : self.image_url.find(";")] or "image/png"

    @property
    def image_bytes(self) -> bytes:
        """Decoded image bytes. Raises ValidationError if image_url is not a data URL."""
        data, _mime = parse_data_url(self.image_url)
        return data

    @property
    def download_filename(self) -> str:
        return f"{DOWNLOAD_PREFIX}-{self.id}.{extension_for_mime(self.mime_type)}"


def new_result(
    image_url: str, prompt: str, style: ArtStyle, sprite_type: SpriteType
) -> GeneratedResult:
    """Create a result with a fresh unique id and the current time."""
    return GeneratedResult(
        id=uuid.uuid4().hex,
        image_url=image_url,
        prompt=prompt,
        style=style,
        type=sprite_type,
        created_at=int(time.time() * 1000),
    )


class _StoredResult(BaseModel):
    """Schema of one stored history entry."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str = Field(..., min_length=1)
    image_url: str = Field(..., alias="imageUrl", min_length=1)
    prompt: str
    style: ArtStyle
    type: SpriteType
    created_at: int = Field(..., alias="timestamp")

    @field_validator("image_url")
    @classmethod
    def _must_be_data_url(cls, value: str) -> str:
        # Entries must decode to image bytes
        try:
            parse_data_url(value)
        except ValidationError as e:
            raise ValueError(str(e)) from e
        return value


_STORED_HISTORY = TypeAdapter(list[_StoredResult])


def serialize_history(results: Iterable[GeneratedResult]) -> str:
    """Serialize results to the stored JSON array."""
    return json.dumps(
        [
            {
                "id": r.id,
                "imageUrl": r.image_url,
                "prompt": r.prompt,
                "style": r.style.value,
                "type": r.type.value,
                "timestamp": r.created_at,
            }
            for r in results
        ]
    )


def deserialize_history(raw: str) -> list[GeneratedResult]:
    """
    Parse a stored JSON array back into results, keeping order.

    Entries with an id seen earlier in the array are dropped.

    Raises:
        PersistenceParseError: If the text is not valid JSON or does not match the schema
    """
    try:
        entries = _STORED_HISTORY.validate_json(raw)
    except PydanticValidationError as e:
        raise PersistenceParseError(f"Stored history is invalid: {e.error_count()} error(s)") from e

    results: list[GeneratedResult] = []
    seen: set[str] = set()
    for entry in entries:
        if entry.id in seen:
            logger.warning("Dropping duplicate history entry id=%s", entry.id)
            continue
        seen.add(entry.id)
        results.append(
            GeneratedResult(
                id=entry.id,
                image_url=entry.image_url,
                prompt=entry.prompt,
                style=entry.style,
                type=entry.type,
                created_at=entry.created_at,
            )
        )
    return results


class History:
    """Newest-first list of results, unique by id."""

    def __init__(self, results: Iterable[GeneratedResult] = ()) -> None:
        self._items: list[GeneratedResult] = []
        for result in results:
            if self.get(result.id) is None:
                self._items.append(result)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[GeneratedResult]:
        return iter(list(self._items))

    def __contains__(self, result_id: object) -> bool:
        return any(r.id == result_id for r in self._items)

    @property
    def items(self) -> list[GeneratedResult]:
        return list(self._items)

    @property
    def head(self) -> GeneratedResult | None:
        return self._items[0] if self._items else None

    def get(self, result_id: str | None) -> GeneratedResult | None:
        if result_id is None:
            return None
        for result in self._items:
            if result.id == result_id:
                return result
        return None

    def prepend(self, result: GeneratedResult) -> None:
        """Add a result as the newest entry. Raises ValidationError on a duplicate id."""
        if result.id in self:
            raise ValidationError(f"Duplicate history id: {result.id}", field="id")
        self._items.insert(0, result)

    def remove(self, result_id: str) -> bool:
        """Remove a result by id. Returns False (and changes nothing) if the id is unknown."""
        remaining = [r for r in self._items if r.id != result_id]
        if len(remaining) == len(self._items):
            return False
        self._items = remaining
        return True

    def to_json(self) -> str:
        return serialize_history(self._items)


def save_result_image(
    result: GeneratedResult, directory: str | Path = ".", filename: str | None = None
) -> Path:
    """Write a result's image bytes to directory/filename (default: its download filename)."""
    out = Path(directory) / (filename or result.download_filename)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_bytes(result.image_bytes)
    return out

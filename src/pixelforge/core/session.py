"""
Session state around sprite generation.

A Session owns the history, the active (displayed) result, and the optional
reference selection. Every history mutation is written to storage before the
mutating call returns.

Generation state machine: IDLE -> SUBMITTING -> IDLE. On success the new
result is prepended to the history and becomes active; on failure the error
message is kept in ``last_error`` and the history is unchanged. A submission
made while another one is pending is rejected with GenerationInProgressError.
"""

import threading
from enum import Enum

from pixelforge.core.config import Config
from pixelforge.core.history import (
    HISTORY_STORAGE_KEY,
    GeneratedResult,
    History,
    deserialize_history,
    new_result,
)
from pixelforge.core.image_gen import generate_sprite
from pixelforge.core.prompt import validate_prompt
from pixelforge.core.providers.base import ImageGenerationClient
from pixelforge.core.reference import to_png_bytes
from pixelforge.core.request import GenerationRequest
from pixelforge.core.storage import KeyValueStorage
from pixelforge.core.styles import ArtStyle, SpriteType, parse_sprite_type, parse_style
from pixelforge.logging_config import get_logger
from pixelforge.utils.exceptions import (
    GenerationInProgressError,
    PersistenceParseError,
    ValidationError,
)

logger = get_logger(__name__)

DEFAULT_ERROR_MESSAGE = "Failed to generate sprite. Please try again."


class SessionStatus(str, Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"


def _load_history(storage: KeyValueStorage) -> tuple[list[GeneratedResult], bool]:
    """Return (results, discarded). Corrupt stored data is logged and discarded."""
    try:
        raw = storage.get_item(HISTORY_STORAGE_KEY)
        if raw is None:
            return [], False
        return deserialize_history(raw), False
    except PersistenceParseError as e:
        logger.warning("Failed to parse history, starting empty: %s", e)
        return [], True


class Session:
    """History, active result, and reference selection for one user."""

    def __init__(
        self,
        storage: KeyValueStorage,
        client: ImageGenerationClient | None = None,
        config: Config | None = None,
        results: list[GeneratedResult] | None = None,
    ) -> None:
        self._storage = storage
        self._client = client
        self._config = config
        self._history = History(results or [])
        head = self._history.head
        self._active_id: str | None = head.id if head else None
        self._reference_id: str | None = None
        self._status = SessionStatus.IDLE
        self._last_error: str | None = None
        self._state_lock = threading.RLock()
        self._submit_lock = threading.Lock()

    @classmethod
    def load(
        cls,
        storage: KeyValueStorage,
        client: ImageGenerationClient | None = None,
        config: Config | None = None,
    ) -> "Session":
        """Restore the session from storage; the newest stored result becomes active."""
        results, discarded = _load_history(storage)
        session = cls(storage, client=client, config=config, results=results)
        if discarded:
            session._persist()
        logger.debug("Loaded history entries=%d", len(results))
        return session

    # -- read-only state ---------------------------------------------------

    @property
    def history(self) -> list[GeneratedResult]:
        return self._history.items

    @property
    def active(self) -> GeneratedResult | None:
        return self._history.get(self._active_id)

    @property
    def reference(self) -> GeneratedResult | None:
        """The result biasing the next request, or None if unset or no longer in history."""
        return self._history.get(self._reference_id)

    @property
    def status(self) -> SessionStatus:
        return self._status

    @property
    def is_busy(self) -> bool:
        return self._status is SessionStatus.SUBMITTING

    @property
    def last_error(self) -> str | None:
        return self._last_error

    def get(self, result_id: str) -> GeneratedResult | None:
        return self._history.get(result_id)

    # -- mutations -----------------------------------------------------------

    def _persist(self) -> None:
        self._storage.set_item(HISTORY_STORAGE_KEY, self._history.to_json())

    def _commit(self, history: History) -> None:
        """Write history to storage, then adopt it. A failed write leaves the session unchanged."""
        self._storage.set_item(HISTORY_STORAGE_KEY, history.to_json())
        self._history = history

    def _require(self, result_id: str, field: str) -> GeneratedResult:
        result = self._history.get(result_id)
        if result is None:
            raise ValidationError(f"No sprite with id {result_id!r} in history", field=field)
        return result

    def select(self, result_id: str) -> GeneratedResult:
        """Make a history entry the active result."""
        with self._state_lock:
            result = self._require(result_id, "id")
            self._active_id = result.id
            return result

    def use_as_reference(self, result_id: str) -> GeneratedResult:
        """Select a history entry as the reference for following generations."""
        with self._state_lock:
            result = self._require(result_id, "reference")
            self._reference_id = result.id
            logger.info("Using %s as reference", result.id)
            return result

    def clear_reference(self) -> None:
        with self._state_lock:
            self._reference_id = None

    def delete(self, result_id: str) -> bool:
        """
        Remove a result from history. Unknown ids leave everything unchanged.

        Deleting the active result makes the new head active (or none);
        deleting the reference clears the reference.
        """
        with self._state_lock:
            candidate = History(self._history.items)
            if not candidate.remove(result_id):
                return False
            self._commit(candidate)
            if self._active_id == result_id:
                head = self._history.head
                self._active_id = head.id if head else None
            if self._reference_id == result_id:
                self._reference_id = None
            logger.info("Deleted %s remaining=%d", result_id, len(self._history))
            return True

    def clear(self) -> None:
        """Remove every result."""
        with self._state_lock:
            self._commit(History())
            self._active_id = None
            self._reference_id = None

    def submit(
        self,
        prompt: str,
        style: ArtStyle | str,
        sprite_type: SpriteType | str,
        background: str = "",
        reference_image: bytes | None = None,
    ) -> GeneratedResult:
        """
        Generate a sprite and add it to the history.

        The current reference (if any) is attached to the request and kept
        selected afterwards. reference_image, when given, is sent instead of
        the selected reference.

        Raises:
            ValidationError: Empty prompt or unknown style/type (nothing is sent)
            GenerationInProgressError: Another submission is pending
            ConfigurationError, TransportError, EmptyResponseError,
            NoImageFoundError: Generation failed; history is unchanged
            OSError: The storage write failed; history is unchanged
        """
        validate_prompt(prompt)
        style = parse_style(style)
        sprite_type = parse_sprite_type(sprite_type)

        if not self._submit_lock.acquire(blocking=False):
            raise GenerationInProgressError("A sprite is already being generated.")
        try:
            with self._state_lock:
                self._status = SessionStatus.SUBMITTING
                self._last_error = None
                reference = self.reference
            if reference_image is None and reference is not None:
                reference_image = to_png_bytes(reference.image_bytes)
            request = GenerationRequest(
                prompt=prompt,
                style=style,
                type=sprite_type,
                background=background,
                reference_image=reference_image,
            )
            image_url = generate_sprite(request, client=self._client, config=self._config)
            result = new_result(image_url, prompt, style, sprite_type)
            with self._state_lock:
                candidate = History(self._history.items)
                candidate.prepend(result)
                self._commit(candidate)
                self._active_id = result.id
            logger.info("Added %s to history entries=%d", result.id, len(self._history))
            return result
        except Exception as e:
            self._last_error = str(e) or DEFAULT_ERROR_MESSAGE
            raise
        finally:
            self._status = SessionStatus.IDLE
            self._submit_lock.release()

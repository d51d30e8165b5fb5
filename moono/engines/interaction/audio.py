"""
Audio step - playback transport state machine.

States: idle -> loading -> playing <-> paused, and back to idle when the clip
ends naturally (position reset to zero) or the step is left.

The transport handle is owned by an AudioResourceManager instance that
belongs to one lesson session. At most one handle is alive at a time and it
is always released before another is acquired.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from moono.exceptions import PlaybackError
from moono.logging_config import get_logger
from moono.schemas.content import AudioContent

logger = get_logger(__name__)


@dataclass(frozen=True)
class PlaybackStatus:
    """Progress report delivered by the transport."""

    position_millis: int = 0
    duration_millis: int = 0
    is_playing: bool = False
    did_just_finish: bool = False
    is_loaded: bool = True


StatusCallback = Callable[[PlaybackStatus], None]


class AudioHandle(ABC):
    """A loaded audio resource."""

    @abstractmethod
    async def play(self) -> None:
        """Start or resume playback from the current position."""

    @abstractmethod
    async def pause(self) -> None:
        """Pause playback, keeping the position."""

    @abstractmethod
    async def stop(self) -> None:
        """Stop playback."""

    @abstractmethod
    async def release(self) -> None:
        """Free the underlying resource. The handle is unusable afterwards."""

    @abstractmethod
    def set_status_callback(self, callback: Optional[StatusCallback]) -> None:
        """Register the receiver of PlaybackStatus updates."""


class AudioTransport(ABC):
    """Audio playback collaborator."""

    @abstractmethod
    async def load(self, locator: str) -> AudioHandle:
        """Resolve a resource locator and load it."""


class AudioResourceManager:
    """
    Owns the single live audio handle for a lesson session.

    Usage:
        manager = AudioResourceManager(transport)
        handle = await manager.acquire(url, on_status)
        ...
        await manager.release()
    """

    def __init__(self, transport: AudioTransport):
        self.transport = transport
        self._handle: Optional[AudioHandle] = None
        # Identifies the latest load; release() and newer loads supersede older ones
        self._load_token = 0

    @property
    def active(self) -> bool:
        return self._handle is not None

    async def acquire(self, locator: str, on_status: StatusCallback) -> Optional[AudioHandle]:
        """
        Load a new handle.

        Returns:
            The live handle, or None when a release() or a newer acquire()
            superseded this load while it was in flight; the late handle is
            freed before returning

        Raises:
            RuntimeError: If a handle is still active
            PlaybackError: If the transport cannot load the resource
        """
        if self._handle is not None:
            raise RuntimeError("An audio handle is already active; release it first")
        self._load_token += 1
        token = self._load_token
        try:
            handle = await self.transport.load(locator)
        except Exception as exc:
            raise PlaybackError("Audio could not be loaded", context={"locator": locator}) from exc

        if token != self._load_token or self._handle is not None:
            logger.debug("Freeing superseded audio load", extra={"locator": locator})
            await self._close(handle)
            return None

        handle.set_status_callback(on_status)
        self._handle = handle
        return handle

    async def release(self) -> None:
        """Stop and free the active handle, if any, and cancel pending loads. Never raises."""
        self._load_token += 1
        handle, self._handle = self._handle, None
        if handle is None:
            return
        await self._close(handle)

    async def _close(self, handle: AudioHandle) -> None:
        handle.set_status_callback(None)
        try:
            await handle.stop()
        except Exception:
            logger.warning("Audio stop failed during release", exc_info=True)
        try:
            await handle.release()
        except Exception:
            logger.warning("Audio release failed", exc_info=True)


class AudioState(str, Enum):
    """Transport state of an audio step."""
    IDLE = "idle"
    LOADING = "loading"
    PLAYING = "playing"
    PAUSED = "paused"


def format_time(millis: int) -> str:
    """Format milliseconds as m:ss."""
    total_seconds = max(0, int(millis)) // 1000
    return f"{total_seconds // 60}:{total_seconds % 60:02d}"


class AudioInteraction:
    """
    Playback state for one audio step.

    ``play`` does not toggle: calling it while playing is a no-op and
    pausing is the separate ``pause`` action.
    """

    def __init__(self, step_id: int, content: AudioContent, manager: AudioResourceManager):
        self.step_id = step_id
        self.content = content
        self.manager = manager
        self.state = AudioState.IDLE
        self.position = 0
        self.duration = 0
        self.last_error: Optional[str] = None
        self._handle: Optional[AudioHandle] = None
        # Bumped on dispose; callbacks and loads from an older generation are stale
        self._generation = 0

    @property
    def progress(self) -> float:
        if self.duration <= 0:
            return 0.0
        return min(1.0, self.position / self.duration)

    def can_advance(self) -> bool:
        return True

    async def play(self) -> AudioState:
        """
        Start, resume or replay.

        Raises:
            PlaybackError: If the step has no locator or the transport fails
        """
        if self.state in (AudioState.PLAYING, AudioState.LOADING):
            return self.state

        if self._handle is not None:
            # Paused, or finished and still loaded
            await self._call_handle(self._handle.play, "Audio could not be resumed")
            self.state = AudioState.PLAYING
            return self.state

        locator = self.content.audio_url
        if not locator:
            self.last_error = "Audio file not found."
            raise PlaybackError("Audio step has no resource locator", context={"step_id": self.step_id})

        generation = self._generation
        self.state = AudioState.LOADING
        self.last_error = None
        try:
            handle = await self.manager.acquire(locator, lambda status: self._on_status(status, generation))
        except PlaybackError as exc:
            self.state = AudioState.IDLE
            self.last_error = exc.message
            raise

        if handle is None:
            # The manager already freed the late handle
            if generation == self._generation:
                self.state = AudioState.IDLE
            return self.state

        if generation != self._generation:
            logger.debug("Discarding audio loaded after its step was left", extra={"step_id": self.step_id})
            await self.manager.release()
            return self.state

        self._handle = handle
        self.position = 0
        await self._call_handle(handle.play, "Audio could not be played")
        if self.state == AudioState.LOADING:
            self.state = AudioState.PLAYING
        return self.state

    async def pause(self) -> AudioState:
        """Pause if playing; otherwise no-op."""
        if self.state != AudioState.PLAYING or self._handle is None:
            return self.state
        await self._call_handle(self._handle.pause, "Audio could not be paused")
        self.state = AudioState.PAUSED
        return self.state

    async def dispose(self) -> None:
        """Stop and release playback. Called on step change and lesson exit."""
        self._generation += 1
        self._handle = None
        await self.manager.release()
        self.state = AudioState.IDLE
        self.position = 0
        self.duration = 0

    async def _call_handle(self, action, message: str) -> None:
        try:
            await action()
        except Exception as exc:
            self.last_error = message
            logger.warning(message, exc_info=True, extra={"step_id": self.step_id})
            if self.state == AudioState.LOADING:
                self.state = AudioState.IDLE
            raise PlaybackError(message, context={"step_id": self.step_id}) from exc

    def _on_status(self, status: PlaybackStatus, generation: int) -> None:
        if generation != self._generation or not status.is_loaded:
            return
        self.position = status.position_millis
        self.duration = status.duration_millis
        if status.did_just_finish:
            self.state = AudioState.IDLE
            self.position = 0
        elif status.is_playing:
            self.state = AudioState.PLAYING
        elif self.state == AudioState.PLAYING:
            self.state = AudioState.PAUSED

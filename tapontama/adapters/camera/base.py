from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import AsyncIterator

from tapontama.orchestrator.contracts import CameraConstraints
from tapontama.orchestrator.errors import CameraError, ConstraintsUnsatisfiable, UnknownCameraError


class MediaStream(ABC):
    """A live camera stream. Only the camera adapter that produced it may stop it."""

    def __init__(self, label: str):
        self.label = label
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    @abstractmethod
    def read_frame(self):
        """Return the current frame as a BGR ndarray, or None if none is available yet."""
        ...

    @abstractmethod
    def _close(self):
        ...

    def stop(self):
        if self._active:
            self._active = False
            self._close()


class CameraAdapter(ABC):
    def __init__(self, status_store):
        self.status = status_store
        self._held: MediaStream | None = None

    @property
    def held(self) -> MediaStream | None:
        return self._held

    async def acquire(self, constraints: CameraConstraints | None = None) -> MediaStream:
        """Open a stream. Preferred constraints that the device refuses get one retry with minimal ones."""
        constraints = constraints or CameraConstraints.preferred()
        self.release()
        try:
            stream = await self._open_mapped(constraints)
        except ConstraintsUnsatisfiable as e:
            if constraints.is_minimal:
                raise
            self.status.log(f"camera: constraints rejected ({e}), retrying with basic settings")
            stream = await self._open_mapped(CameraConstraints.minimal())
        self._held = stream
        self.status.log(f"camera: acquired {stream.label}")
        return stream

    def release(self, stream: MediaStream | None = None):
        """Stop `stream` (default: the held one). No-op when there is nothing to stop."""
        target = stream if stream is not None else self._held
        if target is None:
            return
        if target.active:
            target.stop()
            self.status.log(f"camera: released {target.label}")
        if target is self._held:
            self._held = None

    @asynccontextmanager
    async def open_stream(self, constraints: CameraConstraints | None = None) -> AsyncIterator[MediaStream]:
        stream = await self.acquire(constraints)
        try:
            yield stream
        finally:
            self.release(stream)

    async def _open_mapped(self, constraints: CameraConstraints) -> MediaStream:
        try:
            return await self._open(constraints)
        except CameraError as e:
            self.status.log(f"camera: {e.code} {e.detail}".rstrip())
            raise
        except Exception as e:
            self.status.log(f"camera: unexpected {type(e).__name__}: {e}")
            raise UnknownCameraError(f"{type(e).__name__}: {e}") from e

    @abstractmethod
    async def _open(self, constraints: CameraConstraints) -> MediaStream:
        """Open a device for `constraints` or raise a CameraError subclass."""
        ...

"""
Capture state machine.

    idle -> initializing -> previewing -> captured_analyzing -> captured_done
      ^__________ cancel() / reset() from any phase but analyzing __________|

All transitions run on one event loop. Each awaited continuation checks that
its session is still the live one; a camera stream that arrives after
cancel() is released and dropped.
"""
import asyncio
from typing import Callable, Optional

from tapontama.orchestrator import errors
from tapontama.orchestrator.contracts import (
    CameraConstraints, CapturePhase, CaptureSession, CaptureSnapshot, ClassificationResult,
)
from tapontama.orchestrator.errors import CameraError, CaptureError, PipelineError

Listener = Callable[[CaptureSnapshot], None]


class CaptureStateMachine:
    def __init__(self, camera, capturer, classifier, status_store,
                 constraints: CameraConstraints | None = None,
                 listener: Optional[Listener] = None):
        self.camera = camera
        self.capturer = capturer
        self.classifier = classifier
        self.status = status_store
        self.constraints = constraints or CameraConstraints.preferred()
        self.listener = listener

        self._phase = CapturePhase.IDLE
        self._session: CaptureSession | None = None
        self._next_id = 0
        self._error: PipelineError | None = None
        self._result: ClassificationResult | None = None
        self._acquiring: asyncio.Task | None = None
        self._capturing: CaptureSession | None = None
        self._classifying: asyncio.Task | None = None

    @property
    def phase(self) -> CapturePhase:
        return self._phase

    def snapshot(self, error_code: str | None = None, error_message: str | None = None) -> CaptureSnapshot:
        if error_code is None and self._error is not None:
            error_code, error_message = self._error.code, self._error.user_message
        session = self._session
        return CaptureSnapshot(
            phase=self._phase,
            session_id=session.session_id if session else None,
            error_code=error_code,
            error_message=error_message,
            result=self._result,
            image=session.image if session else None,
        )

    # ── transitions ────────────────────────────────────────────────────────

    async def start(self) -> CaptureSnapshot:
        if self._phase is not CapturePhase.IDLE:
            self.status.log(f"capture: start rejected, phase={self._phase.value}")
            return self.snapshot(error_code=errors.ERR_BUSY)

        if self._acquiring is not None and not self._acquiring.done():
            # a cancelled start is still waiting on the device; let it settle first
            self.status.log("capture: waiting for stale camera request")
            await asyncio.wait([self._acquiring])
            if self._phase is not CapturePhase.IDLE:
                return self.snapshot(error_code=errors.ERR_BUSY)

        self._next_id += 1
        session = CaptureSession(session_id=self._next_id)
        self._session = session
        self._error = None
        self._result = None
        self._enter(CapturePhase.INITIALIZING)

        acquiring = asyncio.ensure_future(self.camera.acquire(self.constraints))
        self._acquiring = acquiring
        try:
            stream = await asyncio.shield(acquiring)
        except asyncio.CancelledError:
            # the device call keeps running; whatever it opens must still be released
            acquiring.add_done_callback(self._drop_late_stream)
            if self._is_live(session):
                self._to_idle("task cancelled")
            raise
        except CameraError as e:
            if not self._is_live(session):
                return self.snapshot()
            self.status.log(f"capture: camera failed {e.code}")
            self._session = None
            self._error = e
            self._enter(CapturePhase.IDLE)
            return self.snapshot()

        if not self._is_live(session):
            self.status.log(f"capture: session {session.session_id} cancelled, dropping late stream")
            self.camera.release(stream)
            return self.snapshot()

        session.stream = stream
        self._enter(CapturePhase.PREVIEWING)
        return self.snapshot()

    async def capture(self) -> CaptureSnapshot:
        if self._phase is not CapturePhase.PREVIEWING:
            self.status.log(f"capture: capture rejected, phase={self._phase.value}")
            code = errors.ERR_BUSY if self._phase is CapturePhase.ANALYZING else errors.ERR_INVALID_STATE
            return self.snapshot(error_code=code)

        if self._capturing is not None and self._capturing is self._session:
            self.status.log("capture: capture rejected, frame grab in progress")
            return self.snapshot(error_code=errors.ERR_BUSY)

        session = self._session
        self._capturing = session
        try:
            # frame read and JPEG encode block; keep them off the loop
            image = await asyncio.to_thread(self.capturer.capture, session.stream)
        except CaptureError as e:
            if not self._is_live(session):
                return self.snapshot()
            self.status.log(f"capture: {e.code}, still previewing")
            self._error = e
            self._notify()
            return self.snapshot()
        finally:
            if self._capturing is session:
                self._capturing = None

        if not self._is_live(session):
            self.status.log(f"capture: session {session.session_id} cancelled during frame grab, image dropped")
            return self.snapshot()

        # the classifier only needs the still image
        self.camera.release(session.stream)
        session.stream = None
        session.image = image
        self._error = None
        self._enter(CapturePhase.ANALYZING)

        self._classifying = asyncio.ensure_future(self.classifier.classify(image))
        try:
            result = await self._classifying
        except asyncio.CancelledError:
            if self._is_live(session):
                self.status.log("capture: task cancelled while analyzing -> idle")
                self._session = None
                self._enter(CapturePhase.IDLE)
            raise
        if not self._is_live(session):
            return self.snapshot()

        self._result = result
        self.status.last_result = result
        self._enter(CapturePhase.DONE)
        return self.snapshot()

    def cancel(self) -> CaptureSnapshot:
        return self._to_idle("cancel")

    def reset(self) -> CaptureSnapshot:
        return self._to_idle("reset")

    async def aclose(self):
        """Teardown: let a running classification finish, then drop everything."""
        if self._phase is CapturePhase.ANALYZING and self._classifying is not None:
            await asyncio.wait([self._classifying])
        self._to_idle("teardown")
        self.camera.release()

    async def __aenter__(self) -> "CaptureStateMachine":
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.aclose()

    # ── helpers ────────────────────────────────────────────────────────────

    def _to_idle(self, reason: str) -> CaptureSnapshot:
        if self._phase is CapturePhase.ANALYZING:
            self.status.log(f"capture: {reason} rejected while analyzing")
            return self.snapshot(error_code=errors.ERR_BUSY)

        session = self._session
        if session is not None and session.stream is not None:
            self.camera.release(session.stream)
            session.stream = None
        self._session = None
        self._error = None
        self._result = None
        self.status.last_result = None
        if self._phase is not CapturePhase.IDLE or session is not None:
            self.status.log(f"capture: {reason} -> idle")
        self._enter(CapturePhase.IDLE)
        return self.snapshot()

    def _drop_late_stream(self, task: asyncio.Task):
        if task.cancelled() or task.exception() is not None:
            return
        self.camera.release(task.result())

    def _is_live(self, session: CaptureSession) -> bool:
        return self._session is session

    def _enter(self, phase: CapturePhase):
        if phase is not self._phase:
            self.status.log(f"capture: {self._phase.value} -> {phase.value}")
        self._phase = phase
        self._notify()

    def _notify(self):
        self.status.phase = self._phase.value
        self.status.last_error = self._error.code if self._error else None
        if self.listener is not None:
            self.listener(self.snapshot())

"""
Streaming extraction engine.

Consumes the LLM response fragment by fragment and turns it into a sequence
of events: zero or more "partial" snapshots with a strictly increasing
number of complete records, followed by exactly one "complete" or "error".
"""

import json
import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, AsyncIterator, Dict, List, Optional

from fitfuel.boundary import BoundaryDetector
from fitfuel.errors import (FinalParseFailure, NoProgress, RepairFailure,
                            SessionClosedError, TotalFailure, UpstreamError)
from fitfuel.records import Container, DocumentSchema
from fitfuel.scanner import ScanCursor, repair

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    ACCUMULATING = "accumulating"
    FINALIZED = "finalized"
    FAILED_FINAL = "failed_final"


@dataclass
class Snapshot:
    record_count: int
    containers: List[Container]
    sequence: int
    data: Dict[str, Any]


@dataclass
class StreamEvent:
    type: str  # partial, complete or error
    data: Optional[Dict[str, Any]] = None
    completed_count: Optional[int] = None
    message: Optional[str] = None

    @property
    def terminal(self) -> bool:
        return self.type != "partial"

    def payload(self) -> Dict[str, Any]:
        if self.type == "partial":
            return {"type": "partial", "completedCount": self.completed_count, "data": self.data}
        if self.type == "complete":
            return {"type": "complete", "data": self.data}
        return {"type": "error", "message": self.message}

    def to_sse(self) -> str:
        """Server-Sent Events frame for this event"""
        return f"data: {json.dumps(self.payload())}\n\n"


def _finite_float(text: str) -> Optional[float]:
    value = float(text)
    return value if math.isfinite(value) else None


def loads_document(text: str) -> Any:
    """json.loads, with NaN, Infinity and overflowing numbers read as null"""
    return json.loads(text, parse_float=_finite_float, parse_constant=lambda name: None)


def parse_prefix(prefix: str) -> Any:
    """Close a truncated prefix and parse it. The prefix itself is left alone."""
    candidate = repair(prefix)
    try:
        return loads_document(candidate)
    except json.JSONDecodeError as e:
        raise RepairFailure(f"Repaired prefix does not parse: {e}") from e


class SnapshotEmitter:
    """Decides which snapshots are worth sending, and how the stream ends"""

    def __init__(self, schema: DocumentSchema, envelope: Optional[Dict[str, Any]] = None):
        self.schema = schema
        self.envelope = dict(envelope or {})
        self.state = SessionState.ACCUMULATING
        self.last_emitted_count = 0
        self.last_good_snapshot: Optional[Snapshot] = None
        self.sequence = 0

    def _build(self, document: Any, final: bool) -> Snapshot:
        containers = self.schema.containers(document)
        record_count = sum(len(container.records) for container in containers)
        data = dict(self.envelope)
        if containers:
            data.update(self.schema.render(containers, document, final))
        return Snapshot(record_count, containers, self.sequence + 1, data)

    def offer(self, document: Any) -> StreamEvent:
        """Turn a parsed partial document into a partial event, if it confirms new records"""
        snapshot = self._build(document, final=False)
        if snapshot.record_count <= self.last_emitted_count:
            raise NoProgress(f"{snapshot.record_count} complete records, {self.last_emitted_count} already sent")

        self.sequence = snapshot.sequence
        self.last_good_snapshot = snapshot
        self.last_emitted_count = snapshot.record_count
        logger.info("Sending partial %s with %d complete records", self.schema.kind, snapshot.record_count)
        return StreamEvent("partial", data=snapshot.data, completed_count=snapshot.record_count)

    def finalize(self, buffer: str) -> StreamEvent:
        """Terminal event for a stream that ended with `buffer`"""
        try:
            try:
                document = loads_document(buffer)
            except json.JSONDecodeError as e:
                raise FinalParseFailure(f"Final response is not valid JSON: {e}") from e

            snapshot = self._build(document, final=True)
            if snapshot.record_count == 0:
                raise FinalParseFailure("Final response has no complete records")

            self.sequence = snapshot.sequence
            self.state = SessionState.FINALIZED
            logger.info("Sending complete %s with %d records", self.schema.kind, snapshot.record_count)
            return StreamEvent("complete", data=snapshot.data)

        except FinalParseFailure as e:
            logger.warning("Final parse failed (%s), response length %d", e, len(buffer))
            if self.last_good_snapshot is not None:
                self.state = SessionState.FINALIZED
                logger.warning("Using last valid partial %s (%d records) as complete",
                               self.schema.kind, self.last_good_snapshot.record_count)
                return StreamEvent("complete", data=self.last_good_snapshot.data)

            self.state = SessionState.FAILED_FINAL
            failure = TotalFailure(self.schema.truncation_message)
            logger.error("No usable %s in response: %s", self.schema.kind, failure)
            return StreamEvent("error", message=str(failure))


class StreamSession:
    """
    State for one streamed generation request.

    Owns the buffer, the scan state and the emitter. feed() is called once per
    fragment in arrival order, finish() once at end of stream.
    """

    def __init__(self, schema: DocumentSchema, envelope: Optional[Dict[str, Any]] = None):
        self.schema = schema
        self.buffer = ""
        self.cursor = ScanCursor()
        self.detector = BoundaryDetector()
        self.emitter = SnapshotEmitter(schema, envelope)

    @property
    def state(self) -> SessionState:
        return self.emitter.state

    @property
    def last_emitted_count(self) -> int:
        return self.emitter.last_emitted_count

    @property
    def last_good_snapshot(self) -> Optional[Snapshot]:
        return self.emitter.last_good_snapshot

    def _ensure_open(self) -> None:
        if self.state != SessionState.ACCUMULATING:
            raise SessionClosedError(f"Session already {self.state.value}")

    def feed(self, fragment: str) -> Optional[StreamEvent]:
        """Append a fragment; return a partial event if it completed new records"""
        self._ensure_open()
        if not fragment:
            return None

        self.buffer += fragment
        self.cursor.feed(fragment)

        end = self.detector.candidate(fragment, self.buffer, self.cursor)
        if end is None:
            return None

        try:
            document = parse_prefix(self.buffer[:end])
        except RepairFailure as e:
            logger.debug("Partial parse at offset %d failed, waiting for more: %s", end, e)
            return None
        self.detector.confirm(end)

        try:
            return self.emitter.offer(document)
        except NoProgress as e:
            logger.debug("No new records at offset %d: %s", end, e)
            return None

    def finish(self) -> StreamEvent:
        """End of stream: the one terminal event of this session"""
        self._ensure_open()
        return self.emitter.finalize(self.buffer)

    def abort(self) -> None:
        """Consumer went away: close without any further event"""
        if self.state == SessionState.ACCUMULATING:
            self.emitter.state = SessionState.FAILED_FINAL
        self.buffer = ""


async def stream_events(session: StreamSession, fragments: AsyncIterator[str]) -> AsyncIterator[StreamEvent]:
    """Drive a session from an async fragment source"""
    try:
        async for fragment in fragments:
            event = session.feed(fragment)
            if event is not None:
                yield event
    except UpstreamError as e:
        # Same as the stream ending here
        logger.warning("Upstream stream failed after %d chars: %s", len(session.buffer), e)
    except Exception as e:
        logger.error("Fragment source raised %s after %d chars: %s",
                     type(e).__name__, len(session.buffer), e)
    except BaseException:
        # Cancelled, or the consumer closed us
        session.abort()
        raise
    yield session.finish()


def strip_code_fence(text: str) -> str:
    """Drop a ```json ... ``` wrapper around a whole response"""
    text = text.strip()
    if not text.startswith("```"):
        return text
    lines = text.split("\n")
    for i, line in enumerate(lines[1:], 1):
        if line.strip().startswith("```"):
            return "\n".join(lines[1:i])
    return "\n".join(lines[1:])


def parse_complete_response(schema: DocumentSchema, text: str,
                            envelope: Optional[Dict[str, Any]] = None) -> StreamEvent:
    """Run a non-streamed response through the same engine as one fragment"""
    session = StreamSession(schema, envelope)
    session.feed(strip_code_fence(text))
    return session.finish()

"""
Exceptions raised while turning a streamed LLM response into documents
"""


class StreamEngineError(Exception):
    """Base class for streaming engine failures"""


class RepairFailure(StreamEngineError, ValueError):
    """A repaired prefix still does not parse. Retried on the next fragment."""


class NoProgress(StreamEngineError):
    """A prefix parsed but did not confirm any new record"""


class FinalParseFailure(StreamEngineError, ValueError):
    """The full buffer did not parse at end of stream"""


class TotalFailure(StreamEngineError):
    """The stream ended without a single usable snapshot"""


class SessionClosedError(StreamEngineError, RuntimeError):
    """The session already produced its terminal event"""


class UpstreamError(Exception):
    """The LLM fragment source failed mid-stream"""

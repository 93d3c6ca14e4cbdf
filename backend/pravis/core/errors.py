class PravisError(Exception):
    """Base class for errors raised by the assistant backend."""


class LLMError(PravisError):
    """The text-generation provider failed (transport, status or configuration)."""


class FlowOutputError(PravisError):
    """A structured flow could not decode the model output into its schema."""

    def __init__(self, message: str, raw: str = ""):
        super().__init__(message)
        self.raw = raw


class ImageProcessingError(PravisError):
    """An attached image could not be decoded or re-encoded."""

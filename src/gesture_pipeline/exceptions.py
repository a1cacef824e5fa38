"""
Exceptions raised by the gesture recognition pipeline.
"""


class GesturePipelineError(Exception):
    """Base class for pipeline errors."""


class DetectionError(GesturePipelineError):
    """A detector failed while evaluating a frame."""

    def __init__(self, detector_name: str, original: BaseException):
        self.detector_name = detector_name
        self.original = original
        super().__init__(
            f"Detector '{detector_name}' failed: {type(original).__name__}: {original}"
        )

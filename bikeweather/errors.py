class PipelineError(Exception):
    """Base class for pipeline errors"""


class MalformedRecord(PipelineError):
    """A raw row could not be parsed into a usable record"""

    def __init__(self, message: str, row=None):
        super().__init__(message)
        self.row = row


class SourceUnavailable(PipelineError):
    """A raw data source could not be reached or returned no usable payload"""

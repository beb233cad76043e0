"""
Exception types raised by the sequencer core
"""


class SequencerError(Exception):
    """Base class for sprite sequencer errors"""


class ImageDecodeError(SequencerError):
    """The source image could not be decoded into pixels"""


class ExportError(SequencerError):
    """A frame could not be prepared or the encoder failed"""

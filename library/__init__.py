from .recording_library import EXPORT_FILENAME, RecordingLibrary

__all__ = ["EXPORT_FILENAME", "RecordingLibrary"]

# cloudscribe/services/speech/errors.py

from __future__ import annotations


class CloudTranscriptionError(Exception):
    """Base class for every failure surfaced by the transcription layer."""

    default_message = "Cloud transcription failed."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class UnsupportedProvider(CloudTranscriptionError):
    default_message = "The model provider is not supported by this service."


class MissingAPIKey(CloudTranscriptionError):
    default_message = "API key for this service is missing. Please configure it in the settings."


class InvalidAPIKey(CloudTranscriptionError):
    default_message = "The provided API key is invalid."


class AudioFileNotFound(CloudTranscriptionError):
    default_message = "The audio file to transcribe could not be found."


class ApiRequestFailed(CloudTranscriptionError):
    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = int(status_code)
        self.message = message
        super().__init__(f"The API request failed with status code {self.status_code}: {message}")


class NetworkError(CloudTranscriptionError):
    def __init__(self, underlying: BaseException) -> None:
        self.underlying = underlying
        super().__init__(f"A network error occurred: {underlying}")


class NoTranscriptionReturned(CloudTranscriptionError):
    default_message = "The API returned an empty or invalid response."


class DataEncodingError(CloudTranscriptionError):
    default_message = "Failed to encode the request body."

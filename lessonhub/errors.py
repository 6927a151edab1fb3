from fastapi import HTTPException


class LessonHubError(Exception):
    """Base error raised by the storage layer"""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationFailed(LessonHubError):
    status_code = 400


class InvalidIdentifier(LessonHubError):
    status_code = 400


class NotFound(LessonHubError):
    status_code = 404


class Conflict(LessonHubError):
    status_code = 409


class UpstreamError(LessonHubError):
    """Payment or identity provider failure"""
    status_code = 500


def to_http(error: LessonHubError) -> HTTPException:
    return HTTPException(status_code=error.status_code, detail=error.message)

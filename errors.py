# Error types raised by the data layer and the auth policies
from flask import jsonify


class AppError(Exception):
    """Base error carrying the HTTP status it should be reported with."""

    status_code = 500

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_response(self):
        return jsonify({"error": self.message}), self.status_code


class NotFoundError(AppError):
    """404 NOT FOUND"""
    status_code = 404

    def __init__(self, message="Not Found"):
        super().__init__(message)


class BadRequestError(AppError):
    """400 BAD REQUEST; message may be a list of validation messages"""
    status_code = 400

    def __init__(self, message="Bad Request"):
        super().__init__(message)


class UnauthorizedError(AppError):
    """401 UNAUTHORIZED"""
    status_code = 401

    def __init__(self, message="Unauthorized"):
        super().__init__(message)

from typing import Any, Dict, Optional


class ApiError(Exception):
    """Base error mapped onto the {error, response?} JSON envelope."""

    status_code = 500

    def __init__(self, message: str, response: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.response = response

    def to_body(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.message}
        if self.response is not None:
            body["response"] = self.response
        return body


class ValidationError(ApiError):
    status_code = 400


class ConfigurationError(ApiError):
    pass


class ModelInvocationError(ApiError):
    pass

from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel


T = TypeVar("T")


class APIResponse(BaseModel, Generic[T]):
    """Envelope shared by every JSON response: message, status code and payload.

    Routes and error handlers serialise it with exclude_none so an absent
    payload is omitted from the body.
    """
    message: str
    status_code: int
    data: Optional[T] = None

    def to_dict(self) -> dict:
        return self.model_dump(mode="json", exclude_none=True)


def envelope(message: str, status_code: int, data: Any = None) -> dict:
    return APIResponse[Any](message=message, status_code=status_code, data=data).to_dict()

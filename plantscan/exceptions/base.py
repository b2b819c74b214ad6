from enum import Enum
from typing import Optional

from fastapi import HTTPException


class BaseErrorCode(Enum):
    """
    Error codes declared as ``(code, message template, http status)``.
    """

    def __init__(self, code: int, message: str, status_code: int = 400):
        self._value_ = code
        self.message = message
        self.status_code = status_code

    @property
    def code(self):
        return self.value

    def render(self, **kwargs) -> str:
        return self.message.format(**kwargs)

    def as_dict(self, extras=None, **kwargs):
        return {
            "code": self.code,
            "message": self.render(**kwargs),
            "name": self.name,
            "extras": extras
        }


class EnumException(HTTPException):
    def __init__(
        self,
        error_enum: BaseErrorCode,
        status_code: Optional[int] = None,
        headers=None,
        extras=None,
        err_kwargs=None,
    ):
        super().__init__(
            status_code or error_enum.status_code,
            detail=error_enum.as_dict(extras, **(err_kwargs or {})),
            headers=headers,
        )


__all__ = [
    "BaseErrorCode",
    "EnumException",
]

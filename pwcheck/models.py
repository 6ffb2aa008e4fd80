from typing import Literal

from pydantic import BaseModel, Field

from pwcheck.pwned import LeakVerdict

ViewType = Literal["leaked", "safe", "weak", "loading"]


class EvaluationResult(BaseModel):
    strength: int = Field(ge=0, le=5)
    leak: LeakVerdict
    request_id: int


class ResultView(BaseModel):
    type: ViewType
    headline: str
    detail: str = ""
    strength_label: str = ""
    strength_class: str = ""

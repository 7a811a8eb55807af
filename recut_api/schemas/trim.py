from typing import List

from pydantic import BaseModel, Field, field_validator


class TrimRequest(BaseModel):
    url: str
    start: float = Field(ge=0, allow_inf_nan=False)
    end: float = Field(allow_inf_nan=False)

    @field_validator("url")
    @classmethod
    def url_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("url is required")
        return v

    @field_validator("start", "end", mode="before")
    @classmethod
    def numbers_only(cls, v):
        # "10" and true would otherwise be coerced
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            raise ValueError("must be a number")
        return v


class ProcessRequest(BaseModel):
    url: str = ""


class SuggestedClip(BaseModel):
    id: str
    title: str
    start: float
    end: float
    thumbnail: str


class ProcessResponse(BaseModel):
    clips: List[SuggestedClip]

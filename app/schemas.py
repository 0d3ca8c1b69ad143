from typing import Any, Dict, List, Literal

from pydantic import BaseModel, Field


class QuestionRequest(BaseModel):
    question: str = Field(min_length=1)

    class Config:
        extra = "ignore"


class RowModel(BaseModel):
    i: int
    data: Any = None


class GenerateResponse(BaseModel):
    sql: str
    traces: List[Dict[str, Any]] = Field(default_factory=list)


class RunResponse(GenerateResponse):
    rows: List[RowModel] = Field(default_factory=list)


class StatementResponse(GenerateResponse):
    ok: bool = True


class SchemaResponse(BaseModel):
    format: Literal["expanded", "compact"]
    tables: int
    schema_text: str

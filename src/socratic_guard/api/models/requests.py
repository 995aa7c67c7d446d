"""
Pydantic request models -- the API contract for classification clients.

  POST /api/v1/classify           -> ClassifyRequest
  POST /api/v1/classify/exchange  -> ClassifyExchangeRequest
"""

from pydantic import BaseModel, Field


class ClassifyRequest(BaseModel):
    """Classify one candidate AI response."""

    text: str = Field(..., description="The raw response text to classify")
    config_overrides: dict[str, int] = Field(
        default_factory=dict,
        description="Override engine options (e.g., code_block_line_threshold)",
    )


class ExchangeTurnModel(BaseModel):
    """One message of an AI/developer exchange."""

    role: str = Field(..., description="assistant/ai turns are classified, others skipped")
    content: str


class ClassifyExchangeRequest(BaseModel):
    """Classify every assistant turn of an exchange."""

    turns: list[ExchangeTurnModel] = Field(..., max_length=500)
    config_overrides: dict[str, int] = Field(default_factory=dict)

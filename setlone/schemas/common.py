from pydantic import BaseModel, ConfigDict


class ErrorResponse(BaseModel):
    """Error payload for every failed request."""

    model_config = ConfigDict(
        json_schema_extra={"example": {"error": "No data found", "status": 404}}
    )

    error: str
    status: int


class MessageResponse(BaseModel):
    success: bool = True
    message: str

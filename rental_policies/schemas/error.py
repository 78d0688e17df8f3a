from pydantic import BaseModel, ConfigDict, Field


class ErrorResponse(BaseModel):
    """Body of every 4xx raised from a domain error."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "detail": "Property policy 12 was modified concurrently, re-read and retry",
                "code": "CONCURRENT_MODIFICATION",
            }
        }
    )

    detail: str = Field(..., description="Human-readable error message")
    code: str = Field(
        ...,
        description=(
            "Machine-readable error code: NOT_FOUND, DUPLICATE_RESOURCE, VALIDATION_ERROR, "
            "FORBIDDEN, UNAUTHORIZED, INVALID_STATE or CONCURRENT_MODIFICATION"
        ),
    )

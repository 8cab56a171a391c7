from pydantic import BaseModel, ConfigDict


class HealthResponse(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "status": "OK",
                "service": "test-backend",
                "message": "Backend is running",
            }
        }
    )

    status: str
    service: str
    message: str


class HelloResponse(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "message": "Hello World from test-backend!",
                "status": "success",
            }
        }
    )

    message: str
    status: str

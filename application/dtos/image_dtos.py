from pydantic import BaseModel, Field

UPLOAD_SUCCESS_MESSAGE = "Image uploaded successfully"


class UploadImageRequest(BaseModel):
    filename: str | None = Field(None, description="Original filename of the uploaded file")
    mime_type: str | None = Field(None, description="Content type declared by the client")


class UploadImageResponse(BaseModel):
    message: str = Field(UPLOAD_SUCCESS_MESSAGE, description="Human readable outcome")
    filename: str = Field(..., description="Storage key the image was saved under")
    url: str | None = Field(None, description="Public URL of the image, when configured")


class ErrorResponse(BaseModel):
    error: str = Field(..., description="Client-safe error message")

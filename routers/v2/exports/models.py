from pydantic import BaseModel, Field


class ExportPdfRequest(BaseModel):
    message: str = Field(..., min_length=1, description='Rendered roster message to print')

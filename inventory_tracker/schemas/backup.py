from pydantic import BaseModel


class ImportSummaryRead(BaseModel):
    imported: int
    skipped: int
    locations: int = 0

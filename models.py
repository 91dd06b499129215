"""Response and request schemas shared by the pipeline and the API."""
import datetime as dt
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ValidationError(BaseModel):
    """
    A single failed check on a single row.

    Attributes:
        sheet: Name of the sheet the row belongs to
        row: 1-based spreadsheet row number (row 1 is the header)
        message: Human-readable description of the failure
    """
    model_config = ConfigDict(frozen=True)

    sheet: str
    row: int
    message: str


class Record(BaseModel):
    """
    A row that passed every check, with coerced values.

    Attributes:
        id: Identifier unique within one pipeline run
        name: Trimmed name
        amount: Strictly positive amount
        date: Calendar date of the entry
        verified: Optional verification flag
    """
    id: str
    name: str
    amount: float = Field(gt=0)
    date: dt.date
    verified: Optional[bool] = None


class SheetResult(BaseModel):
    name: str
    data: List[Record] = Field(default_factory=list)
    errors: List[ValidationError] = Field(default_factory=list)


class WorkbookResult(BaseModel):
    """Per-sheet results in workbook order plus the global error flag."""
    model_config = ConfigDict(populate_by_name=True)

    sheets: List[SheetResult] = Field(default_factory=list)
    has_errors: bool = Field(default=False, alias="hasErrors")


class ImportRequest(BaseModel):
    """Body of the import endpoint: accepted records of one sheet."""
    model_config = ConfigDict(populate_by_name=True)

    sheet_name: str = Field(alias="sheetName")
    data: List[Record]


class ErrorResponse(BaseModel):
    error: str


def to_document(record: Record, sheet_name: str) -> Dict[str, Any]:
    """Flatten a record into a storable document tagged with its sheet."""
    return {"sheetName": sheet_name, **record.model_dump(exclude_none=True)}

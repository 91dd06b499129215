import io
import logging
import uuid
from datetime import date
from http import HTTPStatus
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

import pandas as pd

from models import Record, SheetResult, ValidationError, WorkbookResult
from utils.log_context import LogContext
from utils.result import Result
from validation import FieldSchema, RowValidator, SchemaRegistry

logger = logging.getLogger(__name__)

GENERIC_FAILURE_MESSAGE = "Error processing file"

RawRow = Mapping[str, Any]
Workbook = List[Tuple[str, List[RawRow]]]

# Row 1 of every sheet is the header
HEADER_OFFSET = 2


class ProcessingFailure(Exception):
    """Raised when an uploaded buffer cannot be read as a workbook."""


def _clean_cell(value: Any) -> Any:
    if value is None:
        return None
    if pd.api.types.is_scalar(value) and pd.isna(value):
        return None
    return value


def decode_workbook(content: bytes) -> Workbook:
    """
    Decode an uploaded spreadsheet into named sheets of raw rows.

    The first row of each sheet is the header. Fully blank rows are dropped,
    headers are trimmed and empty cells become None. Cells are read with
    ``dtype=object`` so numbers stay numbers and date-formatted cells arrive
    as datetimes.

    Args:
        content: Raw file bytes

    Returns:
        Workbook: (sheet name, rows) pairs in the workbook's sheet order

    Raises:
        ProcessingFailure: If the buffer is empty or not a readable workbook
    """
    if not content:
        raise ProcessingFailure("Uploaded file is empty")

    try:
        frames: Dict[str, pd.DataFrame] = pd.read_excel(io.BytesIO(content), sheet_name=None, dtype=object)
    except Exception as e:
        logger.error(
            "Failed to read workbook",
            extra={"error": str(e), "error_type": type(e).__name__, "size": len(content)}
        )
        raise ProcessingFailure(f"Failed to read workbook: {e}") from e

    workbook: Workbook = []
    for sheet_name, df in frames.items():
        df = df.dropna(how="all")
        headers = [str(col).strip() for col in df.columns]
        rows = [
            {header: _clean_cell(value) for header, value in zip(headers, values)}
            for values in df.itertuples(index=False, name=None)
        ]
        logger.debug("Decoded sheet", extra={"sheet": sheet_name, "row_count": len(rows)})
        workbook.append((str(sheet_name), rows))
    return workbook


def default_id_factory() -> str:
    return str(uuid.uuid4())


class SheetProcessor:
    """
    Validates the rows of one sheet and partitions them into records and errors.

    Args:
        schema: Field rules applied to every row of the sheet
        reference: Date standing in for "today" in business rules
        id_factory: Supplies a fresh identifier for every accepted record
    """

    def __init__(self, schema: FieldSchema, reference: date, id_factory: Callable[[], str] = default_id_factory):
        self.validator = RowValidator(schema, reference)
        self.id_factory = id_factory

    def process_row(self, row: RawRow) -> Result[Record]:
        """
        Turn one raw row into a Record or the list of its error messages.

        Exceptions raised while coercing the row are reported as a failed
        Result for this row only.
        """
        try:
            return self.validator.coerce(row).map(
                lambda values: Record(id=self.id_factory(), **values)
            )
        except Exception as e:
            logger.warning(f"Row could not be processed: {e}", extra={"error_type": type(e).__name__})
            return Result.fail(f"Row could not be processed: {e}")

    def process(self, sheet_name: str, rows: Sequence[RawRow]) -> SheetResult:
        result = SheetResult(name=sheet_name)

        for index, row in enumerate(rows):
            row_number = index + HEADER_OFFSET
            outcome = self.process_row(row)
            if outcome.is_success():
                result.data.append(outcome.data)
                continue
            logger.debug(f"Errors in row {row_number}: {outcome.errors}", extra={"sheet": sheet_name})
            result.errors.extend(
                ValidationError(sheet=sheet_name, row=row_number, message=message)
                for message in outcome.errors
            )

        logger.info(
            f"Processed sheet {sheet_name}",
            extra={"sheet": sheet_name, "accepted": len(result.data), "errors": len(result.errors)}
        )
        return result


class WorkbookPipeline:
    """
    Runs every sheet of a decoded workbook through its schema.

    Args:
        registry: Sheet name to schema mapping; sheets it has no schema for
            are skipped
        clock: Returns the reference date, read once per run
        id_factory: Identifier source shared by all sheets of a run
    """

    def __init__(
        self,
        registry: Optional[SchemaRegistry] = None,
        clock: Callable[[], date] = date.today,
        id_factory: Callable[[], str] = default_id_factory,
    ):
        self.registry = registry or SchemaRegistry.default()
        self.clock = clock
        self.id_factory = id_factory

    def run(self, workbook: Workbook) -> WorkbookResult:
        reference = self.clock()
        sheets: List[SheetResult] = []

        for sheet_name, rows in workbook:
            schema = self.registry.schema_for(sheet_name)
            if schema is None:
                logger.info(f"Skipping sheet {sheet_name}: no schema registered", extra={"sheet": sheet_name})
                continue
            processor = SheetProcessor(schema, reference, self.id_factory)
            sheets.append(processor.process(sheet_name, rows))

        has_errors = any(sheet.errors for sheet in sheets)
        return WorkbookResult(sheets=sheets, has_errors=has_errors)


class WorkbookProcessor:
    """
    Entry point used by the upload endpoint: decode, then validate.

    Every failure is reported through the returned Result; callers never
    see an exception.
    """

    def __init__(self, pipeline: Optional[WorkbookPipeline] = None):
        self.pipeline = pipeline or WorkbookPipeline()

    def process_upload(self, content: bytes, filename: Optional[str] = None) -> Result[WorkbookResult]:
        """
        Decode and validate an uploaded workbook.

        Args:
            content: Raw file bytes
            filename: Original file name, used for logging only

        Returns:
            Result[WorkbookResult]: The report, or a 500 failure with a generic message
        """
        request_id = str(uuid.uuid4())[:8]
        log_context = {"request_id": request_id, "file_name": filename, "size": len(content)}
        logger.info("Processing uploaded workbook", extra=log_context)

        try:
            with LogContext("workbook decoding", logger, **log_context):
                workbook = decode_workbook(content)
            log_context["sheet_count"] = len(workbook)

            with LogContext("workbook validation", logger, **log_context):
                report = self.pipeline.run(workbook)
        except Exception as e:
            logger.exception("Unexpected error during workbook processing", extra={**log_context, "error": str(e)})
            return Result.fail(GENERIC_FAILURE_MESSAGE, status_code=HTTPStatus.INTERNAL_SERVER_ERROR)

        logger.info(
            f"Upload completed. Errors found: {'Yes' if report.has_errors else 'No'}",
            extra=log_context
        )
        return Result.ok(report)

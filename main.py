from fastapi import FastAPI, status, Depends, File, UploadFile
import os
import logging
from datetime import datetime
from typing import Optional
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from config import get_settings
from models import ErrorResponse, ImportRequest, WorkbookResult, to_document
from storage import InMemoryRecordStore, RecordStore
from validation import SchemaRegistry
from workbook_process import WorkbookPipeline, WorkbookProcessor

settings = get_settings()

# Create logs directory if it doesn't exist
os.makedirs(settings.log_dir, exist_ok=True)

# Configure logging
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# Add file handler to write logs to file; attached to the root logger so
# pipeline modules land in the same file
log_file_path = os.path.join(settings.log_dir, f"app_{datetime.now().strftime('%Y%m%d')}.log")
file_handler = logging.FileHandler(log_file_path)
file_handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))
logging.getLogger().addHandler(file_handler)


# Initialize FastAPI app with metadata
app = FastAPI(
    title="Excel Upload Validator API",
    description="API for validating spreadsheet uploads and importing accepted records",
    version="1.2.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

record_store = InMemoryRecordStore()


def get_processor() -> WorkbookProcessor:
    """Build the workbook processor for one request."""
    registry = SchemaRegistry.default(get_settings().unknown_sheets)
    return WorkbookProcessor(WorkbookPipeline(registry=registry))


def get_record_store() -> RecordStore:
    return record_store


# API Endpoints
@app.post(
    "/api/upload",
    tags=["Excel Processing"],
    response_model=WorkbookResult,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}}
)
async def upload_workbook(
    file: Optional[UploadFile] = File(None),
    processor: WorkbookProcessor = Depends(get_processor)
):
    """
    Validate every sheet of an uploaded workbook.

    Returns:
        dict: JSON response with:
            - sheets: per sheet, the accepted records (data) and the row errors
            - hasErrors: whether any sheet reported at least one error
    """
    if file is None or not file.filename:
        logger.error("No file uploaded")
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": "No file uploaded"})

    logger.info(f"File uploaded: {file.filename}. Processing...")
    content = await file.read()
    result = processor.process_upload(content, filename=file.filename)

    if result.is_failure():
        return JSONResponse(status_code=result.status_code.value, content={"error": result.error})
    return result.data


@app.post(
    "/api/import",
    tags=["Excel Processing"],
    responses={500: {"model": ErrorResponse}}
)
async def import_records(request: ImportRequest, store: RecordStore = Depends(get_record_store)):
    """
    Persist accepted records of one sheet, tagging each with the sheet name.
    """
    documents = [to_document(record, request.sheet_name) for record in request.data]
    try:
        count = store.insert_many(documents)
    except Exception as e:
        logger.exception(f"Error importing data: {str(e)}", extra={"sheet": request.sheet_name})
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Error importing data"}
        )

    logger.info(f"Imported {count} records from sheet {request.sheet_name}")
    return {"message": "Data imported successfully", "count": count}


# Run the application if executed directly
if __name__ == "__main__":
    import uvicorn
    logger.info("Starting Excel Upload Validator API in development mode.")
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)

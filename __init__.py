"""
Excel Upload Validator

This package provides an API that validates uploaded spreadsheet workbooks
row by row and returns accepted records alongside per-row errors.

Key modules:
- main.py: FastAPI application with the upload and import endpoints
- workbook_process.py: Workbook decoding and sheet/workbook processing
- validation.py: Declarative field schemas and the row validator
- date_normalizer.py: Spreadsheet date decoding and the current-month rule
- utils/result.py: Result pattern implementation for error handling
"""

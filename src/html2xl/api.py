import logging
from datetime import datetime
from typing import List, Optional

import uvicorn
from fastapi import FastAPI, File, HTTPException, Response, UploadFile
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel

from .converter import HTMLTableConverter, parse_errors
from .errors import ConversionError

logger = logging.getLogger(__name__)

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

app = FastAPI(title="HTML to Excel Converter API")


class HTMLInput(BaseModel):
    html_content: str
    filename: Optional[str] = None


class ValidationResult(BaseModel):
    invalid: bool
    errors: List[str]


def _workbook_response(html_content: str, filename: Optional[str]) -> Response:
    try:
        excel_data = HTMLTableConverter().convert(html_content)
    except ConversionError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))

    # Generate filename
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    filename = filename or f"converted_{timestamp}.xlsx"

    return Response(
        content=excel_data,
        media_type=XLSX_MEDIA_TYPE,
        headers={
            'Content-Disposition': f'attachment; filename="{filename}"'
        }
    )


@app.post("/convert")
def convert_html_to_excel(input_data: HTMLInput):
    return _workbook_response(input_data.html_content, input_data.filename)


@app.post("/convert/html-to-excel")
async def convert_html_file_to_excel(file: UploadFile = File(...)):
    html_content = await file.read()
    try:
        html_content = html_content.decode()
    except UnicodeDecodeError:
        raise HTTPException(status_code=400, detail="HTML file must be UTF-8 encoded")
    return await run_in_threadpool(_workbook_response, html_content, None)


@app.post("/validate", response_model=ValidationResult)
def validate_html(input_data: HTMLInput):
    errors = parse_errors(input_data.html_content)
    return ValidationResult(invalid=bool(errors), errors=errors)


def run():
    uvicorn.run("html2xl.api:app", host="0.0.0.0", port=8000)


if __name__ == "__main__":
    run()

"""Convert styled HTML tables into Excel workbooks"""

from .converter import HTMLTableConverter, has_parse_errors, parse_errors
from .errors import ConversionError, EmptyDocumentError, IdentifierCollisionError, StyleParseError
from .extractor import ConversionContext, StyleExtractor, TableStyleIndex
from .materializer import TableMaterializer, sanitize_sheet_name
from .styles import RGB, Border, StyleRecord, parse_color, parse_style

__all__ = [
    'HTMLTableConverter',
    'has_parse_errors',
    'parse_errors',
    'ConversionError',
    'EmptyDocumentError',
    'IdentifierCollisionError',
    'StyleParseError',
    'ConversionContext',
    'StyleExtractor',
    'TableStyleIndex',
    'TableMaterializer',
    'sanitize_sheet_name',
    'RGB',
    'Border',
    'StyleRecord',
    'parse_color',
    'parse_style',
]

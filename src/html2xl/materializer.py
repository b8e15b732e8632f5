import re
import logging
from io import BytesIO
from typing import Dict, Optional

import xlsxwriter

from .extractor import TableStyleIndex, ensure_table_id, iter_cells, iter_rows
from .styles import StyleRecord

logger = logging.getLogger(__name__)

MAX_SHEET_NAME_LENGTH = 31
MAX_CELL_LENGTH = 32767
# Excel limits: 255 characters of column width, 409 points of row height
MAX_COLUMN_WIDTH_PIXELS = 1790
MAX_ROW_HEIGHT_PIXELS = 545
_INVALID_SHEET_CHARS = re.compile(r'[\[\]:*?/\\]')

# XlsxWriter border index for each supported weight
BORDER_WEIGHTS = {
    'thin': 1,
}


def sanitize_sheet_name(name: Optional[str], default: str = 'Sheet1') -> str:
    """Make name acceptable as an Excel worksheet name"""
    if not name:
        return default
    cleaned = _INVALID_SHEET_CHARS.sub('_', name).strip("'")
    cleaned = cleaned[:MAX_SHEET_NAME_LENGTH].strip("'")
    if not cleaned.strip():
        return default
    if cleaned.lower() == 'history':
        # Reserved by Excel
        cleaned += '_'
    return cleaned


def _record_size(sizes: Dict, key: int, value: Optional[float], limit: int):
    """Keep the largest positive size seen for key, capped at limit"""
    if value is None or value <= 0:
        return
    sizes[key] = min(max(sizes.get(key, 0), value), limit)


class StyleManager:
    """Translates StyleRecords into cached XlsxWriter formats"""

    def __init__(self, workbook: xlsxwriter.Workbook):
        self.workbook = workbook
        self._format_cache = {}
        self._cache_hits = 0
        self._cache_misses = 0

    @staticmethod
    def to_excel_format(style: StyleRecord) -> Dict:
        """Convert to XlsxWriter format properties"""
        format_dict = {}
        if style.border is not None:
            format_dict['border'] = BORDER_WEIGHTS[style.border.weight]
            format_dict['border_color'] = style.border.color.to_hex()
        return format_dict

    def get_format(self, style: Optional[StyleRecord]):
        """Get cached format or create a new one; None when nothing to apply"""
        if style is None:
            return None
        properties = self.to_excel_format(style)
        if not properties:
            return None

        if style in self._format_cache:
            self._cache_hits += 1
            return self._format_cache[style]

        self._cache_misses += 1
        excel_format = self.workbook.add_format(properties)
        self._format_cache[style] = excel_format
        return excel_format

    def get_cache_stats(self) -> Dict:
        return {
            'cache_hits': self._cache_hits,
            'cache_misses': self._cache_misses,
            'format_cache_size': len(self._format_cache)
        }


class TableMaterializer:
    """Writes one HTML table and its extracted styles into an xlsx workbook"""

    def __init__(self, apply_row_styles: bool = False, collapse_whitespace: bool = False,
                 max_cell_length: int = MAX_CELL_LENGTH, workbook_options: Dict = None):
        self.apply_row_styles = apply_row_styles
        self.collapse_whitespace = collapse_whitespace
        self.max_cell_length = min(max_cell_length, MAX_CELL_LENGTH)
        self.workbook_options = workbook_options or {}

    def _get_cell_content(self, node) -> str:
        """Flattened text of a cell with markup removed"""
        content = node.text(deep=True) or ''
        if self.collapse_whitespace:
            content = ' '.join(content.split())
        if len(content) > self.max_cell_length:
            content = content[:self.max_cell_length]
        return content

    def _resolve_style(self, style_index: TableStyleIndex, row: int, col: int) -> Optional[StyleRecord]:
        style = style_index.cell_style(row, col)
        if not self.apply_row_styles:
            return style
        row_style = style_index.row_style(row)
        if row_style is None:
            return style
        if style is None:
            return row_style
        return style.merged_over(row_style)

    def materialize(self, table_node, style_index: TableStyleIndex) -> bytes:
        """Write table_node into a single-sheet workbook and return its bytes"""
        sheet_name = sanitize_sheet_name(ensure_table_id(table_node))
        if sheet_name != style_index.table_id:
            logger.debug(f"Worksheet name '{sheet_name}' used for table '{style_index.table_id}'")

        output_buffer = BytesIO()
        options = dict(self.workbook_options)
        options['in_memory'] = True
        workbook = xlsxwriter.Workbook(output_buffer, options)

        try:
            worksheet = workbook.add_worksheet(sheet_name)
            style_manager = StyleManager(workbook)
            column_widths = {}
            row_heights = {}

            for row_idx, row in enumerate(iter_rows(table_node), start=1):
                if self.apply_row_styles:
                    row_style = style_index.row_style(row_idx)
                    if row_style is not None:
                        _record_size(row_heights, row_idx, row_style.height, MAX_ROW_HEIGHT_PIXELS)

                for col_idx, cell in enumerate(iter_cells(row), start=1):
                    style = self._resolve_style(style_index, row_idx, col_idx)
                    worksheet.write_string(
                        row_idx - 1,
                        col_idx - 1,
                        self._get_cell_content(cell),
                        style_manager.get_format(style)
                    )

                    if style is None:
                        continue
                    _record_size(column_widths, col_idx, style.width, MAX_COLUMN_WIDTH_PIXELS)
                    _record_size(row_heights, row_idx, style.height, MAX_ROW_HEIGHT_PIXELS)

            for col_idx, width in column_widths.items():
                worksheet.set_column_pixels(col_idx - 1, col_idx - 1, width)
            for row_idx, height in row_heights.items():
                worksheet.set_row_pixels(row_idx - 1, height)

            logger.debug(f"Format cache: {style_manager.get_cache_stats()}")
        finally:
            workbook.close()

        return output_buffer.getvalue()

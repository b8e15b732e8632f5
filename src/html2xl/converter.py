import copy
import time
import logging
from typing import Dict, List

from lxml import etree
from selectolax.parser import HTMLParser

from .errors import EmptyDocumentError, StyleParseError
from .extractor import ConversionContext, StyleExtractor, TableStyleIndex, ensure_table_id
from .materializer import TableMaterializer

logger = logging.getLogger(__name__)


class PerformanceTimer:
    """Records how long named steps of a conversion take"""

    def __init__(self, name, timings: Dict[str, List[float]]):
        self.name = name
        self.timings = timings
        self.start_time = None

    def __enter__(self):
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.timings.setdefault(self.name, []).append(time.perf_counter() - self.start_time)

    @staticmethod
    def log_summary(timings: Dict[str, List[float]]):
        for name, durations in timings.items():
            logger.info(f"  {name}: {sum(durations):.3f} seconds ({len(durations)}x)")


def parse_errors(html_content: str) -> List[str]:
    """Messages reported by a recovering HTML parser for html_content"""
    if not html_content or not html_content.strip():
        return ['Document is empty']
    parser = etree.HTMLParser(recover=True)
    try:
        etree.fromstring(html_content, parser)
    except (etree.LxmlError, ValueError) as e:
        return [str(e)]
    return [f"line {entry.line}: {entry.message}" for entry in parser.error_log]


def has_parse_errors(html_content: str) -> bool:
    """True when html_content contains parse errors (i.e. is invalid)"""
    return len(parse_errors(html_content)) > 0


class HTMLTableConverter:
    """Converts the first table of an HTML document into an xlsx workbook"""

    DEFAULT_OPTIONS = {
        'font': {
            'name': 'Calibri',
            'size': 11
        },
        'table': {
            'apply_row_styles': False
        },
        'html': {
            'collapse_whitespace': False,
            'max_cell_length': 32767  # Excel cell limit
        },
        'styles': {
            'on_error': 'raise'  # or 'skip'
        }
    }

    def __init__(self, options: Dict = None):
        self.options = copy.deepcopy(self.DEFAULT_OPTIONS)
        if options:
            self._deep_update(self.options, options)
        if self.options['styles']['on_error'] not in ('raise', 'skip'):
            raise ValueError(f"Invalid styles.on_error option: {self.options['styles']['on_error']!r}")
        self.extractor = StyleExtractor()

    def _deep_update(self, d: Dict, u: Dict):
        """Deep update dictionary"""
        for k, v in u.items():
            if isinstance(v, dict) and k in d:
                self._deep_update(d[k], v)
            else:
                d[k] = v

    def _materializer(self) -> TableMaterializer:
        return TableMaterializer(
            apply_row_styles=self.options['table']['apply_row_styles'],
            collapse_whitespace=self.options['html']['collapse_whitespace'],
            max_cell_length=self.options['html']['max_cell_length'],
            workbook_options={
                'default_format_properties': {
                    'font_name': self.options['font']['name'],
                    'font_size': self.options['font']['size']
                }
            }
        )

    def extract_styles(self, tables, context: ConversionContext):
        """Run style extraction over every table, honoring styles.on_error"""
        for table in tables:
            try:
                self.extractor.extract(table, context)
            except StyleParseError as e:
                if self.options['styles']['on_error'] != 'skip':
                    raise
                logger.warning(f"Skipping styles: {e}")
                context.register(TableStyleIndex(table_id=ensure_table_id(table)))

    def convert(self, html_content: str, context: ConversionContext = None) -> bytes:
        """Convert html_content and return the workbook bytes.

        Every table is style-extracted but only the first one is written.
        Pass a context to inspect the extracted indices afterwards.
        """
        if context is None:
            context = ConversionContext()
        timings = {}

        try:
            if not html_content or not html_content.strip():
                raise EmptyDocumentError("HTML content is empty")
            parser = HTMLParser(html_content)
            tables = parser.css('table')
            if not tables:
                raise EmptyDocumentError()

            with PerformanceTimer('Style extraction', timings):
                self.extract_styles(tables, context)

            first_table = tables[0]
            if len(tables) > 1:
                logger.info(f"Writing first of {len(tables)} tables, {len(tables) - 1} skipped")

            with PerformanceTimer('Materialization', timings):
                data = self._materializer().materialize(
                    first_table, context.get(ensure_table_id(first_table))
                )
        except Exception as e:
            logger.error(f"Conversion failed: {str(e)}")
            raise

        logger.info("Performance Summary:")
        PerformanceTimer.log_summary(timings)
        return data

    def is_html_invalid(self, html_content: str) -> bool:
        return has_parse_errors(html_content)

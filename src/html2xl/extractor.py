import uuid
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .errors import IdentifierCollisionError, StyleParseError
from .styles import StyleRecord, parse_style

logger = logging.getLogger(__name__)

CELL_TAGS = ('td', 'th')


def iter_rows(table_node) -> List:
    """All <tr> descendants of a table, in document order"""
    return table_node.css('tr')


def iter_cells(row_node) -> List:
    """All <td>/<th> descendants of a row, in document order"""
    # One selector keeps mixed td/th cells in document order
    return [node for node in row_node.css('*') if node.tag in CELL_TAGS]


def ensure_table_id(table_node) -> str:
    """Return the table's id, assigning a new unique one if it has none.

    The id is written back onto the node so later passes see the same value.
    """
    table_id = table_node.attributes.get('id')
    if not table_id:
        table_id = str(uuid.uuid4())
        table_node.attrs['id'] = table_id
        logger.debug(f"Assigned id '{table_id}' to table")
    return table_id


def cell_key(row: int, col: int) -> str:
    return f'{row},{col}'


@dataclass
class TableStyleIndex:
    """Style records of one table, addressed by position only"""
    table_id: str
    row_styles: Dict[int, StyleRecord] = field(default_factory=dict)
    cell_styles: Dict[str, StyleRecord] = field(default_factory=dict)

    def row_style(self, row: int) -> Optional[StyleRecord]:
        return self.row_styles.get(row)

    def cell_style(self, row: int, col: int) -> Optional[StyleRecord]:
        return self.cell_styles.get(cell_key(row, col))

    def is_empty(self) -> bool:
        return not self.row_styles and not self.cell_styles


@dataclass
class ConversionContext:
    """Style indices collected during a single conversion, keyed by table id"""
    indices: Dict[str, TableStyleIndex] = field(default_factory=dict)

    def register(self, index: TableStyleIndex, replace: bool = False):
        if index.table_id in self.indices and not replace:
            raise IdentifierCollisionError(index.table_id)
        self.indices[index.table_id] = index

    def get(self, table_id: str) -> Optional[TableStyleIndex]:
        return self.indices.get(table_id)

    def __contains__(self, table_id) -> bool:
        return table_id in self.indices

    def __len__(self) -> int:
        return len(self.indices)


class StyleExtractor:
    """Collects inline row and cell styles of a table into a TableStyleIndex"""

    def extract(self, table_node, context: ConversionContext = None) -> TableStyleIndex:
        """Index every styled row and cell of table_node by position.

        Registers the result in context when one is given. A malformed style
        raises StyleParseError tagged with the table id; nothing is
        registered for that table in that case.
        """
        table_id = ensure_table_id(table_node)
        index = TableStyleIndex(table_id=table_id)

        try:
            for row_idx, row in enumerate(iter_rows(table_node), start=1):
                row_style = row.attributes.get('style')
                if row_style is not None:
                    index.row_styles[row_idx] = parse_style(row_style)

                for col_idx, cell in enumerate(iter_cells(row), start=1):
                    cell_style = cell.attributes.get('style')
                    if cell_style is not None:
                        index.cell_styles[cell_key(row_idx, col_idx)] = parse_style(cell_style)
        except StyleParseError as e:
            raise e.for_table(table_id) from e

        logger.debug(
            f"Table '{table_id}': {len(index.row_styles)} row styles, "
            f"{len(index.cell_styles)} cell styles"
        )

        if context is not None:
            context.register(index)
        return index

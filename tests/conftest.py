from io import BytesIO

import pytest
from openpyxl import load_workbook
from selectolax.parser import HTMLParser


STYLED_TABLE = """
<html>
<body>
<table id="report">
  <tr style="height: 30px">
    <td style="width: 120px; height:45px">Name</td>
    <td style="border:1px solid #ff0000">Total</td>
    <td>Plain</td>
  </tr>
  <tr>
    <td><b>x</b>y</td>
    <td style="color:red">12</td>
  </tr>
</table>
</body>
</html>
"""

TWO_TABLES = """
<table id="first">
  <tr><td style="border:1px solid #00ff00">a</td></tr>
</table>
<table id="second">
  <tr style="width:10px"><td style="width: 50px">b</td></tr>
</table>
"""


@pytest.fixture
def styled_html():
    return STYLED_TABLE


@pytest.fixture
def two_tables_html():
    return TWO_TABLES


@pytest.fixture
def make_table():
    """Parse markup and return its first table node"""
    def _make_table(markup):
        return HTMLParser(markup).css_first('table')
    return _make_table


@pytest.fixture
def read_workbook():
    """Load xlsx bytes with openpyxl"""
    def _read_workbook(data):
        return load_workbook(BytesIO(data))
    return _read_workbook


@pytest.fixture
def sheet_values():
    """Every cell value of a worksheet, row by row"""
    def _sheet_values(sheet):
        return [[cell.value for cell in row] for row in sheet.iter_rows()]
    return _sheet_values

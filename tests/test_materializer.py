"""
TableMaterializer tests
"""

import pytest

from html2xl import RGB, Border, StyleExtractor, StyleRecord, TableMaterializer, sanitize_sheet_name
from html2xl.materializer import StyleManager


def materialize(table, **kwargs):
    index = StyleExtractor().extract(table)
    return TableMaterializer(**kwargs).materialize(table, index)


class TestSanitizeSheetName:
    """sanitize_sheet_name"""

    def test_valid_name_unchanged(self):
        assert sanitize_sheet_name("report") == "report"

    def test_invalid_characters_replaced(self):
        assert sanitize_sheet_name("a/b\\c?d*e[f]g:h") == "a_b_c_d_e_f_g_h"

    def test_truncated_to_31_characters(self):
        name = sanitize_sheet_name("123e4567-e89b-12d3-a456-426614174000")
        assert len(name) == 31
        assert name == "123e4567-e89b-12d3-a456-4266141"

    @pytest.mark.parametrize("value", [None, "", "''", "   "])
    def test_empty_falls_back(self, value):
        assert sanitize_sheet_name(value) == "Sheet1"

    def test_apostrophes_stripped(self):
        assert sanitize_sheet_name("'quoted'") == "quoted"

    def test_reserved_name(self):
        assert sanitize_sheet_name("History") == "History_"


class TestStyleManager:
    """StyleRecord to XlsxWriter format translation"""

    def test_border_format(self):
        style = StyleRecord(border=Border(color=RGB(255, 0, 0)))
        assert StyleManager.to_excel_format(style) == {'border': 1, 'border_color': '#FF0000'}

    def test_sizes_do_not_produce_format(self):
        assert StyleManager.to_excel_format(StyleRecord(width=10.0, height=5.0)) == {}


class TestTableMaterializer:
    """TableMaterializer.materialize"""

    def test_writes_single_sheet_named_after_table(self, styled_html, make_table, read_workbook):
        workbook = read_workbook(materialize(make_table(styled_html)))
        assert workbook.sheetnames == ["report"]

    def test_cell_values_are_flattened_text(self, styled_html, make_table, read_workbook, sheet_values):
        sheet = read_workbook(materialize(make_table(styled_html)))["report"]
        assert sheet_values(sheet) == [["Name", "Total", "Plain"], ["xy", "12", None]]
        assert sheet.cell(row=1, column=1).value == "Name"
        assert sheet.cell(row=1, column=3).value == "Plain"
        assert sheet.cell(row=2, column=1).value == "xy"
        assert sheet.cell(row=2, column=2).value == "12"

    def test_numbers_are_written_as_text(self, make_table, read_workbook):
        sheet = read_workbook(materialize(make_table('<table id="n"><tr><td>42</td></tr></table>')))["n"]
        assert sheet["A1"].value == "42"
        assert sheet["A1"].data_type == "s"

    def test_border_applied_to_cell(self, styled_html, make_table, read_workbook):
        sheet = read_workbook(materialize(make_table(styled_html)))["report"]
        border = sheet.cell(row=1, column=2).border
        for edge in (border.left, border.right, border.top, border.bottom):
            assert edge.style == "thin"
            assert edge.color.rgb == "FFFF0000"

    def test_unstyled_cells_have_default_border(self, styled_html, make_table, read_workbook):
        sheet = read_workbook(materialize(make_table(styled_html)))["report"]
        assert sheet.cell(row=1, column=3).border.left.style is None
        assert sheet.cell(row=2, column=1).border.left.style is None

    def test_cell_width_and_height(self, styled_html, make_table, read_workbook):
        sheet = read_workbook(materialize(make_table(styled_html)))["report"]
        assert sheet.column_dimensions["A"].width > 8.43
        assert sheet.row_dimensions[1].height == pytest.approx(45 * 0.75)

    @pytest.mark.parametrize("size", ["0px", "-40px"])
    def test_non_positive_sizes_are_ignored(self, size, make_table, read_workbook):
        table = make_table(f'<table id="z"><tr><td style="width:{size}; height:{size}">a</td></tr></table>')
        sheet = read_workbook(materialize(table))["z"]
        assert sheet["A1"].value == "a"
        assert "A" not in sheet.column_dimensions
        assert sheet.row_dimensions[1].height is None
        assert not sheet.row_dimensions[1].hidden

    def test_sizes_are_capped_at_excel_limits(self, make_table, read_workbook):
        table = make_table('<table id="big"><tr><td style="width:5000px; height:1000px">a</td></tr></table>')
        sheet = read_workbook(materialize(table))["big"]
        assert sheet.column_dimensions["A"].width <= 256
        assert sheet.row_dimensions[1].height == pytest.approx(409, abs=0.5)

    def test_row_styles_not_applied_by_default(self, make_table, read_workbook):
        table = make_table(
            '<table id="r"><tr style="border:1px solid #0000ff; height:60px"><td>a</td></tr></table>'
        )
        sheet = read_workbook(materialize(table))["r"]
        assert sheet["A1"].border.left.style is None
        assert sheet.row_dimensions[1].height is None

    def test_row_styles_applied_when_enabled(self, make_table, read_workbook):
        table = make_table(
            '<table id="r">'
            '<tr style="border:1px solid #0000ff; height:60px">'
            '<td>a</td><td style="border:1px solid #ff0000">b</td>'
            '</tr></table>'
        )
        sheet = read_workbook(materialize(table, apply_row_styles=True))["r"]
        assert sheet["A1"].border.left.color.rgb == "FF0000FF"
        assert sheet["B1"].border.left.color.rgb == "FFFF0000"
        assert sheet.row_dimensions[1].height == pytest.approx(60 * 0.75)

    def test_jagged_rows(self, make_table, read_workbook, sheet_values):
        table = make_table(
            '<table id="j">'
            '<tr><td>a</td><td>b</td><td>c</td></tr>'
            '<tr><td style="border:1px solid #000000">d</td></tr>'
            '</table>'
        )
        sheet = read_workbook(materialize(table))["j"]
        assert sheet_values(sheet) == [["a", "b", "c"], ["d", None, None]]
        assert sheet["A2"].border.left.style == "thin"
        assert sheet["B2"].border.left.style is None

    def test_long_generated_id_becomes_valid_sheet_name(self, make_table, read_workbook):
        table = make_table('<table><tr><td>a</td></tr></table>')
        workbook = read_workbook(materialize(table))
        assert len(workbook.sheetnames[0]) == 31
        assert table.attributes['id'].startswith(workbook.sheetnames[0])

    def test_collapse_whitespace_and_truncation(self, make_table, read_workbook):
        table = make_table('<table id="w"><tr><td>  a \n  b  </td></tr></table>')
        sheet = read_workbook(materialize(table, collapse_whitespace=True, max_cell_length=3))["w"]
        assert sheet["A1"].value == "a b"

    def test_returns_bytes(self, styled_html, make_table):
        data = materialize(make_table(styled_html))
        assert isinstance(data, bytes)
        assert data[:2] == b"PK"

from io import BytesIO
from typing import Any, Dict, Iterable, Optional, Sequence, Tuple

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from core.settings import format_currency

ISSUE_LABELS = {
    "cycle": "Referência circular",
    "missing_component": "Componente inexistente",
    "invalid_quantity": "Quantidade inválida",
}

TABLE_WIDTH = 6
COLUMN_WIDTHS = (28, 28, 15, 18, 18, 14)


def _report_styles() -> Dict[str, Any]:
    """Fonts, fills and alignments shared by every section of the cost sheet."""
    edge = Side(style="thin", color="7F6A55")
    return {
        "title": Font(bold=True, size=14),
        "section": Font(bold=True, size=11, color="5C4033"),
        "label": Font(bold=True),
        "table_header": Font(bold=True, size=10),
        "table_fill": PatternFill(start_color="E2D3C1", end_color="E2D3C1", fill_type="solid"),
        "issue_fill": PatternFill(start_color="FFF2CC", end_color="FFF2CC", fill_type="solid"),
        "border": Border(left=edge, right=edge, top=edge, bottom=edge),
        "align": {
            "left": Alignment(horizontal="left", vertical="center"),
            "center": Alignment(horizontal="center", vertical="center"),
            "right": Alignment(horizontal="right", vertical="center"),
        },
    }


def _section_title(ws, row: int, title: str, styles: dict) -> int:
    ws.cell(row=row, column=1, value=title).font = styles["section"]
    return row + 1


def _label_rows(ws, row: int, pairs: Iterable[Tuple[str, Any]], styles: dict) -> int:
    """Two-column "label: value" block; returns the first free row."""
    for label, value in pairs:
        ws.cell(row=row, column=1, value=label).font = styles["label"]
        ws.cell(row=row, column=2, value=value)
        row += 1
    return row


def _table_header(ws, row: int, columns: Sequence[str], styles: dict) -> int:
    for col_idx, title in enumerate(columns, start=1):
        cell = ws.cell(row=row, column=col_idx, value=title)
        cell.font = styles["table_header"]
        cell.fill = styles["table_fill"]
        cell.border = styles["border"]
        cell.alignment = styles["align"]["center"]
    return row + 1


def _table_row(
    ws,
    row: int,
    values: Sequence[Any],
    alignments: Sequence[str],
    styles: dict,
    flagged: bool = False,
    bold: bool = False,
) -> int:
    """One bordered table row. ``flagged`` rows carry a composition problem and are shaded."""
    for col_idx, (value, align) in enumerate(zip(values, alignments), start=1):
        cell = ws.cell(row=row, column=col_idx, value=value)
        cell.border = styles["border"]
        cell.alignment = styles["align"][align]
        if flagged:
            cell.fill = styles["issue_fill"]
        if bold:
            cell.font = styles["label"]
    return row + 1


def _decimal(value: Optional[float], places: int = 2) -> str:
    if value is None:
        return "-"
    return f"{value:,.{places}f}".replace(",", "_").replace(".", ",").replace("_", ".")


def _money(value: Optional[float], symbol: str) -> str:
    return "-" if value is None else format_currency(value, symbol)


def _percent(value: Optional[float]) -> str:
    return "-" if value is None else f"{_decimal(value, 1)}%"


def build_project_cost_excel(cost_data: Dict[str, Any], currency_symbol: str = "R$") -> BytesIO:
    """Render CostingService.compute_project output as a single-sheet workbook."""
    wb = Workbook()
    ws = wb.active
    ws.title = "Custos do Projeto"
    styles = _report_styles()

    header = cost_data.get("header", {})
    summary = cost_data.get("summary", {})
    lines = cost_data.get("lines", [])
    requirements = cost_data.get("requirements", [])
    issues = cost_data.get("issues", [])

    def money(value):
        return _money(value, currency_symbol)

    ws.cell(row=1, column=1, value="RELATÓRIO DE CUSTOS").font = styles["title"]
    ws.merge_cells(start_row=1, start_column=1, end_row=1, end_column=TABLE_WIDTH)

    generated_at = header.get("generated_at")
    row = _label_rows(
        ws,
        3,
        [
            ("Projeto:", header.get("project_title", "-")),
            ("Nº do Projeto:", f"#{header.get('project_id', '-')}"),
            ("Cliente:", header.get("client_name") or "-"),
            ("Data:", generated_at[:10] if generated_at else "-"),
            ("Itens:", header.get("line_count", 0)),
            ("Quantidade Total:", header.get("total_quantity", 0)),
        ],
        styles,
    )

    row = _section_title(ws, row + 1, "RESUMO", styles)
    row = _label_rows(
        ws,
        row,
        [
            ("Custo de Materiais:", money(summary.get("materials_cost", 0))),
            ("Mão de Obra:", money(summary.get("labor_cost", 0))),
            ("Custo Total:", money(summary.get("total_cost", 0))),
            ("Valor do Orçamento:", money(summary.get("revenue", 0))),
            ("Margem Bruta:", money(summary.get("gross_margin", 0))),
            ("Margem (%):", _percent(summary.get("margin_pct", 0))),
            ("Preço Sugerido:", money(summary.get("suggested_price", 0))),
        ],
        styles,
    )
    if not summary.get("cost_complete", True):
        row += 1
        note = ws.cell(row=row, column=1, value="Composição com problemas: custo pode estar subestimado")
        note.fill = styles["issue_fill"]
        ws.merge_cells(start_row=row, start_column=1, end_row=row, end_column=4)
        row += 1

    row = _section_title(ws, row + 1, "PRODUTOS DO PROJETO", styles)
    row = _table_header(ws, row, ["#", "Produto", "Quantidade", "Custo Unit.", "Custo Materiais", "Valor"], styles)
    line_alignments = ["center", "left", "center", "right", "right", "right"]
    for line in lines:
        row = _table_row(
            ws,
            row,
            [
                line.get("line_number", "-"),
                line.get("product_name") or "-",
                _decimal(line.get("quantity", 0)),
                money(line.get("unit_cost", 0)),
                money(line.get("materials_cost", 0)),
                money(line.get("revenue", 0)),
            ],
            line_alignments,
            styles,
            flagged=not line.get("cost_complete", True),
        )
    row = _table_row(
        ws,
        row,
        [
            "TOTAL",
            "",
            _decimal(header.get("total_quantity", 0)),
            "",
            money(summary.get("materials_cost", 0)),
            money(summary.get("lines_total", 0)),
        ],
        line_alignments,
        styles,
        bold=True,
    )

    if requirements:
        row = _section_title(ws, row + 1, "LISTA DE MATERIAIS", styles)
        row = _table_header(ws, row, ["Material", "Unidade", "Quantidade", "Custo Unit.", "Total", "Part. (%)"], styles)
        for item in requirements:
            row = _table_row(
                ws,
                row,
                [
                    item.get("name") or f"#{item.get('product_id')}",
                    item.get("unit") or "-",
                    _decimal(item.get("quantity", 0)),
                    money(item.get("unit_cost", 0)),
                    money(item.get("total_cost", 0)),
                    _percent(item.get("cost_share_pct", 0)),
                ],
                ["left", "center", "right", "right", "right", "right"],
                styles,
            )

    if issues:
        row = _section_title(ws, row + 1, "PROBLEMAS NA COMPOSIÇÃO", styles)
        row = _table_header(ws, row, ["Tipo", "Produto", "Usado em"], styles)
        for issue in issues:
            parent_id = issue.get("parent_id")
            row = _table_row(
                ws,
                row,
                [
                    ISSUE_LABELS.get(issue.get("kind"), issue.get("kind")),
                    f"#{issue.get('product_id')}",
                    f"#{parent_id}" if parent_id is not None else "-",
                ],
                ["left", "center", "center"],
                styles,
                flagged=True,
            )

    for col_idx, width in enumerate(COLUMN_WIDTHS, start=1):
        ws.column_dimensions[get_column_letter(col_idx)].width = width

    stream = BytesIO()
    wb.save(stream)
    stream.seek(0)
    return stream

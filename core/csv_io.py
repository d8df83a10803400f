"""CSV helpers shared by the import/export endpoints."""

import io
from typing import Any, Dict, List, Sequence

import pandas as pd

from core.errors import ValidationAppException

SEPARATORS = (",", ";", "\t", "|")


def detect_separator(text: str) -> str:
    """Pick the separator that occurs most often on the header line."""
    first_line = text.split("\n", 1)[0]
    best, best_count = ",", 0
    for sep in SEPARATORS:
        count = first_line.count(sep)
        if count > best_count:
            best, best_count = sep, count
    return best


def read_csv_text(text: str) -> pd.DataFrame:
    text = text.lstrip("\ufeff")
    if len([line for line in text.strip().splitlines() if line.strip()]) < 2:
        raise ValidationAppException("Arquivo CSV vazio ou inválido")

    try:
        frame = pd.read_csv(
            io.StringIO(text),
            sep=detect_separator(text),
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
        )
    except pd.errors.ParserError as exc:
        raise ValidationAppException("Não foi possível ler o arquivo CSV") from exc
    frame.columns = [str(col).strip().strip("'\"").lower() for col in frame.columns]
    return frame.apply(lambda col: col.str.strip())


def pick_columns(frame: pd.DataFrame, aliases: Dict[str, Sequence[str]]) -> pd.DataFrame:
    """Rename the first matching alias of each canonical column; unknown columns are dropped."""
    mapping: Dict[str, str] = {}
    for canonical, names in aliases.items():
        for name in names:
            if name in frame.columns:
                mapping[name] = canonical
                break
    picked = frame[list(mapping)].rename(columns=mapping)
    for canonical in aliases:
        if canonical not in picked.columns:
            picked[canonical] = ""
    return picked


def decimal_column(series: pd.Series) -> pd.Series:
    # Accept "12,50" as well as "12.50"
    values = pd.to_numeric(series.str.replace(",", ".", regex=False), errors="coerce")
    return values.fillna(0.0).clip(lower=0.0)


def integer_column(series: pd.Series) -> pd.Series:
    values = pd.to_numeric(series.str.replace(",", ".", regex=False), errors="coerce")
    return values.fillna(0).clip(lower=0).astype(int)


def to_csv_text(rows: List[Dict[str, Any]], columns: Sequence[str]) -> str:
    frame = pd.DataFrame(rows, columns=list(columns))
    return frame.to_csv(index=False, lineterminator="\n")

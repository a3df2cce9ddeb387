# core/utils/excel_export.py
import json
from datetime import datetime
from decimal import Decimal
from io import BytesIO

import pandas as pd
from django.http import HttpResponse

XLSX_CONTENT_TYPE = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'


def _default_filename(filename):
    if filename is None:
        timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
        filename = f'export_{timestamp}'
    if not filename.endswith('.xlsx'):
        filename = f'{filename}.xlsx'
    return filename


def _cell(value):
    """Excel-friendly scalar for one value"""
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False, default=str)
    if hasattr(value, 'strftime') and not isinstance(value, datetime):
        return value.strftime('%Y-%m-%d')
    if isinstance(value, datetime):
        return value.strftime('%Y-%m-%d %H:%M:%S')
    return value


def to_dataframe(data):
    """
    Convert report data to a DataFrame.

    Args:
        data: a DataFrame, a list of dicts, or a single dict (one row)
    """
    if isinstance(data, pd.DataFrame):
        return data
    if isinstance(data, dict):
        data = [data]
    return pd.DataFrame([{k: _cell(v) for k, v in row.items()} for row in data or []])


def export_to_excel(data, filename=None, sheet_name='Sheet1'):
    """Single-sheet workbook as an attachment response"""
    return export_multiple_sheets({sheet_name: data}, filename)


def export_multiple_sheets(data_dict, filename=None):
    """
    Export several tables to one workbook.

    Args:
        data_dict: Dictionary of {sheet_name: data}
        filename: Output filename

    Returns:
        HttpResponse with Excel file
    """
    filename = _default_filename(filename)

    response = HttpResponse(content_type=XLSX_CONTENT_TYPE)
    response['Content-Disposition'] = f'attachment; filename="{filename}"'

    with BytesIO() as bio:
        with pd.ExcelWriter(bio, engine='openpyxl') as writer:
            for sheet_name, data in data_dict.items():
                to_dataframe(data).to_excel(writer, sheet_name=sheet_name[:31], index=False)
        response.write(bio.getvalue())

    return response

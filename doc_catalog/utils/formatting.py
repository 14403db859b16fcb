# doc_catalog/utils/formatting.py

from datetime import datetime

SIZE_UNITS = ['B', 'KB', 'MB', 'GB']


def format_file_size(size: int) -> str:
    """
    Renders a byte count with binary prefixes and one decimal at most.

    Example:
        format_file_size(2547200) -> '2.4 MB'
    """
    if size <= 0:
        return "0 B"
    value = float(size)
    unit = 0
    while value >= 1024 and unit < len(SIZE_UNITS) - 1:
        value /= 1024
        unit += 1
    return f"{round(value, 1):g} {SIZE_UNITS[unit]}"


def format_date(moment: datetime) -> str:
    """Day-first short date used in listings, e.g. '20/01/2024'."""
    return moment.astimezone().strftime('%d/%m/%Y')


def format_timestamp(moment: datetime) -> str:
    return moment.astimezone().strftime('%d/%m/%Y %H:%M')

"""Event records as read from event CSVs."""

import csv
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterator, Optional, Union

from ..exceptions import MalformedRecordError
from ..infrastructure.logging import get_logger

logger = get_logger(__name__)

EVENT_FIELDS = ('id', 'start', 'end', 'category', 'x', 'y')


@dataclass(frozen=True)
class EventRecord:
    """One raw point event."""
    id: str
    start: datetime
    end: datetime
    category: str
    x: float
    y: float


def _parse_timestamp(value: str, field: str) -> datetime:
    text = value.strip()
    try:
        return datetime.fromisoformat(text)
    except ValueError as e:
        error = e
    # fromisoformat on older interpreters rejects a trailing Z
    if text.endswith('Z'):
        try:
            return datetime.fromisoformat(text[:-1])
        except ValueError:
            pass
    raise MalformedRecordError(f"Unparseable {field} timestamp: {value!r}", error)


def _parse_float(value: str, field: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise MalformedRecordError(f"Unparseable {field} coordinate: {value!r}", e)


def parse_event_row(row: Dict[str, Optional[str]]) -> EventRecord:
    """
    Parse one CSV row into an EventRecord.

    Args:
        row: Mapping of column name to raw string value

    Returns:
        EventRecord

    Raises:
        MalformedRecordError: If a field is missing or unparseable
    """
    missing = [name for name in EVENT_FIELDS if row.get(name) in (None, '')]
    # category may legitimately be blank
    missing = [name for name in missing if name != 'category']
    if missing:
        raise MalformedRecordError(f"Missing fields: {', '.join(missing)}")

    return EventRecord(
        id=row['id'].strip(),
        start=_parse_timestamp(row['start'], 'start'),
        end=_parse_timestamp(row['end'], 'end'),
        category=(row.get('category') or '').strip(),
        x=_parse_float(row['x'], 'x'),
        y=_parse_float(row['y'], 'y')
    )


def read_event_records(path: Union[str, Path], delimiter: str = ',') -> Iterator[EventRecord]:
    """
    Stream EventRecords from a headed CSV file.

    Rows that fail to parse are logged and skipped.

    Args:
        path: CSV file with columns id,start,end,category,x,y
        delimiter: Field delimiter

    Yields:
        Parsed EventRecords in file order
    """
    path = Path(path)
    parsed = 0
    skipped = 0

    with open(path, 'r', newline='', encoding='utf-8') as f:
        reader = csv.DictReader(f, delimiter=delimiter)
        header = reader.fieldnames or []
        absent = [name for name in EVENT_FIELDS if name not in header]
        if absent:
            raise MalformedRecordError(
                f"{path} is missing required columns: {', '.join(absent)}"
            )

        for row in reader:
            try:
                record = parse_event_row(row)
            except MalformedRecordError as e:
                skipped += 1
                logger.warning(f"Couldn't parse row {reader.line_num} of {path.name}: {e}")
                continue
            parsed += 1
            yield record

    logger.info(f"Read {parsed:,} events from {path} ({skipped:,} malformed rows skipped)",
                extra={'context': {'parsed': parsed, 'skipped': skipped}})

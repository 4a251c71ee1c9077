"""One JSON object per line, for log files."""

import json
import logging
from datetime import datetime, timezone


class JsonFormatter(logging.Formatter):
    """Serialize a record with its structured attributes.

    ``context``, ``performance`` and ``traceback`` are emitted only when
    present; values json can't handle are stringified.
    """

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, timezone.utc)
        payload = {
            'timestamp': created.strftime('%Y-%m-%dT%H:%M:%S.%fZ'),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'source': f"{record.module}:{record.funcName}:{record.lineno}",
        }

        for attribute in ('context', 'performance', 'traceback'):
            value = getattr(record, attribute, None)
            if value:
                payload[attribute] = value

        if 'traceback' not in payload and record.exc_info:
            payload['traceback'] = self.formatException(record.exc_info)

        return json.dumps(payload, separators=(',', ':'), default=str)

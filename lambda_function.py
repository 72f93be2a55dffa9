"""AWS Lambda handler for the event listing."""
import json
import logging
import os
import time
from datetime import datetime
from typing import Dict, Any

from loader.markdown_loader import MarkdownEventLoader
from processor.event_processor import group_by_temporal, process_events
from processor.models import ProcessedEvent, Temporal


# Configure JSON logging
class JsonFormatter(logging.Formatter):
    """Custom JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data = {
            'timestamp': self.formatTime(record),
            'level': record.levelname,
            'message': record.getMessage(),
            'logger': record.name
        }

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_data)


def setup_logging(log_level: str = 'INFO') -> None:
    """
    Configure logging with JSON formatter.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
    """
    root_logger = logging.getLogger()

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    root_logger.addHandler(handler)

    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))


def serialize_event(event: ProcessedEvent) -> Dict[str, Any]:
    """Convert a processed event to a JSON-ready dict."""
    return {
        'id': event.id,
        'title': event.title,
        'date': event.date.isoformat(),
        'temporal': event.temporal.name,
        'description': event.description,
        'location': event.location
    }


def _error_response(status_code: int, message: str, error: Exception,
                    start_time: float) -> Dict[str, Any]:
    return {
        'statusCode': status_code,
        'body': json.dumps({
            'message': message,
            'error': str(error),
            'error_type': type(error).__name__,
            'duration_seconds': round(time.time() - start_time, 2)
        })
    }


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Main Lambda handler function for the event listing.

    Args:
        event: Invocation payload; an optional ``today`` key (ISO 8601)
            overrides the reference date
        context: Lambda context object

    Returns:
        Response dict with statusCode and the ordered event listing
    """
    events_dir = os.environ.get('EVENTS_DIR', 'src/data/events')
    timezone = os.environ.get('TIMEZONE', 'UTC')
    log_level = os.environ.get('LOG_LEVEL', 'INFO')

    setup_logging(log_level)
    logger = logging.getLogger(__name__)

    start_time = time.time()
    logger.info(
        "Lambda execution started",
        extra={'events_dir': events_dir, 'timezone': timezone}
    )

    try:
        loader = MarkdownEventLoader(events_dir, timezone=timezone)

        override = (event or {}).get('today')
        if override:
            try:
                today = datetime.fromisoformat(str(override))
            except ValueError as e:
                logger.error(f"Invalid reference date override: {override!r}")
                return _error_response(400, 'Invalid reference date', e, start_time)
            if today.tzinfo is not None:
                today = today.astimezone(loader.tz).replace(tzinfo=None)
        else:
            today = loader.today()

        try:
            raw_events = loader.load_events()
        except OSError as e:
            logger.error(
                f"Failed to load event content: {str(e)}",
                extra={'error_type': type(e).__name__},
                exc_info=True
            )
            return _error_response(500, 'Failed to load event content', e, start_time)

        processed_events = process_events(raw_events, today)
        sections = group_by_temporal(processed_events)

        duration = time.time() - start_time
        logger.info(
            "Lambda execution completed successfully",
            extra={
                'duration_seconds': round(duration, 2),
                'events_total': len(processed_events)
            }
        )

        return {
            'statusCode': 200,
            'body': json.dumps({
                'message': 'Listing generated successfully',
                'today': today.date().isoformat(),
                'events': [serialize_event(e) for e in processed_events],
                'statistics': {
                    'total': len(processed_events),
                    'current': len(sections[Temporal.CURRENT]),
                    'future': len(sections[Temporal.FUTURE]),
                    'past': len(sections[Temporal.PAST]),
                    'duration_seconds': round(duration, 2)
                }
            })
        }

    except Exception as e:
        duration = time.time() - start_time

        logger.error(
            f"Lambda execution failed: {str(e)}",
            extra={
                'duration_seconds': round(duration, 2),
                'error_type': type(e).__name__
            },
            exc_info=True
        )

        return _error_response(500, 'Listing failed', e, start_time)

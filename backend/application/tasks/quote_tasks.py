"""
Quote Tasks.

Periodic checks on sent quotes.
"""

from celery import shared_task
import logging

logger = logging.getLogger(__name__)


@shared_task
def scan_expired_quotes(lookback_hours: int = 24):
    """
    Report SENT quotes whose validity lapsed within the last ``lookback_hours``.
    
    EXPIRED is derived from ``valid_until`` and never stored, so this only
    logs and writes an audit entry per newly expired quote.
    """
    from datetime import timedelta

    from application.ports import AuditContext
    from domain.shared.base_entity import utc_now
    from domain.shared.value_objects import AuditAction, QuoteStatus
    from infrastructure.wiring import get_audit_log, get_project_repository
    
    now = utc_now()
    since = now - timedelta(hours=lookback_hours)
    audit = get_audit_log()
    context = AuditContext.system()
    
    expired = []
    for project in get_project_repository().get_all():
        for quote in project.quotes_with_status(QuoteStatus.SENT):
            if not quote.is_expired(now) or quote.valid_until < since:
                continue
            audit.log(
                context, AuditAction.UPDATE, 'ProjectQuote', quote.id,
                f"Quote {quote.quote_number} expired on {quote.valid_until:%Y-%m-%d}",
                metadata={'project_id': str(project.id), 'valid_until': quote.valid_until.isoformat()},
            )
            expired.append(quote.quote_number)
    
    if expired:
        logger.info(f"Found {len(expired)} expired quotes: {', '.join(expired)}")
    return {'expired_quotes': expired}

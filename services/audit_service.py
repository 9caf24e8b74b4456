"""
Audit Service for SkillUp
Append-only log of administrative actions, stamped with the client clock
"""

from datetime import date as date_type, datetime, time, timedelta, timezone
import logging

from dateutil import parser as dateparser

from schemas import AuditLogEntry
from services.entity_service import EntityService
from services.firestore_service import order_by, where

logger = logging.getLogger(__name__)

class AuditService(EntityService):
    """
    Timestamps here are ISO-8601 strings taken when log_action is called,
    unlike the server timestamps written by FirestoreService. The two are
    not directly comparable.
    """

    model = AuditLogEntry

    def _server_fields(self, entry):
        return {'timestamp': datetime.now(timezone.utc).isoformat()}

    def log_action(self, entry):
        log_id = self._create(entry)
        logger.info(f"Audit log {log_id} recorded")
        return log_id

    def get_audit_logs(self, date=None, actor_id=None):
        """
        Entries newest first, optionally for one calendar day (UTC,
        inclusive) and/or one actor
        """
        constraints = []
        if actor_id:
            constraints.append(where('adminId', actor_id))
        constraints.append(order_by('timestamp', 'desc'))

        entries = self._list(*constraints)
        if date is None:
            return entries

        start, end = self._day_range(date)
        return [entry for entry in entries if self._within(entry, start, end)]

    def _day_range(self, day):
        if isinstance(day, str):
            day = dateparser.parse(day)
        if isinstance(day, datetime):
            if day.tzinfo is not None:
                day = day.astimezone(timezone.utc)
            day = day.date()
        if not isinstance(day, date_type):
            raise ValueError(f"Invalid audit log date: {day!r}")

        start = datetime.combine(day, time.min, tzinfo=timezone.utc)
        return start, start + timedelta(days=1)

    def _within(self, entry, start, end):
        if not entry.timestamp:
            return False
        try:
            stamp = dateparser.isoparse(entry.timestamp)
        except ValueError:
            logger.warning(f"Unparseable audit timestamp on {entry.id}: {entry.timestamp}")
            return False

        if stamp.tzinfo is None:
            stamp = stamp.replace(tzinfo=timezone.utc)
        return start <= stamp < end

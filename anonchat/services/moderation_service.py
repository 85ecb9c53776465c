# anonchat/services/moderation_service.py

import threading
from typing import Optional, List, Dict, Any
from .logging_service import append_json_line

MAX_REASON_LENGTH = 200


class ModerationService:
    """
    Принимает жалобы. Хранит последние жалобы в памяти и,
    если задан путь, дописывает их в JSON-лог.
    Никаких санкций не применяет.
    """

    def __init__(self, reports_log_path: Optional[str] = None, log_event_func=None, keep_last: int = 100):
        self.reports_log_path = reports_log_path
        self.keep_last = keep_last
        self.recent_reports: List[Dict[str, Any]] = []
        self.total_reports = 0
        self.lock = threading.Lock()
        self.log_event = log_event_func or (lambda *args, **kwargs: None)

    def record_report(self, reporter_sid: str, reported_sid: str, reason: str) -> Dict[str, Any]:
        reason = (reason or "unspecified").strip()[:MAX_REASON_LENGTH] or "unspecified"
        report = {
            'reporter_sid': reporter_sid,
            'reported_sid': reported_sid,
            'reason': reason
        }

        with self.lock:
            self.total_reports += 1
            self.recent_reports.append(report)
            del self.recent_reports[:-self.keep_last]

        self.log_event("REPORT", f"Reported for: {reason}", sid=reporter_sid, partner_sid=reported_sid)

        if self.reports_log_path:
            append_json_line(self.reports_log_path, report)
        return report

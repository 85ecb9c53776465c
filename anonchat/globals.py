# anonchat/globals.py

import logging

event_logger = logging.getLogger("anonchat.events")


def log_event(event_type, message, sid=None, partner_sid=None, extra_data=None):
    """
    Структурированная запись о событии жизненного цикла соединения.
    """
    log_entry = f"[TYPE: {event_type}]"

    if sid:
        log_entry += f" [SID: {sid}]"
    if partner_sid:
        log_entry += f" [Partner: {partner_sid}]"
    if extra_data:
        log_entry += f" [Data: {extra_data}]"

    log_entry += f" | {message}"

    event_logger.info(log_entry)

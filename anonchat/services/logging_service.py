# anonchat/services/logging_service.py

import json
import datetime
import logging
import threading

file_lock = threading.RLock()

logger = logging.getLogger(__name__)


def append_json_line(log_path, record):
    """Дописывает запись JSON-строкой в файл (путь передается явно)."""
    record = dict(record)
    record['timestamp'] = datetime.datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    log_entry = json.dumps(record, ensure_ascii=False) + '\n'

    with file_lock:
        try:
            with open(log_path, 'a', encoding='utf-8') as f:
                f.write(log_entry)
        except OSError as e:
            logger.error(f"[ERROR] Не удалось записать в лог-файл {log_path}: {e}")
            return False
    return True

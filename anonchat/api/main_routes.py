import time
from flask import (
    Blueprint,
    current_app,
    jsonify
)
from ..extensions import limiter

bp = Blueprint('main', __name__, url_prefix='/api')


def _stats_limit():
    return current_app.config.get('STATS_RATE_LIMIT', "60 per minute")


@bp.route('/stats')
@limiter.limit(_stats_limit)
def get_stats():
    """
    Счетчики для внешней страницы статистики:
    онлайн, пар сформировано, сообщений переслано, в очереди.
    """
    return jsonify(current_app.chat_service.get_stats())


@bp.route('/health')
@limiter.limit(_stats_limit)
def health():
    uptime = time.time() - current_app.config.get('STARTED_AT', time.time())
    return jsonify({"status": "healthy", "uptime": round(uptime, 3)})

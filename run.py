import eventlet
eventlet.monkey_patch()

import argparse
import logging
from anonchat import create_app

logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] [%(name)s] %(message)s")
logger = logging.getLogger("run")

logger.info("[run.py] Eventlet monkey-patch применен.")

app, socketio = create_app()

if __name__ == '__main__':

    parser = argparse.ArgumentParser(description='Запуск Flask-SocketIO сервера анонимного чата.')

    parser.add_argument(
        '-e', '--env',
        default='local',
        choices=['local', 'prod'],
        help='Режим запуска: local (для разработки) или prod (для боевого сервера). По умолчанию: local.'
    )
    parser.add_argument('-p', '--port', type=int, default=None, help='Порт для прослушивания.')

    args = parser.parse_args()

    if args.env == 'prod':
        port = args.port or 3000
        logger.info(f"[run.py] Запуск в режиме PRODUCTION (prod) на 0.0.0.0:{port}...")

        socketio.run(app,
                     host='0.0.0.0',
                     port=port,
                     debug=False
                     )

    else:
        port = args.port or 4999
        logger.info(f"[run.py] Запуск в режиме LOCAL (dev) на 127.0.0.1:{port}, debug=True...")

        socketio.run(app,
                     host='127.0.0.1',
                     port=port,
                     debug=True,
                     allow_unsafe_werkzeug=True
                     )

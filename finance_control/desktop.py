"""
Desktop launcher: serves the web UI on a local port and opens it in the
default browser.
"""

import socket
import logging
import threading
import webbrowser
from finance_control.backend import config

logger = logging.getLogger(__name__)


def port_is_free(host, port) -> bool:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        try:
            sock.bind((host, port))
        except OSError:
            return False
        return True


def pick_port(host, preferred=config.PREFERRED_PORTS) -> int:
    """First free preferred port, else whatever the OS hands out"""
    for port in preferred:
        if port_is_free(host, port):
            return port
    # A random port changes the page origin, so browser state is not shared between runs
    logger.warning(f"Ports {', '.join(map(str, preferred))} are busy, using a random port")
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind((host, 0))
        return sock.getsockname()[1]


def main():
    config.configure_logging()
    from finance_control.web.app import app, socketio

    host = config.HOST
    port = config.PORT or pick_port(host)
    url = f"http://{host}:{port}/"

    logger.info(f"Data file: {config.data_path()} ({config.STORAGE_BACKEND} storage)")
    logger.info(f"Serving Controle Financeiro at {url}")
    threading.Timer(1.0, webbrowser.open, args=(url,)).start()
    socketio.run(app, host=host, port=port, allow_unsafe_werkzeug=True)


if __name__ == "__main__":
    main()

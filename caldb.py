"""
CalDB Calculator
Main entry point: starts the calculator API server
"""
import socket

import config
from api import create_app


def get_local_ip():
    try:
        s = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        # doesn't even have to be reachable
        s.connect(('10.255.255.255', 1))
        ip = s.getsockname()[0]
        s.close()
    except OSError:
        ip = '127.0.0.1'
    return ip


def main():
    app = create_app()

    print("=" * 60)
    print(f"{config.APP_NAME} API v{config.VERSION}")
    print(f"History database: {config.DB_PATH}")
    print(f"Access on this PC:    http://localhost:{config.WEB_PORT}/api")
    if config.WEB_HOST == '0.0.0.0':
        print(f"Access on your Phone: http://{get_local_ip()}:{config.WEB_PORT}/api")
    print("=" * 60)

    app.run(host=config.WEB_HOST, port=config.WEB_PORT, debug=False)


if __name__ == "__main__":
    main()

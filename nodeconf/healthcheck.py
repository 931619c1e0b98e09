#!/usr/bin/env python3
"""
Health Check HTTP Server for a bitcoind node
Provides /health (liveness) and /ready (readiness) endpoints for orchestrators
"""

import logging
import os
import sys
from http.server import HTTPServer, BaseHTTPRequestHandler
from pathlib import Path

from conf_io import default_conf_path, load_config
from conf_parser import DEFAULT_SECTION
from logging_config import setup_logging
from node_health import HealthStatus, check

# Configuration
HEALTH_PORT = int(os.getenv('HEALTH_PORT', '8080'))
CONFIG_FILE = Path(os.getenv('BITCOIN_CONF', str(default_conf_path())))
NETWORK = os.getenv('BITCOIN_NETWORK', DEFAULT_SECTION)


class HealthCheckHandler(BaseHTTPRequestHandler):
    """HTTP request handler for health check endpoints"""

    # Suppress default logging to reduce noise
    def log_message(self, format, *args):
        """Override to reduce logging verbosity"""
        pass

    def do_GET(self):
        """Handle GET requests for /health and /ready endpoints"""

        if self.path == '/health':
            self.handle_health()
        elif self.path == '/ready':
            self.handle_ready()
        else:
            self.reply(404, '404 Not Found\nAvailable endpoints: /health, /ready\n')

    def reply(self, code: int, body: str) -> None:
        self.send_response(code)
        self.send_header('Content-Type', 'text/plain')
        self.end_headers()
        self.wfile.write(body.encode())

    def check_node(self):
        """Load the configuration and check the node; raises if it can't be read"""
        model, _ = load_config(CONFIG_FILE)
        return check(model, NETWORK, base_dir=CONFIG_FILE.parent)

    def handle_health(self):
        """
        Liveness probe: Is bitcoind running?
        Returns 200 OK if the pid file names a live process, 503 otherwise
        """
        try:
            report = self.check_node()
        except (OSError, UnicodeDecodeError) as e:
            self.reply(503, f'Service Unavailable: configuration unreadable: {e}\n')
            return

        if report.running:
            self.reply(200, f'OK (pid {report.pid})\n')
        else:
            self.reply(503, f'Service Unavailable: {report.status.value}\n')

    def handle_ready(self):
        """
        Readiness probe: Is the node ready?
        Checks:
        - Configuration file exists and is readable
        - bitcoind process is running
        Returns 200 OK if ready, 503 Service Unavailable otherwise
        """
        errors = []

        if not CONFIG_FILE.is_file():
            errors.append('Configuration file not found')
        elif not os.access(CONFIG_FILE, os.R_OK):
            errors.append('Configuration file not readable')
        else:
            try:
                report = self.check_node()
                if report.status is not HealthStatus.PROCESS_RUNNING:
                    errors.append(f'bitcoind not running ({report.status.value})')
            except (OSError, UnicodeDecodeError) as e:
                errors.append(f'Configuration file not readable: {e}')

        if not errors:
            self.reply(200, 'READY\n')
        else:
            self.reply(503, 'Service Unavailable:\n' + ''.join(f'  - {error}\n' for error in errors))


def main():
    """Start the health check HTTP server"""
    setup_logging(os.getenv('LOG_LEVEL', 'INFO'))
    try:
        server = HTTPServer(('', HEALTH_PORT), HealthCheckHandler)
        logging.info(f'Health check server listening on port {HEALTH_PORT}')
        logging.info(f'Watching {CONFIG_FILE} (section: {NETWORK})')
        server.serve_forever()
    except KeyboardInterrupt:
        logging.info('Health check server shutting down')
        sys.exit(0)
    except Exception as e:
        logging.error(f'Failed to start health check server: {e}')
        sys.exit(1)


if __name__ == '__main__':
    main()

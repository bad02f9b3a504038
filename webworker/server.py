#!/usr/bin/env python3


from socketserver import StreamRequestHandler, TCPServer, ThreadingMixIn

import logging

from webworker.cfg import Cfg, build_parser
from webworker.worker import handle_connection


log = logging.getLogger(__name__)


class Handler(StreamRequestHandler):
    def setup(self):
        self.timeout = self.server.request_timeout or None
        super().setup()

    def handle(self):
        log.debug('Connection from %s:%s', *self.client_address[:2])
        handle_connection(self.rfile, self.wfile)


class ThreadedServer(ThreadingMixIn, TCPServer):
    """Handle each connection in a separate thread."""

    allow_reuse_address = True
    daemon_threads = True

    def __init__(self, address, request_timeout=0):
        self.request_timeout = request_timeout
        super().__init__(address, Handler)


def main(argv=None):
    options = build_parser().parse_args(argv)

    logging.basicConfig(
        level=options.log_level,
        format='%(asctime)s %(threadName)s %(levelname)s %(name)s: %(message)s',
    )

    Cfg.init(options.root, options.server_name, options.utc_offset)

    address = (options.host, options.port)
    with ThreadedServer(address, options.timeout) as httpd:
        log.info('Serving %s on http://%s:%d', Cfg.base_path, *httpd.server_address[:2])
        try:
            httpd.serve_forever()
        except KeyboardInterrupt:
            log.info('Shutting down server...')


if __name__ == '__main__':
    main()

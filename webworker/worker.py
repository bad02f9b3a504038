"""
One worker call handles one client connection: it reads a single HTTP
request head, writes the header block and then the content, and returns.

Nothing is shared between calls apart from the read-only settings in
``Cfg``, so callers may run any number of them in parallel threads.
"""

from dataclasses import dataclass
from datetime import datetime
from io import TextIOWrapper
from os import fstat
from os.path import abspath
from shutil import copyfileobj
from stat import S_ISREG
from typing import BinaryIO

import logging
import sys

from webworker.cfg import Cfg


log = logging.getLogger(__name__)


GET_MARKER = 'GET '
MAX_LINE = 65536

STATUS_OK = '200 OK'
STATUS_NOT_FOUND = '404 Not Found'
NOT_FOUND_BODY = b'<h1>Error: 404 Not found</h1>\n'

DATE_TOKEN = '<cs371date>'
SERVER_TOKEN = '<cs371server>'

# Request paths and text files keep their raw bytes through decoding.
PATH_ENCODING = sys.getfilesystemencoding()
TEXT_ENCODING = 'utf-8'
ERRORS = 'surrogateescape'


class WorkerError(Exception):
    pass


class RequestReadFailure(WorkerError):
    """The request head could not be read, no response is sent."""


class ResourceNotFound(WorkerError):
    """The requested file is missing or cannot be opened, answered with 404."""


class ResponseWriteFailure(WorkerError):
    """The client side went away while the response was written."""


@dataclass(frozen=True)
class Request:
    path: str = ''


@dataclass
class Resource:
    filename: str
    stream: BinaryIO

    def close(self):
        self.stream.close()


def content_type(path):
    name = path.rsplit('/', 1)[-1]
    if '.' not in name:
        return Cfg.default_content_type
    extension = name.split('.')[-1].lower()
    return Cfg.content_types.get(extension, Cfg.default_content_type)


def now():
    d = datetime.now(Cfg.tz)
    hour = d.hour % 12 or 12
    return '{:%b} {}, {}, {}:{:%M:%S %p}'.format(d, d.day, d.year, hour, d)


def read_request(rfile):
    path = None
    while True:
        try:
            raw = rfile.readline(MAX_LINE + 1)
        except OSError as e:
            raise RequestReadFailure(str(e) or type(e).__name__) from e
        if len(raw) > MAX_LINE:
            raise RequestReadFailure('request line too long')
        if not raw:
            break

        line = raw.rstrip(b'\r\n').decode(PATH_ENCODING, ERRORS)
        log.debug('Request line: (%s)', line)
        if not line:
            break

        if path is None and line.startswith(GET_MARKER):
            path = line[len(GET_MARKER):].split(' ', 1)[0]

    return Request(path or '')


def resolve(path):
    if not path:
        raise ResourceNotFound('no GET line')
    if path == '/':
        path = '/index.html'
    filename = abspath(Cfg.base_path + path)
    if not filename.startswith(Cfg.base_path):
        raise ResourceNotFound('outside of root: ' + filename)
    return filename


def open_resource(path):
    filename = resolve(path)
    try:
        stream = open(filename, 'rb')
    except (OSError, ValueError) as e:
        reason = getattr(e, 'strerror', None) or str(e)
        raise ResourceNotFound('{}: {}'.format(filename, reason)) from e

    if not S_ISREG(fstat(stream.fileno()).st_mode):
        stream.close()
        raise ResourceNotFound('not a regular file: ' + filename)

    return Resource(filename, stream)


def _write(wfile, data):
    try:
        wfile.write(data)
    except OSError as e:
        raise ResponseWriteFailure(str(e) or type(e).__name__) from e


def _flush(wfile):
    try:
        wfile.flush()
    except OSError as e:
        raise ResponseWriteFailure(str(e) or type(e).__name__) from e


def write_header(wfile, content_type, found, date):
    status = STATUS_OK if found else STATUS_NOT_FOUND
    lines = [
        'HTTP/1.1 ' + status,
        'Date: ' + date,
        'Server: ' + Cfg.server_name,
        'Connection: close',
        'Content-Type: ' + content_type,
        '',
        '',
    ]
    _write(wfile, '\n'.join(lines).encode('utf-8'))
    _flush(wfile)


def write_content(wfile, content_type, resource, date):
    """
    Image types are copied byte for byte. Everything else is text: lines
    end at '\\n', '\\r' or '\\r\\n', each one is written back with a single
    '\\n' terminator and the template tokens replaced in place.
    """
    if resource is None:
        _write(wfile, NOT_FOUND_BODY)
        return

    if content_type.startswith('image/'):
        try:
            copyfileobj(resource.stream, wfile)
        except OSError as e:
            raise ResponseWriteFailure(str(e) or type(e).__name__) from e
        return

    substitutes = {
        DATE_TOKEN   : date,
        SERVER_TOKEN : Cfg.server_name,
    }
    text = TextIOWrapper(resource.stream, encoding=TEXT_ENCODING, errors=ERRORS, newline=None)
    for line in text:
        line = line.rstrip('\n')
        for token, value in substitutes.items():
            line = line.replace(token, value)
        _write(wfile, (line + '\n').encode(TEXT_ENCODING, ERRORS))


def handle_connection(rfile, wfile):
    log.debug('Handling connection...')

    try:
        request = read_request(rfile)
    except RequestReadFailure as e:
        log.error('Request error: %s', e)
        return

    kind = content_type(request.path)
    date = now()

    try:
        resource = open_resource(request.path)
    except ResourceNotFound as e:
        log.warning('File not found: %r (%s)', request.path, e)
        resource = None
    else:
        log.debug('Serving %s as %s', resource.filename, kind)

    try:
        write_header(wfile, kind, resource is not None, date)
        write_content(wfile, kind, resource, date)
        _flush(wfile)
    except ResponseWriteFailure as e:
        log.error('Output error for %r: %s', request.path, e)
    except OSError as e:
        log.error('Read error for %s: %s', resource.filename, e)
    except Exception:
        log.exception('Unexpected error for %r', request.path)
    finally:
        if resource is not None:
            resource.close()

    log.info('GET %r %s %s', request.path, STATUS_OK if resource is not None else STATUS_NOT_FOUND, kind)
    log.debug('Done handling connection.')

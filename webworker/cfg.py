from datetime import timedelta, timezone
from os.path import abspath

import configargparse


SERVER_NAME = 'WebWorker'


parserArgs = {
    'add_config_file_help': False,
    'add_env_var_help': False,
    'auto_env_var_prefix': 'WEBWORKER_',
    'config_file_parser_class': configargparse.YAMLConfigFileParser,
    'default_config_files': [ '/etc/webworker.yaml', '~/.config/webworker.yaml' ],
}

configArg = {
    'help': 'YAML config file.',
    'is_config_file': True,
}

hostArg = {
    'help': 'Address to listen on.',
    'default': '0.0.0.0',
}

portArg = {
    'help': 'Port to listen on.',
    'type': int,
    'default': 8080,
}

rootArg = {
    'help': 'Directory with served files.',
    'default': '.',
}

serverNameArg = {
    'help': 'Value of the Server header and the <cs371server> token.',
    'default': SERVER_NAME,
}

utcOffsetArg = {
    'help': 'Timezone offset in hours for dates.',
    'type': int,
    'default': -6,
}

timeoutArg = {
    'help': 'Seconds to wait for the request head, 0 waits forever.',
    'type': float,
    'default': 0,
}

logLevelArg = {
    'help': 'Logging level.',
    'choices': [ 'DEBUG', 'INFO', 'WARNING', 'ERROR' ],
    'default': 'INFO',
}


def build_parser():
    p = configargparse.ArgParser(**parserArgs)
    p.add('-c', '--config', **configArg)
    p.add('-H', '--host', **hostArg)
    p.add('-p', '--port', **portArg)
    p.add('-r', '--root', **rootArg)
    p.add('-s', '--server-name', **serverNameArg)
    p.add('-z', '--utc-offset', **utcOffsetArg)
    p.add('-t', '--timeout', **timeoutArg)
    p.add('-l', '--log-level', **logLevelArg)
    return p


class Cfg:
    @classmethod
    def init(cls, root='.', server_name=SERVER_NAME, utc_offset=-6):
        cls.content_types = {
            'jpg'  : 'image/jpeg',
            'jpeg' : 'image/jpeg',
            'png'  : 'image/png',
            'gif'  : 'image/gif',
            'ico'  : 'image/x-icon',
        }
        cls.default_content_type = 'text/html'

        cls.base_path = abspath(root)
        if cls.base_path[-1] != '/':
            cls.base_path += '/'

        cls.server_name = server_name
        cls.tz = timezone(timedelta(hours=utc_offset))


Cfg.init()

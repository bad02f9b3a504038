import pytest

from webworker.cfg import Cfg, SERVER_NAME, build_parser


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ('HOST', 'PORT', 'ROOT', 'SERVER_NAME', 'UTC_OFFSET', 'TIMEOUT', 'LOG_LEVEL', 'CONFIG'):
        monkeypatch.delenv('WEBWORKER_' + name, raising=False)


def test_defaults():
    options = build_parser().parse_args([])
    assert options.host == '0.0.0.0'
    assert options.port == 8080
    assert options.root == '.'
    assert options.server_name == SERVER_NAME
    assert options.utc_offset == -6
    assert options.timeout == 0
    assert options.log_level == 'INFO'


def test_command_line():
    options = build_parser().parse_args(['-p', '9000', '--root', 'www', '-z', '2', '-t', '1.5'])
    assert options.port == 9000
    assert options.root == 'www'
    assert options.utc_offset == 2
    assert options.timeout == 1.5


def test_env_vars(monkeypatch):
    monkeypatch.setenv('WEBWORKER_PORT', '9001')
    monkeypatch.setenv('WEBWORKER_SERVER_NAME', 'Env Server')
    options = build_parser().parse_args([])
    assert options.port == 9001
    assert options.server_name == 'Env Server'


def test_yaml_config(tmp_path):
    config = tmp_path / 'webworker.yaml'
    config.write_text('port: 9002\nserver-name: Yaml Server\nlog-level: DEBUG\n')
    options = build_parser().parse_args(['-c', str(config)])
    assert options.port == 9002
    assert options.server_name == 'Yaml Server'
    assert options.log_level == 'DEBUG'


def test_command_line_overrides_config(tmp_path):
    config = tmp_path / 'webworker.yaml'
    config.write_text('port: 9002\n')
    options = build_parser().parse_args(['-c', str(config), '-p', '9003'])
    assert options.port == 9003


def test_cfg_init(tmp_path):
    try:
        Cfg.init(str(tmp_path), 'Name', 3)
        assert Cfg.base_path == str(tmp_path) + '/'
        assert Cfg.server_name == 'Name'
        assert Cfg.tz.utcoffset(None).total_seconds() == 3 * 3600
        assert Cfg.content_types['ico'] == 'image/x-icon'
    finally:
        Cfg.init()

import pytest

from logview.config import Config


@pytest.fixture
def config():
    return Config()


@pytest.fixture
def config_file(tmp_path):
    """Write a YAML config with two sources and return its path."""
    path = tmp_path / "config.yaml"
    path.write_text(
        "reader:\n"
        "  limit: 50\n"
        "tail:\n"
        "  poll_interval: 0.5\n"
        "sources:\n"
        "  api:\n"
        "    log_path: /var/log/supervisor/api.out\n"
        "    error_log_path: /var/log/supervisor/api.err\n"
        "    template: FastAPI\n"
        "  web:\n"
        "    log_path: /var/www/storage/logs/laravel.log\n"
        "    template: laravel\n"
        "  broken:\n"
        "    template: default\n",
        encoding="utf-8",
    )
    return str(path)

"""Integration test fixtures and configuration."""

import json

import pytest
import yaml
from click.testing import CliRunner

CATALOG = [
    {
        "id": 1,
        "title": "Inception",
        "year": 2010,
        "genres": ["Sci-Fi", "Action", "Thriller"],
        "director": "Christopher Nolan",
        "cast": ["Leonardo DiCaprio", "Tom Hardy"],
        "plot": "A thief plants an idea inside a dream.",
        "runtime": 148,
        "rating": 8.8,
        "popularity": 95,
    },
    {
        "id": 2,
        "title": "Interstellar",
        "year": 2014,
        "genres": ["Sci-Fi", "Adventure", "Drama"],
        "director": "Christopher Nolan",
        "plot": "Explorers travel through a wormhole.",
        "rating": 8.7,
        "popularity": 90,
    },
    {
        "id": 3,
        "title": "Toy Story",
        "year": 1995,
        "genres": ["Animation", "Comedy", "Family"],
        "plot": "Toys come to life.",
        "rating": 8.3,
        "popularity": 85,
    },
    {
        "id": 4,
        "title": "The Notebook",
        "year": 2004,
        "genres": ["Romance", "Drama"],
        "plot": "A summer romance remembered.",
        "rating": 7.8,
        "popularity": 70,
    },
    {
        "id": 5,
        "title": "Memento",
        "year": 2000,
        "genres": ["Mystery", "Thriller"],
        "director": "Christopher Nolan",
        "plot": "A man with no short-term memory hunts a killer.",
        "rating": 8.4,
        "popularity": 55,
    },
]


@pytest.fixture
def integration_data(tmp_path):
    """Write a small catalog and user file."""
    data_dir = tmp_path / "data"
    data_dir.mkdir()
    (data_dir / "movies.json").write_text(json.dumps({"movies": CATALOG}))
    (data_dir / "users.json").write_text(
        json.dumps({"users": [{"id": "demo", "username": "demo"}]})
    )
    return data_dir


@pytest.fixture
def integration_config(tmp_path, integration_data):
    """Create configuration for integration tests."""
    config_data = {
        "llm": {"provider": "openai", "model": "gpt-4o-mini", "api_key": "test-key"},
        "store": {
            "catalog_path": str(integration_data / "movies.json"),
            "users_path": str(integration_data / "users.json"),
        },
        "logging": {"level": "WARNING"},
    }

    config_file = tmp_path / "integration_config.yaml"
    with open(config_file, "w") as f:
        yaml.dump(config_data, f)

    return config_file


@pytest.fixture
def runner():
    """Click test runner."""
    return CliRunner()


@pytest.fixture
def invoke(runner, integration_config):
    """Invoke the CLI against the integration configuration."""
    from cinematch.cli.main import cli

    def _invoke(*args: str, **kwargs):
        return runner.invoke(cli, ["--config", str(integration_config), *args], **kwargs)

    return _invoke

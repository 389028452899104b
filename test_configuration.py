#!/usr/bin/env python3
"""
Unit tests for configuration loading, validation and logging setup.
"""

import dataclasses
import logging
import os
import tempfile
from pathlib import Path
from unittest.mock import patch

from sitedeploy.config import Config, load_configuration, validate_configuration
from sitedeploy.errors import ConfigurationError
from sitedeploy.log import setup_logging


def clear_sitedeploy_env() -> dict:
    return {k: v for k, v in os.environ.items() if not k.startswith("SITEDEPLOY_")}


def test_defaults_match_deployment_constants():
    """Defaults are the deployment constants of the host script."""
    print("Testing configuration defaults")
    print("-" * 30)

    with patch.dict(os.environ, clear_sitedeploy_env(), clear=True):
        config = load_configuration()

    assert config.repo_url == "http://gitea/youruser/example.git"
    assert config.target_dir == Path("/var/www/html/yourdomain")
    assert config.branch == "main"
    assert config.deploy_user == "www-data"
    assert config.log_file == Path("/var/log/update_sites.log")
    assert config.sparse_patterns == ("_site/*",)
    assert config.retry_attempts == 5
    assert config.retry_delay == 10.0
    assert config.remote_ref == "origin/main"
    assert config.sparse_checkout_file == Path("/var/www/html/yourdomain/.git/info/sparse-checkout")
    print("  ✓ Defaults loaded")


def test_environment_overrides():
    """SITEDEPLOY_* variables override the defaults."""
    print("Testing environment overrides")
    print("-" * 30)

    env = clear_sitedeploy_env()
    env.update({
        "SITEDEPLOY_REPO_URL": "https://git.example.org/site.git",
        "SITEDEPLOY_TARGET_DIR": "/srv/www/site",
        "SITEDEPLOY_BRANCH": "production",
        "SITEDEPLOY_DEPLOY_USER": "nginx",
        "SITEDEPLOY_LOG_FILE": "/tmp/site.log",
        "SITEDEPLOY_LOG_LEVEL": "debug",
        "SITEDEPLOY_RETRY_ATTEMPTS": "3",
        "SITEDEPLOY_RETRY_DELAY": "2.5",
    })
    with patch.dict(os.environ, env, clear=True):
        config = load_configuration()

    assert config.repo_url == "https://git.example.org/site.git"
    assert config.target_dir == Path("/srv/www/site")
    assert config.branch == "production"
    assert config.deploy_user == "nginx"
    assert config.log_level == "DEBUG"
    assert config.retry_attempts == 3
    assert config.retry_delay == 2.5
    assert config.remote_ref == "origin/production"
    print("  ✓ Environment values applied")


def test_invalid_values_are_rejected():
    """Malformed numbers and out-of-range values raise ConfigurationError."""
    print("Testing invalid configuration values")
    print("-" * 30)

    env = clear_sitedeploy_env()
    env["SITEDEPLOY_RETRY_ATTEMPTS"] = "many"
    with patch.dict(os.environ, env, clear=True):
        try:
            load_configuration()
        except ConfigurationError:
            print("  ✓ Non-numeric retry count rejected")
        else:
            raise AssertionError("ConfigurationError was not raised")

    for kwargs in ({"retry_attempts": 0}, {"retry_delay": -1}, {"log_level": "LOUD"},
                   {"branch": ""}, {"sparse_patterns": ()}):
        try:
            Config(**kwargs)
        except ConfigurationError:
            pass
        else:
            raise AssertionError(f"ConfigurationError was not raised for {kwargs}")
    print("  ✓ Out-of-range values rejected")


def test_config_is_immutable():
    """Configuration cannot be changed after construction."""
    print("Testing configuration immutability")
    print("-" * 30)

    config = Config()
    try:
        config.branch = "other"
    except dataclasses.FrozenInstanceError:
        print("  ✓ Assignment refused")
    else:
        raise AssertionError("Config accepted assignment")


def test_validate_configuration_warnings():
    """Suspicious values produce warnings, dangerous ones errors."""
    print("Testing configuration validation")
    print("-" * 30)

    problems = validate_configuration(Config(repo_url="gitea:site", target_dir=Path("/")))

    assert any(p.startswith("WARNING: Git remote URL may be invalid") for p in problems)
    assert "ERROR: Refusing to deploy into the filesystem root" in problems
    assert validate_configuration(Config(target_dir=Path("/nonexistent/site"))) == []
    print("  ✓ Warnings and errors reported")


def test_logging_writes_console_and_file():
    """Log lines go to stdout and are appended to the log file."""
    print("Testing logging setup")
    print("-" * 30)

    with tempfile.TemporaryDirectory() as temp_dir:
        log_file = Path(temp_dir) / "update_sites.log"
        log_file.write_text("2020-01-01 00:00:00 : earlier run\n")

        logger = setup_logging(Config(log_file=log_file))
        try:
            logging.getLogger("sitedeploy.deployer").info("Update completed successfully!")
            for handler in logger.handlers:
                handler.flush()

            lines = log_file.read_text().splitlines()
            assert lines[0] == "2020-01-01 00:00:00 : earlier run"
            assert len(lines) == 2
            timestamp, message = lines[1].split(" : ", 1)
            assert message == "Update completed successfully!"
            assert len(timestamp) == len("2020-01-01 00:00:00")
            print("  ✓ Line appended in '<timestamp> : <message>' format")

            # A second setup must not duplicate output
            logger = setup_logging(Config(log_file=log_file))
            logging.getLogger("sitedeploy.deployer").info("again")
            for handler in logger.handlers:
                handler.flush()
            assert len(log_file.read_text().splitlines()) == 3
            print("  ✓ Reconfiguration does not duplicate lines")
        finally:
            for handler in list(logger.handlers):
                logger.removeHandler(handler)
                handler.close()


def test_logging_without_writable_file():
    """An unwritable log file falls back to console output only."""
    print("Testing logging fallback")
    print("-" * 30)

    with tempfile.TemporaryDirectory() as temp_dir:
        log_file = Path(temp_dir) / "missing-dir" / "update_sites.log"
        logger = setup_logging(Config(log_file=log_file))
        try:
            assert len(logger.handlers) == 1
            assert isinstance(logger.handlers[0], logging.StreamHandler)
            assert not log_file.exists()
            print("  ✓ Console handler only")
        finally:
            for handler in list(logger.handlers):
                logger.removeHandler(handler)
                handler.close()


def run_all_tests():
    """Run all configuration tests."""
    print("Configuration Tests")
    print("=" * 50)

    tests = [
        test_defaults_match_deployment_constants,
        test_environment_overrides,
        test_invalid_values_are_rejected,
        test_config_is_immutable,
        test_validate_configuration_warnings,
        test_logging_writes_console_and_file,
        test_logging_without_writable_file
    ]

    passed = 0
    total = len(tests)

    for test in tests:
        try:
            test()
            passed += 1
            print("✓ PASSED\n")
        except Exception as e:
            print(f"✗ FAILED with exception: {e!r}\n")

    print(f"Results: {passed}/{total} tests passed")
    return passed == total


if __name__ == "__main__":
    success = run_all_tests()
    exit(0 if success else 1)

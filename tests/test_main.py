"""Tests for the command-line entry point and logging setup."""

import logging
import os
from unittest.mock import patch

from parallel_search import main as main_module
from parallel_search.main import apply_overrides, parse_args
from parallel_search.utils.logging import (
    ROOT_LOGGER_NAME,
    configure_logging,
    get_logger,
    log_results,
)


def test_parse_args_reads_credentials():
    args = parse_args(
        [
            "--transport",
            "streamable-http",
            "--port",
            "9000",
            "--dataforseo-login",
            "me",
            "--brave-api-key",
            "token",
        ]
    )

    assert args.transport == "streamable-http"
    assert args.port == 9000
    assert args.dataforseo_login == "me"
    assert args.brave_api_key == "token"
    assert args.dataforseo_password is None


def test_apply_overrides_exports_settings_variables(monkeypatch):
    env = {}
    monkeypatch.setattr(os, "environ", env)

    apply_overrides(parse_args(["--log-level", "DEBUG", "--dataforseo-password", "pw"]))

    assert env == {"LOG_LEVEL": "DEBUG", "DATAFORSEO__PASSWORD": "pw"}


def test_main_runs_server_with_cli_settings(monkeypatch):
    # main() exports these; registering them lets monkeypatch restore them
    monkeypatch.setenv("TRANSPORT", "stdio")
    monkeypatch.setenv("HOST", "0.0.0.0")
    monkeypatch.setenv("PORT", "8000")

    with patch.object(main_module, "SearchServer") as server_cls:
        main_module.main(["--transport", "streamable-http", "--port", "9100"])

    server_cls.return_value.run.assert_called_once_with(
        transport="streamable-http", host="0.0.0.0", port=9100
    )


def test_configure_logging_does_not_stack_handlers():
    logger = configure_logging("DEBUG")
    configure_logging("WARNING")

    ours = [h for h in logger.handlers if getattr(h, "_parallel_search", False)]
    assert len(ours) == 1
    assert logger.level == logging.WARNING


def test_get_logger_namespaces_module_loggers():
    assert get_logger("parallel_search.server").name == "parallel_search.server"
    assert get_logger("helpers").name == f"{ROOT_LOGGER_NAME}.helpers"


def test_log_results_reports_cost(caplog):
    logger = get_logger("tests")

    with caplog.at_level(logging.INFO, logger=ROOT_LOGGER_NAME):
        log_results(logger, {"total_unique": 3, "common": 1, "dataforseo_cost": 0.01})

    assert "Total unique results: 3 (common: 1)" in caplog.text
    assert "DataForSEO cost: 0.01" in caplog.text

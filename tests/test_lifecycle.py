import os
import signal
import socket
import subprocess
import sys
import time
from datetime import timedelta
from pathlib import Path
from unittest.mock import MagicMock

import httpx
from alembic import command
from alembic.config import Config
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, inspect

import app.main as main_module
from app.core.config import settings
from app.services.cron_service import SchedulerState


def test_lifespan_starts_and_stops_cleanup(make_reset_token, monkeypatch):
    make_reset_token("stale", timedelta(hours=-2))
    monkeypatch.setattr(settings, "VERCEL", False)

    with TestClient(main_module.app) as client:
        cleanup = main_module.app.state.cleanup_scheduler
        assert cleanup.state is SchedulerState.RUNNING
        assert cleanup.job.last_deleted == 1
        health = client.get("/api/health").json()
        assert health["cleanup"]["state"] == "running"

    assert cleanup.state is SchedulerState.STOPPED


def test_serverless_does_not_start_cleanup(monkeypatch):
    monkeypatch.setattr(settings, "VERCEL", True)

    with TestClient(main_module.app):
        cleanup = main_module.app.state.cleanup_scheduler
        assert cleanup.state is SchedulerState.STOPPED
        assert cleanup.job.passes_run == 0


def test_run_does_not_listen_when_serverless(monkeypatch):
    monkeypatch.setattr(settings, "VERCEL", True)
    uvicorn_run = MagicMock()
    monkeypatch.setattr(main_module.uvicorn, "run", uvicorn_run)

    main_module.run()

    uvicorn_run.assert_not_called()


def test_unretrieved_task_exception_triggers_shutdown(monkeypatch):
    raised = []
    monkeypatch.setattr(main_module.signal, "raise_signal", raised.append)
    loop = MagicMock()

    main_module.handle_loop_exception(loop, {
        "message": "Task exception was never retrieved",
        "exception": RuntimeError("boom"),
    })

    assert raised == [signal.SIGTERM]
    loop.default_exception_handler.assert_not_called()


def test_other_loop_errors_use_default_handler(monkeypatch):
    raised = []
    monkeypatch.setattr(main_module.signal, "raise_signal", raised.append)
    loop = MagicMock()
    context = {"message": "socket.send() raised exception."}

    main_module.handle_loop_exception(loop, context)

    assert raised == []
    loop.default_exception_handler.assert_called_once_with(context)


def test_migrations_upgrade_and_downgrade(tmp_path):
    url = f"sqlite:///{tmp_path / 'migrate.db'}"
    config = Config()
    config.set_main_option("script_location", str(Path(__file__).resolve().parents[1] / "app" / "migrations"))
    config.set_main_option("sqlalchemy.url", url)

    command.upgrade(config, "head")
    tables = set(inspect(create_engine(url)).get_table_names())
    assert {"users", "budgets", "transactions", "password_reset_tokens"} <= tables

    command.downgrade(config, "base")
    assert set(inspect(create_engine(url)).get_table_names()) <= {"alembic_version"}


# ----------- PROCESS EXIT -----------
ROOT = Path(__file__).resolve().parents[1]

FAILING_TASK_ROUTE = """
import asyncio, gc
from app.main import app, run

@app.get("/fail-in-background")
async def fail_in_background():
    async def fail():
        raise RuntimeError("background failure")
    task = asyncio.ensure_future(fail())
    await asyncio.sleep(0)
    del task
    gc.collect()
    return {}

run()
"""


def free_port():
    with socket.socket() as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


def start_server(code, port):
    env = dict(os.environ, HOST="127.0.0.1", PORT=str(port), APP_ENV="testing", VERCEL="false")
    process = subprocess.Popen(
        [sys.executable, "-c", code],
        cwd=ROOT, env=env, stdout=subprocess.PIPE, stderr=subprocess.STDOUT
    )
    deadline = time.monotonic() + 20
    while time.monotonic() < deadline:
        try:
            if httpx.get(f"http://127.0.0.1:{port}/api/health").status_code == 200:
                return process
        except httpx.TransportError:
            time.sleep(0.1)
    process.kill()
    raise AssertionError(process.communicate()[0].decode())


def test_sigterm_shuts_down_and_exits_zero():
    process = start_server("from app.main import run; run()", free_port())

    process.send_signal(signal.SIGTERM)
    output = process.communicate(timeout=20)[0].decode()

    assert process.returncode == 0, output
    assert "Shutdown complete" in output


def test_unretrieved_task_exception_exits_zero():
    port = free_port()
    process = start_server(FAILING_TASK_ROUTE, port)

    try:
        httpx.get(f"http://127.0.0.1:{port}/fail-in-background")
    except httpx.TransportError:
        pass
    output = process.communicate(timeout=20)[0].decode()

    assert process.returncode == 0, output
    assert "Unhandled Rejection" in output
    assert "Shutdown complete" in output

"""Process-level tests: run the server as ``python -m websearch_mcp``."""
import json
import os
import signal
import subprocess
import sys
import threading
import time

import pytest

ROOT = os.path.normpath(os.path.join(os.path.dirname(os.path.abspath(__file__)), ".."))


def start_server(tmp_path):
    env = dict(os.environ)
    env["PYTHONPATH"] = ROOT + os.pathsep + env.get("PYTHONPATH", "")
    env["LOG_LEVEL"] = "INFO"
    env.pop("ALLOWED_DOMAINS", None)
    env.pop("WEBSEARCH_CONFIG", None)
    return subprocess.Popen(
        [sys.executable, "-m", "websearch_mcp"],
        cwd=str(tmp_path),
        env=env,
        stdin=subprocess.PIPE,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
    )


def wait_for_log(proc, text, timeout=15):
    """Collect stderr in the background until ``text`` shows up."""
    seen = threading.Event()
    lines = []

    def reader():
        for raw in proc.stderr:
            lines.append(raw.decode("utf-8", "replace"))
            if text in lines[-1]:
                seen.set()

    threading.Thread(target=reader, daemon=True).start()
    deadline = time.monotonic() + timeout
    while not seen.is_set() and time.monotonic() < deadline and proc.poll() is None:
        time.sleep(0.05)
    return seen.is_set(), lines


@pytest.mark.skipif(sys.platform == "win32", reason="SIGTERM semantics are POSIX only")
def test_sigterm_stops_an_idle_server(tmp_path):
    proc = start_server(tmp_path)
    try:
        started, lines = wait_for_log(proc, "Starting")
        assert started, "".join(lines)

        proc.send_signal(signal.SIGTERM)

        assert proc.wait(timeout=10) == 0
    finally:
        if proc.poll() is None:
            proc.kill()
            proc.wait()


def test_process_answers_every_line_over_real_pipes(tmp_path):
    proc = start_server(tmp_path)
    transcript = (
        '{"jsonrpc":"2.0","id":1,"method":"tools/call","params":{"name":"\\ud800"}}\n'
        '{"jsonrpc":"2.0","id":2,"method":"tools/list"}\n'
    )
    out, err = proc.communicate(transcript.encode("utf-8"), timeout=30)

    responses = [json.loads(line) for line in out.decode("utf-8").splitlines()]
    assert [r["id"] for r in responses] == [1, 2], err.decode("utf-8", "replace")
    assert responses[0]["result"]["isError"] is True
    assert proc.returncode == 0

from __future__ import annotations

import io
import threading
from pathlib import Path

import pytest
from click.testing import CliRunner
from PIL import Image

from smartfilter_shared import protocol
from smartfilter_shared.tcp import request_until_close
from smartfilter_worker import WorkerConfig, WorkerServer
from smartfilter_worker.cli import cli


def _png_bytes(color=(10, 200, 30), size=(12, 8)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def worker(unused_port):
    server = WorkerServer(WorkerConfig(host="127.0.0.1", port=unused_port))
    thread = threading.Thread(target=server.run, daemon=True)
    thread.start()
    assert server.ready.wait(3.0)
    yield server, unused_port
    server.shutdown()
    thread.join(timeout=3.0)


def test_process_command_success(tmp_path):
    src = tmp_path / "in"
    src.write_bytes(_png_bytes())
    dst = tmp_path / "out.png"
    server = WorkerServer(WorkerConfig())

    status = server.process_command(f"{src},{dst},edge".encode())

    assert status == protocol.STATUS_OK
    assert dst.exists()


@pytest.mark.parametrize("data", [b"", b"only,two", b"a,b,c,d"])
def test_process_command_malformed(data):
    assert WorkerServer(WorkerConfig()).process_command(data) == protocol.STATUS_FAILED


def test_process_command_unreadable_image(tmp_path):
    src = tmp_path / "in"
    src.write_bytes(b"garbage")
    status = WorkerServer(WorkerConfig()).process_command(f"{src},{tmp_path / 'o.png'},1".encode())
    assert status == protocol.STATUS_FAILED


def test_worker_replies_and_closes(worker, tmp_path):
    _, port = worker
    src = tmp_path / "in"
    src.write_bytes(_png_bytes())
    dst = tmp_path / "out.png"

    raw = request_until_close("127.0.0.1", port, f"{src},{dst},retro".encode(), read_timeout=5.0)

    assert raw == b"\x01\x00"
    assert dst.exists()


def test_end_to_end_through_gateway(worker, make_app):
    _, port = worker
    app = make_app(port, read_timeout=5.0)
    client = app.test_client()

    resp = client.post(
        "/send_photo",
        data={"photo": (io.BytesIO(_png_bytes()), "leaf.png"), "type": "cartoon"},
        content_type="multipart/form-data",
    )

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["response"] == protocol.STATUS_OK

    photo = client.get(f"/photo/{body['output']}")
    assert photo.status_code == 200
    with Image.open(io.BytesIO(photo.data)) as img:
        assert img.size == (12, 8)


def test_end_to_end_failure_status(worker, make_app):
    _, port = worker
    app = make_app(port, read_timeout=5.0)

    resp = app.test_client().post(
        "/send_photo",
        data={"photo": (io.BytesIO(b"not a picture"), "x.png"), "type": "edge"},
        content_type="multipart/form-data",
    )

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["response"] == protocol.STATUS_FAILED
    assert not (Path(app.config["output_dir"]) / body["output"]).exists()


def test_cli_help():
    result = CliRunner().invoke(cli, ["--help"])
    assert result.exit_code == 0
    assert "--port" in result.output

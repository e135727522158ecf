import pytest
import requests

from app.core.errors import TransferError
from app.services import course_builder_client as module
from app.services.course_builder_client import CourseBuilderClient


class DummyResponse:
    def __init__(self, status_code: int = 200, text: str = "") -> None:
        self.status_code = status_code
        self.text = text


def test_send_wraps_course_in_envelope(monkeypatch):
    captured = {}

    def fake_post(url, json, headers, timeout):
        captured.update(url=url, json=json, headers=headers, timeout=timeout)
        return DummyResponse()

    monkeypatch.setattr(module.requests, "post", fake_post)

    CourseBuilderClient("https://builder.example.com/api/fill-content/", 7).send({"course_id": "1", "topics": []})

    assert captured["url"] == "https://builder.example.com/api/fill-content"
    assert captured["json"] == {
        "requester_service": "content-studio",
        "payload": {"course_id": "1", "topics": []},
        "response": {"answer": ""},
    }
    assert captured["headers"]["X-Service-Name"] == "content-studio"
    assert captured["timeout"] == 7


def test_rejected_course_raises_transfer_error(monkeypatch):
    monkeypatch.setattr(module.requests, "post", lambda *a, **k: DummyResponse(503, "unavailable"))

    with pytest.raises(TransferError) as exc_info:
        CourseBuilderClient("https://builder.example.com", 7).send({"course_id": "1"})
    assert exc_info.value.status_code == 502


def test_network_error_raises_transfer_error(monkeypatch):
    def unreachable(*args, **kwargs):
        raise requests.Timeout("slow")

    monkeypatch.setattr(module.requests, "post", unreachable)

    with pytest.raises(TransferError):
        CourseBuilderClient("https://builder.example.com", 7).send({"course_id": "1"})


def test_unconfigured_client_raises():
    with pytest.raises(TransferError):
        CourseBuilderClient("", 7).send({"course_id": "1"})

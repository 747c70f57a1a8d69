from __future__ import annotations

import requests

from tuition_center.notifications.sms import SmsGateway, clean_phone


class FakeResponse:
    def __init__(self, body, status=200):
        self._body = body
        self.status_code = status

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        return self._body


class FakeSession:
    def __init__(self, response=None, error=None):
        self.calls = []
        self._response = response
        self._error = error

    def post(self, url, **kwargs):
        self.calls.append((url, kwargs))
        if self._error is not None:
            raise self._error
        return self._response


def test_clean_phone_keeps_digits_and_plus():
    assert clean_phone("+94 (71) 987-6543") == "+94719876543"
    assert clean_phone(None) == ""


def test_log_provider_succeeds_without_network():
    session = FakeSession()
    gateway = SmsGateway(provider="log", session=session)

    result = gateway.send("071 987 6543", "hello")

    assert result.success
    assert result.provider == "log"
    assert session.calls == []


def test_unknown_provider_falls_back_to_log():
    assert SmsGateway(provider="carrier-pigeon").provider == "log"


def test_empty_number_is_a_failed_result():
    result = SmsGateway(provider="log").send("  ", "hello")

    assert not result.success


def test_transport_error_becomes_failed_result():
    session = FakeSession(error=requests.ConnectionError("connection refused"))
    gateway = SmsGateway(provider="notify_lk", api_key="k", session=session)

    result = gateway.send("0719876543", "hello")

    assert not result.success
    assert "connection refused" in result.message


def test_notify_lk_payload_and_success():
    session = FakeSession(FakeResponse({"status": "success", "message": "Queued"}))
    gateway = SmsGateway(
        provider="notify_lk", api_key="k", settings={"NOTIFY_LK_USER_ID": "42", "NOTIFY_LK_SENDER_ID": "Center"}, session=session
    )

    result = gateway.send("0719876543", "hello")

    assert result.success
    url, kwargs = session.calls[0]
    assert url.endswith("/send")
    assert kwargs["json"]["to"] == "0719876543"
    assert kwargs["json"]["user_id"] == "42"
    assert kwargs["json"]["sender_id"] == "Center"


def test_nexmo_rejection_is_reported():
    body = {"messages": [{"status": "4", "error-text": "Bad Credentials"}]}
    gateway = SmsGateway(provider="nexmo", session=FakeSession(FakeResponse(body)))

    result = gateway.send("0719876543", "hello")

    assert not result.success
    assert result.message == "Bad Credentials"


def test_twilio_http_error_is_a_failed_result():
    gateway = SmsGateway(provider="twilio", session=FakeSession(FakeResponse({}, status=401)))

    result = gateway.send("0719876543", "hello")

    assert not result.success
    assert result.provider == "twilio"


def test_bulk_sends_each_number():
    gateway = SmsGateway(provider="log", bulk_delay=0)

    results = gateway.send_bulk(["0711111111", "0722222222"], "hi")

    assert [r.success for r in results] == [True, True]

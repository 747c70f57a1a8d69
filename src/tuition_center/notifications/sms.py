from __future__ import annotations

import logging
import re
import time
from dataclasses import dataclass
from typing import Iterable, List, Mapping, Optional, Protocol

import requests

logger = logging.getLogger(__name__)

NOTIFY_LK_URL = "https://app.notify.lk/api/v1/send"
TWILIO_URL = "https://api.twilio.com/2010-04-01/Accounts/{sid}/Messages.json"
NEXMO_URL = "https://rest.nexmo.com/sms/json"

PROVIDERS = ("notify_lk", "twilio", "nexmo", "log")


def clean_phone(phone: Optional[str]) -> str:
    """Keep digits and a leading plus only."""
    return re.sub(r"[^0-9+]", "", phone or "")


@dataclass(frozen=True)
class SmsResult:
    success: bool
    message: str
    provider: str
    message_id: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "message": self.message,
            "provider": self.provider,
            "message_id": self.message_id,
        }


class SmsSender(Protocol):
    def send(self, phone: str, message: str) -> SmsResult:
        raise NotImplementedError

    def send_bulk(self, phones: Iterable[str], message: str) -> List[SmsResult]:
        raise NotImplementedError


class SmsGateway:
    """Sends text messages through the configured provider.

    ``send`` never raises: transport errors and provider rejections come back
    as a failed SmsResult and are logged, so callers can treat SMS as a
    best-effort side effect.
    """

    def __init__(
        self,
        *,
        provider: str = "log",
        api_key: str = "",
        settings: Optional[Mapping[str, str]] = None,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
        bulk_delay: float = 0.1,
    ):
        self.provider = provider if provider in PROVIDERS else "log"
        if self.provider != provider:
            logger.warning("Unknown SMS provider %r, messages will only be logged", provider)
        self._api_key = api_key
        self._settings = dict(settings or {})
        self._timeout = timeout
        self._session = session or requests.Session()
        self._bulk_delay = bulk_delay

    @classmethod
    def from_config(cls, config: Mapping[str, object]) -> "SmsGateway":
        keys = (
            "NOTIFY_LK_USER_ID",
            "NOTIFY_LK_SENDER_ID",
            "TWILIO_ACCOUNT_SID",
            "TWILIO_AUTH_TOKEN",
            "TWILIO_PHONE_NUMBER",
            "NEXMO_API_KEY",
            "NEXMO_API_SECRET",
            "NEXMO_FROM",
        )
        return cls(
            provider=str(config.get("SMS_PROVIDER") or "log"),
            api_key=str(config.get("SMS_API_KEY") or ""),
            settings={k: str(config.get(k) or "") for k in keys},
            timeout=float(config.get("SMS_TIMEOUT") or 10),
        )

    def send(self, phone: str, message: str) -> SmsResult:
        number = clean_phone(phone)
        if not number:
            logger.warning("SMS skipped: empty phone number")
            return SmsResult(False, "Phone number is empty", self.provider)

        try:
            if self.provider == "notify_lk":
                result = self._send_notify_lk(number, message)
            elif self.provider == "twilio":
                result = self._send_twilio(number, message)
            elif self.provider == "nexmo":
                result = self._send_nexmo(number, message)
            else:
                logger.info("SMS to %s: %s", number, message)
                result = SmsResult(True, "SMS logged (test mode)", "log")
        except (requests.RequestException, ValueError, KeyError, IndexError, TypeError) as exc:
            logger.error("SMS to %s via %s failed: %s", number, self.provider, exc)
            return SmsResult(False, str(exc), self.provider)

        if not result.success:
            logger.error("SMS to %s rejected by %s: %s", number, self.provider, result.message)
        return result

    def send_bulk(self, phones: Iterable[str], message: str) -> List[SmsResult]:
        results = []
        for index, phone in enumerate(phones):
            if index and self._bulk_delay:
                # stay under provider rate limits
                time.sleep(self._bulk_delay)
            results.append(self.send(phone, message))
        return results

    def _send_notify_lk(self, number: str, message: str) -> SmsResult:
        response = self._session.post(
            NOTIFY_LK_URL,
            headers={"Authorization": f"Bearer {self._api_key}"},
            json={
                "user_id": self._settings.get("NOTIFY_LK_USER_ID", ""),
                "api_key": self._api_key,
                "sender_id": self._settings.get("NOTIFY_LK_SENDER_ID") or "NotifyDEMO",
                "to": number,
                "message": message,
            },
            timeout=self._timeout,
        )
        response.raise_for_status()
        body = response.json()
        return SmsResult(body.get("status") == "success", body.get("message") or "SMS sent", "notify_lk")

    def _send_twilio(self, number: str, message: str) -> SmsResult:
        sid = self._settings.get("TWILIO_ACCOUNT_SID", "")
        response = self._session.post(
            TWILIO_URL.format(sid=sid),
            auth=(sid, self._settings.get("TWILIO_AUTH_TOKEN", "")),
            data={"From": self._settings.get("TWILIO_PHONE_NUMBER", ""), "To": number, "Body": message},
            timeout=self._timeout,
        )
        response.raise_for_status()
        body = response.json()
        return SmsResult("sid" in body, "SMS sent via Twilio", "twilio", body.get("sid"))

    def _send_nexmo(self, number: str, message: str) -> SmsResult:
        response = self._session.post(
            NEXMO_URL,
            data={
                "api_key": self._settings.get("NEXMO_API_KEY", ""),
                "api_secret": self._settings.get("NEXMO_API_SECRET", ""),
                "from": self._settings.get("NEXMO_FROM") or "TuitionCenter",
                "to": number,
                "text": message,
            },
            timeout=self._timeout,
        )
        response.raise_for_status()
        first = response.json()["messages"][0]
        ok = str(first.get("status")) == "0"
        return SmsResult(ok, "SMS sent via Nexmo" if ok else first.get("error-text", "Rejected"), "nexmo", first.get("message-id"))

"""
clients.py

HTTP clients for the provider proxy. Each call maps failures onto the
adstudio error taxonomy so the front-end only has to tell "worked" from
"failed with a message" (plus the voice-unavailable case).
"""

import base64
import binascii
from dataclasses import dataclass
from typing import Any, Dict, List

import requests
from loguru import logger

from adstudio.config import BACKEND_URL, REQUEST_TIMEOUT
from adstudio.errors import ERRORS_BY_CODE, NetworkError, UpstreamError


@dataclass(frozen=True)
class Voice:
    voice_id: str
    name: str
    category: str = ""

    @property
    def label(self) -> str:
        return f"{self.name} ({self.category})" if self.category else self.name


class ProxyClient:
    """Shared request/response handling for the /api endpoints."""

    def __init__(self, base_url: str = BACKEND_URL, session=None, timeout: float = REQUEST_TIMEOUT):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    def _call(self, method: str, path: str, payload: Dict[str, Any] = None) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            if method == "GET":
                response = self.session.get(url, timeout=self.timeout)
            else:
                response = self.session.post(url, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f"🌐 {method} {path} failed: {e}")
            raise NetworkError(f"Could not reach the server: {e}") from e

        try:
            body = response.json()
        except ValueError:
            body = {}

        if response.status_code >= 400:
            message = body.get("error") if isinstance(body, dict) else None
            code = body.get("code") if isinstance(body, dict) else None
            error_cls = ERRORS_BY_CODE.get(code, UpstreamError)
            logger.warning(f"❌ {method} {path} → {response.status_code} [{code}]")
            raise error_cls(message or f"Request failed with status {response.status_code}")

        if not isinstance(body, dict):
            raise UpstreamError(f"Unexpected response from {path}")
        return body

    @staticmethod
    def _field(body: Dict[str, Any], name: str) -> Any:
        value = body.get(name)
        if value is None:
            raise UpstreamError(f"Response is missing '{name}'")
        return value


class ScriptClient(ProxyClient):

    def generate(self, brand_name: str, description: str, target_seconds: int) -> str:
        body = self._call("POST", "/api/generate-script", {
            "brandName": brand_name,
            "description": description,
            "duration": target_seconds,
        })
        return self._field(body, "script")

    def shorten(self, script: str, target_seconds: int, brand_name: str = "") -> str:
        body = self._call("POST", "/api/shorten-script", {
            "script": script,
            "duration": target_seconds,
            "brandName": brand_name,
        })
        return self._field(body, "script")


class VoiceCatalogClient(ProxyClient):

    def list_voices(self) -> List[Voice]:
        body = self._call("GET", "/api/voices")
        voices = []
        for item in body.get("voices") or []:
            if not isinstance(item, dict) or not item.get("voice_id"):
                logger.warning(f"⚠️ Skipping malformed voice entry: {item!r}")
                continue
            voices.append(Voice(
                voice_id=item["voice_id"],
                name=item.get("name") or "",
                category=item.get("category") or "",
            ))
        return voices


class AudioClient(ProxyClient):

    def synthesize(self, script: str, voice_id: str) -> bytes:
        body = self._call("POST", "/api/generate-audio", {"script": script, "voiceId": voice_id})
        try:
            return base64.b64decode(self._field(body, "audioContent"), validate=True)
        except (binascii.Error, ValueError) as e:
            raise UpstreamError("Audio payload is not valid base64") from e

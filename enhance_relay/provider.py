# enhance_relay/provider.py
# Replicate client: the only place that talks to the model host

import asyncio
import logging
import time
from typing import Any, Protocol

import httpx

from .config import Settings
from .errors import ProviderError

logger = logging.getLogger(__name__)

TERMINAL_STATUSES = ("succeeded", "failed", "canceled")


class Provider(Protocol):
    async def run(self, input: dict) -> Any: ...


class ReplicateProvider:
    """
    Runs one prediction on Replicate and waits for it to finish.
    Request: {"input": {"image": ..., "scale": ..., "face_enhance": ...}}
    Response: {"status": "...", "output": <url | [url, ...]>, "urls": {"get": ...}}
    """

    def __init__(self, settings: Settings, transport: httpx.AsyncBaseTransport | None = None):
        self.settings = settings
        # tests pass an httpx.MockTransport
        self._transport = transport

    def _prediction_request(self) -> tuple[str, dict]:
        endpoint = self.settings.REPLICATE_ENDPOINT.rstrip("/")
        model = self.settings.REPLICATE_MODEL.strip("/")
        # "owner/name:version" pins a version, plain "owner/name" runs the latest one
        if ":" in model:
            _, version = model.split(":", 1)
            return f"{endpoint}/v1/predictions", {"version": version}
        return f"{endpoint}/v1/models/{model}/predictions", {}

    async def run(self, input: dict) -> Any:
        if not self.settings.REPLICATE_API_TOKEN:
            raise ProviderError("REPLICATE_API_TOKEN is not set")

        url, body = self._prediction_request()
        body["input"] = input
        headers = {
            "Authorization": f"Bearer {self.settings.REPLICATE_API_TOKEN}",
            "Content-Type": "application/json",
            "Prefer": "wait",
        }

        async with httpx.AsyncClient(timeout=self.settings.REPLICATE_TIMEOUT, transport=self._transport) as client:
            r = await client.post(url, headers=headers, json=body)
            if r.status_code not in (200, 201, 202):
                raise ProviderError(f"replicate error {r.status_code}: {r.text[:300]}")
            prediction = r.json()

            deadline = time.monotonic() + self.settings.POLL_MAX_WAIT
            while prediction.get("status") not in TERMINAL_STATUSES:
                poll_url = (prediction.get("urls") or {}).get("get")
                if not poll_url:
                    raise ProviderError(f"no poll url in prediction: {str(prediction)[:300]}")
                if time.monotonic() >= deadline:
                    raise ProviderError("replicate polling timeout")

                await asyncio.sleep(self.settings.POLL_INTERVAL)

                pr = await client.get(poll_url, headers={"Authorization": headers["Authorization"]})
                if pr.status_code != 200:
                    raise ProviderError(f"poll failed {pr.status_code}: {pr.text[:300]}")
                prediction = pr.json()

        status = prediction["status"]
        if status != "succeeded":
            raise ProviderError(prediction.get("error") or f"prediction {status}")
        logger.info("Prediction %s succeeded", prediction.get("id"))
        return prediction.get("output")

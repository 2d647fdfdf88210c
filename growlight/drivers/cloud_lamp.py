from __future__ import annotations

import asyncio
import json
import logging
from datetime import datetime, timedelta
from typing import Any, Callable, Optional

import httpx
from pydantic import ValidationError

from ..core.errors import (
    AuthenticationFailed,
    CommandRejected,
    DeviceNotFound,
    TransportError,
)
from ..core.timeutil import now_utc
from ..domain.models import AccountConfig, LightInfo
from .cloud_models import CommandResponse, DeviceListData, LoginResponse

logger = logging.getLogger(__name__)

LOGIN_PATH = "/ulogin/mailLogin/v1"
DEVICE_LIST_PATH = "/udm/getDeviceList/v1"
ADJUST_LIGHT_PATH = "/udm/adjustLight/v1"
LAMP_SWITCH_PATH = "/udm/lampSwitch/v1"

# Re-logins allowed per command after the server reports an expired token
EXPIRY_RETRIES = 1


class CloudLamp:
    """Session against the lamp vendor's cloud API.

    Holds the login token and the discovered device, logging in again when
    the token is older than ``token_ttl`` or the server reports it expired.
    All public coroutines are serialized on one lock, so the scheduler loop
    and manual triggers never interleave logins or commands.
    """

    lamp_id = "marshydro_cloud"

    def __init__(
        self,
        account: AccountConfig,
        base_url: str = "https://api.lgledsolutions.com/api/android",
        timeout: float = 10.0,
        token_ttl: timedelta = timedelta(seconds=300),
        transport: Optional[httpx.AsyncBaseTransport] = None,
        clock: Callable[[], datetime] = now_utc,
    ) -> None:
        self._account = account
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport
        self._clock = clock
        self._lock = asyncio.Lock()

        self.token_ttl = token_ttl
        self.token: str = ""
        self.token_issued_at: Optional[datetime] = None
        self.device_id: str = ""
        self.group_id: str = ""

    # --- public API ---

    async def ensure_session(self) -> None:
        async with self._lock:
            await self._ensure_session()

    async def ensure_device(self) -> None:
        async with self._lock:
            await self._ensure_device()

    async def apply_brightness(self, level: int) -> None:
        async with self._lock:
            await self._ensure_device()
            await self._ensure_session()
            await self._command(ADJUST_LIGHT_PATH, {
                "light": level,
                "deviceId": self.device_id,
                "groupId": self.group_id or None,
            })
            logger.info("Brightness set to %s%% (device=%s)", level, self.device_id)

    async def toggle_switch(self, is_on: bool) -> None:
        async with self._lock:
            await self._ensure_device()
            await self._ensure_session()
            await self._command(LAMP_SWITCH_PATH, {
                "isClose": not is_on,
                "deviceId": self.device_id,
                "groupId": self.group_id or None,
            })
            logger.info("Lamp switched %s (device=%s)", "on" if is_on else "off", self.device_id)

    async def light_info(self) -> LightInfo:
        """Re-read the first light of the account."""
        async with self._lock:
            await self._ensure_session()
            return await self._discover()

    def status(self) -> dict[str, Any]:
        age = None
        if self.token and self.token_issued_at is not None:
            age = (self._clock() - self.token_issued_at).total_seconds()
        return {
            "authenticated": bool(self.token),
            "token_age_s": age,
            "device_id": self.device_id or None,
            "group_id": self.group_id or None,
        }

    # --- session ---

    def _token_fresh(self) -> bool:
        if not self.token or self.token_issued_at is None:
            return False
        return self._clock() - self.token_issued_at < self.token_ttl

    async def _ensure_session(self) -> None:
        if self._token_fresh():
            logger.debug("Token still valid, skipping login")
            return
        await self._login()

    async def _login(self) -> None:
        body = await self._post(LOGIN_PATH, {
            "email": self._account.email,
            "password": self._account.password,
            "loginMethod": "1",
        })
        try:
            parsed = LoginResponse.model_validate(body)
        except ValidationError as e:
            raise AuthenticationFailed("token not found in login response") from e

        self.token = parsed.data.token
        self.token_issued_at = self._clock()
        logger.info("Login successful, token received")

    async def _ensure_device(self) -> None:
        if self.device_id:
            return
        await self._ensure_session()
        await self._discover()

    async def _discover(self) -> LightInfo:
        resp = await self._command(DEVICE_LIST_PATH, {
            "currentPage": 0,
            "type": None,
            "productType": "LIGHT",
        })
        try:
            data = DeviceListData.model_validate(resp.data)
        except ValidationError as e:
            raise DeviceNotFound("invalid device list in response") from e
        if not data.devices:
            raise DeviceNotFound("no light devices available")

        entry = data.devices[0]
        device_id = entry.resolved_id()
        if not device_id:
            raise DeviceNotFound("device id not found in response")

        self.device_id = device_id
        self.group_id = entry.resolved_group_id()
        logger.info("Discovered lamp %r (id=%s group=%s)", entry.device_name, self.device_id, self.group_id or "-")
        return LightInfo(
            device_id=self.device_id,
            group_id=self.group_id,
            device_name=entry.device_name,
            light_rate=int(entry.device_light_rate) if entry.device_light_rate is not None else None,
            is_close=entry.is_close,
            device_image=entry.device_img,
        )

    # --- transport ---

    async def _command(self, path: str, payload: dict[str, Any]) -> CommandResponse:
        """POST a command, logging in again once if the token has expired."""
        for attempt in range(EXPIRY_RETRIES + 1):
            body = await self._post(path, payload)
            try:
                resp = CommandResponse.model_validate(body)
            except ValidationError as e:
                raise TransportError(f"malformed response from {path}") from e

            if resp.ok:
                return resp

            if resp.token_expired and attempt < EXPIRY_RETRIES:
                logger.info("Token expired, re-authenticating...")
                await self._login()
                continue

            logger.warning("Error in API response from %s: code=%s msg=%s", path, resp.code, resp.msg)
            raise CommandRejected(f"{path} rejected: {resp.msg or 'no message'}", code=resp.code)

        raise CommandRejected(f"{path} rejected after retry")

    def _system_data(self) -> str:
        now = self._clock()
        return json.dumps({
            "reqId": int(now.timestamp() * 1000),
            "appVersion": "1.2.0",
            "osType": "android",
            "osVersion": "14",
            "deviceType": "SM-S928C",
            "deviceId": self.device_id,
            "netType": "wifi",
            "wifiName": self._account.wifi_name,
            "timestamp": int(now.timestamp()),
            "token": self.token,
            "timezone": self._account.timezone,
            "language": self._account.language,
        })

    async def _post(self, path: str, payload: dict[str, Any]) -> Any:
        headers = {
            "systemData": self._system_data(),
            "Content-Type": "application/json",
        }
        try:
            async with httpx.AsyncClient(
                base_url=self._base_url, timeout=self._timeout, transport=self._transport
            ) as client:
                resp = await client.post(path, json=payload, headers=headers)
                resp.raise_for_status()
                return resp.json()
        except httpx.HTTPError as e:
            raise TransportError(f"{path} failed: {e}") from e
        except ValueError as e:
            raise TransportError(f"{path} returned invalid JSON") from e

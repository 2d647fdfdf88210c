"""Response bodies of the lamp cloud API.

Every endpoint answers ``{code, msg, data}``; ``code`` is ``"000"`` on success
and ``"102"`` when the session token has expired.
"""
from __future__ import annotations

from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

SUCCESS_CODE = "000"
TOKEN_EXPIRED_CODE = "102"


def _id_str(v: Union[str, int, float, None]) -> str:
    if v is None:
        return ""
    if isinstance(v, float):
        return f"{v:.0f}"
    return str(v)


class _Body(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True, populate_by_name=True)


class LoginData(_Body):
    token: str = Field(min_length=1)


class LoginResponse(_Body):
    code: Optional[str] = None
    msg: Optional[str] = None
    data: LoginData


class CommandResponse(_Body):
    code: Optional[str] = None
    msg: Optional[str] = None
    data: Any = None

    @property
    def ok(self) -> bool:
        return self.code == SUCCESS_CODE

    @property
    def token_expired(self) -> bool:
        return self.code == TOKEN_EXPIRED_CODE


class DeviceEntry(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: Union[str, int, float, None] = None
    device_id: Union[str, int, float, None] = Field(default=None, alias="deviceId")
    device_name: Optional[str] = Field(default=None, alias="deviceName")
    device_light_rate: Optional[float] = Field(default=None, alias="deviceLightRate")
    is_close: Optional[bool] = Field(default=None, alias="isClose")
    group_id: Union[str, int, float, None] = Field(default=None, alias="groupId")
    device_img: Optional[str] = Field(default=None, alias="deviceImg")

    def resolved_id(self) -> str:
        """Primary ``id``, falling back to ``deviceId``."""
        return _id_str(self.id) or _id_str(self.device_id)

    def resolved_group_id(self) -> str:
        return _id_str(self.group_id)


class DeviceListData(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    devices: List[DeviceEntry] = Field(default_factory=list, alias="list")

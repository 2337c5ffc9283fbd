from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CallLogIn(BaseModel):
    """A candidate record as sent by the device, before it reaches the store."""

    # Devices may send numeric phone numbers and epoch-millisecond timestamps
    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    date_time: str = Field(alias="dateTime", min_length=1, max_length=64)
    duration: float = Field(allow_inf_nan=False)
    name: Optional[str] = Field(default="Unknown", max_length=255)
    phone_number: str = Field(alias="phoneNumber", min_length=1, max_length=64)
    call_type: str = Field(alias="type", min_length=1, max_length=32)

    @field_validator("name")
    @classmethod
    def default_unknown_name(cls, v: Optional[str]) -> str:
        return v if v is not None else "Unknown"

    @property
    def dedup_key(self) -> str:
        return f"{self.phone_number}|{self.date_time}"


class CallLogOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    date_time: str = Field(serialization_alias="dateTime")
    duration: float
    name: str
    phone_number: str = Field(serialization_alias="phoneNumber")
    call_type: str = Field(serialization_alias="type")

"""
Pydantic schema of the websocket frame protocol.

Every message, in both directions, is one JSON object:
    {"code": 0|1|2, "width"?: int, "height"?: int, "frame"?: str}
Fields without a value are omitted on the wire.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from nyancat.exceptions import ProtocolError
from nyancat.models.enums import MessageCode

U16_MAX = 65535


class FrameMessage(BaseModel):
    """Websocket message (INIT / OK / ERROR)."""
    model_config = ConfigDict(
        extra="forbid",
        json_schema_extra={
            "examples": [
                {"code": 0},
                {"code": 1, "width": 100, "height": 30},
                {"code": 1, "frame": "\u001b[2J\u001b[1;1H..."},
            ]
        },
    )

    code: MessageCode = Field(..., description="0 = Init, 1 = Ok, 2 = Error")
    width: Optional[int] = Field(None, ge=0, le=U16_MAX, description="Client columns")
    height: Optional[int] = Field(None, ge=0, le=U16_MAX, description="Client rows")
    frame: Optional[str] = Field(None, description="Escape text of one frame")

    @classmethod
    def init(cls) -> "FrameMessage":
        return cls(code=MessageCode.INIT)

    @classmethod
    def ok_frame(cls, frame: str) -> "FrameMessage":
        return cls(code=MessageCode.OK, frame=frame)

    @classmethod
    def error(cls) -> "FrameMessage":
        return cls(code=MessageCode.ERROR)

    @property
    def has_size(self) -> bool:
        return self.width is not None and self.height is not None

    def to_wire(self) -> str:
        """Serialize, omitting unset fields."""
        return self.model_dump_json(exclude_none=True)

    @classmethod
    def from_wire(cls, raw: str) -> "FrameMessage":
        """
        Parse one message.

        Raises:
            ProtocolError: not JSON, or not the 4-field schema
        """
        try:
            return cls.model_validate_json(raw)
        except ValidationError as e:
            raise ProtocolError(f"Invalid message: {e.error_count()} error(s)") from e

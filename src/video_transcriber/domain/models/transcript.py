from __future__ import annotations

from datetime import datetime, timezone
from typing import Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

_datetime_adapter = TypeAdapter(datetime)


class TranscriptMessage(BaseModel):
    """A single utterance from a processed conversation.

    Only ``text`` and ``startTime`` are relied upon; any other fields the
    service returns (speaker, end time, ids) are kept as extras. ``startTime``
    is stored exactly as received so the message serializes back unchanged.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    text: str
    start_time: Union[int, float, str] = Field(alias="startTime")

    @property
    def started_at(self) -> datetime:
        """``startTime`` as an aware datetime.

        Numeric values are epoch milliseconds; strings are ISO 8601.
        """

        if isinstance(self.start_time, (int, float)):
            return datetime.fromtimestamp(self.start_time / 1000, tz=timezone.utc)
        return _datetime_adapter.validate_python(self.start_time)

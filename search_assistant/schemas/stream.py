"""Stream chunk emitted by the response streamer."""

from typing import Literal

from pydantic import BaseModel, ConfigDict

ChunkKind = Literal["status", "content", "error"]


class StreamChunk(BaseModel):
    """One framed unit of output text. Chunks are concatenated in emission order."""

    model_config = ConfigDict(frozen=True)

    kind: ChunkKind
    text: str

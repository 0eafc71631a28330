from pydantic import Field
from typing import Any, Dict, List, Optional
from .common import CamelModel


class StreamUrls(CamelModel):
    hls: str
    webrtc: str
    rtsp: str
    mjpeg: str


class StreamSession(CamelModel):
    camera_id: str
    stream_id: str
    ready: bool
    token: str
    urls: StreamUrls


class StreamTokenCheck(CamelModel):
    valid: bool
    camera_id: str
    store_id: str


class StreamTestRequest(CamelModel):
    url: str = Field(..., min_length=1)


class StreamTestResult(CamelModel):
    message: str
    test_stream_id: str
    valid_for: str
    stream_info: Optional[Dict[str, Any]] = None
    urls: StreamUrls


class SampleStream(CamelModel):
    name: str
    url: str
    description: str
    recommended: bool = False


class SampleStreamCatalog(CamelModel):
    streams: List[SampleStream]
    note: str

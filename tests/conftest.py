"""
Pytest configuration and fixtures
"""
import asyncio
import base64
import io
import struct
import zlib

import pytest
from PIL import Image

from atelier.services.compositor import CompositorError, ProceduralCompositor
from atelier.services.orchestrator import SessionOrchestrator


def make_data_uri(size=(32, 24), color=(200, 40, 40), split_color=None) -> str:
    """Build a PNG data URI; with split_color the right half gets a second color."""
    image = Image.new("RGB", size, color)
    if split_color is not None:
        half = size[0] // 2
        image.paste(Image.new("RGB", (size[0] - half, size[1]), split_color), (half, 0))
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buffer.getvalue()).decode()


def make_header_only_png(width: int, height: int) -> str:
    """PNG data URI whose header claims the given size but carries no pixel rows."""

    def chunk(kind: bytes, data: bytes) -> bytes:
        crc = zlib.crc32(kind + data) & 0xFFFFFFFF
        return struct.pack(">I", len(data)) + kind + data + struct.pack(">I", crc)

    header = struct.pack(">IIBBBBB", width, height, 8, 2, 0, 0, 0)
    png = (
        b"\x89PNG\r\n\x1a\n"
        + chunk(b"IHDR", header)
        + chunk(b"IDAT", zlib.compress(b""))
        + chunk(b"IEND", b"")
    )
    return "data:image/png;base64," + base64.b64encode(png).decode()


def decode_data_uri(data_uri: str) -> Image.Image:
    payload = data_uri.split(",", 1)[1]
    return Image.open(io.BytesIO(base64.b64decode(payload))).convert("RGB")


class RecordingCompositor:
    """Returns a fixed image and remembers every call."""

    def __init__(self, image: str | None = None):
        self.image = image or make_data_uri()
        self.calls = []

    async def synthesize(self, prompt, profile, iteration, base_image=None):
        self.calls.append(
            {"prompt": prompt, "profile": profile, "iteration": iteration, "base_image": base_image}
        )
        return self.image


class FailingCompositor(RecordingCompositor):
    async def synthesize(self, prompt, profile, iteration, base_image=None):
        await super().synthesize(prompt, profile, iteration, base_image)
        raise CompositorError("synthetic failure")


class GatedCompositor(RecordingCompositor):
    """Blocks every call until `release` is set."""

    def __init__(self, image: str | None = None):
        super().__init__(image)
        self.started = asyncio.Event()
        self.release = asyncio.Event()

    async def synthesize(self, prompt, profile, iteration, base_image=None):
        result = await super().synthesize(prompt, profile, iteration, base_image)
        self.started.set()
        await self.release.wait()
        return result


@pytest.fixture
def small_compositor():
    """Procedural compositor with a tiny canvas to keep tests fast"""
    return ProceduralCompositor(width=96, height=64, timeout=10.0)


@pytest.fixture
def recording_compositor():
    return RecordingCompositor()


@pytest.fixture
def orchestrator(recording_compositor):
    return SessionOrchestrator(compositor=recording_compositor)

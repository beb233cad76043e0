"""
Sequence Exporter - Turns the committed frame order into an animated GIF
"""

from PIL import Image
import numpy as np
import asyncio
import io
import logging
import time
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from .errors import ExportError
from .grid import Frame
from .playback import PlaybackClock, frame_delay_ms


logger = logging.getLogger(__name__)

TRANSPARENT_INDEX = 255


@dataclass
class EncoderConfig:
    """Encoder settings"""
    workers: int = 2
    quality: int = 10  # 1 = best palette, higher = faster


class GifEncoder(ABC):
    """Collects raster frames and produces one binary blob"""

    def __init__(self, config: Optional[EncoderConfig] = None):
        self.config = config or EncoderConfig()

    @abstractmethod
    def add_frame(self, image: Image.Image, delay_ms: int) -> None:
        """Append a frame shown for delay_ms milliseconds"""

    @abstractmethod
    def render(self) -> bytes:
        """Encode everything added so far"""


class PillowGifEncoder(GifEncoder):
    """
    Looping GIF encoder on top of Pillow.

    Palette quantization runs on a thread pool of config.workers threads;
    the final write happens on the calling thread.
    """

    def __init__(self, config: Optional[EncoderConfig] = None):
        super().__init__(config)
        self._frames: List[Tuple[Image.Image, int]] = []

    def add_frame(self, image, delay_ms):
        self._frames.append((image.convert('RGBA'), int(delay_ms)))

    def render(self):
        if not self._frames:
            raise ExportError("No frames to encode")

        images = [img for img, _ in self._frames]
        durations = [delay for _, delay in self._frames]

        with ThreadPoolExecutor(max_workers=max(1, self.config.workers)) as pool:
            palettized = list(pool.map(self._palettize, images))

        buffer = io.BytesIO()
        palettized[0].save(
            buffer,
            format='GIF',
            save_all=True,
            append_images=palettized[1:],
            duration=durations,
            loop=0,
            transparency=TRANSPARENT_INDEX,
            disposal=2
        )
        return buffer.getvalue()

    def _palettize(self, img: Image.Image) -> Image.Image:
        # Transparent pixels get their own palette slot
        alpha = img.split()[3]
        mask = Image.eval(alpha, lambda a: 255 if a < 128 else 0)

        kmeans = max(0, 10 - self.config.quality)
        img_p = img.convert('RGB').quantize(
            colors=TRANSPARENT_INDEX,
            method=Image.Quantize.MEDIANCUT,
            kmeans=kmeans
        )
        img_p.paste(TRANSPARENT_INDEX, mask=mask)
        return img_p


def export_filename(scale: float, timestamp_ms: Optional[int] = None) -> str:
    """sprite-<timestampMillis>_<scale>x.gif"""
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    return f"sprite-{timestamp_ms}_{scale:g}x.gif"


def scaled_size(width: int, height: int, scale: float) -> Tuple[int, int]:
    """Export size of a frame; never below one pixel"""
    return max(1, int(width * scale)), max(1, int(height * scale))


def prepare_frame(frame: Frame, scale: float) -> Image.Image:
    """
    Decode a frame and resample it with nearest-neighbour.

    Raises:
        ExportError: The frame's pixels are not a valid RGBA raster
    """
    pixels = np.asarray(frame.pixels)
    if pixels.ndim != 3 or pixels.shape[2] != 4 or 0 in pixels.shape:
        raise ExportError(f"Could not decode frame {frame.id}: expected HxWx4 pixels, got {pixels.shape}")

    try:
        img = Image.fromarray(pixels.astype(np.uint8))
    except (TypeError, ValueError) as e:
        raise ExportError(f"Could not decode frame {frame.id}: {e}") from e

    size = scaled_size(img.width, img.height, scale)
    if size == img.size:
        return img
    return img.resize(size, Image.Resampling.NEAREST)


class DirectorySaver:
    """Save action writing exported blobs into a directory"""

    def __init__(self, directory: str | Path):
        self.directory = Path(directory)
        self.saved: List[Path] = []

    def __call__(self, data: bytes, filename: str) -> Path:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self.directory / filename
        path.write_bytes(data)
        self.saved.append(path)
        return path


@dataclass
class ExportResult:
    """
    Outcome of one export.

    frame_count counts the frames handed to the encoder. Pillow merges
    identical consecutive frames when writing, so the GIF itself may hold
    fewer frames with their delays summed.
    """
    ok: bool
    filename: Optional[str] = None
    data: Optional[bytes] = None
    frame_size: Optional[Tuple[int, int]] = None
    frame_count: int = 0
    error: Optional[str] = None


class ExportPipeline:
    """
    Drives one export: stop playback, resample frames, encode, save.

    Args:
        save: Called with (blob, filename) on success
        notify: Called with a user-facing message when an export fails
        encoder_factory: Builds a fresh GifEncoder per export
        encoder_config: Passed to encoder_factory
    """

    def __init__(
        self,
        save: Callable[[bytes, str], object],
        notify: Optional[Callable[[str], None]] = None,
        encoder_factory: Callable[[EncoderConfig], GifEncoder] = PillowGifEncoder,
        encoder_config: Optional[EncoderConfig] = None,
    ):
        self.save = save
        self.notify = notify
        self.encoder_factory = encoder_factory
        self.encoder_config = encoder_config or EncoderConfig()
        self.exporting = False

    async def export(
        self,
        frames: List[Frame],
        scale: float = 1.0,
        playback: Optional[PlaybackClock] = None,
        play_rate: float = 1.0,
    ) -> ExportResult:
        """
        Export frames, in the given order, as a GIF.

        The per-frame delay comes from the playback clock's rate when one
        is given, else from play_rate.
        """
        if not frames:
            logger.debug("Nothing to export")
            return ExportResult(ok=False, error="No frames to export")
        if self.exporting:
            logger.warning("Export already running, ignoring request")
            return ExportResult(ok=False, error="Export already in progress")

        if playback is not None:
            playback.stop()
            delay = playback.delay_ms
        else:
            delay = frame_delay_ms(play_rate)

        self.exporting = True
        try:
            encoder = self.encoder_factory(self.encoder_config)
            frame_size = None
            for frame in frames:
                img = prepare_frame(frame, scale)
                frame_size = frame_size or img.size
                encoder.add_frame(img, int(delay))

            loop = asyncio.get_running_loop()
            data = await loop.run_in_executor(None, encoder.render)

            filename = export_filename(scale)
            self.save(data, filename)
        except Exception as e:
            logger.error("Export failed: %s", e, exc_info=True)
            if self.notify is not None:
                self.notify(f"Export failed: {e}")
            return ExportResult(ok=False, error=str(e))
        finally:
            self.exporting = False

        logger.info("Exported %d frames to %s", len(frames), filename)
        return ExportResult(
            ok=True,
            filename=filename,
            data=data,
            frame_size=frame_size,
            frame_count=len(frames),
        )

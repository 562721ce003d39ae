from __future__ import annotations
import asyncio
import binascii
import logging
from io import BytesIO
from typing import Awaitable, Callable, Optional
from bleak import BleakClient, BleakScanner
from bleak.exc import BleakError
from PIL import Image, ImageEnhance

logger = logging.getLogger(__name__)

UUID_WRITE = "0000fa02-0000-1000-8000-00805f9b34fb"
UUID_NOTIFY = "0000fa03-0000-1000-8000-00805f9b34fb"
HANDSHAKE_FIRST = bytes.fromhex("08 00 01 80 0E 06 32 00")
HANDSHAKE_SECOND = bytes.fromhex("04 00 05 80")
ACKS = (
    bytes.fromhex("0C 00 01 80 81 06 32 00 00 01 00 01"),
    bytes.fromhex("08 00 05 80 0B 03 07 02"),
    bytes.fromhex("05 00 02 00 03"),
)
ACK_TIMEOUT = 5.0


def build_frame(png_bytes: bytes) -> bytes:
    """Wrap a PNG payload in the panel's transfer header (lengths + CRC32)."""
    data_length = len(png_bytes)
    frame = bytearray()
    frame += (data_length + 15).to_bytes(2, "little")
    frame.append(0x02)
    frame += b"\x00\x00"
    frame += data_length.to_bytes(2, "little")
    frame += b"\x00\x00"
    frame += binascii.crc32(png_bytes).to_bytes(4, "little")
    frame += b"\x00\x65"
    frame += png_bytes
    return bytes(frame)


def encode_png(image: Image.Image, rotation: int = 0, brightness: float = 1.0) -> bytes:
    image = image.convert("RGB")
    if rotation:
        image = image.rotate(rotation % 360, expand=False)
    if brightness != 1.0:
        image = ImageEnhance.Brightness(image).enhance(brightness)
    buffer = BytesIO()
    image.save(buffer, format="PNG", optimize=False)
    return buffer.getvalue()


class AckWatcher:
    """Turns panel notifications into one asyncio.Event per handshake stage."""

    def __init__(self) -> None:
        self.stages = [asyncio.Event() for _ in ACKS]

    def reset(self) -> None:
        for stage in self.stages:
            stage.clear()

    def handler(self, _sender, data: bytearray) -> None:
        payload = bytes(data)
        logger.debug("Panel notification %s", payload.hex("-").upper())
        for ack, stage in zip(ACKS, self.stages):
            if payload == ack:
                stage.set()

    async def wait(self, index: int, timeout: float = ACK_TIMEOUT) -> None:
        await asyncio.wait_for(self.stages[index].wait(), timeout=timeout)


class BleDisplaySession:
    def __init__(
        self,
        address: str,
        auto_reconnect: bool = True,
        reconnect_delay: float = 2.0,
        rotation: int = 0,
        brightness: float = 1.0,
        mtu: int = 512,
        max_retries: int = 3,
        scan_timeout: float = 6.0,
    ) -> None:
        if not address:
            raise ValueError("Missing panel address. Set device.address or SIGNBOARD_ADDRESS.")
        self.address = address
        self.auto_reconnect = auto_reconnect
        self.reconnect_delay = reconnect_delay
        self.rotation = rotation
        self.brightness = brightness
        self.mtu = mtu
        self.max_retries = max_retries
        self.scan_timeout = scan_timeout
        self.client: Optional[BleakClient] = None
        self.watcher = AckWatcher()

    @classmethod
    def from_config(cls, device) -> "BleDisplaySession":
        return cls(
            address=device.address,
            auto_reconnect=device.auto_reconnect,
            reconnect_delay=device.reconnect_delay,
            rotation=device.rotate,
            brightness=device.brightness,
            mtu=device.mtu,
            max_retries=device.max_retries,
            scan_timeout=device.scan_timeout,
        )

    @property
    def connected(self) -> bool:
        return self.client is not None and self.client.is_connected

    async def _retrying(self, label: str, action: Callable[[], Awaitable[None]]) -> None:
        attempt = 0
        while True:
            attempt += 1
            try:
                await action()
                return
            except (asyncio.TimeoutError, BleakError, ConnectionError, OSError) as error:
                if not self.auto_reconnect or attempt > self.max_retries:
                    await self.close()
                    raise
                logger.warning("%s failed (attempt %d): %s", label, attempt, error)
                await self.close()
                await asyncio.sleep(self.reconnect_delay)

    async def _open(self) -> None:
        if self.connected:
            return
        device = await BleakScanner.find_device_by_address(self.address, timeout=self.scan_timeout)
        if device is None:
            raise BleakError(f"Device with address {self.address} was not found")
        self.client = BleakClient(device)
        self.watcher = AckWatcher()
        await self.client.connect()
        if not self.client.is_connected:
            raise ConnectionError("Bluetooth link failed")
        await self.client.start_notify(UUID_NOTIFY, self.watcher.handler)
        logger.info("Connected to panel %s", self.address)

    async def connect(self) -> None:
        await self._retrying("Connect", self._open)

    async def close(self) -> None:
        client, self.client = self.client, None
        if client is None:
            return
        try:
            if client.is_connected:
                await client.stop_notify(UUID_NOTIFY)
            await client.disconnect()
        except (BleakError, OSError) as error:
            logger.debug("Ignoring disconnect error: %s", error)

    async def __aenter__(self) -> "BleDisplaySession":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def _transfer(self, frame: bytes, delay: float) -> None:
        await self._open()
        self.watcher.reset()
        await self.client.write_gatt_char(UUID_WRITE, HANDSHAKE_FIRST, response=False)
        await self.watcher.wait(0)
        await asyncio.sleep(delay)
        await self.client.write_gatt_char(UUID_WRITE, HANDSHAKE_SECOND, response=False)
        try:
            await self.watcher.wait(1)
        except asyncio.TimeoutError:
            # some firmware never acknowledges the second stage
            logger.debug("Second handshake stage not acknowledged")
        await asyncio.sleep(delay)
        await self.client.write_gatt_char(UUID_WRITE, frame, response=True)
        await self.watcher.wait(2)

    async def send_image(self, image: Image.Image, delay: float = 0.2) -> None:
        frame = build_frame(encode_png(image, self.rotation, self.brightness))
        await self._retrying("Frame transfer", lambda: self._transfer(frame, delay))

"""Metal price endpoints and the live update feed.

The storefront pushes `metal_price_updated` messages over a one-way
server-sent-events stream whenever an admin changes a per-gram rate.
MetalPriceFeed consumes that stream and reconnects after dropped
connections; MetalPricePanel is the headless state of the rates screen.
"""

import logging
import math
from typing import Any, AsyncIterator, Callable, Dict, List, Optional

import httpx
import structlog
from pydantic import ValidationError
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    before_sleep_log,
    retry_if_exception_type,
    wait_fixed,
)

from jewelry_admin.client.http import AdminHttpClient
from jewelry_admin.config import settings
from jewelry_admin.core.callbacks import invoke
from jewelry_admin.core.exceptions import (
    ApiError,
    JewelryAdminException,
    NetworkError,
    ResponseParseError,
)
from jewelry_admin.core.notifications import Notifier
from jewelry_admin.schemas import MetalPriceEvent, MetalRate, MetalRateListResponse

logger = structlog.get_logger(__name__)
# tenacity's before_sleep_log wants a stdlib logger
retry_logger = logging.getLogger(__name__)

METAL_PRICES_PATH = "/api/admin/metal-prices"
METAL_PRICE_EVENTS_PATH = "/api/admin/metal-prices/events"

EVENT_CONNECTED = "connected"
EVENT_PRICE_UPDATED = "metal_price_updated"


def format_rate(rate: float) -> str:
    """Render a rate the way it is typed into the input: no trailing '.0'."""
    return str(int(rate)) if float(rate).is_integer() else str(rate)


def format_inr(amount: float) -> str:
    """Group digits the Indian way (12,34,567.5)."""
    sign = "-" if amount < 0 else ""
    text = f"{abs(amount):.2f}".rstrip("0").rstrip(".")
    whole, _, fraction = text.partition(".")
    if len(whole) > 3:
        head, tail = whole[:-3], whole[-3:]
        groups = []
        while len(head) > 2:
            groups.insert(0, head[-2:])
            head = head[:-2]
        if head:
            groups.insert(0, head)
        whole = ",".join(groups + [tail])
    return f"{sign}{whole}.{fraction}" if fraction else f"{sign}{whole}"


class StreamClosed(NetworkError):
    """The server ended the event stream."""


async def parse_event_stream(lines: AsyncIterator[str]) -> AsyncIterator[MetalPriceEvent]:
    """Turn text/event-stream lines into MetalPriceEvent objects.

    Only `data:` fields are used. A blank line dispatches the buffered data;
    comment lines (leading ':') are ignored. Payloads that are not valid
    event JSON are logged and skipped. A trailing event without its blank
    line is discarded.
    """
    data_lines: List[str] = []
    async for raw_line in lines:
        line = raw_line.rstrip("\r\n")
        if not line:
            if data_lines:
                payload = "\n".join(data_lines)
                data_lines = []
                try:
                    yield MetalPriceEvent.model_validate_json(payload)
                except ValidationError as e:
                    logger.warning("metal_price_event_unparseable", payload=payload, error=str(e))
            continue

        if line.startswith(":"):
            continue

        field, _, value = line.partition(":")
        if value.startswith(" "):
            value = value[1:]
        if field == "data":
            data_lines.append(value)


class MetalPriceApi:
    """GET/PUT for the per-gram metal rates."""

    def __init__(self, client: AdminHttpClient):
        self.client = client

    async def list_rates(self) -> List[MetalRate]:
        payload = await self.client.request_json(
            "GET", METAL_PRICES_PATH, fallback_error="Unable to load metal prices"
        )
        try:
            return MetalRateListResponse.model_validate(payload or {}).metal_rates
        except ValidationError as e:
            raise ResponseParseError(METAL_PRICES_PATH, str(e)) from e

    async def update_rate(self, metal_type: str, new_rate: float) -> Dict[str, Any]:
        return await self.client.request_json(
            "PUT",
            METAL_PRICES_PATH,
            json={"metalType": metal_type, "newRate": new_rate},
            fallback_error="Failed to update metal price",
        ) or {}


class MetalPriceFeed:
    """Reconnecting consumer of the metal price event stream."""

    def __init__(
        self,
        client: AdminHttpClient,
        path: str = METAL_PRICE_EVENTS_PATH,
        reconnect_seconds: Optional[float] = None,
        max_reconnects: Optional[int] = None,
    ):
        self.client = client
        self.path = path
        self.reconnect_seconds = (
            reconnect_seconds if reconnect_seconds is not None
            else settings.METAL_PRICE_RECONNECT_SECONDS
        )
        self.max_reconnects = (
            max_reconnects if max_reconnects is not None
            else settings.METAL_PRICE_MAX_RECONNECTS
        )
        self.logger = logger.bind(path=path)
        # failed connections since the last delivered event
        self.consecutive_failures = 0

    async def events(self) -> AsyncIterator[MetalPriceEvent]:
        """Yield events from a single connection.

        Raises:
            ApiError: The stream endpoint answered with a non-2xx status
            NetworkError: The connection failed or dropped
            StreamClosed: The server closed the stream
        """
        try:
            async with self.client.stream(
                "GET", self.path, headers={"Accept": "text/event-stream"}
            ) as response:
                if not response.is_success:
                    await response.aread()
                    raise ApiError(response.status_code, "Unable to open metal price updates")

                self.logger.info("metal_price_stream_opened")
                async for event in parse_event_stream(response.aiter_lines()):
                    self.consecutive_failures = 0
                    yield event
        except httpx.RequestError as e:
            raise NetworkError(self.path, str(e)) from e

        raise StreamClosed(self.path, "stream closed by server")

    def _out_of_reconnects(self, retry_state: RetryCallState) -> bool:
        self.consecutive_failures += 1
        return self.consecutive_failures > self.max_reconnects

    async def listen(self, handler: Callable[[MetalPriceEvent], Any]) -> None:
        """Deliver every event to handler, reconnecting after dropped connections.

        The reconnect budget applies per outage: any delivered event resets
        it, so a feed whose connections keep working runs indefinitely. A
        stream that closes before sending anything counts as a failure.
        After max_reconnects failed reconnects in a row the last error is
        re-raised. HTTP errors (401 included) are not retried.
        """
        self.consecutive_failures = 0
        retrying = AsyncRetrying(
            stop=self._out_of_reconnects,
            wait=wait_fixed(self.reconnect_seconds),
            retry=retry_if_exception_type(NetworkError),
            before_sleep=before_sleep_log(retry_logger, logging.WARNING),
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                async for event in self.events():
                    await invoke(handler, event)


class MetalPricePanel:
    """Rates screen: current rates, per-metal input values and live refresh."""

    def __init__(self, api: MetalPriceApi, notifier: Optional[Notifier] = None):
        self.api = api
        self.notifier = notifier or Notifier()

        self.rates: List[MetalRate] = []
        self.new_rates: Dict[str, str] = {}
        self.updating: Dict[str, bool] = {}
        self.loading = False

    async def refresh(self) -> None:
        self.loading = True
        try:
            self.rates = await self.api.list_rates()
            self.new_rates = {r.metal_type: format_rate(r.rate) for r in self.rates}
        except JewelryAdminException as e:
            logger.error("metal_prices_fetch_failed", error=e.message)
            self.notifier.error(e.message or "Failed to load metal prices")
        finally:
            self.loading = False

    def set_new_rate(self, metal_type: str, value: str) -> None:
        self.new_rates[metal_type] = value

    async def update_rate(self, metal_type: str) -> bool:
        """Validate the typed rate for one metal and push it to the server."""
        new_rate_text = (self.new_rates.get(metal_type) or "").strip()
        if not new_rate_text:
            self.notifier.error("Please enter a valid rate")
            return False

        try:
            new_rate = float(new_rate_text)
        except ValueError:
            new_rate = math.nan
        if not math.isfinite(new_rate) or new_rate <= 0:
            self.notifier.error("Rate must be a positive number")
            return False

        self.updating[metal_type] = True
        try:
            result = await self.api.update_rate(metal_type, new_rate)
        except JewelryAdminException as e:
            logger.error("metal_price_update_failed", metal_type=metal_type, error=e.message)
            self.notifier.error(e.message or "Failed to update metal price")
            return False
        finally:
            self.updating[metal_type] = False

        self.notifier.success(result.get("message") or f"Updated {metal_type} rate successfully")

        try:
            rates = await self.api.list_rates()
        except JewelryAdminException as e:
            logger.warning("metal_prices_refresh_failed", error=e.message)
            self.rates = [
                r.model_copy(update={"rate": new_rate}) if r.metal_type == metal_type else r
                for r in self.rates
            ]
            return True

        self.rates = rates
        for rate in rates:
            # keep exactly what was typed for the metal just updated
            if rate.metal_type == metal_type:
                self.new_rates[metal_type] = new_rate_text
            else:
                self.new_rates[rate.metal_type] = format_rate(rate.rate)
        return True

    async def handle_event(self, event: MetalPriceEvent) -> None:
        if event.type == EVENT_PRICE_UPDATED:
            rate = format_inr(event.new_rate or 0)
            self.notifier.success(
                f"{event.metal_type} rate updated to ₹{rate}/gram. "
                f"{event.updated_count} products updated.",
                title="Price Updated",
            )
            await self.refresh()
        elif event.type == EVENT_CONNECTED:
            logger.info("metal_price_feed_connected")
        else:
            logger.debug("metal_price_event_ignored", event_type=event.type)

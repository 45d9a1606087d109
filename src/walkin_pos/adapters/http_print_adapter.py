"""Print adapter for an HTTP print server.

The print server receives the self-contained HTML markup of the bill and
answers once the receipt has left the printer.
"""

import logging

import httpx

from walkin_pos.adapters.base_printer import PrintAdapter, PrintFailed
from walkin_pos.models.order_models import ReceiptDocument
from walkin_pos.services.receipt_service import render_receipt_html

logger = logging.getLogger(__name__)


class HttpPrintAdapter(PrintAdapter):
    """Adapter posting receipt markup to a print server."""

    def __init__(self, print_service_url: str, timeout_seconds: float = 30.0) -> None:
        """Initialize the HTTP print adapter.

        Args:
            print_service_url: Endpoint accepting ``text/html`` print jobs
            timeout_seconds: How long to wait for the job to complete
        """
        super().__init__("http")
        self.print_service_url = print_service_url
        self.timeout_seconds = timeout_seconds

    async def print_receipt(self, document: ReceiptDocument) -> None:
        """Send the rendered receipt to the print server.

        Args:
            document: Receipt to print

        Raises:
            PrintFailed: If the job was not accepted
        """
        markup = render_receipt_html(document)

        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                response = await client.post(
                    self.print_service_url,
                    content=markup.encode("utf-8"),
                    headers={"Content-Type": "text/html; charset=utf-8"},
                )
                response.raise_for_status()

        except (httpx.HTTPStatusError, httpx.RequestError) as e:
            logger.error(f"Print job to {self.print_service_url} failed: {e}")
            raise PrintFailed(f"Print service rejected the receipt: {e}") from e

        logger.info(f"Receipt printed via print server, total {document.total}")

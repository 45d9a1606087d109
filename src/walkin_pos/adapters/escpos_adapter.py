"""Print adapter for networked ESC/POS thermal printers."""

import asyncio
import logging

from escpos.exceptions import Error as EscposError
from escpos.printer import Network

from walkin_pos.adapters.base_printer import PrintAdapter, PrintFailed
from walkin_pos.models.order_models import ReceiptDocument
from walkin_pos.services.receipt_service import DEFAULT_TEXT_WIDTH, render_receipt_text

logger = logging.getLogger(__name__)


class EscposPrintAdapter(PrintAdapter):
    """Adapter printing the fixed-width rendering of a receipt over TCP.

    The escpos driver is blocking, so each job runs in a worker thread.
    """

    def __init__(
        self,
        host: str,
        port: int = 9100,
        timeout_seconds: float = 30.0,
        line_width: int = DEFAULT_TEXT_WIDTH,
        currency_symbol: str | None = "Rs.",
    ) -> None:
        """Initialize the ESC/POS adapter.

        Args:
            host: Printer hostname or IP address
            port: Raw printing port
            timeout_seconds: Socket timeout
            line_width: Characters per line for the paper roll
            currency_symbol: Replacement for the receipt's symbol, since most
                printer code pages lack ``₹``; None keeps the original
        """
        super().__init__("escpos")
        self.host = host
        self.port = port
        self.timeout_seconds = timeout_seconds
        self.line_width = line_width
        self.currency_symbol = currency_symbol

    def _print_blocking(self, text: str) -> None:
        printer = Network(self.host, port=self.port, timeout=self.timeout_seconds)
        try:
            printer.text(text)
            printer.cut()
        finally:
            printer.close()

    async def print_receipt(self, document: ReceiptDocument) -> None:
        """Print the receipt and cut the paper.

        Args:
            document: Receipt to print

        Raises:
            PrintFailed: If the printer could not be reached or reported an error
        """
        if self.currency_symbol is not None:
            document = document.model_copy(update={"currency_symbol": self.currency_symbol})
        text = render_receipt_text(document, width=self.line_width)

        try:
            await asyncio.to_thread(self._print_blocking, text)
        except (EscposError, OSError) as e:
            logger.error(f"ESC/POS printer at {self.host}:{self.port} failed: {e}")
            raise PrintFailed(f"Thermal printer error: {e}") from e

        logger.info(f"Receipt printed on {self.host}:{self.port}, total {document.total}")

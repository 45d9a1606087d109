"""Base adapter for receipt printers.

Unlike the catalog and order clients, printers raise on failure: the pipeline
must know a receipt was not printed before it records any order.
"""

from abc import ABC, abstractmethod

from walkin_pos.models.order_models import ReceiptDocument


class PrintFailed(Exception):
    """Raised when a receipt could not be printed."""


class PrintAdapter(ABC):
    """Abstract base class for print service integrations.

    A print either completes or raises PrintFailed; no partial state is exposed.
    """

    def __init__(self, printer_name: str) -> None:
        """Initialize the print adapter.

        Args:
            printer_name: Name used in logs (e.g., 'http', 'escpos')
        """
        self.printer_name = printer_name

    @abstractmethod
    async def print_receipt(self, document: ReceiptDocument) -> None:
        """Print a receipt document.

        Args:
            document: The bill built from the cart snapshot

        Raises:
            PrintFailed: If the receipt could not be printed
        """
        pass

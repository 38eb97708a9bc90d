"""
@file interfaces.py
@brief Abstract execution surface driven by the playback engine.

The engine never resolves selectors or talks to a rendering engine
itself. Every effect goes through an ISurface implementation supplied
by the host (a browser page, a desktop UI bridge, a test double).
"""

from abc import ABC, abstractmethod
from typing import Any, Optional


class ISurface(ABC):
    """
    Execution capability for one live UI surface.

    Implementations raise on failure; the step executor turns any raised
    exception into a failed step result. Timeouts are in seconds and
    implementations are expected to honor them.
    """

    @abstractmethod
    def click(
        self,
        selector: str,
        timeout: float,
        text: Optional[str] = None,
        context: Optional[str] = None,
    ) -> Any:
        """
        Click an element.

        Args:
            selector: Element selector
            timeout: Maximum time to wait for the element, in seconds
            text: Optional text content the element must match
            context: Optional nested context (frame, webview) to act in

        Returns:
            Optional captured value
        """
        pass

    @abstractmethod
    def type_text(
        self,
        selector: str,
        text: str,
        timeout: float,
        context: Optional[str] = None,
    ) -> Any:
        """
        Type text into an element.

        Args:
            selector: Element selector
            text: Text to type
            timeout: Maximum time to wait for the element, in seconds
            context: Optional nested context to act in
        """
        pass

    @abstractmethod
    def evaluate(self, code: str, context: Optional[str] = None) -> Any:
        """
        Evaluate a code body on the surface.

        Returns:
            Value produced by the code
        """
        pass

    @abstractmethod
    def hover(self, selector: str, timeout: float, context: Optional[str] = None) -> Any:
        """Move the pointer over an element."""
        pass

    @abstractmethod
    def press_key(self, key: str) -> Any:
        """Send a key or key chord to the focused element."""
        pass

    @abstractmethod
    def exists(self, selector: str, context: Optional[str] = None) -> bool:
        """
        Check whether an element currently exists. Must not block.

        Returns:
            True if the selector matches an element right now
        """
        pass

    @abstractmethod
    def capture(self, selector: Optional[str] = None) -> bytes:
        """
        Capture a PNG image of the surface or of a single element.

        Returns:
            PNG bytes
        """
        pass

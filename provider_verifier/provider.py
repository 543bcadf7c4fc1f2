"""
Instrumented provider instance.

Runs the user service app (business routes plus the state switchboard) on a
single uvicorn listener. The listening socket is bound in the caller's thread
so bind errors surface immediately, and ``wait_until_ready`` gives the
orchestrator an explicit readiness barrier before any verification traffic is
sent.
"""

from __future__ import annotations

import logging
import socket
import threading
import time
from typing import Optional

import uvicorn

from .api.provider_states import STATES_SETUP_PATH
from .core.exceptions import ProviderStartupError
from .core.state_store import ProviderStateStore
from .main import create_app

logger = logging.getLogger(__name__)

READINESS_POLL_INTERVAL = 0.05


def get_free_port(host: str = "127.0.0.1") -> int:
    """Ask the OS for a currently unused TCP port on ``host``."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind((host, 0))
        return sock.getsockname()[1]


class InstrumentedProvider:
    """
    An ephemeral provider listener for one verification run.

    The port is fixed at construction time; ``base_url`` and
    ``states_setup_url`` are derived from it and never change.
    """

    def __init__(
        self,
        store: Optional[ProviderStateStore] = None,
        host: str = "127.0.0.1",
        port: Optional[int] = None,
        log_level: str = "warning",
    ):
        self.store = store if store is not None else ProviderStateStore()
        self.host = host
        self.port = port if port is not None else get_free_port(host)
        self.app = create_app(self.store)
        self._server = uvicorn.Server(
            uvicorn.Config(
                self.app,
                host=self.host,
                port=self.port,
                log_level=log_level,
                log_config=None,
                lifespan="off",
            )
        )
        self._thread: Optional[threading.Thread] = None
        self._error: Optional[BaseException] = None

    @property
    def base_url(self) -> str:
        return f"http://{self.host}:{self.port}"

    @property
    def states_setup_url(self) -> str:
        return f"{self.base_url}{STATES_SETUP_PATH}"

    @property
    def is_ready(self) -> bool:
        return bool(self._server.started)

    def _bind(self) -> socket.socket:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            sock.bind((self.host, self.port))
            sock.listen(128)
        except OSError as e:
            sock.close()
            raise ProviderStartupError(f"Cannot listen on {self.host}:{self.port}: {e}") from e
        return sock

    def serve(self) -> None:
        """Bind and serve in the current thread until the listener closes."""
        sock = self._bind()
        logger.info(f"Provider starting: {self.base_url}")
        self._server.run(sockets=[sock])
        logger.info(f"Provider terminated: {self.base_url}")

    def _serve_in_thread(self, sock: socket.socket) -> None:
        try:
            self._server.run(sockets=[sock])
        except (Exception, SystemExit) as e:
            # uvicorn reports startup failures with sys.exit()
            self._error = e
            logger.error(f"Provider listener failed: {e!r}")
        finally:
            logger.info(f"Provider terminated: {self.base_url}")

    def start(self) -> "InstrumentedProvider":
        """
        Start serving on a background daemon thread.

        Raises:
            ProviderStartupError: If the port cannot be bound
        """
        if self._thread is not None:
            raise ProviderStartupError("Provider already started")

        sock = self._bind()
        logger.info(f"Provider starting: {self.base_url}")
        self._thread = threading.Thread(
            target=self._serve_in_thread,
            args=(sock,),
            name=f"provider-{self.port}",
            daemon=True,
        )
        self._thread.start()
        return self

    def wait_until_ready(self, timeout: float = 10.0) -> None:
        """
        Block until the listener accepts requests.

        Raises:
            ProviderStartupError: If the listener died or was not ready in time
        """
        if self._thread is None:
            raise ProviderStartupError("Provider was never started")

        deadline = time.monotonic() + timeout
        while not self.is_ready:
            if self._error is not None or not self._thread.is_alive():
                raise ProviderStartupError(f"Provider listener exited during startup: {self._error!r}")
            if time.monotonic() >= deadline:
                raise ProviderStartupError(f"Provider not ready after {timeout:.1f}s at {self.base_url}")
            time.sleep(READINESS_POLL_INTERVAL)
        logger.info(f"Provider ready: {self.base_url}")

    def stop(self, timeout: float = 5.0) -> None:
        self._server.should_exit = True
        if self._thread is not None:
            self._thread.join(timeout)

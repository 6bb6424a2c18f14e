"""HTTP transport used by the provisioning client.

The client only needs one verb: POST a JSON body and read back the
status and bytes.  :class:`UrllibTransport` is the default and supports
a custom CA trust anchor; anything else (connection pooling, proxies,
test doubles) can implement :class:`HttpTransport`.
"""

from __future__ import annotations

import abc
import logging
import ssl
import threading
import urllib.error
import urllib.request
from dataclasses import dataclass, field

from localcert.errors import TransportError

log = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "localcert-python"


@dataclass(frozen=True)
class HttpResponse:
    status: int
    body: bytes = b""
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300  # noqa: PLR2004

    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")


class HttpTransport(abc.ABC):
    """Performs HTTP exchanges.  Must be safe to share across sessions."""

    @abc.abstractmethod
    def post(
        self,
        url: str,
        body: bytes,
        headers: dict[str, str],
    ) -> HttpResponse:
        """POST *body* to *url*; return the response for any status.

        Raises
        ------
        TransportError
            If no response could be obtained at all.

        """


class UrllibTransport(HttpTransport):
    """Standard-library transport with optional CA pinning.

    Parameters
    ----------
    timeout_seconds:
        Socket timeout per request.
    ca_cert_path:
        PEM bundle to trust instead of the system store.
    user_agent:
        Value of the ``User-Agent`` header.

    """

    def __init__(
        self,
        *,
        timeout_seconds: float = 30,
        ca_cert_path: str | None = None,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        self._timeout = timeout_seconds
        self._ca_cert_path = ca_cert_path
        self._user_agent = user_agent
        self._ssl_ctx: ssl.SSLContext | None = None
        self._ssl_lock = threading.Lock()

    def _get_ssl_context(self) -> ssl.SSLContext:
        with self._ssl_lock:
            if self._ssl_ctx is None:
                ctx = ssl.create_default_context()
                if self._ca_cert_path:
                    ctx.load_verify_locations(self._ca_cert_path)
                self._ssl_ctx = ctx
            return self._ssl_ctx

    def post(
        self,
        url: str,
        body: bytes,
        headers: dict[str, str],
    ) -> HttpResponse:
        req = urllib.request.Request(url, data=body, method="POST")  # noqa: S310
        req.add_header("User-Agent", self._user_agent)
        for key, value in headers.items():
            req.add_header(key, value)

        handler = urllib.request.HTTPSHandler(context=self._get_ssl_context())
        opener = urllib.request.build_opener(handler)

        try:
            with opener.open(req, timeout=self._timeout) as resp:
                return HttpResponse(
                    status=resp.status,
                    body=resp.read(),
                    headers=dict(resp.headers.items()),
                )
        except urllib.error.HTTPError as exc:
            try:
                err_body = exc.read()
            except OSError:
                err_body = b""
            return HttpResponse(
                status=exc.code,
                body=err_body,
                headers=dict(exc.headers.items()) if exc.headers else {},
            )
        except (urllib.error.URLError, OSError) as exc:
            msg = f"Failed to reach {url}: {exc}"
            raise TransportError(msg) from exc

"""
Client configuration.

Dataclasses describing how drivepy talks to the Drive endpoints: transport
settings for the shared aiohttp session, retry policy for metadata calls and
per-upload options for the resumable engine.
"""
from dataclasses import dataclass, field, fields
from typing import Optional, Dict, Any
from urllib.parse import quote, urlsplit
import ssl


DRIVE_API_URL = 'https://www.googleapis.com/drive/v3/'
DRIVE_UPLOAD_URL = 'https://www.googleapis.com/upload/drive/v3/files/'


@dataclass
class ProxyConfig:
    """
    Outgoing proxy.

    Credentials, when given, are embedded in the proxy URL handed to aiohttp.
    """
    url: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None

    def to_aiohttp_proxy(self) -> Optional[str]:
        """Proxy URL in the form aiohttp expects, or None."""
        if not self.url:
            return None
        if not (self.username and self.password) or '://' not in self.url:
            return self.url

        parts = urlsplit(self.url)
        userinfo = f"{quote(self.username, safe='')}:{quote(self.password, safe='')}"
        return f"{parts.scheme}://{userinfo}@{parts.netloc}{parts.path}"


@dataclass
class SSLConfig:
    """TLS settings for the connector."""
    verify: bool = True
    ca_file: Optional[str] = None
    cert_file: Optional[str] = None
    key_file: Optional[str] = None
    check_hostname: bool = True

    def create_ssl_context(self):
        """
        Build the value passed as ``ssl=`` to TCPConnector.

        Returns False when verification is off, otherwise an SSLContext.
        """
        if not self.verify:
            return False

        context = ssl.create_default_context(cafile=self.ca_file)
        if self.cert_file:
            context.load_cert_chain(self.cert_file, keyfile=self.key_file)
        context.check_hostname = self.check_hostname
        return context


@dataclass
class TimeoutConfig:
    """Session-wide timeouts in seconds (None disables one)."""
    total: Optional[float] = 300.0
    connect: Optional[float] = 30.0
    sock_connect: Optional[float] = 30.0
    sock_read: Optional[float] = 120.0

    def to_aiohttp_timeout(self):
        import aiohttp
        return aiohttp.ClientTimeout(
            total=self.total,
            connect=self.connect,
            sock_connect=self.sock_connect,
            sock_read=self.sock_read
        )


@dataclass
class RetryConfig:
    """
    Retry policy of AsyncAPIClient.

    Applies to metadata, listing and download calls only; uploads back off
    through BackoffScheduler instead.
    """
    max_retries: int = 4
    base_delay: float = 0.25
    max_delay: float = 16.0
    exponential_base: float = 2.0
    retry_on_status: tuple = (429, 500, 502, 503, 504)

    def calculate_delay(self, attempt: int) -> float:
        """Seconds to wait before retry number ``attempt + 1``."""
        return min(self.base_delay * self.exponential_base ** attempt, self.max_delay)


@dataclass
class UploadOptions:
    """
    Per-upload options for the resumable upload engine.

    Attributes:
        chunk_size: Maximum bytes per transmission, 0 sends the remainder at once
        base_url: Resumable upload endpoint (target id is appended to it)
        extra_params: Additional query parameters for session creation
        max_retries: Cap on consecutive transient failures, None retries forever
        deadline: Seconds after which transient failures stop being retried,
            None retries forever
        timeout: Per-request timeout in seconds
        proxy: Proxy URL for session creation, chunks and probes
    """
    chunk_size: int = 20 * 1000 * 1000
    base_url: str = DRIVE_UPLOAD_URL
    extra_params: Dict[str, str] = field(default_factory=dict)
    max_retries: Optional[int] = None
    deadline: Optional[float] = None
    timeout: int = 120
    proxy: Optional[str] = None

    def __post_init__(self):
        if self.chunk_size < 0:
            raise ValueError("Chunk size cannot be negative")


@dataclass
class APIConfig:
    """
    Everything DriveClient and AsyncAPIClient need besides the token.

    Example:
        >>> config = APIConfig.with_proxy('http://proxy:3128', chunk_size=8 * 1024 * 1024)
        >>> drive = DriveClient(token, config=config)
    """
    api_url: str = DRIVE_API_URL
    upload_url: str = DRIVE_UPLOAD_URL
    user_agent: str = 'drivepy/1.0.0'

    proxy: Optional[ProxyConfig] = None
    ssl: SSLConfig = field(default_factory=SSLConfig)
    timeout: TimeoutConfig = field(default_factory=TimeoutConfig)
    retry: RetryConfig = field(default_factory=RetryConfig)

    # Sent with every request of the shared session
    extra_headers: Dict[str, str] = field(default_factory=dict)

    log_level: int = 20  # logging.INFO

    # TCPConnector pool
    limit: int = 100
    limit_per_host: int = 10

    # Chunk size for content written by create/update
    chunk_size: int = 20 * 1000 * 1000

    @classmethod
    def default(cls) -> 'APIConfig':
        return cls()

    @classmethod
    def with_proxy(cls, proxy_url: str, **kwargs) -> 'APIConfig':
        """Configuration routed through proxy_url."""
        return cls(proxy=ProxyConfig(url=proxy_url), **kwargs)

    @classmethod
    def insecure(cls, **kwargs) -> 'APIConfig':
        """Configuration that skips certificate checks (testing against local fakes)."""
        return cls(ssl=SSLConfig(verify=False, check_hostname=False), **kwargs)

    def upload_options(self, base: Optional[UploadOptions] = None, **overrides) -> UploadOptions:
        """
        Upload options derived from this configuration.

        Fields of ``base`` that differ from the UploadOptions defaults win
        over the configured values, keyword overrides win over both.
        """
        options: Dict[str, Any] = {
            'chunk_size': self.chunk_size,
            'base_url': self.upload_url,
            'proxy': self.proxy.to_aiohttp_proxy() if self.proxy else None,
        }
        if base is not None:
            defaults = UploadOptions()
            for item in fields(UploadOptions):
                value = getattr(base, item.name)
                if value != getattr(defaults, item.name):
                    options[item.name] = value
        options.update(overrides)
        return UploadOptions(**options)

    def get_connector_kwargs(self) -> Dict[str, Any]:
        """Keyword arguments for aiohttp.TCPConnector."""
        return {
            'limit': self.limit,
            'limit_per_host': self.limit_per_host,
            'ssl': self.ssl.create_ssl_context(),
        }

    def get_session_kwargs(self) -> Dict[str, Any]:
        """Keyword arguments for aiohttp.ClientSession."""
        headers = {'User-Agent': self.user_agent}
        headers.update(self.extra_headers)
        return {
            'headers': headers,
            'timeout': self.timeout.to_aiohttp_timeout(),
        }

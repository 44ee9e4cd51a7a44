"""Puter Python SDK.

This SDK provides a client for the Puter cloud platform: authentication,
file storage, key-value storage, apps and static hosting, AI inference and
usage reporting.

Basic Usage:
    ```python
    from puter_sdk import Puter

    # Async usage
    async with Puter() as client:
        await client.auth.sign_in("alice", "s3cret")
        entries = await client.fs.readdir("/alice/Desktop")
        reply = await client.ai.chat("Hello, world!")

    # Sync usage
    from puter_sdk import PuterSync

    with PuterSync() as client:
        client.auth.sign_in("alice", "s3cret")
        app = client.apps.create("my-app", description="My first app")
        print(app.index_url)
    ```

Streaming:
    ```python
    async with Puter() as client:
        stream = await client.ai.chat("Tell me a story", stream=True)
        async for line in stream.aiter_lines():
            print(line)
    ```
"""

from ._sync import PuterSync
from .auth import (
    Credentials,
    Session,
    clear_credentials,
    get_api_key,
    load_credentials_from_file,
    save_credentials_to_file,
)
from .client import Puter
from .config import SDK_VERSION, load_env
from .exceptions import (
    AuthenticationError,
    BackendError,
    ConflictError,
    ConnectionError,
    NotFoundError,
    PuterError,
    StreamError,
    TimeoutError,
    TransportError,
    TwoFactorRequiredError,
    ValidationError,
)
from .models import (
    AppRecord,
    ChatCompletion,
    ChatMessage,
    ChatOptions,
    ContentPart,
    CreatedApp,
    DirectoryHandle,
    FileEntry,
    LoginResult,
    SubdomainRecord,
    User,
)
from .streaming import ByteStream

__version__ = SDK_VERSION

__all__ = [
    # Version
    "__version__",
    # Main clients
    "Puter",
    "PuterSync",
    # Models
    "AppRecord",
    "ChatCompletion",
    "ChatMessage",
    "ChatOptions",
    "ContentPart",
    "CreatedApp",
    "DirectoryHandle",
    "FileEntry",
    "LoginResult",
    "SubdomainRecord",
    "User",
    # Streaming
    "ByteStream",
    # Auth
    "Credentials",
    "Session",
    "get_api_key",
    "load_credentials_from_file",
    "save_credentials_to_file",
    "clear_credentials",
    # Config
    "load_env",
    # Exceptions
    "PuterError",
    "ValidationError",
    "BackendError",
    "AuthenticationError",
    "TwoFactorRequiredError",
    "NotFoundError",
    "ConflictError",
    "TransportError",
    "ConnectionError",
    "TimeoutError",
    "StreamError",
]

"""
bos-cli - client library and shell for the Bankrs OS API.

Layers:
- core: Typed dataclasses, HTTP client, logging
- sdk: Session clients (anonymous, developer, application, user)
- cli: bosh, an interactive command shell
"""

__version__ = "0.1.0"

from bos_cli.sdk import AppClient, BOSClient, DevClient, UserClient  # noqa: E402

__all__ = ["AppClient", "BOSClient", "DevClient", "UserClient"]

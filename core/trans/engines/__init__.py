"""Translation provider implementations.

Importing this package registers the bundled providers on TranslationProvider.registered.

Modules:
- deeplx_client: Retrying HTTP client for the DeepLX endpoint.
- deeplx_provider: TranslationProvider backed by DeepLX.
"""

from core.trans.engines.deeplx_client import DeepLXClient
from core.trans.engines.deeplx_provider import DeepLXProvider

__all__: list[str] = ["DeepLXClient", "DeepLXProvider"]

"""Error taxonomy for the catalog sync and export pipeline.

Every CatalogError carries a user_message: the text shown in the UI error
banner (Portuguese, matching the rest of the storefront). The API layer
turns these into JSON error responses at a single boundary.

RemoteCatalogError subclasses come from the WooCommerce client and are
wrapped in SyncFailedError by the sync service, with the original error
kept as __cause__.
"""

from __future__ import annotations


class CatalogError(Exception):
    """Base class for all catalog pipeline errors."""

    user_message = "Erro inesperado no catálogo de produtos."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.user_message)
        if message:
            self.user_message = message


class SettingsMissingError(CatalogError):
    """No company_settings row exists, so there is nothing to sync against."""

    user_message = (
        "Configurações do WooCommerce não encontradas. "
        "Por favor, configure primeiro."
    )


# ── Remote catalog ─────────────────────────────────────────────────────────


class RemoteCatalogError(CatalogError):
    """Failure talking to the remote WooCommerce REST API."""

    user_message = "Erro na API do WooCommerce."


class RemoteAuthError(RemoteCatalogError):
    """The remote store rejected the API key/secret (HTTP 401/403)."""

    user_message = (
        "O WooCommerce recusou as credenciais. "
        "Verifique a chave e o segredo nas configurações."
    )

    def __init__(self, status_code: int) -> None:
        self.status_code = status_code
        super().__init__(f"{self.user_message} (HTTP {status_code})")


class RemoteApiError(RemoteCatalogError):
    """Any other non-success response or transport failure."""

    def __init__(self, status_code: int | None, body: str) -> None:
        self.status_code = status_code
        self.body = body
        status = status_code if status_code is not None else "sem resposta"
        super().__init__(f"Erro na API do WooCommerce: {status} - {body}")


class RemoteShapeError(RemoteCatalogError):
    """The payload is not a list of product records (incompatible API version)."""

    user_message = "Resposta inválida da API do WooCommerce."


# ── Sync ───────────────────────────────────────────────────────────────────


class SyncFailedError(CatalogError):
    """A sync attempt failed; __cause__ holds the underlying error."""

    user_message = "Erro ao sincronizar produtos do WooCommerce."


class SyncInProgressError(CatalogError):
    """A sync was requested while the same workspace is already syncing."""

    user_message = "Uma sincronização já está em andamento."


# ── Workspace / export ─────────────────────────────────────────────────────


class RenderPreconditionError(CatalogError):
    """Export requested with no products selected."""

    user_message = "Selecione pelo menos um produto para gerar o PDF."


class PriceUpdateError(CatalogError):
    """Persisting a catalog price edit failed; the edit was rolled back."""

    user_message = "Não foi possível atualizar o preço. Por favor, tente novamente."

    def __init__(self, product_id: str) -> None:
        self.product_id = product_id
        super().__init__()


class ProductNotFoundError(CatalogError):
    """No product row with the given id."""

    user_message = "Produto não encontrado."

    def __init__(self, product_id: str) -> None:
        self.product_id = product_id
        super().__init__(f"{self.user_message} ({product_id})")

# src/models/product.py

"""Product record model shared by adapters, the API and exporters."""

from dataclasses import dataclass
from typing import Any

from src.models.store import FailureKind, Store, resolve_failure


@dataclass(frozen=True)
class StoreError:
    """Error payload attached to a placeholder record."""

    code: int
    message: str
    kind: FailureKind = FailureKind.UNEXPECTED

    def to_dict(self) -> dict[str, Any]:
        """Serialise to the public ``{code, message}`` shape."""
        return {"code": self.code, "message": self.message}


@dataclass
class ProductRecord:
    """A single comparable item, or a placeholder for a failed lookup."""

    name: str
    regular_price: str
    promo_price: str
    url: str = ""
    image_url: str = ""
    store: str = ""
    error: StoreError | None = None

    @property
    def is_error(self) -> bool:
        return self.error is not None

    def to_dict(self) -> dict[str, Any]:
        """Serialise with snake_case keys; ``error`` only when set."""
        data: dict[str, Any] = {
            "name": self.name,
            "regular_price": self.regular_price,
            "promo_price": self.promo_price,
            "url": self.url,
            "image_url": self.image_url,
            "store": self.store,
        }
        if self.error is not None:
            data["error"] = self.error.to_dict()
        return data

    @classmethod
    def failed(cls, store: Store, kind: FailureKind) -> "ProductRecord":
        """Build the error placeholder for *store* and *kind*."""
        code, message = resolve_failure(store, kind)
        return cls(
            name="",
            regular_price="",
            promo_price="",
            url="",
            image_url="",
            store=store.label,
            error=StoreError(code=code, message=message, kind=kind),
        )

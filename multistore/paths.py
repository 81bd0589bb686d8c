"""Parsing of multi-store query paths and deciding when proofs are attached."""

from __future__ import annotations


class UnknownRequestError(ValueError):
    """A query could not be routed to a store."""

    def __init__(self, message: str) -> None:
        super().__init__(f"{message}: unknown request")
        self.detail = message


def parse_path(path: str) -> tuple[str, str]:
    """Split ``/<store>[/<subpath>]`` into the store name and the subpath.

    The subpath keeps its leading slash and is empty when absent.
    Raises UnknownRequestError if the path does not start with a slash.
    """
    if not path.startswith("/"):
        raise UnknownRequestError(f"invalid path: {path}")
    store_name, sep, rest = path[1:].partition("/")
    if not sep:
        return store_name, ""
    return store_name, "/" + rest


def require_proof(subpath: str) -> bool:
    """Whether a query on this subpath includes a proof in its response.

    Only key queries carry proofs.
    """
    return subpath == "/key"
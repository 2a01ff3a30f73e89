from fastapi import APIRouter


def get_router(prefix: str, tag: str) -> APIRouter:
    """
    Common API router factory

    Args:
        prefix (str): path segment of the resource (e.g. "account", "guilds")
        tag (str): OpenAPI tag

    Returns:
        APIRouter: router mounted at /{prefix}
    """
    # avoid duplicated slashes / upper case paths
    prefix = prefix.strip("/").lower()

    router = APIRouter(prefix=f"/{prefix}", tags=[tag])

    return router

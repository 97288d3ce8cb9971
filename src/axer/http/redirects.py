"""Redirect following on top of httpx.

The client is created with automatic redirects disabled, so every
redirect response carries ``next_request``, the follow-up request httpx
built for it (method rewriting, body handling and cookies included).
"""

import logging

import httpx

logger = logging.getLogger(__name__)


async def follow_redirect(
    response: httpx.Response,
    client: httpx.AsyncClient,
    max_redirects: int = 10,
) -> httpx.Response:
    """Resolve the final response of a redirect chain.

    Args:
        response: Response of the initial request
        client: Client that issued the request
        max_redirects: Maximum number of hops to follow

    Returns:
        Final response; its ``history`` holds the intermediate responses

    Raises:
        httpx.TooManyRedirects: If the chain is longer than max_redirects
    """
    history = list(response.history)

    while response.next_request is not None:
        if len(history) >= max_redirects:
            raise httpx.TooManyRedirects(
                f"Exceeded maximum allowed redirects ({max_redirects})",
                request=response.next_request,
            )

        next_request = response.next_request
        logger.debug(f"Redirect {response.status_code}: {next_request.method} {next_request.url}")

        await response.aclose()
        history.append(response)
        response = await client.send(next_request, follow_redirects=False)

    response.history = history
    return response

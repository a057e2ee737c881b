"""
Client Builder & Handlers
=========================

Registering delegating handlers on an HttpClientBuilder. A MockTransport
stands in for the network so the example runs offline.
"""

import logging

import httpx

import httpfluent


def echo(request: httpx.Request) -> httpx.Response:
    return httpx.Response(
        200,
        json={
            "url": str(request.url),
            "authorization": request.headers.get("Authorization"),
            "client": request.headers.get("X-Client-Name"),
        },
    )


class ExpiredTokenProvider(httpfluent.TokenProvider):
    def get_token(self) -> httpfluent.Token:
        raise httpfluent.TokenError(
            httpfluent.ErrorDetail(
                code="invalid_grant",
                message="The refresh token has expired.",
                target="https://login.example.com/token",
            )
        )


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(name)s: %(message)s")

    providers = httpfluent.TokenProviderFactory().register(
        "graph", httpfluent.StaticTokenProvider("graph-token")
    )

    # ── Named token provider + api-version ───────────────────────────────
    print("── Named token provider ────────────────────────────────────────")
    builder = (
        httpfluent.HttpClientBuilder(providers)
        .add_header("X-Client-Name", "example")
        .add_token_provider("graph")
        .add_api_version("2024-01-01")
    )
    with builder.build(httpx.MockTransport(echo), base_url="https://api.example.com") as client:
        print(f"  {client.get('/items', params={'api-version': 'old'}).json()}")
    print()

    # ── Failing provider: logged, request still sent ─────────────────────
    print("── Failing token provider ──────────────────────────────────────")
    builder = httpfluent.HttpClientBuilder().add_token_provider(ExpiredTokenProvider())
    with builder.build(httpx.MockTransport(echo)) as client:
        print(f"  {client.get('https://api.example.com/items').json()}")
    print()

    # ── Unknown provider name ────────────────────────────────────────────
    print("── Unknown provider name ───────────────────────────────────────")
    try:
        httpfluent.HttpClientBuilder(providers).add_token_provider("sharepoint").build()
    except httpfluent.HttpClientConfigurationError as exc:
        print(f"  {type(exc).__name__}: {exc}")


if __name__ == "__main__":
    main()

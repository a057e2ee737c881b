"""
Building Requests
=================

Composing URLs with UrlBuilder and requests with HttpRequestMessageBuilder,
then sending them through a plain httpx.Client.
"""

import httpx

import httpfluent


def main() -> None:
    # ── URL templates ────────────────────────────────────────────────────
    print("── URL templates ───────────────────────────────────────────────")
    url = (
        httpfluent.UrlBuilder.create("https://httpbin.org/anything/{library}/items")
        .replace_token("{library}", "shared docs")
        .set_query_param("path", "/reports/2024")
        .set_query_param("tag", "finance")
        .set_query_param("tag", "q4")
        .set_query_param("owner", None)
    )
    print(f"  URL: {url}")
    print()

    # ── Fluent request ───────────────────────────────────────────────────
    print("── POST with JSON ──────────────────────────────────────────────")
    with httpx.Client() as client:
        response = (
            url.to_request()
            .with_http_method().post()
            .with_accept_application_json()
            .with_header("X-Request-Id", "example-1")
            .with_content_json({"title": "Quarterly report"})
            .send(client)
        )
        print(f"  Status: {response.status_code}")
        print(f"  Echoed JSON: {response.json().get('json')}")
    print()

    # ── Multipart upload ─────────────────────────────────────────────────
    print("── Multipart upload ────────────────────────────────────────────")
    builder = httpfluent.HttpRequestMessageBuilder.create("https://httpbin.org/post")
    (
        builder.with_http_method().post()
        .with_multipart_form_content()
        .with_string("title", "notes")
        .with_json_string("metadata", {"pages": 3})
        .with_byte_array("blob", b"\x00\x01")
    )
    with httpx.Client() as client:
        response = builder.send(client)
        print(f"  Status: {response.status_code}")
        print(f"  Form fields: {sorted(response.json().get('form', {}))}")


if __name__ == "__main__":
    main()

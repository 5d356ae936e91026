"""
Example: Basic OData usage with odata_client
=============================================

This example shows generic operations and the generated per-entity-set
methods.
"""

import logging

from odata_client import ClientConfig, ODataClient, create_client
from odata_client.odata import escape_odata_literal


def example_basic_query():
    """Generic operations against one service root."""

    client = create_client(
        url="https://your-host.example.com/_vti_bin/listdata.svc",
        username="USER",
        password="PASSWORD",
        timeout=60000,
        logger=logging.getLogger("example"),
    )

    with client:
        # Discover what's available
        print("Entity Sets:", client.entity_sets())

        # Query any entity set
        name = escape_odata_literal("O'Brien")
        page = client.query(
            resource="Customers",
            filter=f"Name eq '{name}'",
            order_by="Name desc",
            top="50",
            inline_count=True,
        )
        print(page.status_code, page.data)

        # Single entity, with a callback instead of a return value
        def on_customer(err, result):
            if err:
                print("Lookup failed:", err)
                return
            print("Customer:", result.data)

        client.get(resource="Customers", id="ALFKI", callback=on_customer)


def example_generated_methods():
    """Helpers generated from $metadata, e.g. getCustomers / queryCustomers."""

    # Reads ODATA_URL, ODATA_USER, ODATA_PASS (or ODATA_BEARER_TOKEN)
    with ODataClient(ClientConfig.from_env()) as client:
        client.hook()
        query_customers = client.lookup_method("queryCustomers")
        if query_customers is not None:
            result = query_customers(top="10")
            print(result and result.data)


def example_download():
    """Stream a file attached to a document library item."""

    with ODataClient(ClientConfig.from_env()) as client:
        stream, headers = client.download(resource="Documents(1)")
        print(headers["Content-Disposition"])
        with open("download.bin", "wb") as fh:
            for chunk in stream.iter_content(chunk_size=65536):
                fh.write(chunk)


if __name__ == "__main__":
    # Uncomment the example you want to run
    # example_basic_query()
    # example_generated_methods()
    # example_download()

    print("Set up your environment variables and uncomment an example to run.")
    print("Required: ODATA_URL, ODATA_USER, ODATA_PASS (or ODATA_BEARER_TOKEN)")

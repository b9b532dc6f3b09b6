"""ASGI entrypoint for the product specs API."""

from product_specs.api.app import create_app
from product_specs.containers import build_container

app = create_app(build_container())

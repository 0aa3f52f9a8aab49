"""Storefront: catalogue, shopping carts and orders behind a REST API."""

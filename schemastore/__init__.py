"""Typed row storage with parent/child relations on a DynamoDB-style table."""

__version__ = "0.1.0"
__all__ = ["dynamodb", "provider", "row", "slug", "storage"]
"""
Exceptions raised by the product search core and mapped to HTTP responses in main.py
"""


class ProductSearchError(Exception):
    """Base class for all application errors"""


class InvalidPageSize(ProductSearchError):
    """A result page was requested with fewer than one element per page"""

    def __init__(self, size: int):
        self.size = size
        super().__init__(f"Page size must be at least 1, got {size}")


class BackendFailure(ProductSearchError):
    """
    The search backend could not execute a query (timeout, connection loss,
    rejected query). The driver exception is kept as __cause__.
    """


class ProductNotFound(ProductSearchError):
    def __init__(self, product_id: str):
        self.product_id = product_id
        super().__init__(f"Product with ID {product_id} not found")

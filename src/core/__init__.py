"""
Core domain models, exact integer primitives, and JSON contracts.

This module contains the foundational building blocks of the search that are
independent of the execution model (sequential driver, worker pools).
"""

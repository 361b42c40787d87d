"""Agency OS package.

This package is organized by feature modules (projects, board, users, ...)
with a thin Flask controller layer and service/repository layers underneath.
"""

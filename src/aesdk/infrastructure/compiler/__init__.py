"""Compiler service client."""

from aesdk.infrastructure.compiler.client import CompilerClient

__all__ = ["CompilerClient"]

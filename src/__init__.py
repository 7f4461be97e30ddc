"""
Source Code Root Module

This module serves as the root for the source code of the application.

Layer Structure:
- Domain: Core business logic and entities
- Application: Use cases and DTOs
- Infrastructure: In-memory registry, cache and inventory feed
- Shared: Cross-cutting concerns and shared utilities
- Main: Composition root, command-line entry point and configuration
"""

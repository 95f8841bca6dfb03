"""HTTP surface: FastAPI app, routes and CLI entry point."""

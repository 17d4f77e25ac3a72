"""FastAPI application for the design extraction pipeline."""

"""Design extraction pipeline package.

Subpackages:
- extraction: Tree walker, design-token extraction and component detection
- assets: Image-node location, asset fetching and tree annotation
- integrations: Figma REST client and rate-limit back-off
- app: Thin FastAPI surface over the pipeline
"""

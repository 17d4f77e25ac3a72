"""Run the API server: python -m design_pipeline.app"""

import uvicorn

from ..config import API_HOST, API_PORT

if __name__ == "__main__":
    uvicorn.run("design_pipeline.app.main:app", host=API_HOST, port=API_PORT)

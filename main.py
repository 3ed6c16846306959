import uvicorn

from nutrition_alerts.main import app, create_app

__all__ = ["app", "create_app"]


if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000)

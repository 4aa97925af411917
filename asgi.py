"""
asgi.py -- ASGI entry point for DevConnector.

Run with:  uvicorn asgi:app --reload
           python asgi.py
"""

from api.main import app

if __name__ == "__main__":
    import uvicorn

    uvicorn.run("asgi:app", host="127.0.0.1", port=5000)

"""
Roro API server.

Use: uvicorn roro_server.app:app
"""
